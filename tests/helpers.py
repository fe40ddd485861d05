"""Shared test fixtures and helpers for conversation-orchestrator tests."""

import asyncio
import json
from typing import Any, Callable, Optional
from unittest.mock import MagicMock

from conversation_orchestrator.errors import ReasonerError
from conversation_orchestrator.models import (
	CompleteGoal,
	ConversationState,
	Delegate,
	DelegateParallel,
	DelegationTask,
	EnvelopeStatus,
	RequestUserInput,
	ResultEnvelope,
	StateStatus,
)
from conversation_orchestrator.reasoner import Reasoner
from conversation_orchestrator.registry import WorkerRegistry
from conversation_orchestrator.workers.base import Worker


class FakeReasoner(Reasoner):
	"""Reasoner returning scripted responses in order and recording prompts.

	A response that is an Exception instance is raised instead of returned.
	"""

	def __init__(self, *responses: Any):
		self.responses = list(responses)
		self.prompts: list[str] = []

	async def complete(self, prompt: str) -> str:
		self.prompts.append(prompt)
		if not self.responses:
			raise ReasonerError("No scripted response left")
		response = self.responses.pop(0)
		if isinstance(response, Exception):
			raise response
		if isinstance(response, dict):
			return json.dumps(response)
		return response


class ScriptedWorker(Worker):
	"""Worker whose behaviour is a function of (prompt, state).

	Every call is recorded on the shared ``calls`` list as
	(name, prompt, state) so tests can assert on invocation order.
	"""

	def __init__(
		self,
		name: str,
		handler: Callable[[str, ConversationState], ResultEnvelope],
		calls: Optional[list] = None,
		delay: float = 0.0,
	):
		self.name = name
		self.handler = handler
		self.calls = calls if calls is not None else []
		self.delay = delay

	async def execute(self, prompt: str, state: ConversationState) -> ResultEnvelope:
		self.calls.append((self.name, prompt, state))
		if self.delay:
			await asyncio.sleep(self.delay)
		return self.handler(prompt, state)


def make_state(
	goal: Optional[str] = "planner",
	status: StateStatus = StateStatus.PENDING,
	call_stack: Optional[list[str]] = None,
	history: Optional[list[str]] = None,
	**info: Any,
) -> ConversationState:
	"""Create a state with an identity unless overridden."""
	collected = {"name": "Alice", "account_id": "acc-123"}
	collected.update(info)
	return ConversationState(
		goal=goal,
		status=status,
		collected_info={k: v for k, v in collected.items() if v is not None},
		call_stack=call_stack if call_stack is not None else ["planner"],
		history=history or [],
	)


def completed(state: ConversationState, speech: str = "done", **info: Any) -> ResultEnvelope:
	"""A COMPLETE envelope built from state."""
	new_state = state.with_info(**info) if info else state
	return ResultEnvelope(
		status=EnvelopeStatus.COMPLETE,
		speech=speech,
		action=CompleteGoal(),
		state=new_state.evolve(status=StateStatus.COMPLETE),
	)


def awaiting(state: ConversationState, speech: str = "Need more info", **info: Any) -> ResultEnvelope:
	"""An AWAITING_INPUT envelope built from state."""
	new_state = state.with_info(**info) if info else state
	return ResultEnvelope(
		status=EnvelopeStatus.AWAITING_INPUT,
		speech=speech,
		action=RequestUserInput(),
		state=new_state.evolve(status=StateStatus.AWAITING_INPUT),
	)


def delegating(state: ConversationState, *tasks: tuple[str, str], parallel: bool = False) -> ResultEnvelope:
	"""A DELEGATING envelope handing (worker, prompt) tasks out."""
	payload = [DelegationTask(worker=w, prompt=p) for w, p in tasks]
	if parallel:
		action = DelegateParallel(payload=payload)
	else:
		action = Delegate(payload=payload[0])
	return ResultEnvelope(
		status=EnvelopeStatus.DELEGATING,
		speech="Working on it",
		action=action,
		state=state.evolve(status=StateStatus.DELEGATING),
	)


def build_registry(*workers: Worker, fallback: tuple[str, ...] = ()) -> WorkerRegistry:
	"""Registry serving the given worker instances by name."""
	registry = WorkerRegistry()
	for worker in workers:
		registry.register(
			worker.name,
			f"Test worker {worker.name}",
			lambda worker=worker: worker,
			fallback_only=worker.name in fallback,
		)
	return registry


def capture_tools(register_fn: Callable, *args: Any) -> dict:
	"""Register tools on a mock MCP and return the captured tool functions.

	Args:
		register_fn: The registration function (e.g., register_turn_tools)
		*args: Remaining arguments after the MCP instance

	Returns:
		Dict mapping tool name to the tool function
	"""
	captured = {}

	class MockMCP:
		def tool(self):
			def decorator(fn):
				captured[fn.__name__] = fn
				return fn
			return decorator

	register_fn(MockMCP(), *args)
	return captured


def mock_config(tmp_path) -> MagicMock:
	"""Config double rooted in a temp directory."""
	config = MagicMock()
	config.config_dir = tmp_path / "config"
	config.data_dir = tmp_path / "data"
	config.sessions_db_path = tmp_path / "data" / "sessions.db"
	config.reasoner_command = "claude"
	config.max_delegation_depth = 25
	return config
