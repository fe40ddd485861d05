"""
Planning Worker - Classifies a request and fuses specialist results.

The worker has two phases selected by the state it receives:

- Planning (no ``specialist_results`` yet): asks the reasoner to either
  answer directly, delegate to one specialist, or delegate to several in
  parallel.
- Synthesizing (``specialist_results`` present): asks the reasoner to turn
  the collected results into one final answer.

Reasoner failures become a worker-local error envelope. A response that
does not contain a conforming plan raises MalformedPlanError, which the
router turns into the standard failure for the turn.
"""

import json
import logging
from typing import Any

from ..errors import MalformedPlanError, ReasonerError
from ..models import (
	Action,
	CompleteGoal,
	ConversationState,
	Delegate,
	DelegateParallel,
	EnvelopeStatus,
	ResultEnvelope,
	StateStatus,
	is_delegation,
	parse_action,
)
from ..reasoner import Reasoner
from ..registry import WorkerRegistry
from ..schemas import PLAN_SCHEMA, SYNTHESIS_SCHEMA
from ..state import PROMPT_KEY, SPECIALIST_RESULTS_KEY
from .base import Worker

logger = logging.getLogger(__name__)

# Keys omitted from the facts shown to the reasoner
_HIDDEN_FACTS = {PROMPT_KEY, SPECIALIST_RESULTS_KEY}


class PlanningWorker(Worker):
	"""The top-level coordinator every new goal starts with."""

	name = "planner"

	def __init__(self, registry: WorkerRegistry, reasoner: Reasoner):
		self.registry = registry
		self.reasoner = reasoner

	async def execute(self, prompt: str, state: ConversationState) -> ResultEnvelope:
		if SPECIALIST_RESULTS_KEY in state.collected_info:
			logger.info("Specialist results present, synthesizing")
			return await self.synthesize(prompt, state)
		logger.info("No specialist results, planning")
		return await self.plan(prompt, state)

	async def plan(self, prompt: str, state: ConversationState) -> ResultEnvelope:
		"""Classify the prompt into a direct answer or a delegation."""
		try:
			raw = await self.reasoner.complete(self._build_plan_prompt(prompt, state))
		except ReasonerError as e:
			return self.fail(state, str(e))

		data = PLAN_SCHEMA.parse(raw)
		action = self._parse_plan_action(data["action"])

		if is_delegation(action):
			logger.info(f"Plan delegates {len(action.tasks)} task(s): {[t.worker for t in action.tasks]}")
			return ResultEnvelope(
				status=EnvelopeStatus.DELEGATING,
				speech=data["speech"],
				presentation=data.get("presentation"),
				action=action,
				state=state.with_note(f"{self.name} created a plan: {action.type}", status=StateStatus.DELEGATING),
			)

		logger.info("Plan answers directly")
		return self.complete(
			state,
			speech=data["speech"],
			presentation=data.get("presentation"),
			note=f"{self.name} answered directly.",
		)

	async def synthesize(self, prompt: str, state: ConversationState) -> ResultEnvelope:
		"""Fuse specialist results into the final answer."""
		try:
			raw = await self.reasoner.complete(self._build_synthesis_prompt(prompt, state))
		except ReasonerError as e:
			return self.fail(state, str(e))

		data = SYNTHESIS_SCHEMA.parse(raw)
		return self.complete(
			state,
			speech=data["speech"],
			presentation=data.get("presentation"),
			note=f"{self.name} synthesized specialist results.",
		)

	def _parse_plan_action(self, data: Any) -> Action:
		"""Map the reasoner's action object to a plan action."""
		try:
			action = parse_action(data)
		except ValueError as e:
			raise MalformedPlanError(f"Invalid plan action: {e}") from e
		if not isinstance(action, (CompleteGoal, Delegate, DelegateParallel)):
			raise MalformedPlanError(f"Unsupported plan action: {action.type}")
		return action

	def _known_facts(self, state: ConversationState) -> str:
		facts = {k: v for k, v in state.collected_info.items() if k not in _HIDDEN_FACTS}
		return json.dumps(facts, default=str, sort_keys=True)

	def _build_plan_prompt(self, prompt: str, state: ConversationState) -> str:
		"""Build the classification prompt."""
		tools = self.registry.menu(exclude=(self.name,))
		tool_lines = [f"- {name}: {description}" for name, description in tools] or ["- (none)"]

		lines = [
			"# Plan the Next Step",
			"",
			"You are the coordinator of a team of specialist workers. Understand the user's request,",
			"check what you already know, and decide how to handle it.",
			"",
			"## Known Facts",
			self._known_facts(state),
			"",
			"## Available Specialists",
			*tool_lines,
			"",
			"## Decide",
			"- If no specialist is needed (greetings, simple questions, facts you already know),",
			"  answer directly with action type COMPLETE_GOAL.",
			"- If exactly one specialist is needed, use DELEGATE with one task.",
			"- If several independent specialists are needed, use DELEGATE_PARALLEL with one task each.",
			"",
			"## Output Format",
			"",
			"Respond with a single JSON object only:",
			"",
			"```json",
			"{",
			'  "speech": "The direct answer, or a short status line while specialists work",',
			'  "presentation": {"type": "TEXT", "props": {"text": "..."}},',
			'  "action": {',
			'    "type": "COMPLETE_GOAL | DELEGATE | DELEGATE_PARALLEL",',
			'    "payload": {"worker": "name", "prompt": "task"} or [{"worker": "name", "prompt": "task"}]',
			"  }",
			"}",
			"```",
			"",
			"## User Request",
			prompt,
		]
		return "\n".join(lines)

	def _build_synthesis_prompt(self, prompt: str, state: ConversationState) -> str:
		"""Build the synthesis prompt."""
		original = state.collected_info.get(PROMPT_KEY) or prompt
		results = state.collected_info.get(SPECIALIST_RESULTS_KEY, [])

		lines = [
			"# Synthesize the Final Answer",
			"",
			"Your specialists have finished. Turn their results into one coherent, friendly reply.",
			"Some results may be errors; say so plainly rather than inventing data.",
			"",
			"## Original Request",
			original,
			"",
			"## Specialist Results",
			json.dumps(results, indent=2, default=str),
			"",
			"## Output Format",
			"",
			"Respond with a single JSON object only:",
			"",
			"```json",
			"{",
			'  "speech": "Final message for the user",',
			'  "presentation": {"type": "LAYOUT_STACK", "props": {"children": []}}',
			"}",
			"```",
		]
		return "\n".join(lines)
