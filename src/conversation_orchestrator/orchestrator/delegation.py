"""
Delegation Execution Loop - Runs delegated work until a terminal envelope.

Given the envelope a worker just returned, the loop services its DELEGATE
or DELEGATE_PARALLEL action: every task runs concurrently against the same
state snapshot, and the original delegator (the top of its call stack) is
resumed with the collected ``specialist_results``. The resumed worker may
delegate again, so the loop repeats up to a fixed depth.

A task that pauses for user input preempts everything else: its envelope
is returned unchanged and the other results of the batch are dropped.
"""

import asyncio
import logging
from typing import Any, Optional

from ..errors import DelegationExhaustedError, OrchestratorError
from ..models import (
	CompleteGoal,
	ConversationState,
	DelegationTask,
	EnvelopeStatus,
	ResultEnvelope,
	StateStatus,
	error_envelope,
	is_delegation,
)
from ..registry import WorkerRegistry
from ..state import SPECIALIST_RESULTS_KEY
from .batch import BatchProcessor

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 25


class WorkerInvoker:
	"""
	Instantiates and runs a worker by name.

	Every failure, including unknown names and timeouts, comes back as the
	standard error envelope rather than an exception.
	"""

	def __init__(self, registry: WorkerRegistry, timeout: Optional[float] = None):
		"""
		Initialize the invoker.

		Args:
			registry: Registry to resolve worker names against
			timeout: Seconds a single invocation may take (None for no limit)
		"""
		self.registry = registry
		self.timeout = timeout

	async def invoke(self, name: str, prompt: str, state: ConversationState) -> ResultEnvelope:
		"""Run one worker against a private copy of state."""
		logger.info(f"Calling worker {name} with prompt: {prompt[:80]!r}")
		try:
			worker = self.registry.instantiate(name)
			envelope = await asyncio.wait_for(worker.execute(prompt, state.evolve()), timeout=self.timeout)
		except asyncio.TimeoutError:
			logger.error(f"Worker {name} timed out after {self.timeout}s")
			return error_envelope(state, f"Worker {name} timed out.")
		except Exception as e:
			logger.exception(f"Error calling worker {name}: {e}")
			return error_envelope(state, f"Worker {name} failed to execute: {e}")

		if not isinstance(envelope, ResultEnvelope):
			logger.error(f"Worker {name} returned {type(envelope).__name__}, not an envelope")
			return error_envelope(state, f"Worker {name} returned no result envelope.")
		return envelope


def summarize_result(task: DelegationTask, envelope: ResultEnvelope) -> dict[str, Any]:
	"""JSON-ready record of one task result for the resuming delegator."""
	data = envelope.to_dict()
	collected = {k: v for k, v in data["state"]["collected_info"].items() if k != SPECIALIST_RESULTS_KEY}
	return {
		"worker": task.worker,
		"prompt": task.prompt,
		"status": data["status"],
		"speech": data["speech"],
		"presentation": data["presentation"],
		"action": data["action"],
		"goal": data["state"]["goal"],
		"collected_info": collected,
	}


class DelegationLoop:
	"""Services delegation actions until a worker returns a terminal envelope."""

	def __init__(
		self,
		registry: WorkerRegistry,
		invoker: Optional[WorkerInvoker] = None,
		max_depth: int = DEFAULT_MAX_DEPTH,
		max_concurrency: int = 5,
	):
		self.registry = registry
		self.invoker = invoker or WorkerInvoker(registry)
		self.max_depth = max_depth
		self.batch: BatchProcessor[DelegationTask, ResultEnvelope] = BatchProcessor(max_concurrency)

	async def run(self, envelope: ResultEnvelope, original_prompt: str) -> ResultEnvelope:
		"""
		Drive an envelope to a terminal result for this turn.

		Args:
			envelope: Envelope just returned by the delegating worker
			original_prompt: Raw user prompt of this turn, used to resume the delegator

		Returns:
			The first non-delegating envelope, or a paused task's envelope

		Raises:
			UnknownWorkerError: If a task names a worker that is not registered
			DelegationExhaustedError: If delegation rounds exceed max_depth
		"""
		depth = 0
		while is_delegation(envelope.action):
			tasks = envelope.action.tasks
			if not tasks:
				logger.error("Delegation action has no tasks, completing goal")
				return envelope.replace(action=CompleteGoal())

			depth += 1
			if depth > self.max_depth:
				logger.error(f"Delegation depth {self.max_depth} exceeded")
				raise DelegationExhaustedError(self.max_depth, state=envelope.state)

			snapshot = envelope.state
			delegator = snapshot.active_worker
			if delegator is None:
				raise OrchestratorError("Delegating state has an empty call stack", state=snapshot)
			for task in tasks:
				try:
					self.registry.get(task.worker)
				except OrchestratorError as e:
					e.state = snapshot
					raise

			logger.info(f"Round {depth}: {delegator} delegated to {[t.worker for t in tasks]}")
			results = await self.batch.execute(tasks, lambda task: self._run_task(task, snapshot))

			for task, result in zip(tasks, results):
				if result.status == EnvelopeStatus.AWAITING_INPUT:
					logger.info(f"Worker {task.worker} is awaiting input, preempting synthesis")
					return result

			resume_state = snapshot.with_info(
				**{SPECIALIST_RESULTS_KEY: [summarize_result(t, r) for t, r in zip(tasks, results)]}
			).with_note(
				"All specialist tasks completed. Resuming delegator.",
				status=StateStatus.PENDING,
			)
			logger.info(f"Resuming {delegator} with {len(results)} specialist result(s)")
			envelope = await self.invoker.invoke(delegator, original_prompt, resume_state)

		return envelope

	async def _run_task(self, task: DelegationTask, snapshot: ConversationState) -> ResultEnvelope:
		"""Run one task on its own copy of the snapshot, with the task worker on top of the stack."""
		state = snapshot.evolve(call_stack=[*snapshot.call_stack, task.worker])
		return await self.invoker.invoke(task.worker, task.prompt, state)
