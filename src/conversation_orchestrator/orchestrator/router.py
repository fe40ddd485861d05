"""
Router - Entry point for every conversational turn.

Decides, in order:

1. Bootstrap: a state without the identity key (and not already inside the
   bootstrap flow) is sent to the bootstrap worker.
2. Continuation: a state awaiting input resumes the worker on top of its
   call stack with the state exactly as that worker left it.
3. New goal: anything else starts a sanitised goal owned by the planner.

Whatever worker runs is then driven through the delegation loop. The
router never raises; any failure becomes the standard error envelope.
"""

import logging
from typing import Optional

from ..config import Config, get_config
from ..errors import OrchestratorError
from ..models import ConversationState, ResultEnvelope, StateStatus, error_envelope
from ..reasoner import ClaudeCLIReasoner, Reasoner
from ..registry import WorkerRegistry
from ..state import has_identity, new_goal_state
from ..workers import ONBOARDING, PLANNER, build_default_registry
from .delegation import DelegationLoop, WorkerInvoker

logger = logging.getLogger(__name__)


class Router:
	"""Routes one turn to the right worker and returns its final envelope."""

	def __init__(
		self,
		registry: WorkerRegistry,
		planner: str = PLANNER,
		bootstrap: str = ONBOARDING,
		max_depth: int = 25,
		max_concurrency: int = 5,
		worker_timeout: Optional[float] = None,
	):
		"""
		Initialize the router.

		Args:
			registry: Registry holding every routable worker
			planner: Worker that owns new goals
			bootstrap: Worker forced while the identity key is missing
			max_depth: Maximum delegation rounds per turn
			max_concurrency: Maximum tasks of a parallel batch running at once
			worker_timeout: Seconds a single worker invocation may take
		"""
		self.registry = registry
		self.planner = planner
		self.bootstrap = bootstrap
		self.invoker = WorkerInvoker(registry, timeout=worker_timeout)
		self.loop = DelegationLoop(
			registry,
			invoker=self.invoker,
			max_depth=max_depth,
			max_concurrency=max_concurrency,
		)

	async def route(self, prompt: str, prior_state: Optional[ConversationState] = None) -> ResultEnvelope:
		"""
		Handle one turn.

		Args:
			prompt: Raw user input for this turn (may be empty)
			prior_state: State echoed back from the previous turn, None on first call

		Returns:
			The final ResultEnvelope of the turn
		"""
		try:
			return await self._route(prompt, prior_state)
		except OrchestratorError as e:
			logger.error(f"Turn failed: {e}")
			return error_envelope(e.state or prior_state, f"Turn failed: {e}")
		except Exception as e:
			logger.exception(f"Unexpected error while routing: {e}")
			return error_envelope(prior_state, f"Unexpected error: {e}")

	async def _route(self, prompt: str, prior_state: Optional[ConversationState]) -> ResultEnvelope:
		if self._needs_bootstrap(prior_state):
			logger.info("No identity on state, forcing bootstrap")
			existing = prior_state.collected_info if prior_state else None
			state = new_goal_state(self.bootstrap, "", existing)
			envelope = await self.invoker.invoke(self.bootstrap, "", state)
			return await self.loop.run(envelope, "")

		if prior_state.status == StateStatus.AWAITING_INPUT and prior_state.active_worker:
			name = prior_state.active_worker
			logger.info(f"Continuing multi-turn interaction with {name}")
			envelope = await self.invoker.invoke(name, prompt, prior_state)
			return await self.loop.run(envelope, prompt)

		logger.info(f"New goal, passing to {self.planner}")
		state = new_goal_state(self.planner, prompt, prior_state.collected_info)
		envelope = await self.invoker.invoke(self.planner, prompt, state)
		return await self.loop.run(envelope, prompt)

	def _needs_bootstrap(self, state: Optional[ConversationState]) -> bool:
		if has_identity(state):
			return False
		mid_bootstrap = (
			state is not None
			and state.status == StateStatus.AWAITING_INPUT
			and self.bootstrap in state.call_stack
		)
		return not mid_bootstrap


def create_router(
	config: Optional[Config] = None,
	reasoner: Optional[Reasoner] = None,
	registry: Optional[WorkerRegistry] = None,
) -> Router:
	"""Build a router with the built-in workers from configuration."""
	config = config or get_config()
	if registry is None:
		reasoner = reasoner or ClaudeCLIReasoner(
			command=config.reasoner_command,
			timeout=config.reasoner_timeout,
		)
		registry = build_default_registry(reasoner)
	return Router(
		registry,
		max_depth=config.max_delegation_depth,
		max_concurrency=config.max_parallel_tasks,
		worker_timeout=config.worker_timeout,
	)
