"""Exception hierarchy for the orchestration engine."""

from typing import Any, Optional


class OrchestratorError(Exception):
	"""
	Base exception for orchestration errors.

	``state`` holds the conversation state at the point of failure when the
	raiser knows it, so the router can preserve history in its error reply.
	"""

	def __init__(self, message: str = "", state: Optional[Any] = None):
		super().__init__(message)
		self.state = state


class UnknownWorkerError(OrchestratorError):
	"""Raised when a worker name is not in the registry."""

	def __init__(self, name: str):
		super().__init__(f"Unknown worker: {name}")
		self.name = name


class ReasonerError(OrchestratorError):
	"""Raised when the text-completion service fails or times out."""
	pass


class MalformedPlanError(OrchestratorError):
	"""Raised when reasoner output has no parseable, schema-conforming object."""
	pass


class DelegationExhaustedError(OrchestratorError):
	"""Raised when the delegation loop exceeds its depth bound."""

	def __init__(self, max_depth: int, state: Optional[Any] = None):
		super().__init__(f"Delegation depth limit of {max_depth} exceeded", state=state)
		self.max_depth = max_depth
