"""
Conversation models - Pydantic schemas for the turn protocol.

Defines the conversation state threaded through a multi-turn goal, the
action verbs the engine understands, and the result envelope every worker
returns. All models serialise to plain JSON so the caller can echo state
back on the next turn.
"""

import copy
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StateStatus(str, Enum):
	"""Turn-local lifecycle marker of a conversation state."""
	PENDING = "pending"
	AWAITING_INPUT = "awaiting_input"
	DELEGATING = "delegating"
	COMPLETE = "complete"
	FAILED = "failed"


class EnvelopeStatus(str, Enum):
	"""Outcome of a single worker invocation."""
	DELEGATING = "delegating"
	AWAITING_INPUT = "awaiting_input"
	COMPLETE = "complete"
	ERROR = "error"


class ActionType(str, Enum):
	"""Action verbs interpreted by the engine."""
	COMPLETE_GOAL = "COMPLETE_GOAL"
	REQUEST_USER_INPUT = "REQUEST_USER_INPUT"
	DELEGATE = "DELEGATE"
	DELEGATE_PARALLEL = "DELEGATE_PARALLEL"


class ConversationState(BaseModel):
	"""Memory carried across the turns of one goal."""
	goal: Optional[str] = Field(default=None, description="Name of the current top-level objective")
	status: StateStatus = Field(default=StateStatus.PENDING)
	collected_info: dict[str, Any] = Field(default_factory=dict, description="Facts gathered so far")
	call_stack: list[str] = Field(default_factory=list, description="Active workers, last one resumes")
	history: list[str] = Field(default_factory=list, description="Append-only audit trail")

	@property
	def active_worker(self) -> Optional[str]:
		"""The worker a continuation resumes, if any."""
		return self.call_stack[-1] if self.call_stack else None

	def evolve(self, **changes: Any) -> "ConversationState":
		"""
		Return a new state with the given fields replaced.

		The receiver is never modified; nested containers are deep-copied so
		the returned state shares nothing with it.
		"""
		return self.model_copy(update=copy.deepcopy(changes), deep=True)

	def with_note(self, note: str, **changes: Any) -> "ConversationState":
		"""Return a new state with a history entry appended."""
		return self.evolve(history=[*self.history, note], **changes)

	def with_info(self, **info: Any) -> "ConversationState":
		"""Return a new state with keys merged into collected_info."""
		return self.evolve(collected_info={**self.collected_info, **info})


class DelegationTask(BaseModel):
	"""A single unit of delegated work."""
	worker: str = Field(min_length=1, description="Registry name of the target worker")
	prompt: str = Field(description="Task prompt handed to the worker")


class CompleteGoal(BaseModel):
	"""The goal is finished; the next turn may start a fresh goal."""
	type: Literal["COMPLETE_GOAL"] = "COMPLETE_GOAL"


class RequestUserInput(BaseModel):
	"""The turn ends waiting for a reply to the same worker."""
	type: Literal["REQUEST_USER_INPUT"] = "REQUEST_USER_INPUT"


class Delegate(BaseModel):
	"""Hand exactly one task to another worker."""
	type: Literal["DELEGATE"] = "DELEGATE"
	payload: DelegationTask

	@property
	def tasks(self) -> list[DelegationTask]:
		return [self.payload]


class DelegateParallel(BaseModel):
	"""Hand several tasks out to run as one batch."""
	type: Literal["DELEGATE_PARALLEL"] = "DELEGATE_PARALLEL"
	payload: list[DelegationTask] = Field(default_factory=list)

	@property
	def tasks(self) -> list[DelegationTask]:
		return list(self.payload)


class ClientAction(BaseModel):
	"""Any other verb, forwarded to the caller without interpretation."""
	# Extra keys ride along untouched
	model_config = ConfigDict(extra="allow")

	type: str = Field(min_length=1)
	payload: Any = None


Action = Union[CompleteGoal, RequestUserInput, Delegate, DelegateParallel, ClientAction]

_ACTION_TYPES: dict[str, type[BaseModel]] = {
	ActionType.COMPLETE_GOAL.value: CompleteGoal,
	ActionType.REQUEST_USER_INPUT.value: RequestUserInput,
	ActionType.DELEGATE.value: Delegate,
	ActionType.DELEGATE_PARALLEL.value: DelegateParallel,
}


def parse_action(data: Any) -> Action:
	"""
	Build an Action from its wire form.

	Known verbs map to their models; any other ``type`` becomes a
	ClientAction carrying its payload untouched.

	Raises:
		ValueError: If data is not an object with a string ``type``
	"""
	if isinstance(data, (CompleteGoal, RequestUserInput, Delegate, DelegateParallel, ClientAction)):
		return data
	if not isinstance(data, dict):
		raise ValueError(f"Action must be an object, got {type(data).__name__}")
	action_type = data.get("type")
	if not isinstance(action_type, str) or not action_type:
		raise ValueError("Action is missing a 'type'")
	model = _ACTION_TYPES.get(action_type, ClientAction)
	return model.model_validate(data)


def is_delegation(action: Action) -> bool:
	"""True for the verbs that hand work to other workers."""
	return isinstance(action, (Delegate, DelegateParallel))


class ResultEnvelope(BaseModel):
	"""The universal result of a worker invocation and of a routed turn."""
	status: EnvelopeStatus
	speech: str = Field(default="", description="Message for the end user")
	presentation: Any = Field(default=None, description="Opaque display payload")
	action: Action = Field(default_factory=CompleteGoal)
	state: ConversationState

	@field_validator("action", mode="before")
	@classmethod
	def _coerce_action(cls, value: Any) -> Action:
		return parse_action(value)

	def to_dict(self) -> dict[str, Any]:
		return self.model_dump(mode="json")

	def replace(self, **changes: Any) -> "ResultEnvelope":
		"""Return a copy with the given fields replaced."""
		return self.model_copy(update=copy.deepcopy(changes), deep=True)


ERROR_SPEECH = "My apologies, something went wrong while handling that. Please try again."


def error_envelope(
	state: Optional[ConversationState],
	note: str,
	speech: str = ERROR_SPEECH,
	title: str = "Something went wrong",
) -> ResultEnvelope:
	"""
	Build the standard failure envelope.

	Args:
		state: State of the failing hop (a blank state is used if absent)
		note: Diagnostic note appended to history and shown in the presentation
		speech: User-safe apology
		title: Presentation title

	Returns:
		ResultEnvelope with status=error, CompleteGoal and a failed state
	"""
	base = state if state is not None else ConversationState()
	return ResultEnvelope(
		status=EnvelopeStatus.ERROR,
		speech=speech,
		presentation={"type": "TEXT", "props": {"title": title, "text": note}},
		action=CompleteGoal(),
		state=base.with_note(note, status=StateStatus.FAILED),
	)
