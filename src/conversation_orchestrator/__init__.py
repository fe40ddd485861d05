"""conversation-orchestrator - Route conversational turns through delegating workers."""

from .errors import (
	DelegationExhaustedError,
	MalformedPlanError,
	OrchestratorError,
	ReasonerError,
	UnknownWorkerError,
)
from .models import (
	ClientAction,
	CompleteGoal,
	ConversationState,
	Delegate,
	DelegateParallel,
	DelegationTask,
	EnvelopeStatus,
	RequestUserInput,
	ResultEnvelope,
	StateStatus,
	error_envelope,
)
from .orchestrator import Router, create_router
from .registry import WorkerRegistry
from .workers import Worker

__all__ = [
	"Router",
	"create_router",
	"WorkerRegistry",
	"Worker",
	"ConversationState",
	"ResultEnvelope",
	"StateStatus",
	"EnvelopeStatus",
	"DelegationTask",
	"CompleteGoal",
	"RequestUserInput",
	"Delegate",
	"DelegateParallel",
	"ClientAction",
	"error_envelope",
	"OrchestratorError",
	"UnknownWorkerError",
	"ReasonerError",
	"MalformedPlanError",
	"DelegationExhaustedError",
]
