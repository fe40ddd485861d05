"""Workers - The planning coordinator, the bootstrap flow, and specialists."""

from ..reasoner import Reasoner
from ..registry import WorkerRegistry
from .base import Slot, SlotFillingWorker, Worker
from .memory import MemoryWorker
from .onboarding import OnboardingWorker
from .planner import PlanningWorker
from .research import ResearchWorker

PLANNER = PlanningWorker.name
ONBOARDING = OnboardingWorker.name


def build_default_registry(reasoner: Reasoner) -> WorkerRegistry:
	"""Build the registry of built-in workers sharing one reasoner."""
	registry = WorkerRegistry()
	registry.register(
		PLANNER,
		"The primary coordinator. Answers simple requests, delegates to specialists, "
		"and synthesizes their results.",
		lambda: PlanningWorker(registry, reasoner),
		fallback_only=True,
	)
	registry.register(
		ONBOARDING,
		"Runs the multi-step onboarding conversation that collects the user's name and account ID.",
		OnboardingWorker,
		fallback_only=True,
	)
	registry.register(
		MemoryWorker.name,
		"Manages the user's long-term memory. Use when the user asks to remember, update, or forget something.",
		lambda: MemoryWorker(reasoner),
	)
	registry.register(
		ResearchWorker.name,
		"Answers one focused factual question in a few sentences.",
		lambda: ResearchWorker(reasoner),
	)
	return registry


__all__ = [
	"Worker",
	"Slot",
	"SlotFillingWorker",
	"PlanningWorker",
	"OnboardingWorker",
	"MemoryWorker",
	"ResearchWorker",
	"PLANNER",
	"ONBOARDING",
	"build_default_registry",
]
