"""
State initialisation and sanitisation.

A brand-new goal never inherits ephemeral data from the previous one: its
collected info is rebuilt from a fixed allow-list of long-lived identity and
memory keys plus the new prompt.
"""

import logging
from typing import Any, Mapping, Optional

from .models import ConversationState, StateStatus

logger = logging.getLogger(__name__)

IDENTITY_KEY = "account_id"
PROMPT_KEY = "original_prompt"
SPECIALIST_RESULTS_KEY = "specialist_results"
MEMORY_KEY = "long_term_memory"

# Keys that survive across goals
PRESERVED_KEYS: tuple[str, ...] = ("name", IDENTITY_KEY, MEMORY_KEY)


def sanitize_collected_info(
	existing: Optional[Mapping[str, Any]],
	prompt: str,
) -> dict[str, Any]:
	"""
	Rebuild collected info for a new goal.

	Args:
		existing: collected_info of the previous state, if any
		prompt: The prompt that starts the new goal

	Returns:
		Allow-listed keys present in existing, plus the prompt under PROMPT_KEY
	"""
	existing = existing or {}
	preserved = {key: existing[key] for key in PRESERVED_KEYS if key in existing}
	preserved[PROMPT_KEY] = prompt
	return preserved


def goal_name(worker_name: str) -> str:
	"""Derive a goal name from a worker registry name."""
	return worker_name.rsplit("/", 1)[-1]


def new_goal_state(
	worker_name: str,
	prompt: str,
	existing: Optional[Mapping[str, Any]] = None,
) -> ConversationState:
	"""Create the sanitised initial state for a goal owned by worker_name."""
	state = ConversationState(
		goal=goal_name(worker_name),
		status=StateStatus.PENDING,
		collected_info=sanitize_collected_info(existing, prompt),
		call_stack=[worker_name],
		history=[f'User initiated goal with prompt: "{prompt}"'],
	)
	logger.debug(f"Initialized sanitized state for {worker_name}: {sorted(state.collected_info)}")
	return state


def inject_long_term_memory(
	state: Optional[ConversationState],
	memory: Optional[Mapping[str, Any]],
) -> Optional[ConversationState]:
	"""Return state with caller-persisted long-term memory written into it."""
	if state is None or memory is None:
		return state
	return state.with_info(**{MEMORY_KEY: dict(memory)})


def has_identity(state: Optional[ConversationState]) -> bool:
	"""True when the state carries the required identity key."""
	if state is None:
		return False
	value = state.collected_info.get(IDENTITY_KEY)
	if isinstance(value, str):
		value = value.strip()
	return bool(value)
