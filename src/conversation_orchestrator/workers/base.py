"""
Worker base classes.

Every worker implements ``execute(prompt, state) -> ResultEnvelope``.
SlotFillingWorker implements the suspendable re-entry contract shared by
multi-turn specialists: it records which field it is waiting for inside
collected_info, so the next raw prompt is read as the answer to that
question.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from ..models import (
	Action,
	CompleteGoal,
	ConversationState,
	EnvelopeStatus,
	RequestUserInput,
	ResultEnvelope,
	StateStatus,
	error_envelope,
)

logger = logging.getLogger(__name__)


class Worker(ABC):
	"""A unit of delegatable capability."""

	name: str = "worker"

	@abstractmethod
	async def execute(self, prompt: str, state: ConversationState) -> ResultEnvelope:
		"""Run one invocation and return its envelope."""

	def complete(
		self,
		state: ConversationState,
		speech: str,
		presentation: Any = None,
		action: Optional[Action] = None,
		note: Optional[str] = None,
	) -> ResultEnvelope:
		"""Envelope for a finished invocation."""
		return ResultEnvelope(
			status=EnvelopeStatus.COMPLETE,
			speech=speech,
			presentation=presentation,
			action=action or CompleteGoal(),
			state=state.with_note(note or f"{self.name} completed.", status=StateStatus.COMPLETE),
		)

	def fail(self, state: ConversationState, reason: str) -> ResultEnvelope:
		"""Worker-local error envelope."""
		logger.warning(f"{self.name} failed: {reason}")
		return error_envelope(state, f"{self.name} failed: {reason}")


@dataclass(frozen=True)
class Slot:
	"""A field a slot-filling worker must collect from the user."""
	key: str
	question: str
	title: str = ""
	input_type: str = "text"


class SlotFillingWorker(Worker):
	"""
	Collects a fixed sequence of fields across turns.

	Subclasses set ``slots`` and ``step_key`` and implement ``finish``.
	The step marker lives in collected_info and is private to the worker.
	"""

	step_key: str = "current_step"
	slots: tuple[Slot, ...] = ()

	async def execute(self, prompt: str, state: ConversationState) -> ResultEnvelope:
		info = dict(state.collected_info)
		pending = info.get(self.step_key)
		if pending:
			answer = prompt.strip()
			if answer:
				info[pending] = answer
			else:
				logger.info(f"{self.name} received an empty answer for '{pending}'")
		state = state.evolve(collected_info=info)

		slot = self.next_slot(state)
		if slot is not None:
			return self.ask(slot, state)

		info.pop(self.step_key, None)
		return await self.finish(state.evolve(collected_info=info))

	def next_slot(self, state: ConversationState) -> Optional[Slot]:
		"""First slot without a value, if any."""
		for slot in self.slots:
			if not state.collected_info.get(slot.key):
				return slot
		return None

	def ask(self, slot: Slot, state: ConversationState) -> ResultEnvelope:
		"""Pause the turn waiting for a slot's value."""
		step = self.slots.index(slot) + 1
		presentation = {
			"type": "LAYOUT_STACK",
			"props": {
				"children": [
					{"type": "STEPPER", "props": {"currentStep": step, "totalSteps": len(self.slots)}},
					{
						"type": "TEXT_INPUT",
						"props": {"title": slot.title or slot.key, "inputType": slot.input_type},
					},
				],
			},
		}
		return ResultEnvelope(
			status=EnvelopeStatus.AWAITING_INPUT,
			speech=slot.question,
			presentation=presentation,
			action=RequestUserInput(),
			state=state.with_info(**{self.step_key: slot.key}).with_note(
				f"{self.name} is requesting '{slot.key}'.",
				status=StateStatus.AWAITING_INPUT,
			),
		)

	@abstractmethod
	async def finish(self, state: ConversationState) -> ResultEnvelope:
		"""Build the final envelope once every slot is filled."""
