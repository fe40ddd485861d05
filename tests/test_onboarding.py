"""Tests for the onboarding flow and the slot-filling contract."""

import pytest

from conversation_orchestrator.models import (
	ClientAction,
	ConversationState,
	EnvelopeStatus,
	RequestUserInput,
	StateStatus,
)
from conversation_orchestrator.state import new_goal_state
from conversation_orchestrator.workers.base import Slot, SlotFillingWorker
from conversation_orchestrator.workers.onboarding import OnboardingWorker


def _fresh() -> ConversationState:
	return new_goal_state("onboarding", "")


class TestOnboardingWorker:
	"""Name then account id, one question per turn."""

	@pytest.mark.asyncio
	async def test_asks_for_name_first(self):
		envelope = await OnboardingWorker().execute("", _fresh())

		assert envelope.status == EnvelopeStatus.AWAITING_INPUT
		assert isinstance(envelope.action, RequestUserInput)
		assert "name" in envelope.speech.lower()
		assert envelope.state.status == StateStatus.AWAITING_INPUT
		assert envelope.state.collected_info["onboarding_step"] == "name"
		stepper = envelope.presentation["props"]["children"][0]
		assert stepper["props"] == {"currentStep": 1, "totalSteps": 2}

	@pytest.mark.asyncio
	async def test_answer_fills_pending_slot(self):
		worker = OnboardingWorker()
		first = await worker.execute("", _fresh())
		second = await worker.execute("  Alice  ", first.state)

		assert second.state.collected_info["name"] == "Alice"
		assert second.state.collected_info["onboarding_step"] == "account_id"
		assert "account" in second.speech.lower()

	@pytest.mark.asyncio
	async def test_empty_answer_repeats_question(self):
		worker = OnboardingWorker()
		first = await worker.execute("", _fresh())
		again = await worker.execute("   ", first.state)

		assert again.status == EnvelopeStatus.AWAITING_INPUT
		assert again.speech == first.speech
		assert "name" not in again.state.collected_info

	@pytest.mark.asyncio
	async def test_completes_with_credentials(self):
		worker = OnboardingWorker()
		state = _fresh()
		for answer in ("", "Alice", "acc-123"):
			envelope = await worker.execute(answer, state)
			state = envelope.state

		assert envelope.status == EnvelopeStatus.COMPLETE
		assert envelope.state.status == StateStatus.COMPLETE
		assert envelope.state.collected_info["account_id"] == "acc-123"
		assert "onboarding_step" not in envelope.state.collected_info
		assert isinstance(envelope.action, ClientAction)
		assert envelope.action.type == "SAVE_CREDENTIALS"
		assert envelope.presentation["type"] == "KEY_VALUE_DISPLAY"
		assert "Alice" in envelope.speech

	@pytest.mark.asyncio
	async def test_prefilled_name_is_skipped(self):
		state = new_goal_state("onboarding", "", {"name": "Alice"})
		envelope = await OnboardingWorker().execute("", state)
		assert envelope.state.collected_info["onboarding_step"] == "account_id"

	@pytest.mark.asyncio
	async def test_input_state_is_not_mutated(self):
		state = _fresh()
		await OnboardingWorker().execute("", state)
		assert "onboarding_step" not in state.collected_info
		assert state.status == StateStatus.PENDING


class _TransferWorker(SlotFillingWorker):
	name = "transfer"
	step_key = "transfer_step"
	slots = (
		Slot(key="amount", question="How much?", input_type="number"),
		Slot(key="recipient", question="To whom?"),
	)

	async def finish(self, state):
		info = state.collected_info
		return self.complete(state, speech=f"Sent {info['amount']} to {info['recipient']}.")


class TestSlotFillingWorker:
	"""The re-entry contract shared by multi-turn specialists."""

	@pytest.mark.asyncio
	async def test_marker_is_private_to_worker(self):
		envelope = await _TransferWorker().execute("", new_goal_state("transfer", "send money"))
		assert envelope.state.collected_info["transfer_step"] == "amount"
		text_input = envelope.presentation["props"]["children"][1]
		assert text_input["props"] == {"title": "amount", "inputType": "number"}

	@pytest.mark.asyncio
	async def test_runs_to_finish(self):
		worker = _TransferWorker()
		state = new_goal_state("transfer", "send money")
		for answer in ("", "50", "Bob"):
			envelope = await worker.execute(answer, state)
			state = envelope.state
		assert envelope.status == EnvelopeStatus.COMPLETE
		assert envelope.speech == "Sent 50 to Bob."
		assert "transfer_step" not in envelope.state.collected_info

	@pytest.mark.asyncio
	async def test_history_records_requests(self):
		envelope = await _TransferWorker().execute("", new_goal_state("transfer", "send money"))
		assert envelope.state.history[-1] == "transfer is requesting 'amount'."
