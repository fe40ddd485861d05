"""
Onboarding - Bootstrap flow that establishes the user's identity.

The router forces this worker whenever the identity key is missing, so no
other worker ever runs against an unauthenticated state.
"""

import logging

from ..models import ClientAction, ConversationState, ResultEnvelope
from ..state import IDENTITY_KEY
from .base import Slot, SlotFillingWorker

logger = logging.getLogger(__name__)

SAVE_CREDENTIALS = "SAVE_CREDENTIALS"


class OnboardingWorker(SlotFillingWorker):
	"""Collects the user's name and account identifier."""

	name = "onboarding"
	step_key = "onboarding_step"
	slots = (
		Slot(key="name", question="Let's get started! What's your name?", title="Your Name"),
		Slot(key=IDENTITY_KEY, question="What's your account ID?", title="Account ID"),
	)

	async def finish(self, state: ConversationState) -> ResultEnvelope:
		name = state.collected_info["name"]
		account_id = state.collected_info[IDENTITY_KEY]
		logger.info(f"Onboarding complete for account {account_id}")
		return self.complete(
			state,
			speech=f"All set, {name}! You're ready to go.",
			presentation={
				"type": "KEY_VALUE_DISPLAY",
				"props": {
					"title": "Setup Complete!",
					"items": [
						{"key": "Name", "value": name},
						{"key": "Account ID", "value": account_id},
					],
				},
			},
			action=ClientAction(type=SAVE_CREDENTIALS, payload={"name": name, IDENTITY_KEY: account_id}),
			note="Onboarding collected all required details.",
		)
