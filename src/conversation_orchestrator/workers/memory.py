"""Long-term memory specialist."""

import logging

from ..errors import MalformedPlanError, ReasonerError
from ..models import ClientAction, ConversationState, ResultEnvelope
from ..reasoner import Reasoner
from ..schemas import MEMORY_COMMAND_SCHEMA
from ..state import MEMORY_KEY
from .base import Worker

logger = logging.getLogger(__name__)

UPDATE_LONG_TERM_MEMORY = "UPDATE_LONG_TERM_MEMORY"


class MemoryWorker(Worker):
	"""
	Turns "remember" / "forget" requests into memory update commands.

	The command is returned as an UPDATE_LONG_TERM_MEMORY client action for
	the caller to persist, and is also applied to the returned state.
	"""

	name = "memory"

	def __init__(self, reasoner: Reasoner):
		self.reasoner = reasoner

	async def execute(self, prompt: str, state: ConversationState) -> ResultEnvelope:
		try:
			raw = await self.reasoner.complete(self._build_prompt(prompt))
			command = MEMORY_COMMAND_SCHEMA.parse(raw)
		except (ReasonerError, MalformedPlanError) as e:
			return self.fail(state, str(e))

		operation = command["operation"]
		key = command["key"]
		memory = dict(state.collected_info.get(MEMORY_KEY) or {})
		if operation == "set":
			memory[key] = command.get("value")
		elif operation == "delete":
			memory.pop(key, None)
		else:
			return self.fail(state, f"unknown memory operation '{operation}'")

		payload = {"operation": operation, "key": key}
		if operation == "set":
			payload["value"] = command.get("value")
		logger.info(f"Memory {operation} for key '{key}'")

		return self.complete(
			state.with_info(**{MEMORY_KEY: memory}),
			speech=command["speech"],
			presentation={"type": "TEXT", "props": {"title": "Memory Updated", "text": command["speech"]}},
			action=ClientAction(type=UPDATE_LONG_TERM_MEMORY, payload=payload),
			note=f"{self.name} processed a '{operation}' command.",
		)

	def _build_prompt(self, prompt: str) -> str:
		lines = [
			"# Long-Term Memory Command",
			"",
			"Convert the user's request into a command for their long-term memory store.",
			"Use operation 'set' to remember or update something and 'delete' to forget it.",
			"The key should be short and machine-readable, e.g. 'weeklySpendingGoal'.",
			"",
			"Respond with a single JSON object only:",
			"",
			"```json",
			'{"speech": "Confirmation for the user", "operation": "set | delete", "key": "string", "value": "string"}',
			"```",
			"",
			"## Request",
			prompt,
		]
		return "\n".join(lines)
