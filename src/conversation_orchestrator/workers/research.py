"""General knowledge specialist for focused sub-questions."""

import logging

from ..errors import MalformedPlanError, ReasonerError
from ..models import ConversationState, ResultEnvelope
from ..reasoner import Reasoner
from ..schemas import SYNTHESIS_SCHEMA
from .base import Worker

logger = logging.getLogger(__name__)


class ResearchWorker(Worker):
	"""Answers one narrowly scoped question with a short factual summary."""

	name = "research"

	def __init__(self, reasoner: Reasoner):
		self.reasoner = reasoner

	async def execute(self, prompt: str, state: ConversationState) -> ResultEnvelope:
		try:
			raw = await self.reasoner.complete(self._build_prompt(prompt))
			data = SYNTHESIS_SCHEMA.parse(raw)
		except (ReasonerError, MalformedPlanError) as e:
			return self.fail(state, str(e))

		return self.complete(
			state,
			speech=data["speech"],
			presentation=data.get("presentation"),
			note=f"{self.name} answered: {prompt[:80]}",
		)

	def _build_prompt(self, prompt: str) -> str:
		lines = [
			"# Focused Research Task",
			"",
			"You are a specialist called by a coordinator. Answer only the question below,",
			"factually and in at most a few sentences. Say so if you are not sure.",
			"",
			"Respond with a single JSON object only:",
			"",
			"```json",
			'{"speech": "Factual answer", "presentation": {"type": "TEXT", "props": {"text": "..."}}}',
			"```",
			"",
			"## Question",
			prompt,
		]
		return "\n".join(lines)
