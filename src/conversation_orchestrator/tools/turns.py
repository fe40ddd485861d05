"""Turn tools - route user prompts through the orchestrator."""

import json
import logging

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..orchestrator.router import Router
from ..sessions import SessionStore, parse_state
from ..state import inject_long_term_memory

logger = logging.getLogger(__name__)


def register_turn_tools(mcp: FastMCP, config: Config, router: Router, store: SessionStore) -> None:
	"""Register turn routing tools."""
	initialized = False

	async def _ensure_store() -> None:
		nonlocal initialized
		if not initialized:
			await store.init()
			initialized = True

	@mcp.tool()
	async def route_turn(
		prompt: str,
		state_json: str = "",
		session_id: str = "",
		long_term_memory_json: str = "",
	) -> str:
		"""
		Route one user turn and return the result envelope.

		Args:
			prompt: The user's raw input for this turn (empty on first load)
			state_json: The "state" field of the previous envelope, as JSON
			session_id: Load and save state server-side under this id instead
			long_term_memory_json: Caller-persisted long-term memory, as a JSON object

		Returns the envelope JSON with status, speech, presentation, action and state.
		"""
		try:
			state = parse_state(state_json)
			memory = json.loads(long_term_memory_json) if long_term_memory_json else None
		except ValueError as e:
			logger.warning(f"route_turn rejected input: {e}")
			return json.dumps({"error": f"Invalid request: {e}"})

		if session_id:
			await _ensure_store()
			if state is None:
				state = await store.load(session_id)

		envelope = await router.route(prompt, inject_long_term_memory(state, memory))

		if session_id:
			await store.save(session_id, envelope.state)
		return json.dumps(envelope.to_dict(), indent=2)

	@mcp.tool()
	async def reset_session(session_id: str) -> str:
		"""
		Forget a stored session so its next turn starts from scratch.

		Args:
			session_id: The session to forget
		"""
		await _ensure_store()
		deleted = await store.delete(session_id)
		return json.dumps({"success": deleted, "session_id": session_id})
