"""
Session Store - SQLite-backed storage of the last state per session.

Outer surfaces (CLI, MCP server) use this to echo a session's state back
on its next turn when the caller does not hold the state itself.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import aiosqlite

from .models import ConversationState

logger = logging.getLogger(__name__)


class SessionStore:
	"""
	Persists one ConversationState per session id.

	Usage:
		store = SessionStore("data/sessions.db")
		await store.init()
		await store.save("default", envelope.state)
		state = await store.load("default")
	"""

	def __init__(self, db_path: str = ""):
		if not db_path:
			from .config import get_config
			db_path = str(get_config().sessions_db_path)
		self.db_path = Path(db_path)
		self.db_path.parent.mkdir(parents=True, exist_ok=True)

	async def init(self) -> None:
		"""Initialize database schema."""
		async with aiosqlite.connect(self.db_path) as db:
			await db.execute("""
				CREATE TABLE IF NOT EXISTS sessions (
					id TEXT PRIMARY KEY,
					state TEXT NOT NULL,
					status TEXT NOT NULL,
					updated_at TEXT NOT NULL
				)
			""")
			await db.commit()

	async def load(self, session_id: str) -> Optional[ConversationState]:
		"""Load the last state of a session, or None for a new session."""
		async with aiosqlite.connect(self.db_path) as db:
			async with db.execute("SELECT state FROM sessions WHERE id = ?", (session_id,)) as cursor:
				row = await cursor.fetchone()
		if row is None:
			return None
		return ConversationState.model_validate_json(row[0])

	async def save(self, session_id: str, state: ConversationState) -> None:
		"""Store the state to echo back on the session's next turn."""
		async with aiosqlite.connect(self.db_path) as db:
			await db.execute(
				"""
				INSERT INTO sessions (id, state, status, updated_at) VALUES (?, ?, ?, ?)
				ON CONFLICT(id) DO UPDATE SET
					state = excluded.state,
					status = excluded.status,
					updated_at = excluded.updated_at
				""",
				(session_id, state.model_dump_json(), state.status.value, datetime.now().isoformat()),
			)
			await db.commit()
		logger.debug(f"Saved session {session_id} ({state.status.value})")

	async def delete(self, session_id: str) -> bool:
		"""Forget a session. Returns True if it existed."""
		async with aiosqlite.connect(self.db_path) as db:
			cursor = await db.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
			await db.commit()
			return cursor.rowcount > 0

	async def list_sessions(self) -> list[dict]:
		"""Summaries of all stored sessions, most recent first."""
		async with aiosqlite.connect(self.db_path) as db:
			async with db.execute(
				"SELECT id, status, updated_at FROM sessions ORDER BY updated_at DESC"
			) as cursor:
				rows = await cursor.fetchall()
		return [{"id": r[0], "status": r[1], "updated_at": r[2]} for r in rows]


def parse_state(raw: Optional[str]) -> Optional[ConversationState]:
	"""Parse a JSON-encoded state from a caller; empty input means no state."""
	if not raw or not raw.strip():
		return None
	data = json.loads(raw)
	if data is None:
		return None
	return ConversationState.model_validate(data)
