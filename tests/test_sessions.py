"""Tests for the SQLite session store."""

import json

import pytest

from conversation_orchestrator.models import StateStatus
from conversation_orchestrator.sessions import SessionStore, parse_state

from .helpers import make_state


async def _open_store(tmp_path) -> SessionStore:
	store = SessionStore(str(tmp_path / "sessions.db"))
	await store.init()
	return store


class TestSessionStore:
	@pytest.mark.asyncio
	async def test_unknown_session_is_none(self, tmp_path):
		store = await _open_store(tmp_path)
		assert await store.load("missing") is None

	@pytest.mark.asyncio
	async def test_save_and_load(self, tmp_path):
		store = await _open_store(tmp_path)
		state = make_state(status=StateStatus.AWAITING_INPUT, call_stack=["planner", "history"], step="count")
		await store.save("s1", state)
		assert await store.load("s1") == state

	@pytest.mark.asyncio
	async def test_save_overwrites(self, tmp_path):
		store = await _open_store(tmp_path)
		await store.save("s1", make_state(status=StateStatus.AWAITING_INPUT))
		await store.save("s1", make_state(status=StateStatus.COMPLETE))
		loaded = await store.load("s1")
		assert loaded.status == StateStatus.COMPLETE
		assert len(await store.list_sessions()) == 1

	@pytest.mark.asyncio
	async def test_delete(self, tmp_path):
		store = await _open_store(tmp_path)
		await store.save("s1", make_state())
		assert await store.delete("s1") is True
		assert await store.delete("s1") is False
		assert await store.load("s1") is None

	@pytest.mark.asyncio
	async def test_list_sessions(self, tmp_path):
		store = await _open_store(tmp_path)
		await store.save("a", make_state(status=StateStatus.COMPLETE))
		await store.save("b", make_state(status=StateStatus.FAILED))
		sessions = {s["id"]: s["status"] for s in await store.list_sessions()}
		assert sessions == {"a": "complete", "b": "failed"}


class TestParseState:
	def test_empty_is_none(self):
		assert parse_state("") is None
		assert parse_state("   ") is None
		assert parse_state(None) is None
		assert parse_state("null") is None

	def test_parses_state(self):
		state = make_state()
		assert parse_state(json.dumps(state.model_dump(mode="json"))) == state

	def test_invalid_json_raises(self):
		with pytest.raises(ValueError):
			parse_state("{not json")
