"""Tests for reasoner output extraction and schema validation."""

import pytest

from conversation_orchestrator.errors import MalformedPlanError
from conversation_orchestrator.schemas import (
	MEMORY_COMMAND_SCHEMA,
	PLAN_SCHEMA,
	SYNTHESIS_SCHEMA,
	extract_json_object,
)


class TestExtractJsonObject:
	"""Balanced-brace extraction from free text."""

	def test_bare_object(self):
		assert extract_json_object('{"speech": "hi"}') == {"speech": "hi"}

	def test_markdown_fence(self):
		text = 'Here you go:\n```json\n{"speech": "hi", "action": {"type": "COMPLETE_GOAL"}}\n```\nDone.'
		assert extract_json_object(text) == {"speech": "hi", "action": {"type": "COMPLETE_GOAL"}}

	def test_braces_inside_strings(self):
		text = 'Sure {"speech": "use {curly} braces \\"carefully\\" }", "n": 1} trailing }'
		assert extract_json_object(text) == {"speech": 'use {curly} braces "carefully" }', "n": 1}

	def test_first_object_wins(self):
		text = '{"a": 1} and then {"b": 2}'
		assert extract_json_object(text) == {"a": 1}

	def test_skips_unparseable_candidate(self):
		text = 'The set {x, y} is small. {"speech": "ok"}'
		assert extract_json_object(text) == {"speech": "ok"}

	def test_no_object(self):
		with pytest.raises(MalformedPlanError):
			extract_json_object("I could not decide.")

	def test_unbalanced(self):
		with pytest.raises(MalformedPlanError):
			extract_json_object('{"speech": "hi"')

	def test_non_text(self):
		with pytest.raises(MalformedPlanError):
			extract_json_object(None)


class TestResponseSchema:
	"""Shape validation of parsed objects."""

	def test_plan_valid(self):
		data = PLAN_SCHEMA.parse('{"speech": "hi", "action": {"type": "COMPLETE_GOAL"}}')
		assert data["speech"] == "hi"

	def test_plan_missing_action(self):
		with pytest.raises(MalformedPlanError, match="action"):
			PLAN_SCHEMA.parse('{"speech": "hi"}')

	def test_plan_action_wrong_type(self):
		with pytest.raises(MalformedPlanError, match="action"):
			PLAN_SCHEMA.parse('{"speech": "hi", "action": "DELEGATE"}')

	def test_synthesis_speech_must_be_string(self):
		valid, error = SYNTHESIS_SCHEMA.validate({"speech": 3})
		assert valid is False
		assert "speech" in error

	def test_presentation_is_opaque(self):
		valid, error = SYNTHESIS_SCHEMA.validate({"speech": "x", "presentation": [1, 2]})
		assert valid is True
		assert error is None

	def test_memory_command_requires_key(self):
		valid, error = MEMORY_COMMAND_SCHEMA.validate({"speech": "ok", "operation": "set"})
		assert valid is False
		assert "key" in error

	def test_validate_non_object(self):
		valid, _ = PLAN_SCHEMA.validate([1])
		assert valid is False
