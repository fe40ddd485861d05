"""
Structured output schemas for reasoner responses.

Reasoner output is free text that usually wraps a JSON object in prose or
markdown fences. ``extract_json_object`` isolates the first balanced object
and ``ResponseSchema`` checks its shape. Neither attempts to repair content.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .errors import MalformedPlanError

logger = logging.getLogger(__name__)


def _find_balanced_object(text: str, start: int) -> Optional[str]:
	"""Return the balanced {...} substring beginning at start, if it closes."""
	depth = 0
	in_string = False
	escaped = False
	for index in range(start, len(text)):
		char = text[index]
		if in_string:
			if escaped:
				escaped = False
			elif char == "\\":
				escaped = True
			elif char == '"':
				in_string = False
			continue
		if char == '"':
			in_string = True
		elif char == "{":
			depth += 1
		elif char == "}":
			depth -= 1
			if depth == 0:
				return text[start:index + 1]
	return None


def extract_json_object(text: str) -> dict[str, Any]:
	"""
	Extract and parse the first balanced JSON object in text.

	Braces inside JSON strings are ignored, so fenced or prose-wrapped
	responses parse the same as bare ones. Candidates that fail to parse
	are skipped in favour of the next opening brace.

	Raises:
		MalformedPlanError: If no parseable object is present
	"""
	if not isinstance(text, str):
		raise MalformedPlanError(f"Expected text, got {type(text).__name__}")

	start = text.find("{")
	while start != -1:
		candidate = _find_balanced_object(text, start)
		if candidate is None:
			break
		try:
			data = json.loads(candidate)
		except json.JSONDecodeError:
			data = None
		if isinstance(data, dict):
			return data
		start = text.find("{", start + 1)

	logger.error(f"Could not find a JSON object in reasoner response: {text[:200]!r}")
	raise MalformedPlanError("Could not find a valid JSON object in the reasoner response")


@dataclass
class ResponseSchema:
	"""A schema for structured output from the reasoner."""

	name: str
	description: str
	json_schema: dict[str, Any] = field(default_factory=dict)

	def validate(self, data: Any) -> tuple[bool, Optional[str]]:
		"""
		Check a parsed object against this schema.

		Returns:
			Tuple of (is_valid, error_message)
		"""
		if not isinstance(data, dict):
			return False, f"Expected object, got '{type(data).__name__}'"

		required = self.json_schema.get("required", [])
		properties = self.json_schema.get("properties", {})

		for key in required:
			if key not in data:
				return False, f"Missing required key: {key}"

		# Validate property types (best-effort)
		for key, prop_schema in properties.items():
			if key in data:
				expected_type = prop_schema.get("type")
				if expected_type and not _check_type(data[key], expected_type):
					return False, f"Key '{key}' expected type '{expected_type}', got '{type(data[key]).__name__}'"

		return True, None

	def parse(self, text: str) -> dict[str, Any]:
		"""
		Extract an object from text and validate it.

		Raises:
			MalformedPlanError: If extraction or validation fails
		"""
		data = extract_json_object(text)
		valid, error = self.validate(data)
		if not valid:
			raise MalformedPlanError(f"{self.name} response invalid: {error}")
		return data


def _check_type(value: Any, expected: str) -> bool:
	"""Check if a value matches the expected JSON schema type."""
	type_map = {
		"string": str,
		"number": (int, float),
		"integer": int,
		"boolean": bool,
		"array": list,
		"object": dict,
	}
	expected_type = type_map.get(expected)
	if expected_type is None:
		return True  # Unknown type, skip validation
	return isinstance(value, expected_type)


# Predefined schemas

PLAN_SCHEMA = ResponseSchema(
	name="plan",
	description="Planning decision: answer directly or delegate",
	json_schema={
		"type": "object",
		"required": ["speech", "action"],
		"properties": {
			"speech": {"type": "string", "description": "Direct answer or a terse status line"},
			"presentation": {"description": "Opaque display payload"},
			"action": {
				"type": "object",
				"description": "COMPLETE_GOAL, DELEGATE or DELEGATE_PARALLEL with payload",
			},
		},
	},
)

SYNTHESIS_SCHEMA = ResponseSchema(
	name="synthesis",
	description="Final answer fused from specialist results",
	json_schema={
		"type": "object",
		"required": ["speech"],
		"properties": {
			"speech": {"type": "string", "description": "Final message for the user"},
			"presentation": {"description": "Opaque display payload"},
		},
	},
)

MEMORY_COMMAND_SCHEMA = ResponseSchema(
	name="memory_command",
	description="Long-term memory update command",
	json_schema={
		"type": "object",
		"required": ["speech", "operation", "key"],
		"properties": {
			"speech": {"type": "string"},
			"operation": {"type": "string", "description": "set or delete"},
			"key": {"type": "string"},
		},
	},
)
