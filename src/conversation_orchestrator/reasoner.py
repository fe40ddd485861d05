"""
Reasoner Gateway - Text completion behind a single async call.

The default implementation runs the Claude CLI in print mode
(``claude --print``) and feeds the prompt over stdin. Any transport
failure, non-zero exit or timeout surfaces as ReasonerError.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

from .errors import ReasonerError

logger = logging.getLogger(__name__)


class Reasoner(ABC):
	"""Opaque natural-language completion service."""

	@abstractmethod
	async def complete(self, prompt: str) -> str:
		"""
		Complete a prompt.

		Raises:
			ReasonerError: On transport failure, quota exhaustion or timeout
		"""


class ClaudeCLIReasoner(Reasoner):
	"""Reasoner backed by the Claude CLI in non-interactive print mode."""

	def __init__(self, command: str = "claude", timeout: Optional[float] = 120.0):
		"""
		Initialize the reasoner.

		Args:
			command: CLI executable to run
			timeout: Seconds to wait for a completion before failing (None for no limit)
		"""
		self.command = command
		self.timeout = timeout

	async def complete(self, prompt: str) -> str:
		try:
			process = await asyncio.create_subprocess_exec(
				self.command,
				"--print",
				"--output-format", "text",
				stdin=asyncio.subprocess.PIPE,
				stdout=asyncio.subprocess.PIPE,
				stderr=asyncio.subprocess.PIPE,
			)
		except FileNotFoundError as e:
			logger.error(f"Reasoner CLI not found: {self.command}")
			raise ReasonerError(f"Reasoner command not found: {self.command}") from e

		try:
			stdout, stderr = await asyncio.wait_for(
				process.communicate(input=prompt.encode()),
				timeout=self.timeout,
			)
		except asyncio.TimeoutError as e:
			logger.error(f"Reasoner timed out after {self.timeout}s")
			raise ReasonerError(f"Reasoner timed out after {self.timeout}s") from e
		finally:
			# Also reached when the caller cancels us, e.g. a worker timeout
			if process.returncode is None:
				await _terminate(process)

		if process.returncode != 0:
			message = stderr.decode(errors="replace").strip()
			logger.error(f"Reasoner CLI error (exit {process.returncode}): {message}")
			raise ReasonerError(f"Reasoner exited with code {process.returncode}: {message}")

		return stdout.decode(errors="replace")


async def _terminate(process: asyncio.subprocess.Process) -> None:
	"""Kill a still-running CLI process and reap it."""
	try:
		process.kill()
	except ProcessLookupError:
		pass
	await process.wait()
