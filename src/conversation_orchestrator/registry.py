"""
Worker Registry - Directory of delegatable workers.

Maps a unique worker name to a capability description (shown to the
planning worker) and a factory that builds a fresh worker instance.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterator

from .errors import UnknownWorkerError

if TYPE_CHECKING:
	from .workers.base import Worker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkerEntry:
	"""A registered worker."""
	name: str
	description: str
	factory: Callable[[], "Worker"]
	# Reachable only through explicit routing, never offered as a planning tool
	fallback_only: bool = False


class WorkerRegistry:
	"""
	Static lookup table of workers.

	Entries keep insertion order, which only affects how the planning
	worker's tool menu reads.
	"""

	def __init__(self):
		self._entries: dict[str, WorkerEntry] = {}

	def register(
		self,
		name: str,
		description: str,
		factory: Callable[[], "Worker"],
		fallback_only: bool = False,
	) -> WorkerEntry:
		"""
		Register a worker under a unique name.

		Raises:
			ValueError: If the name is empty or already registered
		"""
		if not name:
			raise ValueError("Worker name must not be empty")
		if name in self._entries:
			raise ValueError(f"Worker already registered: {name}")
		entry = WorkerEntry(name=name, description=description, factory=factory, fallback_only=fallback_only)
		self._entries[name] = entry
		return entry

	def get(self, name: str) -> WorkerEntry:
		"""Get an entry, raising UnknownWorkerError if absent."""
		entry = self._entries.get(name)
		if entry is None:
			raise UnknownWorkerError(name)
		return entry

	def lookup(self, name: str) -> str:
		"""Return the capability description of a worker."""
		return self.get(name).description

	def instantiate(self, name: str) -> "Worker":
		"""Build a fresh worker instance."""
		entry = self.get(name)
		logger.debug(f"Instantiating worker {name}")
		return entry.factory()

	def list_all(self) -> list[tuple[str, str]]:
		"""All (name, description) pairs in insertion order."""
		return [(entry.name, entry.description) for entry in self._entries.values()]

	def menu(self, exclude: tuple[str, ...] = ()) -> list[tuple[str, str]]:
		"""(name, description) pairs offered as planning tools."""
		return [
			(entry.name, entry.description)
			for entry in self._entries.values()
			if not entry.fallback_only and entry.name not in exclude
		]

	def __contains__(self, name: object) -> bool:
		return name in self._entries

	def __iter__(self) -> Iterator[WorkerEntry]:
		return iter(self._entries.values())

	def __len__(self) -> int:
		return len(self._entries)
