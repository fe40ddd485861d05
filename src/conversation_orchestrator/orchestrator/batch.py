"""
Batch Processor - Fan-out/fan-in execution of delegated tasks.

Runs every item of a batch concurrently, bounded by a semaphore, and
returns results in item order once all of them have finished. Nothing is
cancelled early: a batch always runs to completion.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BatchProcessor(Generic[T, R]):
	"""
	Processes batches of items with concurrency control.

	Uses asyncio.Semaphore to limit concurrent processing. The handler is
	expected to turn its own failures into results; an exception that
	escapes it propagates out of execute.
	"""

	def __init__(self, max_concurrency: int = 5):
		"""
		Initialize batch processor.

		Args:
			max_concurrency: Maximum number of items processed concurrently
		"""
		if max_concurrency < 1:
			raise ValueError("max_concurrency must be at least 1")
		self.max_concurrency = max_concurrency

	async def execute(
		self,
		items: list[T],
		handler: Callable[[T], Awaitable[R]],
	) -> list[R]:
		"""
		Run every item through the handler.

		Args:
			items: Items to process
			handler: Async function to process each item

		Returns:
			Handler results, in the same order as items
		"""
		if not items:
			return []

		semaphore = asyncio.Semaphore(self.max_concurrency)

		async def process_item(item: T) -> R:
			async with semaphore:
				return await handler(item)

		logger.debug(f"Fanning out {len(items)} item(s), concurrency {self.max_concurrency}")
		# Fan out, fan in
		return list(await asyncio.gather(*(process_item(item) for item in items)))
