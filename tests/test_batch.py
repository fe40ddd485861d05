"""Tests for batch processor."""

import asyncio

import pytest

from conversation_orchestrator.orchestrator.batch import BatchProcessor


class TestBatchProcessorBasic:
	"""Basic batch processing tests."""

	@pytest.mark.asyncio
	async def test_empty_batch(self):
		"""Empty batch should return no results."""
		processor = BatchProcessor()

		async def handler(item):
			return "done"

		assert await processor.execute([], handler) == []

	@pytest.mark.asyncio
	async def test_results_keep_item_order(self):
		"""Results should line up with items even when later items finish first."""
		processor = BatchProcessor()

		async def handler(item):
			await asyncio.sleep(0.01 * (3 - item))
			return item * 10

		assert await processor.execute([1, 2, 3], handler) == [10, 20, 30]

	def test_invalid_concurrency(self):
		with pytest.raises(ValueError):
			BatchProcessor(max_concurrency=0)


class TestBatchProcessorConcurrency:
	"""Concurrency control tests."""

	@pytest.mark.asyncio
	async def test_respects_max_concurrency(self):
		"""Should not exceed max concurrent operations."""
		processor = BatchProcessor(max_concurrency=2)
		current = 0
		max_seen = 0

		async def handler(item):
			nonlocal current, max_seen
			current += 1
			max_seen = max(max_seen, current)
			await asyncio.sleep(0.02)
			current -= 1
			return item

		await processor.execute(list(range(6)), handler)
		assert max_seen <= 2

	@pytest.mark.asyncio
	async def test_runs_concurrently(self):
		"""Items should overlap rather than run one after another."""
		processor = BatchProcessor(max_concurrency=5)
		started = []
		release = asyncio.Event()

		async def handler(item):
			started.append(item)
			if len(started) == 3:
				release.set()
			await asyncio.wait_for(release.wait(), timeout=1.0)
			return item

		assert await processor.execute([1, 2, 3], handler) == [1, 2, 3]

	@pytest.mark.asyncio
	async def test_handler_exception_propagates(self):
		processor = BatchProcessor()

		async def handler(item):
			if item == 2:
				raise RuntimeError("boom")
			return item

		with pytest.raises(RuntimeError, match="boom"):
			await processor.execute([1, 2, 3], handler)
