"""Orchestrator module - Routing, delegation, and parallel fan-out."""

from .batch import BatchProcessor
from .delegation import DelegationLoop, WorkerInvoker, summarize_result
from .router import Router, create_router

__all__ = [
	"Router",
	"create_router",
	"DelegationLoop",
	"WorkerInvoker",
	"BatchProcessor",
	"summarize_result",
]
