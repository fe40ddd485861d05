"""MCP tool registration - modular tool definitions."""

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..orchestrator.router import Router
from ..sessions import SessionStore
from .core import register_core_tools
from .turns import register_turn_tools


def register_all_tools(mcp: FastMCP, config: Config, router: Router) -> None:
	"""Register all MCP tools."""
	store = SessionStore(str(config.sessions_db_path))
	register_core_tools(mcp, config, router)
	register_turn_tools(mcp, config, router, store)
