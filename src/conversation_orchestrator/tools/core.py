"""Core health check and registry tools."""

import json

from mcp.server.fastmcp import FastMCP

from ..config import Config
from ..orchestrator.router import Router


def register_core_tools(mcp: FastMCP, config: Config, router: Router) -> None:
	"""Register core tools."""

	@mcp.tool()
	async def health_check() -> str:
		"""
		Check the health of the conversation-orchestrator server.
		Returns configuration and registry status.
		"""
		status = {
			"server": "running",
			"config_dir": str(config.config_dir),
			"data_dir": str(config.data_dir),
			"sessions_db_exists": config.sessions_db_path.exists(),
			"reasoner_command": config.reasoner_command,
			"workers": len(router.registry),
			"max_delegation_depth": config.max_delegation_depth,
		}
		return json.dumps(status, indent=2)

	@mcp.tool()
	async def list_workers() -> str:
		"""List registered workers with their capability descriptions."""
		return json.dumps([
			{"name": entry.name, "description": entry.description, "fallback_only": entry.fallback_only}
			for entry in router.registry
		], indent=2)
