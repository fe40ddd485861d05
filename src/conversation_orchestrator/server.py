"""conversation-orchestrator MCP server."""

from mcp.server.fastmcp import FastMCP

from .config import load_config
from .logging_config import setup_logging
from .orchestrator.router import create_router
from .tools import register_all_tools

config = load_config()
setup_logging(log_dir=config.log_dir)

mcp = FastMCP("conversation-orchestrator")
router = create_router(config)
register_all_tools(mcp, config, router)
