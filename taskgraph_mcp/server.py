"""FastMCP server initialization for the task graph."""

from loguru import logger
from mcp.server.fastmcp import FastMCP

from taskgraph_mcp.config import get_settings
from taskgraph_mcp.logging_config import configure_logging

# Initialize the MCP server
mcp = FastMCP("taskgraph_mcp")


def run() -> None:
    """Run the MCP server."""
    import taskgraph_mcp.tools  # noqa: F401  (registers tools)

    settings = get_settings()
    configure_logging(settings)
    logger.info(f"Starting taskgraph_mcp with data directory {settings.data_dir.resolve()}")
    mcp.run()


if __name__ == "__main__":
    run()
