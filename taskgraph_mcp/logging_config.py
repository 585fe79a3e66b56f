"""Loguru configuration for the MCP server."""

import sys

from loguru import logger

from taskgraph_mcp.config import Settings, get_settings

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(settings: Settings | None = None) -> None:
    """
    Route loguru output to stderr and, if configured, a rotating file.

    stdout is reserved for the MCP stdio transport.
    """
    settings = settings or get_settings()

    logger.remove()  # Remove default handler
    logger.add(sys.stderr, level=settings.log_level, format=LOG_FORMAT, colorize=False)

    if settings.log_file:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(settings.log_file),
            rotation="1 day",
            retention="7 days",
            level=settings.log_level,
            format=LOG_FORMAT,
        )
