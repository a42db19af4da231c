"""Logging configuration for mdocs.

This module provides consistent logging across the codebase.

Usage in other modules:
    import logging
    log = logging.getLogger(__name__)

    log.debug("Detailed info for debugging")
    log.info("General operational info")
    log.warning("Unexpected but handled situation")
    log.error("Error that prevented operation")

The log level can be configured via the MDOCS_LOG_LEVEL environment variable:
    - DEBUG: Detailed debugging information
    - INFO: General operational messages (default)
    - WARNING: Unexpected situations that were handled
    - ERROR: Errors that prevented an operation

All output goes to stderr. When running as an MCP server, stdout carries the
protocol stream and must stay clean.
"""

import logging
import os
import sys

_quiet_mode = False


def configure_logging() -> None:
    """Configure logging for the mdocs package.

    Call this once at application startup (cli.py or server.py).
    Subsequent calls are no-ops.
    """
    root_logger = logging.getLogger("mdocs")

    # Skip if already configured (has handlers)
    if root_logger.handlers:
        return

    level_name = os.environ.get("MDOCS_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    if _quiet_mode:
        level = max(level, logging.ERROR)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    # Use a clean format: [level] logger: message
    formatter = logging.Formatter(
        fmt="[%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # Prevent propagation to root logger (avoids duplicate messages)
    root_logger.propagate = False


def set_quiet_mode(quiet: bool) -> None:
    """Suppress warnings and info output (CLI --quiet)."""
    global _quiet_mode
    _quiet_mode = quiet

    root_logger = logging.getLogger("mdocs")
    level = logging.ERROR if quiet else logging.INFO
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)
