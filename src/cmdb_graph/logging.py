"""
Logging setup for the command-line entry point.

Logs go to stderr so stdout carries only the tree or JSON output.
Library modules only call ``logging.getLogger(__name__)``.
"""

import logging
import sys


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """
    Configure stderr logging for the CLI.

    Args:
        level: Log level string (e.g. 'INFO', 'DEBUG').

    Returns:
        The package logger.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s  %(name)-28s  %(levelname)-7s  %(message)s",
        stream=sys.stderr,
        force=True,
    )
    return logging.getLogger("cmdb_graph")
