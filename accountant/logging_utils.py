"""Logging setup for the accountant CLI.

Library modules only call ``logging.getLogger(__name__)``; the CLI installs
a single rich handler on the root logger.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

_CONFIGURED = False


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr through rich, once per process.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    global _CONFIGURED

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if _CONFIGURED:
        return

    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(handler)
    _CONFIGURED = True
