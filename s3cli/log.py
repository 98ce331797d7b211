"""Logging setup for the command-line entry point."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def configure_logging(debug: bool = False) -> logging.Logger:
    """Send log records to stderr through Rich.

    With debug, s3cli and botocore log at DEBUG (botocore then shows the
    wire-level requests); otherwise only warnings are shown.

    Returns:
        The configured root logger.
    """
    handler = RichHandler(
        console=Console(stderr=True, legacy_windows=True),
        show_path=debug,
        rich_tracebacks=debug,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    # botocore, urllib3 and s3transfer are chatty below WARNING
    for name in ("botocore", "urllib3", "s3transfer"):
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)

    return root_logger
