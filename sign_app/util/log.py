"""Logging setup for sign-app."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Route the ``sign_app`` loggers to stderr through Rich.
    
    Args:
        verbose: Log at DEBUG (every external command) instead of WARNING
    
    Returns:
        The package root logger
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger("sign_app")
    logger.setLevel(level)
    
    # Repeated calls (tests, re-entrant CLI use) must not stack handlers
    for handler in list(logger.handlers):
        if getattr(handler, "_sign_app", False):
            logger.removeHandler(handler)
    
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=verbose,
        markup=False
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handler._sign_app = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    logger.propagate = False
    return logger
