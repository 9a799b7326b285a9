"""Utility module for sign-app."""

from .shell import ShellResult, run, which
from .log import setup_logging

__all__ = ["ShellResult", "run", "which", "setup_logging"]
