"""The set of external tool capabilities the classifier, scanner and signer use."""

from dataclasses import dataclass
from typing import Callable

from sign_app.collectors.bundle import query_bundle_id
from sign_app.collectors.codesign import CODESIGN, codesign_sign, has_signature, query_authority
from sign_app.collectors.spotlight import spotlight_applications
from sign_app.errors import MissingDependencyError
from sign_app.util.shell import ShellResult, which


@dataclass
class Toolchain:
    """
    Narrow callables for each external tool.
    
    The defaults shell out to codesign, osascript and mdfind. Tests replace
    individual callables with fakes.
    """
    
    query_authority: Callable[[str], str | None] = query_authority
    query_bundle_id: Callable[[str], str | None] = query_bundle_id
    spotlight_applications: Callable[[], list[str]] = spotlight_applications
    has_signature: Callable[[str], bool] = has_signature
    sign: Callable[[str, str | None], ShellResult] = codesign_sign


def default_toolchain() -> Toolchain:
    """Toolchain backed by the real macOS tools."""
    return Toolchain()


def require_codesign() -> str:
    """
    Locate codesign on PATH.
    
    Returns:
        Absolute path to codesign
    
    Raises:
        MissingDependencyError: If codesign is not installed
    """
    path = which(CODESIGN)
    if path is None:
        raise MissingDependencyError(
            "codesign command not found. Please ensure Xcode Command Line Tools are installed."
        )
    return path
