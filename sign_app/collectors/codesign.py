"""Wrappers around the codesign tool."""

import logging
import re

from sign_app.util.shell import ShellResult, run

logger = logging.getLogger(__name__)

CODESIGN = "codesign"

# codesign -dv prints one "Authority=" line per certificate in the chain
APPLE_AUTHORITY_MARKER = "Authority=Apple"


def query_authority(path: str) -> str | None:
    """
    Fetch the descriptive signature output for a bundle.
    
    Args:
        path: File system path to the application bundle
    
    Returns:
        Combined codesign -dv output (it writes to stderr), or None if the
        bundle is unsigned, unreadable, or codesign could not be run
    
    Example:
        >>> output = query_authority("/Applications/Safari.app")
        >>> "Authority=Apple" in output
        True
    """
    try:
        result = run([CODESIGN, "-dv", "--verbose=4", path])
    except (TimeoutError, FileNotFoundError) as e:
        logger.debug("Authority lookup failed for %s: %s", path, e)
        return None
    
    if not result.success:
        logger.debug("Authority lookup failed for %s: %s", path, result.err)
        return None
    
    return result.combined


def extract_authorities(output: str) -> list[str]:
    """
    Extract certificate authorities from codesign output.
    
    Args:
        output: Combined stdout/stderr from codesign -dv
    
    Returns:
        Authorities in chain order (leaf first), possibly empty
    """
    return [auth.strip() for auth in re.findall(r"Authority=(.+)", output)]


def is_apple_authority(output: str | None) -> bool:
    """Check whether codesign output names an Apple certificate authority."""
    if not output:
        return False
    return APPLE_AUTHORITY_MARKER in output


def has_signature(path: str) -> bool:
    """Check whether a bundle carries any code signature."""
    try:
        return run([CODESIGN, "-dv", path]).success
    except (TimeoutError, FileNotFoundError) as e:
        logger.debug("Signature probe failed for %s: %s", path, e)
        return False


def codesign_sign(path: str, entitlements: str | None = None) -> ShellResult:
    """
    Apply a deep ad-hoc signature to a bundle, replacing any existing one.
    
    Args:
        path: Application bundle to sign
        entitlements: Optional entitlements plist to embed
    
    Returns:
        ShellResult of the codesign invocation
    
    Raises:
        FileNotFoundError: If codesign is not installed
    """
    cmd = [CODESIGN, "--force", "--deep", "--sign", "-"]
    if entitlements:
        cmd += ["--entitlements", entitlements]
    cmd.append(path)
    return run(cmd)
