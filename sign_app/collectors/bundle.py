"""Bundle identifier lookup through the AppleScript bridge."""

import logging

from sign_app.util.shell import run

logger = logging.getLogger(__name__)

OSASCRIPT = "osascript"


def query_bundle_id(path: str) -> str | None:
    """
    Ask the scripting bridge for an application's bundle identifier.
    
    Args:
        path: Application bundle path
    
    Returns:
        Identifier such as ``com.example.foo``, or None when it cannot be determined
    """
    script = f'id of app "{_applescript_quote(path)}"'
    try:
        result = run([OSASCRIPT, "-e", script])
    except (TimeoutError, FileNotFoundError) as e:
        logger.debug("Bundle id lookup failed for %s: %s", path, e)
        return None
    
    if not result.success or not result.out:
        logger.debug("Bundle id lookup failed for %s: %s", path, result.err)
        return None
    
    return result.out


def _applescript_quote(text: str) -> str:
    """Escape a string for use inside an AppleScript string literal."""
    return text.replace("\\", "\\\\").replace('"', '\\"')
