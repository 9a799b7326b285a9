"""Decide whether an application bundle belongs to the operating system."""

import logging

from sign_app.collectors.codesign import is_apple_authority
from sign_app.toolchain import Toolchain, default_toolchain

logger = logging.getLogger(__name__)

SYSTEM_APPLICATIONS_ROOT = "/System/Applications"
APPLE_BUNDLE_PREFIX = "com.apple."


def is_system_application(
    path: str,
    tools: Toolchain | None = None,
    system_root: str = SYSTEM_APPLICATIONS_ROOT
) -> bool:
    """
    Check whether a bundle is a protected system application.
    
    Rules are tried in order and the first match wins:
    
    1. The path lies under ``system_root``.
    2. codesign lists an Apple certificate authority for it.
    3. Its bundle identifier starts with ``com.apple.``.
    
    A lookup that fails counts as "no match" for its rule, so this never
    raises; with no evidence either way the bundle is treated as user-installed.
    
    Args:
        path: Application bundle path
        tools: External tool capabilities (defaults to the real tools)
        system_root: Directory whose contents are always system applications
    
    Returns:
        True if any rule matches
    """
    if path.startswith(system_root.rstrip("/") + "/"):
        return True
    
    tools = tools or default_toolchain()
    
    if is_apple_authority(tools.query_authority(path)):
        logger.debug("%s is signed by Apple", path)
        return True
    
    bundle_id = tools.query_bundle_id(path)
    if bundle_id and bundle_id.startswith(APPLE_BUNDLE_PREFIX):
        logger.debug("%s has Apple bundle id %s", path, bundle_id)
        return True
    
    return False
