"""Application search through the Spotlight metadata index."""

import logging

from sign_app.util.shell import run

logger = logging.getLogger(__name__)

MDFIND = "mdfind"

APPLICATION_QUERY = (
    'kMDItemContentType == "com.apple.application-bundle" '
    '&& kMDItemKind == "Application"'
)


def spotlight_applications(root: str = "/") -> list[str]:
    """
    List application bundles known to Spotlight under ``root``.
    
    Returns:
        Paths in the order mdfind reports them; empty if the index
        query fails or mdfind is unavailable
    """
    try:
        result = run([MDFIND, "-onlyin", root, APPLICATION_QUERY])
    except (TimeoutError, FileNotFoundError) as e:
        logger.debug("Spotlight query failed: %s", e)
        return []
    
    if not result.success:
        logger.debug("Spotlight query failed: %s", result.err)
        return []
    
    return [line for line in result.out.split("\n") if line]
