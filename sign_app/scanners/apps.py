"""Application discovery for macOS."""

import logging
from pathlib import Path
from typing import Iterable

from sign_app.classifier import SYSTEM_APPLICATIONS_ROOT, is_system_application
from sign_app.toolchain import Toolchain, default_toolchain

logger = logging.getLogger(__name__)

APPLICATIONS_DIR = "/Applications"
USER_APPLICATIONS_DIR = "~/Applications"
EXCLUDED_SEARCH_PREFIXES = ("/System/", "/Library/")


def list_app_bundles(directory: str | Path) -> list[str]:
    """
    List the ``.app`` directories directly inside ``directory``.
    
    Missing or unreadable directories yield an empty list.
    """
    scan_path = Path(directory).expanduser()
    if not scan_path.is_dir():
        return []
    
    try:
        return sorted(
            str(item) for item in scan_path.iterdir()
            if item.suffix == ".app" and item.is_dir()
        )
    except (OSError, PermissionError) as e:
        logger.debug("Skipping %s: %s", scan_path, e)
        return []


def find_user_installed_applications(
    tools: Toolchain | None = None,
    applications_dir: str | Path = APPLICATIONS_DIR,
    user_applications_dir: str | Path = USER_APPLICATIONS_DIR,
    system_root: str = SYSTEM_APPLICATIONS_ROOT,
    excluded_prefixes: Iterable[str] = EXCLUDED_SEARCH_PREFIXES
) -> list[str]:
    """
    Build the candidate list of user-installed application bundles.
    
    Sources:
    
    - top level of ``applications_dir``, minus system applications
    - top level of ``user_applications_dir``, unfiltered
    - Spotlight application bundles outside ``excluded_prefixes``, minus
      system applications
    
    Paths are deduplicated by exact string equality, so two spellings of the
    same bundle (trailing slash, case, symlink) both survive.
    
    Returns:
        Sorted list of unique bundle paths (possibly empty)
    """
    tools = tools or default_toolchain()
    prefixes = tuple(excluded_prefixes)
    
    def user_installed(path: str) -> bool:
        return not is_system_application(path, tools, system_root)
    
    apps: list[str] = []
    
    apps.extend(filter(user_installed, list_app_bundles(applications_dir)))
    
    # Anything in the user's own folder was put there by the user
    apps.extend(list_app_bundles(user_applications_dir))
    
    indexed = [path for path in tools.spotlight_applications() if not path.startswith(prefixes)]
    apps.extend(filter(user_installed, indexed))
    
    candidates = sorted(set(apps))
    logger.debug("Discovered %d user-installed applications", len(candidates))
    return candidates


def resolve_app_by_name(name: str, directories: Iterable[str | Path]) -> str | None:
    """
    Find ``<name>.app`` in the first of ``directories`` that contains it.
    
    ``name`` is a bare bundle name; anything with a path separator, or
    a relative component like ``..``, never matches.
    
    Returns:
        Bundle path, or None if no directory has it
    """
    if not name or Path(name).name != name or name in (".", ".."):
        return None
    
    for directory in directories:
        candidate = Path(directory).expanduser() / f"{name}.app"
        if candidate.is_dir():
            return str(candidate)
    return None
