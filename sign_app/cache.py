"""Persistent list of discovered applications."""

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CACHE_FILE = "~/.sign_app_cache"


class AppListCache:
    """Stores the discovered application list, one path per line."""
    
    def __init__(self, cache_path: Path | str = DEFAULT_CACHE_FILE):
        """Initialize the cache with the path of its storage file."""
        self.path = Path(cache_path).expanduser()
    
    def exists(self) -> bool:
        """Check whether a cache record has been written."""
        return self.path.is_file()
    
    def is_stale(self, force: bool = False) -> bool:
        """
        Decide whether discovery has to run again.
        
        The record never expires on its own: it is stale only when the
        operator forces a refresh or nothing has been stored yet.
        """
        return force or not self.exists()
    
    def load(self) -> list[str] | None:
        """
        Read the cached application list.
        
        Returns:
            Paths in stored order, or None if there is no record
        """
        if not self.exists():
            return None
        
        with open(self.path, "r", encoding="utf-8") as f:
            return [line.rstrip("\n") for line in f if line.strip()]
    
    def store(self, apps: list[str]) -> None:
        """
        Replace the cached list with ``apps``.
        
        Args:
            apps: Application paths to persist, in order
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.writelines(f"{app}\n" for app in apps)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        
        logger.info("Cached %d applications in %s", len(apps), self.path)
