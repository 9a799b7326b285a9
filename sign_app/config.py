"""Configuration file management for sign-app."""

from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from sign_app.cache import DEFAULT_CACHE_FILE
from sign_app.classifier import SYSTEM_APPLICATIONS_ROOT
from sign_app.errors import ConfigError
from sign_app.scanners.apps import APPLICATIONS_DIR, EXCLUDED_SEARCH_PREFIXES, USER_APPLICATIONS_DIR


@dataclass
class Config:
    """Configuration for sign-app."""
    
    # Where the discovered application list is kept
    cache_file: str = DEFAULT_CACHE_FILE
    
    # Discovery locations
    applications_dir: str = APPLICATIONS_DIR
    user_applications_dir: str = USER_APPLICATIONS_DIR
    system_applications_root: str = SYSTEM_APPLICATIONS_ROOT
    excluded_search_prefixes: list[str] = field(
        default_factory=lambda: list(EXCLUDED_SEARCH_PREFIXES)
    )
    
    # Signing defaults, overridden by --entitlements / --backup
    entitlements: str | None = None
    backup: bool = False
    
    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for prefix in self.excluded_search_prefixes:
            if not isinstance(prefix, str) or not prefix.startswith("/"):
                raise ValueError(f"Excluded search prefix must be absolute: '{prefix}'")
        
        if self.entitlements is not None:
            if not isinstance(self.entitlements, str):
                raise ValueError(f"Entitlements must be a file path: '{self.entitlements}'")
            self.entitlements = str(Path(self.entitlements).expanduser())
    
    @property
    def application_dirs(self) -> list[str]:
        """Directories searched when resolving an app by name, in order."""
        return [self.applications_dir, self.user_applications_dir]


DEFAULT_CONFIG_PATHS = [
    Path("~/.sign-app.yaml"),
    Path("~/.sign-app.yml"),
    Path("~/.config/sign-app/config.yaml"),
    Path("~/.config/sign-app/config.yml"),
]


def load_config(config_path: Path | str | None = None) -> Config:
    """
    Load configuration from file.
    
    Args:
        config_path: Path to config file. If None, checks default locations:
            1. ~/.sign-app.yaml
            2. ~/.sign-app.yml
            3. ~/.config/sign-app/config.yaml
            4. ~/.config/sign-app/config.yml
    
    Returns:
        Config object with loaded settings (or defaults if no config found)
    
    Raises:
        FileNotFoundError: If an explicit ``config_path`` does not exist
        ConfigError: If the file is not valid YAML or has unknown/invalid keys
    """
    if config_path:
        config_file = Path(config_path).expanduser()
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
    else:
        config_file = next(
            (path.expanduser() for path in DEFAULT_CONFIG_PATHS if path.expanduser().exists()),
            None
        )
        if config_file is None:
            return Config()
    
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load config from {config_file}: {e}") from e
    
    if not isinstance(data, dict):
        raise ConfigError(f"Failed to load config from {config_file}: expected a mapping")
    
    known = {f.name for f in fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys in {config_file}: {', '.join(unknown)}")
    
    try:
        return Config(**data)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Failed to load config from {config_file}: {e}") from e


def save_example_config(output_path: Path | str) -> None:
    """
    Save an example configuration file with all options documented.
    
    Args:
        output_path: Where to save the example config
    """
    example = """# sign-app configuration file
# Place at ~/.sign-app.yaml or ~/.config/sign-app/config.yaml

# Discovered application list (rebuilt with --update-list)
cache_file: ~/.sign_app_cache

# Where applications are looked up by name and discovered
applications_dir: /Applications
user_applications_dir: ~/Applications

# Anything below this directory is never signed
system_applications_root: /System/Applications

# Spotlight results under these prefixes are ignored
excluded_search_prefixes:
  - /System/
  - /Library/

# Entitlements file used when --entitlements is not given
# entitlements: ~/entitlements.plist

# Always back up before signing
backup: false
"""
    
    path = Path(output_path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(example)
