"""
Configuration File Support for prompter.

Provides TOML-based profile configuration:
- Default config location (~/.config/prompter/config.toml)
- Default library location (~/.local/prompter/library)
- Environment variable overrides (PROMPTER_*)
- Profile table discovery, including dotted names like [python.api]
"""

import logging
import os
import sys
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

# Use tomllib for Python 3.11+, fallback to tomli for older versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


logger = logging.getLogger(__name__)

ENV_PREFIX = "PROMPTER_"
DEFAULT_CONFIG_PATH = Path("~/.config/prompter/config.toml")
DEFAULT_LIBRARY_PATH = Path("~/.local/prompter/library")

DEFAULT_PRE_PROMPT = (
    "You are an LLM coding agent. Here are invariants that you must adhere to. "
    "Please respond with 'Got it' when you have studied these and understand them. "
    "At that point, the operator will give you further instructions. You are *not* "
    "to do anything to the contents of this directory until you have been explicitly "
    "asked to, by the operator.\n\n"
)
DEFAULT_POST_PROMPT = ""
DEFAULT_SEPARATOR = "\n"

# Top-level keys that are settings rather than profile tables
SETTING_KEYS = ("library", "pre_prompt", "post_prompt", "separator")


class ConfigError(Exception):
    """Configuration error."""
    pass


@dataclass
class PrompterConfig:
    """
    Loaded prompter configuration.

    Profiles map a dotted profile name to its ordered `depends_on` entries.
    Entries ending in ``.md`` are library files, anything else names
    another profile.
    """
    config_path: Path
    library: Path
    pre_prompt: Optional[str] = None
    post_prompt: Optional[str] = None
    separator: Optional[str] = None
    profiles: Dict[str, List[str]] = field(default_factory=dict)

    def profile_names(self) -> List[str]:
        """Return profile names in sorted order."""
        return sorted(self.profiles)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "config_path": str(self.config_path),
            "library": str(self.library),
            "pre_prompt": self.pre_prompt,
            "post_prompt": self.post_prompt,
            "separator": self.separator,
            "profiles": {name: list(deps) for name, deps in self.profiles.items()},
        }


def default_config_path() -> Path:
    """Config path honoring the PROMPTER_CONFIG override."""
    override = os.environ.get(f"{ENV_PREFIX}CONFIG")
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def default_library_path() -> Path:
    """Library path honoring the PROMPTER_LIBRARY override."""
    override = os.environ.get(f"{ENV_PREFIX}LIBRARY")
    if override:
        return Path(override).expanduser()
    return DEFAULT_LIBRARY_PATH.expanduser()


class ConfigManager:
    """
    Configuration file manager.

    Resolution order for the config file (highest first):
    1. Explicit path (``--config``)
    2. ``PROMPTER_CONFIG`` environment variable
    3. ``~/.config/prompter/config.toml``

    The library directory is taken from the ``library`` key when present,
    otherwise from ``PROMPTER_LIBRARY`` or ``~/.local/prompter/library``.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize ConfigManager.

        Args:
            config_path: Custom config path
        """
        self.config_path = Path(config_path).expanduser() if config_path else default_config_path()

    def load(self) -> PrompterConfig:
        """
        Load and parse the configuration file.

        Returns:
            Parsed PrompterConfig

        Raises:
            ConfigError: If the file is missing, unreadable or malformed
        """
        if not self.config_path.exists():
            raise ConfigError(f"Config file not found: {self.config_path}")

        try:
            with open(self.config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {self.config_path}: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to read config {self.config_path}: {e}")

        logger.debug(f"Loaded config from {self.config_path}")
        return self.parse(data)

    def parse(self, data: Dict[str, Any]) -> PrompterConfig:
        """Build a PrompterConfig from decoded TOML data."""
        for key in ("pre_prompt", "post_prompt", "separator", "library"):
            if key in data and not isinstance(data[key], str):
                raise ConfigError(f"'{key}' must be a string")

        config = PrompterConfig(
            config_path=self.config_path,
            library=self.resolve_library(data.get("library")),
            pre_prompt=data.get("pre_prompt"),
            post_prompt=data.get("post_prompt"),
            separator=data.get("separator"),
        )

        for key, value in data.items():
            if key in SETTING_KEYS:
                continue
            if not isinstance(value, dict):
                raise ConfigError(f"Unexpected top-level key '{key}'")
            self._collect_profiles(key, value, config.profiles)

        logger.debug(f"Found {len(config.profiles)} profiles")
        return config

    def resolve_library(self, value: Optional[str]) -> Path:
        """Resolve the library directory relative to the config file."""
        if not value:
            return default_library_path()
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.config_path.parent / path
        return path

    def _collect_profiles(
        self,
        name: str,
        table: Dict[str, Any],
        profiles: Dict[str, List[str]]
    ) -> None:
        """Walk a (possibly nested) table and record every profile in it."""
        if "depends_on" in table:
            deps = table["depends_on"]
            if not isinstance(deps, list) or not all(isinstance(d, str) for d in deps):
                raise ConfigError(f"Profile '{name}': depends_on must be an array of strings")
            profiles[name] = list(deps)

        for key, value in table.items():
            if key == "depends_on":
                continue
            if isinstance(value, dict):
                self._collect_profiles(f"{name}.{key}", value, profiles)
            elif "depends_on" not in table:
                raise ConfigError(f"Table '{name}' has unexpected key '{key}'")


def load_config(config_path: Optional[Path] = None) -> PrompterConfig:
    """Load configuration from the given or default path."""
    return ConfigManager(config_path).load()
