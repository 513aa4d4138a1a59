"""
Health check and diagnostics.

Checks that the config file exists and parses, and that the library
directory is present.
"""

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import List, Optional, Dict, Any

from prompter import __version__
from prompter.core.config import ConfigManager, default_config_path

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


@dataclass
class DoctorReport:
    """Result of a health check."""

    config_path: str
    library_path: str
    config_file_exists: bool = False
    config_valid_toml: bool = False
    library_directory_exists: bool = False
    version: str = __version__
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary."""
        return asdict(self)


def run_checks(
    config_path: Optional[Path] = None,
    library_path: Optional[Path] = None
) -> DoctorReport:
    """
    Run all health checks.

    Returns:
        DoctorReport; healthy when no errors were recorded
    """
    config_path = config_path or default_config_path()
    data: Dict[str, Any] = {}
    errors: List[str] = []

    config_file_exists = config_path.exists()
    config_valid_toml = False
    if config_file_exists:
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
            config_valid_toml = True
        except tomllib.TOMLDecodeError:
            errors.append(f"Config is invalid TOML: {config_path}")
        except OSError as e:
            errors.append(f"Failed to read config: {e}")
    else:
        errors.append(f"Config file not found: {config_path}")

    if library_path is None:
        library = data.get("library")
        library_path = ConfigManager(config_path).resolve_library(library if isinstance(library, str) else None)

    report = DoctorReport(
        config_path=str(config_path),
        library_path=str(library_path),
        config_file_exists=config_file_exists,
        config_valid_toml=config_valid_toml,
        errors=errors,
    )

    report.library_directory_exists = library_path.is_dir()
    if not report.library_directory_exists:
        report.errors.append(f"Library directory not found: {library_path}")

    return report
