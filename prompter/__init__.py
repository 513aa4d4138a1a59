"""
prompter - Compose reusable prompt profiles from a Markdown library

A small CLI that renders named profiles declared in a TOML config file.
"""

__version__ = "0.4.0"
__author__ = "tftio"
__license__ = "MIT"

from prompter.core.config import ConfigManager, PrompterConfig
from prompter.core.profiles import ProfileManager

__all__ = ["ConfigManager", "PrompterConfig", "ProfileManager"]
