"""Core profile configuration and rendering modules."""

from prompter.core.config import (
    ConfigError,
    ConfigManager,
    PrompterConfig,
    load_config,
)
from prompter.core.profiles import (
    ProfileError,
    ProfileManager,
    RenderResult,
    TreeNode,
    format_tree,
)
from prompter.core.scaffold import init_scaffold

__all__ = [
    "ConfigError",
    "ConfigManager",
    "PrompterConfig",
    "load_config",
    "ProfileError",
    "ProfileManager",
    "RenderResult",
    "TreeNode",
    "format_tree",
    "init_scaffold",
]
