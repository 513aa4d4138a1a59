"""
Profile Management

Resolves profile dependencies into library files and renders them.
"""

import logging
from pathlib import Path
from typing import List, Optional, Dict, Any, Set
from dataclasses import dataclass, field, asdict

from prompter.core.config import (
    PrompterConfig,
    DEFAULT_PRE_PROMPT,
    DEFAULT_POST_PROMPT,
    DEFAULT_SEPARATOR,
)


logger = logging.getLogger(__name__)

LIBRARY_SUFFIX = ".md"


class ProfileError(Exception):
    """Profile resolution or rendering error."""
    pass


@dataclass
class RenderResult:
    """Rendered profile output."""

    profiles: List[str]
    files: List[str]
    output: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return asdict(self)


@dataclass
class TreeNode:
    """One entry in a profile dependency tree."""

    name: str
    kind: str  # "profile", "file", "missing" or "cycle"
    children: List["TreeNode"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "kind": self.kind}
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def is_library_file(entry: str) -> bool:
    """Return True if a depends_on entry names a library file."""
    return entry.endswith(LIBRARY_SUFFIX)


class ProfileManager:
    """Resolves and renders profiles from a loaded configuration."""

    def __init__(self, config: PrompterConfig):
        """
        Initialize profile manager.

        Args:
            config: Loaded prompter configuration
        """
        self.config = config

    def list_profiles(self) -> List[str]:
        """
        List all available profiles.

        Returns:
            Sorted list of profile names
        """
        return self.config.profile_names()

    def profile_exists(self, name: str) -> bool:
        """Check if a profile exists."""
        return name in self.config.profiles

    def resolve(self, names: List[str]) -> List[str]:
        """
        Resolve profiles into an ordered, de-duplicated list of library files.

        Dependencies are expanded depth-first in declaration order; the first
        occurrence of a file wins.

        Args:
            names: Profile names to resolve

        Returns:
            Library-relative file paths

        Raises:
            ProfileError: On unknown profiles or dependency cycles
        """
        files: List[str] = []
        seen: Set[str] = set()
        for name in names:
            self._expand(name, [], files, seen)
        return files

    def _expand(self, name: str, stack: List[str], files: List[str], seen: Set[str]) -> None:
        if name in stack:
            cycle = " -> ".join(stack + [name])
            raise ProfileError(f"Dependency cycle detected: {cycle}")
        if name not in self.config.profiles:
            if stack:
                raise ProfileError(f"Profile '{stack[-1]}' depends on unknown profile '{name}'")
            raise ProfileError(f"Unknown profile: {name}")

        for entry in self.config.profiles[name]:
            if is_library_file(entry):
                if entry not in seen:
                    seen.add(entry)
                    files.append(entry)
            else:
                self._expand(entry, stack + [name], files, seen)

    def render(
        self,
        names: List[str],
        separator: Optional[str] = None,
        pre_prompt: Optional[str] = None,
        post_prompt: Optional[str] = None
    ) -> RenderResult:
        """
        Render one or more profiles.

        Explicit arguments win over config values, which win over defaults.

        Raises:
            ProfileError: On resolution errors or unreadable library files
        """
        if not names:
            raise ProfileError("At least one profile is required")

        files = self.resolve(names)

        sep = _first_set(separator, self.config.separator, DEFAULT_SEPARATOR)
        pre = _first_set(pre_prompt, self.config.pre_prompt, DEFAULT_PRE_PROMPT)
        post = _first_set(post_prompt, self.config.post_prompt, DEFAULT_POST_PROMPT)

        bodies = [self._read_library_file(entry) for entry in files]
        output = pre + sep.join(bodies) + post

        logger.debug(f"Rendered {len(files)} files for profiles {names}")
        return RenderResult(profiles=list(names), files=files, output=output)

    def _read_library_file(self, entry: str) -> str:
        path = self.config.library / entry
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise ProfileError(f"Library file not found: {path}")
        except OSError as e:
            raise ProfileError(f"Failed to read {path}: {e}")

    def tree(self) -> List[TreeNode]:
        """Build the dependency tree of every profile."""
        return [self._tree_node(name, []) for name in self.list_profiles()]

    def _tree_node(self, name: str, stack: List[str]) -> TreeNode:
        node = TreeNode(name=name, kind="profile")
        if name in stack:
            node.kind = "cycle"
            return node
        for entry in self.config.profiles.get(name, []):
            if is_library_file(entry):
                kind = "file" if (self.config.library / entry).is_file() else "missing"
                node.children.append(TreeNode(name=entry, kind=kind))
            elif entry in self.config.profiles:
                node.children.append(self._tree_node(entry, stack + [name]))
            else:
                node.children.append(TreeNode(name=entry, kind="missing"))
        return node

    def validate(self) -> List[str]:
        """
        Validate every profile.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: List[str] = []

        for name in self.list_profiles():
            for entry in self.config.profiles[name]:
                if is_library_file(entry):
                    if not (self.config.library / entry).is_file():
                        errors.append(f"Profile '{name}': missing file {self.config.library / entry}")
                elif entry not in self.config.profiles:
                    errors.append(f"Profile '{name}': unknown profile reference '{entry}'")

            try:
                self._check_cycles(name, [])
            except ProfileError as e:
                errors.append(f"Profile '{name}': {e}")

        return errors

    def _check_cycles(self, name: str, stack: List[str]) -> None:
        if name in stack:
            raise ProfileError(f"Dependency cycle detected: {' -> '.join(stack + [name])}")
        for entry in self.config.profiles.get(name, []):
            if not is_library_file(entry) and entry in self.config.profiles:
                self._check_cycles(entry, stack + [name])


def format_tree(nodes: List[TreeNode]) -> str:
    """Render tree nodes as indented text."""
    lines: List[str] = []

    def walk(node: TreeNode, prefix: str, last: bool, root: bool) -> None:
        label = node.name
        if node.kind == "missing":
            label += " (missing)"
        elif node.kind == "cycle":
            label += " (cycle)"

        if root:
            lines.append(label)
            child_prefix = ""
        else:
            lines.append(f"{prefix}{'└── ' if last else '├── '}{label}")
            child_prefix = prefix + ("    " if last else "│   ")

        for i, child in enumerate(node.children):
            walk(child, child_prefix, i == len(node.children) - 1, False)

    for node in nodes:
        walk(node, "", True, True)
    return "\n".join(lines)


def _first_set(*values: Optional[str]) -> str:
    for value in values:
        if value is not None:
            return value
    return ""
