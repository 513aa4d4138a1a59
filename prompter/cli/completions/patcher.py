"""
Anchor-based text patching for generated completion scripts.

Generated scripts have a fixed skeleton, so blocks are located by a start
anchor and a terminator rather than by parsing shell syntax. A missing
anchor means the generator output changed shape and is always fatal.
"""

import logging
from dataclasses import dataclass


logger = logging.getLogger(__name__)

# Bash case items are indented eight spaces; their closing `;;` twelve
BASH_CASE_INDENT = "        "
BASH_CASE_TERMINATOR = "\n            ;;\n"


class CompletionError(Exception):
    """Completion script generation error."""
    pass


class AnchorNotFoundError(CompletionError):
    """A start anchor or terminator is missing from the generated script."""

    def __init__(self, label: str, pattern: str, what: str = "case block"):
        self.label = label
        self.pattern = pattern
        super().__init__(f"expected {what} for {label} (pattern {pattern!r} not found)")


class GeneratorOutputError(CompletionError):
    """The static generator produced output this engine cannot use."""
    pass


class OutputWriteError(CompletionError):
    """Writing the completion script to the output stream failed."""
    pass


def replace_block(script: str, label: str, start: str, terminator: str, replacement: str) -> str:
    """
    Replace the block that begins at ``start`` and ends with ``terminator``.

    The span runs from the first occurrence of ``start`` through the end of
    the first ``terminator`` after it, both inclusive.

    Raises:
        AnchorNotFoundError: If either pattern is missing
    """
    begin = script.find(start)
    if begin < 0:
        raise AnchorNotFoundError(label, start)

    offset = script.find(terminator, begin)
    if offset < 0:
        raise AnchorNotFoundError(label, terminator, what="terminator")

    end = offset + len(terminator)
    logger.debug(f"Patched {label} block ({end - begin} chars replaced)")
    return script[:begin] + replacement + script[end:]


@dataclass(frozen=True)
class AnchorSpec:
    """One block patch: label, start anchor, terminator and replacement."""

    label: str
    start: str
    terminator: str
    replacement: str

    @classmethod
    def case_block(cls, label: str, replacement: str) -> "AnchorSpec":
        """Patch for the bash ``case`` item for ``label``."""
        return cls(label, f"{BASH_CASE_INDENT}{label})", BASH_CASE_TERMINATOR, replacement)

    def apply(self, script: str) -> str:
        return replace_block(script, self.label, self.start, self.terminator, self.replacement)


def replace_case_block(script: str, label: str, replacement: str) -> str:
    """Replace the bash ``case`` item for ``label``."""
    return AnchorSpec.case_block(label, replacement).apply(script)
