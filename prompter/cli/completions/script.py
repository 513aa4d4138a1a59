"""
Completion script assembly

Entry point behind ``prompter completions <shell>``: generates the static
script, applies the dynamic profile rewrite, prefixes the install banner and
writes the result in one go.
"""

import io
import logging
import sys
from dataclasses import dataclass
from typing import Optional, TextIO, Union

from prompter.cli.completions.dynamic import SUPPORTED_FORMAT_VERSIONS, augment
from prompter.cli.completions.generator import FORMAT_VERSION, ShellType, generate_static
from prompter.cli.completions.instructions import render_instructions
from prompter.cli.completions.patcher import GeneratorOutputError, OutputWriteError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionRequest:
    """One completion generation call."""

    shell: ShellType
    bin_name: str


def build_completion_script(shell: Union[ShellType, str]) -> str:
    """
    Build the full completion script (banner plus augmented script).

    Args:
        shell: Shell type (bash, zsh, fish, powershell, elvish)

    Returns:
        Completion script text

    Raises:
        ValueError: If shell type is not supported
        CompletionError: If the generator output does not have the expected shape
    """
    from prompter.cli.grammar import get_grammar

    grammar = get_grammar()
    request = CompletionRequest(shell=ShellType(getattr(shell, "value", shell)), bin_name=grammar.name)

    buffer = io.BytesIO()
    generate_static(request.shell, grammar, request.bin_name, buffer)
    try:
        raw = buffer.getvalue().decode("utf-8")
    except UnicodeDecodeError as e:
        raise GeneratorOutputError(f"completion generator output must be valid UTF-8: {e}")

    if FORMAT_VERSION not in SUPPORTED_FORMAT_VERSIONS:
        raise GeneratorOutputError(
            f"completion generator format v{FORMAT_VERSION} is not supported "
            f"(expected one of {sorted(SUPPORTED_FORMAT_VERSIONS)})"
        )

    instructions = render_instructions(request.shell, request.bin_name)
    script = augment(request.shell, raw, request.bin_name)
    logger.debug(f"Built {request.shell.value} completion script ({len(script)} chars)")
    return instructions + script


def generate(shell: Union[ShellType, str], out: Optional[TextIO] = None) -> None:
    """
    Generate the completion script for ``shell`` and write it to ``out``.

    Args:
        shell: Shell type
        out: Output stream (default: stdout)

    Raises:
        CompletionError: On generator shape drift or write failure
    """
    text = build_completion_script(shell)
    stream = out if out is not None else sys.stdout
    try:
        stream.write(text)
        stream.flush()
    except OSError as e:
        raise OutputWriteError(f"failed to write completion script: {e}")
