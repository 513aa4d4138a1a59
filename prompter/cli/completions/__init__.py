"""
Shell completion scripts for prompter

Provides shell completion support for Bash, Zsh, Fish, PowerShell and Elvish,
with profile names looked up dynamically in Bash, Zsh and Fish.
"""

from prompter.cli.completions.generator import (
    CompletionGenerator,
    generate_static,
    FORMAT_VERSION,
    SUPPORTED_SHELLS,
    ShellType
)

from prompter.cli.completions.patcher import (
    AnchorSpec,
    CompletionError,
    AnchorNotFoundError,
    GeneratorOutputError,
    OutputWriteError,
    replace_block,
    replace_case_block
)

from prompter.cli.completions.instructions import render_instructions

from prompter.cli.completions.dynamic import (
    AUGMENTERS,
    augment,
    augment_bash,
    augment_zsh,
    augment_fish
)

from prompter.cli.completions.script import (
    CompletionRequest,
    build_completion_script,
    generate
)

__all__ = [
    # Generator
    "CompletionGenerator",
    "generate_static",
    "FORMAT_VERSION",
    "SUPPORTED_SHELLS",
    "ShellType",
    # Patching
    "AnchorSpec",
    "CompletionError",
    "AnchorNotFoundError",
    "GeneratorOutputError",
    "OutputWriteError",
    "replace_block",
    "replace_case_block",
    # Banner
    "render_instructions",
    # Dynamic completions
    "AUGMENTERS",
    "augment",
    "augment_bash",
    "augment_zsh",
    "augment_fish",
    # Orchestration
    "CompletionRequest",
    "build_completion_script",
    "generate"
]
