"""
Activation banners prefixed to generated completion scripts.
"""

from typing import Dict, Union

from prompter.cli.completions.generator import ShellType


BANNER_HEADER = (
    "# Shell completion for {bin}\n"
    "#\n"
    "# To enable completions, add this to your shell config:\n"
    "#\n"
)

# One activation command per shell, each a "#   " comment line
ACTIVATION_LINES: Dict[ShellType, str] = {
    ShellType.BASH: "#   source <({bin} completions bash)\n",
    ShellType.ZSH: (
        "#   {bin} completions zsh > ~/.zsh/completions/_{bin}\n"
        "#   Ensure fpath includes ~/.zsh/completions\n"
    ),
    ShellType.FISH: "#   {bin} completions fish | source\n",
    ShellType.POWERSHELL: "#   {bin} completions powershell | Out-String | Invoke-Expression\n",
    ShellType.ELVISH: "#   {bin} completions elvish | eval\n",
}

FALLBACK_ACTIVATION = "#   {bin} completions {shell}\n"


def render_instructions(shell: Union[ShellType, str], bin_name: str) -> str:
    """
    Render the commented install banner for a shell.

    Unknown shells get a generic ``<bin> completions <shell>`` line.

    Args:
        shell: Shell type or name
        bin_name: Program name

    Returns:
        Banner text ending with a blank line
    """
    name = str(getattr(shell, "value", shell))
    try:
        activation = ACTIVATION_LINES[ShellType(name)]
    except ValueError:
        activation = FALLBACK_ACTIVATION

    return BANNER_HEADER.format(bin=bin_name) + activation.format(bin=bin_name, shell=name) + "\n"
