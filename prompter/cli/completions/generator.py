"""
Static shell completion script generator for prompter

Turns a CommandSpec grammar into a fixed-list completion script for Bash,
Zsh, Fish, PowerShell and Elvish. The output skeleton is deterministic; the
dynamic profile augmenters in ``dynamic.py`` anchor on it.
"""

from enum import Enum
from typing import BinaryIO, Iterator, List, Tuple, Union

from prompter.cli.grammar import CommandSpec, OptionSpec, PositionalSpec


# Bumped whenever the block skeleton below changes shape
FORMAT_VERSION = 1


class ShellType(str, Enum):
    """Supported shell types."""
    BASH = "bash"
    ZSH = "zsh"
    FISH = "fish"
    POWERSHELL = "powershell"
    ELVISH = "elvish"


SUPPORTED_SHELLS = [shell.value for shell in ShellType]


def _walk(spec: CommandSpec, path: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], CommandSpec]]:
    """Yield (path, command) pairs, parents before children."""
    path = path + (spec.name,)
    yield path, spec
    for sub in spec.subcommands:
        yield from _walk(sub, path)


def _fn_name(path: Tuple[str, ...]) -> str:
    return "__".join(part.replace("-", "_") for part in path)


class CompletionGenerator:
    """Generate static shell completion scripts from a command grammar."""

    def __init__(self, grammar: CommandSpec, bin_name: str = ""):
        """
        Initialize the completion generator.

        Args:
            grammar: Root command specification
            bin_name: Executable name (defaults to the grammar's name)
        """
        self.grammar = grammar
        self.bin_name = bin_name or grammar.name

    def generate(self, shell: Union[ShellType, str]) -> str:
        """
        Generate completion script for specified shell.

        Args:
            shell: Shell type (bash, zsh, fish, powershell, elvish)

        Returns:
            Completion script as string

        Raises:
            ValueError: If shell type is not supported
        """
        shell = str(getattr(shell, "value", shell)).lower()

        if shell == "bash":
            return self._generate_bash()
        elif shell == "zsh":
            return self._generate_zsh()
        elif shell == "fish":
            return self._generate_fish()
        elif shell in ("powershell", "pwsh"):
            return self._generate_powershell()
        elif shell == "elvish":
            return self._generate_elvish()
        else:
            raise ValueError(f"Unsupported shell: {shell}. Supported: {SUPPORTED_SHELLS}")

    # Bash

    def _generate_bash(self) -> str:
        bin_name = self.bin_name
        root_fn = _fn_name((bin_name,))

        detect: List[str] = [
            '            ",$1")',
            f'                cmd="{root_fn}"',
            "                ;;",
        ]
        blocks: List[str] = []

        for path, spec in _walk(self.grammar):
            label = _fn_name((bin_name,) + path[1:])
            for sub in spec.subcommands:
                sub_label = _fn_name((bin_name,) + path[1:] + (sub.name,))
                detect.append(f"            {label},{sub.name})")
                detect.append(f'                cmd="{sub_label}"')
                detect.append("                ;;")
            blocks.append(self._bash_block(label, spec, len(path)))

        detect_block = "\n".join(detect)
        case_block = "\n".join(blocks)

        return f'''_{root_fn}() {{
    local i cur prev opts cmd
    COMPREPLY=()
    if [[ "${{BASH_VERSINFO[0]}}" -ge 4 ]]; then
        cur="$2"
    else
        cur="${{COMP_WORDS[COMP_CWORD]}}"
    fi
    prev="$3"
    cmd=""
    opts=""

    for i in "${{COMP_WORDS[@]:0:COMP_CWORD}}"
    do
        case "${{cmd}},${{i}}" in
{detect_block}
            *)
                ;;
        esac
    done

    case "${{cmd}}" in
{case_block}
    esac
}}

if [[ "${{BASH_VERSINFO[0]}}" -eq 4 && "${{BASH_VERSINFO[1]}}" -ge 4 || "${{BASH_VERSINFO[0]}}" -gt 4 ]]; then
    complete -F _{root_fn} -o nosort -o bashdefault -o default {bin_name}
else
    complete -F _{root_fn} -o bashdefault -o default {bin_name}
fi
'''

    def _bash_block(self, label: str, spec: CommandSpec, depth: int) -> str:
        words = spec.flag_words()
        words += [p.placeholder for p in spec.positionals]
        words += [sub.name for sub in spec.subcommands]
        opts = " ".join(words)

        value_cases: List[str] = []
        for option in spec.value_options():
            for flag in (option.long, option.short):
                if not flag:
                    continue
                if option.value_hint == "file":
                    action = 'COMPREPLY=($(compgen -f "${cur}"))'
                else:
                    action = "COMPREPLY=()"
                value_cases.append(
                    f"                {flag})\n"
                    f"                    {action}\n"
                    f"                    return 0\n"
                    f"                    ;;"
                )
        value_cases.append(
            "                *)\n"
            "                    COMPREPLY=()\n"
            "                    ;;"
        )
        cases = "\n".join(value_cases)

        return f'''        {label})
            opts="{opts}"
            if [[ ${{cur}} == -* || ${{COMP_CWORD}} -eq {depth} ]] ; then
                COMPREPLY=( $(compgen -W "${{opts}}" -- "${{cur}}") )
                return 0
            fi
            case "${{prev}}" in
{cases}
            esac
            COMPREPLY=( $(compgen -W "${{opts}}" -- "${{cur}}") )
            return 0
            ;;'''

    # Zsh

    @staticmethod
    def _zsh_escape(text: str) -> str:
        return (
            text.replace("\\", "\\\\")
            .replace("'", "'\\''")
            .replace("[", "\\[")
            .replace("]", "\\]")
            .replace(":", "\\:")
        )

    def _zsh_option_specs(self, option: OptionSpec) -> List[str]:
        help_text = self._zsh_escape(option.help)
        action = "_files" if option.value_hint == "file" else "_default"
        specs = []
        if option.short:
            if option.takes_value:
                specs.append(f"'{option.short}+[{help_text}]:{option.value_name}:{action}'")
            else:
                specs.append(f"'{option.short}[{help_text}]'")
        if option.long:
            if option.takes_value:
                specs.append(f"'{option.long}=[{help_text}]:{option.value_name}:{action}'")
            else:
                specs.append(f"'{option.long}[{help_text}]'")
        return specs

    def _zsh_positional_spec(self, positional: PositionalSpec) -> str:
        help_text = self._zsh_escape(positional.help)
        if positional.multiple:
            prefix = "*::"
        elif positional.required:
            prefix = ":"
        else:
            prefix = "::"
        return f"'{prefix}{positional.name} -- {help_text}:_default'"

    def _zsh_arguments(self, path: Tuple[str, ...], spec: CommandSpec, indent: str) -> str:
        specs: List[str] = []
        for option in spec.options:
            specs.extend(self._zsh_option_specs(option))
        specs.extend(self._zsh_positional_spec(p) for p in spec.positionals)

        fn = _fn_name(path)
        state = "-".join(path)
        if spec.subcommands:
            specs.append(f'":: :_{fn}_commands"')
            specs.append(f'"*::: :->{state}"')

        lines = [f'{indent}_arguments "${{_arguments_options[@]}}" : \\']
        lines.extend(f"{spec_line} \\" for spec_line in specs)
        lines.append("&& ret=0")

        if spec.subcommands:
            index = len(spec.positionals) + 1
            lines.append(f"{indent}    case $state in")
            lines.append(f"{indent}    ({state})")
            lines.append(f'{indent}        words=($line[{index}] "${{words[@]}}")')
            lines.append(f"{indent}        (( CURRENT += 1 ))")
            lines.append(
                f'{indent}        curcontext="${{curcontext%:*:*}}:{state}-command-$line[{index}]:"'
            )
            lines.append(f"{indent}        case $line[{index}] in")
            for sub in spec.subcommands:
                lines.append(f"{indent}            ({sub.name})")
                lines.append(self._zsh_arguments(path + (sub.name,), sub, ""))
                lines.append(";;")
            lines.append(f"{indent}        esac")
            lines.append(f"{indent}    ;;")
            lines.append(f"{indent}esac")
        return "\n".join(lines)

    def _generate_zsh(self) -> str:
        bin_name = self.bin_name
        root_path = (bin_name,)
        body = self._zsh_arguments(root_path, self.grammar, "    ")

        command_fns: List[str] = []
        for path, spec in _walk(self.grammar):
            full_path = root_path + path[1:]
            fn = _fn_name(full_path)
            entries = "\n".join(
                f"'{sub.name}:{self._zsh_escape(sub.about)}' \\" for sub in spec.subcommands
            )
            label = " ".join(full_path)
            if entries:
                listing = f"    local commands; commands=(\n{entries}\n    )"
            else:
                listing = "    local commands; commands=()"
            command_fns.append(
                f"(( $+functions[_{fn}_commands] )) ||\n"
                f"_{fn}_commands() {{\n"
                f"{listing}\n"
                f"    _describe -t commands '{label} commands' commands \"$@\"\n"
                f"}}"
            )
        commands_block = "\n".join(command_fns)

        return f'''#compdef {bin_name}

autoload -U is-at-least

_{bin_name}() {{
    typeset -A opt_args
    typeset -a _arguments_options
    local ret=1

    if is-at-least 5.2; then
        _arguments_options=(-s -S -C)
    else
        _arguments_options=(-s -C)
    fi

    local context curcontext="$curcontext" state line
{body}
}}

{commands_block}

if [ "$funcstack[1]" = "_{bin_name}" ]; then
    _{bin_name} "$@"
else
    compdef _{bin_name} {bin_name}
fi
'''

    # Fish

    @staticmethod
    def _fish_escape(text: str) -> str:
        return text.replace("\\", "\\\\").replace("'", "\\'")

    def _fish_option_line(self, condition: str, option: OptionSpec) -> str:
        parts = [f"complete -c {self.bin_name} -n \"{condition}\""]
        if option.short:
            parts.append(f"-s {option.short[1:]}")
        if option.long:
            parts.append(f"-l {option.long[2:]}")
        parts.append(f"-d '{self._fish_escape(option.help)}'")
        if option.takes_value:
            parts.append("-r -F" if option.value_hint == "file" else "-r")
        return " ".join(parts)

    def _generate_fish(self) -> str:
        bin_name = self.bin_name
        optspecs = []
        for option in self.grammar.options:
            name = option.long[2:] if option.long else ""
            if option.short and name:
                spec = f"{option.short[1:]}/{name}"
            else:
                spec = name or option.short[1:]
            optspecs.append(spec + ("=" if option.takes_value else ""))

        lines = [
            "# Print an optspec for argparse to handle cmd's options that are independent of any subcommand.",
            f"function __fish_{bin_name}_global_optspecs",
            f"\tstring join \\n {' '.join(optspecs)}",
            "end",
            "",
            f"function __fish_{bin_name}_needs_command",
            "\t# Figure out if the current invocation already has a command.",
            "\tset -l cmd (commandline -opc)",
            "\tset -e cmd[1]",
            f"\targparse -s (__fish_{bin_name}_global_optspecs) -- $cmd 2>/dev/null",
            "\tor return",
            "\tif set -q argv[1]",
            "\t\t# Also print the command, so this can be used to figure out what it is.",
            "\t\techo $argv[1]",
            "\t\treturn 1",
            "\tend",
            "\treturn 0",
            "end",
            "",
            f"function __fish_{bin_name}_using_subcommand",
            f"\tset -l cmd (__fish_{bin_name}_needs_command)",
            "\ttest -z \"$cmd\"",
            "\tand return 1",
            "\tcontains -- $cmd[1] $argv",
            "end",
            "",
        ]

        root_condition = f"__fish_{bin_name}_needs_command"
        for option in self.grammar.options:
            lines.append(self._fish_option_line(root_condition, option))
        for sub in self.grammar.subcommands:
            lines.append(
                f"complete -c {bin_name} -n \"{root_condition}\" -f -a \"{sub.name}\" "
                f"-d '{self._fish_escape(sub.about)}'"
            )

        for path, spec in _walk(self.grammar):
            if len(path) < 2:
                continue
            condition = f"__fish_{bin_name}_using_subcommand {path[1]}"
            for nested in path[2:]:
                condition += f"; and __fish_seen_subcommand_from {nested}"
            for option in spec.options:
                lines.append(self._fish_option_line(condition, option))
            for sub in spec.subcommands:
                lines.append(
                    f"complete -c {bin_name} -n \"{condition}\" -f -a \"{sub.name}\" "
                    f"-d '{self._fish_escape(sub.about)}'"
                )

        return "\n".join(lines) + "\n"

    # PowerShell

    @staticmethod
    def _ps_escape(text: str) -> str:
        return text.replace("'", "''")

    def _generate_powershell(self) -> str:
        bin_name = self.bin_name
        arms: List[str] = []
        for path, spec in _walk(self.grammar):
            key = ";".join((bin_name,) + path[1:])
            results = []
            for option in spec.options:
                for flag in option.flags:
                    help_text = self._ps_escape(option.help)
                    results.append(
                        f"            [CompletionResult]::new('{flag}', '{flag}', "
                        f"[CompletionResultType]::ParameterName, '{help_text}')"
                    )
            for sub in spec.subcommands:
                about = self._ps_escape(sub.about)
                results.append(
                    f"            [CompletionResult]::new('{sub.name}', '{sub.name}', "
                    f"[CompletionResultType]::ParameterValue, '{about}')"
                )
            body = "\n".join(results + ["            break"])
            arms.append(f"        '{key}' {{\n{body}\n        }}")
        arms_block = "\n".join(arms)

        return f'''
using namespace System.Management.Automation
using namespace System.Management.Automation.Language

Register-ArgumentCompleter -Native -CommandName '{bin_name}' -ScriptBlock {{
    param($wordToComplete, $commandAst, $cursorPosition)

    $commandElements = $commandAst.CommandElements
    $command = @(
        '{bin_name}'
        for ($i = 1; $i -lt $commandElements.Count; $i++) {{
            $element = $commandElements[$i]
            if ($element -isnot [StringConstantExpressionAst] -or
                $element.StringConstantType -ne [StringConstantType]::BareWord -or
                $element.Value.StartsWith('-') -or
                $element.Value -eq $wordToComplete) {{
                break
        }}
        $element.Value
    }}) -join ';'

    $completions = @(switch ($command) {{
{arms_block}
    }})

    $completions.Where{{ $_.CompletionText -like "$wordToComplete*" }} |
        Sort-Object -Property ListItemText
}}
'''

    # Elvish

    @staticmethod
    def _elvish_escape(text: str) -> str:
        return text.replace("'", "''")

    def _generate_elvish(self) -> str:
        bin_name = self.bin_name
        arms: List[str] = []
        for path, spec in _walk(self.grammar):
            key = ";".join((bin_name,) + path[1:])
            cands = []
            for option in spec.options:
                for flag in option.flags:
                    cands.append(f"            cand {flag} '{self._elvish_escape(option.help)}'")
            for sub in spec.subcommands:
                cands.append(f"            cand {sub.name} '{self._elvish_escape(sub.about)}'")
            body = "\n".join(cands)
            arms.append(f"        &'{key}'= {{\n{body}\n        }}")
        arms_block = "\n".join(arms)

        return f'''
use builtin;
use str;

set edit:completion:arg-completer[{bin_name}] = {{|@words|
    fn spaces {{|n|
        builtin:repeat $n ' ' | str:join ''
    }}
    fn cand {{|text desc|
        edit:complex-candidate $text &display=$text' '(spaces (- 14 (wcswidth $text)))$desc
    }}
    var command = '{bin_name}'
    for word $words[1..-1] {{
        if (str:has-prefix $word '-') {{
            break
        }}
        set command = $command';'$word
    }}
    var completions = [
{arms_block}
    ]
    $completions[$command]
}}
'''


def generate_static(
    shell: Union[ShellType, str],
    grammar: CommandSpec,
    bin_name: str,
    buf: BinaryIO
) -> None:
    """
    Write the static completion script for ``shell`` into ``buf`` as UTF-8.

    Raises:
        ValueError: If shell type is not supported
    """
    script = CompletionGenerator(grammar, bin_name).generate(shell)
    buf.write(script.encode("utf-8"))
