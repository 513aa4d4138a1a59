"""
Dynamic profile completion for generated shell scripts

Rewrites the static scripts from ``generator.py`` so that profile names are
looked up at completion time by running ``prompter list`` from inside the
user's shell. Nothing here runs ``prompter list`` itself; it only emits the
shell code that will.
"""

import logging
from string import Template
from typing import Callable, Dict, Tuple

from prompter.cli.completions.generator import FORMAT_VERSION, ShellType
from prompter.cli.completions.patcher import AnchorSpec
from prompter.cli.grammar import (
    PROGRAM_NAME,
    RUN_POSITIONAL,
    RUN_POSITIONAL_HELP,
    SHORTHAND_HELP,
    SHORTHAND_POSITIONAL
)


logger = logging.getLogger(__name__)

# Generator skeleton versions the anchors below were written against
SUPPORTED_FORMAT_VERSIONS = frozenset({FORMAT_VERSION})


class _ScriptTemplate(Template):
    """Template using ``@{prog}`` so shell ``$`` expansions pass through."""
    delimiter = "@"


def _render(template: str, bin_name: str) -> str:
    return _ScriptTemplate(template).safe_substitute(prog=bin_name)


# Bash

BASH_ROOT_REPLACEMENT = r'''        @{prog})
            opts="-s -p -P -c -h -V --separator --pre-prompt --post-prompt --config --json --help --version version license init list tree validate run completions doctor help"
            if [[ ${cur} == -* ]]; then
                COMPREPLY=( $(compgen -W "${opts}" -- "${cur}") )
                return 0
            fi
            case "${prev}" in
                --config|-c)
                    COMPREPLY=( $(compgen -f -- "${cur}") )
                    return 0
                    ;;
                --separator|-s|--pre-prompt|-p|--post-prompt|-P)
                    return 0
                    ;;
            esac
            local profiles="$(__@{prog}_bash_list_profiles)"
            if [[ -n ${profiles} ]]; then
                COMPREPLY=( $(compgen -W "${opts} ${profiles}" -- "${cur}") )
            else
                COMPREPLY=( $(compgen -W "${opts}" -- "${cur}") )
            fi
            return 0
            ;;
'''

BASH_RUN_REPLACEMENT = r'''        @{prog}__run)
            opts="-s -p -P -c -h --separator --pre-prompt --post-prompt --config --json --help"
            if [[ ${cur} == -* ]]; then
                COMPREPLY=( $(compgen -W "${opts}" -- "${cur}") )
                return 0
            fi
            case "${prev}" in
                --config|-c)
                    COMPREPLY=( $(compgen -f -- "${cur}") )
                    return 0
                    ;;
                --separator|-s|--pre-prompt|-p|--post-prompt|-P)
                    return 0
                    ;;
            esac
            local profiles="$(__@{prog}_bash_list_profiles)"
            if [[ -n ${profiles} ]]; then
                COMPREPLY=( $(compgen -W "${profiles}" -- "${cur}") )
            fi
            return 0
            ;;
'''

BASH_HELPERS = r'''
# Dynamic profile helpers appended by @{prog}.
__@{prog}_bash_config_value() {
    local idx=1
    local total=${#COMP_WORDS[@]}
    while [[ ${idx} -lt ${total} ]]; do
        case "${COMP_WORDS[idx]}" in
            --config|-c)
                if [[ $((idx + 1)) -lt ${total} ]]; then
                    echo "${COMP_WORDS[idx+1]}"
                fi
                return
                ;;
        esac
        ((idx++))
    done
}

__@{prog}_bash_list_profiles() {
    local cfg="$(__@{prog}_bash_config_value)"
    if [[ -n "${cfg}" ]]; then
        @{prog} list --config "${cfg}" 2>/dev/null
    else
        @{prog} list 2>/dev/null
    fi
}
'''


def bash_anchor_specs(bin_name: str = PROGRAM_NAME) -> Tuple[AnchorSpec, AnchorSpec]:
    """Block patches for the root and ``run`` case items."""
    return (
        AnchorSpec.case_block(bin_name, _render(BASH_ROOT_REPLACEMENT, bin_name)),
        AnchorSpec.case_block(f"{bin_name}__run", _render(BASH_RUN_REPLACEMENT, bin_name)),
    )


def augment_bash(script: str, bin_name: str = PROGRAM_NAME) -> str:
    """Patch the root and run blocks, then append the profile helpers."""
    for spec in bash_anchor_specs(bin_name):
        script = spec.apply(script)
    return script + _render(BASH_HELPERS, bin_name)


# Zsh

# Positional specs written by the generator for the root shorthand and `run`
ZSH_ROOT_MARKER = f"::{SHORTHAND_POSITIONAL} -- {SHORTHAND_HELP}:_default"
ZSH_RUN_MARKER = f"*::{RUN_POSITIONAL} -- {RUN_POSITIONAL_HELP}:_default"

ZSH_HELPERS = r'''
_@{prog}_config_value() {
    local idx=1
    local count=$#words
    while (( idx <= count )); do
        case ${words[idx]} in
            --config|-c)
                (( idx++ ))
                if (( idx <= count )); then
                    echo ${words[idx]}
                fi
                return
                ;;
        esac
        (( idx++ ))
    done
}

_@{prog}_dynamic_profiles() {
    local cfg=$(_@{prog}_config_value)
    local -a profiles
    if [[ -n ${cfg} ]]; then
        profiles=(${(f)"$(@{prog} list --config ${cfg:q} 2>/dev/null)"})
    else
        profiles=(${(f)"$(@{prog} list 2>/dev/null)"})
    fi
    if (( ${#profiles} )); then
        compadd -a profiles
        return 0
    fi
    return 1
}
'''


def zsh_dynamic_function(bin_name: str = PROGRAM_NAME) -> str:
    return f"_{bin_name}_dynamic_profiles"


def _redirect_marker(script: str, marker: str, function: str) -> str:
    if marker not in script:
        logger.debug(f"Zsh marker not present, skipping: {marker}")
        return script
    head = marker[: -len(":_default")]
    return script.replace(marker, f"{head}:{function}", 1)


def augment_zsh(script: str, bin_name: str = PROGRAM_NAME) -> str:
    """Point both profile positionals at the dynamic completer."""
    function = zsh_dynamic_function(bin_name)
    script = _redirect_marker(script, ZSH_ROOT_MARKER, function)
    script = _redirect_marker(script, ZSH_RUN_MARKER, function)
    return script + _render(ZSH_HELPERS, bin_name)


# Fish

FISH_HELPERS = r'''
function __fish_@{prog}__config_arg
	set -l tokens (commandline -opc)
	set -e tokens[1]
	for idx in (seq (count $tokens))
		switch $tokens[$idx]
			case '--config' '-c'
				set -l next (math $idx + 1)
				if test $next -le (count $tokens)
					echo $tokens[$next]
				end
				return
		end
	end
end

function __fish_@{prog}__profiles
	set -l cfg (__fish_@{prog}__config_arg)
	if test -n "$cfg"
		@{prog} list --config "$cfg" 2>/dev/null
	else
		@{prog} list 2>/dev/null
	end
end

complete -c @{prog} -n "__fish_@{prog}_needs_command" -f -a "(__fish_@{prog}__profiles)" -d 'Profile'
complete -c @{prog} -n "__fish_@{prog}_using_subcommand run" -f -a "(__fish_@{prog}__profiles)" -d 'Profile'
'''


def augment_fish(script: str, bin_name: str = PROGRAM_NAME) -> str:
    """Append the profile helpers and their two registrations."""
    return script + _render(FISH_HELPERS, bin_name)


AUGMENTERS: Dict[ShellType, Callable[[str, str], str]] = {
    ShellType.BASH: augment_bash,
    ShellType.ZSH: augment_zsh,
    ShellType.FISH: augment_fish,
}


def augment(shell: ShellType, script: str, bin_name: str = PROGRAM_NAME) -> str:
    """Apply the dynamic profile rewrite for ``shell``; other shells pass through."""
    augmenter = AUGMENTERS.get(shell)
    if augmenter is None:
        return script
    return augmenter(script, bin_name)
