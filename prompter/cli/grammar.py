"""
Command grammar for completion generation.

Introspects the typer application into an immutable CommandSpec tree that
the static completion generator consumes.
"""

from dataclasses import dataclass, replace
from typing import Optional, List, Tuple

import typer


PROGRAM_NAME = "prompter"

# `prompter <profile>` is shorthand for `prompter run <profile>`
SHORTHAND_COMMAND = "run"
SHORTHAND_POSITIONAL = "profile"
SHORTHAND_HELP = "Profile to render (shorthand for run <profile>)"

# Help for `run`'s positional; zsh completion matches on this text
RUN_POSITIONAL = "profiles"
RUN_POSITIONAL_HELP = "Profile name(s) to render"

# click.Path reports this as its type name
PATH_TYPE_NAME = "path"


@dataclass(frozen=True)
class OptionSpec:
    """A named option of one command."""

    long: Optional[str]
    short: Optional[str]
    help: str = ""
    takes_value: bool = False
    value_name: str = ""
    value_hint: str = "any"  # "any" or "file"

    @property
    def flags(self) -> List[str]:
        return [flag for flag in (self.short, self.long) if flag]


@dataclass(frozen=True)
class PositionalSpec:
    """A positional argument of one command."""

    name: str
    help: str = ""
    required: bool = False
    multiple: bool = False

    @property
    def placeholder(self) -> str:
        """Usage placeholder, e.g. ``[PROFILE]`` or ``<PROFILES>...``."""
        upper = self.name.upper()
        text = f"<{upper}>" if self.required else f"[{upper}]"
        return f"{text}..." if self.multiple else text


@dataclass(frozen=True)
class CommandSpec:
    """A command with its options, positionals and subcommands."""

    name: str
    about: str = ""
    options: Tuple[OptionSpec, ...] = ()
    positionals: Tuple[PositionalSpec, ...] = ()
    subcommands: Tuple["CommandSpec", ...] = ()

    def subcommand(self, name: str) -> Optional["CommandSpec"]:
        for sub in self.subcommands:
            if sub.name == name:
                return sub
        return None

    def flag_words(self) -> List[str]:
        """All short flags followed by all long flags."""
        shorts = [o.short for o in self.options if o.short]
        longs = [o.long for o in self.options if o.long]
        return shorts + longs

    def value_options(self) -> List[OptionSpec]:
        return [o for o in self.options if o.takes_value]


HELP_OPTION = OptionSpec(long="--help", short="-h", help="Print help")


def _first_line(text: Optional[str]) -> str:
    if not text:
        return ""
    lines = text.strip().splitlines()
    return lines[0].strip() if lines else ""


def _option_spec(param) -> OptionSpec:
    long = next((o for o in param.opts if o.startswith("--")), None)
    short = next((o for o in param.opts if not o.startswith("--") and len(o) == 2), None)
    takes_value = not getattr(param, "is_flag", False)
    return OptionSpec(
        long=long,
        short=short,
        help=_first_line(getattr(param, "help", None)),
        takes_value=takes_value,
        value_name=(param.metavar or (param.name or "").upper()) if takes_value else "",
        value_hint="file" if getattr(param.type, "name", "") == PATH_TYPE_NAME else "any",
    )


def _positional_spec(param) -> PositionalSpec:
    return PositionalSpec(
        name=param.name or "arg",
        help=_first_line(getattr(param, "help", None)),
        required=param.required,
        multiple=param.nargs == -1,
    )


def _command_spec(command, name: str) -> CommandSpec:
    # Parameters and groups are recognised by attribute, not class: typer
    # may build them on its own bundled copy of click.
    user_options: List[OptionSpec] = []
    eager_options: List[OptionSpec] = []
    positionals: List[PositionalSpec] = []

    for param in command.params:
        kind = getattr(param, "param_type_name", None)
        if kind == "option":
            if getattr(param, "hidden", False):
                continue
            target = eager_options if getattr(param, "is_eager", False) else user_options
            target.append(_option_spec(param))
        elif kind == "argument":
            positionals.append(_positional_spec(param))

    subcommands: List[CommandSpec] = []
    for sub_name, sub in (getattr(command, "commands", None) or {}).items():
        if getattr(sub, "hidden", False):
            continue
        subcommands.append(_command_spec(sub, sub_name))

    return CommandSpec(
        name=name,
        about=_first_line(getattr(command, "short_help", None) or command.help),
        options=tuple(user_options + [HELP_OPTION] + eager_options),
        positionals=tuple(positionals),
        subcommands=tuple(subcommands),
    )


def _pin_run_positional(spec: CommandSpec) -> CommandSpec:
    """Give the ``run`` profile positional its fixed help text."""
    positionals = tuple(
        replace(p, help=RUN_POSITIONAL_HELP) if p.name == RUN_POSITIONAL else p
        for p in spec.positionals
    )
    return replace(spec, positionals=positionals)


def build_grammar(
    command,
    name: str = PROGRAM_NAME,
    shorthand: Optional[str] = SHORTHAND_COMMAND
) -> CommandSpec:
    """
    Build a CommandSpec tree from a click command.

    When ``shorthand`` names a subcommand, the root also accepts that
    subcommand's options and a single optional profile positional. The
    subcommand's profile positional always carries ``RUN_POSITIONAL_HELP``,
    whatever help text the installed typer version reports.
    """
    spec = _command_spec(command, name)
    target = spec.subcommand(shorthand) if shorthand else None
    if target is None:
        return spec

    pinned = _pin_run_positional(target)
    borrowed = [o for o in target.options if o != HELP_OPTION and o not in spec.options]
    return CommandSpec(
        name=spec.name,
        about=spec.about,
        options=tuple(borrowed) + spec.options,
        positionals=(PositionalSpec(name=SHORTHAND_POSITIONAL, help=SHORTHAND_HELP),) + spec.positionals,
        subcommands=tuple(pinned if sub is target else sub for sub in spec.subcommands),
    )


def get_grammar() -> CommandSpec:
    """Grammar of the installed prompter CLI."""
    from prompter.cli.main import app

    command = typer.main.get_command(app)
    return build_grammar(command, command.name or PROGRAM_NAME)
