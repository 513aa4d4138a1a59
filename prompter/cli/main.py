"""
prompter CLI - Command Line Interface

Composes reusable prompt snippets from a TOML-configured library.
"""

import typer
import sys
import json
from typing import Optional, List
from pathlib import Path
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from prompter import __version__, __license__
from prompter.core.config import ConfigError, load_config
from prompter.core.profiles import ProfileError, ProfileManager, format_tree
from prompter.core.logging_setup import init_logging
from prompter.cli.completions.generator import ShellType
from prompter.cli.grammar import RUN_POSITIONAL_HELP


app = typer.Typer(
    name="prompter",
    help="prompter - compose reusable prompt snippets into one prompt",
    add_completion=False,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()
err_console = Console(stderr=True)

# First-position words that are not profile names
ROOT_COMMANDS = [
    "version", "license", "init", "list", "tree", "validate",
    "run", "completions", "doctor", "help",
]
ROOT_FLAGS = ["-h", "--help", "-V", "--version"]

LICENSE_TEXT = """\
MIT License

Copyright (c) tftio

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
SOFTWARE.
"""


def fail(message) -> None:
    """Print an error to stderr and exit with status 1."""
    err_console.print(f"[red]Error:[/red] {escape(str(message))}", style="bold")
    sys.exit(1)


def _version_callback(value: bool):
    if value:
        typer.echo(f"prompter {__version__}")
        raise typer.Exit()


@app.callback()
def cli(
    version: bool = typer.Option(
        False, "--version", "-V", help="Print version",
        callback=_version_callback, is_eager=True
    ),
):
    """
    prompter - compose reusable prompt snippets into one prompt.

    `prompter <profile>...` is shorthand for `prompter run <profile>...`.
    """


@app.command(name="version")
def show_version(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show version information"""
    if json_output:
        typer.echo(json.dumps({"name": "prompter", "version": __version__}))
        return
    typer.echo(f"prompter {__version__}")


@app.command(name="license")
def show_license():
    """Show license information"""
    typer.echo(f"License: {__license__}\n")
    typer.echo(LICENSE_TEXT, nl=False)


@app.command(name="init")
def init_config():
    """Create a default config and library"""
    from prompter.core.scaffold import init_scaffold

    try:
        created, skipped = init_scaffold()
    except OSError as e:
        fail(f"Failed to initialize: {e}")

    for path in created:
        console.print(f"[green]✓[/green] Created {path}")
    for path in skipped:
        console.print(f"[yellow]-[/yellow] Exists, left unchanged: {path}")


def _load_manager(config: Optional[Path]) -> ProfileManager:
    try:
        return ProfileManager(load_config(config))
    except ConfigError as e:
        fail(e)


@app.command(name="list")
def list_profiles(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List available profiles"""
    manager = _load_manager(config)
    names = manager.list_profiles()

    if json_output:
        typer.echo(json.dumps(names, indent=2))
        return
    for name in names:
        typer.echo(name)


@app.command(name="tree")
def show_tree(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show profile dependency trees"""
    manager = _load_manager(config)
    nodes = manager.tree()

    if json_output:
        typer.echo(json.dumps([node.to_dict() for node in nodes], indent=2))
        return
    if nodes:
        typer.echo(format_tree(nodes))


@app.command(name="validate")
def validate_profiles(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Validate profiles and library files"""
    manager = _load_manager(config)
    errors = manager.validate()

    if json_output:
        typer.echo(json.dumps({"valid": not errors, "errors": errors}, indent=2))
    elif errors:
        err_console.print(f"[red]Validation failed ({len(errors)} errors):[/red]")
        for error in errors:
            err_console.print(f"  [red]-[/red] {escape(error)}")
    else:
        console.print("[green]✓[/green] All profiles are valid")

    if errors:
        sys.exit(1)


@app.command(name="run")
def run_profiles(
    profiles: List[str] = typer.Argument(None, help=RUN_POSITIONAL_HELP),
    separator: Optional[str] = typer.Option(None, "--separator", "-s", help="Text placed between files"),
    pre_prompt: Optional[str] = typer.Option(None, "--pre-prompt", "-p", help="Text placed before all files"),
    post_prompt: Optional[str] = typer.Option(None, "--post-prompt", "-P", help="Text placed after all files"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Render one or more profiles"""
    if not profiles:
        fail("At least one profile is required")

    manager = _load_manager(config)
    try:
        result = manager.render(
            list(profiles),
            separator=separator,
            pre_prompt=pre_prompt,
            post_prompt=post_prompt,
        )
    except ProfileError as e:
        fail(e)

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return
    typer.echo(result.output, nl=False)


@app.command(name="completions")
def completions_cmd(
    shell: ShellType = typer.Argument(..., help="Shell to generate completions for"),
):
    """
    Generate shell completions.

    Examples:

      # Bash, current session
      source <(prompter completions bash)

      # Zsh
      prompter completions zsh > ~/.zsh/completions/_prompter
    """
    from prompter.cli.completions import CompletionError, generate

    try:
        generate(shell)
    except CompletionError as e:
        fail(e)


@app.command(name="doctor")
def doctor_cmd(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Check configuration health"""
    from prompter.core.doctor import run_checks

    report = run_checks(config_path=config.expanduser() if config else None)

    if json_output:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        table = Table(title="prompter doctor", show_header=True, header_style="bold magenta")
        table.add_column("Check", style="cyan")
        table.add_column("Status")
        table.add_column("Detail", style="dim")

        def status(ok: bool) -> str:
            return "[green]✓[/green]" if ok else "[red]✗[/red]"

        table.add_row("Config file", status(report.config_file_exists), report.config_path)
        table.add_row("Config TOML", status(report.config_valid_toml), "")
        table.add_row("Library", status(report.library_directory_exists), report.library_path)
        console.print(table)

        for warning in report.warnings:
            console.print(f"[yellow]Warning:[/yellow] {escape(warning)}")
        for error in report.errors:
            err_console.print(f"[red]Error:[/red] {escape(error)}")

    if not report.healthy:
        sys.exit(1)


@app.command(name="help")
def show_help(ctx: typer.Context):
    """Print this message"""
    typer.echo(ctx.parent.get_help() if ctx.parent else ctx.get_help())


def main():
    """Main entry point."""
    init_logging()

    # A first argument that is not a command or global flag is a profile
    if len(sys.argv) > 1 and sys.argv[1] not in ROOT_COMMANDS + ROOT_FLAGS:
        sys.argv.insert(1, "run")

    app()


if __name__ == "__main__":
    main()
