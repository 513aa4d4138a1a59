"""
Tests for CLI main module smoke coverage
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

import prompter.cli.main as cli
from prompter import __version__


CONFIG = """\
library = "library"
pre_prompt = ""

[general.style]
depends_on = ["general/style.md"]

[python.api]
depends_on = ["general.style", "python/api.md"]
"""


@pytest.fixture()
def runner() -> CliRunner:
    """Typer test runner."""

    return CliRunner()


def _result_output(result) -> str:
    """Get output from a Typer/CliRunner result across Click versions."""

    return getattr(result, "stdout", None) or getattr(result, "output", "")


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    """Config with two profiles and their library files."""

    library = tmp_path / "library"
    (library / "general").mkdir(parents=True)
    (library / "python").mkdir()
    (library / "general" / "style.md").write_text("STYLE\n", encoding="utf-8")
    (library / "python" / "api.md").write_text("API\n", encoding="utf-8")

    path = tmp_path / "config.toml"
    path.write_text(CONFIG, encoding="utf-8")
    return path


class TestCLIMainSmoke:
    """CLI smoke tests for coverage."""

    def test_version_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli.app, ["version"])
        assert result.exit_code == 0
        assert f"prompter {__version__}" in _result_output(result)

    def test_version_json(self, runner: CliRunner) -> None:
        result = runner.invoke(cli.app, ["version", "--json"])
        assert result.exit_code == 0
        assert json.loads(_result_output(result)) == {"name": "prompter", "version": __version__}

    def test_version_flag(self, runner: CliRunner) -> None:
        result = runner.invoke(cli.app, ["-V"])
        assert result.exit_code == 0
        assert _result_output(result).strip() == f"prompter {__version__}"

    def test_license(self, runner: CliRunner) -> None:
        result = runner.invoke(cli.app, ["license"])
        assert result.exit_code == 0
        assert "MIT License" in _result_output(result)

    def test_help_command(self, runner: CliRunner) -> None:
        result = runner.invoke(cli.app, ["help"])
        assert result.exit_code == 0
        assert "completions" in _result_output(result)

    def test_list(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli.app, ["list", "--config", str(config_file)])
        assert result.exit_code == 0
        assert _result_output(result).splitlines() == ["general.style", "python.api"]

    def test_list_json(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli.app, ["list", "-c", str(config_file), "--json"])
        assert result.exit_code == 0
        assert json.loads(_result_output(result)) == ["general.style", "python.api"]

    def test_list_missing_config_errors(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli.app, ["list", "--config", str(tmp_path / "nope.toml")])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_tree(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli.app, ["tree", "-c", str(config_file)])
        assert result.exit_code == 0
        assert "└── python/api.md" in _result_output(result)

    def test_tree_json(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli.app, ["tree", "-c", str(config_file), "--json"])
        assert result.exit_code == 0
        assert [node["name"] for node in json.loads(_result_output(result))] == ["general.style", "python.api"]

    def test_validate_ok(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli.app, ["validate", "-c", str(config_file), "--json"])
        assert result.exit_code == 0
        assert json.loads(_result_output(result)) == {"valid": True, "errors": []}

    def test_validate_failure_exits_nonzero(self, runner: CliRunner, config_file: Path) -> None:
        (config_file.parent / "library" / "python" / "api.md").unlink()

        result = runner.invoke(cli.app, ["validate", "-c", str(config_file)])
        assert result.exit_code == 1

    def test_run(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli.app, ["run", "python.api", "-c", str(config_file)])
        assert result.exit_code == 0
        assert _result_output(result) == "STYLE\n\nAPI\n"

    def test_run_options(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(
            cli.app,
            ["run", "python.api", "-c", str(config_file), "-s", "~~\n", "-p", "PRE\n", "-P", "POST\n"],
        )
        assert result.exit_code == 0
        assert _result_output(result) == "PRE\nSTYLE\n~~\nAPI\nPOST\n"

    def test_run_json(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli.app, ["run", "general.style", "-c", str(config_file), "--json"])
        assert result.exit_code == 0
        assert json.loads(_result_output(result)) == {
            "profiles": ["general.style"],
            "files": ["general/style.md"],
            "output": "STYLE\n",
        }

    def test_run_unknown_profile_errors(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli.app, ["run", "nope", "-c", str(config_file)])
        assert result.exit_code == 1
        assert "Unknown profile" in result.output

    def test_run_requires_profile(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli.app, ["run", "-c", str(config_file)])
        assert result.exit_code == 1

    def test_completions_bash(self, runner: CliRunner) -> None:
        result = runner.invoke(cli.app, ["completions", "bash"])
        assert result.exit_code == 0
        out = _result_output(result)
        assert out.startswith("# Shell completion for prompter\n")
        assert "__prompter_bash_list_profiles" in out

    def test_completions_unknown_shell(self, runner: CliRunner) -> None:
        result = runner.invoke(cli.app, ["completions", "tcsh"])
        assert result.exit_code == 2

    def test_completions_failure_exits_one(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        import prompter.cli.completions.script as script_module

        monkeypatch.setattr(script_module, "SUPPORTED_FORMAT_VERSIONS", frozenset())

        result = runner.invoke(cli.app, ["completions", "zsh"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_doctor_json(self, runner: CliRunner, config_file: Path) -> None:
        result = runner.invoke(cli.app, ["doctor", "-c", str(config_file), "--json"])
        assert result.exit_code == 0
        assert json.loads(_result_output(result))["config_valid_toml"] is True

    def test_init(self, runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PROMPTER_CONFIG", str(tmp_path / "config.toml"))
        monkeypatch.setenv("PROMPTER_LIBRARY", str(tmp_path / "library"))

        result = runner.invoke(cli.app, ["init"])
        assert result.exit_code == 0
        assert (tmp_path / "config.toml").is_file()
        assert (tmp_path / "library" / "general" / "style.md").is_file()


class TestMainEntrypoint:
    """Tests for the shorthand rewrite in main()."""

    @pytest.fixture()
    def captured(self, monkeypatch: pytest.MonkeyPatch) -> list:
        calls = []
        monkeypatch.setattr(cli, "app", lambda: calls.append(list(sys.argv)))
        monkeypatch.setattr(cli, "init_logging", lambda: None)
        return calls

    @pytest.mark.parametrize(
        "argv,expected",
        [
            (["prompter", "python.api"], ["prompter", "run", "python.api"]),
            (["prompter", "-s", "x", "a"], ["prompter", "run", "-s", "x", "a"]),
            (["prompter", "list"], ["prompter", "list"]),
            (["prompter", "--help"], ["prompter", "--help"]),
            (["prompter", "-V"], ["prompter", "-V"]),
            (["prompter"], ["prompter"]),
        ],
    )
    def test_shorthand(self, monkeypatch: pytest.MonkeyPatch, captured: list, argv, expected) -> None:
        monkeypatch.setattr(sys, "argv", list(argv))
        cli.main()
        assert captured == [expected]

    def test_root_commands_match_registered(self) -> None:
        assert cli.ROOT_COMMANDS == [info.name for info in cli.app.registered_commands]
