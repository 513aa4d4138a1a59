"""
Tests for prompter configuration loading
"""

import pytest
from pathlib import Path

from prompter.core.config import (
    ConfigError,
    ConfigManager,
    PrompterConfig,
    DEFAULT_CONFIG_PATH,
    default_config_path,
    default_library_path,
    load_config,
)


@pytest.fixture()
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point HOME at a temp dir and clear PROMPTER_* overrides."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("PROMPTER_CONFIG", raising=False)
    monkeypatch.delenv("PROMPTER_LIBRARY", raising=False)
    return tmp_path


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaultPaths:
    """Tests for default path resolution."""

    def test_default_config_path(self, isolated_env: Path):
        assert default_config_path() == isolated_env / ".config" / "prompter" / "config.toml"
        assert DEFAULT_CONFIG_PATH == Path("~/.config/prompter/config.toml")

    def test_default_library_path(self, isolated_env: Path):
        assert default_library_path() == isolated_env / ".local" / "prompter" / "library"

    def test_env_overrides(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PROMPTER_CONFIG", "/etc/prompter.toml")
        monkeypatch.setenv("PROMPTER_LIBRARY", "/srv/library")

        assert default_config_path() == Path("/etc/prompter.toml")
        assert default_library_path() == Path("/srv/library")
        assert ConfigManager().config_path == Path("/etc/prompter.toml")


class TestConfigManagerLoad:
    """Tests for ConfigManager.load."""

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError) as excinfo:
            ConfigManager(tmp_path / "nope.toml").load()
        assert "not found" in str(excinfo.value)

    def test_invalid_toml(self, tmp_path: Path):
        path = _write(tmp_path / "config.toml", "[broken\n")

        with pytest.raises(ConfigError) as excinfo:
            load_config(path)
        assert "Invalid TOML" in str(excinfo.value)

    def test_settings_and_profiles(self, tmp_path: Path):
        path = _write(
            tmp_path / "config.toml",
            'library = "lib"\n'
            'pre_prompt = "PRE"\n'
            'separator = "---"\n'
            "\n"
            "[general.style]\n"
            'depends_on = ["general/style.md"]\n'
            "\n"
            "[python.api]\n"
            'depends_on = ["general.style", "python/api.md"]\n'
            "\n"
            "[solo]\n"
            "depends_on = []\n",
        )

        config = load_config(path)

        assert isinstance(config, PrompterConfig)
        assert config.config_path == path
        assert config.library == tmp_path / "lib"
        assert config.pre_prompt == "PRE"
        assert config.post_prompt is None
        assert config.separator == "---"
        assert config.profiles == {
            "general.style": ["general/style.md"],
            "python.api": ["general.style", "python/api.md"],
            "solo": [],
        }
        assert config.profile_names() == ["general.style", "python.api", "solo"]

    def test_absolute_library(self, tmp_path: Path):
        library = tmp_path / "elsewhere"
        path = _write(tmp_path / "config.toml", f'library = "{library.as_posix()}"\n')

        assert load_config(path).library == library

    def test_library_defaults(self, isolated_env: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PROMPTER_LIBRARY", str(isolated_env / "envlib"))
        path = _write(isolated_env / "config.toml", "")

        assert load_config(path).library == isolated_env / "envlib"

    def test_to_dict(self, tmp_path: Path):
        path = _write(tmp_path / "config.toml", '[a]\ndepends_on = ["a.md"]\n')
        data = load_config(path).to_dict()

        assert data["config_path"] == str(path)
        assert data["profiles"] == {"a": ["a.md"]}


class TestConfigManagerParse:
    """Tests for malformed configuration data."""

    @pytest.fixture()
    def manager(self, tmp_path: Path) -> ConfigManager:
        return ConfigManager(tmp_path / "config.toml")

    def test_setting_must_be_string(self, manager: ConfigManager):
        with pytest.raises(ConfigError) as excinfo:
            manager.parse({"separator": 3})
        assert "separator" in str(excinfo.value)

    def test_unexpected_top_level_key(self, manager: ConfigManager):
        with pytest.raises(ConfigError):
            manager.parse({"colour": "blue"})

    def test_depends_on_must_be_string_list(self, manager: ConfigManager):
        with pytest.raises(ConfigError) as excinfo:
            manager.parse({"a": {"depends_on": "a.md"}})
        assert "depends_on" in str(excinfo.value)

        with pytest.raises(ConfigError):
            manager.parse({"a": {"depends_on": [1, 2]}})

    def test_stray_key_in_namespace_table(self, manager: ConfigManager):
        with pytest.raises(ConfigError):
            manager.parse({"general": {"style": {"depends_on": []}, "note": "x"}})

    def test_nested_profiles(self, manager: ConfigManager):
        config = manager.parse({
            "a": {"depends_on": ["a.md"], "b": {"depends_on": ["a"]}},
        })
        assert config.profiles == {"a": ["a.md"], "a.b": ["a"]}
