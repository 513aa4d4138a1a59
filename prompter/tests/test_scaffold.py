"""
Tests for default config and library scaffolding
"""

from pathlib import Path

from prompter.core.config import load_config
from prompter.core.profiles import ProfileManager
from prompter.core.scaffold import DEFAULT_LIBRARY_FILES, init_scaffold


class TestInitScaffold:
    """Tests for init_scaffold."""

    def test_creates_config_and_library(self, tmp_path: Path):
        config_path = tmp_path / "config" / "config.toml"
        library = tmp_path / "library"

        created, skipped = init_scaffold(config_path, library)

        assert skipped == []
        assert config_path in created
        for rel in DEFAULT_LIBRARY_FILES:
            assert (library / rel).is_file()
            assert library / rel in created

    def test_scaffold_renders(self, tmp_path: Path, monkeypatch):
        """Test the default config resolves against the default library."""
        library = tmp_path / "library"
        monkeypatch.setenv("PROMPTER_LIBRARY", str(library))
        config_path = tmp_path / "config.toml"
        init_scaffold(config_path, library)

        manager = ProfileManager(load_config(config_path))

        assert manager.list_profiles() == ["general.style", "python.api"]
        assert manager.validate() == []
        assert manager.resolve(["python.api"]) == ["general/style.md", "python/api.md"]

    def test_never_overwrites(self, tmp_path: Path):
        config_path = tmp_path / "config.toml"
        config_path.write_text("# mine\n", encoding="utf-8")

        created, skipped = init_scaffold(config_path, tmp_path / "library")

        assert skipped == [config_path]
        assert config_path.read_text(encoding="utf-8") == "# mine\n"
        assert len(created) == len(DEFAULT_LIBRARY_FILES)

    def test_second_run_skips_everything(self, tmp_path: Path):
        config_path = tmp_path / "config.toml"
        library = tmp_path / "library"
        init_scaffold(config_path, library)

        created, skipped = init_scaffold(config_path, library)

        assert created == []
        assert len(skipped) == len(DEFAULT_LIBRARY_FILES) + 1
