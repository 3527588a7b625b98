"""
Tests for configuration loading — brewkeeper.yml.
"""

import textwrap
from pathlib import Path

import pytest

from brewkeeper.core.config.loader import ConfigError, find_config_file, load_config
from brewkeeper.core.models.dependency import Category


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "brewkeeper.yml"
    path.write_text(textwrap.dedent(content))
    return path


class TestFindConfigFile:
    def test_found_in_parent(self, tmp_path: Path):
        _write(tmp_path, "homebrew: {root: /opt/homebrew}\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == (tmp_path / "brewkeeper.yml").resolve()

    def test_not_found(self, tmp_path: Path):
        assert find_config_file(tmp_path) is None


class TestLoadConfig:
    def test_full_config(self, tmp_path: Path):
        path = _write(tmp_path, """\
            homebrew:
              root: homebrew
              timeout: 600
            datastore:
              type: json
              path: db/installed.json
            brew:
              - git
              - homebrew:wget:1.21
            cask:
              - firefox
        """)
        config = load_config(path)

        assert config.homebrew_root == tmp_path.resolve() / "homebrew"
        assert config.homebrew.timeout == 600
        assert config.state_path == tmp_path.resolve() / "db" / "installed.json"

        formula = config.collection(Category.FORMULA)
        assert {d.coordinate for d in formula.dependencies} == {
            "brew:git:latest",
            "homebrew:wget:1.21",
        }
        assert {d.name for d in config.collection(Category.CASK).dependencies} == {"firefox"}

    def test_absolute_root_kept(self, tmp_path: Path):
        path = _write(tmp_path, "homebrew:\n  root: /opt/homebrew\n")
        config = load_config(path)
        assert config.homebrew_root == Path("/opt/homebrew")
        assert config.datastore.type == "json"
        assert config.state_path is None

    def test_empty_lists(self, tmp_path: Path):
        path = _write(tmp_path, """\
            homebrew:
              root: /opt/homebrew
            brew:
            cask:
        """)
        config = load_config(path)
        assert config.brew == []
        assert config.cask == []

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.yml")

    def test_invalid_yaml(self, tmp_path: Path):
        path = _write(tmp_path, "homebrew: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = _write(tmp_path, "- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_missing_homebrew_root(self, tmp_path: Path):
        path = _write(tmp_path, "brew: [git]\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_unknown_datastore(self, tmp_path: Path):
        path = _write(tmp_path, """\
            homebrew: {root: /opt/homebrew}
            datastore: {type: h2}
        """)
        with pytest.raises(ConfigError):
            load_config(path)

    def test_bad_dependency_notation(self, tmp_path: Path):
        path = _write(tmp_path, """\
            homebrew: {root: /opt/homebrew}
            cask:
              - "a:b:c:d"
        """)
        with pytest.raises(ConfigError, match="cask"):
            load_config(path)

    def test_same_package_declared_twice(self, tmp_path: Path):
        path = _write(tmp_path, """\
            homebrew: {root: /opt/homebrew}
            brew:
              - git
              - homebrew:git:2.44
        """)
        with pytest.raises(ConfigError, match="declared twice"):
            load_config(path)
