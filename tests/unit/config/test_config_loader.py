"""Unit tests for sandpatch.config loading and schema validation."""

import json
from pathlib import Path

import pytest

from sandpatch.config import load_config
from sandpatch.config.loader import read_config_file
from sandpatch.config.schema import Config, SecurityConfig, StoreConfig
from sandpatch.core.errors import ConfigError, LoadError


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point Path.home() at an empty directory so no real user config leaks in."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    return home


def _write_config(directory: Path, data: dict) -> Path:
    config_dir = directory / ".sandpatch"
    config_dir.mkdir(parents=True, exist_ok=True)
    path = config_dir / "config.json"
    path.write_text(json.dumps(data))
    return path


class TestDefaults:
    def test_defaults(self) -> None:
        config = Config()

        assert "ai-web-ide-*" in config.security.allowed_identity_patterns
        assert "/app" in config.security.allowed_roots
        assert "/etc" in config.security.restricted_prefixes
        assert config.security.require_identity is True
        assert config.patch.strict_parse is False
        assert config.store.backend == "local"
        assert config.audit.logger_name == "sandpatch.audit"

    def test_to_policy(self) -> None:
        policy = SecurityConfig(allowed_roots=["/app/"], restricted_prefixes=[]).to_policy()

        assert policy.allowed_roots == frozenset({"/app"})
        assert policy.restricted_prefixes == frozenset()
        assert policy.require_identity is True


class TestSchemaValidation:
    def test_relative_root_rejected(self) -> None:
        with pytest.raises(ValueError, match="must be absolute"):
            SecurityConfig(allowed_roots=["app"])

    def test_blank_pattern_rejected(self) -> None:
        with pytest.raises(ValueError, match="must not be blank"):
            SecurityConfig(allowed_identity_patterns=["  "])

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValueError):
            Config.model_validate({"security": {"allowed_root": ["/app"]}})

    def test_unknown_backend_rejected(self) -> None:
        with pytest.raises(ValueError):
            StoreConfig(backend="ssh")

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            StoreConfig(exec_timeout=0)


class TestLoadConfig:
    def test_no_files_gives_defaults(self, home: Path, tmp_path: Path) -> None:
        project = tmp_path / "project"
        project.mkdir()

        assert load_config(cwd=project) == Config()

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"patch": {"dry_run": True}}))

        config = load_config(path)

        assert config.patch.dry_run is True

    def test_explicit_path_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="File not found"):
            load_config(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(path)

    def test_non_object_json(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")

        with pytest.raises(ConfigError, match="Expected object"):
            load_config(path)

    def test_validation_error(self, tmp_path: Path) -> None:
        path = tmp_path / "invalid.json"
        path.write_text(json.dumps({"security": {"allowed_roots": ["relative"]}}))

        with pytest.raises(ConfigError, match="Config validation failed"):
            load_config(path)

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.json"
        path.write_text("")

        assert load_config(path) == Config()

    def test_local_overrides_global(self, home: Path, tmp_path: Path) -> None:
        _write_config(
            home,
            {
                "security": {"allowed_roots": ["/app", "/workspace"], "require_identity": False},
                "store": {"backend": "container"},
            },
        )
        project = tmp_path / "project"
        _write_config(project, {"security": {"allowed_roots": ["/app/workspace"]}})

        config = load_config(cwd=project)

        # Lists are replaced, sibling keys survive
        assert config.security.allowed_roots == ["/app/workspace"]
        assert config.security.require_identity is False
        assert config.store.backend == "container"

    def test_invalid_layer_reported(self, home: Path, tmp_path: Path) -> None:
        (home / ".sandpatch").mkdir()
        (home / ".sandpatch" / "config.json").write_text("{oops")

        with pytest.raises(ConfigError, match="Invalid JSON"):
            load_config(cwd=tmp_path)

    def test_merged_validation_error_names_sources(self, home: Path, tmp_path: Path) -> None:
        project = tmp_path / "project"
        _write_config(project, {"store": {"exec_timeout": -1}})

        with pytest.raises(ConfigError, match="merged from"):
            load_config(cwd=project)


class TestReadConfigFile:
    def test_bom_tolerated(self, tmp_path: Path) -> None:
        path = tmp_path / "bom.json"
        path.write_bytes(b"\xef\xbb\xbf" + json.dumps({"audit": {"enabled": False}}).encode())

        assert read_config_file(path) == {"audit": {"enabled": False}}

    def test_whitespace_only_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "blank.json"
        path.write_text("  \n")

        assert read_config_file(path) == {}

    def test_missing_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(LoadError, match="File not found"):
            read_config_file(tmp_path / "nope.json")
