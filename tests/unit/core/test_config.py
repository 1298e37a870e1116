"""
Unit Tests for Configuration Management.

Black box tests against the public interface of config.py.
Tests run against the real project files (YAML configs).
Failure scenarios use tmp_path to create controlled filesystems.
No mocking. The config loader is the system under test.
"""

from pathlib import Path

import pytest

from webnotes.core.config import (
    AppConfig,
    Settings,
    find_project_root,
    get_app_config,
    get_remote_base_url,
    get_settings,
    load_yaml_config,
    resolve_project_path,
    validate_project_root,
)
from webnotes.core.config_schema import (
    ApplicationSchema,
    LoggingSchema,
    RemoteSchema,
    RetrySchema,
    StorageSchema,
)


@pytest.fixture(autouse=True)
def _clear_config_cache():
    """Clear lru_cache between tests so each test gets a fresh load."""
    get_settings.cache_clear()
    get_app_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_app_config.cache_clear()


def _write_project(root: Path, **files: str) -> None:
    (root / ".project_root").touch()
    settings_dir = root / "config" / "settings"
    settings_dir.mkdir(parents=True)
    for name, text in files.items():
        (settings_dir / name.replace("_yaml", ".yaml")).write_text(text)


# =============================================================================
# find_project_root
# =============================================================================


class TestFindProjectRoot:
    """Tests for .project_root marker discovery."""

    def test_finds_root_from_project_directory(self):
        root = find_project_root()
        assert root.is_dir()
        assert (root / ".project_root").exists()

    def test_config_directory_exists_at_root(self):
        root = find_project_root()
        assert (root / "config" / "settings").is_dir()

    def test_finds_root_from_subdirectory(self, tmp_path, monkeypatch):
        (tmp_path / ".project_root").touch()
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert find_project_root() == tmp_path

    def test_raises_when_no_marker_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(RuntimeError, match="Project root not found"):
            find_project_root()


class TestValidateProjectRoot:
    """Tests for the SystemExit wrapper around find_project_root."""

    def test_returns_path_when_marker_exists(self):
        root = validate_project_root()
        assert (root / ".project_root").exists()

    def test_exits_when_marker_missing(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(SystemExit):
            validate_project_root()


class TestResolveProjectPath:
    def test_relative_path_is_under_root(self):
        assert resolve_project_path("data") == find_project_root() / "data"

    def test_absolute_path_is_unchanged(self, tmp_path):
        assert resolve_project_path(str(tmp_path)) == tmp_path

    def test_home_path_is_expanded(self):
        resolved = resolve_project_path("~/webnotes")
        assert resolved.is_absolute()
        assert resolved.name == "webnotes"


# =============================================================================
# load_yaml_config
# =============================================================================


class TestLoadYamlConfig:
    """Tests for YAML file loading from config/settings/."""

    def test_loads_all_config_files(self):
        """Every expected YAML file should be loadable."""
        for filename in ["application.yaml", "storage.yaml", "remote.yaml", "logging.yaml"]:
            data = load_yaml_config(filename)
            assert isinstance(data, dict), f"{filename} did not return a dict"
            assert len(data) > 0, f"{filename} returned empty dict"

    def test_raises_for_nonexistent_file(self):
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_yaml_config("does_not_exist.yaml")

    def test_returns_empty_dict_for_empty_yaml(self, tmp_path, monkeypatch):
        """An empty YAML file should return {} rather than None."""
        _write_project(tmp_path, empty_yaml="")
        monkeypatch.chdir(tmp_path)

        assert load_yaml_config("empty.yaml") == {}


# =============================================================================
# Settings (secrets from .env)
# =============================================================================


class TestSettings:
    """Tests for secret loading from config/.env."""

    def test_defaults_without_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("REMOTE_SESSION_TOKEN", raising=False)
        monkeypatch.delenv("REMOTE_SESSION_COOKIE", raising=False)

        settings = Settings(_env_file=str(tmp_path / "missing.env"))

        assert settings.remote_session_token == ""
        assert settings.remote_session_cookie == "authjs.session-token"

    def test_reads_env_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("REMOTE_SESSION_TOKEN", raising=False)
        monkeypatch.delenv("REMOTE_SESSION_COOKIE", raising=False)
        env = tmp_path / ".env"
        env.write_text("REMOTE_SESSION_TOKEN=abc123\nREMOTE_SESSION_COOKIE=sid\n")

        settings = Settings(_env_file=str(env))

        assert settings.remote_session_token == "abc123"
        assert settings.remote_session_cookie == "sid"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


# =============================================================================
# AppConfig
# =============================================================================


class TestAppConfig:
    """Tests for the validated YAML configuration."""

    def test_sections_are_typed(self):
        config = AppConfig()
        assert isinstance(config.application, ApplicationSchema)
        assert isinstance(config.storage, StorageSchema)
        assert isinstance(config.remote, RemoteSchema)
        assert isinstance(config.logging, LoggingSchema)

    def test_storage_keys_from_yaml(self):
        keys = AppConfig().storage.keys
        assert keys.notes == "webnotes_notes_v1"
        assert keys.folders == "webnotes_folders_v1"
        assert keys.settings == "webnotes_settings_v1"
        assert keys.migrated == "webnotes_migrated"

    def test_default_retry_is_single_attempt(self):
        assert AppConfig().remote.retry.max_attempts == 1

    def test_get_app_config_is_cached(self):
        assert get_app_config() is get_app_config()

    def test_unknown_key_is_rejected(self, tmp_path, monkeypatch):
        _write_project(
            tmp_path,
            application_yaml="name: x\nversion: '1'\ndescription: d\nenvironment: test\nport: 1\n",
        )
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ValueError, match="Invalid configuration in application.yaml"):
            AppConfig()

    def test_retry_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            RetrySchema(max_attempts=0)


class TestRemoteBaseUrl:
    def test_joins_base_url_and_prefix(self):
        remote = RemoteSchema(
            enabled=True,
            base_url="https://notes.example.com/",
            api_prefix="/api/",
            session_path="/auth/session",
            timeout_seconds=7,
        )
        assert get_remote_base_url(remote) == ("https://notes.example.com/api", 7.0)

    def test_empty_prefix(self):
        remote = RemoteSchema(
            enabled=True,
            base_url="https://notes.example.com",
            api_prefix="",
            session_path="/auth/session",
            timeout_seconds=3,
        )
        assert get_remote_base_url(remote)[0] == "https://notes.example.com"

    def test_reads_remote_yaml_by_default(self):
        base_url, timeout = get_remote_base_url()
        assert base_url.startswith("http")
        assert timeout > 0
