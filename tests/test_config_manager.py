"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from collect.config import (
    CollectConfig,
    ConfigError,
    ConfigManager,
    flatten_for_env,
    overrides_from_env,
    resolve_with_precedence,
)


def _fresh_manager(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, env: dict[str, str] | None = None
) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager(env=env or {})


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".collect" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "Collect configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, CollectConfig)
    assert config.index.recent_days == 7


def test_load_respects_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env = {"COLLECT__INDEX__RECENT_DAYS": "14", "COLLECT__DOWNLOAD__TIMEOUT_SECONDS": "5"}
    manager = _fresh_manager(tmp_path, monkeypatch, env=env)
    manager.ensure_exists()
    manager.save({"index": {"recent_days": 3, "recent_limit": 5}, "identity": {"backend": "xattr"}})

    config = manager.load(cli_overrides={"index.recent_days": 30})

    assert config.index.recent_limit == 5
    assert config.identity.backend == "xattr"
    assert config.download.timeout_seconds == pytest.approx(5.0)
    # CLI overrides take precedence over environment
    assert config.index.recent_days == 30


def test_environment_ignored_when_disabled(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch, env={"COLLECT__INDEX__RECENT_DAYS": "14"})

    config = manager.load(include_env=False)

    assert config.index.recent_days == 7


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()

    manager.config_path.write_text("index: [unclosed", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_invalid_values_raise_config_error() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=CollectConfig(), file_overrides={"identity": {"backend": "carrier-pigeon"}}
        )

    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=CollectConfig(), file_overrides={"unknown": {"a": 1}})


def test_overrides_from_env_parses_yaml_scalars() -> None:
    overrides = overrides_from_env(
        {
            "COLLECT__LIBRARY__FOLLOW_SYMLINKS": "true",
            "COLLECT__INDEX__RECENT_DAYS": "10",
            "COLLECT__LIBRARY__SOURCE_DIRECTORY": "~/Papers",
            "UNRELATED": "ignored",
        }
    )

    assert overrides == {
        "library": {"follow_symlinks": True, "source_directory": "~/Papers"},
        "index": {"recent_days": 10},
    }


def test_flatten_for_env_round_trips_through_overrides() -> None:
    config = CollectConfig()
    config.index.recent_days = 21

    flat = flatten_for_env(config)

    assert flat["COLLECT__INDEX__RECENT_DAYS"] == "21"
    assert flat["COLLECT__LIBRARY__SOURCE_DIRECTORY"] == "null"
    rebuilt = resolve_with_precedence(
        defaults=CollectConfig(), env_overrides=overrides_from_env(flat)
    )
    assert rebuilt == config
