"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from collect.cli import cli
from collect.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("COLLECT__")}
    env["HOME"] = str(tmp_path)
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".collect" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "view"], env=env)

    assert result.exit_code == 0
    assert "library:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "index.recent_days", "--value", "14"], env=env)

    assert result.exit_code == 0
    assert "14" in result.output

    manager = ConfigManager(config_path=_config_path(tmp_path), env={})
    assert manager.load().index.recent_days == 14


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "identity.backend", "--value", "punch-cards"], env=env
    )

    assert result.exit_code != 0
    manager = ConfigManager(config_path=_config_path(tmp_path), env={})
    assert manager.load().identity.backend == "auto"


def test_config_edit_applies_changes(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    manager = ConfigManager(config_path=_config_path(tmp_path), env={})
    manager.ensure_exists()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("recent_limit: 3", "recent_limit: 9")

    monkeypatch.setattr("collect.cli.click.edit", _mock_edit)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "updated" in result.output.lower()
    assert manager.load().index.recent_limit == 9


def test_config_edit_cancelled_leaves_file(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    manager = ConfigManager(config_path=_config_path(tmp_path), env={})
    manager.ensure_exists()
    before = manager.read_text()

    monkeypatch.setattr("collect.cli.click.edit", lambda text, **_: None)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "cancelled" in result.output.lower()
    assert manager.read_text() == before


def test_config_view_as_env_prints_assignments(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    env["COLLECT__INDEX__RECENT_DAYS"] = "12"

    result = runner.invoke(cli, ["config", "view", "--as-env"], env=env)

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert "COLLECT__INDEX__RECENT_DAYS=12" in lines
    assert "COLLECT__LIBRARY__SOURCE_DIRECTORY=null" in lines
    assert "COLLECT__IDENTITY__BACKEND=auto" in lines
