"""Tests for the Config system."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from save_manager.config import Config, get_config, reset_config


@pytest.fixture(autouse=True)
def _clean_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(tmp_path)


class TestConfig:
    def test_default_values(self, config: Config) -> None:
        assert config.per_version_saving is False
        assert config.inherit_version_saves is True
        assert config.cooldown_ticks == 80
        assert config.stray_name_length_threshold == 25
        assert config.max_backups == 0

    def test_set_persists(self, config: Config, tmp_path: Path) -> None:
        config.per_version_saving = True
        assert Config(tmp_path).per_version_saving is True

    def test_batch_update_single_write(self, config: Config, tmp_path: Path) -> None:
        with config.batch_update():
            config.set("per_version_saving", True)
            config.set("max_backups", 3)
            assert not (tmp_path / "config.json").exists()
        data = json.loads((tmp_path / "config.json").read_text(encoding="utf-8"))
        assert data["per_version_saving"] is True
        assert data["max_backups"] == 3

    def test_malformed_file_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "config.json").write_text("{not json", encoding="utf-8")
        assert Config(tmp_path).per_version_saving is False

    def test_dotted_get(self, config: Config) -> None:
        config.set("host.name", "demo")
        assert config.get("host.name") == "demo"
        assert config.get("host.missing", "fallback") == "fallback"


class TestChangeNotification:
    def test_subscribers_see_changes(self, config: Config) -> None:
        seen: list[tuple[str, object]] = []
        config.subscribe(lambda key, value: seen.append((key, value)))
        config.per_version_saving = True
        config.inherit_version_saves = False
        assert seen == [("per_version_saving", True), ("inherit_version_saves", False)]

    def test_unsubscribe(self, config: Config) -> None:
        seen: list[str] = []

        def listener(key: str, value: object) -> None:
            seen.append(key)

        config.subscribe(listener)
        config.unsubscribe(listener)
        config.per_version_saving = True
        assert seen == []


def test_get_config_is_singleton() -> None:
    assert get_config() is get_config()
