"""Tests for settings loading and validation."""

import json

from settings import load_settings, settings_path


def write(tmp_path, payload) -> str:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


def test_missing_file_gives_defaults(tmp_path) -> None:
    settings = load_settings(str(tmp_path / "none.json"))
    assert settings == {
        "holiday_file": "holidays.conf",
        "verbose": "v",
        "log_file": None,
        "max_check_interval": 3600,
        "wake_poll_interval": 60,
    }


def test_valid_values_are_used(tmp_path) -> None:
    path = write(tmp_path, {
        "holiday_file": "/etc/jp.conf", "verbose": "vvv", "log_file": "cal.log",
        "max_check_interval": 900, "wake_poll_interval": 15,
    })
    settings = load_settings(path)
    assert settings["holiday_file"] == "/etc/jp.conf"
    assert settings["verbose"] == "vvv"
    assert settings["log_file"] == "cal.log"
    assert settings["max_check_interval"] == 900
    assert settings["wake_poll_interval"] == 15


def test_invalid_values_fall_back(tmp_path) -> None:
    path = write(tmp_path, {
        "holiday_file": 3, "verbose": None, "log_file": "",
        "max_check_interval": 0, "wake_poll_interval": True,
    })
    settings = load_settings(path)
    assert settings["holiday_file"] == "holidays.conf"
    assert settings["verbose"] == "v"
    assert settings["log_file"] is None
    assert settings["max_check_interval"] == 3600
    assert settings["wake_poll_interval"] == 60


def test_malformed_json_gives_defaults(tmp_path, caplog) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_settings(str(path))["max_check_interval"] == 3600
    assert "Ignoring settings file" in caplog.text


def test_non_object_gives_defaults(tmp_path) -> None:
    assert load_settings(write(tmp_path, [1, 2]))["verbose"] == "v"


def test_env_overrides_path(monkeypatch, tmp_path) -> None:
    path = write(tmp_path, {"verbose": ""})
    monkeypatch.setenv("CROSSOVER_CALENDAR_SETTINGS", path)
    assert settings_path() == path
    assert load_settings()["verbose"] == ""
