import json

import pytest

import pictolaunch.settings as default_settings
from pictolaunch.local.global_config import GlobalSync, coerce_value


@pytest.fixture
def overrides_path(tmp_path, monkeypatch):
    path = tmp_path / "overrides.json"
    monkeypatch.setattr(default_settings, "OVERRIDES_JSON_PATH", path)
    return path


def test_defaults_come_from_settings(overrides_path):
    config = GlobalSync()
    assert config.WEB_SERVER_PORT == default_settings.WEB_SERVER_PORT
    assert config.get("APP_NAME") == "PictoCalc"
    assert config.get("NOT_A_SETTING", "fallback") == "fallback"
    with pytest.raises(AttributeError):
        config.NOT_A_SETTING


def test_overrides_only_apply_to_modifiable_settings(overrides_path):
    overrides_path.write_text(json.dumps({"BROWSER": "firefox", "WEB_SERVER_PORT": 9999}))
    config = GlobalSync()
    assert config.BROWSER == "firefox"
    assert config.WEB_SERVER_PORT == default_settings.WEB_SERVER_PORT


def test_malformed_overrides_are_ignored(overrides_path):
    overrides_path.write_text("[not an object")
    assert GlobalSync().BROWSER == default_settings.BROWSER


def test_update_setting_coerces_and_persists(overrides_path):
    config = GlobalSync()
    ok, _ = config.update_setting("open_browser", "no")
    assert ok
    ok, _ = config.update_setting("READINESS_TIMEOUT", "2.5")
    assert ok

    assert config.OPEN_BROWSER is False
    assert config.READINESS_TIMEOUT == 2.5
    saved = json.loads(overrides_path.read_text())
    assert saved == {"OPEN_BROWSER": False, "READINESS_TIMEOUT": 2.5}
    assert GlobalSync().READINESS_TIMEOUT == 2.5


def test_update_setting_rejects_fixed_and_invalid_values(overrides_path):
    config = GlobalSync()
    ok, message = config.update_setting("WEB_SERVER_PORT", "9000")
    assert not ok
    assert "not modifiable" in message

    ok, _ = config.update_setting("READINESS_TIMEOUT", "soon")
    assert not ok
    assert not overrides_path.exists()


def test_coerce_value():
    assert coerce_value(True, "yes") is True
    assert coerce_value(True, "off") is False
    assert coerce_value(1.0, "3") == 3.0
    assert coerce_value("", 42) == "42"
    assert coerce_value(None, "raw") == "raw"


def test_hand_edited_overrides_are_coerced(overrides_path):
    overrides_path.write_text(json.dumps({
        "OPEN_BROWSER": "false",
        "READINESS_TIMEOUT": "30",
        "GRACEFUL_SHUTDOWN_TIMEOUT": "later",
    }))
    config = GlobalSync()
    assert config.OPEN_BROWSER is False
    assert config.READINESS_TIMEOUT == 30.0
    assert isinstance(config.READINESS_TIMEOUT, float)
    assert config.GRACEFUL_SHUTDOWN_TIMEOUT == default_settings.GRACEFUL_SHUTDOWN_TIMEOUT
