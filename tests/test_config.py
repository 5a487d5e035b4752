import pytest

import config.development
from config import get_settings_module
from src.geosales.geosales.core import constants
from src.geosales.geosales.core.settings import engine_settings_from


@pytest.mark.parametrize(
    "env,expected",
    [
        ("production", "config.production"),
        ("PROD", "config.production"),
        ("testing", "config.testing"),
        ("test", "config.testing"),
        ("development", "config.development"),
        ("staging", "config.development"),
    ],
)
def test_settings_module_follows_app_env(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)
    assert get_settings_module() == expected


def test_settings_default_to_development(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    assert get_settings_module() == "config.development"


def test_engine_settings_from_mapping_overrides_defaults():
    engine = engine_settings_from({"WORK_START_HOUR": "9", "VIOLATION_COOLDOWN_SECONDS": 60})
    assert engine.work_start_hour == 9
    assert engine.violation_cooldown_seconds == 60.0
    assert engine.late_grace_minutes == constants.DEFAULT_LATE_GRACE_MINUTES
    assert engine.presets == constants.TERRITORY_PRESETS


def test_engine_settings_from_module():
    engine = engine_settings_from(config.development)
    assert engine.territory_radius_meters == config.development.TERRITORY_RADIUS_METERS
