from __future__ import annotations

from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Mapping

from . import constants


def _default_presets() -> dict[str, tuple[float, float]]:
    return dict(constants.TERRITORY_PRESETS)


@dataclass(frozen=True)
class EngineSettings:
    """Tunables of the geofence & attendance engine."""

    work_start_hour: int = constants.DEFAULT_WORK_START_HOUR
    late_grace_minutes: int = constants.DEFAULT_LATE_GRACE_MINUTES
    territory_radius_meters: float = constants.DEFAULT_TERRITORY_RADIUS_METERS
    violation_cooldown_seconds: float = constants.DEFAULT_VIOLATION_COOLDOWN_SECONDS
    periodic_interval_seconds: float = constants.DEFAULT_PERIODIC_INTERVAL_SECONDS
    location_timeout_seconds: float = constants.DEFAULT_LOCATION_TIMEOUT_SECONDS
    location_max_age_seconds: float = constants.DEFAULT_LOCATION_MAX_AGE_SECONDS
    presets: Mapping[str, tuple[float, float]] = field(default_factory=_default_presets)


def engine_settings_from(settings: ModuleType | Mapping[str, Any]) -> EngineSettings:
    """Build EngineSettings from a config module (or a dict of overrides)."""

    def get(name: str, default: Any) -> Any:
        if isinstance(settings, Mapping):
            return settings.get(name, default)
        return getattr(settings, name, default)

    return EngineSettings(
        work_start_hour=int(get("WORK_START_HOUR", constants.DEFAULT_WORK_START_HOUR)),
        late_grace_minutes=int(get("LATE_GRACE_MINUTES", constants.DEFAULT_LATE_GRACE_MINUTES)),
        territory_radius_meters=float(get("TERRITORY_RADIUS_METERS", constants.DEFAULT_TERRITORY_RADIUS_METERS)),
        violation_cooldown_seconds=float(
            get("VIOLATION_COOLDOWN_SECONDS", constants.DEFAULT_VIOLATION_COOLDOWN_SECONDS)
        ),
        periodic_interval_seconds=float(
            get("PERIODIC_INTERVAL_SECONDS", constants.DEFAULT_PERIODIC_INTERVAL_SECONDS)
        ),
        location_timeout_seconds=float(get("LOCATION_TIMEOUT_SECONDS", constants.DEFAULT_LOCATION_TIMEOUT_SECONDS)),
        location_max_age_seconds=float(get("LOCATION_MAX_AGE_SECONDS", constants.DEFAULT_LOCATION_MAX_AGE_SECONDS)),
        presets=dict(get("TERRITORY_PRESETS", constants.TERRITORY_PRESETS)),
    )
