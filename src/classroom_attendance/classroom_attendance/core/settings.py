from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from types import ModuleType

from . import constants


@dataclass(frozen=True)
class CheckInSettings:
    """Typed view over the check-in related values of a settings module."""

    grace_before_minutes: int = constants.DEFAULT_GRACE_BEFORE_MINUTES
    late_threshold_minutes: int = constants.DEFAULT_LATE_THRESHOLD_MINUTES
    token_rotation_seconds: int = constants.DEFAULT_TOKEN_ROTATION_SECONDS
    location_timeout_seconds: float = constants.DEFAULT_LOCATION_TIMEOUT_SECONDS
    location_max_age_seconds: int = constants.DEFAULT_LOCATION_MAX_AGE_SECONDS
    timezone: str = constants.DEFAULT_TIMEZONE
    at_risk_threshold: int = constants.DEFAULT_AT_RISK_THRESHOLD
    trend_days: int = constants.DEFAULT_TREND_DAYS

    @property
    def grace_before(self) -> timedelta:
        return timedelta(minutes=self.grace_before_minutes)

    @property
    def late_threshold(self) -> timedelta:
        return timedelta(minutes=self.late_threshold_minutes)

    @property
    def token_rotation(self) -> timedelta:
        return timedelta(seconds=self.token_rotation_seconds)

    @property
    def location_max_age(self) -> timedelta:
        return timedelta(seconds=self.location_max_age_seconds)

    @classmethod
    def from_module(cls, settings: ModuleType) -> "CheckInSettings":
        defaults = cls()
        return cls(
            grace_before_minutes=int(getattr(settings, "CHECKIN_GRACE_BEFORE_MINUTES", defaults.grace_before_minutes)),
            late_threshold_minutes=int(getattr(settings, "CHECKIN_LATE_THRESHOLD_MINUTES", defaults.late_threshold_minutes)),
            token_rotation_seconds=int(getattr(settings, "TOKEN_ROTATION_SECONDS", defaults.token_rotation_seconds)),
            location_timeout_seconds=float(getattr(settings, "LOCATION_TIMEOUT_SECONDS", defaults.location_timeout_seconds)),
            location_max_age_seconds=int(getattr(settings, "LOCATION_MAX_AGE_SECONDS", defaults.location_max_age_seconds)),
            timezone=str(getattr(settings, "TIMEZONE", defaults.timezone)),
            at_risk_threshold=int(getattr(settings, "AT_RISK_THRESHOLD", defaults.at_risk_threshold)),
            trend_days=int(getattr(settings, "TREND_DAYS", defaults.trend_days)),
        )
