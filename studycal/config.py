"""
Runtime settings.

Values come from environment variables (STUDYCAL_*) and can be overridden
by CLI flags. Using a function instead of module constants keeps tests
independent from the real environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from studycal.errors import ValidationError
from studycal.study_blocks import StudyPlanConfig


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be an integer, got {raw!r}") from exc


def _times(raw: str) -> List[str]:
    return [t.strip() for t in raw.split(",") if t.strip()]


@dataclass
class Settings:
    feed_url: Optional[str] = None
    proxy_url: Optional[str] = None
    study_time: str = "19:00"
    preferred_times: List[str] = field(default_factory=lambda: ["19:00", "20:00", "21:00"])
    days_before: int = 1
    strategy: str = "single"
    max_per_day: int = 3
    max_hours_per_day: int = 3
    timeout: int = 30
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            feed_url=env.get("STUDYCAL_FEED_URL") or None,
            proxy_url=env.get("STUDYCAL_PROXY_URL") or None,
            study_time=env.get("STUDYCAL_STUDY_TIME") or defaults.study_time,
            preferred_times=_times(env.get("STUDYCAL_PREFERRED_TIMES", "")) or defaults.preferred_times,
            days_before=_int(env, "STUDYCAL_DAYS_BEFORE", defaults.days_before),
            strategy=env.get("STUDYCAL_STRATEGY") or defaults.strategy,
            max_per_day=_int(env, "STUDYCAL_MAX_PER_DAY", defaults.max_per_day),
            max_hours_per_day=_int(env, "STUDYCAL_MAX_HOURS_PER_DAY", defaults.max_hours_per_day),
            timeout=_int(env, "STUDYCAL_TIMEOUT", defaults.timeout),
            log_level=(env.get("STUDYCAL_LOG_LEVEL") or defaults.log_level).upper(),
        )

    def plan_config(self) -> StudyPlanConfig:
        return StudyPlanConfig(
            strategy=self.strategy,
            study_time=self.study_time,
            preferred_times=list(self.preferred_times),
            days_before=self.days_before,
            max_per_day=self.max_per_day,
            max_hours_per_day=self.max_hours_per_day,
        )
