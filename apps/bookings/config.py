"""
Booking engine configuration.
"""
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone, tzinfo
from typing import Callable
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone


@dataclass(frozen=True)
class SchedulingConfig:
    """
    Knobs passed explicitly into the engine instead of module globals.

    Attributes:
        slot_step_minutes: Grid spacing between candidate slot starts
        lock_ttl_minutes: Lifetime of a checkout hold
        cache_ttl_seconds: How long heatmap results stay cached
        max_heatmap_days: Longest heatmap range, in days, served in one call
        tz: Zone in which calendar days start and end
        clock: Returns the current aware datetime
    """
    slot_step_minutes: int = 15
    lock_ttl_minutes: int = 30
    cache_ttl_seconds: int = 20
    max_heatmap_days: int = 93
    tz: tzinfo = dt_timezone.utc
    clock: Callable[[], datetime] = timezone.now

    def __post_init__(self):
        """Validate configuration."""
        if self.slot_step_minutes <= 0:
            raise ValueError(f"slot_step_minutes must be positive, got {self.slot_step_minutes}")
        if self.lock_ttl_minutes <= 0:
            raise ValueError(f"lock_ttl_minutes must be positive, got {self.lock_ttl_minutes}")
        if self.max_heatmap_days <= 0:
            raise ValueError(f"max_heatmap_days must be positive, got {self.max_heatmap_days}")

    def now(self) -> datetime:
        return self.clock()


def get_scheduling_config() -> SchedulingConfig:
    """Build the configuration from Django settings."""
    return SchedulingConfig(
        slot_step_minutes=getattr(settings, 'SLOT_GRID_MINUTES', 15),
        lock_ttl_minutes=getattr(settings, 'SLOT_LOCK_TTL_MINUTES', 30),
        cache_ttl_seconds=getattr(settings, 'AVAILABILITY_CACHE_SECONDS', 20),
        max_heatmap_days=getattr(settings, 'HEATMAP_MAX_DAYS', 93),
        tz=ZoneInfo(getattr(settings, 'SCHEDULING_TIME_ZONE', 'UTC')),
    )
