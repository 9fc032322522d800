"""
Slot generation — pure business logic, no ORM or request awareness.

Public API:
  generate_slots_for_day(day, service_id, location_id, shifts, service_rules,
                         blackouts, existing_bookings, locks, now)
  summarize_day_heatmap(dates, per_day_slots)

Inputs are plain snapshots (ShiftWindow, ServiceRules, Blackout, TimeInterval)
so the generator can be exercised without a database. engine.py loads them.
"""
from dataclasses import dataclass, field
from datetime import date as date_type, datetime, timezone as dt_timezone, tzinfo

from .intervals import (
    TimeInterval,
    add_minutes,
    clip_interval,
    end_of_day,
    intervals_overlap,
    start_of_day,
)

DEFAULT_STEP_MINUTES = 15


@dataclass(frozen=True)
class ServiceRules:
    duration_minutes: int
    buffer_minutes: int = 0      # stored only; does not widen slots or spacing
    lead_time_minutes: int = 0


@dataclass(frozen=True)
class ShiftWindow:
    id: str
    staff_id: str
    location_id: str
    start_time: datetime
    end_time: datetime
    qualified_service_ids: frozenset = field(default_factory=frozenset)
    is_active: bool = True


@dataclass(frozen=True)
class Blackout:
    location_id: str | None       # None closes every location
    start_date: date_type         # inclusive
    end_date: date_type           # inclusive

    def covers(self, day: date_type, location_id: str) -> bool:
        if self.location_id is not None and self.location_id != location_id:
            return False
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class Slot:
    shift_id: str
    staff_id: str
    start_time: datetime
    end_time: datetime

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start_time, self.end_time)

    def as_dict(self) -> dict:
        return {
            'shift_id': self.shift_id,
            'staff_id': self.staff_id,
            'start_time': self.start_time.isoformat(),
            'end_time': self.end_time.isoformat(),
        }


def is_blacked_out(day: date_type, location_id: str, blackouts) -> bool:
    return any(b.covers(day, location_id) for b in blackouts)


def generate_slots_for_day(
    day: date_type,
    service_id: str,
    location_id: str,
    shifts,
    service_rules: ServiceRules,
    blackouts,
    existing_bookings,
    locks,
    now: datetime,
    *,
    breaks=(),
    step_minutes: int = DEFAULT_STEP_MINUTES,
    tz: tzinfo = dt_timezone.utc,
) -> list:
    """
    Produce the bookable slots of one day, ordered by start time.

    Slots start on a fixed grid of `step_minutes` from each shift's clipped
    start, independent of the service duration. A candidate is dropped when
    it starts before now + lead time, or overlaps a booking, a break or a
    lock. Malformed shifts (end <= start) yield nothing; the function never
    raises on bad data.
    """
    # Whole-day exclusion before any per-shift work
    if is_blacked_out(day, location_id, blackouts):
        return []
    if service_rules.duration_minutes <= 0 or step_minutes <= 0:
        return []

    day_start = start_of_day(day, tz)
    day_end = end_of_day(day, tz)
    min_start_allowed = add_minutes(now, service_rules.lead_time_minutes)
    duration = service_rules.duration_minutes
    service_id = str(service_id)
    location_id = str(location_id)

    blocked = list(existing_bookings) + list(breaks)
    locks = list(locks or ())
    slots = []

    for shift in shifts:
        if not shift.is_active:
            continue
        if str(shift.location_id) != location_id:
            continue
        if service_id not in shift.qualified_service_ids:
            continue

        window = clip_interval(TimeInterval(shift.start_time, shift.end_time), day_start, day_end)
        if window is None:
            continue
        # Steps are elapsed time, also on DST days
        window = TimeInterval(window.start.astimezone(dt_timezone.utc), window.end.astimezone(dt_timezone.utc))

        cursor = window.start
        while add_minutes(cursor, duration) <= window.end:
            candidate = TimeInterval(cursor, add_minutes(cursor, duration))

            if candidate.start < min_start_allowed:
                cursor = add_minutes(cursor, step_minutes)
                continue

            if not any(intervals_overlap(candidate, b) for b in blocked):
                if not any(intervals_overlap(candidate, lock) for lock in locks):
                    slots.append(Slot(
                        shift_id=shift.id,
                        staff_id=shift.staff_id,
                        start_time=candidate.start,
                        end_time=candidate.end,
                    ))

            cursor = add_minutes(cursor, step_minutes)

    # Shifts are walked independently and may interleave
    slots.sort(key=lambda s: s.start_time)
    return slots


# ── Heatmap ───────────────────────────────────────────────────────────────────

def summarize_day_heatmap(dates, per_day_slots: dict) -> list:
    """
    Count available slots per calendar day.

    per_day_slots is keyed by ISO date string ("YYYY-MM-DD"); days missing
    from it count as zero.
    """
    summary = []
    for day in dates:
        key = day.isoformat()
        summary.append({
            'date': key,
            'available_slots': len(per_day_slots.get(key) or ()),
        })
    return summary
