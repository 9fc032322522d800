"""
Booking engine — storage-backed availability and soft locks, no HTTP awareness.

Public API:
  get_day_slots(day, service_id, location_id, staff_id=None, twin=False, exclude_booking_id=None)
  get_heatmap(start, end, service_id, location_id, staff_id=None, twin=False)
  acquire_slot_lock(service_id, location_id, staff_id, shift_id,
                    start_time, end_time, session_token)
  release_session_locks(session_token)

The slot math lives in slots.py; this module only loads its inputs.
The booking insert itself lives in commit.py.
"""
import logging
from collections import defaultdict
from datetime import timedelta

from django.core.cache import cache
from django.db import transaction
from django.db.models import Q

from apps.locations.models import BlackoutPeriod
from apps.services.models import Service
from apps.staff.models import Shift, ShiftBreak, StaffRecurringBreak
from apps.bookings.config import SchedulingConfig, get_scheduling_config
from apps.bookings.exceptions import (
    InvalidTimeRangeError,
    OutsideShiftHoursError,
    ServiceNotFoundError,
    ShiftMismatchError,
    ShiftNotFoundError,
    SlotBookedError,
    SlotLockedError,
)
from apps.bookings.intervals import TimeInterval, date_range, end_of_day, start_of_day
from apps.bookings.models import Booking, SlotLock
from apps.bookings.slots import Blackout, generate_slots_for_day, is_blacked_out, summarize_day_heatmap

logger = logging.getLogger(__name__)


# ── Loaders ───────────────────────────────────────────────────────────────────

def _get_bookable_service(service_id) -> Service:
    service = Service.objects.active().filter(id=service_id).first()
    if service is None:
        raise ServiceNotFoundError(f"Service {service_id} not found.")
    return service


def _resolve_twin(service: Service, twin: bool) -> bool:
    if twin and not service.allows_twins:
        logger.warning('Service %s does not allow twin appointments, listing single slots', service.id)
        return False
    return bool(twin)


def _get_shift_windows(service: Service, location_id, range_start, range_end, staff_id=None, twin=False) -> list:
    """Active shifts at the location, qualified for the service, touching the range."""
    shifts = (
        Shift.objects
        .active()
        .filter(
            location_id=location_id,
            shift_services__service=service,
            start_time__lt=range_end,
            end_time__gt=range_start,
        )
        .distinct()
        .order_by('start_time')
    )
    if staff_id:
        shifts = shifts.filter(staff_id=staff_id)
    if twin:
        shifts = shifts.filter(staff__twin_services=service)
    # The query already restricted to qualified shifts
    return [shift.to_window([service.id]) for shift in shifts]


def _get_blackouts(location_id, first_day, last_day) -> list:
    rows = BlackoutPeriod.objects.filter(
        Q(location_id=location_id) | Q(location__isnull=True),
        start_date__lte=last_day,
        end_date__gte=first_day,
    )
    return [
        Blackout(
            location_id=str(b.location_id) if b.location_id else None,
            start_date=b.start_date,
            end_date=b.end_date,
        )
        for b in rows
    ]


def _group_by_shift(rows) -> dict:
    """Map shift id → list of TimeInterval for rows carrying shift_id/start_time/end_time."""
    grouped = defaultdict(list)
    for row in rows:
        grouped[str(row.shift_id)].append(TimeInterval(row.start_time, row.end_time))
    return grouped


def _get_occupied(windows, range_start, range_end, now=None, exclude_booking_id=None):
    """
    Returns (bookings, breaks, locks, recurring_breaks).
    The first three are grouped by shift id, recurring breaks by staff id.
    Locks are only loaded when `now` is given (heatmaps ignore them).
    """
    shift_ids = [w.id for w in windows]
    bookings = (
        Booking.objects
        .not_cancelled()
        .filter(shift_id__in=shift_ids)
        .overlapping(range_start, range_end)
    )
    if exclude_booking_id:
        bookings = bookings.exclude(id=exclude_booking_id)

    breaks = ShiftBreak.objects.filter(
        shift_id__in=shift_ids,
        start_time__lt=range_end,
        end_time__gt=range_start,
    )

    locks = []
    if now is not None:
        locks = (
            SlotLock.objects
            .active(now)
            .filter(shift_id__in=shift_ids)
            .overlapping(range_start, range_end)
        )

    recurring = defaultdict(list)
    for pause in StaffRecurringBreak.objects.filter(staff_id__in={w.staff_id for w in windows}):
        recurring[str(pause.staff_id)].append(pause)

    return _group_by_shift(bookings), _group_by_shift(breaks), _group_by_shift(locks), recurring


def _breaks_on(day, window, breaks, recurring, tz) -> list:
    """Shift breaks plus the staff member's recurring breaks that fall on `day`."""
    pauses = list(breaks.get(window.id, ()))
    for pause in recurring.get(window.staff_id, ()):
        interval = pause.interval_on(day, tz)
        if interval is not None:
            pauses.append(interval)
    return pauses


def _generate(day, service, location_id, windows, blackouts, occupied, now, config: SchedulingConfig,
              twin=False) -> list:
    """Run the generator shift by shift so each shift only sees its own conflicts."""
    bookings, breaks, locks, recurring = occupied
    rules = service.rules_for(twin)
    slots = []
    for window in windows:
        slots.extend(generate_slots_for_day(
            day,
            str(service.id),
            str(location_id),
            [window],
            rules,
            blackouts,
            bookings.get(window.id, ()),
            locks.get(window.id, ()),
            now,
            breaks=_breaks_on(day, window, breaks, recurring, config.tz),
            step_minutes=config.slot_step_minutes,
            tz=config.tz,
        ))
    slots.sort(key=lambda s: s.start_time)
    return slots


# ── Core: Day Availability ────────────────────────────────────────────────────

def get_day_slots(day, service_id, location_id, *, staff_id=None, twin=False,
                  exclude_booking_id=None, config: SchedulingConfig | None = None) -> list:
    """
    Bookable slots for one service at one location on `day`, ordered by start.

    Excludes live bookings, shift breaks, recurring staff breaks and the
    active locks of every session, the caller's own included.
    `twin` lists twin-length slots with twin-qualified staff only; it is
    ignored for services that do not allow twins.
    `exclude_booking_id` ignores one booking (rescheduling it onto itself).
    Raises ServiceNotFoundError for unknown or inactive services.
    """
    config = config or get_scheduling_config()
    now = config.now()
    service = _get_bookable_service(service_id)
    twin = _resolve_twin(service, twin)

    blackouts = _get_blackouts(location_id, day, day)
    if is_blacked_out(day, str(location_id), blackouts):
        logger.debug('Availability: location %s blacked out on %s', location_id, day)
        return []

    day_start = start_of_day(day, config.tz)
    day_end = end_of_day(day, config.tz)
    windows = _get_shift_windows(service, location_id, day_start, day_end, staff_id, twin)
    if not windows:
        return []

    occupied = _get_occupied(windows, day_start, day_end, now=now, exclude_booking_id=exclude_booking_id)
    slots = _generate(day, service, location_id, windows, blackouts, occupied, now, config, twin)
    logger.debug(
        'Availability: %d slots for service %s at location %s on %s (%d shifts)',
        len(slots), service_id, location_id, day, len(windows),
    )
    return slots


# ── Core: Heatmap ─────────────────────────────────────────────────────────────

def _heatmap_cache_key(service_id, location_id, start, end, staff_id, twin) -> str:
    return (
        f"heatmap:{service_id}:{location_id}:{start.isoformat()}:{end.isoformat()}"
        f":{staff_id or '-'}:{'twin' if twin else 'single'}"
    )


def get_heatmap(start, end, service_id, location_id, *, staff_id=None, twin=False,
                config: SchedulingConfig | None = None) -> list:
    """
    Available slot count per day over the inclusive range [start, end].

    Locks are not considered: the heatmap is a month-at-a-glance view and
    holds are short-lived. Results are cached for config.cache_ttl_seconds.
    Ranges longer than config.max_heatmap_days raise InvalidTimeRangeError.
    """
    config = config or get_scheduling_config()
    if start > end:
        raise InvalidTimeRangeError(f"Heatmap range start {start} is after end {end}.")
    if (end - start).days + 1 > config.max_heatmap_days:
        raise InvalidTimeRangeError(f"Heatmap range may span at most {config.max_heatmap_days} days.")

    key = _heatmap_cache_key(service_id, location_id, start, end, staff_id, twin)
    cached = cache.get(key)
    if cached is not None:
        return cached

    service = _get_bookable_service(service_id)
    twin = _resolve_twin(service, twin)
    if service.duration_minutes <= 0:
        logger.info('Heatmap: service %s has no duration, returning no days', service_id)
        cache.set(key, [], config.cache_ttl_seconds)
        return []

    now = config.now()
    range_start = start_of_day(start, config.tz)
    range_end = end_of_day(end, config.tz)
    windows = _get_shift_windows(service, location_id, range_start, range_end, staff_id, twin)
    blackouts = _get_blackouts(location_id, start, end)
    occupied = _get_occupied(windows, range_start, range_end)

    dates = date_range(start, end)
    per_day_slots = {
        day.isoformat(): _generate(day, service, location_id, windows, blackouts, occupied, now, config, twin)
        for day in dates
    }
    days = summarize_day_heatmap(dates, per_day_slots)

    cache.set(key, days, config.cache_ttl_seconds)
    return days


# ── Core: Soft Slot Lock ──────────────────────────────────────────────────────

@transaction.atomic
def acquire_slot_lock(*, service_id, location_id, staff_id, shift_id, start_time, end_time,
                      session_token: str, config: SchedulingConfig | None = None) -> SlotLock:
    """
    Places a checkout hold on [start_time, end_time) of a shift.

    Steps (one transaction, shift row locked FOR UPDATE where supported):
      1. Reject if a live booking on the shift overlaps
      2. Reject if another session's active lock on the shift overlaps
      3. Drop this session's previous lock for the same start, insert a fresh one

    Raises:
      InvalidTimeRangeError — start_time is not before end_time
      ShiftNotFoundError    — shift does not exist
      ServiceNotFoundError  — service does not exist
      ShiftMismatchError    — location/staff differ from the shift's
      OutsideShiftHoursError — the interval leaves the shift or touches a break
      SlotBookedError       — a booking already covers part of the interval
      SlotLockedError       — another session holds part of the interval
    """
    config = config or get_scheduling_config()
    if not start_time < end_time:
        raise InvalidTimeRangeError('Lock start must be before its end.')

    shift = Shift.objects.select_for_update().filter(id=shift_id).first()
    if shift is None:
        raise ShiftNotFoundError(f"Shift {shift_id} not found.")
    if str(shift.location_id) != str(location_id) or str(shift.staff_id) != str(staff_id):
        raise ShiftMismatchError('Shift does not belong to the requested location and staff member.')
    if not Service.objects.filter(id=service_id).exists():
        raise ServiceNotFoundError(f"Service {service_id} not found.")
    if start_time < shift.start_time or end_time > shift.end_time:
        raise OutsideShiftHoursError('Requested time is outside the shift hours.')
    if shift.overlaps_break(start_time, end_time, config.tz):
        raise OutsideShiftHoursError('Requested time falls within a staff break.')

    now = config.now()

    # 1. Live bookings
    if Booking.objects.not_cancelled().filter(shift=shift).overlapping(start_time, end_time).exists():
        logger.info('Lock refused (booked): shift %s %s–%s', shift.id, start_time, end_time)
        raise SlotBookedError('This slot has just been booked. Please choose a different time.')

    # 2. Other sessions' holds
    held = (
        SlotLock.objects
        .active(now)
        .filter(shift=shift)
        .exclude(session_token=session_token)
        .overlapping(start_time, end_time)
    )
    if held.exists():
        logger.info('Lock refused (held): shift %s %s–%s', shift.id, start_time, end_time)
        raise SlotLockedError(
            'This slot is being held by another client completing their booking. '
            'Please choose a different time or try again shortly.'
        )

    # 3. Refresh
    SlotLock.objects.filter(session_token=session_token, start_time=start_time).delete()
    lock = SlotLock.objects.create(
        service_id=service_id,
        location_id=shift.location_id,
        staff_id=shift.staff_id,
        shift=shift,
        start_time=start_time,
        end_time=end_time,
        session_token=session_token,
        expires_at=now + timedelta(minutes=config.lock_ttl_minutes),
    )
    logger.info('Lock %s acquired on shift %s until %s', lock.id, shift.id, lock.expires_at)
    return lock


def release_session_locks(session_token: str) -> int:
    """Delete every lock held by a session. Idempotent; returns the number removed."""
    deleted, _ = SlotLock.objects.filter(session_token=session_token).delete()
    if deleted:
        logger.info('Released %d lock(s) for session', deleted)
    return deleted
