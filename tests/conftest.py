"""Shared test fixtures and factories."""

import dataclasses
from datetime import date, datetime, timezone as dt_timezone

import pytest
from django.core.cache import cache

from apps.bookings.config import SchedulingConfig
from apps.bookings.slots import ServiceRules, ShiftWindow
from apps.locations.models import Location
from apps.services.models import Service, ServiceAddon
from apps.staff.models import Shift, ShiftService, StaffMember

UTC = dt_timezone.utc

# A Monday far enough ahead that the real clock never reaches it
DAY = date(2030, 3, 4)


def at(hour: int, minute: int = 0, day: date = DAY) -> datetime:
    """Aware UTC datetime on `day`."""
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=UTC)


def make_window(
    start: datetime,
    end: datetime,
    shift_id: str = 'shift-1',
    staff_id: str = 'staff-1',
    location_id: str = 'loc-1',
    services=('svc-1',),
    is_active: bool = True,
) -> ShiftWindow:
    return ShiftWindow(
        id=shift_id,
        staff_id=staff_id,
        location_id=location_id,
        start_time=start,
        end_time=end,
        qualified_service_ids=frozenset(services),
        is_active=is_active,
    )


def make_rules(duration: int = 30, lead_time: int = 0) -> ServiceRules:
    return ServiceRules(duration_minutes=duration, lead_time_minutes=lead_time)


def make_config(now: datetime = None, **overrides) -> SchedulingConfig:
    """Engine config with a frozen clock."""
    frozen = now or at(7)
    return dataclasses.replace(SchedulingConfig(), clock=lambda: frozen, **overrides)


# ── Database factories ────────────────────────────────────────────────────────

def create_shift(staff, location, services, start, end, is_active=True) -> Shift:
    shift = Shift.objects.create(
        staff=staff, location=location, start_time=start, end_time=end, is_active=is_active,
    )
    for service in services:
        ShiftService.objects.create(shift=shift, service=service)
    return shift


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def location(db):
    return Location.objects.create(name='Central Clinic', city='Lisbon')


@pytest.fixture
def other_location(db):
    return Location.objects.create(name='Harbour Clinic', city='Porto')


@pytest.fixture
def service(db):
    return Service.objects.create(name='Consultation', duration_minutes=30, price_eur_cents=6000)


@pytest.fixture
def staff(db):
    return StaffMember.objects.create(first_name='Ana', last_name='Costa')


@pytest.fixture
def shift(staff, location, service):
    """08:00–12:00 on DAY, qualified for `service`."""
    return create_shift(staff, location, [service], at(8), at(12))


@pytest.fixture
def addon(service):
    return ServiceAddon.objects.create(service=service, name='Extended report', price_eur_cents=1500)


@pytest.fixture
def slot_payload(service, location, staff, shift):
    """Identifiers and times of the 09:00–09:30 slot, as the API expects them."""
    return {
        'service_id': str(service.id),
        'location_id': str(location.id),
        'staff_id': str(staff.id),
        'shift_id': str(shift.id),
        'start_time': at(9).isoformat(),
        'end_time': at(9, 30).isoformat(),
    }
