"""Tests for the maintenance management commands."""

from datetime import time, timedelta
from io import StringIO

import pytest
from django.core.management import CommandError, call_command
from django.utils import timezone

from apps.bookings.models import SlotLock
from apps.staff.models import StaffRecurringBreak
from tests.conftest import DAY, at

pytestmark = pytest.mark.django_db


def make_lock(shift, service, expires_at, token='tok'):
    return SlotLock.objects.create(
        service=service, location=shift.location, staff=shift.staff, shift=shift,
        start_time=at(9), end_time=at(9, 30), session_token=token, expires_at=expires_at,
    )


class TestCleanupExpiredLocks:
    def test_deletes_only_expired(self, shift, service):
        now = timezone.now()
        make_lock(shift, service, now - timedelta(minutes=1), token='old')
        make_lock(shift, service, now + timedelta(minutes=10), token='live')
        out = StringIO()
        call_command('cleanup_expired_locks', stdout=out)
        assert 'deleted 1 locks' in out.getvalue()
        assert list(SlotLock.objects.values_list('session_token', flat=True)) == ['live']

    def test_dry_run_keeps_locks(self, shift, service):
        make_lock(shift, service, timezone.now() - timedelta(minutes=1))
        out = StringIO()
        call_command('cleanup_expired_locks', '--dry-run', stdout=out)
        assert '1 expired locks' in out.getvalue()
        assert SlotLock.objects.count() == 1


class TestAvailabilityReport:
    def test_prints_slots(self, shift, service, location):
        out = StringIO()
        call_command(
            'availability_report',
            '--location', str(location.id),
            '--service', str(service.id),
            '--date', DAY.isoformat(),
            stdout=out,
        )
        output = out.getvalue()
        assert 'Generated 16 slots' in output
        assert '08:00–08:30' in output
        assert f'Shift {shift.id}' in output

    def test_recurring_break_and_twin(self, shift, service, location, staff):
        service.allows_twins = True
        service.save()
        staff.twin_services.add(service)
        StaffRecurringBreak.objects.create(staff=staff, start_time=time(11), end_time=time(12))
        out = StringIO()
        call_command(
            'availability_report',
            '--location', str(location.id),
            '--service', str(service.id),
            '--date', DAY.isoformat(),
            '--twin',
            stdout=out,
        )
        output = out.getvalue()
        assert 'recurring break 11:00–12:00' in output
        assert 'Generated 9 slots' in output
        assert '08:00–09:00' in output

    def test_invalid_date(self, service, location):
        with pytest.raises(CommandError):
            call_command(
                'availability_report',
                '--location', str(location.id), '--service', str(service.id), '--date', '04/03/2030',
            )

    def test_unknown_location(self, service):
        with pytest.raises(CommandError):
            call_command(
                'availability_report',
                '--location', '00000000-0000-0000-0000-000000000000',
                '--service', str(service.id), '--date', DAY.isoformat(),
            )
