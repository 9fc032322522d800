"""Tests for the booking commit transaction."""

from datetime import time
from unittest import mock

import pytest
from django.db import IntegrityError

from apps.bookings import commit
from apps.bookings.commit import AddonSelection, BookingInput, PolicyAnswerInput, create_booking
from apps.bookings.exceptions import (
    InvalidAddonError,
    InvalidTimeRangeError,
    LeadTimeError,
    OutsideShiftHoursError,
    ServiceInactiveError,
    ServiceNotFoundError,
    ServiceNotQualifiedError,
    ShiftInactiveError,
    ShiftMismatchError,
    ShiftNotFoundError,
    SlotTakenError,
)
from apps.bookings.models import Booking, BookingAddon, BookingPolicyAnswer, BookingStatus, PaymentStatus
from apps.clients.models import Client
from apps.services.models import Service, ServiceAddon
from apps.staff.models import ShiftBreak, StaffMember, StaffRecurringBreak
from tests.conftest import DAY, at, make_config

pytestmark = pytest.mark.django_db

MISSING = '00000000-0000-0000-0000-000000000000'


def make_input(shift, service, start=None, end=None, **overrides) -> BookingInput:
    fields = dict(
        service_id=service.id,
        location_id=shift.location_id,
        staff_id=shift.staff_id,
        shift_id=shift.id,
        start_time=start or at(9),
        end_time=end or at(9, 30),
        price_eur_cents=service.price_eur_cents,
    )
    fields.update(overrides)
    return BookingInput(**fields)


class TestCreateBooking:
    def test_commits_confirmed_unpaid_booking(self, shift, service, config):
        client = Client.objects.create(email='maria@example.com')
        booking = create_booking(make_input(shift, service, client_id=client.id, notes='First visit'), config)
        booking.refresh_from_db()
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.payment_status == PaymentStatus.UNPAID
        assert booking.client_id == client.id
        assert booking.location_id == shift.location_id
        assert booking.staff_id == shift.staff_id
        assert booking.price_eur_cents == 6000
        assert booking.notes == 'First visit'

    def test_booking_spanning_whole_shift(self, shift, service, config):
        create_booking(make_input(shift, service, start=at(8), end=at(12)), config)
        assert Booking.objects.count() == 1

    def test_second_commit_loses(self, shift, service, config):
        create_booking(make_input(shift, service), config)
        with pytest.raises(SlotTakenError) as exc_info:
            create_booking(make_input(shift, service), config)
        assert exc_info.value.code == 'SLOT_TAKEN'
        assert Booking.objects.count() == 1

    def test_overlapping_commit_loses(self, shift, service, config):
        create_booking(make_input(shift, service), config)
        with pytest.raises(SlotTakenError):
            create_booking(make_input(shift, service, start=at(9, 15), end=at(9, 45)), config)

    def test_cancelled_booking_frees_slot(self, shift, service, config):
        first = create_booking(make_input(shift, service), config)
        Booking.objects.filter(id=first.id).update(status=BookingStatus.CANCELLED)
        create_booking(make_input(shift, service), config)
        assert Booking.objects.not_cancelled().count() == 1

    def test_unique_violation_becomes_slot_taken(self, shift, service, config):
        create_booking(make_input(shift, service), config)
        # Simulate a concurrent writer that passed the overlap check first
        with mock.patch.object(commit.Booking.objects, 'not_cancelled') as not_cancelled:
            not_cancelled.return_value.filter.return_value.overlapping.return_value.exists.return_value = False
            with pytest.raises(SlotTakenError):
                create_booking(make_input(shift, service), config)
        assert Booking.objects.count() == 1

    def test_database_error_propagates(self, shift, service, config):
        with mock.patch.object(commit, '_attach_policy_answers', side_effect=IntegrityError('boom')):
            with pytest.raises(IntegrityError):
                create_booking(make_input(shift, service, policy_answers=[PolicyAnswerInput(field_id=MISSING)]), config)
        assert Booking.objects.count() == 0


class TestValidation:
    def test_unknown_shift(self, shift, service, config):
        with pytest.raises(ShiftNotFoundError) as exc_info:
            create_booking(make_input(shift, service, shift_id=MISSING), config)
        assert exc_info.value.code == 'NOT_FOUND'

    def test_inactive_shift(self, shift, service, config):
        shift.is_active = False
        shift.save()
        with pytest.raises(ShiftInactiveError) as exc_info:
            create_booking(make_input(shift, service), config)
        assert exc_info.value.code == 'INACTIVE'

    def test_location_mismatch(self, shift, service, other_location, config):
        with pytest.raises(ShiftMismatchError) as exc_info:
            create_booking(make_input(shift, service, location_id=other_location.id), config)
        assert exc_info.value.code == 'MISMATCH'

    def test_staff_mismatch(self, shift, service, config):
        other = StaffMember.objects.create(first_name='Rui')
        with pytest.raises(ShiftMismatchError):
            create_booking(make_input(shift, service, staff_id=other.id), config)

    def test_unknown_service(self, shift, service, config):
        with pytest.raises(ServiceNotFoundError):
            create_booking(make_input(shift, service, service_id=MISSING), config)

    def test_inactive_service(self, shift, service, config):
        service.is_active = False
        service.save()
        with pytest.raises(ServiceInactiveError):
            create_booking(make_input(shift, service), config)

    def test_service_not_qualified(self, shift, config):
        other = Service.objects.create(name='Massage', duration_minutes=60)
        with pytest.raises(ServiceNotQualifiedError) as exc_info:
            create_booking(make_input(shift, other), config)
        assert exc_info.value.code == 'NOT_QUALIFIED'

    def test_inverted_range(self, shift, service, config):
        with pytest.raises(InvalidTimeRangeError):
            create_booking(make_input(shift, service, start=at(9, 30), end=at(9)), config)

    def test_empty_range(self, shift, service, config):
        with pytest.raises(InvalidTimeRangeError):
            create_booking(make_input(shift, service, start=at(9), end=at(9)), config)

    def test_outside_shift_hours(self, shift, service, config):
        with pytest.raises(OutsideShiftHoursError) as exc_info:
            create_booking(make_input(shift, service, start=at(11, 45), end=at(12, 15)), config)
        assert exc_info.value.code == 'OUTSIDE_HOURS'

    def test_before_shift_start(self, shift, service, config):
        with pytest.raises(OutsideShiftHoursError):
            create_booking(make_input(shift, service, start=at(7, 45), end=at(8, 15)), config)

    def test_inside_shift_break(self, shift, service, config):
        ShiftBreak.objects.create(shift=shift, start_time=at(10), end_time=at(10, 30))
        with pytest.raises(OutsideShiftHoursError):
            create_booking(make_input(shift, service, start=at(10), end=at(10, 30)), config)
        assert Booking.objects.count() == 0

    def test_overlapping_recurring_break(self, shift, service, staff, config):
        StaffRecurringBreak.objects.create(staff=staff, day_of_week=DAY.weekday(), start_time=time(10), end_time=time(10, 30))
        with pytest.raises(OutsideShiftHoursError):
            create_booking(make_input(shift, service, start=at(10, 15), end=at(10, 45)), config)
        assert Booking.objects.count() == 0

    def test_recurring_break_on_other_weekday_allowed(self, shift, service, staff, config):
        StaffRecurringBreak.objects.create(
            staff=staff, day_of_week=(DAY.weekday() + 1) % 7, start_time=time(10), end_time=time(10, 30),
        )
        create_booking(make_input(shift, service, start=at(10), end=at(10, 30)), config)
        assert Booking.objects.count() == 1

    def test_slot_next_to_break_allowed(self, shift, service, config):
        ShiftBreak.objects.create(shift=shift, start_time=at(9, 30), end_time=at(10))
        create_booking(make_input(shift, service), config)
        assert Booking.objects.count() == 1

    def test_lead_time(self, shift, service):
        service.lead_time_minutes = 90
        service.save()
        with pytest.raises(LeadTimeError) as exc_info:
            create_booking(make_input(shift, service), make_config(now=at(8)))
        assert exc_info.value.code == 'LEAD_TIME'

    def test_lead_time_boundary_allowed(self, shift, service):
        service.lead_time_minutes = 60
        service.save()
        create_booking(make_input(shift, service), make_config(now=at(8)))
        assert Booking.objects.count() == 1

    def test_shift_checked_before_service(self, shift, service, config):
        with pytest.raises(ShiftNotFoundError):
            create_booking(make_input(shift, service, service_id=MISSING, shift_id=MISSING), config)


class TestAddonsAndPolicyAnswers:
    def test_addons_priced_from_catalog(self, shift, service, addon, config):
        booking = create_booking(
            make_input(shift, service, addons=[AddonSelection(addon_id=addon.id, quantity=2)]), config,
        )
        attached = BookingAddon.objects.get(booking=booking)
        assert attached.quantity == 2
        assert attached.price_eur_cents == 3000
        assert booking.total_price_eur_cents == 9000

    def test_matching_client_price_accepted(self, shift, service, addon, config):
        create_booking(
            make_input(shift, service, addons=[AddonSelection(addon_id=addon.id, price_eur_cents=1500)]), config,
        )
        assert BookingAddon.objects.count() == 1

    def test_price_mismatch_rolls_back_booking(self, shift, service, addon, config):
        data = make_input(shift, service, addons=[AddonSelection(addon_id=addon.id, price_eur_cents=1)])
        with pytest.raises(InvalidAddonError):
            create_booking(data, config)
        assert Booking.objects.count() == 0
        assert BookingAddon.objects.count() == 0

    def test_addon_of_other_service_rolls_back(self, shift, service, config):
        other = Service.objects.create(name='Massage', duration_minutes=60)
        foreign = ServiceAddon.objects.create(service=other, name='Hot stones', price_eur_cents=800)
        with pytest.raises(InvalidAddonError) as exc_info:
            create_booking(make_input(shift, service, addons=[AddonSelection(addon_id=foreign.id)]), config)
        assert exc_info.value.code == 'INVALID_ADDON'
        assert Booking.objects.count() == 0

    def test_inactive_addon_rejected(self, shift, service, addon, config):
        addon.is_active = False
        addon.save()
        with pytest.raises(InvalidAddonError):
            create_booking(make_input(shift, service, addons=[AddonSelection(addon_id=addon.id)]), config)

    def test_zero_quantity_rejected(self, shift, service, addon, config):
        with pytest.raises(InvalidAddonError):
            create_booking(make_input(shift, service, addons=[AddonSelection(addon_id=addon.id, quantity=0)]), config)

    def test_missing_required_addon_rejected(self, shift, service, config):
        ServiceAddon.objects.create(service=service, name='Consent form review', is_required=True)
        with pytest.raises(InvalidAddonError) as exc_info:
            create_booking(make_input(shift, service), config)
        assert 'Consent form review' in str(exc_info.value)
        assert Booking.objects.count() == 0

    def test_required_addon_selected(self, shift, service, config):
        required = ServiceAddon.objects.create(service=service, name='Consent form review', is_required=True)
        booking = create_booking(make_input(shift, service, addons=[AddonSelection(addon_id=required.id)]), config)
        assert BookingAddon.objects.get(booking=booking).addon_id == required.id

    def test_retired_required_addon_not_enforced(self, shift, service, config):
        required = ServiceAddon.objects.create(service=service, name='Consent form review', is_required=True)
        required.retire()
        create_booking(make_input(shift, service), config)
        assert Booking.objects.count() == 1

    def test_failed_addon_frees_slot(self, shift, service, addon, config):
        bad = make_input(shift, service, addons=[AddonSelection(addon_id=MISSING)])
        with pytest.raises(InvalidAddonError):
            create_booking(bad, config)
        create_booking(make_input(shift, service), config)
        assert Booking.objects.count() == 1

    def test_policy_answers_stored(self, shift, service, config):
        answers = [
            PolicyAnswerInput(field_id=MISSING, field_type='checkbox', value=True),
            PolicyAnswerInput(field_id='11111111-1111-1111-1111-111111111111', field_type='multi_choice',
                              value=['a', 'b'], price_eur_cents=500),
        ]
        booking = create_booking(make_input(shift, service, policy_answers=answers), config)
        stored = {str(a.field_id): a for a in BookingPolicyAnswer.objects.filter(booking=booking)}
        assert stored[MISSING].value is True
        assert stored['11111111-1111-1111-1111-111111111111'].value == ['a', 'b']
        assert stored['11111111-1111-1111-1111-111111111111'].price_eur_cents == 500
