"""
Booking commit — the authoritative, race-resolving write.

create_booking() re-validates a slot selection against the current shift and
service state, then inserts the booking together with its add-ons and policy
answers in one transaction. The insert is the serialisation point: an
overlapping or identical live booking turns into SlotTakenError.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from django.db import DatabaseError, IntegrityError, transaction

from apps.services.models import Service, ServiceAddon
from apps.staff.models import Shift, ShiftService
from apps.bookings.config import SchedulingConfig, get_scheduling_config
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

logger = logging.getLogger(__name__)


@dataclass
class AddonSelection:
    addon_id: str
    quantity: int = 1
    price_eur_cents: int | None = None   # client's expectation, checked against the catalog


@dataclass
class PolicyAnswerInput:
    field_id: str
    value: object = None
    field_type: str = ''
    price_eur_cents: int | None = None


@dataclass
class BookingInput:
    service_id: str
    location_id: str
    staff_id: str
    shift_id: str
    start_time: datetime
    end_time: datetime
    price_eur_cents: int = 0
    client_id: str | None = None
    notes: str = ''
    addons: list = field(default_factory=list)
    policy_answers: list = field(default_factory=list)


# ── Validation steps ──────────────────────────────────────────────────────────

def _load_shift(data: BookingInput) -> Shift:
    shift = Shift.objects.select_for_update().filter(id=data.shift_id).first()
    if shift is None:
        raise ShiftNotFoundError('Shift not found.')
    if not shift.is_active:
        raise ShiftInactiveError('Shift is no longer active.')
    if str(shift.location_id) != str(data.location_id):
        raise ShiftMismatchError('Shift location does not match the requested location.')
    if str(shift.staff_id) != str(data.staff_id):
        raise ShiftMismatchError('Shift staff member does not match the requested staff member.')
    return shift


def _load_service(data: BookingInput) -> Service:
    service = Service.objects.filter(id=data.service_id).first()
    if service is None:
        raise ServiceNotFoundError('Service not found.')
    if not service.is_active:
        raise ServiceInactiveError('Service is no longer offered.')
    return service


def _check_qualified(shift: Shift, service: Service) -> None:
    if not ShiftService.objects.filter(shift=shift, service=service).exists():
        raise ServiceNotQualifiedError('Service not available for this shift.')


def _check_window(shift: Shift, data: BookingInput) -> None:
    if not data.start_time < data.end_time:
        raise InvalidTimeRangeError('Booking start must be before its end.')
    if data.start_time < shift.start_time or data.end_time > shift.end_time:
        raise OutsideShiftHoursError('Requested time is outside the shift hours.')


def _check_breaks(shift: Shift, data: BookingInput, config: SchedulingConfig) -> None:
    if shift.overlaps_break(data.start_time, data.end_time, config.tz):
        raise OutsideShiftHoursError('Requested time falls within a staff break.')


def _check_lead_time(service: Service, data: BookingInput, now: datetime) -> None:
    min_start_allowed = now + timedelta(minutes=service.lead_time_minutes or 0)
    if data.start_time < min_start_allowed:
        raise LeadTimeError(
            f"This service must be booked at least {service.lead_time_minutes} minutes in advance."
        )


# ── Writes ────────────────────────────────────────────────────────────────────

def _insert_booking(shift: Shift, service: Service, data: BookingInput) -> Booking:
    clash = (
        Booking.objects
        .not_cancelled()
        .filter(shift=shift)
        .overlapping(data.start_time, data.end_time)
    )
    if clash.exists():
        logger.warning('Commit refused: shift %s %s–%s already booked', shift.id, data.start_time, data.end_time)
        raise SlotTakenError('Slot already taken. Please choose a different time.')

    try:
        with transaction.atomic():
            return Booking.objects.create(
                client_id=data.client_id,
                service=service,
                location_id=shift.location_id,
                staff_id=shift.staff_id,
                shift=shift,
                start_time=data.start_time,
                end_time=data.end_time,
                price_eur_cents=data.price_eur_cents,
                status=BookingStatus.CONFIRMED,
                payment_status=PaymentStatus.UNPAID,
                notes=data.notes or '',
            )
    except IntegrityError as exc:
        logger.warning('Commit lost race on shift %s %s–%s: %s', shift.id, data.start_time, data.end_time, exc)
        raise SlotTakenError('Slot already taken. Please choose a different time.') from exc


def _attach_addons(booking: Booking, service: Service, selections) -> list:
    attached = []
    for selection in selections:
        addon = ServiceAddon.objects.active().filter(id=selection.addon_id, service=service).first()
        if addon is None:
            raise InvalidAddonError(f"Add-on {selection.addon_id} is not available for {service.name}.")
        if selection.quantity < 1:
            raise InvalidAddonError(f"Add-on {addon.name} needs a quantity of at least 1.")

        price = addon.price_eur_cents * selection.quantity
        if selection.price_eur_cents is not None and selection.price_eur_cents != price:
            raise InvalidAddonError(
                f"Add-on {addon.name} costs {price} cents, not {selection.price_eur_cents}."
            )

        attached.append(BookingAddon.objects.create(
            booking=booking,
            addon=addon,
            quantity=selection.quantity,
            price_eur_cents=price,
        ))

    missing = service.addons.active().filter(is_required=True).exclude(id__in=[a.addon_id for a in attached])
    if missing.exists():
        names = ', '.join(addon.name for addon in missing)
        raise InvalidAddonError(f"{service.name} must be booked with: {names}.")
    return attached


def _attach_policy_answers(booking: Booking, answers) -> None:
    BookingPolicyAnswer.objects.bulk_create([
        BookingPolicyAnswer(
            booking=booking,
            field_id=answer.field_id,
            field_type=answer.field_type or '',
            value=answer.value,
            price_eur_cents=answer.price_eur_cents,
        )
        for answer in answers
    ])


# ── Core: Booking Creation ────────────────────────────────────────────────────

def create_booking(data: BookingInput, config: SchedulingConfig | None = None) -> Booking:
    """
    Validate and durably insert a booking. Fail-fast, nothing retried.

    Order of checks:
      1. shift exists, is active, matches location and staff
      2. service exists and is active
      3. shift is qualified for the service
      4. start < end, the interval sits inside the shift and clear of breaks
      5. start respects the service lead time
      6. insert (overlap / unique-constraint conflict → SlotTakenError)
      7. add-ons belong to the service, are priced from the catalog and
         include every required add-on

    Booking, add-ons and policy answers commit together; any failure rolls
    all of them back.
    """
    config = config or get_scheduling_config()
    try:
        with transaction.atomic():
            shift = _load_shift(data)
            service = _load_service(data)
            _check_qualified(shift, service)
            _check_window(shift, data)
            _check_breaks(shift, data, config)
            _check_lead_time(service, data, config.now())

            booking = _insert_booking(shift, service, data)
            _attach_addons(booking, service, data.addons)
            _attach_policy_answers(booking, data.policy_answers)
    except DatabaseError:
        logger.exception('Booking commit failed for shift %s', data.shift_id)
        raise

    logger.info(
        'Booking %s committed: shift %s %s–%s (%d add-ons)',
        booking.id, shift.id, booking.start_time, booking.end_time, len(data.addons),
    )
    return booking
