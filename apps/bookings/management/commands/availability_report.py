"""
management command: availability_report

Prints the slots the engine generates for one service at one location on one
day, next to the shifts, breaks and bookings that shaped them.

  python manage.py availability_report --location <uuid> --service <uuid> --date 2026-03-02
"""
from datetime import date

from django.core.management.base import BaseCommand, CommandError

from apps.bookings.config import get_scheduling_config
from apps.bookings.engine import get_day_slots
from apps.bookings.exceptions import BookingEngineError
from apps.bookings.intervals import end_of_day, start_of_day
from apps.bookings.models import Booking
from apps.locations.models import Location
from apps.services.models import Service
from apps.staff.models import Shift, StaffRecurringBreak


class Command(BaseCommand):
    help = 'Print the generated slots for a service at a location on a date'

    def add_arguments(self, parser):
        parser.add_argument('--location', required=True, help='Location id')
        parser.add_argument('--service', required=True, help='Service id')
        parser.add_argument('--date', required=True, help='Day as YYYY-MM-DD')
        parser.add_argument('--staff', default=None, help='Restrict to one staff member id')
        parser.add_argument('--twin', action='store_true', help='List twin appointment slots')

    def handle(self, *args, **options):
        try:
            day = date.fromisoformat(options['date'])
        except ValueError as exc:
            raise CommandError(f"Invalid --date '{options['date']}', expected YYYY-MM-DD") from exc

        location = Location.objects.filter(id=options['location']).first()
        if location is None:
            raise CommandError(f"Location {options['location']} not found")
        service = Service.objects.filter(id=options['service']).first()
        if service is None:
            raise CommandError(f"Service {options['service']} not found")

        config = get_scheduling_config()
        day_start = start_of_day(day, config.tz)
        day_end = end_of_day(day, config.tz)

        self.stdout.write(f"Location: {location}")
        self.stdout.write(
            f"Service: {service.name} | Duration: {service.duration_minutes} "
            f"| Lead time: {service.lead_time_minutes}"
        )

        shifts = (
            Shift.objects
            .filter(location=location, start_time__lt=day_end, end_time__gt=day_start)
            .select_related('staff')
            .prefetch_related('breaks', 'shift_services')
        )
        if options['staff']:
            shifts = shifts.filter(staff_id=options['staff'])
        for shift in shifts:
            qualified = any(ss.service_id == service.id for ss in shift.shift_services.all())
            self.stdout.write(
                f"Shift {shift.id}: {shift.staff} {shift.start_time:%H:%M}–{shift.end_time:%H:%M}"
                f"{'' if shift.is_active else ' [inactive]'}"
                f"{'' if qualified else ' [not qualified]'}"
            )
            for pause in shift.breaks.all():
                self.stdout.write(f"  break {pause.start_time:%H:%M}–{pause.end_time:%H:%M}")
            for pause in StaffRecurringBreak.objects.for_day(day).filter(staff=shift.staff):
                self.stdout.write(f"  recurring break {pause.start_time:%H:%M}–{pause.end_time:%H:%M}")
            for booking in Booking.objects.not_cancelled().filter(shift=shift).order_by('start_time'):
                self.stdout.write(f"  booked {booking.start_time:%H:%M}–{booking.end_time:%H:%M}")

        try:
            slots = get_day_slots(
                day, service.id, location.id, staff_id=options['staff'], twin=options['twin'], config=config,
            )
        except BookingEngineError as exc:
            raise CommandError(f"{exc.code}: {exc}") from exc

        self.stdout.write(self.style.SUCCESS(f"Generated {len(slots)} slots:"))
        for slot in slots:
            self.stdout.write(f"  {slot.start_time:%H:%M}–{slot.end_time:%H:%M}  shift {slot.shift_id}")
