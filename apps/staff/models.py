"""
Staff models: StaffMember, Shift, ShiftService, ShiftBreak, StaffRecurringBreak.

A shift is a dated working block of one staff member at one location.
Which services a shift may fulfil is recorded in the ShiftService join table.
"""
from datetime import datetime

from django.core.validators import MaxValueValidator
from django.db import models
from django.db.models import Q
from apps.core.models import CatalogModel, UUIDModel
from apps.locations.models import Location
from apps.services.models import Service


class StaffMember(CatalogModel):
    first_name = models.CharField(max_length=80)
    last_name = models.CharField(max_length=80, blank=True)
    email = models.EmailField(blank=True)
    twin_services = models.ManyToManyField(
        Service,
        related_name='twin_qualified_staff',
        blank=True,
        help_text='Services this staff member may perform as a twin appointment',
    )

    class Meta:
        verbose_name = 'Staff Member'
        verbose_name_plural = 'Staff Members'
        ordering = ['last_name', 'first_name']

    def __str__(self):
        return f"{self.first_name} {self.last_name}".strip()


class Shift(CatalogModel):
    staff = models.ForeignKey(StaffMember, on_delete=models.CASCADE, related_name='shifts')
    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name='shifts')
    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField(db_index=True)
    services = models.ManyToManyField(
        Service,
        through='ShiftService',
        related_name='shifts',
        blank=True,
    )

    class Meta:
        verbose_name = 'Shift'
        verbose_name_plural = 'Shifts'
        ordering = ['start_time']

    def __str__(self):
        return (
            f"{self.staff} @ {self.location.name} "
            f"({self.start_time:%Y-%m-%d %H:%M}–{self.end_time:%H:%M})"
        )

    def to_window(self, qualified_service_ids=None):
        """
        Snapshot this shift for the slot generator.
        Pass qualified_service_ids when they are already known to skip the query.
        """
        from apps.bookings.slots import ShiftWindow
        if qualified_service_ids is None:
            qualified_service_ids = self.shift_services.values_list('service_id', flat=True)
        return ShiftWindow(
            id=str(self.id),
            staff_id=str(self.staff_id),
            location_id=str(self.location_id),
            start_time=self.start_time,
            end_time=self.end_time,
            qualified_service_ids=frozenset(str(s) for s in qualified_service_ids),
            is_active=self.is_active,
        )

    def overlaps_break(self, start, end, tz) -> bool:
        """True when [start, end) overlaps a break of this shift or a recurring break of its staff member."""
        from apps.bookings.intervals import TimeInterval, date_range, intervals_overlap
        if self.breaks.filter(start_time__lt=end, end_time__gt=start).exists():
            return True
        requested = TimeInterval(start, end)
        pauses = list(self.staff.recurring_breaks.all())
        for day in date_range(start.astimezone(tz).date(), end.astimezone(tz).date()):
            for pause in pauses:
                interval = pause.interval_on(day, tz)
                if interval is not None and intervals_overlap(requested, interval):
                    return True
        return False


class ShiftService(UUIDModel):
    """A service this shift is qualified to fulfil."""
    shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name='shift_services')
    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name='shift_services')

    class Meta:
        verbose_name = 'Shift Service'
        verbose_name_plural = 'Shift Services'
        unique_together = [('shift', 'service')]

    def __str__(self):
        return f"{self.service.name} on shift {str(self.shift_id)[:8]}"


class ShiftBreak(UUIDModel):
    """A pause inside a shift. No slot may overlap it."""
    shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name='breaks')
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()

    class Meta:
        verbose_name = 'Shift Break'
        verbose_name_plural = 'Shift Breaks'
        ordering = ['start_time']

    def __str__(self):
        return f"Break {self.start_time:%H:%M}–{self.end_time:%H:%M} on shift {str(self.shift_id)[:8]}"


class RecurringBreakQuerySet(models.QuerySet):
    def for_day(self, day):
        return self.filter(Q(day_of_week__isnull=True) | Q(day_of_week=day.weekday()))


class StaffRecurringBreak(UUIDModel):
    """
    A pause repeating on a weekday, in local wall-clock time.

    day_of_week follows date.weekday(): 0 is Monday, 6 is Sunday.
    Leave it empty for a break taken every day.
    """
    WEEKDAYS = [
        (0, 'Monday'), (1, 'Tuesday'), (2, 'Wednesday'), (3, 'Thursday'),
        (4, 'Friday'), (5, 'Saturday'), (6, 'Sunday'),
    ]

    staff = models.ForeignKey(StaffMember, on_delete=models.CASCADE, related_name='recurring_breaks')
    day_of_week = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        choices=WEEKDAYS,
        validators=[MaxValueValidator(6)],
    )
    start_time = models.TimeField()
    end_time = models.TimeField()

    objects = RecurringBreakQuerySet.as_manager()

    class Meta:
        verbose_name = 'Recurring Break'
        verbose_name_plural = 'Recurring Breaks'
        ordering = ['staff', 'day_of_week', 'start_time']

    def __str__(self):
        day = self.get_day_of_week_display() if self.day_of_week is not None else 'Daily'
        return f"{self.staff} {day} {self.start_time:%H:%M}–{self.end_time:%H:%M}"

    def interval_on(self, day, tz):
        """The break as an aware interval on `day`, or None when it does not apply."""
        from apps.bookings.intervals import TimeInterval
        if self.day_of_week is not None and self.day_of_week != day.weekday():
            return None
        if self.end_time <= self.start_time:
            return None
        return TimeInterval(
            datetime.combine(day, self.start_time, tzinfo=tz),
            datetime.combine(day, self.end_time, tzinfo=tz),
        )
