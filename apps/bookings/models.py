"""
Bookings app models:
  - SlotLock            : Session-scoped, TTL-based soft hold taken during checkout
  - Booking             : Durable reservation, the single source of truth
  - BookingAddon        : Add-ons purchased with a booking
  - BookingPolicyAnswer : Answers to service policy questions at checkout
"""
from django.db import models
from django.utils import timezone
from apps.core.models import BaseModel, UUIDModel, TimestampedModel
from apps.clients.models import Client
from apps.locations.models import Location
from apps.services.models import Service, ServiceAddon
from apps.staff.models import Shift, StaffMember


# ── Slot Lock ─────────────────────────────────────────────────────────────────

class SlotLockQuerySet(models.QuerySet):
    def active(self, now=None):
        return self.filter(expires_at__gt=now or timezone.now())

    def overlapping(self, start_time, end_time):
        return self.filter(start_time__lt=end_time, end_time__gt=start_time)


class SlotLock(UUIDModel, TimestampedModel):
    """
    Advisory hold on a shift interval while a client is in checkout.
    Expired locks are inert: every read filters on expires_at.
    Removed when:
      - the same session re-selects the slot (refresh)
      - the session abandons checkout or completes its booking
      - the cleanup_expired_locks command runs
    """
    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name='slot_locks')
    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name='slot_locks')
    staff = models.ForeignKey(StaffMember, on_delete=models.CASCADE, related_name='slot_locks')
    shift = models.ForeignKey(Shift, on_delete=models.CASCADE, related_name='slot_locks')
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    session_token = models.CharField(max_length=255, db_index=True)
    expires_at = models.DateTimeField(db_index=True)

    objects = SlotLockQuerySet.as_manager()

    class Meta:
        verbose_name = 'Slot Lock'
        verbose_name_plural = 'Slot Locks'
        indexes = [
            models.Index(fields=['shift', 'start_time', 'end_time'], name='idx_slotlock_shift_window'),
        ]

    def __str__(self):
        return (
            f"Lock: shift {str(self.shift_id)[:8]} "
            f"{self.start_time:%Y-%m-%d %H:%M}–{self.end_time:%H:%M} "
            f"[{'active' if self.is_active else 'expired'}]"
        )

    @property
    def is_expired(self):
        return timezone.now() >= self.expires_at

    @property
    def is_active(self):
        return not self.is_expired


# ── Booking ───────────────────────────────────────────────────────────────────

class BookingStatus(models.TextChoices):
    PENDING   = 'pending',   'Pending'
    CONFIRMED = 'confirmed', 'Confirmed'
    CANCELLED = 'cancelled', 'Cancelled'


class PaymentStatus(models.TextChoices):
    UNPAID   = 'unpaid',   'Unpaid'
    PAID     = 'paid',     'Paid'
    REFUNDED = 'refunded', 'Refunded'


class BookingQuerySet(models.QuerySet):
    def not_cancelled(self):
        return self.exclude(status=BookingStatus.CANCELLED)

    def overlapping(self, start_time, end_time):
        return self.filter(start_time__lt=end_time, end_time__gt=start_time)


class Booking(BaseModel):
    """
    Durable reservation created by the commit transaction.
    No two non-cancelled bookings on the same shift may overlap.
    """
    client = models.ForeignKey(
        Client, on_delete=models.PROTECT, related_name='bookings', null=True, blank=True,
    )
    service = models.ForeignKey(Service, on_delete=models.PROTECT, related_name='bookings')
    location = models.ForeignKey(Location, on_delete=models.PROTECT, related_name='bookings')
    staff = models.ForeignKey(
        StaffMember, on_delete=models.SET_NULL, related_name='bookings', null=True, blank=True,
    )
    shift = models.ForeignKey(
        Shift, on_delete=models.SET_NULL, related_name='bookings', null=True, blank=True,
    )

    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField()
    price_eur_cents = models.PositiveIntegerField(default=0)

    status = models.CharField(
        max_length=20, choices=BookingStatus.choices,
        default=BookingStatus.CONFIRMED, db_index=True,
    )
    payment_status = models.CharField(
        max_length=10, choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    notes = models.TextField(blank=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        verbose_name = 'Booking'
        verbose_name_plural = 'Bookings'
        ordering = ['-start_time']
        # DB-level guard: no two live bookings for the same shift window
        constraints = [
            models.UniqueConstraint(
                fields=['shift', 'start_time', 'end_time'],
                condition=~models.Q(status='cancelled'),
                name='uq_live_booking_shift_window',
            )
        ]

    def __str__(self):
        return f"#{self.id_short} | {self.service.name} | {self.start_time:%Y-%m-%d %H:%M}"

    @property
    def id_short(self):
        """Returns the first 8 chars of UUID in uppercase."""
        return str(self.id)[:8].upper()

    @property
    def total_price_eur_cents(self):
        return self.price_eur_cents + sum(a.price_eur_cents for a in self.addons.all())


class BookingAddon(UUIDModel):
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='addons')
    addon = models.ForeignKey(ServiceAddon, on_delete=models.PROTECT, related_name='booking_addons')
    quantity = models.PositiveIntegerField(default=1)
    price_eur_cents = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = 'Booking Add-on'
        verbose_name_plural = 'Booking Add-ons'

    def __str__(self):
        return f"{self.quantity} × {self.addon.name} on #{self.booking.id_short}"


class BookingPolicyAnswer(UUIDModel):
    """Client's answer to one service policy question, stored verbatim."""
    booking = models.ForeignKey(Booking, on_delete=models.CASCADE, related_name='policy_answers')
    field_id = models.UUIDField()
    field_type = models.CharField(max_length=32, blank=True)
    value = models.JSONField(null=True, blank=True)
    price_eur_cents = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        verbose_name = 'Booking Policy Answer'
        verbose_name_plural = 'Booking Policy Answers'

    def __str__(self):
        return f"Answer {str(self.field_id)[:8]} on #{self.booking.id_short}"
