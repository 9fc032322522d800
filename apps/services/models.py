"""
Service models — timing policy and add-on catalog for a bookable service.

Each service carries its own timing rules:
  - duration_minutes   length of one appointment
  - buffer_minutes     cleanup gap (stored, not applied to slot spacing)
  - lead_time_minutes  minimum notice between "now" and the slot start

A service may allow twin appointments (two clients side by side). Those last
twin_duration_minutes, or twice the single duration when that is unset.

Prices are integer euro cents.
"""
from django.db import models
from django.core.validators import MinValueValidator
from apps.core.models import CatalogModel


class Service(CatalogModel):
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text='Appointment duration in minutes',
    )
    buffer_minutes = models.PositiveIntegerField(
        default=0,
        help_text='Buffer/cleanup gap after an appointment',
    )
    lead_time_minutes = models.PositiveIntegerField(
        default=0,
        help_text='Minimum notice in minutes before the appointment start',
    )
    price_eur_cents = models.PositiveIntegerField(default=0)
    allows_twins = models.BooleanField(default=False)
    twin_duration_minutes = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text='Twin appointment duration in minutes (defaults to twice the duration)',
    )

    class Meta:
        verbose_name = 'Service'
        verbose_name_plural = 'Services'
        ordering = ['name', 'duration_minutes']

    def __str__(self):
        return f"{self.name} ({self.duration_minutes} min)"

    def twin_minutes(self) -> int:
        return self.twin_duration_minutes or self.duration_minutes * 2

    def rules_for(self, twin=False):
        """Timing policy as consumed by the slot generator. Twin is ignored unless allowed."""
        from apps.bookings.slots import ServiceRules
        duration = self.twin_minutes() if twin and self.allows_twins else self.duration_minutes
        return ServiceRules(
            duration_minutes=duration,
            buffer_minutes=self.buffer_minutes,
            lead_time_minutes=self.lead_time_minutes,
        )


class ServiceAddon(CatalogModel):
    """
    Extra booked together with its service.
    Required add-ons must be part of every booking of the service.
    """
    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name='addons')
    name = models.CharField(max_length=150)
    description = models.TextField(blank=True)
    price_eur_cents = models.PositiveIntegerField(default=0)
    is_required = models.BooleanField(default=False)

    class Meta:
        verbose_name = 'Service Add-on'
        verbose_name_plural = 'Service Add-ons'
        ordering = ['service', 'name']

    def __str__(self):
        return f"{self.name} — {self.service.name}"
