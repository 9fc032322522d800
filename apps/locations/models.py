"""
Location models — a physical clinic and the blackout periods that close it.
"""
from django.core.exceptions import ValidationError
from django.db import models
from apps.core.models import BaseModel, CatalogModel


class Location(CatalogModel):
    name = models.CharField(max_length=120)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=80, blank=True)

    class Meta:
        verbose_name = 'Location'
        verbose_name_plural = 'Locations'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.city})" if self.city else self.name


class BlackoutPeriod(BaseModel):
    """
    Closed, inclusive date range during which a location offers no slots,
    regardless of shifts. A blackout without a location closes every location.
    """
    location = models.ForeignKey(
        Location,
        on_delete=models.CASCADE,
        related_name='blackout_periods',
        null=True,
        blank=True,
    )
    start_date = models.DateField(db_index=True)
    end_date = models.DateField(db_index=True)
    reason = models.CharField(max_length=255, blank=True)

    class Meta:
        verbose_name = 'Blackout Period'
        verbose_name_plural = 'Blackout Periods'
        ordering = ['-start_date']

    def __str__(self):
        where = self.location.name if self.location_id else 'All locations'
        return f"{where}: closed {self.start_date} – {self.end_date}"

    def clean(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError('Blackout end date must not precede its start date.')
