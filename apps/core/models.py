"""
Core base model mixins.
All engine models inherit from these.

Catalog records (locations, staff, services, add-ons, shifts) are retired by
clearing `is_active` rather than deleted: bookings keep pointing at them.
"""
import uuid
from django.db import models


class UUIDModel(models.Model):
    """Primary key is a UUID, not an auto-incrementing integer."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    class Meta:
        abstract = True


class TimestampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class ActiveQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class ActivatableModel(models.Model):
    """
    Retire-instead-of-delete mixin.
    Inactive rows stay referenced by history but are never offered for booking.
    """
    is_active = models.BooleanField(default=True, db_index=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        abstract = True

    def retire(self):
        self.is_active = False
        self.save(update_fields=['is_active', 'updated_at'])


class BaseModel(UUIDModel, TimestampedModel):
    """
    UUID pk + timestamps.
    Use this for all main business models.
    """
    class Meta:
        abstract = True


class CatalogModel(BaseModel, ActivatableModel):
    """BaseModel that can be retired. Use for bookable catalog entries."""
    class Meta:
        abstract = True
