"""
Client model — the person a booking is made for.
Email address is the canonical identity key.

Email normalisation guarantees deduplication regardless of how the
client types their address:
  " Anna@Example.COM "  →  anna@example.com
"""
import re
from django.db import models
from apps.core.models import UUIDModel, TimestampedModel

PHONE_RE = re.compile(r'^[\d\s+().-]*$')


def normalize_email(raw: str) -> str:
    return (raw or '').strip().lower()


def validate_phone(raw: str) -> str:
    """
    Accept digits, spaces and + ( ) . - only, up to 32 characters.

    Raises ValueError otherwise. Returns the trimmed value.
    """
    value = (raw or '').strip()
    if len(value) > 32 or not PHONE_RE.match(value):
        raise ValueError(f"Phone number '{raw}' contains invalid characters.")
    return value


class Client(UUIDModel, TimestampedModel):
    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=100, blank=True)
    last_name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    address = models.CharField(max_length=255, blank=True)

    class Meta:
        verbose_name = 'Client'
        verbose_name_plural = 'Clients'
        ordering = ['-created_at']

    def __str__(self):
        name = f"{self.first_name} {self.last_name}".strip()
        return f"{name} <{self.email}>" if name else self.email

    @classmethod
    def get_or_create_by_email(cls, email, **contact):
        """
        Canonical client lookup: always deduplicate by normalised email.
        On a returning client only the non-empty contact fields are updated,
        so checkout can refresh details without wiping stored ones.
        """
        email = normalize_email(email)
        fields = {k: v for k, v in contact.items() if v}
        client, created = cls.objects.get_or_create(email=email, defaults=fields)
        if not created:
            update_fields = []
            for name, value in fields.items():
                if getattr(client, name) != value:
                    setattr(client, name, value)
                    update_fields.append(name)
            if update_fields:
                client.save(update_fields=update_fields + ['updated_at'])
        return client, created
