"""
Request validation for the booking JSON API.

Views feed query params or decoded JSON bodies into these forms; any error
becomes a 400 INVALID_REQUEST response with the field details.
"""
from django import forms
from apps.bookings.config import get_scheduling_config
from apps.clients.models import validate_phone


class AvailabilityQueryForm(forms.Form):
    date = forms.DateField(input_formats=['%Y-%m-%d'])
    service_id = forms.UUIDField()
    location_id = forms.UUIDField()
    staff_id = forms.UUIDField(required=False)
    exclude_booking_id = forms.UUIDField(required=False)
    is_twin = forms.BooleanField(required=False)


class HeatmapQueryForm(forms.Form):
    start = forms.DateField(input_formats=['%Y-%m-%d'])
    end = forms.DateField(input_formats=['%Y-%m-%d'])
    service_id = forms.UUIDField()
    location_id = forms.UUIDField()
    staff_id = forms.UUIDField(required=False)
    is_twin = forms.BooleanField(required=False)

    def clean(self):
        cleaned = super().clean()
        start, end = cleaned.get('start'), cleaned.get('end')
        if start and end and start > end:
            raise forms.ValidationError('Range start must not be after its end.')
        max_days = get_scheduling_config().max_heatmap_days
        if start and end and (end - start).days + 1 > max_days:
            raise forms.ValidationError(f'Range may span at most {max_days} days.')
        return cleaned


class SlotSelectionForm(forms.Form):
    """The slot a client picked from the availability list."""
    service_id = forms.UUIDField()
    location_id = forms.UUIDField()
    staff_id = forms.UUIDField()
    shift_id = forms.UUIDField()
    start_time = forms.DateTimeField()
    end_time = forms.DateTimeField()


class LockRequestForm(SlotSelectionForm):
    session_token = forms.CharField(max_length=255)


class LockReleaseForm(forms.Form):
    session_token = forms.CharField(max_length=255)


class BookingRequestForm(SlotSelectionForm):
    price_eur_cents = forms.IntegerField(min_value=0)
    client_id = forms.UUIDField(required=False)
    client_email = forms.EmailField(required=False)
    first_name = forms.CharField(required=False, max_length=100)
    last_name = forms.CharField(required=False, max_length=100)
    phone = forms.CharField(required=False, max_length=32)
    address = forms.CharField(required=False, max_length=255)
    notes = forms.CharField(required=False, max_length=500)
    session_token = forms.CharField(required=False, max_length=255)

    def clean_phone(self):
        raw = self.cleaned_data.get('phone', '')
        try:
            return validate_phone(raw)
        except ValueError as exc:
            raise forms.ValidationError('Phone number contains invalid characters.') from exc

    def clean(self):
        cleaned = super().clean()
        if not cleaned.get('client_id') and not cleaned.get('client_email'):
            raise forms.ValidationError('Either client_id or client_email is required.')
        return cleaned


class AddonSelectionForm(forms.Form):
    addon_id = forms.UUIDField()
    quantity = forms.IntegerField(min_value=1)
    price_eur_cents = forms.IntegerField(min_value=0, required=False)


class PolicyAnswerForm(forms.Form):
    FIELD_TYPES = [
        ('multi_choice', 'Multiple choice'),
        ('text_input', 'Text'),
        ('number_input', 'Number'),
        ('date_time', 'Date/time'),
        ('checkbox', 'Checkbox'),
        ('file_upload', 'File upload'),
    ]

    field_id = forms.UUIDField()
    field_type = forms.ChoiceField(choices=FIELD_TYPES, required=False)
    price_eur_cents = forms.IntegerField(min_value=0, required=False)
