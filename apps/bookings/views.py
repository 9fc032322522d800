"""
Booking JSON API — thin HTTP layer over engine.py and commit.py.

  GET    /api/availability/            Day slots for a service at a location
  GET    /api/availability/heatmap/    Slot counts per day over a date range
  POST   /api/bookings/lock/           Hold a slot during checkout
  DELETE /api/bookings/lock/           Release every hold of a session
  POST   /api/bookings/                Commit a booking

Engine errors map to {"error": <code>, "message": ...} with the status
carried by the exception class.
"""
import json
import logging

from django.db import DatabaseError, transaction
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST, require_http_methods

from apps.clients.models import Client

from .commit import AddonSelection, BookingInput, PolicyAnswerInput, create_booking
from .engine import acquire_slot_lock, get_day_slots, get_heatmap, release_session_locks
from .exceptions import BookingEngineError, NotFoundError
from .forms import (
    AddonSelectionForm,
    AvailabilityQueryForm,
    BookingRequestForm,
    HeatmapQueryForm,
    LockReleaseForm,
    LockRequestForm,
    PolicyAnswerForm,
)

logger = logging.getLogger(__name__)

# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────

def _json_body(request):
    """Decoded JSON object body, or None when the body is not a JSON object."""
    try:
        body = json.loads(request.body or b'{}')
    except (ValueError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


def _invalid(details=None, message='Invalid request data'):
    payload = {'error': 'INVALID_REQUEST', 'message': message}
    if details is not None:
        payload['details'] = details
    return JsonResponse(payload, status=400)


def _engine_error(exc: BookingEngineError):
    return JsonResponse({'error': exc.code, 'message': str(exc)}, status=exc.http_status)


def _booking_payload(booking) -> dict:
    addons = [
        {
            'addon_id': str(a.addon_id),
            'name': a.addon.name,
            'quantity': a.quantity,
            'price_eur_cents': a.price_eur_cents,
        }
        for a in booking.addons.select_related('addon')
    ]
    return {
        'id': str(booking.id),
        'client_id': str(booking.client_id) if booking.client_id else None,
        'service_id': str(booking.service_id),
        'location_id': str(booking.location_id),
        'staff_id': str(booking.staff_id) if booking.staff_id else None,
        'shift_id': str(booking.shift_id) if booking.shift_id else None,
        'start_time': booking.start_time.isoformat(),
        'end_time': booking.end_time.isoformat(),
        'price_eur_cents': booking.price_eur_cents,
        'total_price_eur_cents': booking.price_eur_cents + sum(a['price_eur_cents'] for a in addons),
        'status': booking.status,
        'payment_status': booking.payment_status,
        'notes': booking.notes,
        'addons': addons,
    }


def _parse_items(raw, form_class, field_name):
    """
    Validate a list of nested objects with `form_class`.
    Returns (forms, error_response); error_response is None when all are valid.
    """
    if raw in (None, ''):
        return [], None
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        return [], _invalid({field_name: ['Must be a list of objects.']})
    forms = [form_class(item) for item in raw]
    errors = {i: f.errors.get_json_data() for i, f in enumerate(forms) if not f.is_valid()}
    if errors:
        return [], _invalid({field_name: errors})
    return forms, None


def _resolve_client(data):
    """Use the given client id, or find/create the client by email."""
    if data.get('client_id'):
        client = Client.objects.filter(id=data['client_id']).first()
        if client is None:
            raise NotFoundError('Client not found.')
        return client

    client, created = Client.get_or_create_by_email(
        data['client_email'],
        first_name=data.get('first_name', ''),
        last_name=data.get('last_name', ''),
        phone=data.get('phone', ''),
        address=data.get('address', ''),
    )
    if created:
        logger.info('Client %s created at checkout', client.id)
    return client


# ─────────────────────────────────────────────────────────────────────────────
# Availability
# ─────────────────────────────────────────────────────────────────────────────

@require_GET
def api_availability(request):
    """
    GET /api/availability/?date=YYYY-MM-DD&service_id=<uuid>&location_id=<uuid>
        [&staff_id=<uuid>][&exclude_booking_id=<uuid>][&is_twin=true]
    """
    form = AvailabilityQueryForm(request.GET)
    if not form.is_valid():
        return _invalid(form.errors.get_json_data())
    data = form.cleaned_data

    try:
        slots = get_day_slots(
            data['date'],
            data['service_id'],
            data['location_id'],
            staff_id=data.get('staff_id'),
            twin=data.get('is_twin', False),
            exclude_booking_id=data.get('exclude_booking_id'),
        )
    except BookingEngineError as exc:
        return _engine_error(exc)

    return JsonResponse({
        'date': data['date'].isoformat(),
        'slots': [slot.as_dict() for slot in slots],
    })


@require_GET
def api_heatmap(request):
    """
    GET /api/availability/heatmap/?start=YYYY-MM-DD&end=YYYY-MM-DD
        &service_id=<uuid>&location_id=<uuid>[&staff_id=<uuid>][&is_twin=true]
    """
    form = HeatmapQueryForm(request.GET)
    if not form.is_valid():
        return _invalid(form.errors.get_json_data())
    data = form.cleaned_data

    try:
        days = get_heatmap(
            data['start'],
            data['end'],
            data['service_id'],
            data['location_id'],
            staff_id=data.get('staff_id'),
            twin=data.get('is_twin', False),
        )
    except BookingEngineError as exc:
        return _engine_error(exc)

    return JsonResponse({'days': days})


# ─────────────────────────────────────────────────────────────────────────────
# Locks
# ─────────────────────────────────────────────────────────────────────────────

@csrf_exempt
@require_http_methods(['POST', 'DELETE'])
def api_lock(request):
    if request.method == 'DELETE':
        return _release_lock(request)

    body = _json_body(request)
    if body is None:
        return _invalid(message='Request body must be a JSON object')
    form = LockRequestForm(body)
    if not form.is_valid():
        return _invalid(form.errors.get_json_data())
    data = form.cleaned_data

    try:
        lock = acquire_slot_lock(
            service_id=data['service_id'],
            location_id=data['location_id'],
            staff_id=data['staff_id'],
            shift_id=data['shift_id'],
            start_time=data['start_time'],
            end_time=data['end_time'],
            session_token=data['session_token'],
        )
    except BookingEngineError as exc:
        return _engine_error(exc)
    except DatabaseError:
        logger.exception('Lock acquisition failed for shift %s', data['shift_id'])
        raise

    return JsonResponse({
        'success': True,
        'lock_id': str(lock.id),
        'expires_at': lock.expires_at.isoformat(),
    })


def _release_lock(request):
    """DELETE /api/bookings/lock/?session_token=<token>"""
    form = LockReleaseForm(request.GET)
    if not form.is_valid():
        return _invalid(form.errors.get_json_data(), message='Missing session_token')

    try:
        released = release_session_locks(form.cleaned_data['session_token'])
    except DatabaseError:
        logger.exception('Lock release failed')
        raise

    return JsonResponse({'success': True, 'released': released})


# ─────────────────────────────────────────────────────────────────────────────
# Booking commit
# ─────────────────────────────────────────────────────────────────────────────

@csrf_exempt
@require_POST
def api_create_booking(request):
    body = _json_body(request)
    if body is None:
        return _invalid(message='Request body must be a JSON object')

    form = BookingRequestForm(body)
    if not form.is_valid():
        return _invalid(form.errors.get_json_data())
    addon_forms, error = _parse_items(body.get('addons'), AddonSelectionForm, 'addons')
    if error:
        return error
    answer_forms, error = _parse_items(body.get('policy_answers'), PolicyAnswerForm, 'policy_answers')
    if error:
        return error

    data = form.cleaned_data
    # Client and booking commit together
    try:
        with transaction.atomic():
            client = _resolve_client(data)
            booking = create_booking(BookingInput(
                service_id=data['service_id'],
                location_id=data['location_id'],
                staff_id=data['staff_id'],
                shift_id=data['shift_id'],
                start_time=data['start_time'],
                end_time=data['end_time'],
                price_eur_cents=data['price_eur_cents'],
                client_id=client.id,
                notes=data.get('notes', ''),
                addons=[
                    AddonSelection(
                        addon_id=f.cleaned_data['addon_id'],
                        quantity=f.cleaned_data['quantity'],
                        price_eur_cents=f.cleaned_data.get('price_eur_cents'),
                    )
                    for f in addon_forms
                ],
                policy_answers=[
                    PolicyAnswerInput(
                        field_id=f.cleaned_data['field_id'],
                        field_type=f.cleaned_data.get('field_type', ''),
                        price_eur_cents=f.cleaned_data.get('price_eur_cents'),
                        value=raw.get('value'),
                    )
                    for f, raw in zip(answer_forms, body.get('policy_answers') or [])
                ],
            ))
    except BookingEngineError as exc:
        return _engine_error(exc)

    # The booking supersedes this session's checkout holds
    if data.get('session_token'):
        release_session_locks(data['session_token'])

    return JsonResponse({'booking': _booking_payload(booking)}, status=201)
