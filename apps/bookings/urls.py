"""
Booking engine URLs.

  /api/availability/           GET     Slots for one day
  /api/availability/heatmap/   GET     Slot counts per day over a range
  /api/bookings/               POST    Commit a booking
  /api/bookings/lock/          POST    Acquire / refresh a checkout hold
                               DELETE  Release all holds of a session
"""
from django.urls import path
from . import views

app_name = 'bookings'

urlpatterns = [
    # ── Availability ───────────────────────────────────────────────────────────
    path('availability/',           views.api_availability,   name='availability'),
    path('availability/heatmap/',   views.api_heatmap,        name='heatmap'),

    # ── Reservation ────────────────────────────────────────────────────────────
    path('bookings/',               views.api_create_booking, name='create'),
    path('bookings/lock/',          views.api_lock,           name='lock'),
]
