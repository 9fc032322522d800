"""
URL configuration for the clinic network booking engine.
"""
from django.urls import path, include

urlpatterns = [
    path('api/', include('apps.bookings.urls', namespace='bookings')),
]
