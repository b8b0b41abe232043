from django.contrib import admin
from django.urls import path, include

from .views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path("health/", health_check),  # Health check endpoint

    # Authentication endpoints (at /api/auth/)
    path('api/auth/', include('accounts.urls')),  # register, login, refresh

    # Driver APIs (profile, rides, booking requests, stats)
    path('api/driver/', include('drivers.urls')),

    # Passenger APIs (bookings, ride requests, reviews)
    path('api/passenger/', include('passengers.urls')),

    # Public ride browse (at /api/rides/)
    path('api/rides/', include('rides.urls')),
]
