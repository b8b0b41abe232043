"""Tells what to show in the Django admin interface for rides app"""

from django.contrib import admin
from .models import Booking, Review, Ride, RideRequest


class BookingInline(admin.TabularInline):
    model = Booking
    extra = 0
    fields = ('passenger', 'seats_booked', 'fare', 'status', 'rejection_reason')
    readonly_fields = fields
    can_delete = False


@admin.register(Ride)
class RideAdmin(admin.ModelAdmin):
    """Ride admin. Moderators flag suspicious rides here."""
    list_display = ['id', 'driver', 'origin', 'destination', 'departure_at',
                    'available_seats', 'total_seats', 'fare', 'status', 'is_suspicious']
    list_filter = ['status', 'is_suspicious', 'departure_date']
    list_editable = ['is_suspicious']
    search_fields = ['origin', 'destination', 'driver__user__username', 'driver__vehicle_number']
    # Seats only move through the booking services
    readonly_fields = ['available_seats', 'total_seats', 'departure_at', 'created_at', 'updated_at']
    date_hierarchy = 'departure_date'
    inlines = [BookingInline]


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ('id', 'ride', 'passenger', 'seats_booked', 'fare', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('passenger__username', 'ride__origin', 'ride__destination')
    readonly_fields = ('ride', 'passenger', 'seats_booked', 'fare', 'status', 'created_at', 'updated_at')


@admin.register(RideRequest)
class RideRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'passenger', 'origin', 'destination', 'earliest_date',
                    'earliest_time', 'latest_time', 'seats_needed', 'status', 'expires_at']
    list_filter = ['status', 'earliest_date']
    search_fields = ['passenger__username', 'origin', 'destination']
    readonly_fields = ['window_start', 'window_end', 'created_at', 'updated_at']


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "reviewer", "reviewee", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("reviewer__username", "reviewee__username")
