from django.contrib import admin
from drivers.models import DriverProfile


@admin.register(DriverProfile)
class DriverProfileAdmin(admin.ModelAdmin):
    """Admin panel for managing Driver Profiles"""

    list_display = [
        "user",
        "vehicle_number",
        "vehicle_model",
        "number_of_seats",
        "verification_status",
    ]

    list_filter = [
        "verification_status",
    ]

    search_fields = [
        "user__username",
        "vehicle_number",
    ]

    ordering = ("user__username",)
    actions = ["mark_verified"]

    @admin.action(description="Mark selected drivers as verified")
    def mark_verified(self, request, queryset):
        updated = queryset.update(
            verification_status=DriverProfile.VerificationStatus.VERIFIED,
            rejection_reason=None,
        )
        self.message_user(request, f"{updated} driver(s) verified.")
