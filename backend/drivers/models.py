from django.db import models
from django.conf import settings

User = settings.AUTH_USER_MODEL


class DriverProfile(models.Model):
    """Driver-specific details: vehicle capacity and moderation status"""

    class VerificationStatus(models.TextChoices):
        PENDING = 'PENDING', 'Pending review'
        VERIFIED = 'VERIFIED', 'Verified'
        REJECTED = 'REJECTED', 'Rejected'

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='driver_profile')

    # Vehicle details
    vehicle_number = models.CharField(max_length=20, unique=True)
    vehicle_model = models.CharField(max_length=100, blank=True)
    number_of_seats = models.PositiveSmallIntegerField(default=4)

    # Set by moderators in the admin
    verification_status = models.CharField(
        max_length=10,
        choices=VerificationStatus.choices,
        default=VerificationStatus.PENDING,
    )
    rejection_reason = models.TextField(null=True, blank=True)

    class Meta:
        db_table = 'driver_profiles'

    @property
    def is_verified(self):
        return self.verification_status == self.VerificationStatus.VERIFIED

    def __str__(self):
        return f"{self.user.username} - {self.vehicle_number}"
