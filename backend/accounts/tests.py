from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import User
from drivers.models import DriverProfile


class AuthFlowTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def register(self, **overrides):
        payload = {
            'username': 'john_doe',
            'email': 'john@example.com',
            'password': 'password123',
            'role': 'passenger',
            'phone_number': '+1234567890',
        }
        payload.update(overrides)
        return self.client.post('/api/auth/register/', payload, format='json')

    def test_register_passenger_returns_tokens(self):
        response = self.register()

        self.assertEqual(response.status_code, 201)
        self.assertIn('access', response.data['tokens'])
        self.assertEqual(response.data['user']['role'], 'passenger')
        self.assertFalse(DriverProfile.objects.exists())

    def test_register_driver_creates_unverified_profile(self):
        response = self.register(role='driver', vehicle_number='MH-12-AB-1234', number_of_seats=6)

        self.assertEqual(response.status_code, 201)
        profile = DriverProfile.objects.get(user__username='john_doe')
        self.assertEqual(profile.number_of_seats, 6)
        self.assertFalse(profile.is_verified)

    def test_driver_needs_vehicle_number(self):
        response = self.register(role='driver')
        self.assertEqual(response.status_code, 400)
        self.assertIn('vehicle_number', response.data)

    def test_duplicate_email(self):
        self.register()
        response = self.register(username='someone_else')
        self.assertEqual(response.status_code, 400)

    def test_login_and_refresh(self):
        self.register()

        response = self.client.post(
            '/api/auth/login/', {'username': 'john_doe', 'password': 'password123'}, format='json'
        )
        self.assertEqual(response.status_code, 200)
        refresh = response.data['tokens']['refresh']

        response = self.client.post('/api/auth/refresh/', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertIn('access', response.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        response = self.client.get('/api/auth/me/')
        self.assertEqual(response.data['username'], 'john_doe')

    def test_bad_credentials(self):
        User.objects.create_user(username='jane', password='secret123')
        response = self.client.post('/api/auth/login/', {'username': 'jane', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_invalid_refresh_token(self):
        response = self.client.post('/api/auth/refresh/', {'refresh': 'garbage'}, format='json')
        self.assertEqual(response.status_code, 401)
