from datetime import timedelta
from unittest.mock import MagicMock, patch

from django.test import TestCase
from rest_framework.test import APIClient

from .helpers import make_driver, make_passenger, make_ride


class PublicRideViewTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        _, self.profile = make_driver('driver_one')
        self.ride = make_ride(self.profile, ahead=timedelta(days=2), origin='Pune', destination='Goa')

    def test_upcoming_is_public(self):
        response = self.client.get('/api/rides/upcoming/', {'origin': 'pune'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['rides'][0]['id'], self.ride.id)
        self.assertEqual(response.data['rides'][0]['driver']['username'], 'driver_one')

    def test_search_requires_route_and_date(self):
        response = self.client.get('/api/rides/search/', {'origin': 'pune'})
        self.assertEqual(response.status_code, 400)

        response = self.client.get('/api/rides/search/', {
            'origin': 'pune',
            'destination': 'goa',
            'departure_date': self.ride.departure_date.isoformat(),
            'seats': 2,
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual([r['id'] for r in response.data['rides']], [self.ride.id])

    def test_detail_and_missing_ride(self):
        self.assertEqual(self.client.get(f'/api/rides/{self.ride.id}/').status_code, 200)

        response = self.client.get('/api/rides/99999/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['error'], 'not_found')
        self.assertFalse(response.data['retryable'])

    def test_active_requests_are_for_drivers(self):
        self.client.force_authenticate(user=make_passenger('alice'))
        self.assertEqual(self.client.get('/api/rides/requests/').status_code, 403)

        self.client.force_authenticate(user=self.profile.user)
        response = self.client.get('/api/rides/requests/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['count'], 0)


class HealthCheckTests(TestCase):
    @patch('app_backend.views.redis.Redis.from_url')
    def test_healthy(self, from_url):
        from_url.return_value = MagicMock()

        response = APIClient().get('/health/')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['services']['database'], 'healthy')
        self.assertEqual(response.data['services']['celery'], 'healthy')
