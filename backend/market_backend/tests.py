from unittest.mock import patch

from django.test import TestCase
from rest_framework.test import APIRequestFactory

from .views import health_check


class HealthCheckTests(TestCase):
	@patch('market_backend.views.redis.Redis.from_url')
	def test_healthy(self, mock_redis):
		response = health_check(APIRequestFactory().get('/health/'))

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['services']['database'], 'healthy')
		mock_redis.return_value.ping.assert_called_once()

	@patch('market_backend.views.redis.Redis.from_url')
	def test_redis_down(self, mock_redis):
		mock_redis.return_value.ping.side_effect = ConnectionError('refused')

		response = health_check(APIRequestFactory().get('/health/'))

		self.assertEqual(response.status_code, 503)
		self.assertTrue(response.data['services']['redis'].startswith('unhealthy'))
