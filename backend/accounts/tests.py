from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.test import TestCase
from rest_framework.test import APIRequestFactory, force_authenticate

from workshops.models import Workshop
from .models import User
from .views import LoginView, MeView, RefreshTokenView, RegisterView


class RegistrationTests(TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()

	def _register(self, payload):
		request = self.factory.post('/api/auth/register/', payload, format='json')
		return RegisterView.as_view()(request)

	@patch('accounts.views.notify_registration')
	def test_customer_registration_returns_tokens(self, mock_notify):
		response = self._register({
			'email': 'Anna@Example.com',
			'password': 'pass1234',
			'first_name': 'Anna',
		})

		self.assertEqual(response.status_code, 201)
		self.assertIn('access', response.data['tokens'])
		user = User.objects.get(email='anna@example.com')
		self.assertEqual(user.role, User.ROLE_CUSTOMER)
		self.assertEqual(user.username, 'anna@example.com')
		mock_notify.assert_called_once_with(user)

	@patch('accounts.views.notify_registration')
	def test_workshop_registration_creates_profile(self, mock_notify):
		response = self._register({
			'email': 'shop@example.com',
			'password': 'shop1234',
			'role': 'WORKSHOP',
			'workshop': {
				'company_name': 'Södermalm Bil',
				'organization_number': '556677-8899',
				'phone': '+4681234567',
				'address': 'Götgatan 20',
				'city': 'Stockholm',
				'postal_code': '11846',
				'opening_hours': {'monday': {'open': '08:00', 'close': '17:00'}},
				'brands_handled': ['Volvo', 'Saab', 'Volvo'],
			},
		})

		self.assertEqual(response.status_code, 201)
		workshop = Workshop.objects.get(organization_number='556677-8899')
		self.assertEqual(workshop.email, 'shop@example.com')
		self.assertFalse(workshop.is_verified)
		self.assertEqual(workshop.brands_handled, ['Saab', 'Volvo'])
		self.assertEqual(response.data['user']['workshop_id'], workshop.id)

	@patch('accounts.views.notify_registration')
	def test_workshop_registration_requires_company_details(self, mock_notify):
		response = self._register({
			'email': 'shop@example.com',
			'password': 'shop1234',
			'role': 'WORKSHOP',
		})

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'validation_error')
		self.assertIn('workshop', response.data['details'])
		mock_notify.assert_not_called()

	@patch('accounts.views.notify_registration')
	def test_duplicate_email(self, mock_notify):
		User.objects.create_user(username='anna@example.com', email='anna@example.com', password='pass1234')

		response = self._register({'email': 'anna@example.com', 'password': 'pass1234'})

		self.assertEqual(response.status_code, 400)
		self.assertIn('email', response.data['details'])


class LoginTests(TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.user = User.objects.create_user(
			username='anna@example.com',
			email='anna@example.com',
			password='pass1234',
		)

	def test_login_and_refresh(self):
		request = self.factory.post('/api/auth/login/', {'email': 'anna@example.com', 'password': 'pass1234'}, format='json')
		response = LoginView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['user']['id'], self.user.id)

		refresh = response.data['tokens']['refresh']
		request = self.factory.post('/api/auth/refresh/', {'refresh': refresh}, format='json')
		response = RefreshTokenView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.assertIn('access', response.data)

	def test_wrong_password(self):
		request = self.factory.post('/api/auth/login/', {'email': 'anna@example.com', 'password': 'nope'}, format='json')
		response = LoginView.as_view()(request)

		self.assertEqual(response.status_code, 400)

	def test_invalid_refresh_token(self):
		request = self.factory.post('/api/auth/refresh/', {'refresh': 'garbage'}, format='json')
		response = RefreshTokenView.as_view()(request)

		self.assertEqual(response.status_code, 401)

	def test_me_patch(self):
		request = self.factory.patch('/api/auth/me/', {'city': 'Göteborg', 'role': 'ADMIN'}, format='json')
		force_authenticate(request, user=self.user)
		response = MeView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.user.refresh_from_db()
		self.assertEqual(self.user.city, 'Göteborg')
		self.assertEqual(self.user.role, User.ROLE_CUSTOMER)


class CreateAdminCommandTests(TestCase):
	def test_creates_then_updates_admin(self):
		call_command('create_admin', email='Root@Example.com', password='secret123', stdout=StringIO())

		admin = User.objects.get(username='root@example.com')
		self.assertTrue(admin.is_platform_admin)
		self.assertTrue(admin.is_staff)
		self.assertTrue(admin.check_password('secret123'))

		call_command('create_admin', email='root@example.com', password='changed123', stdout=StringIO())

		admin.refresh_from_db()
		self.assertEqual(User.objects.filter(role=User.ROLE_ADMIN).count(), 1)
		self.assertTrue(admin.check_password('changed123'))
