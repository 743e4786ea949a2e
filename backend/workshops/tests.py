from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIRequestFactory, force_authenticate

from common.testing import MarketplaceFixtures, UPPSALA
from repairs.models import Booking, Offer, RepairRequest, Review
from .views import (
	AvailableRequestsView,
	WorkshopProfileView,
	WorkshopReviewsView,
	WorkshopStatsView,
	WorkshopVerificationView,
)


class WorkshopProfileTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.workshop = self.make_workshop()

	def test_get_profile(self):
		request = self.factory.get('/profile/')
		force_authenticate(request, user=self.workshop.user)
		response = WorkshopProfileView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['organization_number'], self.workshop.organization_number)

	def test_patch_opening_hours(self):
		hours = {'monday': {'open': '07:30', 'close': '16:00'}}
		request = self.factory.patch('/profile/', {'opening_hours': hours, 'is_verified': True}, format='json')
		force_authenticate(request, user=self.workshop.user)
		response = WorkshopProfileView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.workshop.refresh_from_db()
		self.assertEqual(self.workshop.opening_hours, hours)
		self.assertFalse(self.workshop.is_verified)

	def test_closing_before_opening_is_rejected(self):
		hours = {'monday': {'open': '17:00', 'close': '08:00'}}
		request = self.factory.patch('/profile/', {'opening_hours': hours}, format='json')
		force_authenticate(request, user=self.workshop.user)
		response = WorkshopProfileView.as_view()(request)

		self.assertEqual(response.status_code, 400)

	def test_unknown_weekday_is_rejected(self):
		request = self.factory.patch('/profile/', {'opening_hours': {'funday': {'open': '08:00', 'close': '09:00'}}}, format='json')
		force_authenticate(request, user=self.workshop.user)
		response = WorkshopProfileView.as_view()(request)

		self.assertEqual(response.status_code, 400)

	def test_customer_has_no_profile(self):
		request = self.factory.get('/profile/')
		force_authenticate(request, user=self.make_customer())
		response = WorkshopProfileView.as_view()(request)

		self.assertEqual(response.status_code, 403)


class AvailableRequestsTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.customer = self.make_customer()
		self.workshop = self.make_workshop()
		self.nearby = self.make_request(self.customer)
		self.far = self.make_request(self.customer, location=UPPSALA)

	def _search(self, params=None):
		request = self.factory.get('/requests/available/', params or {})
		force_authenticate(request, user=self.workshop.user)
		return AvailableRequestsView.as_view()(request)

	def test_default_radius(self):
		response = self._search()

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['count'], 1)
		self.assertEqual(response.data['results'][0]['id'], self.nearby.id)
		self.assertIsInstance(response.data['results'][0]['distance'], float)

	def test_wider_radius_sorted_by_distance(self):
		response = self._search({'radius': 100})

		self.assertEqual([r['id'] for r in response.data['results']], [self.nearby.id, self.far.id])

	def test_invalid_radius(self):
		response = self._search({'radius': -1})

		self.assertEqual(response.status_code, 400)


class WorkshopStatsTests(MarketplaceFixtures, TestCase):
	def test_counters(self):
		factory = APIRequestFactory()
		customer = self.make_customer()
		workshop = self.make_workshop()
		self.make_offer(self.make_request(customer), workshop)
		done = self.make_request(customer, status=RepairRequest.Status.COMPLETED)
		self.make_booking(self.make_offer(done, workshop, price='1000.00', status=Offer.Status.ACCEPTED), status=Booking.Status.DONE)

		request = factory.get('/stats/')
		force_authenticate(request, user=workshop.user)
		response = WorkshopStatsView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['active_offers'], 1)
		self.assertEqual(response.data['completed_jobs'], 1)
		self.assertEqual(response.data['proposals_sent'], 2)
		self.assertEqual(response.data['total_revenue'], Decimal('900.00'))


class WorkshopReviewsTests(MarketplaceFixtures, TestCase):
	def test_public_list_hides_unpublished(self):
		factory = APIRequestFactory()
		customer = self.make_customer()
		workshop = self.make_workshop()
		for published in (True, False):
			repair_request = self.make_request(customer, status=RepairRequest.Status.COMPLETED)
			booking = self.make_booking(self.make_offer(repair_request, workshop, status=Offer.Status.ACCEPTED))
			Review.objects.create(booking=booking, customer=customer, workshop=workshop, rating=4, is_published=published)

		request = factory.get('/%d/reviews/' % workshop.id)
		response = WorkshopReviewsView.as_view()(request, workshop_id=workshop.id)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(len(response.data), 1)

	def test_unknown_workshop(self):
		request = APIRequestFactory().get('/999/reviews/')
		response = WorkshopReviewsView.as_view()(request, workshop_id=999)

		self.assertEqual(response.status_code, 404)


class WorkshopVerificationTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.workshop = self.make_workshop()

	def _verify(self, user):
		request = self.factory.patch('/verification/', {'is_verified': True}, format='json')
		force_authenticate(request, user=user)
		return WorkshopVerificationView.as_view()(request, workshop_id=self.workshop.id)

	def test_admin_verifies(self):
		response = self._verify(self.make_admin())

		self.assertEqual(response.status_code, 200)
		self.workshop.refresh_from_db()
		self.assertTrue(self.workshop.is_verified)

	def test_workshop_cannot_verify_itself(self):
		response = self._verify(self.workshop.user)

		self.assertEqual(response.status_code, 403)
		self.workshop.refresh_from_db()
		self.assertFalse(self.workshop.is_verified)
