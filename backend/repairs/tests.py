import shutil
import tempfile
from datetime import timedelta
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework.test import APIRequestFactory, force_authenticate

from common.testing import MarketplaceFixtures
from .models import Booking, InspectionReport, Offer, RepairRequest, Review, Vehicle
from .views.bookings import BookingCreateView, BookingUpdateView, MyBookingsView
from .views.offers import OfferCreateView, OfferUpdateView, WorkshopOffersView
from .views.payouts import PayoutListView
from .views.requests import (
	InspectionReportUploadView,
	RepairRequestCancelView,
	RepairRequestDetailView,
	RepairRequestListCreateView,
	RepairRequestOffersView,
	VehicleListCreateView,
)
from .views.reviews import BookingReviewView, ReviewCreateView

MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class VehicleAndReportTests(MarketplaceFixtures, TestCase):
	@classmethod
	def tearDownClass(cls):
		shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
		super().tearDownClass()

	def setUp(self):
		self.factory = APIRequestFactory()
		self.customer = self.make_customer()

	def test_register_vehicle(self):
		request = self.factory.post('/vehicles/', {'make': 'Saab', 'model': '9-3', 'year': 2008}, format='json')
		force_authenticate(request, user=self.customer)
		response = VehicleListCreateView.as_view()(request)

		self.assertEqual(response.status_code, 201)
		self.assertEqual(Vehicle.objects.get().owner, self.customer)

	def test_upload_pdf_report(self):
		upload = SimpleUploadedFile('inspection.pdf', b'%PDF-1.4 test', content_type='application/pdf')
		request = self.factory.post('/reports/', {'file': upload}, format='multipart')
		force_authenticate(request, user=self.customer)
		response = InspectionReportUploadView.as_view()(request)

		self.assertEqual(response.status_code, 201)
		report = InspectionReport.objects.get()
		self.assertEqual(report.file_name, 'inspection.pdf')
		self.assertEqual(report.mime_type, 'application/pdf')
		self.assertEqual(report.uploaded_by, self.customer)

	def test_upload_rejects_other_file_types(self):
		upload = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')
		request = self.factory.post('/reports/', {'file': upload}, format='multipart')
		force_authenticate(request, user=self.customer)
		response = InspectionReportUploadView.as_view()(request)

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'validation_error')
		self.assertFalse(InspectionReport.objects.exists())


class RepairRequestApiTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.customer = self.make_customer()
		self.workshop = self.make_workshop()
		self.existing = self.make_request(self.customer)

	def _payload(self, **overrides):
		payload = {
			'vehicle_id': self.existing.vehicle_id,
			'report_id': self.existing.report_id,
			'description': 'Check engine light',
			'latitude': '59.334591',
			'longitude': '18.063240',
			'address': 'Kungsgatan 5',
			'city': 'Stockholm',
			'expires_at': (timezone.now() + timedelta(days=2)).isoformat(),
		}
		payload.update(overrides)
		return payload

	def test_customer_posts_request(self):
		request = self.factory.post('/requests/', self._payload(), format='json')
		force_authenticate(request, user=self.customer)
		response = RepairRequestListCreateView.as_view()(request)

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['status'], RepairRequest.Status.NEW)
		self.assertEqual(RepairRequest.objects.filter(customer=self.customer).count(), 2)

	def test_past_expiry_is_rejected(self):
		payload = self._payload(expires_at=(timezone.now() - timedelta(hours=1)).isoformat())
		request = self.factory.post('/requests/', payload, format='json')
		force_authenticate(request, user=self.customer)
		response = RepairRequestListCreateView.as_view()(request)

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'validation_error')

	def test_unknown_vehicle_is_not_found(self):
		request = self.factory.post('/requests/', self._payload(vehicle_id=999999), format='json')
		force_authenticate(request, user=self.customer)
		response = RepairRequestListCreateView.as_view()(request)

		self.assertEqual(response.status_code, 404)
		self.assertEqual(response.data['error'], 'not_found')

	def test_workshop_cannot_post_request(self):
		request = self.factory.post('/requests/', self._payload(), format='json')
		force_authenticate(request, user=self.workshop.user)
		response = RepairRequestListCreateView.as_view()(request)

		self.assertEqual(response.status_code, 403)
		self.assertEqual(response.data['error'], 'forbidden')

	def test_list_includes_offers(self):
		self.make_offer(self.existing, self.workshop)

		request = self.factory.get('/requests/')
		force_authenticate(request, user=self.customer)
		response = RepairRequestListCreateView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(len(response.data), 1)
		self.assertEqual(len(response.data[0]['offers']), 1)

	def test_detail_is_owner_only(self):
		stranger = self.make_customer(email='erik@example.com')

		request = self.factory.get('/requests/%d/' % self.existing.id)
		force_authenticate(request, user=stranger)
		response = RepairRequestDetailView.as_view()(request, request_id=self.existing.id)
		self.assertEqual(response.status_code, 403)

		request = self.factory.get('/requests/%d/' % self.existing.id)
		force_authenticate(request, user=self.customer)
		response = RepairRequestDetailView.as_view()(request, request_id=self.existing.id)
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['id'], self.existing.id)

	def test_cancel(self):
		request = self.factory.post('/requests/%d/cancel/' % self.existing.id)
		force_authenticate(request, user=self.customer)
		response = RepairRequestCancelView.as_view()(request, request_id=self.existing.id)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['request']['status'], RepairRequest.Status.CANCELLED)

	def test_workshop_sees_only_its_own_offer(self):
		other = self.make_workshop(email='other@example.com', org='556000-0002')
		mine = self.make_offer(self.existing, self.workshop)
		self.make_offer(self.existing, other)

		request = self.factory.get('/requests/%d/offers/' % self.existing.id)
		force_authenticate(request, user=self.workshop.user)
		response = RepairRequestOffersView.as_view()(request, request_id=self.existing.id)

		self.assertEqual(response.status_code, 200)
		self.assertEqual([o['id'] for o in response.data], [mine.id])


class OfferApiTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.customer = self.make_customer()
		self.workshop = self.make_workshop()
		self.repair_request = self.make_request(self.customer)

	def _post_offer(self, price='1000.00'):
		request = self.factory.post('/offers/', {
			'request_id': self.repair_request.id,
			'price': price,
			'note': 'OEM parts',
			'available_dates': [(timezone.now() + timedelta(days=3)).isoformat()],
			'estimated_duration': 4,
		}, format='json')
		force_authenticate(request, user=self.workshop.user)
		return OfferCreateView.as_view()(request)

	def test_create_offer_and_duplicate(self):
		response = self._post_offer()

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['status'], Offer.Status.SENT)
		self.assertEqual(response.data['price'], '1000.00')
		self.assertEqual(len(response.data['available_dates']), 1)

		self.repair_request.refresh_from_db()
		self.assertEqual(self.repair_request.status, RepairRequest.Status.IN_BIDDING)

		response = self._post_offer(price='900.00')
		self.assertEqual(response.status_code, 409)
		self.assertEqual(response.data['error'], 'conflict')

	def test_negative_price_is_rejected(self):
		response = self._post_offer(price='-5')

		self.assertEqual(response.status_code, 400)
		self.assertFalse(Offer.objects.exists())

	def test_customer_cannot_make_offers(self):
		request = self.factory.post('/offers/', {'request_id': self.repair_request.id, 'price': '10'}, format='json')
		force_authenticate(request, user=self.customer)
		response = OfferCreateView.as_view()(request)

		self.assertEqual(response.status_code, 403)

	def test_withdraw_offer(self):
		offer = self.make_offer(self.repair_request, self.workshop)

		request = self.factory.patch('/offers/%d/' % offer.id, {'status': 'DECLINED'}, format='json')
		force_authenticate(request, user=self.workshop.user)
		response = OfferUpdateView.as_view()(request, offer_id=offer.id)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['status'], Offer.Status.DECLINED)

		request = self.factory.patch('/offers/%d/' % offer.id, {'price': '500.00'}, format='json')
		force_authenticate(request, user=self.workshop.user)
		response = OfferUpdateView.as_view()(request, offer_id=offer.id)

		self.assertEqual(response.status_code, 409)
		self.assertEqual(response.data['error'], 'invalid_state')

	def test_my_offers(self):
		self.make_offer(self.repair_request, self.workshop)

		request = self.factory.get('/offers/mine/')
		force_authenticate(request, user=self.workshop.user)
		response = WorkshopOffersView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(len(response.data), 1)
		self.assertEqual(response.data[0]['request']['id'], self.repair_request.id)


class BookingApiTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.customer = self.make_customer()
		self.workshop = self.make_workshop()
		self.repair_request = self.make_request(self.customer, status=RepairRequest.Status.IN_BIDDING)
		self.offer = self.make_offer(self.repair_request, self.workshop, price='1000.00')

	def _book(self, user=None):
		request = self.factory.post('/bookings/', {
			'offer_id': self.offer.id,
			'scheduled_at': (timezone.now() + timedelta(days=4)).isoformat(),
		}, format='json')
		force_authenticate(request, user=user or self.customer)
		return BookingCreateView.as_view()(request)

	def test_book_offer(self):
		response = self._book()

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['status'], Booking.Status.CONFIRMED)
		self.assertEqual(response.data['total_amount'], '1000.00')
		self.assertEqual(response.data['commission'], '100.00')
		self.assertEqual(response.data['workshop_amount'], '900.00')

		self.repair_request.refresh_from_db()
		self.offer.refresh_from_db()
		self.assertEqual(self.repair_request.status, RepairRequest.Status.BOOKED)
		self.assertEqual(self.offer.status, Offer.Status.ACCEPTED)

	def test_booking_twice_is_invalid_state(self):
		self._book()
		response = self._book()

		self.assertEqual(response.status_code, 409)
		self.assertEqual(response.data['error'], 'invalid_state')
		self.assertEqual(Booking.objects.count(), 1)

	def test_booking_someone_elses_offer_is_forbidden(self):
		response = self._book(user=self.make_customer(email='erik@example.com'))

		self.assertEqual(response.status_code, 403)
		self.assertEqual(response.data['error'], 'forbidden')

	def test_cancel_booking_closes_bidding(self):
		booking_id = self._book().data['id']

		request = self.factory.patch('/bookings/%d/' % booking_id, {'status': 'CANCELLED'}, format='json')
		force_authenticate(request, user=self.customer)
		response = BookingUpdateView.as_view()(request, booking_id=booking_id)

		self.assertEqual(response.status_code, 200)
		self.repair_request.refresh_from_db()
		self.assertEqual(self.repair_request.status, RepairRequest.Status.BIDDING_CLOSED)

	def test_my_bookings_for_both_sides(self):
		self._book()

		for user in (self.customer, self.workshop.user):
			request = self.factory.get('/bookings/mine/')
			force_authenticate(request, user=user)
			response = MyBookingsView.as_view()(request)

			self.assertEqual(response.status_code, 200)
			self.assertEqual(len(response.data), 1)


class ReviewApiTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.customer = self.make_customer()
		self.workshop = self.make_workshop()
		repair_request = self.make_request(self.customer, status=RepairRequest.Status.COMPLETED)
		offer = self.make_offer(repair_request, self.workshop, status=Offer.Status.ACCEPTED)
		self.booking = self.make_booking(offer, status=Booking.Status.DONE)

	def _review(self, rating=5):
		request = self.factory.post('/reviews/', {
			'booking_id': self.booking.id,
			'rating': rating,
			'comment': 'Great service',
		}, format='json')
		force_authenticate(request, user=self.customer)
		return ReviewCreateView.as_view()(request)

	def test_review_then_duplicate(self):
		response = self._review()
		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['rating'], 5)

		response = self._review(rating=3)
		self.assertEqual(response.status_code, 409)
		self.assertEqual(response.data['error'], 'conflict')
		self.assertEqual(Review.objects.count(), 1)

	def test_rating_outside_range(self):
		response = self._review(rating=6)

		self.assertEqual(response.status_code, 400)
		self.assertFalse(Review.objects.exists())

	def test_review_of_booking(self):
		self._review()

		request = self.factory.get('/reviews/booking/%d/' % self.booking.id)
		force_authenticate(request, user=self.workshop.user)
		response = BookingReviewView.as_view()(request, booking_id=self.booking.id)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['comment'], 'Great service')


class PayoutApiTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.admin = self.make_admin()
		customer = self.make_customer()
		workshop = self.make_workshop()
		repair_request = self.make_request(customer, status=RepairRequest.Status.COMPLETED)
		self.booking = self.make_booking(
			self.make_offer(repair_request, workshop, price='2000.00', status=Offer.Status.ACCEPTED),
			status=Booking.Status.DONE,
		)
		self.now = timezone.localtime()

	def test_get_without_params_is_empty(self):
		request = self.factory.get('/payouts/')
		force_authenticate(request, user=self.admin)
		response = PayoutListView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data, [])

	def test_get_current_month(self):
		request = self.factory.get('/payouts/', {'month': self.now.month, 'year': self.now.year})
		force_authenticate(request, user=self.admin)
		response = PayoutListView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(len(response.data), 1)
		self.assertEqual(response.data[0]['total_amount'], '2000.00')
		self.assertEqual(response.data[0]['commission'], '200.00')
		self.assertEqual(response.data[0]['workshop_amount'], '1800.00')
		self.assertFalse(response.data[0]['is_paid'])

	def test_post_requires_params(self):
		request = self.factory.post('/payouts/', {}, format='json')
		force_authenticate(request, user=self.admin)
		response = PayoutListView.as_view()(request)

		self.assertEqual(response.status_code, 400)
		self.assertEqual(response.data['error'], 'validation_error')

	def test_post_with_params(self):
		request = self.factory.post('/payouts/', {'month': self.now.month, 'year': self.now.year}, format='json')
		force_authenticate(request, user=self.admin)
		response = PayoutListView.as_view()(request)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data[0]['total_jobs'], 1)

	def test_admin_only(self):
		request = self.factory.get('/payouts/', {'month': 1, 'year': 2026})
		force_authenticate(request, user=self.booking.customer)
		response = PayoutListView.as_view()(request)

		self.assertEqual(response.status_code, 403)


class ExpireStaleOffersCommandTests(MarketplaceFixtures, TestCase):
	def test_command_expires_offers_past_request_deadline(self):
		customer = self.make_customer()
		workshop = self.make_workshop()
		stale = self.make_offer(self.make_request(customer, expires_in=timedelta(minutes=-5)), workshop)
		live = self.make_offer(self.make_request(customer), workshop)

		call_command('expire_stale_offers')

		stale.refresh_from_db()
		live.refresh_from_db()
		self.assertEqual(stale.status, Offer.Status.EXPIRED)
		self.assertEqual(live.status, Offer.Status.SENT)
