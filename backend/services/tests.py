from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone

from common.testing import MarketplaceFixtures, UPPSALA
from repairs.models import Booking, Offer, RepairRequest
from services.matching import find_available_requests
from services.payouts import aggregate_payouts, month_window
from services.repair_management import (
	ConflictError,
	ForbiddenError,
	InvalidInputError,
	InvalidStateError,
	NotFoundError,
	accept_offer,
	cancel_repair_request,
	compute_commission,
	create_booking_from_offer,
	create_offer,
	create_review,
	expire_stale_offers,
	transition_request,
	update_booking,
	update_offer,
)
from services.repair_management.request_lifecycle import get_request_for as load_request


class RequestStateMachineTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.customer = self.make_customer()
		self.repair_request = self.make_request(self.customer)

	def test_allowed_transition_is_applied(self):
		transition_request(self.repair_request.id, RepairRequest.Status.IN_BIDDING)

		self.repair_request.refresh_from_db()
		self.assertEqual(self.repair_request.status, RepairRequest.Status.IN_BIDDING)

	def test_transition_outside_graph_is_rejected(self):
		with self.assertRaises(InvalidStateError):
			transition_request(self.repair_request.id, RepairRequest.Status.COMPLETED)

		self.repair_request.refresh_from_db()
		self.assertEqual(self.repair_request.status, RepairRequest.Status.NEW)

	def test_terminal_status_has_no_exits(self):
		transition_request(self.repair_request.id, RepairRequest.Status.CANCELLED)

		for target in (RepairRequest.Status.NEW, RepairRequest.Status.IN_BIDDING, RepairRequest.Status.BOOKED):
			with self.assertRaises(InvalidStateError):
				transition_request(self.repair_request.id, target)

	def test_unknown_request(self):
		with self.assertRaises(NotFoundError):
			transition_request(999999, RepairRequest.Status.BOOKED)


class OfferLifecycleTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.customer = self.make_customer()
		self.workshop = self.make_workshop()
		self.other_workshop = self.make_workshop(email='other@example.com', org='556000-0002')
		self.repair_request = self.make_request(self.customer)

	def test_first_offer_opens_bidding(self):
		offer = create_offer(self.workshop, self.repair_request.id, Decimal('1000.00'))

		self.repair_request.refresh_from_db()
		self.assertEqual(offer.status, Offer.Status.SENT)
		self.assertEqual(self.repair_request.status, RepairRequest.Status.IN_BIDDING)

	def test_second_offer_from_same_workshop_conflicts(self):
		create_offer(self.workshop, self.repair_request.id, Decimal('1000.00'))

		with self.assertRaises(ConflictError):
			create_offer(self.workshop, self.repair_request.id, Decimal('900.00'))

		self.assertEqual(Offer.objects.filter(request=self.repair_request).count(), 1)

	def test_other_workshop_can_still_bid(self):
		create_offer(self.workshop, self.repair_request.id, Decimal('1000.00'))
		create_offer(self.other_workshop, self.repair_request.id, Decimal('950.00'))

		self.repair_request.refresh_from_db()
		self.assertEqual(self.repair_request.offers.count(), 2)
		self.assertEqual(self.repair_request.status, RepairRequest.Status.IN_BIDDING)

	def test_offer_on_closed_request_is_rejected(self):
		self.repair_request.status = RepairRequest.Status.BIDDING_CLOSED
		self.repair_request.save(update_fields=['status'])

		with self.assertRaises(InvalidStateError):
			create_offer(self.workshop, self.repair_request.id, Decimal('1000.00'))

	def test_offer_on_missing_request(self):
		with self.assertRaises(NotFoundError):
			create_offer(self.workshop, 999999, Decimal('1000.00'))

	def test_non_positive_price_is_rejected(self):
		with self.assertRaises(InvalidInputError):
			create_offer(self.workshop, self.repair_request.id, Decimal('0'))

	@patch('notifications.dispatch.send_email_task')
	def test_customer_is_emailed_after_commit(self, mock_task):
		with self.captureOnCommitCallbacks(execute=True):
			create_offer(self.workshop, self.repair_request.id, Decimal('1000.00'))

		mock_task.delay.assert_called_once()
		self.assertEqual(mock_task.delay.call_args[0][0], self.customer.email)

	def test_workshop_patches_and_withdraws_offer(self):
		offer = self.make_offer(self.repair_request, self.workshop)

		offer = update_offer(offer.id, self.workshop, price=Decimal('850.00'), note='Includes pads')
		self.assertEqual(offer.price, Decimal('850.00'))
		self.assertEqual(offer.note, 'Includes pads')

		offer = update_offer(offer.id, self.workshop, status=Offer.Status.DECLINED)
		self.assertEqual(offer.status, Offer.Status.DECLINED)

		with self.assertRaises(InvalidStateError):
			update_offer(offer.id, self.workshop, price=Decimal('800.00'))

	def test_workshop_cannot_accept_its_own_offer(self):
		offer = self.make_offer(self.repair_request, self.workshop)

		with self.assertRaises(InvalidInputError):
			update_offer(offer.id, self.workshop, status=Offer.Status.ACCEPTED)

	def test_other_workshop_cannot_patch(self):
		offer = self.make_offer(self.repair_request, self.workshop)

		with self.assertRaises(ForbiddenError):
			update_offer(offer.id, self.other_workshop, price=Decimal('1.00'))

	def test_accept_offer_is_single_winner(self):
		offer = self.make_offer(self.repair_request, self.workshop)

		self.assertTrue(accept_offer(offer.id))
		self.assertFalse(accept_offer(offer.id))

	def test_expire_stale_offers(self):
		stale_request = self.make_request(self.customer, expires_in=timedelta(hours=-1))
		stale_offer = self.make_offer(stale_request, self.workshop)
		fresh_offer = self.make_offer(self.repair_request, self.workshop)

		expired, affected = expire_stale_offers()

		stale_offer.refresh_from_db()
		fresh_offer.refresh_from_db()
		self.assertEqual((expired, affected), (1, 1))
		self.assertEqual(stale_offer.status, Offer.Status.EXPIRED)
		self.assertEqual(fresh_offer.status, Offer.Status.SENT)


class BookingLifecycleTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.customer = self.make_customer()
		self.workshop = self.make_workshop()
		self.other_workshop = self.make_workshop(email='other@example.com', org='556000-0002')
		self.repair_request = self.make_request(self.customer)
		self.offer = create_offer(self.workshop, self.repair_request.id, Decimal('1000.00'))
		self.other_offer = create_offer(self.other_workshop, self.repair_request.id, Decimal('1200.00'))
		self.scheduled_at = timezone.now() + timedelta(days=5)

	def test_commission_split(self):
		self.assertEqual(
			compute_commission(Decimal('1000')),
			(Decimal('1000.00'), Decimal('100.00'), Decimal('900.00')),
		)
		total, commission, workshop_amount = compute_commission(Decimal('99.95'))
		self.assertEqual(commission, Decimal('10.00'))
		self.assertEqual(total, commission + workshop_amount)

	def test_booking_accepts_offer_and_books_request(self):
		booking = create_booking_from_offer(self.offer.id, self.customer, self.scheduled_at)

		self.offer.refresh_from_db()
		self.other_offer.refresh_from_db()
		self.repair_request.refresh_from_db()

		self.assertEqual(booking.status, Booking.Status.CONFIRMED)
		self.assertEqual(booking.total_amount, Decimal('1000.00'))
		self.assertEqual(booking.commission, Decimal('100.00'))
		self.assertEqual(booking.workshop_amount, Decimal('900.00'))
		self.assertEqual(self.offer.status, Offer.Status.ACCEPTED)
		self.assertEqual(self.other_offer.status, Offer.Status.SENT)
		self.assertEqual(self.repair_request.status, RepairRequest.Status.BOOKED)

	def test_second_booking_on_same_offer_fails(self):
		create_booking_from_offer(self.offer.id, self.customer, self.scheduled_at)

		with self.assertRaises(InvalidStateError):
			create_booking_from_offer(self.offer.id, self.customer, self.scheduled_at)

		self.assertEqual(Booking.objects.filter(offer=self.offer).count(), 1)

	def test_offer_accepted_after_read_rolls_back(self):
		def accept_elsewhere(price):
			Offer.objects.filter(pk=self.offer.pk).update(status=Offer.Status.ACCEPTED)
			return compute_commission(price)

		with patch('services.repair_management.booking_lifecycle.compute_commission', side_effect=accept_elsewhere):
			with self.assertRaises(InvalidStateError):
				create_booking_from_offer(self.offer.id, self.customer, self.scheduled_at)

		self.repair_request.refresh_from_db()
		self.assertFalse(Booking.objects.exists())
		self.assertEqual(self.repair_request.status, RepairRequest.Status.IN_BIDDING)

	def test_price_change_after_read_is_not_billed_stale(self):
		def reprice_elsewhere(price):
			update_offer(self.offer.id, self.workshop, price=Decimal('2000.00'))
			return compute_commission(price)

		with patch('services.repair_management.booking_lifecycle.compute_commission', side_effect=reprice_elsewhere):
			with self.assertRaises(InvalidStateError):
				create_booking_from_offer(self.offer.id, self.customer, self.scheduled_at)

		self.offer.refresh_from_db()
		self.repair_request.refresh_from_db()
		self.assertFalse(Booking.objects.exists())
		self.assertEqual(self.offer.status, Offer.Status.SENT)
		self.assertEqual(self.offer.price, Decimal('2000.00'))
		self.assertEqual(self.repair_request.status, RepairRequest.Status.IN_BIDDING)

	def test_accept_offer_checks_expected_price(self):
		self.assertFalse(accept_offer(self.offer.id, price=Decimal('999.00')))
		self.assertTrue(accept_offer(self.offer.id, price=Decimal('1000.00')))

	def test_only_request_owner_can_book(self):
		stranger = self.make_customer(email='erik@example.com')

		with self.assertRaises(ForbiddenError):
			create_booking_from_offer(self.offer.id, stranger, self.scheduled_at)

	def test_scheduled_at_is_required(self):
		with self.assertRaises(InvalidInputError):
			create_booking_from_offer(self.offer.id, self.customer, None)

	def test_cancel_closes_bidding_and_allows_rebooking(self):
		booking = create_booking_from_offer(self.offer.id, self.customer, self.scheduled_at)

		booking = update_booking(booking.id, self.customer, status=Booking.Status.CANCELLED)
		self.repair_request.refresh_from_db()
		self.assertEqual(booking.status, Booking.Status.CANCELLED)
		self.assertEqual(self.repair_request.status, RepairRequest.Status.BIDDING_CLOSED)

		# No new offers once bidding is closed
		late_workshop = self.make_workshop(email='late@example.com', org='556000-0003')
		with self.assertRaises(InvalidStateError):
			create_offer(late_workshop, self.repair_request.id, Decimal('500.00'))

		create_booking_from_offer(self.other_offer.id, self.customer, self.scheduled_at)
		self.repair_request.refresh_from_db()
		self.assertEqual(self.repair_request.status, RepairRequest.Status.BOOKED)

	def test_done_completes_request(self):
		booking = create_booking_from_offer(self.offer.id, self.customer, self.scheduled_at)

		update_booking(booking.id, self.customer, status=Booking.Status.DONE)

		self.repair_request.refresh_from_db()
		self.assertEqual(self.repair_request.status, RepairRequest.Status.COMPLETED)

		with self.assertRaises(InvalidStateError):
			update_booking(booking.id, self.customer, status=Booking.Status.CANCELLED)

	def test_new_date_alone_reschedules(self):
		booking = create_booking_from_offer(self.offer.id, self.customer, self.scheduled_at)
		new_date = self.scheduled_at + timedelta(days=2)

		booking = update_booking(booking.id, self.customer, scheduled_at=new_date)

		self.assertEqual(booking.status, Booking.Status.RESCHEDULED)
		self.assertEqual(booking.scheduled_at, new_date)

	def test_no_show_leaves_request_booked(self):
		booking = create_booking_from_offer(self.offer.id, self.customer, self.scheduled_at)

		booking = update_booking(booking.id, self.customer, status=Booking.Status.NO_SHOW)

		self.repair_request.refresh_from_db()
		self.assertEqual(booking.status, Booking.Status.NO_SHOW)
		self.assertEqual(self.repair_request.status, RepairRequest.Status.BOOKED)

	def test_workshop_cannot_update_booking_but_admin_can(self):
		booking = create_booking_from_offer(self.offer.id, self.customer, self.scheduled_at)

		with self.assertRaises(ForbiddenError):
			update_booking(booking.id, self.workshop.user, status=Booking.Status.DONE)

		booking = update_booking(booking.id, self.make_admin(), status=Booking.Status.DONE)
		self.assertEqual(booking.status, Booking.Status.DONE)

	def test_unknown_status_is_rejected(self):
		booking = create_booking_from_offer(self.offer.id, self.customer, self.scheduled_at)

		with self.assertRaises(InvalidInputError):
			update_booking(booking.id, self.customer, status='FINISHED')


class CancelRequestTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.customer = self.make_customer()
		self.workshop = self.make_workshop()
		self.other_workshop = self.make_workshop(email='other@example.com', org='556000-0002')
		self.repair_request = self.make_request(self.customer)

	def test_cancel_expires_outstanding_offers(self):
		offer = create_offer(self.workshop, self.repair_request.id, Decimal('1000.00'))

		repair_request = cancel_repair_request(self.customer, self.repair_request.id)

		offer.refresh_from_db()
		self.assertEqual(repair_request.status, RepairRequest.Status.CANCELLED)
		self.assertEqual(offer.status, Offer.Status.EXPIRED)

	def test_cancel_booked_request_cancels_booking(self):
		offer = create_offer(self.workshop, self.repair_request.id, Decimal('1000.00'))
		other_offer = create_offer(self.other_workshop, self.repair_request.id, Decimal('1100.00'))
		booking = create_booking_from_offer(offer.id, self.customer, timezone.now() + timedelta(days=1))

		cancel_repair_request(self.customer, self.repair_request.id)

		booking.refresh_from_db()
		other_offer.refresh_from_db()
		self.assertEqual(booking.status, Booking.Status.CANCELLED)
		self.assertEqual(other_offer.status, Offer.Status.EXPIRED)

	def test_cancel_catches_booking_made_after_read(self):
		offer = create_offer(self.workshop, self.repair_request.id, Decimal('1000.00'))

		def read_then_book(actor, request_id):
			stale = load_request(actor, request_id)
			create_booking_from_offer(offer.id, self.customer, timezone.now() + timedelta(days=1))
			return stale

		with patch('services.repair_management.request_lifecycle.get_request_for', side_effect=read_then_book):
			repair_request = cancel_repair_request(self.customer, self.repair_request.id)

		booking = Booking.objects.get(offer=offer)
		self.assertEqual(repair_request.status, RepairRequest.Status.CANCELLED)
		self.assertEqual(booking.status, Booking.Status.CANCELLED)

	def test_only_owner_can_cancel(self):
		with self.assertRaises(ForbiddenError):
			cancel_repair_request(self.make_customer(email='erik@example.com'), self.repair_request.id)

	def test_completed_request_cannot_be_cancelled(self):
		self.repair_request.status = RepairRequest.Status.COMPLETED
		self.repair_request.save(update_fields=['status'])

		with self.assertRaises(InvalidStateError):
			cancel_repair_request(self.customer, self.repair_request.id)


class ReviewGateTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.customer = self.make_customer()
		self.workshop = self.make_workshop()
		repair_request = self.make_request(self.customer, status=RepairRequest.Status.BOOKED)
		self.booking = self.make_booking(self.make_offer(repair_request, self.workshop, status=Offer.Status.ACCEPTED))

	def test_review_updates_workshop_rating(self):
		review = create_review(self.booking.id, self.customer, 4, comment='Quick and fair')

		self.workshop.refresh_from_db()
		self.assertEqual(review.workshop, self.workshop)
		self.assertEqual(self.workshop.review_count, 1)
		self.assertEqual(self.workshop.rating, Decimal('4.00'))

	def test_duplicate_review_conflicts(self):
		create_review(self.booking.id, self.customer, 5)

		with self.assertRaises(ConflictError):
			create_review(self.booking.id, self.customer, 1)

	def test_rating_out_of_range(self):
		for rating in (0, 6):
			with self.assertRaises(InvalidInputError):
				create_review(self.booking.id, self.customer, rating)

	def test_only_booking_customer_can_review(self):
		with self.assertRaises(ForbiddenError):
			create_review(self.booking.id, self.make_customer(email='erik@example.com'), 5)

	def test_workshop_must_match_booking(self):
		other = self.make_workshop(email='other@example.com', org='556000-0002')

		with self.assertRaises(InvalidInputError):
			create_review(self.booking.id, self.customer, 5, workshop_id=other.id)

	def test_missing_booking(self):
		with self.assertRaises(NotFoundError):
			create_review(999999, self.customer, 5)


class GeoMatcherTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.customer = self.make_customer()
		self.workshop = self.make_workshop()
		self.nearby = self.make_request(self.customer)
		self.uppsala = self.make_request(self.customer, location=UPPSALA)

	def test_radius_filters_and_sorts_by_distance(self):
		matches = find_available_requests(self.workshop, radius_km=30)
		self.assertEqual([r.id for r in matches], [self.nearby.id])
		self.assertAlmostEqual(matches[0].distance, 0.0, places=6)

		matches = find_available_requests(self.workshop, radius_km=100)
		self.assertEqual([r.id for r in matches], [self.nearby.id, self.uppsala.id])
		self.assertGreater(matches[1].distance, 60)

	def test_hides_requests_already_bid_on_closed_or_expired(self):
		self.make_offer(self.nearby, self.workshop, status=Offer.Status.DECLINED)
		self.make_request(self.customer, status=RepairRequest.Status.BOOKED)
		self.make_request(self.customer, expires_in=timedelta(hours=-1))

		matches = find_available_requests(self.workshop, radius_km=100)

		self.assertEqual([r.id for r in matches], [self.uppsala.id])

	def test_custom_search_centre(self):
		matches = find_available_requests(self.workshop, latitude=UPPSALA[0], longitude=UPPSALA[1], radius_km=10)

		self.assertEqual([r.id for r in matches], [self.uppsala.id])

	def test_radius_must_be_positive(self):
		with self.assertRaises(InvalidInputError):
			find_available_requests(self.workshop, radius_km=0)


class PayoutAggregatorTests(MarketplaceFixtures, TestCase):
	def setUp(self):
		self.customer = self.make_customer()
		self.workshop = self.make_workshop()
		self.other_workshop = self.make_workshop(email='other@example.com', org='556000-0002')

	def _booking(self, workshop, price, status, created_at):
		repair_request = self.make_request(self.customer, status=RepairRequest.Status.BOOKED)
		booking = self.make_booking(self.make_offer(repair_request, workshop, price=price, status=Offer.Status.ACCEPTED), status=status)
		Booking.objects.filter(pk=booking.pk).update(created_at=created_at)
		return booking

	def _at(self, *args):
		return timezone.make_aware(datetime(*args), timezone.get_current_timezone())

	def test_month_window_bounds(self):
		start, end = month_window(2, 2024)

		self.assertEqual(start, self._at(2024, 2, 1, 0, 0, 0))
		self.assertEqual(end, self._at(2024, 2, 29, 23, 59, 59))

	def test_reports_cover_done_bookings_in_month(self):
		self._booking(self.workshop, '1000.00', Booking.Status.DONE, self._at(2026, 3, 1, 0, 0, 0))
		self._booking(self.workshop, '500.00', Booking.Status.DONE, self._at(2026, 3, 31, 23, 59, 59))
		self._booking(self.other_workshop, '200.00', Booking.Status.DONE, self._at(2026, 3, 15, 12, 0, 0))
		# Outside the window or not DONE
		self._booking(self.workshop, '9999.00', Booking.Status.DONE, self._at(2026, 4, 1, 0, 0, 0))
		self._booking(self.workshop, '9999.00', Booking.Status.CONFIRMED, self._at(2026, 3, 10, 9, 0, 0))

		reports = aggregate_payouts(3, 2026)

		self.assertEqual([r.workshop_id for r in reports], [self.workshop.id, self.other_workshop.id])
		first = reports[0]
		self.assertEqual(first.total_jobs, 2)
		self.assertEqual(first.total_amount, Decimal('1500.00'))
		self.assertEqual(first.commission, Decimal('150.00'))
		self.assertEqual(first.workshop_amount, Decimal('1350.00'))
		self.assertFalse(first.is_paid)
		self.assertEqual(reports[1].total_amount, Decimal('200.00'))
		self.assertEqual(first.to_dict()['workshop_name'], self.workshop.company_name)

	def test_empty_month(self):
		self.assertEqual(aggregate_payouts(1, 2020), [])

	def test_invalid_month(self):
		with self.assertRaises(InvalidInputError):
			aggregate_payouts(13, 2026)
