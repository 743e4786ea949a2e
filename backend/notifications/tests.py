from unittest.mock import patch

from django.core import mail
from django.test import TestCase

from .dispatch import notify
from .emails import render
from .tasks import send_email_task


class EmailRenderingTests(TestCase):
	def test_known_event(self):
		subject, body = render('booking_status_changed', booking_id=7, status='DONE')

		self.assertEqual(subject, 'Booking #7 updated')
		self.assertIn('DONE', body)

	def test_unknown_event(self):
		with self.assertRaises(ValueError):
			render('nope')


class SendEmailTaskTests(TestCase):
	def test_sends_mail(self):
		send_email_task('anna@example.com', 'Hello', 'Body')

		self.assertEqual(len(mail.outbox), 1)
		self.assertEqual(mail.outbox[0].to, ['anna@example.com'])

	@patch('notifications.tasks.send_mail', side_effect=OSError('smtp down'))
	def test_failure_is_logged_not_raised(self, mock_send):
		with self.assertLogs('notifications.tasks', level='ERROR'):
			send_email_task('anna@example.com', 'Hello', 'Body')


class DispatchTests(TestCase):
	@patch('notifications.dispatch.send_email_task')
	def test_queued_only_on_commit(self, mock_task):
		with self.captureOnCommitCallbacks(execute=False) as callbacks:
			notify('request_cancelled', 'shop@example.com', request_id=3)

		mock_task.delay.assert_not_called()
		self.assertEqual(len(callbacks), 1)

		callbacks[0]()
		mock_task.delay.assert_called_once()

	@patch('notifications.dispatch.send_email_task')
	def test_broker_failure_is_swallowed(self, mock_task):
		mock_task.delay.side_effect = ConnectionError('broker down')

		with self.captureOnCommitCallbacks(execute=True):
			notify('request_cancelled', 'shop@example.com', request_id=3)

		mock_task.delay.assert_called_once()

	@patch('notifications.dispatch.send_email_task')
	def test_missing_recipient_is_skipped(self, mock_task):
		with self.captureOnCommitCallbacks(execute=True) as callbacks:
			notify('request_cancelled', '', request_id=3)

		self.assertEqual(callbacks, [])
