"""
Email notifications for account and repair-request milestones.

Dispatch is fire-and-forget: emails are queued on Celery after the
surrounding transaction commits and failures are only logged.
"""
