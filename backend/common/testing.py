"""Shared fixtures for the app test suites."""

from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from accounts.models import User
from repairs.models import Booking, InspectionReport, Offer, RepairRequest, Vehicle
from services.repair_management import compute_commission
from workshops.models import Workshop

STOCKHOLM = (Decimal("59.329300"), Decimal("18.068600"))
UPPSALA = (Decimal("59.858600"), Decimal("17.638900"))


class MarketplaceFixtures:
    """Mixin for TestCase classes that need customers, workshops and requests."""

    def make_customer(self, email='anna@example.com', **extra):
        return User.objects.create_user(
            username=email,
            email=email,
            password='pass1234',
            role=User.ROLE_CUSTOMER,
            first_name=extra.pop('first_name', 'Anna'),
            **extra
        )

    def make_admin(self, email='admin@example.com'):
        return User.objects.create_user(
            username=email,
            email=email,
            password='admin1234',
            role=User.ROLE_ADMIN,
        )

    def make_workshop(self, email='verkstad@example.com', org='556000-0001', location=STOCKHOLM, **extra):
        user = User.objects.create_user(
            username=email,
            email=email,
            password='shop1234',
            role=User.ROLE_WORKSHOP,
        )
        return Workshop.objects.create(
            user=user,
            company_name=extra.pop('company_name', 'Bilverkstad %s' % org[-1]),
            organization_number=org,
            phone='+46700000000',
            email=email,
            address='Storgatan 1',
            city='Stockholm',
            postal_code='11122',
            latitude=location[0],
            longitude=location[1],
            **extra
        )

    def make_request(self, customer, location=STOCKHOLM, status=RepairRequest.Status.NEW, expires_in=timedelta(days=3)):
        vehicle = Vehicle.objects.create(owner=customer, make='Volvo', model='V70', year=2015)
        report = InspectionReport.objects.create(
            file='inspection_reports/report.pdf',
            file_name='report.pdf',
            file_size=8,
            mime_type='application/pdf',
            uploaded_by=customer,
        )
        return RepairRequest.objects.create(
            customer=customer,
            vehicle=vehicle,
            report=report,
            description='Brake pads squeal',
            latitude=location[0],
            longitude=location[1],
            address='Drottninggatan 10',
            city='Stockholm',
            status=status,
            expires_at=timezone.now() + expires_in,
        )

    def make_offer(self, repair_request, workshop, price='1000.00', status=Offer.Status.SENT):
        return Offer.objects.create(
            request=repair_request,
            workshop=workshop,
            price=Decimal(price),
            status=status,
        )

    def make_booking(self, offer, status=Booking.Status.CONFIRMED):
        total_amount, commission, workshop_amount = compute_commission(offer.price)
        return Booking.objects.create(
            request=offer.request,
            offer=offer,
            customer=offer.request.customer,
            workshop=offer.workshop,
            scheduled_at=timezone.now() + timedelta(days=7),
            status=status,
            total_amount=total_amount,
            commission=commission,
            workshop_amount=workshop_amount,
        )
