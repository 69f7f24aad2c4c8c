# classbook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from classbook.api.dependencies.database import get_db
from classbook.core.config import Settings
from classbook.services.auth_service import AuthService
from classbook.services.booking_service import BookingService
from classbook.services.class_service import ClassService
from classbook.services.customer_service import CustomerService
from classbook.services.enrollment_service import EnrollmentService
from classbook.services.instructor_portal_service import InstructorPortalService
from classbook.services.instructor_service import InstructorService
from classbook.services.payment_gateway import PaymentGatewayClient
from classbook.services.payment_service import PaymentService
from classbook.services.webhook_ledger_service import WebhookLedgerService


def get_settings(request: Request) -> Settings:
    """Settings the running app was built with."""
    return request.app.state.settings


def get_payment_gateway(settings: Settings = Depends(get_settings)) -> PaymentGatewayClient:
    return PaymentGatewayClient.from_settings(settings)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_class_service(db: Session = Depends(get_db)) -> ClassService:
    return ClassService(db)


def get_instructor_service(db: Session = Depends(get_db)) -> InstructorService:
    return InstructorService(db)


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    return CustomerService(db)


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    return BookingService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


def get_enrollment_service(db: Session = Depends(get_db)) -> EnrollmentService:
    return EnrollmentService(db)


def get_instructor_portal_service(db: Session = Depends(get_db)) -> InstructorPortalService:
    return InstructorPortalService(db)


def get_webhook_ledger_service(db: Session = Depends(get_db)) -> WebhookLedgerService:
    return WebhookLedgerService(db)
