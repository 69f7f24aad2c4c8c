# classbook/api/dependencies/__init__.py
"""
Centralized dependency injection for the classbook API.
"""

from classbook.api.dependencies.auth import (
    get_current_user,
    get_current_user_optional,
    require_admin,
    require_instructor,
)
from classbook.api.dependencies.database import get_db
from classbook.api.dependencies.services import (
    get_auth_service,
    get_booking_service,
    get_class_service,
    get_customer_service,
    get_enrollment_service,
    get_instructor_portal_service,
    get_instructor_service,
    get_payment_gateway,
    get_payment_service,
    get_settings,
    get_webhook_ledger_service,
)

__all__ = [
    "get_db",
    "get_current_user",
    "get_current_user_optional",
    "require_admin",
    "require_instructor",
    "get_settings",
    "get_payment_gateway",
    "get_auth_service",
    "get_class_service",
    "get_instructor_service",
    "get_customer_service",
    "get_booking_service",
    "get_payment_service",
    "get_enrollment_service",
    "get_instructor_portal_service",
    "get_webhook_ledger_service",
]
