# classbook/core/enums.py
"""
Enumerations stored in the database and shared by services and schemas.

All enums derive from ``str`` so they compare equal to the raw column values
and serialize as plain strings.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles held by dashboard users."""

    ADMIN = "admin"
    INSTRUCTOR = "instructor"
    CUSTOMER = "customer"


class Term(str, Enum):
    TERM1 = "Term1"
    TERM2 = "Term2"
    TERM3 = "Term3"
    TERM4 = "Term4"


class EnrollmentType(str, Enum):
    STANDARD = "standard"
    TRIAL = "trial"


class EnrollmentPaymentStatus(str, Enum):
    """Payment lifecycle of an enrollment, driven by gateway events."""

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    DISPUTED = "disputed"


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class CustomerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PaymentMethod(str, Enum):
    STRIPE = "stripe"
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class PaymentStatus(str, Enum):
    # Payment rows only ever record completed money movement
    COMPLETED = "completed"


class WebhookStatus(str, Enum):
    """States of a row in the webhook ledger."""

    RECEIVED = "received"
    PROCESSING = "processing"
    PROCESSED = "processed"
    FAILED = "failed"
