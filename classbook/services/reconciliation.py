# classbook/services/reconciliation.py
"""
Gateway event reconciliation.

Applies verified Stripe events to enrollments, bookings and payments:

    payment_intent.created          log only
    payment_intent.succeeded        enrollment paid/active, one booking per class
                                    in metadata ``classIds``, one payment
    payment_intent.payment_failed   enrollment failed/cancelled
    payment_intent.canceled         enrollment cancelled/cancelled
    payment_intent.requires_action  log only
    charge.refunded                 enrollment refunded/cancelled
    charge.dispute.created          enrollment disputed (status unchanged)
    anything else                   acknowledged, nothing written

``plan_transition`` decides what an event means for an enrollment without
touching the database; ``ReconciliationService`` loads the records, asks for a
plan and writes it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional

from sqlalchemy.orm import Session

from classbook.core.enums import (
    EnrollmentPaymentStatus,
    EnrollmentStatus,
    EnrollmentType,
    PaymentMethod,
    PaymentStatus,
)
from classbook.core.exceptions import NotFoundException
from classbook.models.enrollment import Enrollment
from classbook.repositories.factory import RepositoryFactory
from classbook.services.base import BaseService
from classbook.services.payment_gateway import GatewayEvent, GatewayEventKind

CENTS = Decimal("0.01")
_TRUTHY = {"1", "true", "yes", "y", "on"}

# Kinds whose only effect is an enrollment status change
STATUS_TRANSITIONS: Mapping[GatewayEventKind, tuple[Optional[str], Optional[str]]] = {
    GatewayEventKind.PAYMENT_INTENT_PAYMENT_FAILED: (
        EnrollmentPaymentStatus.FAILED.value,
        EnrollmentStatus.CANCELLED.value,
    ),
    GatewayEventKind.PAYMENT_INTENT_CANCELED: (
        EnrollmentPaymentStatus.CANCELLED.value,
        EnrollmentStatus.CANCELLED.value,
    ),
    GatewayEventKind.CHARGE_REFUNDED: (
        EnrollmentPaymentStatus.REFUNDED.value,
        EnrollmentStatus.CANCELLED.value,
    ),
    GatewayEventKind.CHARGE_DISPUTE_CREATED: (EnrollmentPaymentStatus.DISPUTED.value, None),
}

LOG_ONLY_KINDS = frozenset(
    {
        GatewayEventKind.PAYMENT_INTENT_CREATED,
        GatewayEventKind.PAYMENT_INTENT_REQUIRES_ACTION,
        GatewayEventKind.UNKNOWN,
    }
)


@dataclass(frozen=True)
class EnrollmentSnapshot:
    """The enrollment fields a transition depends on."""

    id: str
    customer_id: str
    enrollment_type: str
    payment_status: str
    status: str
    payment_intent: Optional[str] = None

    @classmethod
    def of(cls, enrollment: Enrollment) -> "EnrollmentSnapshot":
        return cls(
            id=enrollment.id,
            customer_id=enrollment.customer_id,
            enrollment_type=enrollment.enrollment_type,
            payment_status=enrollment.payment_status,
            status=enrollment.status,
            payment_intent=enrollment.payment_intent,
        )


@dataclass(frozen=True)
class PaymentDraft:
    amount: Decimal
    payment_method: str
    transaction_id: Optional[str]
    notes: Optional[str] = None


@dataclass(frozen=True)
class Transition:
    """Everything one event changes, in the order it must be written."""

    kind: GatewayEventKind
    enrollment_changes: Mapping[str, str] = field(default_factory=dict)
    class_ids: tuple[str, ...] = ()
    booking_date: Optional[date] = None
    is_free_trial: bool = False
    payment: Optional[PaymentDraft] = None
    message: str = ""

    @property
    def has_writes(self) -> bool:
        return bool(self.enrollment_changes or self.class_ids or self.payment)


@dataclass
class ReconciliationResult:
    event_id: str
    kind: GatewayEventKind
    enrollment_id: Optional[str] = None
    enrollment_found: bool = False
    booking_ids: list[str] = field(default_factory=list)
    classes_skipped: list[str] = field(default_factory=list)
    payment_id: Optional[str] = None
    receipt_number: Optional[str] = None
    message: str = ""

    @property
    def bookings_created(self) -> int:
        return len(self.booking_ids)


def parse_class_ids(raw: Optional[str]) -> tuple[str, ...]:
    """Split the comma separated ``classIds`` metadata value, dropping blanks and repeats."""
    if not raw:
        return ()
    ids = (part.strip() for part in raw.split(","))
    return tuple(dict.fromkeys(class_id for class_id in ids if class_id))


def parse_start_date(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw.strip()[:10])
    except ValueError:
        return None


def minor_units_to_decimal(amount_minor: Optional[int]) -> Decimal:
    if amount_minor is None:
        return Decimal("0.00")
    return (Decimal(amount_minor) / 100).quantize(CENTS, rounding=ROUND_HALF_UP)


def next_class_date(day_of_week: int, on_or_after: date) -> date:
    """First date on or after ``on_or_after`` that falls on ISO weekday ``day_of_week``."""
    return on_or_after + timedelta(days=(day_of_week - on_or_after.isoweekday()) % 7)


def plan_transition(
    kind: GatewayEventKind,
    enrollment: Optional[EnrollmentSnapshot],
    event: GatewayEvent,
) -> Transition:
    """Work out the writes ``event`` implies for ``enrollment``. Performs no I/O."""
    if kind in LOG_ONLY_KINDS:
        return Transition(kind=kind, message=f"{event.type} acknowledged without changes")

    if enrollment is None:
        return Transition(kind=kind, message=f"No enrollment found for {event.type}")

    if kind in STATUS_TRANSITIONS:
        payment_status, status = STATUS_TRANSITIONS[kind]
        changes: dict[str, str] = {}
        if payment_status is not None:
            changes["payment_status"] = payment_status
        if status is not None:
            changes["status"] = status
        return Transition(
            kind=kind,
            enrollment_changes=changes,
            message=f"Enrollment {enrollment.id} marked {payment_status}",
        )

    # payment_intent.succeeded
    metadata = event.metadata
    payment_intent_id = event.payment_intent_id
    changes = {
        "payment_status": EnrollmentPaymentStatus.PAID.value,
        "status": EnrollmentStatus.ACTIVE.value,
    }
    if payment_intent_id:
        changes["payment_intent"] = payment_intent_id

    is_free_trial = (
        metadata.get("isFreeTrial", "").strip().lower() in _TRUTHY
        or enrollment.enrollment_type == EnrollmentType.TRIAL.value
    )
    notes = f"Stripe payment {payment_intent_id}" if payment_intent_id else "Stripe payment"
    if event.currency:
        notes = f"{notes} ({event.currency.upper()})"

    class_ids = parse_class_ids(metadata.get("classIds"))
    return Transition(
        kind=kind,
        enrollment_changes=changes,
        class_ids=class_ids,
        booking_date=parse_start_date(metadata.get("startDate")),
        is_free_trial=is_free_trial,
        payment=PaymentDraft(
            amount=minor_units_to_decimal(event.amount_minor),
            payment_method=PaymentMethod.STRIPE.value,
            transaction_id=payment_intent_id,
            notes=notes,
        ),
        message=f"Enrollment {enrollment.id} paid for {len(class_ids)} class(es)",
    )


class ReconciliationService(BaseService):
    """Applies gateway events to enrollment, booking and payment records."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.enrollment_repository = RepositoryFactory.create_enrollment_repository(db)
        self.class_repository = RepositoryFactory.create_class_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.payment_repository = RepositoryFactory.create_payment_repository(db)

    @BaseService.measure_operation("reconcile")
    def reconcile(self, event: GatewayEvent) -> ReconciliationResult:
        """Apply ``event`` and commit its effects as one transaction."""
        with self.transaction():
            return self.apply(event)

    def apply(self, event: GatewayEvent) -> ReconciliationResult:
        """
        Apply ``event`` inside the caller's transaction.

        Raises:
            NotFoundException: a succeeded payment names no known enrollment
        """
        kind = event.kind
        result = ReconciliationResult(event_id=event.id, kind=kind)

        if kind in LOG_ONLY_KINDS:
            transition = plan_transition(kind, None, event)
            self.logger.info(
                transition.message, extra={"event_id": event.id, "event_type": event.type}
            )
            result.message = transition.message
            return result

        enrollment = self._resolve_enrollment(event)
        if enrollment is None:
            if kind is GatewayEventKind.PAYMENT_INTENT_SUCCEEDED:
                raise NotFoundException(
                    f"Enrollment not found for payment {event.payment_intent_id or event.id}",
                    code="ENROLLMENT_NOT_FOUND",
                    details={"event_id": event.id, "metadata": event.metadata},
                )
            self.logger.warning(
                "No enrollment for %s %s; acknowledging without changes",
                event.type,
                event.id,
            )
            result.message = f"No enrollment found for {event.type}"
            return result

        result.enrollment_id = enrollment.id
        result.enrollment_found = True
        transition = plan_transition(kind, EnrollmentSnapshot.of(enrollment), event)
        result.message = transition.message

        for field_name, value in transition.enrollment_changes.items():
            setattr(enrollment, field_name, value)
        self.enrollment_repository.flush()

        if transition.class_ids:
            self._create_bookings(enrollment, transition, event, result)

        if transition.payment is not None:
            receipt_number = self.payment_repository.generate_receipt_number()
            draft = transition.payment
            payment = self.payment_repository.create(
                enrollment_id=enrollment.id,
                amount=draft.amount,
                payment_method=draft.payment_method,
                payment_status=PaymentStatus.COMPLETED.value,
                transaction_id=draft.transaction_id,
                receipt_number=receipt_number,
                payment_date=event.created,
                notes=draft.notes,
            )
            result.payment_id = payment.id
            result.receipt_number = receipt_number

        self.logger.info(
            transition.message,
            extra={
                "event_id": event.id,
                "event_type": event.type,
                "enrollment_id": enrollment.id,
                "bookings_created": result.bookings_created,
                "classes_skipped": len(result.classes_skipped),
            },
        )
        return result

    def _resolve_enrollment(self, event: GatewayEvent) -> Optional[Enrollment]:
        enrollment_id = event.metadata.get("enrollmentId")
        if enrollment_id:
            enrollment = self.enrollment_repository.get_by_id(
                enrollment_id, load_relationships=False
            )
            if enrollment is not None:
                return enrollment
        payment_intent_id = event.payment_intent_id
        if payment_intent_id:
            return self.enrollment_repository.get_by_payment_intent(payment_intent_id)
        return None

    def _create_bookings(
        self,
        enrollment: Enrollment,
        transition: Transition,
        event: GatewayEvent,
        result: ReconciliationResult,
    ) -> None:
        classes = self.class_repository.get_many(transition.class_ids)
        for class_id in transition.class_ids:
            scheduled_class = classes.get(class_id)
            if scheduled_class is None:
                self.logger.warning(
                    "Class %s from event %s not found; skipping its booking",
                    class_id,
                    event.id,
                )
                result.classes_skipped.append(class_id)
                continue

            booking_date = transition.booking_date or next_class_date(
                scheduled_class.day_of_week, event.created.date()
            )
            booking = self.booking_repository.create(
                customer_id=enrollment.customer_id,
                class_id=scheduled_class.id,
                enrollment_id=enrollment.id,
                booking_date=booking_date,
                term=scheduled_class.term,
                is_free_trial=transition.is_free_trial,
            )
            result.booking_ids.append(booking.id)
