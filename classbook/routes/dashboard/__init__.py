# classbook/routes/dashboard/__init__.py
"""Admin dashboard routers, all mounted under /dashboard."""

from fastapi import APIRouter

from classbook.routes.dashboard import (
    bookings,
    classes,
    customers,
    enrollments,
    instructors,
    payments,
    webhooks,
)

router = APIRouter(prefix="/dashboard")
router.include_router(classes.router)
router.include_router(instructors.router)
router.include_router(instructors.exercise_types_router)
router.include_router(customers.router)
router.include_router(bookings.router)
router.include_router(payments.router)
router.include_router(enrollments.router)
router.include_router(webhooks.router)
