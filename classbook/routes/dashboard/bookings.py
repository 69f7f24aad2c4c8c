# classbook/routes/dashboard/bookings.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from classbook.api.dependencies import get_booking_service, require_admin
from classbook.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingResponse,
    BookingUpdate,
)
from classbook.services.booking_service import BookingService

router = APIRouter(
    prefix="/bookings", tags=["dashboard-bookings"], dependencies=[Depends(require_admin)]
)


@router.get("", response_model=List[BookingResponse])
def list_bookings(
    class_id: Optional[str] = Query(None),
    customer_id: Optional[str] = Query(None),
    enrollment_id: Optional[str] = Query(None),
    service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    bookings = service.list_bookings(
        class_id=class_id, customer_id=customer_id, enrollment_id=enrollment_id
    )
    return [BookingResponse.model_validate(booking) for booking in bookings]


@router.post("", response_model=BookingDetailResponse, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate, service: BookingService = Depends(get_booking_service)
) -> BookingDetailResponse:
    booking = service.create_booking(payload)
    return service.get_booking_detail(booking.id)


@router.get("/{booking_id}", response_model=BookingDetailResponse)
def get_booking(
    booking_id: str, service: BookingService = Depends(get_booking_service)
) -> BookingDetailResponse:
    return service.get_booking_detail(booking_id)


@router.put("/{booking_id}", response_model=BookingDetailResponse)
def update_booking(
    booking_id: str,
    payload: BookingUpdate,
    service: BookingService = Depends(get_booking_service),
) -> BookingDetailResponse:
    """Edit a booking. Refused with 422 once attendance has been taken."""
    service.update_booking(booking_id, payload)
    return service.get_booking_detail(booking_id)
