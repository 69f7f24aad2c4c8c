# classbook/routes/dashboard/customers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from classbook.api.dependencies import get_customer_service, require_admin
from classbook.core.enums import CustomerStatus
from classbook.schemas.customer import (
    CustomerCreate,
    CustomerDetailResponse,
    CustomerResponse,
    CustomerUpdate,
)
from classbook.services.customer_service import CustomerService

router = APIRouter(
    prefix="/customers", tags=["dashboard-customers"], dependencies=[Depends(require_admin)]
)


@router.get("", response_model=List[CustomerResponse])
def list_customers(
    search: Optional[str] = Query(None, description="Match against name or email"),
    customer_status: Optional[CustomerStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: CustomerService = Depends(get_customer_service),
) -> List[CustomerResponse]:
    customers = service.search_customers(
        search=search,
        status=customer_status.value if customer_status else None,
        skip=skip,
        limit=limit,
    )
    return [CustomerResponse.model_validate(customer) for customer in customers]


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerCreate, service: CustomerService = Depends(get_customer_service)
) -> CustomerResponse:
    return CustomerResponse.model_validate(service.create_customer(payload))


@router.get("/{customer_id}", response_model=CustomerDetailResponse)
def get_customer(
    customer_id: str, service: CustomerService = Depends(get_customer_service)
) -> CustomerDetailResponse:
    """Tabbed customer view: personal, medical, paq, bookings, payments."""
    return service.get_customer_detail(customer_id)


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: str,
    payload: CustomerUpdate,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    return CustomerResponse.model_validate(service.update_customer(customer_id, payload))
