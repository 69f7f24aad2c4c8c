# classbook/repositories/customer_repository.py
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from classbook.models.customer import Customer
from classbook.repositories.base_repository import BaseRepository


class CustomerRepository(BaseRepository[Customer]):
    def __init__(self, db: Session):
        super().__init__(db, Customer)

    def search(
        self,
        *,
        search: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Customer]:
        """List customers, optionally matching ``search`` against name and email."""
        query = self._build_query()
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Customer.first_name.ilike(pattern),
                    Customer.surname.ilike(pattern),
                    Customer.email.ilike(pattern),
                )
            )
        if status:
            query = query.filter(Customer.status == status)
        query = query.order_by(Customer.surname.asc(), Customer.first_name.asc())
        return self._execute_query(query.offset(skip).limit(limit))
