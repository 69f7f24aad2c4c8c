# classbook/repositories/__init__.py
"""
Repository layer: data access separated from business logic.

Usage:
    from classbook.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_booking_repository(db)
    bookings = repository.list_bookings(class_id=class_id)
"""

from classbook.repositories.base_repository import AppendOnlyRepository, BaseRepository
from classbook.repositories.factory import RepositoryFactory

__all__ = ["AppendOnlyRepository", "BaseRepository", "RepositoryFactory"]
