"""
Repository layer for data access operations.
"""

from app.repositories.base import BaseRepository
from app.repositories.user import UserRepository
from app.repositories.property import PropertyRepository, PropertySearchFilters
from app.repositories.vetting import VettingRepository
from app.repositories.pricing import PricingRepository
from app.repositories.payment import PaymentHistoryRepository, PaymentReferenceRepository
from app.repositories.admin_action import AdminActionRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "VettingRepository",
    "PricingRepository",
    "PaymentHistoryRepository",
    "PaymentReferenceRepository",
    "AdminActionRepository",
]
