"""
Database models for the Portal Home Hub API.
Includes users, properties, agent vetting, pricing, payments and the admin audit log.
"""

from app.models.user import User, UserType, AdminLevel, ApprovalStatus, SubscriptionStatus
from app.models.property import Property, PropertyStatus, ListingType, ListedByType
from app.models.vetting import AgentVetting, VettingStatus
from app.models.pricing import PricingPlan, PlanType
from app.models.payment import (
    PaymentHistory,
    PaymentReference,
    PaymentMethod,
    PaymentType,
    PaymentStatus,
    ReferenceStatus,
)
from app.models.admin_action import AdminAction

__all__ = [
    "User",
    "UserType",
    "AdminLevel",
    "ApprovalStatus",
    "SubscriptionStatus",
    "Property",
    "PropertyStatus",
    "ListingType",
    "ListedByType",
    "AgentVetting",
    "VettingStatus",
    "PricingPlan",
    "PlanType",
    "PaymentHistory",
    "PaymentReference",
    "PaymentMethod",
    "PaymentType",
    "PaymentStatus",
    "ReferenceStatus",
    "AdminAction",
]
