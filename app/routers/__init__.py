"""
API route handlers for the Portal Home Hub API.
"""

from .auth import router as auth_router
from .registration import router as registration_router
from .drafts import router as drafts_router
from .properties import router as properties_router
from .vetting import router as vetting_router
from .pricing import router as pricing_router
from .featuring import router as featuring_router
from .country import router as country_router
from .payments import router as payments_router
from .notifications import router as notifications_router
from .admin import router as admin_router

__all__ = [
    "auth_router",
    "registration_router",
    "drafts_router",
    "properties_router",
    "vetting_router",
    "pricing_router",
    "featuring_router",
    "country_router",
    "payments_router",
    "notifications_router",
    "admin_router",
]
