"""
Middleware package for the Portal Home Hub API.
"""

from .validation import ValidationMiddleware

__all__ = ["ValidationMiddleware"]
