# Area: Store
"""
Store - remote rating persistence.

This package contains:
- The async HTTP client for the rating store
- The local rating cache kept in step with it
"""

from .client import RatingStoreClient, parse_rating
from .cache import RatingCache

__all__ = [
    "RatingStoreClient",
    "parse_rating",
    "RatingCache",
]
