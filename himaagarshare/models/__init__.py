"""Database models."""

from himaagarshare.models.booking import Booking
from himaagarshare.models.listing import Listing

__all__ = [
    "Booking",
    "Listing",
]
