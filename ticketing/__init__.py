"""TickeTing: async Python SDK for the TickeTing event-ticketing API."""

__version__ = "0.1.0"
__author__ = "TickeTing Team"

from .client import TickeTing, create_ticketing_client
from .collection import Collection, Operations
from .config import ClientConfig, Settings, get_settings
from .exceptions import (
    ApiError,
    BadDataError,
    InvalidStateError,
    PageAccessError,
    PermissionError,
    ResourceExistsError,
    ResourceIndelibleError,
    ResourceNotFoundError,
    TicketingError,
    TransportError,
    UnauthorisedError,
    UnsupportedCriteriaError,
    UnsupportedOperationError,
    UnsupportedSortError,
)
from .models import AccountModel, EventModel, RegionModel, ResourceModel, VenueModel
from .pagination import Cursor, PaginatedSequence
from .schemas import Account, AccountPreferences, Event, Region, Venue

__all__ = [
    "__version__",
    "__author__",
    "TickeTing",
    "create_ticketing_client",
    "Collection",
    "Operations",
    "ClientConfig",
    "Settings",
    "get_settings",
    "TicketingError",
    "TransportError",
    "ApiError",
    "BadDataError",
    "InvalidStateError",
    "PageAccessError",
    "PermissionError",
    "ResourceExistsError",
    "ResourceIndelibleError",
    "ResourceNotFoundError",
    "UnauthorisedError",
    "UnsupportedCriteriaError",
    "UnsupportedOperationError",
    "UnsupportedSortError",
    "ResourceModel",
    "RegionModel",
    "VenueModel",
    "EventModel",
    "AccountModel",
    "Cursor",
    "PaginatedSequence",
    "Account",
    "AccountPreferences",
    "Event",
    "Region",
    "Venue",
]
