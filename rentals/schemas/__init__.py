from rentals.schemas.property import (
    EMPTY_AGENT,
    Agent,
    Property,
    PropertyCreate,
    PropertyListResponse,
    PropertyUpdate,
    SaveToggleResponse,
    StoreStatus,
)

__all__ = [
    "EMPTY_AGENT",
    "Agent",
    "Property",
    "PropertyCreate",
    "PropertyListResponse",
    "PropertyUpdate",
    "SaveToggleResponse",
    "StoreStatus",
]
