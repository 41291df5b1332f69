"""
Pydantic schemas for rental listings.

Python attributes are snake_case; the camelCase names the listing
client uses (``virtualTour``, ``agentId``) are serialization aliases.
"""
from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def split_amenities(value: Any) -> List[str]:
    """Accept a list of amenities or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    return [str(item).strip() for item in items if str(item).strip()]


# ── Agent ──────────────────────────────────────────────────────────────────────

class Agent(BaseModel):
    """Listing agent as joined from the ``agents`` table."""
    model_config = ConfigDict(frozen=True)

    id: int = 0
    name: str = ""
    is_verified: bool = False
    rating: float = 0
    properties_listed: int = 0


# Substituted whenever the agents join yields nothing
EMPTY_AGENT = Agent()


# ── Property ───────────────────────────────────────────────────────────────────

class Property(BaseModel):
    """A rental listing in application shape."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    location: str
    price: float
    bedrooms: int
    bathrooms: int
    area: float
    image: str = ""
    verified: bool = False
    rating: float = 0
    reviews: int = 0
    virtual_tour: bool = Field(False, alias="virtualTour")
    featured: bool = False
    description: str = ""
    amenities: List[str] = Field(default_factory=list)
    agent: Agent = Field(default_factory=Agent)
    # Foreign key as stored; survives an agents join that returns nothing
    agent_id: Optional[int] = Field(None, alias="agentId")


class PropertyCreate(BaseModel):
    """Payload for listing a new property."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., ge=0)
    bedrooms: int = Field(..., ge=1)
    bathrooms: int = Field(..., ge=1)
    area: float = Field(..., gt=0)
    image: str = ""
    description: str = ""
    amenities: List[str] = Field(default_factory=list)
    verified: bool = False
    rating: float = Field(0, ge=0)
    reviews: int = Field(0, ge=0)
    virtual_tour: bool = Field(False, alias="virtualTour")
    featured: bool = False
    agent_id: Optional[int] = Field(None, alias="agentId")

    @field_validator("title", "location")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("amenities", mode="before")
    @classmethod
    def parse_amenities(cls, v: Any) -> List[str]:
        return split_amenities(v)


class PropertyUpdate(BaseModel):
    """
    Partial update. Only fields the caller actually sent are applied
    (tracked in ``model_fields_set``); sending ``null`` clears an optional
    field. Columns the store declares NOT NULL reject ``null``.
    """
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    price: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=1)
    bathrooms: Optional[int] = Field(None, ge=1)
    area: Optional[float] = Field(None, gt=0)
    image: Optional[str] = None
    description: Optional[str] = None
    amenities: Optional[List[str]] = None
    verified: Optional[bool] = None
    rating: Optional[float] = Field(None, ge=0)
    reviews: Optional[int] = Field(None, ge=0)
    virtual_tour: Optional[bool] = Field(None, alias="virtualTour")
    featured: Optional[bool] = None
    agent_id: Optional[int] = Field(None, alias="agentId")

    @field_validator("title", "location")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("cannot be cleared")
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("price", "bedrooms", "bathrooms", "area")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("cannot be cleared")
        return v

    @field_validator("amenities", mode="before")
    @classmethod
    def parse_amenities(cls, v: Any) -> Optional[List[str]]:
        if v is None:
            return None
        return split_amenities(v)


# ── Responses ──────────────────────────────────────────────────────────────────

class StoreStatus(BaseModel):
    is_loading: bool = False
    error: Optional[str] = None
    total: int = 0
    saved: int = 0


class PropertyListResponse(BaseModel):
    success: bool = True
    count: int
    properties: List[Property]
    status: StoreStatus


class SaveToggleResponse(BaseModel):
    success: bool = True
    property_id: str
    saved: bool
    saved_ids: List[str]
