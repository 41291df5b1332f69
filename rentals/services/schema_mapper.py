"""
Schema Mapper
Translates between storage rows of the ``properties`` table (snake_case,
``agent_id`` foreign key, joined ``agent`` embed) and application
entities (camelCase on the wire, nested Agent value object).

Every function here is pure and does no I/O.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel

from rentals.schemas.property import (
    EMPTY_AGENT,
    Agent,
    Property,
    PropertyCreate,
    split_amenities,
)


# Columns selected from the agents table when joining
AGENT_COLUMNS = "id, name, is_verified, rating, properties_listed"

# Application field (attribute name or wire alias) -> storage column
APPLICATION_TO_STORAGE: Dict[str, str] = {
    "id": "id",
    "title": "title",
    "location": "location",
    "price": "price",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "area": "area",
    "image": "image_url",
    "verified": "is_verified",
    "rating": "rating",
    "reviews": "reviews_count",
    "virtual_tour": "has_virtual_tour",
    "virtualTour": "has_virtual_tour",
    "featured": "is_featured",
    "description": "description",
    "amenities": "amenities",
    "agent_id": "agent_id",
    "agentId": "agent_id",
}

PartialLike = Union[BaseModel, Mapping[str, Any]]

_ABSENT = object()


# ── Coercion helpers ───────────────────────────────────────────────────────────

def _to_float(value: Any, default: float = 0.0) -> float:
    """Numeric columns may arrive as text (e.g. Postgres numeric -> "500.00")."""
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_int(value: Any, default: int = 0) -> int:
    if value is None or value == "":
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def _to_agent(agent_row: Any) -> Agent:
    # PostgREST embeds a to-one relation as an object, but may hand back a
    # list when it cannot infer cardinality
    if isinstance(agent_row, list):
        agent_row = agent_row[0] if agent_row else None
    if isinstance(agent_row, Agent):
        return agent_row
    if not agent_row:
        return EMPTY_AGENT
    return Agent(
        id=_to_int(agent_row.get("id")),
        name=agent_row.get("name") or "",
        is_verified=bool(agent_row.get("is_verified")),
        rating=_to_float(agent_row.get("rating")),
        properties_listed=_to_int(agent_row.get("properties_listed")),
    )


def _agent_id_of(agent: Any) -> Optional[int]:
    """Foreign key for an agent value; 0 stands for the empty sentinel."""
    if isinstance(agent, Agent):
        return agent.id
    return _to_int(agent.get("id"))


def _to_amenities(value: Any) -> List[str]:
    # Stored arrays pass through untouched; a legacy text column is split
    if value is None:
        return []
    if isinstance(value, str):
        return split_amenities(value)
    return list(value)


# ── Storage -> application ─────────────────────────────────────────────────────

def to_application(
    row: Mapping[str, Any],
    joined_agent: Optional[Mapping[str, Any]] = None,
) -> Property:
    """
    Map a storage row to a Property.

    Args:
        row: Row from the ``properties`` table
        joined_agent: Joined agents sub-row; defaults to the row's ``agent`` embed

    Returns:
        Property with every invariant satisfied (agent never None,
        amenities always a list, numerics coerced)
    """
    agent_row = joined_agent if joined_agent is not None else row.get("agent")
    agent = _to_agent(agent_row)
    raw_id = row.get("id")
    agent_id = row.get("agent_id")

    return Property(
        id="" if raw_id is None else str(raw_id),
        title=row.get("title") or "",
        location=row.get("location") or "",
        price=_to_float(row.get("price")),
        bedrooms=_to_int(row.get("bedrooms")),
        bathrooms=_to_int(row.get("bathrooms")),
        area=_to_float(row.get("area")),
        image=row.get("image_url") or "",
        verified=bool(row.get("is_verified")),
        rating=_to_float(row.get("rating")),
        reviews=_to_int(row.get("reviews_count")),
        virtual_tour=bool(row.get("has_virtual_tour")),
        featured=bool(row.get("is_featured")),
        description=row.get("description") or "",
        amenities=_to_amenities(row.get("amenities")),
        agent=agent,
        agent_id=_to_int(agent_id) if agent_id is not None else (agent.id or None),
    )


# ── Application -> storage ─────────────────────────────────────────────────────

def _present_fields(partial: PartialLike) -> Dict[str, Any]:
    if isinstance(partial, BaseModel):
        return {name: getattr(partial, name) for name in partial.model_fields_set}
    return dict(partial)


def to_storage(partial: PartialLike) -> Dict[str, Any]:
    """
    Map a partial application object to a storage patch.

    Only fields present in ``partial`` are emitted: pydantic models report
    presence through ``model_fields_set``, mappings through their keys.
    A present field whose value is None is kept as None.

    An ``agent`` only yields ``agent_id`` when no explicit foreign key is
    present, and the empty sentinel agent yields nothing so the stored
    key is never overwritten.

    >>> to_storage({"price": 500})
    {'price': 500}
    """
    patch: Dict[str, Any] = {}
    agent: Any = _ABSENT
    for name, value in _present_fields(partial).items():
        if name == "agent":
            agent = value
            continue
        column = APPLICATION_TO_STORAGE.get(name)
        if column is None:
            continue
        if column == "amenities" and value is not None:
            value = list(value)
        patch[column] = value

    if agent is not _ABSENT and "agent_id" not in patch:
        if agent is None:
            patch["agent_id"] = None
        elif _agent_id_of(agent):
            patch["agent_id"] = _agent_id_of(agent)
    return patch


def to_storage_row(prop: Property) -> Dict[str, Any]:
    """Full storage row for an entity, every column included."""
    return to_storage(prop.model_dump())


def to_storage_insert(
    create: Union[PropertyCreate, Mapping[str, Any]],
    default_agent_id: int,
) -> Dict[str, Any]:
    """Build the full insert row for a new listing."""
    if not isinstance(create, PropertyCreate):
        create = PropertyCreate.model_validate(create)

    return {
        "title": create.title,
        "location": create.location,
        "price": create.price,
        "bedrooms": create.bedrooms,
        "bathrooms": create.bathrooms,
        "area": create.area,
        "image_url": create.image or None,
        "description": create.description or None,
        "amenities": list(create.amenities),
        "is_verified": create.verified,
        "rating": create.rating,
        "reviews_count": create.reviews,
        "has_virtual_tour": create.virtual_tour,
        "is_featured": create.featured,
        "agent_id": create.agent_id or default_agent_id,
    }
