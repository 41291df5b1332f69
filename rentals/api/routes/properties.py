from fastapi import APIRouter, Depends, HTTPException, status

from rentals.dependencies import get_property_store, store_error_to_http
from rentals.schemas.property import (
    Property,
    PropertyCreate,
    PropertyListResponse,
    PropertyUpdate,
    SaveToggleResponse,
    StoreStatus,
)
from rentals.services.property_store import PropertyStore

router = APIRouter()


def _list_response(store: PropertyStore, properties) -> PropertyListResponse:
    return PropertyListResponse(
        count=len(properties),
        properties=properties,
        status=StoreStatus(**store.snapshot()),
    )


@router.get("/", response_model=PropertyListResponse)
def list_properties(
    refresh: bool = False,
    store: PropertyStore = Depends(get_property_store),
):
    """
    Browse listings as currently held in memory.
    A failed refresh still returns the last known listings, with the error in status.
    """
    if refresh:
        store.refresh()
    return _list_response(store, store.properties)


@router.post("/refresh", response_model=PropertyListResponse)
def refresh_properties(store: PropertyStore = Depends(get_property_store)):
    """Reload every listing from the store"""
    if not store.refresh():
        raise store_error_to_http(store.error)
    return _list_response(store, store.properties)


@router.post("/", response_model=Property, status_code=status.HTTP_201_CREATED)
def create_property(
    property_in: PropertyCreate,
    store: PropertyStore = Depends(get_property_store),
):
    """List a new property"""
    created = store.add(property_in)
    if created is None:
        raise store_error_to_http(store.error)
    return created


@router.get("/{property_id}", response_model=Property)
def get_property(
    property_id: str,
    store: PropertyStore = Depends(get_property_store),
):
    """Get a specific property"""
    prop = store.get_by_id(property_id)
    if not prop:
        raise HTTPException(status_code=404, detail="Property not found")
    return prop


@router.patch("/{property_id}", response_model=Property)
@router.put("/{property_id}", response_model=Property)
def update_property(
    property_id: str,
    property_update: PropertyUpdate,
    store: PropertyStore = Depends(get_property_store),
):
    """Update the fields sent in the body; other fields are left as they are"""
    updated = store.update(property_id, property_update)
    if updated is None:
        raise store_error_to_http(store.error)
    return updated


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(
    property_id: str,
    store: PropertyStore = Depends(get_property_store),
):
    """Delete a property"""
    if not store.remove(property_id):
        raise store_error_to_http(store.error)
    return None


@router.post("/{property_id}/save", response_model=SaveToggleResponse)
def toggle_save_property(
    property_id: str,
    store: PropertyStore = Depends(get_property_store),
):
    """Mark or unmark a listing as saved for this session"""
    if not store.get_by_id(property_id):
        raise HTTPException(status_code=404, detail="Property not found")

    saved = store.toggle_saved(property_id)
    return SaveToggleResponse(
        property_id=property_id,
        saved=saved,
        saved_ids=sorted(store.saved_ids),
    )
