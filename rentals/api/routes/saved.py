from fastapi import APIRouter, Depends

from rentals.dependencies import get_property_store
from rentals.schemas.property import PropertyListResponse, StoreStatus
from rentals.services.property_store import PropertyStore

router = APIRouter()


@router.get("/", response_model=PropertyListResponse)
def list_saved_properties(store: PropertyStore = Depends(get_property_store)):
    """Listings saved during this session, in browse order"""
    saved = store.saved_properties()
    return PropertyListResponse(
        count=len(saved),
        properties=saved,
        status=StoreStatus(**store.snapshot()),
    )
