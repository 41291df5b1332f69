"""
Composition root helpers and FastAPI dependencies
"""
import logging

from fastapi import HTTPException, Request, status

from rentals.config import Settings
from rentals.exceptions import ConfigurationError, NotFoundError, StoreError
from rentals.services.property_repository import PropertyRepository
from rentals.services.property_store import PropertyStore
from rentals.services.supabase_service import SupabaseService

logger = logging.getLogger(__name__)


def build_property_store(settings: Settings) -> PropertyStore:
    """
    Wire the Supabase client, repository and state container.

    Missing or invalid connection settings do not stop the process: the
    store is returned in an error state instead.
    """
    try:
        service = SupabaseService(settings)
    except ConfigurationError as e:
        logger.warning(f"Starting without a property store: {e}")
        return PropertyStore(repository=None, error=e)

    repository = PropertyRepository(
        service.client,
        default_agent_id=settings.DEFAULT_AGENT_ID,
        properties_table=settings.PROPERTIES_TABLE,
        agents_table=settings.AGENTS_TABLE,
    )
    return PropertyStore(repository)


def get_property_store(request: Request) -> PropertyStore:
    """The state container owned by the running application"""
    store = getattr(request.app.state, "property_store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Property store not initialized",
        )
    return store


def store_error_to_http(error: Exception) -> HTTPException:
    """Translate the error left in the store's error slot to an HTTP error"""
    if isinstance(error, ConfigurationError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    elif isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, StoreError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(error) or "Property store error")
