from rentals.services.property_repository import PropertyRepository
from rentals.services.property_store import PropertyStore
from rentals.services.supabase_service import SupabaseService

__all__ = [
    "PropertyRepository",
    "PropertyStore",
    "SupabaseService",
]
