"""
Supabase Integration Service
Builds the Supabase client used by the property repository
"""
import logging

from supabase import create_client, Client

from rentals.config import Settings
from rentals.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class SupabaseService:
    """Owns the Supabase client for one application instance"""

    def __init__(self, settings: Settings):
        """
        Initialize Supabase client

        Raises:
            ConfigurationError: SUPABASE_URL or SUPABASE_KEY is missing,
                or the client rejects them
        """
        missing = settings.missing_store_settings()
        if missing:
            message = f"Missing Supabase configuration: {', '.join(missing)}"
            logger.error(message)
            raise ConfigurationError(message)

        try:
            self.client: Client = create_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_KEY
            )
        except Exception as e:
            # supabase-py validates the URL and key format eagerly
            logger.error(f"Failed to initialize Supabase client: {e}")
            raise ConfigurationError(f"Invalid Supabase configuration: {e}") from e

        logger.info("Supabase client initialized successfully")
