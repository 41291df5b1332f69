from rentals.api.routes.properties import router as properties_router
from rentals.api.routes.saved import router as saved_router

__all__ = [
    "properties_router",
    "saved_router",
]
