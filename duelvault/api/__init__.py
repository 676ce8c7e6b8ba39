from duelvault.api.decks import router as decks_router
from duelvault.api.health import router as health_router
from duelvault.api.library import router as library_router

__all__ = [
    "decks_router",
    "health_router",
    "library_router",
]
