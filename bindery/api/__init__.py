from bindery.api.binders import router as binders_router
from bindery.api.cards import router as cards_router
from bindery.api.health import router as health_router
from bindery.api.reorder import router as reorder_router

__all__ = [
    "binders_router",
    "cards_router",
    "health_router",
    "reorder_router",
]
