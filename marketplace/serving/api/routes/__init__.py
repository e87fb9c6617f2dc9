"""
API Routes Module
"""
from .health import router as health_router
from .products import router as products_router
from .users import router as users_router
from .orders import router as orders_router
from .reviews import router as reviews_router
from .games import router as games_router

__all__ = [
    "health_router",
    "products_router",
    "users_router",
    "orders_router",
    "reviews_router",
    "games_router",
]
