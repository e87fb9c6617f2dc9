"""
Domain Services Module
"""
from .catalog import CatalogError, FreeToGameClient, GameNotFoundError
from .passwords import hash_password
from .scores import ScoreSummary, update_product_score
from .totals import calculate_total_with_vat

__all__ = [
    "CatalogError",
    "FreeToGameClient",
    "GameNotFoundError",
    "hash_password",
    "ScoreSummary",
    "update_product_score",
    "calculate_total_with_vat",
]
