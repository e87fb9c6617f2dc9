"""
Database Module
"""
from .connection import Database, get_database, get_session
from .models import Base, Order, Product, Review, User

__all__ = [
    "Database",
    "get_database",
    "get_session",
    "Base",
    "Order",
    "Product",
    "Review",
    "User",
]
