"""
Marketplace API

CRUD REST API for products, users, orders and reviews, with a proxy to the
FreeToGame free-to-play games catalog.
"""

__version__ = "1.0.0"
