"""
Request Validation Module
"""
from .schemas import (
    OrderCreate,
    OrderUpdate,
    ProductCreate,
    ReviewCreate,
    ReviewUpdate,
    UserCreate,
    UserPartialUpdate,
    UserUpdate,
)
from .validators import FieldError, ValidationResult, provided_fields, validate_payload

__all__ = [
    "OrderCreate",
    "OrderUpdate",
    "ProductCreate",
    "ReviewCreate",
    "ReviewUpdate",
    "UserCreate",
    "UserPartialUpdate",
    "UserUpdate",
    "FieldError",
    "ValidationResult",
    "provided_fields",
    "validate_payload",
]
