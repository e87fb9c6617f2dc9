"""
Request Schemas

Declarative input shapes for every resource. Create schemas require every
field; update schemas make every field optional. The full (PUT) and partial
(PATCH) update shapes are identical, handlers decide whether an empty update
is acceptable.

Schemas are strict: a JSON string is never coerced into a number.
"""

from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# Serial primary keys are 32-bit
MAX_ROW_ID = 2_147_483_647

RowId = Annotated[int, Field(gt=0, le=MAX_ROW_ID)]


class RequestSchema(BaseModel):
    """Base for request bodies"""
    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")


# =============================================================================
# PRODUCTS
# =============================================================================

class ProductCreate(RequestSchema):
    """New product"""
    name: str = Field(min_length=1)
    about: str = Field(min_length=1)
    price: float = Field(gt=0)


# =============================================================================
# USERS
# =============================================================================

class UserCreate(RequestSchema):
    """New user account"""
    username: str = Field(min_length=3)
    email: EmailStr
    password: str = Field(min_length=6)


class UserUpdate(RequestSchema):
    """Full user update"""
    username: Optional[str] = Field(default=None, min_length=3)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)


class UserPartialUpdate(UserUpdate):
    """Partial user update"""


# =============================================================================
# ORDERS
# =============================================================================

class OrderCreate(RequestSchema):
    """New order"""
    user_id: int = Field(alias="userId", gt=0, le=MAX_ROW_ID)
    product_ids: List[RowId] = Field(alias="productIds", min_length=1)


class OrderUpdate(RequestSchema):
    """Full or partial order update"""
    user_id: Optional[int] = Field(default=None, alias="userId", gt=0, le=MAX_ROW_ID)
    product_ids: Optional[List[RowId]] = Field(default=None, alias="productIds", min_length=1)
    payment: Optional[bool] = None


# =============================================================================
# REVIEWS
# =============================================================================

class ReviewCreate(RequestSchema):
    """New review"""
    user_id: int = Field(alias="userId", gt=0, le=MAX_ROW_ID)
    product_id: int = Field(alias="productId", gt=0, le=MAX_ROW_ID)
    score: int = Field(ge=1, le=5)
    content: str = Field(min_length=1, max_length=1000)


class ReviewUpdate(RequestSchema):
    """Full or partial review update"""
    score: Optional[int] = Field(default=None, ge=1, le=5)
    content: Optional[str] = Field(default=None, min_length=1, max_length=1000)
