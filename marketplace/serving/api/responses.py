"""
Response Models

JSON representations of the stored rows and of the list/detail envelopes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ProductResponse(BaseModel):
    """Product row"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    about: str
    price: float
    total_score: float = 0.0
    reviews_ids: List[int] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class GameProduct(BaseModel):
    """Catalog game in product shape, never stored"""
    id: str
    name: Optional[str] = None
    about: Optional[str] = None
    price: float = 0
    game_url: Optional[str] = None
    genre: Optional[str] = None
    platform: Optional[str] = None
    thumbnail: Optional[str] = None
    publisher: Optional[str] = None
    developer: Optional[str] = None
    release_date: Optional[str] = None
    is_free_to_play: bool = True


class UserResponse(BaseModel):
    """User row without its password hash"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderResponse(BaseModel):
    """Order row"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    product_ids: List[int]
    total: float
    payment: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReviewResponse(BaseModel):
    """Review row"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    product_id: int
    score: int
    content: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductReview(ReviewResponse):
    """Review embedded in a product, with its author"""
    username: str
    email: str


class ReviewDetail(ProductReview):
    """Review with author and product name"""
    product_name: str


class ProductDetail(ProductResponse):
    """Product with its reviews, newest first"""
    reviews: List[ProductReview] = Field(default_factory=list)


class OrderDetail(OrderResponse):
    """Order with its owner and product rows"""
    user: Optional[UserResponse] = None
    products: List[ProductResponse] = Field(default_factory=list)


# =============================================================================
# ENVELOPES
# =============================================================================

class Pagination(BaseModel):
    """Page metadata shared by every list endpoint"""
    page: int
    limit: int
    total: int
    totalPages: int
    hasNext: bool
    hasPrev: bool


class ProductListResponse(BaseModel):
    products: List[Union[ProductResponse, GameProduct]]
    pagination: Pagination
    searchType: str
    filters: Optional[Dict[str, Any]] = None


class UserListResponse(BaseModel):
    users: List[UserResponse]
    pagination: Pagination


class OrderListResponse(BaseModel):
    orders: List[OrderDetail]
    pagination: Pagination


class ReviewListResponse(BaseModel):
    reviews: List[ReviewDetail]
    pagination: Pagination


class ProductDeleted(BaseModel):
    message: str
    product: ProductResponse


class UserDeleted(BaseModel):
    message: str
    user: UserResponse


class OrderDeleted(BaseModel):
    message: str
    order: OrderDetail


class ReviewDeleted(BaseModel):
    message: str
    review: ReviewDetail


class GameListResponse(BaseModel):
    games: List[Dict[str, Any]]
    total: int
    filters: Dict[str, Optional[str]]
    apiSource: str


class GameResponse(BaseModel):
    game: Dict[str, Any]
    apiSource: str
