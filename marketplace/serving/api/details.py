"""
Detail Enrichment

Builds the nested representations returned by get-by-id and list endpoints:
products with their reviews, orders with their owner and products, reviews
with author and product name.
"""

from typing import List, Optional

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.database.models import Order, Product, Review, User
from marketplace.serving.api.responses import (
    OrderDetail,
    OrderResponse,
    ProductDetail,
    ProductResponse,
    ProductReview,
    ReviewDetail,
    ReviewResponse,
    UserResponse,
)


def review_detail_query() -> Select:
    """Reviews joined with their author and product."""
    return (
        select(Review, User.username, User.email, Product.name.label("product_name"))
        .join(User, Review.user_id == User.id)
        .join(Product, Review.product_id == Product.id)
    )


def to_review_detail(row) -> ReviewDetail:
    review, username, email, product_name = row
    return ReviewDetail(
        **ReviewResponse.model_validate(review).model_dump(),
        username=username,
        email=email,
        product_name=product_name,
    )


async def get_review_details(session: AsyncSession, review_id: int) -> Optional[ReviewDetail]:
    """Review with author username/email and product name, or None."""
    row = (await session.execute(
        review_detail_query().where(Review.id == review_id)
    )).first()
    return to_review_detail(row) if row else None


async def get_product_details(session: AsyncSession, product: Product) -> ProductDetail:
    """Product with its reviews (author included), newest first."""
    rows = (await session.execute(
        select(Review, User.username, User.email)
        .join(User, Review.user_id == User.id)
        .where(Review.product_id == product.id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )).all()

    reviews = [
        ProductReview(
            **ReviewResponse.model_validate(review).model_dump(),
            username=username,
            email=email,
        )
        for review, username, email in rows
    ]

    return ProductDetail(
        **ProductResponse.model_validate(product).model_dump(),
        reviews=reviews,
    )


async def fetch_products(session: AsyncSession, product_ids: List[int]) -> List[Product]:
    """Product rows for the given ids (each row once, ascending id)."""
    if not product_ids:
        return []
    result = await session.execute(
        select(Product).where(Product.id.in_(set(product_ids))).order_by(Product.id)
    )
    return list(result.scalars().all())


async def get_order_details(session: AsyncSession, order: Order) -> OrderDetail:
    """Order with its owner (no password hash) and referenced product rows."""
    user = (await session.execute(
        select(User).where(User.id == order.user_id)
    )).scalar_one_or_none()

    products = await fetch_products(session, order.product_ids)

    return OrderDetail(
        **OrderResponse.model_validate(order).model_dump(),
        user=UserResponse.model_validate(user) if user else None,
        products=[ProductResponse.model_validate(product) for product in products],
    )
