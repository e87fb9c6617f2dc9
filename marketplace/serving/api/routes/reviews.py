"""
Reviews API Endpoints

One review per (user, product) pair. Every create, update and delete
recomputes the product's aggregate score before responding.
"""

from typing import Any, Dict, Type

import structlog
from fastapi import APIRouter, Body, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.database.connection import get_session
from marketplace.database.crud import apply_changes, count_rows, insert_row
from marketplace.database.models import Product, Review, User
from marketplace.serving.api.details import (
    get_review_details,
    review_detail_query,
    to_review_detail,
)
from marketplace.serving.api.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from marketplace.serving.api.pagination import PageParams, build_pagination, page_params
from marketplace.serving.api.params import ResourceId
from marketplace.serving.api.responses import ReviewDeleted, ReviewDetail, ReviewListResponse
from marketplace.services.scores import update_product_score
from marketplace.validation import ReviewCreate, ReviewUpdate, provided_fields, validate_payload

router = APIRouter()
logger = structlog.get_logger(__name__)

DUPLICATE_REVIEW = "You have already reviewed this product"


@router.get("", response_model=ReviewListResponse)
async def list_reviews(
    params: PageParams = Depends(page_params),
    session: AsyncSession = Depends(get_session),
) -> ReviewListResponse:
    """List reviews, newest first, with author and product name."""
    total = await count_rows(session, Review)
    rows = (await session.execute(
        review_detail_query()
        .order_by(Review.created_at.desc(), Review.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )).all()

    return ReviewListResponse(
        reviews=[to_review_detail(row) for row in rows],
        pagination=build_pagination(params, total),
    )


@router.get("/{review_id}", response_model=ReviewDetail)
async def get_review(
    review_id: ResourceId,
    session: AsyncSession = Depends(get_session),
) -> ReviewDetail:
    """Get a review."""
    review = await get_review_details(session, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    return review


@router.post("", response_model=ReviewDetail, status_code=201)
async def create_review(
    payload: Any = Body(None),
    session: AsyncSession = Depends(get_session),
) -> ReviewDetail:
    """Review a product; each user may review a product once."""
    result = validate_payload(ReviewCreate, payload)
    if not result.valid:
        raise ValidationFailedError(result.errors)

    data = result.value
    if await session.get(User, data.user_id) is None:
        raise NotFoundError("User not found")
    if await session.get(Product, data.product_id) is None:
        raise NotFoundError("Product not found")

    existing = (await session.execute(
        select(Review.id).where(
            Review.user_id == data.user_id,
            Review.product_id == data.product_id,
        )
    )).scalar_one_or_none()
    if existing is not None:
        raise ConflictError(DUPLICATE_REVIEW)

    try:
        review = await insert_row(session, Review(
            user_id=data.user_id,
            product_id=data.product_id,
            score=data.score,
            content=data.content,
        ))
    except IntegrityError as e:
        raise ConflictError(DUPLICATE_REVIEW) from e

    summary = await update_product_score(session, data.product_id)

    logger.info(
        "Review created",
        review_id=review.id,
        product_id=data.product_id,
        product_score=str(summary.average),
    )
    return await get_review_details(session, review.id)


async def _update_review(
    review_id: int,
    payload: Any,
    schema: Type[ReviewUpdate],
    session: AsyncSession,
) -> ReviewDetail:
    result = validate_payload(schema, payload)
    if not result.valid:
        raise ValidationFailedError(result.errors)

    fields: Dict[str, Any] = {
        key: value for key, value in provided_fields(result.value).items() if value is not None
    }

    review = await session.get(Review, review_id)
    if review is None:
        raise NotFoundError("Review not found")

    if not fields:
        raise BadRequestError("No data to update")

    review = await apply_changes(session, review, fields)
    await update_product_score(session, review.product_id)

    logger.info("Review updated", review_id=review_id, fields=sorted(fields))
    return await get_review_details(session, review_id)


@router.put("/{review_id}", response_model=ReviewDetail)
async def replace_review(
    review_id: ResourceId,
    payload: Any = Body(None),
    session: AsyncSession = Depends(get_session),
) -> ReviewDetail:
    """Update a review (full update; every field is still optional)."""
    return await _update_review(review_id, payload, ReviewUpdate, session)


@router.patch("/{review_id}", response_model=ReviewDetail)
async def patch_review(
    review_id: ResourceId,
    payload: Any = Body(None),
    session: AsyncSession = Depends(get_session),
) -> ReviewDetail:
    """Partially update a review."""
    return await _update_review(review_id, payload, ReviewUpdate, session)


@router.delete("/{review_id}", response_model=ReviewDeleted)
async def delete_review(
    review_id: ResourceId,
    session: AsyncSession = Depends(get_session),
) -> ReviewDeleted:
    """Delete a review and rescore its product."""
    deleted = await get_review_details(session, review_id)
    if deleted is None:
        raise NotFoundError("Review not found")

    review = await session.get(Review, review_id)
    await session.delete(review)
    await update_product_score(session, deleted.product_id)

    logger.info("Review deleted", review_id=review_id, product_id=deleted.product_id)
    return ReviewDeleted(message="Review deleted successfully", review=deleted)
