"""
Orders API Endpoints

Orders reference one user and a list of products. The total is always
computed server-side from the product prices plus VAT.
"""

from typing import Any, Dict, List, Type

import structlog
from fastapi import APIRouter, Body, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.database.connection import get_session
from marketplace.database.crud import apply_changes, count_rows, insert_row
from marketplace.database.models import Order, Product, User
from marketplace.serving.api.details import fetch_products, get_order_details
from marketplace.serving.api.errors import BadRequestError, NotFoundError, ValidationFailedError
from marketplace.serving.api.pagination import PageParams, build_pagination, page_params
from marketplace.serving.api.params import ResourceId
from marketplace.serving.api.responses import OrderDeleted, OrderDetail, OrderListResponse
from marketplace.services.totals import calculate_total_with_vat
from marketplace.validation import (
    OrderCreate,
    OrderUpdate,
    provided_fields,
    validate_payload,
)

router = APIRouter()
logger = structlog.get_logger(__name__)


async def require_user(session: AsyncSession, user_id: int) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def require_products(session: AsyncSession, product_ids: List[int]) -> List[Product]:
    """Products for every distinct id, or NotFoundError if any is missing."""
    products = await fetch_products(session, product_ids)
    if len(products) != len(set(product_ids)):
        raise NotFoundError("One or more products do not exist")
    return products


@router.get("", response_model=OrderListResponse)
async def list_orders(
    params: PageParams = Depends(page_params),
    session: AsyncSession = Depends(get_session),
) -> OrderListResponse:
    """List orders, newest first, with their user and products."""
    total = await count_rows(session, Order)
    result = await session.execute(
        select(Order)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset(params.offset)
        .limit(params.limit)
    )

    return OrderListResponse(
        orders=[await get_order_details(session, order) for order in result.scalars().all()],
        pagination=build_pagination(params, total),
    )


@router.get("/{order_id}", response_model=OrderDetail)
async def get_order(
    order_id: ResourceId,
    session: AsyncSession = Depends(get_session),
) -> OrderDetail:
    """Get an order with its user and products."""
    order = await session.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")

    return await get_order_details(session, order)


@router.post("", response_model=OrderDetail, status_code=201)
async def create_order(
    payload: Any = Body(None),
    session: AsyncSession = Depends(get_session),
) -> OrderDetail:
    """Create an unpaid order for an existing user and existing products."""
    result = validate_payload(OrderCreate, payload)
    if not result.valid:
        raise ValidationFailedError(result.errors)

    data = result.value
    await require_user(session, data.user_id)
    products = await require_products(session, data.product_ids)

    order = await insert_row(session, Order(
        user_id=data.user_id,
        product_ids=list(data.product_ids),
        total=calculate_total_with_vat(data.product_ids, products),
        payment=False,
    ))

    logger.info("Order created", order_id=order.id, user_id=order.user_id, total=str(order.total))
    return await get_order_details(session, order)


async def _update_order(
    order_id: int,
    payload: Any,
    schema: Type[OrderUpdate],
    session: AsyncSession,
) -> OrderDetail:
    result = validate_payload(schema, payload)
    if not result.valid:
        raise ValidationFailedError(result.errors)

    fields: Dict[str, Any] = {
        key: value for key, value in provided_fields(result.value).items() if value is not None
    }

    order = await session.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")

    if not fields:
        raise BadRequestError("No data to update")

    if "user_id" in fields:
        await require_user(session, fields["user_id"])

    if "product_ids" in fields:
        products = await require_products(session, fields["product_ids"])
        fields["product_ids"] = list(fields["product_ids"])
        fields["total"] = calculate_total_with_vat(fields["product_ids"], products)

    order = await apply_changes(session, order, fields)

    logger.info("Order updated", order_id=order_id, fields=sorted(fields))
    return await get_order_details(session, order)


@router.put("/{order_id}", response_model=OrderDetail)
async def replace_order(
    order_id: ResourceId,
    payload: Any = Body(None),
    session: AsyncSession = Depends(get_session),
) -> OrderDetail:
    """Update an order (full update; every field is still optional)."""
    return await _update_order(order_id, payload, OrderUpdate, session)


@router.patch("/{order_id}", response_model=OrderDetail)
async def patch_order(
    order_id: ResourceId,
    payload: Any = Body(None),
    session: AsyncSession = Depends(get_session),
) -> OrderDetail:
    """Partially update an order."""
    return await _update_order(order_id, payload, OrderUpdate, session)


@router.delete("/{order_id}", response_model=OrderDeleted)
async def delete_order(
    order_id: ResourceId,
    session: AsyncSession = Depends(get_session),
) -> OrderDeleted:
    """Delete an order; its user and products are untouched."""
    order = await session.get(Order, order_id)
    if order is None:
        raise NotFoundError("Order not found")

    deleted = await get_order_details(session, order)

    await session.delete(order)
    await session.flush()

    logger.info("Order deleted", order_id=order_id)
    return OrderDeleted(message="Order deleted successfully", order=deleted)
