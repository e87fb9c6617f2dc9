"""
Users API Endpoints

User accounts. Passwords are stored as SHA512 hashes and never returned.
"""

from typing import Any, Dict, Optional, Type

import structlog
from fastapi import APIRouter, Body, Depends
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.database.connection import get_session
from marketplace.database.crud import apply_changes, count_rows, insert_row
from marketplace.database.models import Order, Review, User
from marketplace.serving.api.errors import (
    BadRequestError,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from marketplace.serving.api.pagination import PageParams, build_pagination, page_params
from marketplace.serving.api.params import ResourceId
from marketplace.serving.api.responses import UserDeleted, UserListResponse, UserResponse
from marketplace.services.passwords import hash_password
from marketplace.services.scores import update_product_score
from marketplace.validation import (
    UserCreate,
    UserPartialUpdate,
    UserUpdate,
    provided_fields,
    validate_payload,
)

router = APIRouter()
logger = structlog.get_logger(__name__)

DUPLICATE_USER = "A user with this username or email already exists"


async def find_conflicting_user(
    session: AsyncSession,
    username: Optional[str],
    email: Optional[str],
    exclude_id: Optional[int] = None,
) -> Optional[int]:
    """Id of another user already holding ``username`` or ``email``."""
    conditions = []
    if username:
        conditions.append(User.username == username)
    if email:
        conditions.append(User.email == email)
    if not conditions:
        return None

    query = select(User.id).where(or_(*conditions))
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)

    return (await session.execute(query.limit(1))).scalar_one_or_none()


@router.get("", response_model=UserListResponse)
async def list_users(
    params: PageParams = Depends(page_params),
    session: AsyncSession = Depends(get_session),
) -> UserListResponse:
    """List users by ascending id."""
    total = await count_rows(session, User)
    result = await session.execute(
        select(User).order_by(User.id).offset(params.offset).limit(params.limit)
    )

    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in result.scalars().all()],
        pagination=build_pagination(params, total),
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: ResourceId,
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Get a user."""
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    return UserResponse.model_validate(user)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(
    payload: Any = Body(None),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Create a user; username and email must be unused."""
    result = validate_payload(UserCreate, payload)
    if not result.valid:
        raise ValidationFailedError(result.errors)

    data = result.value
    if await find_conflicting_user(session, data.username, data.email) is not None:
        raise ConflictError(DUPLICATE_USER)

    try:
        user = await insert_row(session, User(
            username=data.username,
            email=data.email,
            password_hash=hash_password(data.password),
        ))
    except IntegrityError as e:
        raise ConflictError(DUPLICATE_USER) from e

    logger.info("User created", user_id=user.id)
    return UserResponse.model_validate(user)


async def _update_user(
    user_id: int,
    payload: Any,
    schema: Type[UserUpdate],
    session: AsyncSession,
) -> UserResponse:
    result = validate_payload(schema, payload)
    if not result.valid:
        raise ValidationFailedError(result.errors)

    fields: Dict[str, Any] = {
        key: value for key, value in provided_fields(result.value).items() if value is not None
    }

    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    conflict = await find_conflicting_user(
        session, fields.get("username"), fields.get("email"), exclude_id=user_id
    )
    if conflict is not None:
        raise ConflictError(DUPLICATE_USER)

    if not fields:
        raise BadRequestError("No data to update")

    if "password" in fields:
        fields["password_hash"] = hash_password(fields.pop("password"))

    try:
        user = await apply_changes(session, user, fields)
    except IntegrityError as e:
        raise ConflictError(DUPLICATE_USER) from e

    logger.info("User updated", user_id=user_id, fields=sorted(fields))
    return UserResponse.model_validate(user)


@router.put("/{user_id}", response_model=UserResponse)
async def replace_user(
    user_id: ResourceId,
    payload: Any = Body(None),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Update a user (full update; every field is still optional)."""
    return await _update_user(user_id, payload, UserUpdate, session)


@router.patch("/{user_id}", response_model=UserResponse)
async def patch_user(
    user_id: ResourceId,
    payload: Any = Body(None),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    """Partially update a user."""
    return await _update_user(user_id, payload, UserPartialUpdate, session)


@router.delete("/{user_id}", response_model=UserDeleted)
async def delete_user(
    user_id: ResourceId,
    session: AsyncSession = Depends(get_session),
) -> UserDeleted:
    """Delete a user together with their orders and reviews."""
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    deleted = UserResponse.model_validate(user)

    reviewed_products = (await session.execute(
        select(Review.product_id).where(Review.user_id == user_id).distinct()
    )).scalars().all()

    await session.execute(delete(Review).where(Review.user_id == user_id))
    await session.execute(delete(Order).where(Order.user_id == user_id))
    await session.delete(user)

    for product_id in reviewed_products:
        await update_product_score(session, product_id)

    logger.info(
        "User deleted",
        user_id=user_id,
        rescored_products=len(reviewed_products),
    )
    return UserDeleted(message="User deleted successfully", user=deleted)
