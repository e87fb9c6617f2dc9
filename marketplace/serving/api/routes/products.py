"""
Products API Endpoints

Product catalog CRUD. Listing with ``name``, ``about`` or ``price`` searches
the FreeToGame catalog instead of the database, falling back to the database
when the catalog is unavailable.
"""

from decimal import Decimal
from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Body, Depends
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.database.connection import get_session
from marketplace.database.crud import count_rows, insert_row
from marketplace.database.models import Product, Review
from marketplace.serving.api.details import get_product_details
from marketplace.serving.api.errors import NotFoundError, ValidationFailedError
from marketplace.serving.api.pagination import PageParams, build_pagination, page_params
from marketplace.serving.api.params import ResourceId
from marketplace.serving.api.responses import (
    GameProduct,
    ProductDeleted,
    ProductDetail,
    ProductListResponse,
    ProductResponse,
)
from marketplace.services.catalog import (
    CatalogError,
    FreeToGameClient,
    filter_games,
    game_to_product,
    get_catalog,
)
from marketplace.validation import ProductCreate, validate_payload

router = APIRouter()
logger = structlog.get_logger(__name__)

SEARCH_GAMES = "free-to-play-games"
SEARCH_DATABASE = "database-products"


async def search_games(
    catalog: FreeToGameClient,
    params: PageParams,
    filters: Dict[str, Optional[str]],
) -> Optional[ProductListResponse]:
    """Catalog-backed product page, or None when the catalog call fails."""
    try:
        games = await catalog.list_games()
        if not isinstance(games, list):
            raise CatalogError("FreeToGame API error: unexpected payload")
    except CatalogError as e:
        logger.warning("FreeToGame search failed, using database products", error=str(e))
        return None

    matches = filter_games(games, **filters)
    page = matches[params.offset:params.offset + params.limit]

    return ProductListResponse(
        products=[GameProduct(**game_to_product(game)) for game in page],
        pagination=build_pagination(params, len(matches)),
        searchType=SEARCH_GAMES,
        filters=filters,
    )


@router.get("", response_model=ProductListResponse)
async def list_products(
    params: PageParams = Depends(page_params),
    name: Optional[str] = None,
    about: Optional[str] = None,
    price: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
    catalog: FreeToGameClient = Depends(get_catalog),
) -> ProductListResponse:
    """
    List products by ascending id.

    With any of ``name``, ``about`` or ``price`` the FreeToGame catalog is
    searched and paginated locally instead.
    """
    if name or about or price:
        filters = {"name": name, "about": about, "price": price}
        logger.info("Searching free-to-play games", filters=filters)
        games_page = await search_games(catalog, params, filters)
        if games_page is not None:
            return games_page

    total = await count_rows(session, Product)
    result = await session.execute(
        select(Product).order_by(Product.id).offset(params.offset).limit(params.limit)
    )

    return ProductListResponse(
        products=[ProductResponse.model_validate(p) for p in result.scalars().all()],
        pagination=build_pagination(params, total),
        searchType=SEARCH_DATABASE,
        filters=None,
    )


@router.get("/{product_id}", response_model=ProductDetail)
async def get_product(
    product_id: ResourceId,
    session: AsyncSession = Depends(get_session),
) -> ProductDetail:
    """Get a product with its reviews."""
    product = await session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")

    return await get_product_details(session, product)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    payload: Any = Body(None),
    session: AsyncSession = Depends(get_session),
) -> ProductResponse:
    """Create a product."""
    result = validate_payload(ProductCreate, payload)
    if not result.valid:
        raise ValidationFailedError(result.errors)

    data = result.value
    product = await insert_row(session, Product(
        name=data.name,
        about=data.about,
        price=Decimal(str(data.price)),
        total_score=Decimal("0.00"),
        reviews_ids=[],
    ))

    logger.info("Product created", product_id=product.id)
    return ProductResponse.model_validate(product)


@router.delete("/{product_id}", response_model=ProductDeleted)
async def delete_product(
    product_id: ResourceId,
    session: AsyncSession = Depends(get_session),
) -> ProductDeleted:
    """Delete a product and its reviews."""
    product = await session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")

    deleted = ProductResponse.model_validate(product)

    await session.execute(delete(Review).where(Review.product_id == product_id))
    await session.delete(product)
    await session.flush()

    logger.info("Product deleted", product_id=product_id)
    return ProductDeleted(message="Product deleted successfully", product=deleted)
