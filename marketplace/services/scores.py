"""
Product Scores

Recomputes the aggregate review score and review id list stored on a product.
Called after every review create, update or delete, inside the same session
as the triggering write.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.database.models import Product, Review
from marketplace.services.totals import round_half_up, to_decimal

logger = structlog.get_logger(__name__)


@dataclass
class ScoreSummary:
    """Aggregate score of one product"""
    product_id: int
    average: Decimal
    review_count: int
    review_ids: List[int] = field(default_factory=list)


async def update_product_score(session: AsyncSession, product_id: int) -> ScoreSummary:
    """
    Recompute and persist a product's ``total_score`` and ``reviews_ids``.

    The score is the mean of all review scores rounded half-up to two
    decimals, or 0 without reviews. Review ids are stored in ascending order.
    """
    await session.flush()

    avg_score, review_count = (await session.execute(
        select(func.avg(Review.score), func.count(Review.id))
        .where(Review.product_id == product_id)
    )).one()

    average = round_half_up(to_decimal(avg_score)) if avg_score is not None else Decimal("0.00")

    review_ids = list((await session.execute(
        select(Review.id)
        .where(Review.product_id == product_id)
        .order_by(Review.id)
    )).scalars().all())

    await session.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(total_score=average, reviews_ids=review_ids)
    )

    logger.debug(
        "Product score updated",
        product_id=product_id,
        average=str(average),
        review_count=review_count,
    )

    return ScoreSummary(
        product_id=product_id,
        average=average,
        review_count=review_count or 0,
        review_ids=review_ids,
    )
