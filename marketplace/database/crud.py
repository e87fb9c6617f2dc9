"""
Row Helpers

Small building blocks shared by the resource handlers.
"""

from typing import Any, Dict, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.database.models import Base

ModelT = TypeVar("ModelT", bound=Base)


async def count_rows(session: AsyncSession, model: Type[Base]) -> int:
    """Unfiltered row count of a table."""
    return (await session.execute(select(func.count()).select_from(model))).scalar() or 0


async def insert_row(session: AsyncSession, instance: ModelT) -> ModelT:
    """Insert ``instance`` and reload it with its server-generated columns."""
    session.add(instance)
    await session.flush()
    await session.refresh(instance)
    return instance


async def apply_changes(session: AsyncSession, instance: ModelT, changes: Dict[str, Any]) -> ModelT:
    """
    Write only the given columns of ``instance``.

    The unit of work emits a single UPDATE naming just the changed columns;
    ``onupdate`` timestamps are refreshed from the database afterwards.
    """
    for column, value in changes.items():
        setattr(instance, column, value)
    await session.flush()
    await session.refresh(instance)
    return instance
