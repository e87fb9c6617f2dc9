"""
Database Models

Relational schema for the marketplace:

- Product: catalog entries, carrying the aggregate review score
- User: accounts, stored with a password hash only
- Order: a user's basket of product ids with a server-computed total
- Review: one score + text per (user, product) pair
"""

from datetime import datetime
from decimal import Decimal
from typing import List

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# INTEGER[] on PostgreSQL, JSON list elsewhere
IntegerList = JSON().with_variant(ARRAY(Integer), "postgresql")


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


class Product(Base):
    """
    Product Table

    ``total_score`` and ``reviews_ids`` are derived from the product's reviews
    and only change when a review is created, updated or deleted.
    """
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    about: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    # Supplementary columns, also added to pre-existing tables at startup
    reviews_ids: Mapped[List[int]] = mapped_column(IntegerList, default=list)
    total_score: Mapped[Decimal] = mapped_column(Numeric(3, 2), default=Decimal("0.00"))

    __table_args__ = (
        CheckConstraint("price > 0", name="ck_products_price_positive"),
    )


class User(Base):
    """User Table"""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)  # SHA512 hex
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )


class Order(Base):
    """Order Table"""
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_ids: Mapped[List[int]] = mapped_column(IntegerList, nullable=False)
    total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        CheckConstraint("total >= 0", name="ck_orders_total_non_negative"),
    )


class Review(Base):
    """Review Table"""
    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="uq_reviews_user_product"),
        CheckConstraint("score >= 1 AND score <= 5", name="ck_reviews_score_range"),
    )


# Columns every product row must have, checked by Database.init()
PRODUCT_SUPPLEMENTARY_COLUMNS = ("reviews_ids", "total_score")
