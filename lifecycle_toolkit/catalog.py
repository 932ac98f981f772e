"""
Reference catalog of soft-deletable collections.

Declares the storefront collections managed by the lifecycle service as
minimal SQLAlchemy models. Only an identifying label is modeled; each
collection's full schema belongs to its own storage layer.
"""

from typing import Any, Dict, Optional, Type

from sqlalchemy import String
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .soft_delete.accessors import SQLAlchemyAccessor
from .soft_delete.mixins import SoftDeleteMixin, register_soft_delete_listeners
from .soft_delete.registry import EntityRegistry, RegistryEntry


class Base(DeclarativeBase):
    pass


class Product(Base, SoftDeleteMixin):
    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(200))


class User(Base, SoftDeleteMixin):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255))
    full_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)


class Category(Base, SoftDeleteMixin):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(200))


class Brand(Base, SoftDeleteMixin):
    __tablename__ = "brands"

    name: Mapped[str] = mapped_column(String(200))


class Blog(Base, SoftDeleteMixin):
    __tablename__ = "blogs"

    title: Mapped[str] = mapped_column(String(300))


class BlogCategory(Base, SoftDeleteMixin):
    __tablename__ = "blogcategories"

    name: Mapped[str] = mapped_column(String(200))


class Discount(Base, SoftDeleteMixin):
    __tablename__ = "discounts"

    code: Mapped[str] = mapped_column(String(100))


class Attribute(Base, SoftDeleteMixin):
    __tablename__ = "attributes"

    name: Mapped[str] = mapped_column(String(200))


class Contact(Base, SoftDeleteMixin):
    __tablename__ = "contacts"

    email: Mapped[str] = mapped_column(String(255))


class Notification(Base, SoftDeleteMixin):
    __tablename__ = "notifications"

    title: Mapped[str] = mapped_column(String(300))


class Review(Base, SoftDeleteMixin):
    __tablename__ = "reviews"

    comment: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)


class Wishlist(Base, SoftDeleteMixin):
    __tablename__ = "wishlists"

    user_id: Mapped[str] = mapped_column(String(24))


CATALOG: Dict[str, Type[SoftDeleteMixin]] = {
    "products": Product,
    "users": User,
    "categories": Category,
    "brands": Brand,
    "blogs": Blog,
    "blogcategories": BlogCategory,
    "discounts": Discount,
    "attributes": Attribute,
    "contacts": Contact,
    "notifications": Notification,
    "reviews": Review,
    "wishlists": Wishlist,
}

register_soft_delete_listeners(Base)


async def init_database(database_url: str, **engine_kwargs: Any) -> AsyncEngine:
    """
    Create the async engine and the catalog tables if needed.

    Args:
        database_url: SQLAlchemy database URL with an async driver,
            e.g. ``sqlite+aiosqlite:///./lifecycle.db``
        **engine_kwargs: Extra arguments for ``create_async_engine``

    Returns:
        Engine bound to the database; dispose it when done
    """
    engine = create_async_engine(database_url, **engine_kwargs)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory handing out one ``AsyncSession`` per accessor call."""
    return async_sessionmaker(engine, expire_on_commit=False)


def build_default_registry(
    session_factory: async_sessionmaker[AsyncSession],
) -> EntityRegistry:
    """Build the closed registry over every catalog collection."""
    return EntityRegistry(
        RegistryEntry(name, SQLAlchemyAccessor(session_factory, model, entity_type=name))
        for name, model in CATALOG.items()
    )
