"""Persistence helpers for the product catalog."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Product

_UPDATABLE_FIELDS = frozenset(
    {"name", "description", "price_cents", "category", "stock_quantity", "images", "is_active"}
)


class CatalogRepository:
    """Data access methods for products."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_product(
        self,
        *,
        name: str,
        description: str,
        price_cents: int,
        category: str,
        stock_quantity: int,
        images: list[str],
        is_active: bool,
    ) -> Product:
        product = Product(
            name=name,
            description=description,
            price_cents=price_cents,
            category=category,
            stock_quantity=stock_quantity,
            images=images,
            is_active=is_active,
        )
        self.session.add(product)
        await self.session.flush()
        await self.session.refresh(product, attribute_names=["created_at", "updated_at"])
        return product

    async def get_product(self, product_id: int) -> Product | None:
        result = await self.session.execute(select(Product).where(Product.id == product_id))
        return result.scalar_one_or_none()

    async def get_products(self, product_ids: Iterable[int]) -> list[Product]:
        ids = set(product_ids)
        if not ids:
            return []
        result = await self.session.execute(select(Product).where(Product.id.in_(ids)))
        return list(result.scalars())

    async def list_products(
        self,
        *,
        search: str | None,
        category: str | None,
        min_price_cents: int | None,
        max_price_cents: int | None,
        is_active: bool | None,
        limit: int,
        offset: int,
    ) -> tuple[list[Product], int]:
        base_query: Select[tuple[Product]] = select(Product)
        count_query: Select[tuple[int]] = select(func.count(Product.id))

        filters = []
        if search:
            filters.append(Product.name.ilike(f"%{search}%"))
        if category:
            filters.append(Product.category == category)
        if min_price_cents is not None:
            filters.append(Product.price_cents >= min_price_cents)
        if max_price_cents is not None:
            filters.append(Product.price_cents <= max_price_cents)
        if is_active is not None:
            filters.append(Product.is_active == is_active)

        if filters:
            base_query = base_query.where(*filters)
            count_query = count_query.where(*filters)

        total_result = await self.session.execute(count_query)
        total = total_result.scalar_one()

        result = await self.session.execute(
            base_query.order_by(Product.name, Product.id).offset(offset).limit(limit)
        )
        return list(result.scalars()), total

    async def update_product(self, product: Product, changes: dict[str, Any]) -> Product:
        for field, value in changes.items():
            if field not in _UPDATABLE_FIELDS:
                raise KeyError(field)
            setattr(product, field, value)
        await self.session.flush()
        await self.session.refresh(product, attribute_names=["updated_at"])
        return product

    async def delete_product(self, product: Product) -> None:
        await self.session.delete(product)
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()
