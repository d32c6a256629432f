"""Catalog operations and the product lookup used by carts and orders."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Protocol

from storefront.common.errors import NotFoundError
from storefront.common.money import to_cents

from ..models import Product
from ..repositories.catalog import CatalogRepository
from ..schemas import ProductCreate, ProductUpdate


@dataclass(frozen=True)
class ProductSnapshot:
    """Authoritative name, price and availability of a product at lookup time."""

    id: int
    name: str
    price_cents: int
    is_active: bool

    def __post_init__(self) -> None:
        if not self.name:
            msg = "product snapshot requires a name"
            raise ValueError(msg)
        if self.price_cents < 0:
            msg = "product snapshot price must be non-negative"
            raise ValueError(msg)

    @classmethod
    def from_model(cls, product: Product) -> ProductSnapshot:
        return cls(
            id=product.id,
            name=product.name,
            price_cents=product.price_cents,
            is_active=product.is_active,
        )


class ProductCatalog(Protocol):
    async def get_snapshot(self, product_id: int) -> ProductSnapshot | None: ...

    async def get_snapshots(self, product_ids: Iterable[int]) -> dict[int, ProductSnapshot]: ...


@dataclass
class ProductPage:
    products: list[Product]
    total_products: int
    total_pages: int
    current_page: int


class CatalogService:
    """Product CRUD; also serves as the ProductCatalog for carts and orders."""

    def __init__(self, repository: CatalogRepository) -> None:
        self.repository = repository

    async def create_product(self, payload: ProductCreate) -> Product:
        product = await self.repository.create_product(
            name=payload.name,
            description=payload.description,
            price_cents=to_cents(payload.price),
            category=payload.category,
            stock_quantity=payload.stock_quantity,
            images=list(payload.images),
            is_active=payload.is_active,
        )
        await self.repository.commit()
        return product

    async def get_product(self, product_id: int) -> Product:
        product = await self.repository.get_product(product_id)
        if product is None:
            raise NotFoundError("Product not found")
        return product

    async def list_products(
        self,
        *,
        search: str | None = None,
        category: str | None = None,
        price_min: Decimal | None = None,
        price_max: Decimal | None = None,
        is_active: bool | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> ProductPage:
        products, total = await self.repository.list_products(
            search=search,
            category=category,
            min_price_cents=to_cents(price_min) if price_min is not None else None,
            max_price_cents=to_cents(price_max) if price_max is not None else None,
            is_active=is_active,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return ProductPage(
            products=products,
            total_products=total,
            total_pages=math.ceil(total / limit),
            current_page=page,
        )

    async def update_product(self, product_id: int, payload: ProductUpdate) -> Product:
        product = await self.get_product(product_id)
        changes = payload.model_dump(exclude_unset=True)
        if "price" in changes:
            price = changes.pop("price")
            if price is not None:
                changes["price_cents"] = to_cents(price)
        changes = {field: value for field, value in changes.items() if value is not None}
        updated = await self.repository.update_product(product, changes)
        await self.repository.commit()
        return updated

    async def delete_product(self, product_id: int) -> None:
        product = await self.get_product(product_id)
        await self.repository.delete_product(product)
        await self.repository.commit()

    async def get_snapshot(self, product_id: int) -> ProductSnapshot | None:
        product = await self.repository.get_product(product_id)
        return ProductSnapshot.from_model(product) if product is not None else None

    async def get_snapshots(self, product_ids: Iterable[int]) -> dict[int, ProductSnapshot]:
        products = await self.repository.get_products(product_ids)
        return {product.id: ProductSnapshot.from_model(product) for product in products}
