"""Service layer for shopping carts."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from storefront.common.errors import NotFoundError, ValidationError

from ..locks import CartLocks
from ..metrics import CART_ITEMS_ADDED_TOTAL
from ..models import Cart
from ..repositories.carts import CartRepository
from .catalog import ProductCatalog, ProductSnapshot

_LOGGER = logging.getLogger(__name__)


@dataclass
class CartView:
    """A cart together with the current catalog entries of its products."""

    cart: Cart
    products: dict[int, ProductSnapshot]


class CartService:
    """Cart mutations, each serialized per user and committed under the lock."""

    def __init__(self, repository: CartRepository, catalog: ProductCatalog, locks: CartLocks) -> None:
        self.repository = repository
        self.catalog = catalog
        self.locks = locks

    async def add_item(self, user_id: int, product_id: int, quantity: int) -> Cart:
        _require_positive_quantity(quantity)
        product = await self.catalog.get_snapshot(product_id)
        if product is None or not product.is_active:
            raise NotFoundError("Product not found")

        async with self.locks.hold(user_id):
            cart = await self.repository.get_or_create_cart(user_id=user_id)
            cart = await self.repository.add_item(
                cart,
                product_id=product.id,
                product_name=product.name,
                unit_price_cents=product.price_cents,
                quantity=quantity,
            )
            await self.repository.commit()

        CART_ITEMS_ADDED_TOTAL.inc(quantity)
        _LOGGER.debug("Added %s x product %s to cart of user %s", quantity, product_id, user_id)
        return cart

    async def get_cart(self, user_id: int) -> CartView:
        cart = await self.repository.get_cart(user_id=user_id)
        if cart is None:
            raise NotFoundError("Cart not found")
        products = await self.catalog.get_snapshots(item.product_id for item in cart.items)
        return CartView(cart=cart, products=products)

    async def update_item_quantity(self, user_id: int, product_id: int, quantity: int) -> Cart:
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            raise ValidationError("Quantity must be a non-negative integer")

        async with self.locks.hold(user_id):
            cart = await self._require_cart(user_id)
            try:
                cart = await self.repository.set_quantity(cart, product_id=product_id, quantity=quantity)
            except KeyError as exc:
                raise NotFoundError("Product not found in cart") from exc
            await self.repository.commit()
        return cart

    async def remove_item(self, user_id: int, product_id: int) -> Cart:
        async with self.locks.hold(user_id):
            cart = await self._require_cart(user_id)
            try:
                cart = await self.repository.remove_item(cart, product_id=product_id)
            except KeyError as exc:
                raise NotFoundError("Product not found in cart") from exc
            await self.repository.commit()
        return cart

    async def clear_cart(self, user_id: int) -> Cart:
        async with self.locks.hold(user_id):
            cart = await self._require_cart(user_id)
            cart = await self.repository.clear_cart(cart)
            await self.repository.commit()
        return cart

    async def _require_cart(self, user_id: int) -> Cart:
        cart = await self.repository.get_cart(user_id=user_id)
        if cart is None:
            raise NotFoundError("Cart not found")
        return cart


def _require_positive_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Quantity must be a positive integer")
