"""Data access helpers for shopping carts."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import Cart, CartItem


class CartRepository:
    """Persistence helpers for shopping carts.

    Every mutation recomputes line totals from the stored unit price and the
    cart total from the line totals before flushing.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_cart(self, *, user_id: int) -> Cart | None:
        result = await self.session.execute(
            select(Cart).options(selectinload(Cart.items)).where(Cart.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_or_create_cart(self, *, user_id: int) -> Cart:
        cart = await self.get_cart(user_id=user_id)
        if cart is None:
            cart = Cart(user_id=user_id, total_price_cents=0)
            self.session.add(cart)
            await self.session.flush()
            await self.session.refresh(cart, attribute_names=["created_at", "updated_at", "items"])
        return cart

    async def add_item(
        self,
        cart: Cart,
        *,
        product_id: int,
        product_name: str,
        unit_price_cents: int,
        quantity: int,
    ) -> Cart:
        existing = self.find_item(cart, product_id)
        if existing:
            existing.quantity += quantity
            existing.line_total_cents = existing.quantity * existing.unit_price_cents
        else:
            cart.items.append(
                CartItem(
                    product_id=product_id,
                    product_name=product_name,
                    unit_price_cents=unit_price_cents,
                    quantity=quantity,
                    line_total_cents=quantity * unit_price_cents,
                )
            )
        return await self._save(cart)

    async def set_quantity(self, cart: Cart, *, product_id: int, quantity: int) -> Cart:
        item = self.find_item(cart, product_id)
        if item is None:
            raise KeyError(product_id)
        if quantity == 0:
            cart.items.remove(item)
        else:
            item.quantity = quantity
            item.line_total_cents = quantity * item.unit_price_cents
        return await self._save(cart)

    async def remove_item(self, cart: Cart, *, product_id: int) -> Cart:
        item = self.find_item(cart, product_id)
        if item is None:
            raise KeyError(product_id)
        cart.items.remove(item)
        return await self._save(cart)

    async def clear_cart(self, cart: Cart) -> Cart:
        cart.items.clear()
        return await self._save(cart)

    async def commit(self) -> None:
        await self.session.commit()

    @staticmethod
    def find_item(cart: Cart, product_id: int) -> CartItem | None:
        return next((item for item in cart.items if item.product_id == product_id), None)

    async def _save(self, cart: Cart) -> Cart:
        cart.total_price_cents = sum(item.line_total_cents for item in cart.items)
        await self.session.flush()
        await self.session.refresh(cart, attribute_names=["items", "updated_at"])
        return cart
