"""Order lifecycle: checkout from a cart, status state machine, owner-scoped queries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping

from storefront.common.errors import ConflictError, NotFoundError, ValidationError

from ..locks import CartLocks
from ..metrics import ORDER_STATUS_CHANGES_TOTAL, ORDERS_CREATED_TOTAL
from ..models import Order, OrderEvent, OrderStatus
from ..repositories.carts import CartRepository
from ..repositories.orders import OrderItemSnapshot, OrderRepository
from .catalog import ProductCatalog, ProductSnapshot

_LOGGER = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Mapping[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


class InvalidStatusTransition(ConflictError):
    """Raised when a status change is not an edge of the order state machine."""


def parse_status(value: str | OrderStatus) -> OrderStatus:
    """Return the enumerated status for one of the four wire literals."""

    try:
        return OrderStatus(value)
    except ValueError as exc:
        raise ValidationError("Invalid status") from exc


@dataclass
class OrderView:
    """An order together with the current catalog entries of its products."""

    order: Order
    products: dict[int, ProductSnapshot]


class OrderService:
    """Converts carts into orders and manages their lifecycle."""

    def __init__(
        self,
        repository: OrderRepository,
        carts: CartRepository,
        catalog: ProductCatalog,
        locks: CartLocks,
    ) -> None:
        self.repository = repository
        self.carts = carts
        self.catalog = catalog
        self.locks = locks

    async def create_order_from_cart(self, user_id: int, shipping_address: str) -> Order:
        address = (shipping_address or "").strip()
        if not address:
            raise ValidationError("Shipping address is required")

        async with self.locks.hold(user_id):
            cart = await self.carts.get_cart(user_id=user_id)
            if cart is None:
                raise NotFoundError("Cart not found for user")
            if not cart.items:
                raise ValidationError("Cart is empty")

            order = await self.repository.create_order(
                user_id=user_id,
                shipping_address=address,
                total_amount_cents=cart.total_price_cents,
                items=[
                    OrderItemSnapshot(
                        product_id=item.product_id,
                        product_name=item.product_name,
                        quantity=item.quantity,
                        unit_price_cents=item.unit_price_cents,
                    )
                    for item in cart.items
                ],
            )
            await self.repository.add_event(order, event_type="created", payload=OrderStatus.PENDING.value)
            await self.carts.clear_cart(cart)
            await self.repository.commit()

        ORDERS_CREATED_TOTAL.inc()
        _LOGGER.info(
            "Created order %s for user %s with %d items totalling %d cents",
            order.id,
            user_id,
            len(order.items),
            order.total_amount_cents,
        )
        return order

    async def update_order_status(self, order_id: int, new_status: str | OrderStatus) -> OrderView:
        target = parse_status(new_status)
        order = await self.repository.get_order(order_id)
        if order is None:
            raise NotFoundError("Order not found")

        current = OrderStatus(order.status)
        if target not in ALLOWED_TRANSITIONS[current]:
            raise InvalidStatusTransition(
                f"Cannot change order status from {current.value} to {target.value}"
            )

        delivery_date = datetime.now(timezone.utc) if target is OrderStatus.DELIVERED else None
        changed = await self.repository.transition_status(
            order, expected=current, status=target, delivery_date=delivery_date
        )
        if not changed:
            _LOGGER.warning("Order %s changed status concurrently; %s rejected", order_id, target.value)
            raise InvalidStatusTransition(
                f"Order status changed concurrently; cannot change it from {current.value} to {target.value}"
            )
        await self.repository.add_event(order, event_type="status_changed", payload=target.value)
        await self.repository.commit()

        ORDER_STATUS_CHANGES_TOTAL.labels(from_status=current.value, to_status=target.value).inc()
        _LOGGER.info("Order %s status changed from %s to %s", order_id, current.value, target.value)
        products = await self.catalog.get_snapshots(item.product_id for item in order.items)
        return OrderView(order=order, products=products)

    async def get_order_status(self, user_id: int, order_id: int) -> OrderStatus:
        status = await self.repository.get_owned_status(order_id=order_id, user_id=user_id)
        if status is None:
            raise NotFoundError("Order not found")
        return OrderStatus(status)

    async def get_order(self, user_id: int, order_id: int) -> OrderView:
        order = await self._require_owned(user_id, order_id)
        products = await self.catalog.get_snapshots(item.product_id for item in order.items)
        return OrderView(order=order, products=products)

    async def list_orders(self, user_id: int) -> list[OrderView]:
        orders = await self.repository.list_orders(user_id=user_id)
        products = await self.catalog.get_snapshots(
            item.product_id for order in orders for item in order.items
        )
        return [OrderView(order=order, products=products) for order in orders]

    async def get_order_history(self, user_id: int, order_id: int) -> list[OrderEvent]:
        order = await self._require_owned(user_id, order_id)
        return list(order.events)

    async def delete_order(self, user_id: int, order_id: int) -> bool:
        """Delete the order if ``user_id`` owns it; report whether anything was removed."""

        order = await self.repository.get_owned_order(order_id=order_id, user_id=user_id)
        if order is None:
            return False
        await self.repository.delete_order(order)
        await self.repository.commit()
        _LOGGER.info("Order %s deleted by user %s", order_id, user_id)
        return True

    async def _require_owned(self, user_id: int, order_id: int) -> Order:
        order = await self.repository.get_owned_order(order_id=order_id, user_id=user_id)
        if order is None:
            raise NotFoundError("Order not found")
        return order
