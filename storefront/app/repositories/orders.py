"""Data access helpers for orders."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models import Order, OrderEvent, OrderItem, OrderStatus


@dataclass(frozen=True)
class OrderItemSnapshot:
    product_id: int
    product_name: str
    quantity: int
    unit_price_cents: int


class OrderRepository:
    """Persistence helpers for orders and their events."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_order(
        self,
        *,
        user_id: int,
        shipping_address: str,
        total_amount_cents: int,
        items: Iterable[OrderItemSnapshot],
    ) -> Order:
        order = Order(
            user_id=user_id,
            status=OrderStatus.PENDING.value,
            shipping_address=shipping_address,
            total_amount_cents=total_amount_cents,
            items=[
                OrderItem(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price_cents=item.unit_price_cents,
                )
                for item in items
            ],
        )
        self.session.add(order)
        await self.session.flush()
        await self.session.refresh(order, attribute_names=["items", "events", "created_at", "updated_at"])
        return order

    async def get_order(self, order_id: int) -> Order | None:
        result = await self.session.execute(
            select(Order)
            .options(selectinload(Order.items), selectinload(Order.events))
            .where(Order.id == order_id)
        )
        return result.scalar_one_or_none()

    async def get_owned_order(self, *, order_id: int, user_id: int) -> Order | None:
        result = await self.session.execute(
            select(Order)
            .options(selectinload(Order.items), selectinload(Order.events))
            .where(Order.id == order_id, Order.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_owned_status(self, *, order_id: int, user_id: int) -> str | None:
        result = await self.session.execute(
            select(Order.status).where(Order.id == order_id, Order.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def list_orders(self, *, user_id: int) -> list[Order]:
        result = await self.session.execute(
            select(Order)
            .options(selectinload(Order.items))
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(result.scalars().unique())

    async def add_event(self, order: Order, *, event_type: str, payload: str) -> OrderEvent:
        entry = OrderEvent(order=order, type=event_type, payload=payload)
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def transition_status(
        self,
        order: Order,
        *,
        expected: OrderStatus,
        status: OrderStatus,
        delivery_date: datetime | None = None,
    ) -> bool:
        """Move ``order`` to ``status`` only if it is still ``expected`` in storage.

        Returns False when a concurrent writer changed the status first.
        """

        values: dict[str, object] = {"status": status.value}
        if delivery_date is not None:
            values["delivery_date"] = delivery_date
        result = await self.session.execute(
            update(Order)
            .where(Order.id == order.id, Order.status == expected.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        await self.session.refresh(order, attribute_names=["status", "delivery_date", "updated_at"])
        return True

    async def delete_order(self, order: Order) -> None:
        await self.session.delete(order)
        await self.session.flush()

    async def commit(self) -> None:
        await self.session.commit()
