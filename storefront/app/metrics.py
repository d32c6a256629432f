"""Prometheus metrics for the storefront domain."""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter

ORDERS_CREATED_TOTAL: Final = Counter(
    "storefront_orders_created_total",
    "Total number of orders created from carts.",
)

ORDER_STATUS_CHANGES_TOTAL: Final = Counter(
    "storefront_order_status_changes_total",
    "Order status transitions applied.",
    labelnames=("from_status", "to_status"),
)

CART_ITEMS_ADDED_TOTAL: Final = Counter(
    "storefront_cart_items_added_total",
    "Units added to carts.",
)

CART_LOCK_TIMEOUTS_TOTAL: Final = Counter(
    "storefront_cart_lock_timeouts_total",
    "Cart mutations rejected because the per-user lock could not be acquired.",
)

PAYMENTS_TOTAL: Final = Counter(
    "storefront_payments_total",
    "Payment attempts by outcome.",
    labelnames=("outcome",),
)
