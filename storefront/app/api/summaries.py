"""Catalog summaries embedded in cart and order line items."""

from __future__ import annotations

from storefront.common.money import from_cents

from ..services.catalog import ProductSnapshot


def serialize_product_summary(snapshot: ProductSnapshot | None) -> dict[str, object] | None:
    if snapshot is None:
        return None
    return {
        "id": snapshot.id,
        "name": snapshot.name,
        "price": from_cents(snapshot.price_cents),
        "isActive": snapshot.is_active,
    }
