"""HTTP routes for order checkout, lifecycle and owner queries."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from storefront.common import ApiResponse, create_response
from storefront.common.money import from_cents
from storefront.common.security import Principal

from ..dependencies import get_current_user, get_order_service, require_admin
from ..models import Order
from ..schemas import (
    OrderCreate,
    OrderDeleteResponse,
    OrderEventResponse,
    OrderResponse,
    OrderStatusResponse,
    OrderUpdateStatus,
)
from ..services.catalog import ProductSnapshot
from ..services.orders import OrderService
from .summaries import serialize_product_summary

router = APIRouter(prefix="/orders", tags=["orders"])


def _serialize_order(order: Order, products: dict[int, ProductSnapshot] | None = None) -> dict[str, object]:
    products = products or {}
    return {
        "id": order.id,
        "userId": order.user_id,
        "items": [
            {
                "productId": item.product_id,
                "productName": item.product_name,
                "quantity": item.quantity,
                "price": from_cents(item.unit_price_cents),
                "totalItemPrice": from_cents(item.unit_price_cents * item.quantity),
                "product": serialize_product_summary(products.get(item.product_id)),
            }
            for item in order.items
        ],
        "totalAmount": from_cents(order.total_amount_cents),
        "status": order.status,
        "shippingAddress": order.shipping_address,
        "deliveryDate": order.delivery_date,
        "createdAt": order.created_at,
        "updatedAt": order.updated_at,
    }


def _serialize_events(order_events) -> list[dict[str, object]]:
    return [
        {
            "type": event.type,
            "payload": event.payload,
            "createdAt": event.created_at,
        }
        for event in order_events
    ]


@router.post("/create", response_model=ApiResponse[OrderResponse], status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderCreate,
    principal: Principal = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[OrderResponse]:
    order = await service.create_order_from_cart(principal.user_id, payload.shipping_address)
    return create_response(OrderResponse.model_validate(_serialize_order(order)), "Order created successfully")


@router.get("", response_model=ApiResponse[list[OrderResponse]])
async def list_orders(
    principal: Principal = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[list[OrderResponse]]:
    views = await service.list_orders(principal.user_id)
    orders = [OrderResponse.model_validate(_serialize_order(view.order, view.products)) for view in views]
    return create_response(orders, "Orders fetched successfully")


@router.get("/status/{order_id}", response_model=ApiResponse[OrderStatusResponse])
async def get_order_status(
    order_id: int,
    principal: Principal = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[OrderStatusResponse]:
    order_status = await service.get_order_status(principal.user_id, order_id)
    return create_response(OrderStatusResponse(status=order_status), "Order status fetched successfully")


@router.put("/update-status/{order_id}", response_model=ApiResponse[OrderResponse])
async def update_order_status(
    order_id: int,
    payload: OrderUpdateStatus,
    _admin: Principal = Depends(require_admin),
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[OrderResponse]:
    view = await service.update_order_status(order_id, payload.status)
    return create_response(
        OrderResponse.model_validate(_serialize_order(view.order, view.products)), "Order status updated successfully"
    )


@router.delete("/delete/{order_id}", response_model=ApiResponse[OrderDeleteResponse])
async def delete_order(
    order_id: int,
    principal: Principal = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[OrderDeleteResponse]:
    deleted = await service.delete_order(principal.user_id, order_id)
    message = "Order deleted successfully" if deleted else "Order not found"
    return create_response(OrderDeleteResponse(deleted=deleted), message)


@router.get("/{order_id}", response_model=ApiResponse[OrderResponse])
async def get_order(
    order_id: int,
    principal: Principal = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[OrderResponse]:
    view = await service.get_order(principal.user_id, order_id)
    return create_response(
        OrderResponse.model_validate(_serialize_order(view.order, view.products)), "Order fetched successfully"
    )


@router.get("/{order_id}/history", response_model=ApiResponse[list[OrderEventResponse]])
async def get_order_history(
    order_id: int,
    principal: Principal = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
) -> ApiResponse[list[OrderEventResponse]]:
    events = await service.get_order_history(principal.user_id, order_id)
    history = [OrderEventResponse.model_validate(event) for event in _serialize_events(events)]
    return create_response(history, "Order history fetched successfully")
