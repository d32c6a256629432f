"""HTTP routes for the caller's shopping cart."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from storefront.common import ApiResponse, create_response
from storefront.common.money import from_cents
from storefront.common.security import Principal

from ..dependencies import get_cart_service, get_current_user
from ..models import Cart
from ..schemas import AddToCartRequest, CartItemUpdate, CartResponse
from ..services.carts import CartService
from ..services.catalog import ProductSnapshot
from .summaries import serialize_product_summary

router = APIRouter(prefix="/cart", tags=["cart"])


def _serialize_cart(cart: Cart, products: dict[int, ProductSnapshot] | None = None) -> dict[str, object]:
    products = products or {}
    return {
        "id": cart.id,
        "userId": cart.user_id,
        "items": [
            {
                "productId": item.product_id,
                "productName": item.product_name,
                "productPrice": from_cents(item.unit_price_cents),
                "quantity": item.quantity,
                "totalItemPrice": from_cents(item.line_total_cents),
                "product": serialize_product_summary(products.get(item.product_id)),
            }
            for item in cart.items
        ],
        "totalPrice": from_cents(cart.total_price_cents),
        "createdAt": cart.created_at,
        "updatedAt": cart.updated_at,
    }


@router.post("/add-to-cart", response_model=ApiResponse[CartResponse])
async def add_to_cart(
    payload: AddToCartRequest,
    principal: Principal = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
) -> ApiResponse[CartResponse]:
    cart = await service.add_item(principal.user_id, payload.product_id, payload.quantity)
    return create_response(CartResponse.model_validate(_serialize_cart(cart)), "Product added to cart")


@router.get("", response_model=ApiResponse[CartResponse])
async def get_cart(
    principal: Principal = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
) -> ApiResponse[CartResponse]:
    view = await service.get_cart(principal.user_id)
    return create_response(CartResponse.model_validate(_serialize_cart(view.cart, view.products)), "Cart fetched")


@router.put("/items/{product_id}", response_model=ApiResponse[CartResponse])
async def update_cart_item(
    product_id: int,
    payload: CartItemUpdate,
    principal: Principal = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
) -> ApiResponse[CartResponse]:
    cart = await service.update_item_quantity(principal.user_id, product_id, payload.quantity)
    return create_response(CartResponse.model_validate(_serialize_cart(cart)), "Cart item updated")


@router.delete("/items/{product_id}", response_model=ApiResponse[CartResponse])
async def remove_cart_item(
    product_id: int,
    principal: Principal = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
) -> ApiResponse[CartResponse]:
    cart = await service.remove_item(principal.user_id, product_id)
    return create_response(CartResponse.model_validate(_serialize_cart(cart)), "Product removed from cart")


@router.delete("", response_model=ApiResponse[CartResponse])
async def clear_cart(
    principal: Principal = Depends(get_current_user),
    service: CartService = Depends(get_cart_service),
) -> ApiResponse[CartResponse]:
    cart = await service.clear_cart(principal.user_id)
    return create_response(CartResponse.model_validate(_serialize_cart(cart)), "Cart cleared")
