"""HTTP routes for the product catalog."""

from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status

from storefront.common import ApiResponse, create_response
from storefront.common.money import from_cents
from storefront.common.security import Principal

from ..dependencies import get_catalog_service, require_admin
from ..schemas import ProductCreate, ProductListResponse, ProductResponse, ProductUpdate
from ..services.catalog import CatalogService

router = APIRouter(prefix="/products", tags=["products"])


def _serialize_product(product) -> dict[str, object]:
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": from_cents(product.price_cents),
        "category": product.category,
        "stockQuantity": product.stock_quantity,
        "images": list(product.images or []),
        "isActive": product.is_active,
        "createdAt": product.created_at,
        "updatedAt": product.updated_at,
    }


@router.get("", response_model=ApiResponse[ProductListResponse])
async def list_products(
    search: str | None = Query(default=None, max_length=255),
    category: str | None = Query(default=None, max_length=100),
    price_min: Decimal | None = Query(default=None, ge=0, alias="priceMin"),
    price_max: Decimal | None = Query(default=None, ge=0, alias="priceMax"),
    is_active: bool | None = Query(default=None, alias="isActive"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    service: CatalogService = Depends(get_catalog_service),
) -> ApiResponse[ProductListResponse]:
    result = await service.list_products(
        search=search,
        category=category,
        price_min=price_min,
        price_max=price_max,
        is_active=is_active,
        page=page,
        limit=limit,
    )
    listing = ProductListResponse(
        products=[ProductResponse.model_validate(_serialize_product(product)) for product in result.products],
        totalProducts=result.total_products,
        totalPages=result.total_pages,
        currentPage=result.current_page,
    )
    return create_response(listing, "Products fetched successfully")


@router.get("/{product_id}", response_model=ApiResponse[ProductResponse])
async def get_product(
    product_id: int,
    service: CatalogService = Depends(get_catalog_service),
) -> ApiResponse[ProductResponse]:
    product = await service.get_product(product_id)
    return create_response(ProductResponse.model_validate(_serialize_product(product)), "Product fetched successfully")


@router.post("", response_model=ApiResponse[ProductResponse], status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    _admin: Principal = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
) -> ApiResponse[ProductResponse]:
    product = await service.create_product(payload)
    return create_response(ProductResponse.model_validate(_serialize_product(product)), "Product created successfully")


@router.put("/{product_id}", response_model=ApiResponse[ProductResponse])
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    _admin: Principal = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
) -> ApiResponse[ProductResponse]:
    product = await service.update_product(product_id, payload)
    return create_response(ProductResponse.model_validate(_serialize_product(product)), "Product updated successfully")


@router.delete("/{product_id}", response_model=ApiResponse[None])
async def delete_product(
    product_id: int,
    _admin: Principal = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
) -> ApiResponse[None]:
    await service.delete_product(product_id)
    return create_response(None, "Product deleted successfully")
