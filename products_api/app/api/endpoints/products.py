"""
Product endpoints.

These routes expose CRUD operations for products under
``/api/products``.  Request bodies are taken as raw JSON and handed to
the service, which validates them with ``validate_product``; errors
raised by the service are turned into JSON responses by the handlers
in ``core.errors``.
"""

from typing import Any, List

from fastapi import APIRouter, Body, Depends, Request, status

from products_api.app.schemas.product import DeleteConfirmation, ProductRead
from products_api.app.services.product_service import ProductService

router = APIRouter()

PRODUCT_BODY_EXAMPLE = {
    "name": "Widget",
    "price": 9.99,
    "description": "",
    "inStock": True,
}


def get_product_service(request: Request) -> ProductService:
    """Return the service bound to the application's store handle."""
    return request.app.state.product_service


@router.post("", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: Any = Body(None, examples=[PRODUCT_BODY_EXAMPLE]),
    service: ProductService = Depends(get_product_service),
) -> ProductRead:
    """Create a new product.

    ``name`` and ``price`` are required; ``inStock`` defaults to
    ``true``.  Returns 400 when validation fails.
    """
    return await service.create_product(payload)


@router.get("", response_model=List[ProductRead])
async def list_products(
    service: ProductService = Depends(get_product_service),
) -> List[ProductRead]:
    """Return all products, newest first."""
    return await service.list_products()


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> ProductRead:
    """Retrieve a single product by its ID.

    Returns 400 if the ID is malformed and 404 if no product has it.
    """
    return await service.get_product(product_id)


@router.put("/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: str,
    payload: Any = Body(None, examples=[PRODUCT_BODY_EXAMPLE]),
    service: ProductService = Depends(get_product_service),
) -> ProductRead:
    """Update an existing product.

    Fields present in the body replace the stored values; omitted
    fields are left unchanged.  The resulting product must pass the
    same validation as on creation.
    """
    return await service.update_product(product_id, payload)


@router.delete("/{product_id}", response_model=DeleteConfirmation)
async def delete_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
) -> DeleteConfirmation:
    """Delete a product permanently."""
    confirmation = await service.delete_product(product_id)
    return DeleteConfirmation(**confirmation)
