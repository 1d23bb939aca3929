"""
Top-level routers for the products API.

``router`` aggregates the resource routers that live under the
``/api`` prefix.  ``root_router`` carries the routes served at the
application root.  When new resources are added, include their
routers here.
"""

from fastapi import APIRouter

from .endpoints import health, products

router = APIRouter()
router.include_router(products.router, prefix="/products", tags=["products"])

root_router = APIRouter()
root_router.include_router(health.router, tags=["health"])
