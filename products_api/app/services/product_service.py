"""
Business logic for products.

``ProductService`` implements the five product operations on top of a
``DocumentStore`` handle that is passed in by the application factory.
Each operation performs a single-document read or write; failures are
raised as the ``ProductError`` subclasses from ``core.errors`` and
mapped to HTTP responses by the exception handler.
"""

import logging
from typing import Any, Dict, List

from ..core.db import Collection, Document, DocumentStore, is_valid_object_id
from ..core.errors import InvalidIdentifier, ProductNotFound, ProductValidationError
from ..schemas.product import ProductRead, validate_product

logger = logging.getLogger(__name__)

COLLECTION_NAME = "products"


class ProductService:
    """Service for managing product records."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    @property
    def products(self) -> Collection:
        return self.store.collection(COLLECTION_NAME)

    @staticmethod
    def _to_read(document: Document) -> ProductRead:
        return ProductRead.model_validate(document)

    @staticmethod
    def _check_id(product_id: str) -> str:
        if not is_valid_object_id(product_id):
            raise InvalidIdentifier()
        # ids are stored lowercase
        return product_id.lower()

    async def create_product(self, payload: Any) -> ProductRead:
        """Validate ``payload`` and insert a new product.

        ``inStock`` defaults to ``True`` when omitted.  Nothing is
        written when validation fails.
        """
        result = validate_product(payload)
        if not result.ok:
            raise ProductValidationError(result.errors)
        document = self.products.insert_one(result.value.to_document())
        logger.info("Created product %s (%s)", document["id"], document["name"])
        return self._to_read(document)

    async def list_products(self) -> List[ProductRead]:
        """Return every product, newest first."""
        documents = self.products.find_all()
        logger.debug("Listed %d products", len(documents))
        return [self._to_read(document) for document in documents]

    async def get_product(self, product_id: str) -> ProductRead:
        product_id = self._check_id(product_id)
        document = self.products.find_by_id(product_id)
        if document is None:
            raise ProductNotFound()
        return self._to_read(document)

    async def update_product(self, product_id: str, payload: Any) -> ProductRead:
        """Replace the fields given in ``payload`` on an existing product.

        The stored document and the payload are merged and validated
        with the same rules as ``create_product``.  An unknown id or a
        failed validation leaves the stored document untouched.
        """
        product_id = self._check_id(product_id)

        def apply(current: Dict[str, Any]) -> Dict[str, Any]:
            result = validate_product(payload, current=current)
            if not result.ok:
                raise ProductValidationError(result.errors)
            return result.value.to_document()

        document = self.products.find_one_and_update(product_id, apply)
        if document is None:
            raise ProductNotFound()
        logger.info("Updated product %s", product_id)
        return self._to_read(document)

    async def delete_product(self, product_id: str) -> Dict[str, str]:
        product_id = self._check_id(product_id)
        deleted = self.products.find_by_id_and_delete(product_id)
        if deleted is None:
            raise ProductNotFound()
        logger.info("Deleted product %s", product_id)
        return {"message": "Product deleted"}
