"""Products API client.

This module defines a small client wrapper around the products REST
API.  It uses the ``requests`` library internally and exposes one
method per operation:

* :meth:`ProductsAPI.list_products` – return every product, newest first.
* :meth:`ProductsAPI.get_product` – fetch a single product by its identifier.
* :meth:`ProductsAPI.create_product` – create a product.
* :meth:`ProductsAPI.update_product` – replace the fields of a product.
* :meth:`ProductsAPI.delete_product` – delete a product.

Every method returns a ``(data, error)`` tuple instead of raising.  On
success ``error`` is ``None``; on failure ``data`` is empty and
``error`` is a dictionary with the keys ``status_code`` (``None`` for
transport failures) and ``message`` (the ``error`` field of the
server's JSON body when there is one).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:4000/api/products"

ApiError = Dict[str, Any]


class ProductsAPI:
    """Client for the ``/api/products`` resource."""

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: URL of the products collection, e.g.
                ``http://localhost:4000/api/products``.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Seconds to wait for the server before giving up.
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            return str(body.get("error") or body.get("detail") or body.get("message") or body)
        return str(body)

    def _request(
        self, method: str, path: str = "", *, json_body: Any | None = None
    ) -> Tuple[Optional[Any], Optional[ApiError]]:
        """Perform an HTTP request against the products collection.

        Args:
            method: HTTP method (``GET``, ``POST``, ``PUT``, ``DELETE``).
            path: Path relative to :attr:`base_url` (e.g. ``/<id>``).
            json_body: JSON body to send with the request.
        Returns:
            A tuple ``(data, error)``.
        """
        url = f"{self.base_url}{path}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                json=json_body,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = self._error_message(exc.response) if exc.response is not None else str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}
        except ValueError as exc:
            # 2xx response whose body is not JSON
            logger.error("API returned an unreadable response: %s", exc)
            return None, {"status_code": None, "message": "Invalid JSON in response"}

    # ------------------------------------------------------------------
    # Product operations
    # ------------------------------------------------------------------
    def list_products(self) -> Tuple[List[Dict[str, Any]], Optional[ApiError]]:
        """Retrieve all products.

        Returns:
            A tuple ``(products, error)``. ``products`` is empty on failure.
        """
        data, error = self._request("GET")
        if error:
            return [], error
        if not isinstance(data, list):
            return [], {"status_code": None, "message": "Unexpected response listing products"}
        return data, None

    def get_product(self, product_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("GET", f"/{product_id}")

    def create_product(self, payload: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("POST", json_body=payload)

    def update_product(
        self, product_id: str, payload: Dict[str, Any]
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ApiError]]:
        return self._request("PUT", f"/{product_id}", json_body=payload)

    def delete_product(self, product_id: str) -> Tuple[bool, Optional[ApiError]]:
        """Delete a product.

        Returns:
            A tuple ``(success, error)``.
        """
        _, error = self._request("DELETE", f"/{product_id}")
        if error:
            return False, error
        return True, None
