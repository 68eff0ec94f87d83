from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

"""HTTP client for the Monarch customer directory.

GET /customers, GET /customers/search?query=<name>, GET /customers/<id>, all
with HTTP Basic auth. Every failure (transport, non-2xx, bad JSON) surfaces as
CustomerApiError so callers only need one except clause.
"""

__all__ = [
    "CustomerApiClient",
    "CustomerApiError",
    "DEFAULT_TIMEOUT_SECONDS",
]

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class CustomerApiError(Exception):
    """Raised when the customer directory cannot answer a request."""


class CustomerApiClient:
    def __init__(
        self,
        base_url: str,
        username: str | None = None,
        password: str | None = None,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        if username is not None:
            self.session.auth = (username, password or "")
        self.session.headers.update({"Content-Type": "application/json"})

    def _get(self, path: str, params: dict[str, str] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug(f"customer api request failed url={url}: {e}")
            raise CustomerApiError(str(e)) from e
        if not response.ok:
            raise CustomerApiError(f"API error: {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise CustomerApiError(f"invalid JSON response: {e}") from e

    def get_all_customers(self) -> Any:
        return self._get("/customers")

    def search_customers(self, query: str) -> Any:
        """Search customers by name; the directory answers with a JSON array."""
        return self._get("/customers/search", params={"query": query})

    def get_customer(self, customer_id: str | int) -> Any:
        return self._get(f"/customers/{quote(str(customer_id), safe='')}")

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> CustomerApiClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
