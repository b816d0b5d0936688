"""Async client for the remote table store (Supabase REST interface).

Only reads live here. Bind a ``fetch_*`` function to a client with
functools.partial to get the no-argument fetcher the cache expects.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from .monitoring import remote_read_retry

if TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)

# Default timeout for API requests
DEFAULT_TIMEOUT = httpx.Timeout(10.0, connect=5.0)

FEATURED_PRODUCTS_LIMIT = 6
RELATED_PRODUCTS_LIMIT = 4


class SupabaseError(Exception):
    """Remote table store returned an error response."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _literal(value: Any) -> str:
    """Render a filter value the way the REST interface expects."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class SupabaseClient:
    """Thin read-only client for ``/rest/v1/<table>`` endpoints."""

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: httpx.Timeout | float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> SupabaseClient:
        return cls(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout=httpx.Timeout(settings.supabase_timeout, connect=5.0),
        )

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: dict[str, Any] | None = None,
        exclude: dict[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        single: bool = False,
    ) -> Any:
        """Read rows from a table.

        Args:
            table: Table name
            columns: Column list, may embed related tables (``*, categories(name)``)
            filters: Column -> value equality filters
            exclude: Column -> value inequality filters
            order: Column to order by
            descending: Order direction
            limit: Maximum number of rows
            single: Return exactly one row as a dict instead of a list

        Raises:
            SupabaseError: on a non-2xx response
        """
        params: list[tuple[str, str]] = [("select", columns)]
        for column, value in (filters or {}).items():
            params.append((column, f"eq.{_literal(value)}"))
        for column, value in (exclude or {}).items():
            params.append((column, f"neq.{_literal(value)}"))
        if order:
            params.append(("order", f"{order}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))

        headers = {"Accept": "application/vnd.pgrst.object+json"} if single else None
        return await self._get(f"/{table}", params, headers)

    @remote_read_retry
    async def _get(
        self,
        path: str,
        params: list[tuple[str, str]],
        headers: dict[str, str] | None,
    ) -> Any:
        response = await self._client.get(path, params=params, headers=headers)
        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = body.get("message", response.text) if isinstance(body, dict) else response.text
            logger.warning(
                "remote_read_failed",
                extra={"path": path, "status": response.status_code, "error": message},
            )
            raise SupabaseError(response.status_code, message)
        return response.json()

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> SupabaseClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


# =============================================================================
# Resource fetchers
# =============================================================================


async def fetch_products(client: SupabaseClient) -> list[dict[str, Any]]:
    rows = await client.select("products", order="created_at", descending=True)
    return rows or []


async def fetch_categories(client: SupabaseClient) -> list[dict[str, Any]]:
    rows = await client.select("categories", order="name")
    return rows or []


async def fetch_featured_products(client: SupabaseClient) -> list[dict[str, Any]]:
    rows = await client.select(
        "products", filters={"featured": True}, limit=FEATURED_PRODUCTS_LIMIT
    )
    return rows or []


async def fetch_product_detail(client: SupabaseClient, product_id: str) -> dict[str, Any]:
    """Single product with its category name embedded."""
    return await client.select(
        "products",
        columns="*, categories(name)",
        filters={"id": product_id},
        single=True,
    )


async def fetch_product_reviews(
    client: SupabaseClient, product_id: str
) -> list[dict[str, Any]]:
    """Verified reviews only, newest first."""
    rows = await client.select(
        "reviews",
        filters={"product_id": product_id, "verified": True},
        order="created_at",
        descending=True,
    )
    return rows or []


async def fetch_related_products(
    client: SupabaseClient, category_id: str, exclude_id: str | None = None
) -> list[dict[str, Any]]:
    rows = await client.select(
        "products",
        filters={"category_id": category_id},
        exclude={"id": exclude_id} if exclude_id else None,
        limit=RELATED_PRODUCTS_LIMIT,
    )
    return rows or []


async def fetch_category_products(
    client: SupabaseClient, category_id: str
) -> list[dict[str, Any]]:
    rows = await client.select(
        "products",
        columns="id, name, description, price, images, stock_quantity, created_at",
        filters={"category_id": category_id},
        order="created_at",
        descending=True,
    )
    return rows or []
