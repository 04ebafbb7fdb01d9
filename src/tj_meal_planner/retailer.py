"""
Trader Joe's product search client.

Talks to the public GraphQL endpoint used by traderjoes.com and returns the
product items as RawProduct models.
"""

import logging
from typing import List, Optional

import httpx
import pydantic

from tj_meal_planner.config import Settings, get_settings
from tj_meal_planner.errors import ExternalServiceError
from tj_meal_planner.models import ProductQuery, RawProduct


logger = logging.getLogger(__name__)


SEARCH_PRODUCTS_QUERY = """
query SearchProducts($search: String, $pageSize: Int, $currentPage: Int, $storeCode: String = "130", $availability: String = "1", $published: String = "1") {
  products(
    search: $search
    filter: {
      store_code: { eq: $storeCode }
      published: { eq: $published }
      availability: { match: $availability }
    }
    pageSize: $pageSize
    currentPage: $currentPage
  ) {
    items {
      name
      item_description
      primary_image
      retail_price
      sales_size
      sales_uom_description
    }
  }
}
"""


def create_http_client(**kwargs) -> httpx.AsyncClient:
    """
    Create an async HTTP client with browser-like headers.

    The GraphQL endpoint rejects requests without a browser user agent
    and a matching Origin/Referer.
    """
    default_headers = {
        "Content-Type": "application/json",
        "Origin": "https://www.traderjoes.com",
        "Referer": "https://www.traderjoes.com/",
        "User-Agent": "Mozilla/5.0 (X11; Linux x86_64; rv:137.0) Gecko/20100101 Firefox/137.0",
    }

    # Merge any provided headers with defaults
    headers = {**default_headers, **kwargs.pop("headers", {})}
    kwargs.setdefault("timeout", get_settings().retailer_timeout)

    return httpx.AsyncClient(
        follow_redirects=True,
        headers=headers,
        **kwargs
    )


def build_search_payload(query: ProductQuery) -> dict:
    """Build the GraphQL request body for a product query."""
    return {
        "operationName": "SearchProducts",
        "variables": {
            "storeCode": query.store_code,
            "availability": "1",
            "published": "1",
            "search": query.search_text,
            "currentPage": query.page_offset,
            "pageSize": query.page_size,
        },
        "query": SEARCH_PRODUCTS_QUERY,
    }


def _extract_items(body: dict) -> Optional[list]:
    """Pull data.products.items out of a response body.

    Missing or null levels mean no products; any level of the wrong type
    returns None.
    """
    node = body
    for key in ("data", "products"):
        node = node.get(key)
        if node is None:
            return []
        if not isinstance(node, dict):
            return None
    items = node.get("items")
    if items is None:
        return []
    return items if isinstance(items, list) else None


class TraderJoesClient:
    """ProductSearch implementation for the Trader Joe's GraphQL API.

    Pass ``client`` to reuse an existing httpx.AsyncClient; otherwise a
    short-lived client is created per search.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        url: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self._client = client
        self._url = url or settings.trader_joes_url

    async def search(self, query: ProductQuery) -> List[RawProduct]:
        """
        Run one product search.

        Raises:
            ExternalServiceError: on HTTP failure, timeout, GraphQL errors
                or an unreadable response body
        """
        logger.info(f"[TraderJoe's] Searching: {query.search_text!r} (store {query.store_code})")
        payload = build_search_payload(query)

        try:
            if self._client is not None:
                response = await self._client.post(self._url, json=payload)
            else:
                async with create_http_client() as client:
                    response = await client.post(self._url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as e:
            raise ExternalServiceError(
                f"Trader Joe's search timed out for {query.search_text!r}",
                service="retailer",
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(
                f"Trader Joe's search failed for {query.search_text!r}: {e}",
                service="retailer",
            ) from e
        except ValueError as e:
            raise ExternalServiceError(
                f"Trader Joe's returned a non-JSON body for {query.search_text!r}",
                service="retailer",
            ) from e

        if not isinstance(body, dict):
            raise ExternalServiceError(
                f"Trader Joe's returned an unexpected body for {query.search_text!r}",
                service="retailer",
            )
        if body.get("errors"):
            raise ExternalServiceError(
                f"Trader Joe's search returned errors for {query.search_text!r}",
                service="retailer",
                details={"errors": body["errors"]},
            )

        items = _extract_items(body)
        if items is None:
            raise ExternalServiceError(
                f"Trader Joe's returned an unexpected body for {query.search_text!r}",
                service="retailer",
            )
        try:
            products = [RawProduct.model_validate(item) for item in items]
        except pydantic.ValidationError as e:
            raise ExternalServiceError(
                f"Trader Joe's returned malformed products for {query.search_text!r}",
                service="retailer",
            ) from e

        logger.info(f"[TraderJoe's] Received {len(products)} items.")
        return products
