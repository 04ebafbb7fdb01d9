"""
Tests for the Trader Joe's GraphQL client, using httpx.MockTransport.
"""

import json

import httpx
import pytest

from tj_meal_planner.errors import ExternalServiceError
from tj_meal_planner.models import ProductQuery
from tj_meal_planner.retailer import TraderJoesClient, build_search_payload, create_http_client


URL = "https://tj.test/api/graphql"
QUERY = ProductQuery(search_text="tofu", store_code="130", page_size=15, page_offset=0)


def make_client(handler) -> TraderJoesClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TraderJoesClient(client=http_client, url=URL)


def graphql_items(*items) -> dict:
    return {"data": {"products": {"items": list(items)}}}


def test_payload_carries_query_variables():
    payload = build_search_payload(QUERY)

    assert payload["operationName"] == "SearchProducts"
    assert payload["variables"] == {
        "storeCode": "130",
        "availability": "1",
        "published": "1",
        "search": "tofu",
        "currentPage": 0,
        "pageSize": 15,
    }
    assert "query SearchProducts" in payload["query"]


def test_http_client_sends_browser_headers():
    client = create_http_client()
    assert client.headers["Origin"] == "https://www.traderjoes.com"
    assert "Mozilla" in client.headers["User-Agent"]


async def test_search_returns_items_in_order():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=graphql_items(
            {"name": "Organic Tofu", "retail_price": "2.99", "sales_size": 14, "item_description": "Firm"},
            {"name": "Sprouted Tofu", "retail_price": 3.49, "primary_image": "/tofu.png"},
        ))

    products = await make_client(handler).search(QUERY)

    assert seen["url"] == URL
    assert seen["body"]["variables"]["search"] == "tofu"
    assert [p.name for p in products] == ["Organic Tofu", "Sprouted Tofu"]
    assert products[0].sales_size == "14"
    assert products[1].retail_price == "3.49"
    assert products[1].primary_image == "/tofu.png"


@pytest.mark.parametrize("body", [{"data": {"products": None}}, {"data": None}, {}])
async def test_missing_items_mean_no_products(body):
    client = make_client(lambda request: httpx.Response(200, json=body))
    assert await client.search(QUERY) == []


async def test_http_error_status():
    client = make_client(lambda request: httpx.Response(503, text="unavailable"))

    with pytest.raises(ExternalServiceError) as exc_info:
        await client.search(QUERY)

    assert exc_info.value.service == "retailer"


async def test_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(ExternalServiceError, match="timed out"):
        await make_client(handler).search(QUERY)


async def test_graphql_errors():
    client = make_client(lambda request: httpx.Response(200, json={"errors": [{"message": "bad"}]}))

    with pytest.raises(ExternalServiceError) as exc_info:
        await client.search(QUERY)

    assert exc_info.value.details == {"errors": [{"message": "bad"}]}


async def test_non_json_body():
    client = make_client(lambda request: httpx.Response(200, text="<html>blocked</html>"))

    with pytest.raises(ExternalServiceError, match="non-JSON"):
        await client.search(QUERY)


async def test_malformed_item():
    client = make_client(lambda request: httpx.Response(200, json=graphql_items({"retail_price": "1.00"})))

    with pytest.raises(ExternalServiceError, match="malformed"):
        await client.search(QUERY)


@pytest.mark.parametrize("body", [
    {"data": []},
    {"data": "products"},
    {"data": {"products": ["x"]}},
    {"data": {"products": {"items": {"name": "Organic Tofu"}}}},
])
async def test_unexpected_body_shape(body):
    client = make_client(lambda request: httpx.Response(200, json=body))

    with pytest.raises(ExternalServiceError, match="unexpected body") as exc_info:
        await client.search(QUERY)

    assert exc_info.value.service == "retailer"


async def test_non_object_item_is_malformed():
    client = make_client(lambda request: httpx.Response(200, json=graphql_items("Organic Tofu")))

    with pytest.raises(ExternalServiceError, match="malformed"):
        await client.search(QUERY)
