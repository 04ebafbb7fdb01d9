"""
FastAPI server for the Trader Joe's meal planner.

Endpoints:
- GET /health - Health check
- GET /api/traderjoes - Raw Trader Joe's product search
- GET /api/mealplan - 7-day plan from preferences alone (no product lookup)
- POST /api/mealplan/filter-products - Pick products + quantities from a given list
- GET /api/mealplan/from-tj - Full pipeline, returns every intermediate artifact
- POST /plan - Full pipeline as an SSE stream

Event types sent via SSE (/plan):
- status: {node: str, message: str, data: ...} - A stage finished
- complete: {terms, candidates, selection, plan, days, estimated_total}
- error: {error: str, message: str, stage: str, ...}

Usage: uvicorn tj_meal_planner.meal_planner_server:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sse_starlette.sse import EventSourceResponse

from tj_meal_planner.config import get_settings
from tj_meal_planner.errors import PlannerError
from tj_meal_planner.meal_planner import (
    build_grocery_planner_graph,
    build_run_config,
    filter_candidates,
    plan_groceries,
    validate_preferences,
)
from tj_meal_planner.models import GroceryPlan, ProductQuery, split_plan_days
from tj_meal_planner.nodes import draft_meal_plan
from tj_meal_planner.nodes.base import (
    ProductSearch,
    TextGenerator,
    get_generator,
    get_product_search,
)
from tj_meal_planner.retailer import TraderJoesClient, create_http_client
from tj_meal_planner.server.sse import (
    complete_event,
    error_event,
    status_event,
)


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------

class PlanRequest(BaseModel):
    preferences: str = ""


class FilterRequest(BaseModel):
    # Left loose so bad input gets the planner's own 400 instead of a 422
    preferences: Any = None
    products: Any = None


# ---------------------------------------------------------------------------
# Node Status Messages
# ---------------------------------------------------------------------------

NODE_MESSAGES = {
    "derive_terms": "Chose grocery search terms",
    "retrieve_products": "Searched Trader Joe's for products",
    "filter_products": "Picked products and quantities",
    "synthesize_plan": "Wrote the meal plan",
}


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_text_generator() -> TextGenerator:
    return get_generator()


def get_search(request: Request) -> ProductSearch:
    # Shared client opened in lifespan, if the app was started with one
    search = getattr(request.app.state, "product_search", None)
    return search or get_product_search()


# ---------------------------------------------------------------------------
# Stream Graph Execution
# ---------------------------------------------------------------------------

async def stream_plan_execution(
    preferences: str,
    generator: TextGenerator,
    search: ProductSearch,
) -> AsyncGenerator[dict, None]:
    """
    Stream a composed planning run as SSE events.

    Yields one status event per finished stage, then complete or error.
    """
    graph = build_grocery_planner_graph()
    config = build_run_config(generator, search)
    state: dict = {"mode": "compose", "preferences": preferences}

    try:
        async for update in graph.astream(state, config=config, stream_mode="updates"):
            for node_name, values in update.items():
                if not values:
                    continue
                state.update(values)
                if node_name in NODE_MESSAGES:
                    yield status_event(node_name, NODE_MESSAGES[node_name], next(iter(values.values())))

        result = GroceryPlan(
            preferences=preferences,
            terms=state["terms"],
            candidates=state["candidates"],
            selection=state["selection"],
            plan=state["plan"],
        )
        yield complete_event(result)

    except PlannerError as e:
        logger.warning(f"Planning stream failed: {e}")
        yield error_event(e)
    except Exception as e:
        logger.exception(f"Error in stream_plan_execution: {e}")
        yield error_event(e)


# ---------------------------------------------------------------------------
# FastAPI App
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open one HTTP client for retailer searches, close it on shutdown."""
    logger.info("FastAPI lifespan startup - opening retailer client...")
    async with create_http_client() as client:
        app.state.product_search = TraderJoesClient(client=client)
        yield
        logger.info("FastAPI lifespan shutdown - closing retailer client...")
        app.state.product_search = None


app = FastAPI(
    title="Trader Joe's Meal Planner API",
    description="Grocery list and meal plan generation from dietary preferences",
    lifespan=lifespan
)

# CORS for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlannerError)
async def planner_error_handler(request: Request, exc: PlannerError):
    logger.warning(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/api/traderjoes")
async def search_trader_joes(
    search_text: str = Query(default="food", alias="search"),
    store_code: Optional[str] = Query(default=None, alias="storeCode"),
    search: ProductSearch = Depends(get_search),
):
    """Search Trader Joe's and return the items as the retailer sent them."""
    settings = get_settings()
    query = ProductQuery(
        search_text=search_text,
        store_code=store_code or settings.store_code,
        page_size=settings.page_size,
    )
    items = await search.search(query)
    return [item.model_dump() for item in items]


@app.get("/api/mealplan")
async def draft_plan(
    preferences: str = "",
    generator: TextGenerator = Depends(get_text_generator),
):
    """Write a 7-day plan from preferences alone."""
    preferences = validate_preferences(preferences)
    plan = await draft_meal_plan(preferences, generator)
    return {"plan": plan, "days": split_plan_days(plan)}


@app.post("/api/mealplan/filter-products")
async def filter_products_endpoint(
    request: FilterRequest,
    generator: TextGenerator = Depends(get_text_generator),
):
    """
    Pick products and weekly quantities from a caller-supplied product list.

    Accepts products from a previous /api/mealplan/from-tj call or raw
    /api/traderjoes items.
    """
    selection = await filter_candidates(request.preferences, request.products, generator)
    return selection.model_dump(mode="json")


@app.get("/api/mealplan/from-tj")
async def plan_from_trader_joes(
    preferences: str = "",
    generator: TextGenerator = Depends(get_text_generator),
    search: ProductSearch = Depends(get_search),
):
    """Run the full pipeline and return every intermediate artifact."""
    result = await plan_groceries(preferences, generator, search)
    return {
        **result.model_dump(mode="json"),
        "days": result.days,
        "estimated_total": str(result.estimated_total),
    }


@app.post("/plan")
async def stream_plan(
    request: PlanRequest,
    generator: TextGenerator = Depends(get_text_generator),
    search: ProductSearch = Depends(get_search),
):
    """
    Run the full pipeline as an SSE stream.

    Blank preferences are rejected with a 400 before the stream opens.
    """
    preferences = validate_preferences(request.preferences)
    return EventSourceResponse(stream_plan_execution(preferences, generator, search))
