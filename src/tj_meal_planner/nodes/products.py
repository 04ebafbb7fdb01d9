"""
Product retrieval.

Runs one retailer search per term and builds the candidate set.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from langchain_core.runnables import RunnableConfig

from tj_meal_planner.config import Settings, get_settings
from tj_meal_planner.errors import pipeline_stage
from tj_meal_planner.models import PlannerState, ProductQuery, ProductRecord, RawProduct
from tj_meal_planner.nodes.base import ProductSearch, product_search_from_config
from tj_meal_planner import ui


logger = logging.getLogger(__name__)

STAGE = "retrieve_products"


def to_product_record(item: RawProduct, term: str) -> ProductRecord:
    """Map a retailer item onto a ProductRecord tagged with its search term."""
    return ProductRecord(
        name=item.name,
        description=item.item_description,
        image_url=item.primary_image,
        retail_price=item.retail_price,
        package_size=item.sales_size,
        unit_description=item.sales_uom_description,
        matched_term=term,
    )


async def retrieve(
    term: str,
    search: ProductSearch,
    settings: Optional[Settings] = None,
) -> List[ProductRecord]:
    """Search the retailer for a single term, keeping the retailer's order."""
    settings = settings or get_settings()
    query = ProductQuery(
        search_text=term,
        store_code=settings.store_code,
        page_size=settings.page_size,
        page_offset=0,
    )
    with pipeline_stage(STAGE):
        items = await search.search(query)

    records = [to_product_record(item, term) for item in items]
    ui.show_term_results(term, len(records))
    return records


async def retrieve_all(
    terms: Sequence[str],
    search: ProductSearch,
    settings: Optional[Settings] = None,
) -> List[ProductRecord]:
    """
    Retrieve products for every term and concatenate them in term order.

    Searches run concurrently (bounded by retailer_concurrency); the result
    is ordered by term index, then retailer order, whatever order the
    searches finish in. Any failed search fails the whole call and cancels
    the searches still running.
    """
    settings = settings or get_settings()
    semaphore = asyncio.Semaphore(max(1, settings.retailer_concurrency))

    async def bounded(term: str) -> List[ProductRecord]:
        async with semaphore:
            return await retrieve(term, search, settings)

    tasks = [asyncio.ensure_future(bounded(term)) for term in terms]
    try:
        batches = await asyncio.gather(*tasks)
    except BaseException:
        # First failure aborts the stage: stop the searches still in flight
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    candidates = [record for batch in batches for record in batch]

    logger.info(f"Retrieved {len(candidates)} candidates for {len(terms)} terms")
    return candidates


async def retrieve_products_node(state: PlannerState, config: RunnableConfig) -> dict:
    """
    Reads: terms
    Writes: candidates
    """
    terms = state.get("terms") or []
    ui.show_searching_products(len(terms))

    candidates = await retrieve_all(terms, product_search_from_config(config))

    ui.show_candidate_count(len(candidates))
    return {"candidates": candidates}
