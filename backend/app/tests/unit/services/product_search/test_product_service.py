import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from dealscout.agents.comparator import ProductComparator
from dealscout.agents.lib_agent.base_llm import StaticLLM
from dealscout.agents.planner import QueryPlanner
from dealscout.services.product_search.errors import (
    ExtractionFailure,
    PlanExecutionError,
    ProductSearchError,
    ValidationError,
)
from dealscout.services.product_search.models import ProductDetails, ResultSet
from dealscout.services.product_search.service import ProductSearchService

PLAN = json.dumps([{"tool": "product-scraper", "args": {"search": "earbuds"}, "displayLimit": 4}])


@pytest.fixture()
def executor():
    executor = MagicMock()
    executor.execute = AsyncMock(return_value=ResultSet(items=[], display_limit=4))
    executor.fetch_details = AsyncMock(return_value=ProductDetails(features=["ANC"]))
    return executor


def build_service(executor, planner_answer=PLAN, comparator_answer="[]"):
    return ProductSearchService(
        planner=QueryPlanner(StaticLLM(planner_answer)),
        executor=executor,
        comparator=ProductComparator(StaticLLM(comparator_answer)),
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("query", [None, "", "   ", 42])
async def test_search_requires_a_query(executor, query):
    with pytest.raises(ValidationError) as exc_info:
        await build_service(executor).search(query)

    assert exc_info.value.message == "Query is required."
    executor.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_search_executes_the_plan(executor):
    result = await build_service(executor).search("  wireless earbuds  ")

    assert result.display_limit == 4
    plan = executor.execute.await_args.args[0]
    assert plan.display_limit == 4
    assert plan.steps[0].request.search == "earbuds"


@pytest.mark.asyncio
async def test_bad_plan_becomes_generic_failure(executor):
    service = build_service(executor, planner_answer="I think you want earbuds.")

    with pytest.raises(PlanExecutionError) as exc_info:
        await service.search("earbuds")

    assert exc_info.value.message == "Failed to execute plan."
    executor.execute.assert_not_awaited()


@pytest.mark.asyncio
async def test_planner_transport_error_becomes_generic_failure(executor):
    llm = MagicMock()
    llm.complete.side_effect = ConnectionError("groq unreachable")
    service = ProductSearchService(QueryPlanner(llm), executor, ProductComparator(StaticLLM()))

    with pytest.raises(PlanExecutionError):
        await service.search("earbuds")


@pytest.mark.asyncio
async def test_compare_never_raises(executor, make_item):
    service = build_service(executor, comparator_answer="not json")
    assert await service.compare([make_item("P0")]) == []


@pytest.mark.asyncio
async def test_details(executor):
    details = await build_service(executor).details("https://www.amazon.in/dp/B01", "amazon")

    assert details.features == ["ANC"]
    executor.fetch_details.assert_awaited_once_with("https://www.amazon.in/dp/B01", "amazon")


@pytest.mark.asyncio
async def test_details_validates_input(executor):
    service = build_service(executor)

    with pytest.raises(ValidationError):
        await service.details("amazon.in/dp/B01", "amazon")
    with pytest.raises(ValidationError):
        await service.details("https://www.ebay.com/itm/1", "ebay")


@pytest.mark.asyncio
async def test_details_failure_is_wrapped(executor):
    executor.fetch_details.side_effect = ExtractionFailure("amazon", "Timed out")

    with pytest.raises(ProductSearchError) as exc_info:
        await build_service(executor).details("https://www.amazon.in/dp/B01", "amazon")
    assert exc_info.value.message == "Failed to fetch product details."
