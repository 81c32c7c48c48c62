"""Receive shopping queries and return ranked products.

Errors raised by the service are mapped to HTTP responses by the
exception handlers registered in ``app.py``.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from dealscout.models.search_models import (
    AlternativeRequest,
    AlternativeResponse,
    CompareRequest,
    CompareResponse,
    DetailsRequest,
    DetailsResponse,
    ErrorResponse,
    SearchRequest,
    SearchResponse,
)
from dealscout.services.product_search.service import (
    ProductSearchService,
    get_product_search_service,
)

search_router = APIRouter(prefix="/api", tags=["Products"])

ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid request"},
    500: {"model": ErrorResponse, "description": "Pipeline failure"},
}


@search_router.post(
    "/get",
    responses={
        200: {"model": SearchResponse, "description": "Successful Response"},
        **ERROR_RESPONSES,
    },
)
async def search_products(
    data: SearchRequest,
    service: ProductSearchService = Depends(get_product_search_service),
) -> Dict[str, Any]:
    """
    Plans and runs a product search for a natural-language query.

    Args:
        data (SearchRequest): Body holding the query.

    Returns:
        The visible items, the held-back items and pagination counters.
    """
    result = await service.search(data.query)
    return {"success": True, **result.to_dict()}


@search_router.post(
    "/compare",
    responses={200: {"model": CompareResponse, "description": "Successful Response"}},
)
async def compare_products(
    data: CompareRequest,
    service: ProductSearchService = Depends(get_product_search_service),
) -> Dict[str, Any]:
    """Pros, cons and best use of up to three products."""
    verdicts = await service.compare([product.to_item() for product in data.products])
    return {"success": True, "data": [verdict.to_dict() for verdict in verdicts]}


@search_router.post(
    "/alternative",
    responses={200: {"model": AlternativeResponse, "description": "Successful Response"}},
)
async def better_alternative(
    data: AlternativeRequest,
    service: ProductSearchService = Depends(get_product_search_service),
) -> Dict[str, Any]:
    """Cheaper candidate rated at least as well as the given product, if any."""
    alternative = service.better_alternative(
        data.product.to_item(), [candidate.to_item() for candidate in data.candidates]
    )
    return {
        "success": True,
        "data": alternative.to_dict() if alternative is not None else None,
    }


@search_router.post(
    "/details",
    responses={
        200: {"model": DetailsResponse, "description": "Successful Response"},
        **ERROR_RESPONSES,
    },
)
async def product_details(
    data: DetailsRequest,
    service: ProductSearchService = Depends(get_product_search_service),
) -> Dict[str, Any]:
    """Feature bullets and description of one product page."""
    details = await service.details(data.url, data.platform.value)
    return {"success": True, "data": details.to_dict()}
