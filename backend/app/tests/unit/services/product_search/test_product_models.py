import math

import pytest

from dealscout.services.product_search.errors import ValidationError
from dealscout.services.product_search.executor import paginate
from dealscout.services.product_search.models import (
    ExtractionRequest,
    Item,
    SearchPolicy,
    Source,
)


class TestExtractionRequest:
    def test_defaults(self):
        request = ExtractionRequest.from_arguments({"search": " gaming keyboard "})

        assert request.search == "gaming keyboard"
        assert request.limit == 5
        assert request.min_price == 0.0
        assert request.max_price == math.inf
        assert request.min_rating == 0.0
        assert request.platform == "all"
        assert request.sources() == [Source.AMAZON, Source.FLIPKART]
        assert not request.has_price_bounds
        assert not request.has_rating_floor

    def test_from_arguments_coerces_numbers(self):
        request = ExtractionRequest.from_arguments(
            {"search": "phone", "limit": "3", "maxPrice": "20000", "minRating": 4, "platform": "Flipkart"}
        )

        assert request.limit == 3
        assert request.max_price == 20000.0
        assert request.min_rating == 4.0
        assert request.sources() == [Source.FLIPKART]
        assert request.has_price_bounds

    @pytest.mark.parametrize(
        "arguments",
        [
            {},
            {"search": "   "},
            {"search": "phone", "platform": "ebay"},
            {"search": "phone", "minPrice": 500, "maxPrice": 100},
            {"search": "phone", "minRating": 6},
            {"search": "phone", "maxPrice": "cheap"},
            {"search": "phone", "limit": float("inf")},
            {"search": "phone", "limit": "Infinity"},
            {"search": "phone", "maxPrice": "inf"},
        ],
    )
    def test_invalid_arguments(self, arguments):
        with pytest.raises(ValidationError):
            ExtractionRequest.from_arguments(arguments)

    @pytest.mark.parametrize("limit", [0, -3, 0.5, "0"])
    def test_limit_below_one_is_raised_to_the_floor(self, limit):
        request = ExtractionRequest.from_arguments({"search": "phone", "limit": limit})

        assert request.limit == 1
        assert request.effective_limit() == 5

    def test_effective_limit_uses_floor(self):
        assert ExtractionRequest("phone", limit=2).effective_limit() == 5
        assert ExtractionRequest("phone", limit=8).effective_limit() == 8
        assert ExtractionRequest("phone", limit=2).effective_limit(SearchPolicy(limit_floor=1)) == 2

    def test_to_arguments_omits_unbounded_max_price(self):
        assert "maxPrice" not in ExtractionRequest("phone").to_arguments()
        arguments = ExtractionRequest("phone", min_price=1750, max_price=3500).to_arguments()
        assert arguments == {
            "search": "phone",
            "limit": 5,
            "minPrice": 1750,
            "maxPrice": 3500,
            "minRating": 0.0,
            "platform": "all",
        }


class TestItem:
    def test_to_dict_uses_wire_keys(self, make_item):
        item = make_item("B01", price=999.0, original_price=1499.0, discount_percent=33.0)
        payload = item.to_dict()

        assert payload["platform"] == "amazon"
        assert payload["price"] == payload["salePrice"] == 999.0
        assert payload["originalPrice"] == 1499.0
        assert payload["discountPercent"] == 33.0
        assert payload["isBestDeal"] is False

    def test_from_dict_reads_sale_price_fallback(self):
        item = Item.from_dict(
            {"id": 42, "title": "Kettle", "platform": "flipkart", "salePrice": 799}
        )
        assert item.id == "42"
        assert item.source is Source.FLIPKART
        assert item.price == 799
        assert item.url == ""

    def test_from_dict_rejects_unknown_platform(self):
        with pytest.raises(ValueError):
            Item.from_dict({"id": "1", "title": "Kettle", "platform": "ebay"})


@pytest.mark.parametrize("total, limit", [(0, 5), (3, 5), (5, 5), (9, 3), (12, 1)])
def test_pagination_invariant(make_item, total, limit):
    result = paginate([make_item(f"i{i}") for i in range(total)], limit)

    assert len(result.items) == min(total, limit)
    assert len(result.items) + len(result.held_back_items) == result.total_available == total
    assert result.has_more == (len(result.held_back_items) > 0)

    payload = result.to_dict()
    assert payload["count"] == len(payload["items"])
    assert payload["displayLimit"] == limit
    assert payload["hasMore"] is result.has_more
    assert payload["totalAvailable"] == total
