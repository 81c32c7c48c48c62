import pytest

from dealscout.services.product_search.models import (
    ExtractionRequest,
    SearchPolicy,
    Source,
)
from dealscout.services.product_search.providers.amazon import AmazonExtractor
from dealscout.services.product_search.providers.flipkart import FlipkartExtractor


AMAZON_RESULTS = """
<div class="s-main-slot">
  <div data-component-type="s-search-result" data-asin="B0REDMI001">
    <h2><a href="/Redmi-Note-13/dp/B0REDMI001/ref=sr_1_1"><span>Redmi Note 13 5G (Arctic White, 128GB)</span></a></h2>
    <img class="s-image" src="https://m.media-amazon.com/images/I/redmi.jpg">
    <span class="a-icon-alt">4.2 out of 5 stars</span>
    <span class="a-price"><span class="a-offscreen">₹15,000</span><span class="a-price-whole">15,000.</span></span>
    <span class="a-price a-text-price"><span class="a-offscreen">₹20,000</span></span>
  </div>
  <div data-component-type="s-search-result" data-asin="B0SPONS002">
    <span class="puis-sponsored-label-text">Sponsored</span>
    <h2><span>Promoted Phone Case</span></h2>
    <span class="a-price"><span class="a-price-whole">299</span></span>
  </div>
  <div data-component-type="s-search-result" data-asin="B0NOTIT003">
    <h2></h2>
    <span class="a-price"><span class="a-price-whole">999</span></span>
  </div>
  <div data-component-type="s-search-result" data-asin="">
    <h2><span>Placeholder widget</span></h2>
  </div>
  <div data-component-type="s-search-result" data-asin="B0BOAT0005">
    <span class="a-badge-text">Limited time deal</span>
    <h2><a href="/boAt-Airdopes/dp/B0BOAT0005"><span>boAt Airdopes 141 Bluetooth Earbuds</span></a></h2>
    <span aria-label="3.9 out of 5 stars"></span>
    <div>Deal price ₹799 with bank offer</div>
  </div>
</div>
"""

FLIPKART_RESULTS = """
<div id="container">
  <div data-id="MOBGTAGPTB3VS24W">
    <a class="CGtC98" href="/samsung-galaxy-m14/p/itm123?pid=MOBGTAGPTB3VS24W&amp;lid=LST1">
      <img src="https://rukminim2.flixcart.com/image/m14.jpeg" alt="SAMSUNG Galaxy M14 5G">
      <div class="KzDlHZ">SAMSUNG Galaxy M14 5G (Smoky Teal, 128 GB)</div>
      <div class="XQDdHH">4.3</div>
      <div class="Nx9bqj">₹13,490</div>
      <div class="yRaY8j">₹18,990</div>
      <div class="UkUFwK"><span>28% off</span></div>
    </a>
  </div>
  <div data-id="">
    <a href="/steel-bottle/p/itm456?pid=BTLG7YZ3HZKZ8ZRH" title="Milton Thermosteel Flask 1 L">
      <img src="https://rukminim2.flixcart.com/image/flask.jpeg">
    </a>
    <div>Special price ₹1,299</div>
  </div>
  <div data-id="MOBADV000000001">
    <span>Ad</span>
    <div class="KzDlHZ">Sponsored Phone X</div>
    <div class="Nx9bqj">₹9,999</div>
  </div>
  <div data-id="">
    <div class="KzDlHZ">Card without any identifier</div>
  </div>
</div>
"""


def amazon_card(asin, title, price):
    return (
        f'<div data-component-type="s-search-result" data-asin="{asin}">'
        f'<h2><a href="/item/dp/{asin}"><span>{title}</span></a></h2>'
        f'<span class="a-price"><span class="a-price-whole">{price}</span></span>'
        "</div>"
    )


class TestAmazonExtractor:
    def test_extracts_fields_through_the_cascades(self):
        batch = AmazonExtractor().extract(AMAZON_RESULTS, ExtractionRequest("phone"))

        assert [item.id for item in batch.items] == ["B0REDMI001", "B0BOAT0005"]
        redmi, boat = batch.items
        assert redmi.title == "Redmi Note 13 5G (Arctic White, 128GB)"
        assert redmi.url == "https://www.amazon.in/Redmi-Note-13/dp/B0REDMI001/ref=sr_1_1"
        assert redmi.image == "https://m.media-amazon.com/images/I/redmi.jpg"
        assert redmi.source is Source.AMAZON
        assert redmi.price == 15000.0
        assert redmi.original_price == 20000.0
        assert redmi.rating == 4.2
        assert redmi.discount_percent == 25.0
        assert redmi.is_deal is True

        # Price recovered from free text, deal flagged by the badge alone.
        assert boat.price == 799.0
        assert boat.rating == 3.9
        assert boat.discount_percent is None
        assert boat.is_deal is True

    def test_diagnostics_count_every_skip(self):
        batch = AmazonExtractor().extract(AMAZON_RESULTS, ExtractionRequest("phone"))
        diagnostics = batch.diagnostics

        assert diagnostics.node_strategy == "s-search-result"
        assert diagnostics.node_count == 5
        assert diagnostics.processed == 5
        assert diagnostics.skipped_sponsored == 1
        assert diagnostics.skipped_no_title == 1
        assert diagnostics.skipped_no_id == 1
        assert diagnostics.item_errors == []
        assert diagnostics.blocked is False

    def test_price_filter_rejects_before_limit(self):
        request = ExtractionRequest("phone", max_price=1000)
        batch = AmazonExtractor().extract(AMAZON_RESULTS, request)

        assert [item.id for item in batch.items] == ["B0BOAT0005"]
        assert batch.diagnostics.skipped_price_filter == 1

    def test_rating_floor_rejects_low_rated_items(self):
        request = ExtractionRequest("phone", min_rating=4.0)
        batch = AmazonExtractor().extract(AMAZON_RESULTS, request)

        assert [item.id for item in batch.items] == ["B0REDMI001"]
        assert batch.diagnostics.skipped_rating_filter == 1

    def test_limit_stops_processing(self):
        html = "".join(amazon_card(f"B0{i}", f"Keyboard model {i}", 1000 + i) for i in range(4))
        extractor = AmazonExtractor(SearchPolicy(limit_floor=1))
        batch = extractor.extract(html, ExtractionRequest("keyboard", limit=2))

        assert [item.id for item in batch.items] == ["B00", "B01"]
        assert batch.diagnostics.processed == 2

    def test_limit_never_drops_below_floor(self):
        html = "".join(amazon_card(f"B0{i}", f"Keyboard model {i}", 1000 + i) for i in range(6))
        batch = AmazonExtractor().extract(html, ExtractionRequest("keyboard", limit=1))

        assert len(batch.items) == 5

    def test_item_error_does_not_abort_the_batch(self):
        def exploding_title(node):
            if node.get("data-asin") == "B02":
                raise ValueError("broken markup")
            return None

        class FragileAmazon(AmazonExtractor):
            title_strategies = (exploding_title, *AmazonExtractor.title_strategies)

        html = "".join(amazon_card(f"B0{i}", f"Monitor model {i}", 9000) for i in range(1, 4))
        batch = FragileAmazon().extract(html, ExtractionRequest("monitor"))

        assert [item.id for item in batch.items] == ["B01", "B03"]
        assert batch.diagnostics.item_errors == ["Item[B02]: broken markup"]

    def test_duplicates_within_a_page_are_skipped(self):
        html = amazon_card("B0DUP", "Mouse pad XL", 499) * 2
        batch = AmazonExtractor().extract(html, ExtractionRequest("mouse pad"))

        assert len(batch.items) == 1
        assert batch.diagnostics.skipped_duplicate == 1

    def test_implausible_price_is_dropped(self):
        batch = AmazonExtractor().extract(
            amazon_card("B0ZERO", "Free sample pack", 0), ExtractionRequest("sample")
        )
        assert batch.items[0].price is None

    def test_blocked_page_is_flagged(self):
        html = "<html><title>Robot Check</title><p>Enter the characters (captcha)</p></html>"
        batch = AmazonExtractor().extract(html, ExtractionRequest("phone"))

        assert batch.items == []
        assert batch.diagnostics.blocked is True
        assert batch.diagnostics.node_strategy is None

    def test_falls_back_to_plain_data_asin_nodes(self):
        html = (
            '<div data-asin="B0PLAIN"><h2>Wireless Charger Pad</h2>'
            '<span class="a-price"><span class="a-offscreen">₹1,099</span></span></div>'
        )
        batch = AmazonExtractor().extract(html, ExtractionRequest("charger"))

        assert batch.diagnostics.node_strategy == "data-asin"
        assert batch.items[0].price == 1099.0
        assert batch.items[0].url == ""

    def test_build_search_url_encodes_query(self):
        assert (
            AmazonExtractor().build_search_url("gaming keyboard")
            == "https://www.amazon.in/s?k=gaming+keyboard"
        )

    def test_extract_details(self):
        html = """
        <div id="feature-bullets"><ul>
          <li><span class="a-list-item"> 6.67 inch AMOLED display </span></li>
          <li><span class="a-list-item">5000 mAh battery</span></li>
        </ul></div>
        <div id="productDescription"><p>A  phone built for   long days.</p></div>
        """
        details = AmazonExtractor().extract_details(html)

        assert details.features == ["6.67 inch AMOLED display", "5000 mAh battery"]
        assert details.description == "A phone built for long days."


class TestFlipkartExtractor:
    def test_extracts_fields_through_the_cascades(self):
        batch = FlipkartExtractor().extract(FLIPKART_RESULTS, ExtractionRequest("phone"))

        assert [item.id for item in batch.items] == ["MOBGTAGPTB3VS24W", "BTLG7YZ3HZKZ8ZRH"]
        samsung, flask = batch.items
        assert samsung.title == "SAMSUNG Galaxy M14 5G (Smoky Teal, 128 GB)"
        assert samsung.url == (
            "https://www.flipkart.com/samsung-galaxy-m14/p/itm123"
            "?pid=MOBGTAGPTB3VS24W&lid=LST1"
        )
        assert samsung.image == "https://rukminim2.flixcart.com/image/m14.jpeg"
        assert samsung.price == 13490.0
        assert samsung.original_price == 18990.0
        assert samsung.rating == 4.3
        assert samsung.discount_percent == 28.0
        assert samsung.is_deal is True
        assert samsung.source is Source.FLIPKART

        # Identifier from the pid parameter, title from the link, price from text.
        assert flask.title == "Milton Thermosteel Flask 1 L"
        assert flask.price == 1299.0
        assert flask.rating is None
        assert flask.discount_percent is None
        assert flask.is_deal is False

    def test_skips_ads_and_cards_without_identifier(self):
        diagnostics = FlipkartExtractor().extract(
            FLIPKART_RESULTS, ExtractionRequest("phone")
        ).diagnostics

        assert diagnostics.node_strategy == "data-id"
        assert diagnostics.skipped_sponsored == 1
        assert diagnostics.skipped_no_id == 1

    def test_falls_back_to_product_links(self):
        html = (
            '<a href="/headphones/p/itm789?pid=ACCHEAD0001">'
            '<div class="KzDlHZ">Sony WH-1000XM5</div><div class="Nx9bqj">₹26,990</div></a>'
        )
        batch = FlipkartExtractor().extract(html, ExtractionRequest("headphones"))

        assert batch.diagnostics.node_strategy == "product-link"
        item = batch.items[0]
        assert item.id == "ACCHEAD0001"
        assert item.url == "https://www.flipkart.com/headphones/p/itm789?pid=ACCHEAD0001"
        assert item.price == 26990.0

    @pytest.mark.parametrize("platform_html", ["", "<html><body>No results</body></html>"])
    def test_empty_page_returns_no_items(self, platform_html):
        batch = FlipkartExtractor().extract(platform_html, ExtractionRequest("phone"))
        assert batch.items == []
        assert batch.diagnostics.node_count == 0

    def test_extract_details(self):
        html = """
        <div class="_2cM9lP"><ul><li>8 GB RAM</li><li>50MP camera</li><li>8 GB RAM</li></ul></div>
        <div class="_1mXcCf">Samsung's budget 5G phone.</div>
        """
        details = FlipkartExtractor().extract_details(html)

        assert details.features == ["8 GB RAM", "50MP camera"]
        assert details.description == "Samsung's budget 5G phone."
