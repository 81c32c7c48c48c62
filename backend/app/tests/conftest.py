import pytest

from dealscout.services.product_search.models import Item, Source


@pytest.fixture()
def make_item():
    def factory(item_id="A1", source=Source.AMAZON, **fields):
        fields.setdefault("title", f"Product {item_id}")
        fields.setdefault("url", f"https://example.test/{item_id}")
        return Item(id=item_id, source=source, **fields)

    return factory
