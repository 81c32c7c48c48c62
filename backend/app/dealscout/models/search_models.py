"""Request and response models of the product search endpoints."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from dealscout.services.product_search.models import Item, Source


class SearchRequest(BaseModel):
    """Free-form shopping query sent by the client."""

    query: Optional[str] = Field(
        default=None, description="Natural-language query, e.g. 'best phones under 20000'."
    )


class ProductModel(BaseModel):
    """Product as exchanged with the client (camelCase keys)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Site-scoped product identifier (ASIN / Flipkart id).")
    title: str = Field(..., description="Product title.")
    url: str = Field(default="", description="Absolute product link.")
    image: Optional[str] = None
    price: Optional[float] = Field(default=None, description="Current sale price in rupees.")
    sale_price: Optional[float] = Field(default=None, alias="salePrice")
    original_price: Optional[float] = Field(default=None, alias="originalPrice")
    rating: Optional[float] = Field(default=None, description="Average rating out of 5.")
    discount_percent: Optional[float] = Field(default=None, alias="discountPercent")
    platform: Source = Field(..., description="Site the product was scraped from.")
    is_deal: bool = Field(default=False, alias="isDeal")
    is_best_deal: bool = Field(default=False, alias="isBestDeal")
    deal_score: Optional[float] = Field(default=None, alias="dealScore")

    def to_item(self) -> Item:
        return Item.from_dict(self.model_dump(by_alias=True))


class CompareRequest(BaseModel):
    """Products to compare; only the first three are sent to the LLM."""

    products: List[ProductModel] = Field(default_factory=list)


class AlternativeRequest(BaseModel):
    """Reference product and the candidates to look for a cheaper one in."""

    product: ProductModel
    candidates: List[ProductModel] = Field(default_factory=list)


class DetailsRequest(BaseModel):
    url: str = Field(..., description="Product detail page URL.")
    platform: Source = Field(..., description="Site the URL belongs to.")


class SearchResponse(BaseModel):
    """Ranked products split at the display limit."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    items: List[ProductModel]
    count: int
    display_limit: int = Field(..., alias="displayLimit")
    has_more: bool = Field(..., alias="hasMore")
    held_back_items: List[ProductModel] = Field(default_factory=list, alias="heldBackItems")
    total_available: int = Field(..., alias="totalAvailable")


class VerdictModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    pros: List[str] = Field(default_factory=list)
    cons: List[str] = Field(default_factory=list)
    best_for: str = Field(default="", alias="bestFor")


class CompareResponse(BaseModel):
    success: bool = True
    data: List[VerdictModel]


class AlternativeResponse(BaseModel):
    success: bool = True
    data: Optional[ProductModel] = None


class DetailsModel(BaseModel):
    features: List[str] = Field(default_factory=list)
    description: str = ""


class DetailsResponse(BaseModel):
    success: bool = True
    data: DetailsModel


class ErrorResponse(BaseModel):
    """Body of every failed request."""

    success: bool = False
    message: str = Field(..., description="Human-readable error message.")
