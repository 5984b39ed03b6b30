"""Pydantic models for request/response validation and stored documents."""

from typing import Literal

from pydantic import BaseModel, Field


# Marketplace an offer or price point came from
OfferSource = Literal["rakuten", "amazon"]

Theme = Literal["light", "dark"]

CreativeType = Literal["banner", "text"]


# --- Raw Item Models ---


class RawItemCreate(BaseModel):
    """A scraped marketplace listing before deduplication."""

    site_id: str
    item_code: str | None = None
    item_url: str
    affiliate_url: str | None = None
    shop_name: str | None = None
    title: str
    price: float
    image_url: str | None = None
    source: Literal["rakuten"] = "rakuten"


class RawItem(RawItemCreate):
    """Stored raw item."""

    id: str
    fetched_at: int
    updated_at: int

    class Config:
        from_attributes = True


# --- Catalog Models ---


class CatalogOffer(BaseModel):
    """One shop's offer for a catalog product."""

    source: OfferSource
    price: float
    url: str | None = None
    shop_name: str | None = None
    item_code: str | None = None  # rakuten: shopCode:itemCode
    last_seen_ts: int


class PricePoint(BaseModel):
    """Display price at a point in time (epoch ms)."""

    ts: int
    source: OfferSource
    price: float


class Capacity(BaseModel):
    """Battery capacity extracted from the title."""

    mAh: int | None = None
    Wh: int | None = None


class CatalogProduct(BaseModel):
    """One document per dedupe key, merged from every matching listing."""

    dedupe_key: str
    product_name: str
    brand: str | None = None
    image_url: str | None = None

    # Display values, synced to the cheapest offer
    price: float | None = None
    affiliate_url: str | None = None

    offers: list[CatalogOffer] = Field(default_factory=list)
    price_history: list[PricePoint] = Field(default_factory=list)

    # Specs used for ranking
    capacity: Capacity | None = None
    output_power: float | None = None  # W
    weight: float | None = None  # g
    has_type_c: bool | None = None

    tags: list[str] = Field(default_factory=list)
    category: str | None = None
    pains: list[str] = Field(default_factory=list)
    ai_summary: str = ""

    created_at: int
    updated_at: int


class CatalogList(BaseModel):
    """Paginated list of catalog products."""

    items: list[CatalogProduct]
    total: int
    page: int
    page_size: int


class BuildCatalogResult(BaseModel):
    """Outcome of a raw -> catalog build."""

    scanned: int = 0
    upserted: int = 0
    merged: int = 0
    skipped: int = 0


class SummaryResult(BaseModel):
    """Outcome of a summary generation run."""

    scanned: int = 0
    updated: int = 0


class DedupeKeyRequest(BaseModel):
    """Request model for computing a dedupe key."""

    title: str


class DedupeKeyResponse(BaseModel):
    """Normalized title and dedupe key for a title."""

    title: str
    normalized: str
    dedupe_key: str


# --- Affiliate Offer Models ---


class Creative(BaseModel):
    """Banner or text link supplied by the affiliate network."""

    type: CreativeType
    href: str
    img_src: str | None = None
    label: str | None = None


class AffiliateOfferCreate(BaseModel):
    """Model for creating or replacing a gallery offer."""

    id: str
    title: str
    description: str | None = None
    images: list[str] = Field(default_factory=list)
    creatives: list[Creative] = Field(default_factory=list)
    site_ids: list[str] = Field(default_factory=list)
    archived: bool = False


class AffiliateOffer(AffiliateOfferCreate):
    """Stored gallery offer."""

    updated_at: int


class OfferList(BaseModel):
    """Offers shown in a site's gallery."""

    site_id: str
    items: list[AffiliateOffer]


# --- Site Models ---


class Brand(BaseModel):
    """Site branding."""

    primary: str = "#111827"
    accent: str = "#22D3EE"
    logo_url: str = "/logos/default.svg"
    theme: Theme = "light"


class SiteFeatures(BaseModel):
    """Optional site sections."""

    blogs: bool | None = None
    ranking: bool | None = None


class SiteAnalytics(BaseModel):
    """Analytics identifiers for a site."""

    ga4_measurement_id: str | None = None
    hotjar_site_id: int | None = None
    clarity_project_id: str | None = None


class SiteEntry(BaseModel):
    """A site definition loaded from sites/<siteId>.json."""

    site_id: str
    display_name: str
    domain: str = "localhost"  # canonical domain, e.g. "www.chairscope.com"
    brand: Brand = Field(default_factory=Brand)
    features: SiteFeatures = Field(default_factory=SiteFeatures)
    analytics: SiteAnalytics = Field(default_factory=SiteAnalytics)


class PublicSiteConfig(BaseModel):
    """Site configuration exposed to the frontend."""

    site_id: str
    title: str
    description: str
    url_origin: str
    brand_color: str
    logo_url: str
    theme: Theme
    analytics: SiteAnalytics | None = None


class WhoAmIResponse(BaseModel):
    """How the current request's site was resolved."""

    cookie: str | None = None
    host: str | None = None
    resolved: str


# --- Response Models ---


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    database: str = "connected"
