"""
Source payload models: one per analytical data source.

Each model is what a single ``SourceFetcherSet`` operation returns, after
validation.  All models are frozen; once a payload lands in an
``AggregateResult`` nothing downstream may change it.

Every field has a zero / empty default.  ``slot_default(slot)`` in
``bfcm_report.models.report`` relies on ``Model()`` producing the neutral
value that stands in for a failed source.

Channel payloads accept both the window-neutral names
(``gmv_current``/``gmv_previous``) and the year-suffixed names some warehouse
views emit (``gmv_2025``/``gmv_2024``).
"""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class CoreMetrics(BaseModel):
    """Order totals for one window.

    Attributes:
        total_orders: Completed orders in the window.
        total_gmv:    Gross merchandise value.
        aov:          Average order value (GMV / orders).
    """

    model_config = ConfigDict(frozen=True)

    total_orders: int = Field(default=0, ge=0)
    total_gmv: float = Field(default=0.0, ge=0)
    aov: float = Field(default=0.0, ge=0)


class PeakGMV(BaseModel):
    """Busiest single minute of the window."""

    model_config = ConfigDict(frozen=True)

    peak_gmv_per_minute: float = Field(default=0.0, ge=0)
    peak_minute: str = ""


class ProductPerformance(BaseModel):
    """One row of the ranked top-products list (highest revenue first)."""

    model_config = ConfigDict(frozen=True)

    product_title: str
    variant_title: Optional[str] = None
    units_sold: int = Field(default=0, ge=0)
    revenue: float = Field(default=0.0, ge=0)
    product_id: Optional[str] = None
    variant_id: Optional[str] = None


class ChannelPerformance(BaseModel):
    """Sales-channel totals for the current and comparison windows.

    ``yoy_growth_pct`` is computed by the source and may be negative.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    channel_type: str
    gmv_current: float = Field(
        default=0.0, ge=0, validation_alias=AliasChoices("gmv_current", "gmv_2025")
    )
    orders_current: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("orders_current", "orders_2025")
    )
    gmv_previous: float = Field(
        default=0.0, ge=0, validation_alias=AliasChoices("gmv_previous", "gmv_2024")
    )
    orders_previous: int = Field(
        default=0, ge=0, validation_alias=AliasChoices("orders_previous", "orders_2024")
    )
    yoy_growth_pct: float = 0.0


class RetailMetrics(BaseModel):
    """Point-of-sale aggregate across all retail locations."""

    model_config = ConfigDict(frozen=True)

    top_location: Optional[str] = None
    retail_gmv: float = Field(default=0.0, ge=0)
    retail_aov: float = Field(default=0.0, ge=0)
    retail_upt: float = Field(default=0.0, ge=0)
    retail_orders: int = Field(default=0, ge=0)


class ConversionMetrics(BaseModel):
    """Online session funnel.  Rates are percentages (2.5 means 2.5%)."""

    model_config = ConfigDict(frozen=True)

    total_sessions: int = Field(default=0, ge=0)
    sessions_with_cart: int = Field(default=0, ge=0)
    sessions_with_checkout: int = Field(default=0, ge=0)
    cart_to_checkout_rate: float = Field(default=0.0, ge=0)
    mobile_sessions: int = Field(default=0, ge=0)
    desktop_sessions: int = Field(default=0, ge=0)
    conversion_rate: float = Field(default=0.0, ge=0)


class CustomerInsights(BaseModel):
    """New-vs-returning split plus the single biggest spender."""

    model_config = ConfigDict(frozen=True)

    top_customer_email: Optional[str] = None
    top_customer_name: Optional[str] = None
    top_customer_spend: float = Field(default=0.0, ge=0)
    top_customer_orders: int = Field(default=0, ge=0)
    new_customers: int = Field(default=0, ge=0)
    returning_customers: int = Field(default=0, ge=0)


class ReferrerData(BaseModel):
    model_config = ConfigDict(frozen=True)

    top_referrer: Optional[str] = None
    referrer_gmv: float = Field(default=0.0, ge=0)
    referrer_orders: int = Field(default=0, ge=0)


class PlatformStats(BaseModel):
    """Platform-wide totals for the same window (not merchant-specific)."""

    model_config = ConfigDict(frozen=True)

    total_gmv_processed: float = Field(default=0.0, ge=0)
    peak_gmv_per_minute: float = Field(default=0.0, ge=0)
    peak_minute: str = ""
    total_orders: int = Field(default=0, ge=0)
    total_shops: int = Field(default=0, ge=0)


class ShopBreakdown(BaseModel):
    """Per-shop totals when a report spans several shops."""

    model_config = ConfigDict(frozen=True)

    shop_id: str
    shop_name: Optional[str] = None
    total_orders: int = Field(default=0, ge=0)
    total_gmv: float = Field(default=0.0, ge=0)
    aov: float = Field(default=0.0, ge=0)
    units_per_transaction: float = Field(default=0.0, ge=0)


class DiscountMetrics(BaseModel):
    """Discounted vs. full-price sales.  ``*_pct`` fields are 0–100."""

    model_config = ConfigDict(frozen=True)

    total_discounted_sales: float = Field(default=0.0, ge=0)
    total_full_price_sales: float = Field(default=0.0, ge=0)
    discounted_sales_pct: float = Field(default=0.0, ge=0)
    full_price_sales_pct: float = Field(default=0.0, ge=0)
    total_discount_amount: float = Field(default=0.0, ge=0)

    @property
    def total_sales(self) -> float:
        return self.total_discounted_sales + self.total_full_price_sales


class CountrySales(BaseModel):
    model_config = ConfigDict(frozen=True)

    country: str
    gmv: float = Field(default=0.0, ge=0)
    orders: int = Field(default=0, ge=0)


class InternationalSales(BaseModel):
    """Cross-border share plus the top destination countries."""

    model_config = ConfigDict(frozen=True)

    cross_border_gmv: float = Field(default=0.0, ge=0)
    cross_border_orders: int = Field(default=0, ge=0)
    cross_border_pct: float = Field(default=0.0, ge=0)
    top_countries: list[CountrySales] = Field(default_factory=list)
