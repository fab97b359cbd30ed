"""
Sales Aggregation Service.

Turns a creator's raw sale records into the statistical profile that feeds
both prompt building and fallback scoring.

Profile Sections:
    - summary: total revenue, total units sold, average order value
      (revenue per unit)
    - categoryBreakdown: revenue, units, mean unit price and revenue share
      per category, sorted by revenue descending
    - priceDistribution: units and revenue per 10,000-unit price bucket,
      sorted by bucket
    - seasonalPattern: units and revenue per calendar season, in order of
      first appearance
    - topProducts: five best products by revenue, grouped by product name

The season always comes from the sale's calendar month (Mar-May spring,
Jun-Aug summer, Sep-Nov fall, otherwise winter). A season value carried
on the record itself is ignored.

Aggregation is a pure function. An empty history yields an all-zero
profile, and no input in the documented domain raises.

Dependencies:
    - pandas: group-by aggregation over the sale records
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd

from creator_match.models import (
    AggregatedProfile,
    CategoryBreakdown,
    Creator,
    CreatorSnapshot,
    CreatorStats,
    PriceBucketSummary,
    Product,
    ProfileSummary,
    SaleRecord,
    Season,
    SeasonalSummary,
    TopProduct,
    TopProductStat,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Width of one price-distribution bucket, in currency units
PRICE_BUCKET_SIZE: int = 10_000

# Number of products kept in the topProducts section
TOP_PRODUCT_LIMIT: int = 5


# =============================================================================
# Season Helpers
# =============================================================================


def season_from_month(month: int) -> Season:
    """
    Map a calendar month (1-12) to its season.

    Args:
        month: Calendar month number

    Returns:
        Season enum value
    """
    if 3 <= month <= 5:
        return Season.SPRING
    if 6 <= month <= 8:
        return Season.SUMMER
    if 9 <= month <= 11:
        return Season.FALL
    return Season.WINTER


def current_season(now: Optional[datetime] = None) -> Season:
    """Season for the given moment, defaulting to the current UTC time."""
    moment = now or datetime.now(timezone.utc)
    return season_from_month(moment.month)


# =============================================================================
# Profile Aggregation
# =============================================================================


def _snapshot(creator: Creator) -> CreatorSnapshot:
    return CreatorSnapshot(
        id=creator.id,
        name=creator.name,
        platform=creator.platform.value,
        followers=creator.followers,
        engagementRate=creator.engagementRate,
    )


def _sales_frame(sales: Sequence[SaleRecord]) -> pd.DataFrame:
    """Flatten sale records into the columns aggregation needs."""
    return pd.DataFrame(
        [
            {
                "productName": sale.productName,
                "category": sale.category,
                "price": float(sale.price),
                "quantity": int(sale.quantity),
                "revenue": float(sale.revenue),
                "season": season_from_month(sale.date.month).value,
            }
            for sale in sales
        ]
    )


def _category_breakdown(frame: pd.DataFrame, total_revenue: float) -> List[CategoryBreakdown]:
    grouped = (
        frame.groupby("category", sort=False)
        .agg(
            revenue=("revenue", "sum"),
            salesCount=("quantity", "sum"),
            averagePrice=("price", "mean"),
        )
        .reset_index()
        # Stable sort keeps first-seen order between equal revenues
        .sort_values("revenue", ascending=False, kind="stable")
    )

    return [
        CategoryBreakdown(
            category=str(row.category),
            revenue=float(row.revenue),
            salesCount=int(row.salesCount),
            averagePrice=float(row.averagePrice),
            revenueShare=(float(row.revenue) / total_revenue * 100) if total_revenue > 0 else 0.0,
        )
        for row in grouped.itertuples(index=False)
    ]


def _price_distribution(frame: pd.DataFrame) -> List[PriceBucketSummary]:
    bucketed = frame.assign(bucket=(frame["price"] // PRICE_BUCKET_SIZE).astype(int))
    grouped = (
        bucketed.groupby("bucket")
        .agg(salesCount=("quantity", "sum"), revenue=("revenue", "sum"))
        .reset_index()
        .sort_values("bucket")
    )

    distribution: List[PriceBucketSummary] = []
    for row in grouped.itertuples(index=False):
        if int(row.salesCount) <= 0:
            continue
        lower = int(row.bucket) * PRICE_BUCKET_SIZE
        distribution.append(
            PriceBucketSummary(
                priceRange=f"{lower}-{lower + PRICE_BUCKET_SIZE}",
                salesCount=int(row.salesCount),
                revenue=float(row.revenue),
            )
        )
    return distribution


def _seasonal_pattern(frame: pd.DataFrame) -> List[SeasonalSummary]:
    grouped = (
        frame.groupby("season", sort=False)
        .agg(salesCount=("quantity", "sum"), revenue=("revenue", "sum"))
        .reset_index()
    )
    return [
        SeasonalSummary(
            season=str(row.season),
            salesCount=int(row.salesCount),
            revenue=float(row.revenue),
        )
        for row in grouped.itertuples(index=False)
    ]


def _top_products(frame: pd.DataFrame) -> List[TopProduct]:
    # Category and price come from the first sale seen for each product name
    grouped = (
        frame.groupby("productName", sort=False)
        .agg(
            category=("category", "first"),
            price=("price", "first"),
            salesCount=("quantity", "sum"),
            revenue=("revenue", "sum"),
        )
        .reset_index()
        .sort_values("revenue", ascending=False, kind="stable")
        .head(TOP_PRODUCT_LIMIT)
    )
    return [
        TopProduct(
            name=str(row.productName),
            category=str(row.category),
            price=float(row.price),
            salesCount=int(row.salesCount),
            revenue=float(row.revenue),
        )
        for row in grouped.itertuples(index=False)
    ]


def aggregate_sales(creator: Creator, sales: Sequence[SaleRecord]) -> AggregatedProfile:
    """
    Build the aggregated statistical profile for a creator.

    Args:
        creator: Creator the sales belong to
        sales: The creator's sale records (may be empty)

    Returns:
        AggregatedProfile with summary, category breakdown, price
        distribution, seasonal pattern and top products. An empty sales
        list yields zero totals and empty sections.

    Example:
        >>> profile = aggregate_sales(creator, sales)
        >>> profile.categoryBreakdown[0].category
        'Beauty'
        >>> round(profile.categoryBreakdown[0].revenueShare, 2)
        71.43
    """
    snapshot = _snapshot(creator)

    if not sales:
        return AggregatedProfile(creator=snapshot, summary=ProfileSummary())

    frame = _sales_frame(sales)

    total_revenue = float(frame["revenue"].sum())
    total_sales = int(frame["quantity"].sum())
    average_order_value = total_revenue / total_sales if total_sales > 0 else 0.0

    return AggregatedProfile(
        creator=snapshot,
        summary=ProfileSummary(
            totalRevenue=total_revenue,
            totalSales=total_sales,
            averageOrderValue=average_order_value,
        ),
        categoryBreakdown=_category_breakdown(frame, total_revenue),
        priceDistribution=_price_distribution(frame),
        seasonalPattern=_seasonal_pattern(frame),
        topProducts=_top_products(frame),
    )


# =============================================================================
# Creator Statistics
# =============================================================================


def average_conversion_rate(sales: Sequence[SaleRecord]) -> float:
    """Mean per-record conversion rate in percent, or 0 for no sales."""
    if not sales:
        return 0.0
    return sum(sale.conversionRate for sale in sales) / len(sales)


def compute_creator_stats(
    sales: Sequence[SaleRecord],
    products_by_id: Mapping[str, Product],
) -> CreatorStats:
    """
    Headline statistics for a creator profile.

    topCategory counts units by the catalog product's category, so sales of
    products missing from the catalog do not contribute to it. topProduct
    counts units by product id. Ties go to whichever was seen first.

    Args:
        sales: The creator's sale records
        products_by_id: Catalog lookup used to resolve categories and names

    Returns:
        CreatorStats; all zero / None for an empty history
    """
    if not sales:
        return CreatorStats()

    category_units: Dict[str, int] = {}
    product_units: Dict[str, int] = {}

    for sale in sales:
        product = products_by_id.get(sale.productId)
        if product is not None:
            category_units[product.category] = category_units.get(product.category, 0) + sale.quantity
        product_units[sale.productId] = product_units.get(sale.productId, 0) + sale.quantity

    top_category: Optional[str] = None
    if category_units:
        top_category = max(category_units.items(), key=lambda item: item[1])[0]

    top_product_id, top_units = max(product_units.items(), key=lambda item: item[1])
    top_product = products_by_id.get(top_product_id)

    return CreatorStats(
        totalSales=sum(sale.quantity for sale in sales),
        totalRevenue=sum(sale.revenue for sale in sales),
        totalCommission=sum(sale.commission for sale in sales),
        averageConversionRate=round(average_conversion_rate(sales), 2),
        topCategory=top_category,
        topProduct=TopProductStat(
            id=top_product_id,
            name=top_product.name if top_product is not None else "Unknown",
            salesCount=top_units,
        ),
    )
