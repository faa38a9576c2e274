"""Seller analytics: a read-only reduction over a seller's orders.

Revenue always means the summed ``total`` of completed orders. Other
counts include orders in every status.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta

from protean.utils.globals import current_domain

from marketplace.analytics.window import Window, resolve_window
from marketplace.order.order import Order, OrderStatus, PaymentMethod
from marketplace.order.queries import zero_filled_counts
from marketplace.settings import setting

TOP_PRODUCTS = 5
DAILY_SERIES_DAYS = 14


@dataclass(frozen=True)
class ProductSales:
    product_id: str | None
    name: str
    image: str | None
    quantity_sold: int
    revenue: float


@dataclass(frozen=True)
class DailySales:
    date: date
    order_count: int
    revenue: float


@dataclass(frozen=True)
class PaymentMethodSales:
    method: str
    order_count: int
    revenue: float


@dataclass(frozen=True)
class MarketSales:
    market: str
    order_count: int
    revenue: float


@dataclass(frozen=True)
class AnalyticsReport:
    seller_id: str
    period: str
    start: datetime | None
    end: datetime
    revenue: float
    previous_revenue: float
    revenue_change: float
    total_orders: int
    completed_orders: int
    pending_orders: int
    cancelled_orders: int
    status_breakdown: dict[str, int] = field(default_factory=dict)
    payment_methods: dict[str, PaymentMethodSales] = field(default_factory=dict)
    top_products: list[ProductSales] = field(default_factory=list)
    daily_sales: list[DailySales] = field(default_factory=list)
    market_comparison: list[MarketSales] = field(default_factory=list)


def _completed(orders) -> list[Order]:
    return [order for order in orders if order.status == OrderStatus.COMPLETED.value]


def _revenue(orders) -> float:
    return sum(order.total for order in _completed(orders))


def _revenue_change(current: float, previous: float) -> float:
    if previous <= 0:
        return 0.0
    return round((current - previous) / previous * 100, 2)


def _payment_breakdown(orders) -> dict[str, PaymentMethodSales]:
    counts = {method.value: 0 for method in PaymentMethod}
    revenue = {method.value: 0.0 for method in PaymentMethod}
    for order in orders:
        method = order.payment_method or PaymentMethod.QR.value
        counts[method] = counts.get(method, 0) + 1
        if order.status == OrderStatus.COMPLETED.value:
            revenue[method] = revenue.get(method, 0.0) + order.total
    return {
        method: PaymentMethodSales(method=method, order_count=counts[method], revenue=revenue.get(method, 0.0))
        for method in counts
    }


def _top_products(completed_orders) -> list[ProductSales]:
    totals: dict[str, dict] = {}
    for order in completed_orders:
        for line in order.lines:
            key = str(line.product_id) if line.product_id else line.name
            entry = totals.setdefault(
                key,
                {
                    "product_id": str(line.product_id) if line.product_id else None,
                    "name": line.name,
                    "image": line.image,
                    "quantity_sold": 0,
                    "revenue": 0.0,
                },
            )
            entry["quantity_sold"] += line.quantity
            entry["revenue"] += line.price * line.quantity

    ranked = sorted(totals.values(), key=lambda entry: entry["revenue"], reverse=True)
    return [ProductSales(**entry) for entry in ranked[:TOP_PRODUCTS]]


def _daily_series(seller_id, now: datetime) -> list[DailySales]:
    first_day = now.date() - timedelta(days=DAILY_SERIES_DAYS - 1)
    start = datetime.combine(first_day, time.min, tzinfo=UTC)
    orders = current_domain.repository_for(Order).placed_between(
        start, now, seller_id=seller_id, status=OrderStatus.COMPLETED.value
    )

    counts: dict[date, int] = defaultdict(int)
    revenue: dict[date, float] = defaultdict(float)
    for order in orders:
        day = order.created_at.astimezone(UTC).date()
        counts[day] += 1
        revenue[day] += order.total

    days = [first_day + timedelta(days=offset) for offset in range(DAILY_SERIES_DAYS)]
    return [DailySales(date=day, order_count=counts[day], revenue=revenue[day]) for day in days]


def _market_comparison(window: Window) -> list[MarketSales]:
    """Completed revenue per market across all sellers. Known markets are always listed."""
    orders = current_domain.repository_for(Order).placed_between(
        window.start, window.end, status=OrderStatus.COMPLETED.value
    )
    counts: dict[str, int] = {market: 0 for market in setting("MARKETS")}
    revenue: dict[str, float] = {market: 0.0 for market in setting("MARKETS")}
    for order in orders:
        counts[order.market_location] = counts.get(order.market_location, 0) + 1
        revenue[order.market_location] = revenue.get(order.market_location, 0.0) + order.total
    return [MarketSales(market=market, order_count=counts[market], revenue=revenue[market]) for market in counts]


def seller_analytics(seller_id, period: str | None = None, start=None, end=None, now=None) -> AnalyticsReport:
    """Build the analytics report of ``seller_id`` for a named period or an explicit date range."""
    now = now or datetime.now(UTC)
    window = resolve_window(period=period, start=start, end=end, now=now)
    repo = current_domain.repository_for(Order)

    orders = repo.placed_between(window.start, window.end, seller_id=seller_id)
    completed = _completed(orders)
    revenue = _revenue(orders)

    previous_window = window.previous()
    previous_revenue = 0.0
    if previous_window is not None:
        previous_revenue = _revenue(
            repo.placed_between(
                previous_window.start,
                previous_window.end,
                seller_id=seller_id,
                status=OrderStatus.COMPLETED.value,
            )
        )

    breakdown = zero_filled_counts(orders)
    return AnalyticsReport(
        seller_id=str(seller_id),
        period=window.period,
        start=window.start,
        end=window.end,
        revenue=revenue,
        previous_revenue=previous_revenue,
        revenue_change=_revenue_change(revenue, previous_revenue),
        total_orders=len(orders),
        completed_orders=len(completed),
        pending_orders=breakdown[OrderStatus.PENDING.value],
        cancelled_orders=breakdown[OrderStatus.CANCELLED.value],
        status_breakdown=breakdown,
        payment_methods=_payment_breakdown(orders),
        top_products=_top_products(completed),
        daily_sales=_daily_series(seller_id, now),
        market_comparison=_market_comparison(window),
    )
