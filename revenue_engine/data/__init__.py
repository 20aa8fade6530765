"""Data-source interfaces, fallback records and KPI aggregation."""
from .sources import (
    FALLBACK_MARKET_DATA,
    FALLBACK_PROPERTY_DATA,
    FetchResult,
    MarketDataSource,
    MarketSnapshot,
    MissingMarketError,
    PropertyDataSource,
    fetch_market_data_safe,
    fetch_property_data_safe,
)
from .kpis import aggregate_monthly_kpis, aggregate_weekly_kpis, build_market_data, summarize_calendar
