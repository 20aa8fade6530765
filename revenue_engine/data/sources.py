"""
Data-source interfaces and safe fetch wrappers.

The engine never talks to an API. It receives MarketData / PropertyData
from a provider implementing the protocols below. The *_safe wrappers
are the single place a provider failure is caught: the failure is logged
and the fixed fallback record is substituted, so the engine always gets
a valid record.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from revenue_engine.models import ComparableFilters, MarketData, PropertyData

logger = logging.getLogger(__name__)


class MissingMarketError(ValueError):
    """No market identifier could be resolved; the run cannot proceed."""


@dataclass(frozen=True)
class MarketSnapshot:
    """Market metrics together with the number of listings behind them."""
    data: MarketData
    sample_size: int


@dataclass(frozen=True)
class FetchResult:
    """A fetched record and whether it came from the live source."""
    data: object
    live: bool


class MarketDataSource(Protocol):
    def fetch_market(
        self, market_id: str, filters: Optional[ComparableFilters] = None
    ) -> MarketSnapshot:
        ...


class PropertyDataSource(Protocol):
    def fetch_property(self, property_id: str) -> PropertyData:
        ...


# Fallback comp set (Maui South), used when a live fetch fails
FALLBACK_MARKET_DATA = MarketData(
    market_revpar=189.50,
    market_occupancy=0.72,
    market_20th_pctl_adr=155.00,
    peak_future_adr=485.00,
    avg_future_market_adr=310.00,
    total_market_annual_revpar=69_178,
    avg_adr=263.19,
    avg_booking_length=4.8,
)

FALLBACK_PROPERTY_DATA = PropertyData(
    my_revpar=215.75,
    my_occupancy=0.58,
    last_year_lowest_sold=139.00,
    current_price=349.00,
    my_adr=371.98,
    avg_booking_length=2.4,
)


def fetch_market_data_safe(
    source: MarketDataSource,
    market_id: str,
    filters: Optional[ComparableFilters] = None
) -> FetchResult:
    """
    Fetch market data, substituting the fallback record on failure.

    Raises:
        MissingMarketError: market_id is empty (checked before fetching)
    """
    if not market_id:
        raise MissingMarketError("No market identifier; cannot fetch market data")

    try:
        snapshot = source.fetch_market(market_id, filters)
    except Exception as e:
        logger.warning(f"Live market fetch failed for {market_id}: {e}")
        return FetchResult(data=FALLBACK_MARKET_DATA, live=False)

    return FetchResult(data=snapshot.data, live=True)


def fetch_property_data_safe(source: PropertyDataSource, property_id: str) -> FetchResult:
    """Fetch property data, substituting the fallback record on failure."""
    try:
        data = source.fetch_property(property_id)
    except Exception as e:
        logger.warning(f"Live property fetch failed for {property_id}: {e}")
        return FetchResult(data=FALLBACK_PROPERTY_DATA, live=False)

    return FetchResult(data=data, live=True)
