"""
Shared pytest fixtures for the revenue engine tests.
"""

from datetime import date
from typing import List, Optional

import pandas as pd
import pytest

from revenue_engine.config import EngineSettings
from revenue_engine.data.sources import MarketSnapshot
from revenue_engine.models import ComparableFilters, MarketData, PropertyData


class ScriptedMarketSource:
    """Market source returning scripted sample sizes in call order."""

    def __init__(self, sample_sizes: List[int], data: MarketData):
        self.sample_sizes = list(sample_sizes)
        self.data = data
        self.calls = []

    def fetch_market(self, market_id: str, filters: Optional[ComparableFilters] = None) -> MarketSnapshot:
        self.calls.append((market_id, filters))
        return MarketSnapshot(data=self.data, sample_size=self.sample_sizes[len(self.calls) - 1])


class FailingSource:
    """Source whose every fetch raises."""

    def fetch_market(self, market_id, filters=None):
        raise ConnectionError("Key Data API [503] /api/v1/ota/market/kpis/month")

    def fetch_property(self, property_id):
        raise ConnectionError("Hospitable API [401] /properties")


@pytest.fixture
def settings():
    """Default engine settings."""
    return EngineSettings()


@pytest.fixture
def audit_date():
    """Fixed audit start date so recommendation dates are deterministic."""
    return date(2026, 3, 2)


@pytest.fixture
def market_data():
    """Comparable market for the reference scenario."""
    return MarketData(
        market_revpar=100.0,
        market_occupancy=0.60,
        market_20th_pctl_adr=120.0,
        peak_future_adr=300.0,
        avg_future_market_adr=200.0,
        total_market_annual_revpar=50000.0,
        avg_adr=180.0,
    )


@pytest.fixture
def property_data():
    """Property outperforming on RevPAR but lagging on occupancy."""
    return PropertyData(
        my_revpar=115.0,
        my_occupancy=0.40,
        last_year_lowest_sold=110.0,
        current_price=250.0,
    )


@pytest.fixture
def full_filters():
    """Filters derived from a 3-bedroom villa."""
    return ComparableFilters(
        bedrooms=3,
        property_type='Villa',
        min_sleeps=8,
        amenities=('Pool', 'Ocean View'),
    )


@pytest.fixture
def scripted_source(market_data):
    """Factory for a ScriptedMarketSource over the reference market."""
    def _make(*sample_sizes):
        return ScriptedMarketSource(list(sample_sizes), market_data)
    return _make


@pytest.fixture
def failing_source():
    return FailingSource()


@pytest.fixture
def monthly_kpis_df():
    """Monthly market KPI rows with a gap in the last month."""
    return pd.DataFrame({
        'revpar': [100.0, 120.0, None],
        'guest_occupancy': [0.60, 0.70, 0.80],
        'adr': [150.0, 200.0, None],
    })


@pytest.fixture
def weekly_kpis_df():
    """Weekly forward-pacing rows; the second week has no occupancy."""
    return pd.DataFrame({
        'guest_occupancy': [0.50, None, 0.70],
        'adr': [200.0, 210.0, 220.0],
        'revpar': [100.0, 90.0, 154.0],
    })


@pytest.fixture
def calendar_df():
    """Five calendar nights: two booked, one owner-blocked, two open."""
    return pd.DataFrame({
        'date': pd.date_range('2026-01-01', periods=5).strftime('%Y-%m-%d'),
        'available': [True, False, False, False, True],
        'reservation_id': [None, 'r-1', 'r-2', None, None],
        'price': [100.0, 150.0, 120.0, 0.0, 100.0],
    })
