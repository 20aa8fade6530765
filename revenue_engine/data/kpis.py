"""
KPI aggregation helpers for data-source implementations.

Market APIs return monthly (historical) and weekly (forward pacing) KPI
rows; property calendars return one row per night. These helpers reduce
those frames to the scalar metrics MarketData and PropertyData need.
"""

from dataclasses import dataclass

import numpy as np
import pandas as pd

from revenue_engine.models import MarketData

DAYS_PER_YEAR = 365

# No percentile endpoint: approximate the market P20 ADR from the mean
P20_ADR_FROM_AVG = 0.65

# Peak ADR fallback when no monthly ADR is available
PEAK_FROM_FUTURE_ADR = 1.4


@dataclass(frozen=True)
class MonthlyKpis:
    market_revpar: float
    annual_revpar: float
    avg_occupancy: float
    avg_adr: float
    peak_adr: float
    data_points: int


@dataclass(frozen=True)
class WeeklyKpis:
    occupancy: float
    future_adr: float
    future_revpar: float
    data_points: int


@dataclass(frozen=True)
class CalendarStats:
    my_revpar: float
    my_occupancy: float
    my_adr: float
    lowest_sold_price: float
    total_revenue: float
    booked_nights: int
    available_nights: int


def _mean(series: pd.Series, n: int) -> float:
    """Sum of non-null values divided by the row count (0 when empty)."""
    return float(series.fillna(0).sum() / n) if n > 0 else 0.0


def aggregate_monthly_kpis(df: pd.DataFrame) -> MonthlyKpis:
    """
    Reduce monthly market KPI rows.

    Args:
        df: Rows with 'revpar', 'guest_occupancy', 'adr' (nullable)

    Returns:
        MonthlyKpis; every row counts toward the averages
    """
    n = len(df)
    adr = pd.to_numeric(df.get('adr', pd.Series(dtype=float)), errors='coerce')
    peak_adr = float(adr.max()) if adr.notna().any() else 0.0
    market_revpar = _mean(pd.to_numeric(df.get('revpar', pd.Series(dtype=float)), errors='coerce'), n)

    return MonthlyKpis(
        market_revpar=market_revpar,
        annual_revpar=market_revpar * DAYS_PER_YEAR,
        avg_occupancy=_mean(
            pd.to_numeric(df.get('guest_occupancy', pd.Series(dtype=float)), errors='coerce'), n
        ),
        avg_adr=_mean(adr, n),
        peak_adr=max(peak_adr, 0.0),
        data_points=n,
    )


def aggregate_weekly_kpis(df: pd.DataFrame) -> WeeklyKpis:
    """
    Reduce weekly forward-pacing KPI rows.

    Only weeks with both occupancy and ADR present are counted.
    A frame missing either column has no countable weeks.
    """
    if len(df) == 0 or not {'guest_occupancy', 'adr'}.issubset(df.columns):
        return WeeklyKpis(occupancy=0.0, future_adr=0.0, future_revpar=0.0, data_points=0)

    valid = df.dropna(subset=['guest_occupancy', 'adr'])
    n = len(valid)
    if n == 0:
        return WeeklyKpis(occupancy=0.0, future_adr=0.0, future_revpar=0.0, data_points=0)

    revpar = valid['revpar'] if 'revpar' in valid.columns else pd.Series(0.0, index=valid.index)
    return WeeklyKpis(
        occupancy=float(valid['guest_occupancy'].astype(float).mean()),
        future_adr=float(valid['adr'].astype(float).mean()),
        future_revpar=float(revpar.fillna(0).astype(float).sum() / n),
        data_points=n,
    )


def build_market_data(monthly: MonthlyKpis, weekly: WeeklyKpis) -> MarketData:
    """Combine historical and forward KPIs into a MarketData record."""
    return MarketData(
        market_revpar=monthly.market_revpar,
        market_occupancy=monthly.avg_occupancy,
        market_20th_pctl_adr=monthly.avg_adr * P20_ADR_FROM_AVG,
        peak_future_adr=monthly.peak_adr or weekly.future_adr * PEAK_FROM_FUTURE_ADR,
        avg_future_market_adr=weekly.future_adr,
        total_market_annual_revpar=monthly.annual_revpar,
        avg_adr=monthly.avg_adr,
    )


def summarize_calendar(days: pd.DataFrame) -> CalendarStats:
    """
    Property performance from calendar nights.

    A night that is unavailable with a reservation is booked; unavailable
    without a reservation is owner-blocked and excluded from availability.

    Args:
        days: Rows with 'available' (bool), 'price' and 'reservation_id'

    Returns:
        CalendarStats (all zero for an empty calendar)
    """
    if len(days) == 0:
        return CalendarStats(0.0, 0.0, 0.0, 0.0, 0.0, 0, 0)

    unavailable = ~days['available'].astype(bool)
    has_reservation = days['reservation_id'].notna() & (days['reservation_id'] != '')
    booked = days[unavailable & has_reservation]
    blocked_nights = int((unavailable & ~has_reservation).sum())

    prices = pd.to_numeric(booked['price'], errors='coerce').fillna(0)
    total_revenue = float(prices.sum())
    booked_nights = len(booked)
    available_nights = len(days) - blocked_nights
    sold = prices[prices > 0]

    return CalendarStats(
        my_revpar=total_revenue / available_nights if available_nights > 0 else 0.0,
        my_occupancy=booked_nights / available_nights if available_nights > 0 else 0.0,
        my_adr=total_revenue / booked_nights if booked_nights > 0 else 0.0,
        lowest_sold_price=float(np.min(sold)) if len(sold) > 0 else 0.0,
        total_revenue=total_revenue,
        booked_nights=booked_nights,
        available_nights=available_nights,
    )
