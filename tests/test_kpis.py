"""Tests for KPI aggregation helpers."""

import pandas as pd
import pytest

from revenue_engine.data.kpis import (
    aggregate_monthly_kpis,
    aggregate_weekly_kpis,
    build_market_data,
    summarize_calendar,
    MonthlyKpis,
    WeeklyKpis,
)


class TestMonthlyKpis:
    """Test historical monthly aggregation."""

    def test_nulls_count_toward_averages(self, monthly_kpis_df):
        """Missing values contribute zero but the month still counts."""
        kpis = aggregate_monthly_kpis(monthly_kpis_df)

        assert kpis.market_revpar == pytest.approx(220.0 / 3)
        assert kpis.avg_occupancy == pytest.approx(0.7)
        assert kpis.avg_adr == pytest.approx(350.0 / 3)
        assert kpis.peak_adr == 200.0
        assert kpis.annual_revpar == pytest.approx(220.0 / 3 * 365)
        assert kpis.data_points == 3

    def test_empty_frame(self):
        kpis = aggregate_monthly_kpis(pd.DataFrame(columns=['revpar', 'guest_occupancy', 'adr']))

        assert kpis.market_revpar == 0.0
        assert kpis.peak_adr == 0.0
        assert kpis.data_points == 0


class TestWeeklyKpis:
    """Test forward-pacing aggregation."""

    def test_incomplete_weeks_skipped(self, weekly_kpis_df):
        kpis = aggregate_weekly_kpis(weekly_kpis_df)

        assert kpis.occupancy == pytest.approx(0.6)
        assert kpis.future_adr == pytest.approx(210.0)
        assert kpis.future_revpar == pytest.approx(127.0)
        assert kpis.data_points == 2

    def test_empty_frame(self):
        kpis = aggregate_weekly_kpis(pd.DataFrame())
        assert kpis == WeeklyKpis(0.0, 0.0, 0.0, 0)


class TestBuildMarketData:
    def test_combines_monthly_and_weekly(self):
        monthly = MonthlyKpis(100.0, 36500.0, 0.6, 200.0, 320.0, 12)
        weekly = WeeklyKpis(0.55, 240.0, 130.0, 8)
        data = build_market_data(monthly, weekly)

        assert data.market_revpar == 100.0
        assert data.market_occupancy == 0.6
        assert data.market_20th_pctl_adr == pytest.approx(130.0)
        assert data.peak_future_adr == 320.0
        assert data.avg_future_market_adr == 240.0
        assert data.total_market_annual_revpar == 36500.0

    def test_peak_falls_back_to_forward_adr(self):
        monthly = MonthlyKpis(0.0, 0.0, 0.0, 0.0, 0.0, 0)
        weekly = WeeklyKpis(0.55, 200.0, 110.0, 8)

        assert build_market_data(monthly, weekly).peak_future_adr == pytest.approx(280.0)


class TestCalendarStats:
    """Test property performance from calendar nights."""

    def test_booked_blocked_and_open_nights(self, calendar_df):
        """
        Two booked nights (150, 120), one owner block, two open.
        Owner blocks are removed from availability.
        """
        stats = summarize_calendar(calendar_df)

        assert stats.booked_nights == 2
        assert stats.available_nights == 4
        assert stats.total_revenue == pytest.approx(270.0)
        assert stats.my_revpar == pytest.approx(67.5)
        assert stats.my_occupancy == pytest.approx(0.5)
        assert stats.my_adr == pytest.approx(135.0)
        assert stats.lowest_sold_price == 120.0

    def test_empty_calendar(self):
        stats = summarize_calendar(pd.DataFrame(columns=['available', 'price', 'reservation_id']))

        assert stats.my_revpar == 0.0
        assert stats.booked_nights == 0


class TestWeeklyKpisMissingColumns:
    """Frames without occupancy or ADR columns have no countable weeks."""

    def test_missing_occupancy_column(self):
        df = pd.DataFrame({'adr': [200.0, 210.0], 'revpar': [100.0, 90.0]})
        assert aggregate_weekly_kpis(df) == WeeklyKpis(0.0, 0.0, 0.0, 0)

    def test_missing_adr_column(self):
        df = pd.DataFrame({'guest_occupancy': [0.5, 0.6]})
        assert aggregate_weekly_kpis(df).data_points == 0

    def test_missing_revpar_column_counts_zero(self):
        df = pd.DataFrame({'guest_occupancy': [0.5, 0.7], 'adr': [200.0, 220.0]})
        kpis = aggregate_weekly_kpis(df)

        assert kpis.data_points == 2
        assert kpis.future_adr == pytest.approx(210.0)
        assert kpis.future_revpar == 0.0
