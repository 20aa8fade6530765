"""
Monthly Error Forecasting Tests

Covers:
- Performance multipliers and denominator floors
- Diagnosis decision tree (first match wins)
- Smoothed, capped target-rent correction
- Bootstrapping a missing target rent
"""

from dataclasses import replace

import pytest

from revenue_engine.config import MonthlySettings
from revenue_engine.models import AdjustmentType, DiagnosisType, PerformanceMultipliers
from revenue_engine.recommender.error_forecasting import (
    calculate_correction_adjustment,
    calculate_performance_multipliers,
    derive_adr,
    diagnose_error_forecasting,
    run_monthly_error_forecasting,
)


class TestDeriveADR:
    """Test ADR derivation from RevPAR and occupancy."""

    def test_revpar_over_occupancy(self):
        assert derive_adr(80.0, 0.5) == pytest.approx(160.0)

    def test_zero_occupancy_returns_revpar(self):
        """No occupancy: the RevPAR itself stands in for ADR."""
        assert derive_adr(42.0, 0.0) == 42.0
        assert derive_adr(0.0, 0.0) == 0


class TestPerformanceMultipliers:
    """Test property-to-comp ratios."""

    def test_plain_ratios(self):
        m = calculate_performance_multipliers(0.9, 80.0, 88.0, 0.5, 110.0, 220.0)
        assert m.occupancy == pytest.approx(1.8)
        assert m.revpar == pytest.approx(80.0 / 110.0)
        assert m.adr == pytest.approx(0.4)

    def test_comp_denominators_floored(self):
        """Zero comp metrics never divide by zero."""
        m = calculate_performance_multipliers(0.5, 50.0, 100.0, 0.0, 0.0, 0.0)
        assert m.occupancy == pytest.approx(50.0)   # 0.5 / 0.01
        assert m.revpar == pytest.approx(50.0)      # 50 / 1.0
        assert m.adr == pytest.approx(100.0)        # 100 / 1.0


class TestDiagnosis:
    """Test the monthly decision tree."""

    def test_underpricing_at_boundaries(self):
        """Occupancy exactly 1.5x and RevPAR exactly 0.8x is underpricing."""
        d = diagnose_error_forecasting(PerformanceMultipliers(1.5, 0.8, 0.6))

        assert d.kind == DiagnosisType.CLASSIC_UNDERPRICING
        assert d.price_error_factor == pytest.approx(0.6)
        assert d.correction_factor == pytest.approx(1 / 0.6)

    def test_underpricing_zero_adr_uses_default_correction(self):
        d = diagnose_error_forecasting(PerformanceMultipliers(2.0, 0.5, 0.0))

        assert d.kind == DiagnosisType.CLASSIC_UNDERPRICING
        assert d.correction_factor == 2.0

    def test_overpricing(self):
        d = diagnose_error_forecasting(PerformanceMultipliers(0.5, 0.5, 1.0))

        assert d.kind == DiagnosisType.CLASSIC_OVERPRICING
        assert d.correction_factor == 0.90
        assert d.price_error_factor == 1.0

    def test_overpricing_at_boundaries(self):
        d = diagnose_error_forecasting(PerformanceMultipliers(0.7, 0.8, 1.2))
        assert d.kind == DiagnosisType.CLASSIC_OVERPRICING

    def test_acceptable_when_revpar_strong(self):
        """Low occupancy with strong RevPAR is not overpricing."""
        d = diagnose_error_forecasting(PerformanceMultipliers(0.5, 1.2, 2.4))

        assert d.kind == DiagnosisType.ACCEPTABLE_PERFORMANCE
        assert d.price_error_factor == 1.0
        assert d.correction_factor == 1.0

    def test_every_triple_gets_exactly_one_diagnosis(self):
        for occ in [0.0, 0.5, 0.7, 1.0, 1.5, 3.0]:
            for revpar in [0.0, 0.5, 0.8, 1.0, 2.0]:
                d = diagnose_error_forecasting(PerformanceMultipliers(occ, revpar, 1.0))
                assert d.kind in DiagnosisType


class TestCorrection:
    """Test target-rent correction capping and smoothing."""

    def test_underpricing_capped_at_plus_50(self):
        d = diagnose_error_forecasting(PerformanceMultipliers(2.0, 0.5, 0.0))
        c = calculate_correction_adjustment(65000.0, d)

        assert c.applied_multiplier == pytest.approx(1.5)
        assert c.new_target_rent == pytest.approx(97500.0)
        assert c.adjustment_type == AdjustmentType.INCREASE

    def test_underpricing_is_halved(self):
        """Correction 1/0.6 → 1 + (1.667 - 1) / 2 = 1.333"""
        d = diagnose_error_forecasting(PerformanceMultipliers(1.5, 0.8, 0.6))
        c = calculate_correction_adjustment(60000.0, d)

        assert c.applied_multiplier == pytest.approx(1 + (1 / 0.6 - 1) / 2)
        assert c.new_target_rent == pytest.approx(80000.0)

    def test_overpricing_decreases_ten_percent(self):
        d = diagnose_error_forecasting(PerformanceMultipliers(0.5, 0.5, 1.0))
        c = calculate_correction_adjustment(65000.0, d)

        assert c.applied_multiplier == pytest.approx(0.9)
        assert c.new_target_rent == pytest.approx(58500.0)
        assert c.adjustment_type == AdjustmentType.DECREASE
        assert c.adjustment_amount == pytest.approx(-6500.0)
        assert c.adjustment_percentage == pytest.approx(-0.1)

    def test_overpricing_floored_at_minus_20(self):
        """A harsher configured correction is still floored at 0.80."""
        monthly = replace(MonthlySettings(), overpricing_correction_factor=0.5)
        d = diagnose_error_forecasting(PerformanceMultipliers(0.5, 0.5, 1.0), monthly)
        c = calculate_correction_adjustment(65000.0, d, monthly)

        assert c.applied_multiplier == pytest.approx(0.8)
        assert c.new_target_rent == pytest.approx(52000.0)

    def test_acceptable_no_change(self):
        d = diagnose_error_forecasting(PerformanceMultipliers(1.0, 1.0, 1.0))
        c = calculate_correction_adjustment(65000.0, d)

        assert c.applied_multiplier == 1.0
        assert c.new_target_rent == 65000.0
        assert c.adjustment_type == AdjustmentType.NO_CHANGE


class TestMonthlyReview:
    """Test the full monthly review."""

    def test_underpricing_scenario(self):
        """
        Scenario: 90% occupancy vs 50% market but RevPAR 80 vs 110.
        ADR multiplier ≈ 0.404 → correction ≈ 2.475 → capped at 1.5.
        """
        result = run_monthly_error_forecasting(
            our_occ=0.9,
            our_revpar=80.0,
            comp_occ=0.5,
            comp_revpar=110.0,
            current_target_rent=65000.0,
            current_aps=1.0,
            market_annual_revpar=50000.0,
        )

        assert result.diagnosis.kind == DiagnosisType.CLASSIC_UNDERPRICING
        assert result.metrics.adr == pytest.approx((80.0 / 0.9) / 220.0)
        assert result.diagnosis.correction_factor == pytest.approx(220.0 / (80.0 / 0.9))
        assert result.correction.applied_multiplier == pytest.approx(1.5)
        assert result.correction.new_target_rent == pytest.approx(97500.0)

    def test_bootstraps_missing_target(self):
        """No prior target: annual market RevPAR × APS is used, then corrected."""
        result = run_monthly_error_forecasting(
            our_occ=0.6,
            our_revpar=100.0,
            comp_occ=0.6,
            comp_revpar=100.0,
            current_target_rent=0.0,
            current_aps=1.1,
            market_annual_revpar=50000.0,
        )

        assert result.diagnosis.kind == DiagnosisType.ACCEPTABLE_PERFORMANCE
        assert result.correction.previous_target_rent == pytest.approx(55000.0)
        assert result.correction.new_target_rent == pytest.approx(55000.0)

    def test_reports_new_aps(self):
        result = run_monthly_error_forecasting(
            0.6, 100.0, 0.6, 100.0, 65000.0, 1.0, 50000.0, new_aps=1.045
        )
        assert result.previous_aps == 1.0
        assert result.new_aps == 1.045

        defaulted = run_monthly_error_forecasting(0.6, 100.0, 0.6, 100.0, 65000.0, 1.0, 50000.0)
        assert defaulted.new_aps == 1.0

    def test_to_dict_flattens_correction(self):
        result = run_monthly_error_forecasting(
            0.5, 50.0, 0.8, 100.0, 65000.0, 1.0, 50000.0
        )
        d = result.to_dict()

        assert d['diagnosis'] == 'CLASSIC_OVERPRICING'
        assert d['adjustment_type'] == 'DECREASE'
        assert d['new_target_rent'] == pytest.approx(58500.0)
