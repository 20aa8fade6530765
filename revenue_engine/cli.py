"""
Run one engine audit and print a plain-text summary.

Usage:
    revenue-audit
    revenue-audit --previous-aps 1.05 --target-rent 70000 --days-out 5
    revenue-audit --pace 0.60     # market historical occupancy pace
"""

import argparse
import logging
import os
from typing import List, Optional

from revenue_engine.config import DEFAULT_APS, EngineSettings
from revenue_engine.data.sources import FALLBACK_MARKET_DATA, FALLBACK_PROPERTY_DATA
from revenue_engine.recommender.engine import EngineResult, RevenueEngine


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Run the revenue decision engine')
    parser.add_argument('--previous-aps', type=float,
                        default=float(os.getenv('PREVIOUS_APS', str(DEFAULT_APS))),
                        help='APS carried from the previous run')
    parser.add_argument('--target-rent', type=float,
                        default=float(os.getenv('CURRENT_TARGET_RENT', '65000')),
                        help='Current annual target rent (<= 0 bootstraps one)')
    parser.add_argument('--days-out', type=int,
                        default=int(os.getenv('DAYS_OUT', '21')),
                        help='Days until the stay evaluated by the promotion scan')
    parser.add_argument('--pace', type=float, default=None,
                        help='Market historical occupancy pace (defaults to market occupancy)')
    parser.add_argument('--verbose', action='store_true', help='Log per-day decisions')
    return parser


def print_report(result: EngineResult) -> None:
    core, monthly, weekly = result.core, result.monthly, result.weekly

    print("=" * 70)
    print("CORE ENGINE")
    print("=" * 70)
    if result.comparables is not None:
        print(f"  {result.comparables.header()}")
    else:
        print("  Comp set: fallback record")
    print(f"  Performance Index: {core.performance_index:.3f}")
    print(f"  APS: {core.previous_aps:.3f} → {core.new_aps:.3f}")
    print(f"  Annual Target: ${core.annual_target:,.2f}")
    print(f"  Price Range: ${core.min_price:,.2f} - ${core.max_price:,.2f}")
    print(f"  Dynamic Centroid: ${core.dynamic_centroid:,.2f}")
    print(f"  Base Price: ${core.base_price:,.2f}")

    print("\n" + "=" * 70)
    print("MONTHLY ERROR FORECASTING")
    print("=" * 70)
    m = monthly.metrics
    print(f"  Multipliers: occ {m.occupancy:.2f}x | RevPAR {m.revpar:.2f}x | ADR {m.adr:.2f}x")
    print(f"  Diagnosis: {monthly.diagnosis.kind.value}")
    print(f"  {monthly.diagnosis.explanation}")
    c = monthly.correction
    print(f"  {c.adjustment_type.value}: ${c.previous_target_rent:,.2f} → ${c.new_target_rent:,.2f} "
          f"({c.adjustment_percentage*100:+.1f}%)")

    print("\n" + "=" * 70)
    print("WEEKLY BELL CURVE")
    print("=" * 70)
    print(f"  Market: {weekly.market_state.value} → {weekly.operating_mode}")
    print(f"  Transition point: {weekly.transition_point:.0f} days "
          f"({weekly.back_half_days} back / {weekly.front_half_days} front)")
    print(f"  Recommendations: {weekly.total}")
    for rec in weekly.recommendations:
        print(f"    {rec.date.isoformat()}  {rec.type.value:<16} {rec.value:<10} "
              f"${rec.current_price:,.2f} → ${rec.suggested_price:,.2f}")

    print("\n" + "=" * 70)
    print("SUPPLEMENTAL PROMOTIONS")
    print("=" * 70)
    print(f"  Legacy velocity check: {result.legacy_promotion}")
    if not result.promotions:
        print("  None triggered")
    for rec in result.promotions:
        print(f"    {rec.type.value:<24} {rec.value:<18} {rec.rationale}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(message)s'
    )

    engine = RevenueEngine(EngineSettings())
    result = engine.run(
        FALLBACK_PROPERTY_DATA,
        FALLBACK_MARKET_DATA,
        previous_aps=args.previous_aps,
        current_target_rent=args.target_rent,
        days_out=args.days_out,
        historical_occupancy_pace=args.pace,
    )
    print_report(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
