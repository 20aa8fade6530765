"""
Core APS and price-bound formulas.

Pure functions: no state, no I/O. Callers are expected to pass finite
inputs; the only guard here is the performance index falling back to
1.0 when the market RevPAR is not positive.
"""

from dataclasses import dataclass

import numpy as np

from revenue_engine.config import DEFAULT_SETTINGS, ApsSettings
from revenue_engine.models import MarketData, PropertyData


@dataclass(frozen=True)
class CoreMetrics:
    """All core formula outputs for one run."""
    performance_index: float
    previous_aps: float
    new_aps: float
    annual_target: float
    min_price: float
    max_price: float
    dynamic_centroid: float
    base_price: float

    def to_dict(self) -> dict:
        return {
            'performance_index': self.performance_index,
            'previous_aps': self.previous_aps,
            'new_aps': self.new_aps,
            'annual_target': self.annual_target,
            'min_price': self.min_price,
            'max_price': self.max_price,
            'dynamic_centroid': self.dynamic_centroid,
            'base_price': self.base_price,
        }


def calculate_performance_index(my_revpar: float, market_revpar: float) -> float:
    if market_revpar <= 0:
        return 1.0
    return my_revpar / market_revpar


def calculate_new_aps(
    previous_aps: float,
    performance_index: float,
    aps: ApsSettings = DEFAULT_SETTINGS.aps
) -> float:
    """
    Blend the previous APS with the current performance index.

    70% history / 30% current signal, clamped to [APS_MIN, APS_MAX] so a
    single strong or weak month cannot run pricing away.
    """
    blended = previous_aps * aps.history_weight + performance_index * aps.index_weight
    return float(np.clip(blended, aps.aps_min, aps.aps_max))


def calculate_annual_target(total_market_annual_revpar: float, aps: float) -> float:
    return total_market_annual_revpar * aps


def calculate_min_price(market_20th_pctl_adr: float, last_year_lowest_sold: float) -> float:
    """Price floor: never below either the market P20 or last year's lowest sale."""
    return max(market_20th_pctl_adr, last_year_lowest_sold)


def calculate_max_price(
    peak_future_adr: float,
    aps: float,
    peak_adr_multiplier: float = DEFAULT_SETTINGS.aps.peak_adr_multiplier
) -> float:
    return peak_future_adr * aps * peak_adr_multiplier


def calculate_dynamic_centroid(avg_future_market_adr: float, aps: float) -> float:
    return avg_future_market_adr * aps


def calculate_base_price(avg_adr: float, aps: float) -> float:
    return avg_adr * aps


def compute_core_metrics(
    property_data: PropertyData,
    market_data: MarketData,
    previous_aps: float,
    aps: ApsSettings = DEFAULT_SETTINGS.aps
) -> CoreMetrics:
    """
    Run every core formula for one property against its market.

    Args:
        property_data: Subject property metrics
        market_data: Comparable market metrics
        previous_aps: APS carried over from the last run
        aps: APS bounds and weights

    Returns:
        CoreMetrics with the new APS and derived price bounds
    """
    index = calculate_performance_index(property_data.my_revpar, market_data.market_revpar)
    new_aps = calculate_new_aps(previous_aps, index, aps)

    return CoreMetrics(
        performance_index=index,
        previous_aps=previous_aps,
        new_aps=new_aps,
        annual_target=calculate_annual_target(market_data.total_market_annual_revpar, new_aps),
        min_price=calculate_min_price(
            market_data.market_20th_pctl_adr, property_data.last_year_lowest_sold
        ),
        max_price=calculate_max_price(market_data.peak_future_adr, new_aps, aps.peak_adr_multiplier),
        dynamic_centroid=calculate_dynamic_centroid(market_data.avg_future_market_adr, new_aps),
        base_price=calculate_base_price(market_data.avg_adr, new_aps),
    )
