"""
Revenue Decision Engine.

Modules:
- config: Thresholds, operating modes and EngineSettings
- models: Market/property records and recommendation types
- data: Data-source interfaces, fallback records and KPI aggregation
- recommender: Core formulas, comparable selection, monthly error
  forecasting, weekly bell-curve audit and promotion scan
"""
from .config import EngineSettings
from .models import ComparableFilters, MarketData, PropertyData
from .recommender.engine import EngineResult, RevenueEngine

__all__ = [
    'EngineSettings',
    'ComparableFilters',
    'MarketData',
    'PropertyData',
    'EngineResult',
    'RevenueEngine',
]
