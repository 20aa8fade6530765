"""Revenue recommendation logic.

Main entry point: engine.RevenueEngine
"""
from .engine import EngineResult, RevenueEngine

__all__ = ['EngineResult', 'RevenueEngine']
