"""
Inference Module

Computes public-health risk scores from screening questionnaires.
"""
from .weights import RiskWeights, WeightTable
from .risk_engine import (
    RiskEngine,
    RiskResult,
    RiskCategory,
    RiskBreakdown,
    FactorContribution,
)

__all__ = [
    "RiskEngine",
    "RiskResult",
    "RiskCategory",
    "RiskBreakdown",
    "FactorContribution",
    "RiskWeights",
    "WeightTable",
]
