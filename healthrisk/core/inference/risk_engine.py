"""
Risk Engine Module

Computes a bounded 0-100 public-health risk score from a screening
questionnaire, classifies it and decomposes it into three weighted
sub-factor contributions (social, lifestyle, medical).

The computation is pure: no I/O, no shared state. Only the timestamp
depends on the wall clock.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Dict, Any, List, Optional, Callable, Union, Mapping
from enum import Enum
import time
import numpy as np

from healthrisk.core.inference.weights import RiskWeights
from healthrisk.models.assessment import AssessmentData

# (breakdown key, factor label, factor category) in tie-break order
FACTOR_DOMAINS = (
    ("social", "Socio-economic", "Social"),
    ("lifestyle", "Behavioral Habits", "Lifestyle"),
    ("medical", "Clinical Indicators", "Medical"),
)

SCORE_MIN = 0
SCORE_MAX = 100


def round_half_away(value: float) -> int:
    """
    Round to the nearest integer, ties away from zero.

    The value is first normalised to 9 decimal places so that binary
    floating-point error (68.49999999999999 for a true 68.5) does not
    change which side of a tie it lands on.
    """
    normalised = Decimal(repr(round(value, 9)))
    with localcontext() as ctx:
        # Enough digits for any finite float (max ~1.8e308)
        ctx.prec = 400
        return int(normalised.quantize(Decimal(1), rounding=ROUND_HALF_UP))


class RiskCategory(str, Enum):
    """Ordinal risk classification of the final score."""
    LOW = "Low"
    MODERATE = "Moderate"
    HIGH = "High"
    CRITICAL = "Critical"

    @classmethod
    def from_score(cls, score: float) -> "RiskCategory":
        """Convert clamped score (0-100) to category."""
        if score >= 81:
            return cls.CRITICAL
        elif score >= 61:
            return cls.HIGH
        elif score >= 41:
            return cls.MODERATE
        else:
            return cls.LOW


@dataclass(frozen=True)
class FactorContribution:
    """Named, ranked view of one sub-score."""
    factor: str
    contribution: int
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factor": self.factor,
            "contribution": self.contribution,
            "category": self.category,
        }


@dataclass(frozen=True)
class RiskBreakdown:
    """Sub-scores x 100, each rounded on its own."""
    social: int
    lifestyle: int
    medical: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "social": self.social,
            "lifestyle": self.lifestyle,
            "medical": self.medical,
        }


@dataclass(frozen=True)
class RiskResult:
    """
    Result of one evaluation.

    `breakdown` and `factor_contributions` are rounded independently from
    `score` and are not guaranteed to sum to it.
    """
    score: int
    category: RiskCategory
    emergency_flag: bool
    timestamp: int  # epoch milliseconds
    breakdown: RiskBreakdown
    factor_contributions: List[FactorContribution] = field(default_factory=list)
    id: Optional[str] = None

    def with_id(self, record_id: str) -> "RiskResult":
        """Copy of this result carrying a storage id."""
        return RiskResult(
            score=self.score,
            category=self.category,
            emergency_flag=self.emergency_flag,
            timestamp=self.timestamp,
            breakdown=self.breakdown,
            factor_contributions=list(self.factor_contributions),
            id=record_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with wire (camelCase) field names."""
        result = {
            "score": self.score,
            "category": self.category.value,
            "emergencyFlag": self.emergency_flag,
            "timestamp": self.timestamp,
            "breakdown": self.breakdown.to_dict(),
            "factorContributions": [f.to_dict() for f in self.factor_contributions],
        }
        if self.id is not None:
            result["id"] = self.id
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RiskResult":
        """Rebuild a result from its serialized form."""
        return cls(
            score=int(data["score"]),
            category=RiskCategory(data["category"]),
            emergency_flag=bool(data["emergencyFlag"]),
            timestamp=int(data["timestamp"]),
            breakdown=RiskBreakdown(**data["breakdown"]),
            factor_contributions=[
                FactorContribution(
                    factor=f["factor"],
                    contribution=f["contribution"],
                    category=f["category"],
                )
                for f in data.get("factorContributions", [])
            ],
            id=data.get("id"),
        )


class RiskEngine:
    """
    Linear public-health risk scoring engine.

    Three independent weighted sub-scores (social, lifestyle, medical) are
    summed, scaled to 0-100, rounded and clamped. Numeric answers are used
    as given, without range clamping, so out-of-range answers push their
    sub-score outside its usual band.
    """

    def __init__(
        self,
        weights: Optional[RiskWeights] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Args:
            weights: Weight configuration, defaults to RiskWeights.default()
            clock: Returns epoch seconds, defaults to time.time
        """
        self.weights = weights or RiskWeights.default()
        self._clock = clock or time.time

    def social_score(self, data: AssessmentData) -> float:
        """Socio-economic sub-score as a fraction of the raw score."""
        w = self.weights.social
        score = 0.0
        score += w.income.lookup(data.income) * w.income_slot
        score += w.education.lookup(data.education) * w.education_slot
        score += w.environment.lookup(data.environment) * w.environment_slot
        score += (data.healthcare_access / w.access_max_minutes) * w.access_slot
        return score

    def lifestyle_score(self, data: AssessmentData) -> float:
        """Behavioural sub-score. Sleep above the ideal lowers it."""
        w = self.weights.lifestyle
        score = 0.0
        score += (1 - data.diet / w.diet_scale) * w.diet_slot
        score += w.smoking.lookup(data.smoking) * w.smoking_slot
        score += (1 - data.sleep / w.ideal_sleep_hours) * w.sleep_slot
        score += w.exercise.lookup(data.exercise) * w.exercise_slot
        return score

    def medical_score(self, data: AssessmentData) -> float:
        """Clinical-indicator sub-score."""
        w = self.weights.medical
        score = 0.0
        if data.bmi > w.obese_bmi:
            score += w.obese_weight
        if w.overweight_bmi < data.bmi <= w.obese_bmi:
            score += w.overweight_weight
        if data.chronic_disease:
            score += w.chronic_disease_weight
        score += w.blood_pressure.lookup(data.blood_pressure)
        return score

    def evaluate(self, data: Union[AssessmentData, Mapping[str, Any]]) -> RiskResult:
        """
        Score one assessment.

        Args:
            data: AssessmentData or a raw mapping in wire format

        Returns:
            RiskResult

        Raises:
            InvalidInput: if a raw mapping is missing fields or has wrong types
        """
        data = AssessmentData.parse(data)

        sub_scores = {
            "social": self.social_score(data),
            "lifestyle": self.lifestyle_score(data),
            "medical": self.medical_score(data),
        }

        raw = sum(sub_scores.values())
        score = int(np.clip(round_half_away(raw * 100), SCORE_MIN, SCORE_MAX))
        category = RiskCategory.from_score(score)

        contributions = {key: round_half_away(value * 100) for key, value in sub_scores.items()}

        # sorted() is stable, so equal contributions keep FACTOR_DOMAINS order
        factors = sorted(
            (
                FactorContribution(factor=label, contribution=contributions[key], category=domain)
                for key, label, domain in FACTOR_DOMAINS
            ),
            key=lambda f: f.contribution,
            reverse=True,
        )

        return RiskResult(
            score=score,
            category=category,
            emergency_flag=score >= 81,
            timestamp=int(self._clock() * 1000),
            breakdown=RiskBreakdown(**contributions),
            factor_contributions=factors,
        )
