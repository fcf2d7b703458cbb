"""
Risk Weight Tables

Every weight and slot multiplier used by the RiskEngine lives here so that
weight changes can be made and tested without touching scoring control flow.

Categorical weights are expressed on a 0-1 "how risky is this answer" scale
and multiplied by the slot weight of their factor. Slot weights are fractions
of the final 0-1 raw score.
"""
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, Mapping


@dataclass(frozen=True)
class WeightTable:
    """Lookup table from questionnaire answer to risk weight."""
    weights: Mapping[str, float]
    default: float

    def lookup(self, key: str) -> float:
        """Weight for an answer; unknown answers get the table default.

        A stored weight of 0.0 is returned as-is.
        """
        return self.weights.get(key, self.default)


def _table(default: float, **weights: float) -> WeightTable:
    return WeightTable(weights=dict(weights), default=default)


@dataclass(frozen=True)
class SocialWeights:
    income: WeightTable = field(default_factory=lambda: _table(
        0.5, very_low=1.0, low=0.8, medium=0.5, high=0.2, very_high=0.0
    ))
    education: WeightTable = field(default_factory=lambda: _table(
        0.5, none=1.0, primary=0.8, high_school=0.5, graduate=0.2, postgraduate=0.0
    ))
    environment: WeightTable = field(default_factory=lambda: _table(
        0.5, industrial=1.0, crowded_urban=0.8, urban=0.6, semi_urban=0.4, rural_clean=0.1
    ))
    income_slot: float = 0.10
    education_slot: float = 0.05
    environment_slot: float = 0.10
    access_slot: float = 0.10
    access_max_minutes: float = 120.0  # Normaliser only, values above it are not capped


@dataclass(frozen=True)
class LifestyleWeights:
    smoking: WeightTable = field(default_factory=lambda: _table(
        0.0, current_heavy=1.0, current_light=0.7, former=0.4, never=0.0
    ))
    exercise: WeightTable = field(default_factory=lambda: WeightTable(
        weights={"none": 1.0, "1-2_days": 0.7, "3-5_days": 0.3, "daily": 0.0},
        default=0.5,
    ))
    diet_slot: float = 0.10
    diet_scale: float = 5.0
    smoking_slot: float = 0.10
    sleep_slot: float = 0.05
    ideal_sleep_hours: float = 8.0
    exercise_slot: float = 0.10


@dataclass(frozen=True)
class MedicalWeights:
    # Blood pressure weights are absolute contributions, not slot fractions
    blood_pressure: WeightTable = field(default_factory=lambda: _table(
        0.0, hypertension=0.10, pre_hypertension=0.05, normal=0.0
    ))
    obese_bmi: float = 30.0
    obese_weight: float = 0.10
    overweight_bmi: float = 25.0
    overweight_weight: float = 0.05
    chronic_disease_weight: float = 0.10


@dataclass(frozen=True)
class RiskWeights:
    """Complete weight configuration owned by a RiskEngine."""
    social: SocialWeights = field(default_factory=SocialWeights)
    lifestyle: LifestyleWeights = field(default_factory=LifestyleWeights)
    medical: MedicalWeights = field(default_factory=MedicalWeights)

    @classmethod
    def default(cls) -> "RiskWeights":
        """Weights used by the published screening questionnaire."""
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary."""
        return asdict(self)
