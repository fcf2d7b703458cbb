"""
Unit Tests for the Risk Engine

Scoring arithmetic, categorisation, clamping and factor ranking.
"""
import pytest

from healthrisk.core.errors import InvalidInput
from healthrisk.core.inference import (
    RiskEngine, RiskResult, RiskCategory, RiskBreakdown, FactorContribution, RiskWeights
)
from healthrisk.core.inference.risk_engine import round_half_away
from healthrisk.core.inference.weights import MedicalWeights
from healthrisk.models.assessment import AssessmentData

FIXED_EPOCH_SECONDS = 1_700_000_000.0


# Fixtures
@pytest.fixture
def engine() -> RiskEngine:
    return RiskEngine(clock=lambda: FIXED_EPOCH_SECONDS)


@pytest.fixture
def good_profile() -> dict:
    """Baseline low-risk profile."""
    return {
        "income": "high",
        "education": "postgraduate",
        "environment": "rural_clean",
        "healthcareAccess": 5,
        "diet": 5,
        "smoking": "never",
        "sleep": 8,
        "exercise": "daily",
        "bmi": 22,
        "chronicDisease": False,
        "bloodPressure": "normal",
    }


@pytest.fixture
def demo_profile() -> dict:
    """High-risk demo profile from the questionnaire."""
    return {
        "age": 45,
        "gender": "male",
        "pincode_city": "Delhi",
        "income": "low",
        "education": "high_school",
        "housing": "poor",
        "healthcareAccess": 45,
        "environment": "industrial",
        "diet": 2,
        "smoking": "current_light",
        "alcohol": "frequent",
        "exercise": "none",
        "water": 2,
        "sleep": 6,
        "meditation": "none",
        "bmi": 29,
        "chronicDisease": True,
        "familyHistory": "heart_disease",
        "bloodPressure": "pre_hypertension",
        "diabetes": "pre_diabetic",
    }


def worst_case_profile(healthcare_access: float) -> dict:
    """Raw score = 0.73 + healthcare_access / 1200."""
    return {
        "income": "very_low",
        "education": "none",
        "environment": "industrial",
        "healthcareAccess": healthcare_access,
        "diet": 1,
        "smoking": "current_heavy",
        "sleep": 8,
        "exercise": "none",
        "bmi": 31,
        "chronicDisease": True,
        "bloodPressure": "normal",
    }


class TestRiskCategory:
    """Tests for RiskCategory thresholds."""

    @pytest.mark.parametrize("score,expected", [
        (0, RiskCategory.LOW),
        (40, RiskCategory.LOW),
        (41, RiskCategory.MODERATE),
        (60, RiskCategory.MODERATE),
        (61, RiskCategory.HIGH),
        (80, RiskCategory.HIGH),
        (81, RiskCategory.CRITICAL),
        (100, RiskCategory.CRITICAL),
    ])
    def test_boundaries(self, score, expected):
        assert RiskCategory.from_score(score) == expected

    def test_values_match_wire_format(self):
        assert [c.value for c in RiskCategory] == ["Low", "Moderate", "High", "Critical"]


class TestRounding:
    """Tests for half-away-from-zero rounding."""

    def test_ties_round_away_from_zero(self):
        assert round_half_away(68.5) == 69
        assert round_half_away(-2.5) == -3
        assert round_half_away(0.5) == 1

    def test_float_noise_does_not_move_ties(self):
        assert round_half_away(68.49999999999999) == 69
        assert round_half_away(80.50000000000001) == 81

    def test_non_ties(self):
        assert round_half_away(24.25) == 24
        assert round_half_away(3.4166) == 3
        assert round_half_away(-119.9) == -120


class TestScenarios:
    """Reference profiles with hand-computed expectations."""

    def test_good_profile(self, engine, good_profile):
        """Baseline profile lands near zero."""
        result = engine.evaluate(good_profile)

        assert result.breakdown == RiskBreakdown(social=3, lifestyle=0, medical=0)
        assert result.score == 3
        assert result.category == RiskCategory.LOW
        assert result.emergency_flag is False

    def test_demo_profile(self, engine, demo_profile):
        """social 24.25 + lifestyle 24.25 + medical 20 = 68.5 -> 69."""
        result = engine.evaluate(demo_profile)

        assert result.score == 69
        assert result.category == RiskCategory.HIGH
        assert result.emergency_flag is False
        assert result.breakdown == RiskBreakdown(social=24, lifestyle=24, medical=20)

    def test_sub_scores_of_demo_profile(self, engine, demo_profile):
        data = AssessmentData.parse(demo_profile)
        assert engine.social_score(data) == pytest.approx(0.2425)
        assert engine.lifestyle_score(data) == pytest.approx(0.2425)
        assert engine.medical_score(data) == pytest.approx(0.20)

    def test_raw_exactly_081_is_critical(self, engine):
        result = engine.evaluate(worst_case_profile(96))

        assert result.score == 81
        assert result.category == RiskCategory.CRITICAL
        assert result.emergency_flag is True

    def test_raw_080_is_high(self, engine):
        result = engine.evaluate(worst_case_profile(84))

        assert result.score == 80
        assert result.category == RiskCategory.HIGH
        assert result.emergency_flag is False

    def test_half_point_rounds_into_critical(self, engine):
        """Raw 0.805 rounds to 81."""
        result = engine.evaluate(worst_case_profile(90))
        assert result.score == 81
        assert result.category == RiskCategory.CRITICAL


class TestBreakdown:
    """Breakdown is rounded independently of the final score."""

    def test_breakdown_does_not_sum_to_score(self, engine, demo_profile):
        result = engine.evaluate(demo_profile)
        b = result.breakdown

        assert b.social + b.lifestyle + b.medical == 68
        assert result.score == 69

    def test_factor_contributions_mirror_breakdown(self, engine, demo_profile):
        result = engine.evaluate(demo_profile)
        by_category = {f.category: f.contribution for f in result.factor_contributions}

        assert by_category == {"Social": 24, "Lifestyle": 24, "Medical": 20}

    def test_breakdown_not_clamped(self, engine, good_profile):
        """Oversleeping drives lifestyle negative while the score clamps at 0."""
        profile = dict(good_profile, sleep=200)
        result = engine.evaluate(profile)

        assert result.breakdown.lifestyle == -120
        assert result.score == 0


class TestClamping:
    """Final score is always within 0-100."""

    def test_clamps_at_100(self, engine):
        profile = dict(worst_case_profile(96), diet=-20)
        result = engine.evaluate(profile)

        assert result.score == 100
        assert result.category == RiskCategory.CRITICAL
        assert result.emergency_flag is True

    def test_clamps_at_0(self, engine, good_profile):
        result = engine.evaluate(dict(good_profile, sleep=200))
        assert result.score == 0
        assert result.category == RiskCategory.LOW

    def test_healthcare_access_not_capped(self, engine, good_profile):
        """240 minutes contributes twice the 120-minute slot."""
        result = engine.evaluate(dict(good_profile, healthcareAccess=240))
        assert result.breakdown.social == 23

    @pytest.mark.parametrize("overrides", [
        {"healthcareAccess": 10_000},
        {"diet": -1_000},
        {"sleep": 10_000},
        {"bmi": -5},
        {"diet": 0, "sleep": 0},
        {"healthcareAccess": 1e30},
        {"sleep": 1e30},
        {"diet": -1e30},
        {"healthcareAccess": 1e300, "sleep": 1e300},
    ])
    def test_score_always_in_range(self, engine, good_profile, overrides):
        result = engine.evaluate(dict(good_profile, **overrides))
        assert 0 <= result.score <= 100

    @pytest.mark.parametrize("overrides,expected", [
        ({"healthcareAccess": 1e30}, 100),
        ({"diet": -1e30}, 100),
        ({"sleep": 1e30}, 0),
    ])
    def test_huge_answers_clamp_instead_of_raising(self, engine, good_profile, overrides, expected):
        result = engine.evaluate(dict(good_profile, **overrides))
        assert result.score == expected


class TestLargeValueRounding:

    def test_values_beyond_default_decimal_precision(self):
        assert round_half_away(1e32) == 10 ** 32
        assert round_half_away(-1e35) == -(10 ** 35)


class TestFactorContributions:
    """Ranking of the three domains."""

    def test_exactly_three_domains(self, engine, demo_profile):
        result = engine.evaluate(demo_profile)

        assert len(result.factor_contributions) == 3
        assert {f.factor for f in result.factor_contributions} == {
            "Socio-economic", "Behavioral Habits", "Clinical Indicators"
        }

    def test_sorted_descending(self, engine, good_profile):
        result = engine.evaluate(dict(good_profile, sleep=200))
        contributions = [f.contribution for f in result.factor_contributions]

        assert contributions == sorted(contributions, reverse=True)
        assert [f.factor for f in result.factor_contributions] == [
            "Socio-economic", "Clinical Indicators", "Behavioral Habits"
        ]

    def test_ties_keep_insertion_order(self, engine, demo_profile):
        """Social and lifestyle tie at 24; social stays first."""
        result = engine.evaluate(demo_profile)

        assert result.factor_contributions == [
            FactorContribution("Socio-economic", 24, "Social"),
            FactorContribution("Behavioral Habits", 24, "Lifestyle"),
            FactorContribution("Clinical Indicators", 20, "Medical"),
        ]

    def test_all_zero_keeps_insertion_order(self, engine):
        """A profile scoring zero in every domain."""
        profile = {
            "income": "very_high",
            "education": "postgraduate",
            "environment": "rural_clean",
            "healthcareAccess": -12,  # cancels the rural_clean weight
            "diet": 5,
            "smoking": "never",
            "sleep": 8,
            "exercise": "daily",
            "bmi": 20,
            "chronicDisease": False,
            "bloodPressure": "normal",
        }
        result = engine.evaluate(profile)

        assert [f.contribution for f in result.factor_contributions] == [0, 0, 0]
        assert [f.category for f in result.factor_contributions] == ["Social", "Lifestyle", "Medical"]


class TestUnknownAnswers:
    """Unknown answers fall back to table defaults."""

    def test_unknown_income_uses_half_weight(self, engine, good_profile):
        data = AssessmentData.parse(dict(good_profile, income="prefer_not_to_say"))
        w = engine.weights.social

        assert w.income.lookup(data.income) * w.income_slot == pytest.approx(0.05)
        assert engine.social_score(data) == pytest.approx(0.05 + 0.01 + 5 / 1200)

    def test_unknown_smoking_and_blood_pressure_add_nothing(self, engine, good_profile):
        baseline = engine.evaluate(good_profile)
        result = engine.evaluate(dict(good_profile, smoking="vape", bloodPressure="unmeasured"))

        assert result.breakdown == baseline.breakdown

    def test_unknown_exercise_uses_half_weight(self, engine, good_profile):
        result = engine.evaluate(dict(good_profile, exercise="sometimes"))
        assert result.breakdown.lifestyle == 5

    def test_zero_weight_answers_are_not_defaults(self, engine, good_profile):
        """very_high income weighs 0.0, not the 0.5 default."""
        very_high = engine.evaluate(dict(good_profile, income="very_high"))
        high = engine.evaluate(good_profile)

        assert very_high.breakdown.social == high.breakdown.social - 2


class TestBmiBands:

    @pytest.mark.parametrize("bmi,expected", [
        (25, 0.0),
        (25.1, 0.05),
        (30, 0.05),
        (30.1, 0.10),
    ])
    def test_bmi_band_edges(self, engine, good_profile, bmi, expected):
        data = AssessmentData.parse(dict(good_profile, bmi=bmi))
        assert engine.medical_score(data) == pytest.approx(expected)


class TestDeterminism:

    def test_identical_input_identical_output(self, good_profile, demo_profile):
        ticks = iter([1.0, 2.0])
        engine = RiskEngine(clock=lambda: next(ticks))

        first = engine.evaluate(demo_profile)
        second = engine.evaluate(demo_profile)

        assert first.timestamp != second.timestamp
        assert first.score == second.score
        assert first.category == second.category
        assert first.emergency_flag == second.emergency_flag
        assert first.breakdown == second.breakdown
        assert first.factor_contributions == second.factor_contributions

    def test_timestamp_is_epoch_milliseconds(self, engine, good_profile):
        assert engine.evaluate(good_profile).timestamp == 1_700_000_000_000

    def test_unscored_fields_do_not_change_result(self, engine, demo_profile):
        changed = dict(
            demo_profile,
            age=80, gender="female", housing="good", alcohol="none",
            water=8, meditation="daily", familyHistory="none", diabetes="no",
            pincode_city="Pune",
        )
        assert engine.evaluate(changed).breakdown == engine.evaluate(demo_profile).breakdown
        assert engine.evaluate(changed).score == engine.evaluate(demo_profile).score


class TestCustomWeights:

    def test_engine_uses_injected_weights(self):
        weights = RiskWeights(medical=MedicalWeights(chronic_disease_weight=0.0))
        engine = RiskEngine(weights=weights)

        result = engine.evaluate(worst_case_profile(96))

        assert result.breakdown.medical == 10
        assert result.score == 71
        assert result.category == RiskCategory.HIGH


class TestBoundaryValidation:

    def test_missing_field_raises_invalid_input(self, engine, good_profile):
        profile = dict(good_profile)
        del profile["bmi"]

        with pytest.raises(InvalidInput) as exc_info:
            engine.evaluate(profile)
        assert exc_info.value.error_code == "INVALID_INPUT"
        assert any(err["loc"] == ["bmi"] for err in exc_info.value.errors)

    def test_string_for_number_raises_invalid_input(self, engine, good_profile):
        with pytest.raises(InvalidInput):
            engine.evaluate(dict(good_profile, healthcareAccess="45"))

    def test_non_mapping_raises_invalid_input(self, engine):
        with pytest.raises(InvalidInput):
            engine.evaluate(["not", "an", "assessment"])

    def test_accepts_assessment_data_instance(self, engine, demo_profile):
        data = AssessmentData.parse(demo_profile)
        assert engine.evaluate(data).score == 69


class TestRiskResultSerialization:

    def test_to_dict_uses_wire_names(self, engine, demo_profile):
        d = engine.evaluate(demo_profile).to_dict()

        assert set(d) == {"score", "category", "emergencyFlag", "timestamp", "breakdown", "factorContributions"}
        assert d["category"] == "High"
        assert d["breakdown"] == {"social": 24, "lifestyle": 24, "medical": 20}
        assert d["factorContributions"][0] == {
            "factor": "Socio-economic", "contribution": 24, "category": "Social"
        }

    def test_stored_record_round_trip(self, engine, demo_profile):
        result = engine.evaluate(demo_profile).with_id("ASM-1234ABCD")
        restored = RiskResult.from_dict(result.to_dict())

        assert restored == result
        assert restored.to_dict()["id"] == "ASM-1234ABCD"
