"""
Unit Tests for the Gemini client and the clinical advisor.
"""
import pytest
from unittest.mock import MagicMock, AsyncMock

from healthrisk.core.inference.risk_engine import RiskEngine
from healthrisk.core.llm.advisor import (
    ClinicalAdvisor,
    build_guidance_prompt,
    build_root_cause_prompt,
    CLINICAL_ADVISOR_INSTRUCTION,
    GUIDANCE_EMPTY_FALLBACK,
    GUIDANCE_OFFLINE_FALLBACK,
    ROOT_CAUSE_EMPTY_FALLBACK,
    ROOT_CAUSE_OFFLINE_FALLBACK,
)
from healthrisk.core.llm.gemini_client import GeminiClient, GeminiConfig, GeminiResponse
from healthrisk.models.assessment import AssessmentData

DEMO = {
    "age": 45,
    "gender": "male",
    "pincode_city": "Delhi",
    "income": "low",
    "education": "high_school",
    "healthcareAccess": 45,
    "environment": "industrial",
    "diet": 2,
    "smoking": "current_light",
    "exercise": "none",
    "sleep": 6,
    "bmi": 29,
    "chronicDisease": True,
    "bloodPressure": "pre_hypertension",
}


@pytest.fixture
def data() -> AssessmentData:
    return AssessmentData.parse(DEMO)


@pytest.fixture
def result(data):
    return RiskEngine().evaluate(data)


def client_returning(response: GeminiResponse) -> MagicMock:
    client = MagicMock(spec=GeminiClient)
    client.generate.return_value = response
    client.generate_async = AsyncMock(return_value=response)
    return client


class TestGeminiClient:

    def test_no_api_key_runs_in_mock_mode(self):
        client = GeminiClient(GeminiConfig(api_key=None))

        response = client.generate("Explain this risk score")

        assert client.is_available is False
        assert response.is_mock is True
        assert response.ok is False

    def test_forced_mock_mode(self):
        client = GeminiClient(GeminiConfig(api_key="test-key", use_mock=True))
        assert client.is_available is False

    def test_generation_error_is_returned_not_raised(self):
        client = GeminiClient(GeminiConfig(api_key=None))
        client._initialized = True
        client._llm = MagicMock()
        client._llm.invoke.side_effect = RuntimeError("quota exceeded")

        response = client.generate("prompt")

        assert response.error == "quota exceeded"
        assert response.ok is False

    def test_generation_success(self):
        client = GeminiClient(GeminiConfig(api_key=None, model="gemini-test"))
        client._initialized = True
        client._llm = MagicMock()
        client._llm.invoke.return_value = MagicMock(
            content="All good.", usage_metadata={"input_tokens": 12, "output_tokens": 3}
        )

        response = client.generate("prompt", system_instruction="be kind")

        assert response.ok is True
        assert response.text == "All good."
        assert response.completion_tokens == 3
        messages = client._llm.invoke.call_args[0][0]
        assert messages[0] == ("system", "be kind")
        assert client.request_count == 1


class TestPrompts:

    def test_guidance_prompt_carries_result(self, result, data):
        prompt = build_guidance_prompt(result, data)

        assert "69/100" in prompt
        assert "Risk Category: High" in prompt
        assert "Socio-economic (24%)" in prompt
        assert "45y male" in prompt
        assert "BP: pre_hypertension" in prompt

    def test_root_cause_prompt(self, result):
        prompt = build_root_cause_prompt(result)
        assert "High risk score of 69" in prompt
        assert "Socio-economic, Behavioral Habits, Clinical Indicators" in prompt


class TestClinicalAdvisor:

    def test_guidance_text(self, result, data):
        guidance = client_returning(GeminiResponse(text="  1. Health Summary ...  ", model="m"))
        advisor = ClinicalAdvisor(guidance_client=guidance, root_cause_client=MagicMock())

        assert advisor.get_guidance(result, data) == "1. Health Summary ..."
        _, kwargs = guidance.generate.call_args
        assert kwargs["system_instruction"] == CLINICAL_ADVISOR_INSTRUCTION

    def test_guidance_empty_text_fallback(self, result, data):
        advisor = ClinicalAdvisor(
            guidance_client=client_returning(GeminiResponse(text="", model="m")),
            root_cause_client=MagicMock(),
        )
        assert advisor.get_guidance(result, data) == GUIDANCE_EMPTY_FALLBACK

    def test_guidance_error_fallback(self, result, data):
        advisor = ClinicalAdvisor(
            guidance_client=client_returning(GeminiResponse(text="", model="mock", error="timeout")),
            root_cause_client=MagicMock(),
        )
        assert advisor.get_guidance(result, data) == GUIDANCE_OFFLINE_FALLBACK

    def test_root_cause_mock_fallback(self, result):
        advisor = ClinicalAdvisor(
            guidance_client=MagicMock(),
            root_cause_client=client_returning(GeminiResponse(text="", model="mock", is_mock=True)),
        )
        assert advisor.get_root_cause(result) == ROOT_CAUSE_OFFLINE_FALLBACK

    def test_root_cause_empty_fallback(self, result):
        advisor = ClinicalAdvisor(
            guidance_client=MagicMock(),
            root_cause_client=client_returning(GeminiResponse(text="   ", model="m")),
        )
        assert advisor.get_root_cause(result) == ROOT_CAUSE_EMPTY_FALLBACK

    @pytest.mark.asyncio
    async def test_async_variants(self, result, data):
        advisor = ClinicalAdvisor(
            guidance_client=client_returning(GeminiResponse(text="Dossier", model="m")),
            root_cause_client=client_returning(GeminiResponse(text="Smoking and no exercise.", model="m")),
        )

        assert await advisor.get_guidance_async(result, data) == "Dossier"
        assert await advisor.get_root_cause_async(result, data) == "Smoking and no exercise."
