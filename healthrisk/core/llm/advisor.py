"""
Clinical Advisor

Turns a RiskResult and its questionnaire into patient-facing advisory text
through Gemini. Advisory copy is non-decisional: the score always comes from
the RiskEngine, and any LLM failure degrades to a fixed fallback string.
"""
from typing import Optional

from healthrisk.config import settings
from healthrisk.core.inference.risk_engine import RiskResult
from healthrisk.core.llm.gemini_client import GeminiClient, GeminiConfig
from healthrisk.models.assessment import AssessmentData
from healthrisk.utils import get_logger

logger = get_logger(__name__)

GUIDANCE_EMPTY_FALLBACK = "Assessment complete. Please consult a professional for a detailed breakdown."
GUIDANCE_OFFLINE_FALLBACK = "The AI Advisory board is temporarily offline. Please review your quantitative scores."
ROOT_CAUSE_EMPTY_FALLBACK = (
    "Your current risk is influenced by a combination of environmental and clinical indicators."
)
ROOT_CAUSE_OFFLINE_FALLBACK = "Factors analysis pending."

CLINICAL_ADVISOR_INSTRUCTION = """
You are a Senior Clinical Decision Support AI and Preventive Healthcare Advisor.
Your task is to generate safe, evidence-based, personalized health recommendations
based on a user's health condition, lifestyle, and risk prediction results.

CORE OBJECTIVES:
1. Analyze the user's health risks and current conditions.
2. Prioritize recommendations based on severity and urgency.
3. Provide clear, actionable, and non-alarming guidance.
4. Adapt recommendations to the user's lifestyle feasibility.
5. Avoid diagnosis; focus on guidance and prevention.

OUTPUT STRUCTURE (STRICTLY FOLLOW THIS FORMAT):
1. Health Summary: Brief, plain-language explanation of current health status and key risk factors.
2. Priority Level: Classify as Low/Moderate/High and explain why in one sentence.
3. Nutrition Recommendations: Foods to include/avoid, portion control, cultural adaptability.
4. Physical Activity Plan: Type, frequency, duration, beginner-friendly options.
5. Mental & Lifestyle Guidance: Stress, sleep, substance use guidance.
6. Medication & Medical Follow-Up: When to see a doctor, routine tests, warning signs (NON-PRESCRIPTIVE).
7. Nearby Care & Support: Hospital/Specialist suggestions if risk is high.
8. Explainability: Explain how the top factors influenced the score using simple cause-and-effect statements.
9. Daily / Weekly Action Plan: Bullet-point checklist of realistic goals.
10. Safety Disclaimer: State this is not a diagnosis.

RULES:
- Do NOT prescribe drugs or dosages.
- Do NOT make absolute medical claims.
- Use empathetic, supportive, and motivating language.
- Keep language simple.
- NO fear-based messaging.
"""


def _format_drivers(result: RiskResult) -> str:
    return ", ".join(f"{f.factor} ({f.contribution}%)" for f in result.factor_contributions)


def build_guidance_prompt(result: RiskResult, data: AssessmentData) -> str:
    """Prompt for the full 10-point clinical dossier."""
    age = f"{data.age}y" if data.age is not None else "Age unknown"
    return f"""
GENERATE CLINICAL DOSSIER FOR:
- User Profile: {age} {data.gender or 'unspecified'}, Location: {data.pincode_city or 'Not provided'}
- Quantitative Risk Score: {result.score}/100
- Risk Category: {result.category.value}
- Key Drivers Found by Model: {_format_drivers(result)}

DETAILED INDICATORS:
- BMI: {data.bmi}
- BP: {data.blood_pressure}
- Smoking: {data.smoking}
- Income/Education: {data.income}/{data.education}
- Environment: {data.environment}

Please provide the full 10-point dossier. Focus heavily on Section 8 (Explainability)
to tell the user the "base reason" for their risk.
"""


def build_root_cause_prompt(result: RiskResult) -> str:
    """Prompt for a one-sentence base reason."""
    factors = ", ".join(f.factor for f in result.factor_contributions)
    return (
        f"Based on a {result.category.value} risk score of {result.score} and factors {factors}, "
        f'state in ONE sentence the "base reason" for this risk in simple terms for the patient.'
    )


class ClinicalAdvisor:
    """Generates advisory copy for a scored assessment."""

    def __init__(
        self,
        guidance_client: Optional[GeminiClient] = None,
        root_cause_client: Optional[GeminiClient] = None
    ):
        self.guidance_client = guidance_client or GeminiClient(
            GeminiConfig.from_settings(model=settings.advisor_model)
        )
        self.root_cause_client = root_cause_client or GeminiClient(
            GeminiConfig.from_settings(model=settings.root_cause_model)
        )

    def get_guidance(self, result: RiskResult, data: AssessmentData) -> str:
        """Full clinical dossier, or a fallback string."""
        response = self.guidance_client.generate(
            build_guidance_prompt(result, data),
            system_instruction=CLINICAL_ADVISOR_INSTRUCTION,
        )
        if not response.ok:
            logger.warning(f"Clinical guidance unavailable: {response.error or 'mock mode'}")
            return GUIDANCE_OFFLINE_FALLBACK
        return response.text.strip() or GUIDANCE_EMPTY_FALLBACK

    def get_root_cause(self, result: RiskResult, data: Optional[AssessmentData] = None) -> str:
        """One-sentence base reason, or a fallback string."""
        response = self.root_cause_client.generate(build_root_cause_prompt(result))
        if not response.ok:
            logger.warning(f"Root cause analysis unavailable: {response.error or 'mock mode'}")
            return ROOT_CAUSE_OFFLINE_FALLBACK
        return response.text.strip() or ROOT_CAUSE_EMPTY_FALLBACK

    async def get_guidance_async(self, result: RiskResult, data: AssessmentData) -> str:
        response = await self.guidance_client.generate_async(
            build_guidance_prompt(result, data),
            system_instruction=CLINICAL_ADVISOR_INSTRUCTION,
        )
        if not response.ok:
            logger.warning(f"Clinical guidance unavailable: {response.error or 'mock mode'}")
            return GUIDANCE_OFFLINE_FALLBACK
        return response.text.strip() or GUIDANCE_EMPTY_FALLBACK

    async def get_root_cause_async(self, result: RiskResult, data: Optional[AssessmentData] = None) -> str:
        response = await self.root_cause_client.generate_async(build_root_cause_prompt(result))
        if not response.ok:
            logger.warning(f"Root cause analysis unavailable: {response.error or 'mock mode'}")
            return ROOT_CAUSE_OFFLINE_FALLBACK
        return response.text.strip() or ROOT_CAUSE_EMPTY_FALLBACK
