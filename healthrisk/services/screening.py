"""
Assessment Service - Centralized Risk Assessment Logic
"""
from typing import Dict, Any, List, Optional

from healthrisk.config import settings
from healthrisk.core.errors import RecordNotFound
from healthrisk.core.inference.risk_engine import RiskEngine, RiskResult
from healthrisk.core.llm.advisor import ClinicalAdvisor
from healthrisk.models.assessment import AssessmentData
from healthrisk.services.history import AssessmentHistoryStore, StoredAssessment
from healthrisk.services.notifications import NotificationRelay, ConsultationNotice, NOTICE_REQUEST
from healthrisk.utils import get_logger

logger = get_logger(__name__)


class AssessmentService:
    """
    Service class to handle the risk assessment workflow.
    Decouples the logic from FastAPI endpoints and the CLI.
    """

    def __init__(
        self,
        risk_engine: Optional[RiskEngine] = None,
        store: Optional[AssessmentHistoryStore] = None,
        advisor: Optional[ClinicalAdvisor] = None,
        relay: Optional[NotificationRelay] = None
    ):
        self.risk_engine = risk_engine or RiskEngine()
        self.store = store or AssessmentHistoryStore()
        self.advisor = advisor or ClinicalAdvisor()
        self.relay = relay or NotificationRelay()

    def evaluate(self, payload: Any) -> RiskResult:
        """Score an assessment without storing it."""
        result = self.risk_engine.evaluate(payload)
        logger.info(f"Assessment evaluated: score={result.score}, category={result.category.value}")
        return result

    async def submit(self, user_id: str, payload: Any) -> Dict[str, Any]:
        """
        Score an assessment, store it in the user's history and explain it.

        Args:
            user_id: Opaque user identifier
            payload: AssessmentData or raw wire-format mapping

        Returns:
            Dict with the stored record and its one-sentence root cause
        """
        data = AssessmentData.parse(payload)
        result = self.evaluate(data)
        stored = self.store.save(user_id, result, data)

        if result.emergency_flag:
            logger.warning(f"Critical risk for user {user_id} (score={result.score})")

        root_cause = await self.advisor.get_root_cause_async(stored.result, data)

        return {
            "record": stored,
            "root_cause": root_cause,
        }

    def history(self, user_id: str, limit: Optional[int] = None) -> List[StoredAssessment]:
        if limit is None:
            limit = settings.history_default_limit
        return self.store.list(user_id, limit=limit)

    def latest(self, user_id: str) -> StoredAssessment:
        stored = self.store.latest(user_id)
        if stored is None:
            raise RecordNotFound(f"No assessments found for user {user_id}", details={"user_id": user_id})
        return stored

    def delete(self, user_id: str, record_id: str) -> StoredAssessment:
        return self.store.delete(user_id, record_id)

    def trend(self, user_id: str) -> int:
        return self.store.trend(user_id)

    async def recommendations(self, user_id: str) -> Dict[str, Any]:
        """Clinical dossier for the user's most recent assessment."""
        stored = self.latest(user_id)
        if stored.data is None:
            raise RecordNotFound(
                f"Assessment {stored.id} has no stored questionnaire",
                details={"user_id": user_id, "assessment_id": stored.id},
            )
        dossier = await self.advisor.get_guidance_async(stored.result, stored.data)
        return {"record": stored, "dossier": dossier}

    def request_consultation(
        self,
        patient_id: str,
        patient_name: str,
        patient_email: str,
        message: str,
        doctor_name: Optional[str] = None,
        doctor_email: Optional[str] = None,
        pincode_city: Optional[str] = None,
        consultation_id: Optional[str] = None,
        kind: str = NOTICE_REQUEST
    ) -> Dict[str, Any]:
        """Relay a consultation request or message with the patient's latest score."""
        latest = self.store.latest(patient_id)
        category = latest.result.category.value if latest else None
        score = latest.result.score if latest else None

        if pincode_city is None and latest is not None and latest.data is not None:
            pincode_city = latest.data.pincode_city

        notice = ConsultationNotice(
            patient_name=patient_name,
            patient_email=patient_email,
            message=message,
            kind=kind,
            risk_score=score,
            risk_category=category,
            pincode_city=pincode_city,
            doctor_name=doctor_name,
            doctor_email=doctor_email,
            consultation_id=consultation_id,
        )
        delivered = self.relay.send(notice)
        return {"delivered": delivered, "category": category or "Uncalculated"}
