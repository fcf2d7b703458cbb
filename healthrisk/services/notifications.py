"""
Notification Relay

Delivers consultation alerts to a doctor's mailbox through a
Formspree-compatible form endpoint. Best-effort: failures are logged,
never retried and never raised.
"""
from dataclasses import dataclass
from typing import Dict, Optional

import requests

from healthrisk.config import settings
from healthrisk.utils import get_logger

logger = get_logger(__name__)


NOTICE_REQUEST = "request"
NOTICE_MESSAGE = "message"


@dataclass
class ConsultationNotice:
    """Content of one consultation alert."""
    patient_name: str
    patient_email: str
    message: str
    kind: str = NOTICE_REQUEST  # NOTICE_REQUEST or NOTICE_MESSAGE
    risk_score: Optional[int] = None
    risk_category: Optional[str] = None
    pincode_city: Optional[str] = None
    doctor_name: Optional[str] = None
    doctor_email: Optional[str] = None
    consultation_id: Optional[str] = None

    @property
    def subject(self) -> str:
        if self.kind == NOTICE_MESSAGE:
            return f"[PHRE] Secure Message from {self.patient_name}"
        return f"[PHRE URGENT] New Consultation Request from {self.patient_name}"

    def to_form(self, portal_base_url: Optional[str] = None) -> Dict[str, str]:
        """Form fields posted to the relay."""
        form = {
            "_subject": self.subject,
            "Patient Name": self.patient_name,
            "Patient Email": self.patient_email,
            "Risk Score": str(self.risk_score) if self.risk_score is not None else "N/A",
            "Risk Category": self.risk_category or "Uncalculated",
            "Region/City": self.pincode_city or "Not provided",
            "Clinical Query": self.message,
            # Lets the doctor reply straight to the patient from their mail client
            "_replyto": self.patient_email,
        }
        if self.doctor_name:
            form["Doctor Name"] = self.doctor_name
        if self.doctor_email:
            form["Doctor Email"] = self.doctor_email
        if self.consultation_id and portal_base_url:
            form["Portal Link"] = f"{portal_base_url.rstrip('/')}/{self.consultation_id}"
        return form


class NotificationRelay:
    """Posts consultation notices to the configured relay endpoint."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        self.endpoint = endpoint if endpoint is not None else settings.notification_endpoint
        self.timeout = timeout if timeout is not None else settings.notification_timeout_seconds
        self.portal_base_url = settings.portal_base_url
        self._session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint)

    def send(self, notice: ConsultationNotice) -> bool:
        """
        Deliver one notice.

        Returns:
            True if the relay accepted it, False otherwise
        """
        if not self.is_configured:
            logger.warning("Notification endpoint not configured - consultation alert not sent")
            return False

        try:
            response = self._session.post(
                self.endpoint,
                data=notice.to_form(self.portal_base_url),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Consultation alert dispatch failed: {e}")
            return False

        if not response.ok:
            logger.warning(
                f"Notification relay rejected alert for {notice.patient_email}: "
                f"HTTP {response.status_code}"
            )
            return False

        logger.info(f"Consultation alert dispatched for {notice.patient_email}")
        return True
