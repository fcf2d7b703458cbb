from .history import AssessmentHistoryStore, StoredAssessment
from .notifications import NotificationRelay, ConsultationNotice, NOTICE_REQUEST, NOTICE_MESSAGE
from .screening import AssessmentService

__all__ = [
    "AssessmentHistoryStore",
    "StoredAssessment",
    "NotificationRelay",
    "ConsultationNotice",
    "NOTICE_REQUEST",
    "NOTICE_MESSAGE",
    "AssessmentService",
]
