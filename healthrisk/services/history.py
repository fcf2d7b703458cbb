"""
Assessment History Store

Per-user history of risk results, newest first.
"""
import threading
import uuid
from dataclasses import dataclass
from typing import Dict, Any, List, Optional

from healthrisk.core.errors import RecordNotFound
from healthrisk.core.inference.risk_engine import RiskResult
from healthrisk.models.assessment import AssessmentData
from healthrisk.utils import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StoredAssessment:
    """A persisted result plus the questionnaire that produced it."""
    user_id: str
    result: RiskResult
    data: Optional[AssessmentData] = None

    @property
    def id(self) -> str:
        return self.result.id

    def to_dict(self) -> Dict[str, Any]:
        record = {"userId": self.user_id, **self.result.to_dict()}
        if self.data is not None:
            record["input"] = self.data.to_dict()
        return record


class AssessmentHistoryStore:
    """
    In-memory history keyed by an opaque user id.

    Safe to share between request handlers.
    """

    def __init__(self):
        self._records: Dict[str, Dict[str, StoredAssessment]] = {}
        self._lock = threading.Lock()

    def save(
        self,
        user_id: str,
        result: RiskResult,
        data: Optional[AssessmentData] = None
    ) -> StoredAssessment:
        """Persist a result and return it with its assigned id."""
        record_id = f"ASM-{uuid.uuid4().hex[:8].upper()}"
        stored = StoredAssessment(user_id=user_id, result=result.with_id(record_id), data=data)
        with self._lock:
            self._records.setdefault(user_id, {})[record_id] = stored
        logger.info(f"Stored assessment {record_id} for user {user_id} (score={result.score})")
        return stored

    def list(self, user_id: str, limit: Optional[int] = None) -> List[StoredAssessment]:
        """History for a user sorted by timestamp, newest first."""
        with self._lock:
            records = list(self._records.get(user_id, {}).values())
        records.sort(key=lambda r: r.result.timestamp, reverse=True)
        if limit is not None:
            records = records[:max(limit, 0)]
        return records

    def latest(self, user_id: str) -> Optional[StoredAssessment]:
        records = self.list(user_id, limit=1)
        return records[0] if records else None

    def get(self, user_id: str, record_id: str) -> StoredAssessment:
        with self._lock:
            stored = self._records.get(user_id, {}).get(record_id)
        if stored is None:
            raise RecordNotFound(
                f"Assessment {record_id} not found for user {user_id}",
                details={"user_id": user_id, "assessment_id": record_id},
            )
        return stored

    def delete(self, user_id: str, record_id: str) -> StoredAssessment:
        with self._lock:
            stored = self._records.get(user_id, {}).pop(record_id, None)
        if stored is None:
            raise RecordNotFound(
                f"Assessment {record_id} not found for user {user_id}",
                details={"user_id": user_id, "assessment_id": record_id},
            )
        logger.info(f"Deleted assessment {record_id} for user {user_id}")
        return stored

    def trend(self, user_id: str) -> int:
        """Latest score minus the previous one; 0 with fewer than two records."""
        records = self.list(user_id, limit=2)
        if len(records) < 2:
            return 0
        return records[0].result.score - records[1].result.score

    def count(self, user_id: str) -> int:
        with self._lock:
            return len(self._records.get(user_id, {}))
