"""
Assessment API Models

AssessmentData is the input boundary of the risk engine. Field names on the
wire are camelCase to stay compatible with stored assessment records.
"""
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from typing import Dict, Any, List, Literal, Mapping, Optional

from healthrisk.core.errors import InvalidInput


class AssessmentData(BaseModel):
    """One filled-in screening questionnaire."""

    model_config = ConfigDict(
        strict=True,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        allow_inf_nan=False,
    )

    # Demographics (carried through, not scored)
    age: Optional[int] = None
    gender: Optional[str] = None
    pincode_city: Optional[str] = None

    # Social determinants
    income: str
    education: str
    housing: Optional[str] = None
    healthcare_access: float = Field(..., alias="healthcareAccess", description="Minutes to nearest facility")
    environment: str

    # Lifestyle
    diet: float = Field(..., description="1 (poor) to 5 (healthy)")
    smoking: str
    alcohol: Optional[str] = None
    exercise: str
    water: Optional[float] = None
    sleep: float = Field(..., description="Hours per night")
    meditation: Optional[str] = None

    # Medical
    bmi: float
    chronic_disease: bool = Field(..., alias="chronicDisease")
    family_history: Optional[str] = Field(default=None, alias="familyHistory")
    blood_pressure: str = Field(..., alias="bloodPressure")
    diabetes: Optional[str] = None

    @classmethod
    def parse(cls, payload: Any) -> "AssessmentData":
        """
        Validate a raw mapping into an AssessmentData.

        Raises:
            InvalidInput: if a required field is missing or has the wrong type
        """
        if isinstance(payload, cls):
            return payload
        if not isinstance(payload, Mapping):
            raise InvalidInput(
                f"Assessment must be a mapping, got {type(payload).__name__}"
            )
        try:
            return cls.model_validate(dict(payload))
        except ValidationError as e:
            errors = [
                {
                    "loc": [str(part) for part in err["loc"]],
                    "msg": err["msg"],
                    "type": err["type"],
                }
                for err in e.errors()
            ]
            fields = ", ".join(".".join(err["loc"]) for err in errors)
            raise InvalidInput(f"Invalid assessment fields: {fields}", errors=errors) from e

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with wire (camelCase) field names."""
        return self.model_dump(by_alias=True)


# ---- Response models ----

class FactorContributionModel(BaseModel):
    factor: str
    contribution: int
    category: str


class BreakdownModel(BaseModel):
    social: int
    lifestyle: int
    medical: int


class RiskResultModel(BaseModel):
    """Serialized RiskResult."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    score: int
    category: str
    emergency_flag: bool = Field(..., alias="emergencyFlag")
    timestamp: int
    breakdown: BreakdownModel
    factor_contributions: List[FactorContributionModel] = Field(..., alias="factorContributions")


class AssessmentRecordResponse(BaseModel):
    """A persisted assessment with its one-line explanation."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    result: RiskResultModel
    root_cause: Optional[str] = Field(default=None, alias="rootCause")


class HistoryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    records: List[RiskResultModel]
    total: int
    trend: int


class RecommendationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
    result: RiskResultModel
    dossier: str


class ConsultationRequest(BaseModel):
    """Patient request for an expert review, relayed by email."""
    model_config = ConfigDict(populate_by_name=True)

    patient_id: str = Field(..., alias="patientId")
    patient_name: str = Field(..., alias="patientName")
    patient_email: str = Field(..., alias="patientEmail")
    message: str
    doctor_name: Optional[str] = Field(default=None, alias="doctorName")
    doctor_email: Optional[str] = Field(default=None, alias="doctorEmail")
    pincode_city: Optional[str] = None
    consultation_id: Optional[str] = Field(default=None, alias="consultationId")
    kind: Literal["request", "message"] = Field(default="request", description="New request or follow-up message")


class ConsultationResponse(BaseModel):
    delivered: bool
    category: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: str
    components: Dict[str, str]
