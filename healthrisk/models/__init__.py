from .assessment import AssessmentData

__all__ = ["AssessmentData"]
