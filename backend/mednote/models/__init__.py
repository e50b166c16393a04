"""Pydantic models for the MedNote backend."""

from .consultation import (
    ChatContext,
    ChatMessage,
    ConsultationRecord,
    ConsultationStats,
    DiagnosisExplanation,
    DiagnosisPayload,
    DiagnosisResult,
    Language,
)

__all__ = [
    "ChatContext",
    "ChatMessage",
    "ConsultationRecord",
    "ConsultationStats",
    "DiagnosisExplanation",
    "DiagnosisPayload",
    "DiagnosisResult",
    "Language",
]
