# backend/mednote/models/consultation.py

from datetime import datetime
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Language(str, Enum):
    PT = "pt"
    EN = "en"


class DiagnosisExplanation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reasoning: str
    confidence: float = Field(ge=0.0, le=1.0)
    key_symptoms: List[str] = Field(default_factory=list, alias="keySymptoms")
    differential_diagnoses: List[str] = Field(default_factory=list, alias="differentialDiagnoses")
    recommendation_basis: str = Field("", alias="recommendationBasis")


class DiagnosisPayload(BaseModel):
    """Shape the diagnosis completion must have; extra keys are ignored."""

    diagnosis: str = Field(min_length=1)
    diseases: List[str]
    exams: List[str]
    medications: List[str]
    # Checked separately; a partial explanation is completed from defaults.
    explanation: Optional[Any] = None


class DiagnosisResult(BaseModel):
    diagnosis: str
    diseases: List[str]
    exams: List[str]
    medications: List[str]
    explanation: DiagnosisExplanation
    language: Language


class ChatMessage(BaseModel):
    role: Literal["user", "assistant", "system"]
    content: str


class ChatContext(BaseModel):
    transcript: str = ""
    diagnosis: str = ""
    diseases: List[str] = []
    exams: List[str] = []
    medications: List[str] = []
    language: Optional[Language] = None


class ConsultationRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    transcription: str
    diagnosis: str
    diseases: List[str] = []
    exams: List[str] = []
    medications: List[str] = []
    explanation: Optional[DiagnosisExplanation] = None
    timestamp: Optional[datetime] = None
    created_at: datetime = Field(alias="createdAt")
    duration: Optional[float] = None
    confidence: Optional[float] = None
    status: Literal["completed"] = "completed"


class ConsultationStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    today: int = 0
    this_week: int = Field(0, alias="thisWeek")
