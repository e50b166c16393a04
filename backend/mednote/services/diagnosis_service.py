# backend/mednote/services/diagnosis_service.py

import asyncio
from datetime import datetime, timezone
from typing import Any, List, Optional, Set
from uuid import uuid4

import openai
from openai import AsyncOpenAI
from pydantic import ValidationError

from mednote.core.config import Settings
from mednote.core.errors import ClientError, ErrorKind, UpstreamError
from mednote.core.logging import get_logger
from mednote.models.consultation import (
    ConsultationRecord,
    DiagnosisExplanation,
    DiagnosisPayload,
    DiagnosisResult,
    Language,
)
from mednote.services.consultation_store import ConsultationStore
from mednote.services.language import detect_language
from mednote.services.prompts import build_diagnosis_prompt, default_explanation_text

logger = get_logger(__name__)

DIAGNOSIS_TEMPERATURE = 0.3
DIAGNOSIS_MAX_TOKENS = 1200
DEFAULT_CONFIDENCE = 0.80


def parse_diagnosis(content: Optional[str], language: Language) -> DiagnosisPayload:
    """Validate the raw completion text, raising MALFORMED_RESPONSE on any mismatch."""
    if not content:
        raise UpstreamError(ErrorKind.MALFORMED_RESPONSE, language, {"reason": "empty content"})
    try:
        return DiagnosisPayload.model_validate_json(content)
    except ValidationError as e:
        logger.warning(f"Diagnosis response failed validation ({e.error_count()} errors)")
        raise UpstreamError(
            ErrorKind.MALFORMED_RESPONSE,
            language,
            {"errors": [".".join(str(p) for p in err["loc"]) or err["type"] for err in e.errors()]},
        ) from e


def default_explanation(diseases: List[str], language: Language) -> DiagnosisExplanation:
    reasoning, basis = default_explanation_text(language)
    return DiagnosisExplanation(
        reasoning=reasoning,
        confidence=DEFAULT_CONFIDENCE,
        key_symptoms=diseases[:2],
        differential_diagnoses=diseases[1:],
        recommendation_basis=basis,
    )


def resolve_explanation(raw: Any, diseases: List[str], language: Language) -> DiagnosisExplanation:
    """
    Build the explanation from the provider's value, filling gaps from the default.

    Missing or invalid sub-fields take the default value; an explanation that
    is not an object is replaced by the default altogether.
    """
    fallback = default_explanation(diseases, language)
    if raw is None:
        return fallback
    if not isinstance(raw, dict):
        logger.warning(f"Ignoring non-object explanation ({type(raw).__name__})")
        return fallback

    merged = {**fallback.model_dump(by_alias=True), **raw}
    try:
        return DiagnosisExplanation.model_validate(merged)
    except ValidationError as e:
        invalid = {str(err["loc"][0]) for err in e.errors() if err["loc"]}
        logger.warning(f"Explanation fields replaced by defaults: {sorted(invalid)}")
        for key in invalid:
            merged.pop(key, None)
        try:
            return DiagnosisExplanation.model_validate({**fallback.model_dump(by_alias=True), **merged})
        except ValidationError:
            return fallback


class DiagnosisService:
    """
    Turns a consultation transcript into a validated diagnosis.

    When a store is given, each successful diagnosis is saved as a new
    consultation record in a background task. Save failures are logged and
    never reach the caller.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        settings: Settings,
        store: Optional[ConsultationStore] = None,
    ):
        self._client = client
        self._settings = settings
        self._store = store
        self._pending_saves: Set[asyncio.Task] = set()

    async def generate_diagnosis(self, transcript: str) -> DiagnosisResult:
        text = (transcript or "").strip()
        if not text:
            raise ClientError("Transcript is required")
        if len(text) < self._settings.MIN_TRANSCRIPT_LENGTH:
            raise ClientError(
                "Transcript too short for analysis",
                {"min_length": self._settings.MIN_TRANSCRIPT_LENGTH},
            )

        language = detect_language(transcript)
        logger.info(f"Detected language: {language.value}")

        try:
            completion = await self._client.chat.completions.create(
                model=self._settings.DIAGNOSIS_MODEL,
                messages=[{"role": "user", "content": build_diagnosis_prompt(language, transcript)}],
                temperature=DIAGNOSIS_TEMPERATURE,
                max_tokens=DIAGNOSIS_MAX_TOKENS,
                response_format={"type": "json_object"},
                timeout=self._settings.DIAGNOSIS_TIMEOUT,
            )
        except openai.APIError as e:
            logger.error(f"Diagnosis completion failed: {type(e).__name__}: {e}")
            raise UpstreamError.from_provider(e, language) from e

        content = completion.choices[0].message.content if completion.choices else None
        payload = parse_diagnosis(content, language)

        result = DiagnosisResult(
            diagnosis=payload.diagnosis,
            diseases=payload.diseases,
            exams=payload.exams,
            medications=payload.medications,
            explanation=resolve_explanation(payload.explanation, payload.diseases, language),
            language=language,
        )

        if self._store is not None:
            self._schedule_save(transcript, result)
        return result

    def _schedule_save(self, transcript: str, result: DiagnosisResult) -> None:
        record = ConsultationRecord(
            id=str(uuid4()),
            transcription=transcript,
            diagnosis=result.diagnosis,
            diseases=result.diseases,
            exams=result.exams,
            medications=result.medications,
            explanation=result.explanation,
            created_at=datetime.now(timezone.utc),
            confidence=result.explanation.confidence,
        )
        task = asyncio.create_task(self._save_quietly(record))
        self._pending_saves.add(task)
        task.add_done_callback(self._pending_saves.discard)

    async def _save_quietly(self, record: ConsultationRecord) -> None:
        try:
            await self._store.save_consultation(record)
        except Exception:
            logger.exception(f"Failed to save consultation {record.id} (continuing)")

    async def wait_for_pending_saves(self) -> None:
        if self._pending_saves:
            await asyncio.gather(*list(self._pending_saves))
