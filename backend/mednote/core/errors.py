"""
Error taxonomy for the MedNote backend.

Client errors describe invalid caller input, upstream errors describe a
provider-side failure classified into a closed set of kinds, and persistence
errors wrap document-store failures.
"""
from enum import Enum
from typing import Any, Dict, Optional

import openai

from mednote.models.consultation import Language


class ErrorKind(str, Enum):
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    UNSUPPORTED_FORMAT = "unsupported_format"
    MALFORMED_RESPONSE = "malformed_response"
    EMPTY_RESPONSE = "empty_response"
    UPSTREAM_FAILURE = "upstream_failure"


USER_MESSAGES: Dict[ErrorKind, Dict[Language, str]] = {
    ErrorKind.RATE_LIMITED: {
        Language.PT: "Limite de requisições atingido. Tente novamente em alguns minutos.",
        Language.EN: "Request limit reached. Please try again in a few minutes.",
    },
    ErrorKind.QUOTA_EXCEEDED: {
        Language.PT: "Cota da OpenAI excedida. Verifique seu plano e billing.",
        Language.EN: "OpenAI quota exceeded. Check your plan and billing.",
    },
    ErrorKind.UNSUPPORTED_FORMAT: {
        Language.PT: "Formato de áudio não suportado. Use WAV, MP3, M4A ou WebM.",
        Language.EN: "Unsupported audio format. Use WAV, MP3, M4A or WebM.",
    },
    ErrorKind.MALFORMED_RESPONSE: {
        Language.PT: "Falha ao processar resposta da IA.",
        Language.EN: "Failed to process the AI response.",
    },
    ErrorKind.EMPTY_RESPONSE: {
        Language.PT: "A IA retornou uma resposta vazia. Tente novamente.",
        Language.EN: "The AI returned an empty response. Please try again.",
    },
    ErrorKind.UPSTREAM_FAILURE: {
        Language.PT: "Falha na comunicação com o provedor de IA. Tente novamente.",
        Language.EN: "Failed to reach the AI provider. Please try again.",
    },
}

STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.QUOTA_EXCEEDED: 503,
    ErrorKind.UNSUPPORTED_FORMAT: 415,
    ErrorKind.MALFORMED_RESPONSE: 502,
    ErrorKind.EMPTY_RESPONSE: 502,
    ErrorKind.UPSTREAM_FAILURE: 502,
}

QUOTA_ERROR_CODES = {"insufficient_quota", "billing_hard_limit_reached", "billing_not_active"}


class MedNoteError(Exception):
    """Base exception for all MedNote errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "MEDNOTE_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ClientError(MedNoteError):
    """Raised when caller input is invalid."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CLIENT_ERROR", details)


class UpstreamError(MedNoteError):
    """Raised when the LLM or speech provider fails."""

    def __init__(
        self,
        kind: ErrorKind,
        language: Language = Language.PT,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(USER_MESSAGES[kind][language], kind.value.upper(), details)
        self.kind = kind
        self.language = language
        self.status_code = STATUS_CODES[kind]

    @classmethod
    def from_provider(
        cls,
        exc: openai.OpenAIError,
        language: Language = Language.PT,
        audio: bool = False,
    ) -> "UpstreamError":
        details: Dict[str, Any] = {"provider_error": type(exc).__name__}
        if isinstance(exc, openai.APIStatusError):
            details["provider_status"] = exc.status_code
        return cls(classify_provider_error(exc, audio=audio), language, details)


class PersistenceError(MedNoteError):
    """Raised when the document store cannot be read or written."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "PERSISTENCE_ERROR", details)


def classify_provider_error(exc: Exception, audio: bool = False) -> ErrorKind:
    """
    Map a provider exception to an ErrorKind using its status and error code.

    Args:
        exc: Exception raised by the openai client
        audio: True when the failing call carried an audio payload
    """
    if not isinstance(exc, openai.APIStatusError):
        # Timeouts, connection failures and client-side errors.
        return ErrorKind.UPSTREAM_FAILURE

    codes = {exc.code, exc.type}
    if codes & QUOTA_ERROR_CODES or exc.status_code == 402:
        return ErrorKind.QUOTA_EXCEEDED
    if exc.status_code == 429:
        return ErrorKind.RATE_LIMITED
    if audio and exc.status_code in (400, 415):
        return ErrorKind.UNSUPPORTED_FORMAT
    return ErrorKind.UPSTREAM_FAILURE
