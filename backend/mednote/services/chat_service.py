# backend/mednote/services/chat_service.py

from typing import Optional, Sequence

import openai
from openai import AsyncOpenAI

from mednote.core.config import Settings
from mednote.core.errors import ClientError, ErrorKind, UpstreamError
from mednote.core.logging import get_logger
from mednote.models.consultation import ChatContext, ChatMessage
from mednote.services.language import detect_language
from mednote.services.prompts import render_chat_system_prompt

logger = get_logger(__name__)


class ChatService:
    """Answers follow-up questions about a diagnosis that was already given."""

    def __init__(self, client: AsyncOpenAI, settings: Settings):
        self._client = client
        self._settings = settings

    async def respond(
        self,
        message: str,
        context: Optional[ChatContext],
        history: Sequence[ChatMessage] = (),
    ) -> str:
        if not message or not message.strip():
            raise ClientError("Message is required")
        if context is None or not context.transcript.strip() or not context.diagnosis.strip():
            raise ClientError("Consultation context is required")

        language = context.language or detect_language(message)

        messages = [{"role": "system", "content": render_chat_system_prompt(language, context)}]
        messages.extend({"role": item.role, "content": item.content} for item in history)
        messages.append({"role": "user", "content": message})

        try:
            completion = await self._client.chat.completions.create(
                model=self._settings.CHAT_MODEL,
                messages=messages,
                max_tokens=500,
                temperature=0.7,
                top_p=1,
                frequency_penalty=0.5,
                presence_penalty=0.3,
            )
        except openai.APIError as e:
            logger.error(f"Chat completion failed: {type(e).__name__}: {e}")
            raise UpstreamError.from_provider(e, language) from e

        answer = completion.choices[0].message.content if completion.choices else None
        answer = (answer or "").strip()
        if not answer:
            raise UpstreamError(ErrorKind.EMPTY_RESPONSE, language)
        return answer
