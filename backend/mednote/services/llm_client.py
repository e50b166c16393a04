# backend/mednote/services/llm_client.py

from openai import AsyncAzureOpenAI, AsyncOpenAI

from mednote.core.config import Settings


def get_llm_client(settings: Settings) -> AsyncOpenAI:
    """
    Build the async OpenAI client shared by the diagnosis, chat and speech services.

    Azure OpenAI is used when an Azure endpoint is configured. Retries are
    disabled: every provider call is a single attempt.
    """
    if settings.AZURE_OPENAI_ENDPOINT:
        return AsyncAzureOpenAI(
            api_version=settings.AZURE_OPENAI_API_VERSION,
            azure_endpoint=settings.AZURE_OPENAI_ENDPOINT,
            api_key=settings.OPENAI_API_KEY,
            max_retries=0,
        )
    return AsyncOpenAI(api_key=settings.OPENAI_API_KEY, max_retries=0)
