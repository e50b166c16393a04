from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mednote.api.routes.medical_routes import router as medical_routes
from mednote.core.config import Settings, settings as default_settings
from mednote.core.errors import MedNoteError
from mednote.core.firebase import get_firestore_client
from mednote.core.logging import get_logger, setup_logging
from mednote.services.chat_service import ChatService
from mednote.services.consultation_store import ConsultationStore
from mednote.services.diagnosis_service import DiagnosisService
from mednote.services.llm_client import get_llm_client
from mednote.services.speech_service import SpeechService

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    llm_client=None,
    store: Optional[ConsultationStore] = None,
) -> FastAPI:
    """
    Build the API. Collaborators not passed in are constructed once when the
    application starts and shared by every request.
    """
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = llm_client or get_llm_client(settings)
        consultation_store = store or ConsultationStore(
            lambda: get_firestore_client(settings),
            collection=settings.FIRESTORE_COLLECTION,
            max_limit=settings.MAX_LIST_LIMIT,
        )
        app.state.store = consultation_store
        app.state.speech_service = SpeechService(client, settings)
        app.state.diagnosis_service = DiagnosisService(client, settings, consultation_store)
        app.state.chat_service = ChatService(client, settings)
        logger.info("MedNote backend started")
        yield
        await app.state.diagnosis_service.wait_for_pending_saves()
        logger.info("MedNote backend stopped")

    app = FastAPI(
        title="MedNote.IA",
        description="Consultation transcription, AI-assisted diagnosis and follow-up chat",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(MedNoteError)
    async def mednote_error_handler(request: Request, exc: MedNoteError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
        return JSONResponse({"success": False, **exc.to_dict()}, status_code=exc.status_code)

    app.include_router(medical_routes)
    return app


app = create_app()
