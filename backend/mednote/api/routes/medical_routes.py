# backend/mednote/api/routes/medical_routes.py

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, File, Request, UploadFile

from mednote.models.requests import ChatRequest, DiagnoseRequest
from mednote.services.chat_service import ChatService
from mednote.services.consultation_store import ConsultationStore
from mednote.services.diagnosis_service import DiagnosisService
from mednote.services.speech_service import SpeechService

router = APIRouter(prefix="/api", tags=["medical"])


def get_speech_service(request: Request) -> SpeechService:
    return request.app.state.speech_service


def get_diagnosis_service(request: Request) -> DiagnosisService:
    return request.app.state.diagnosis_service


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service


def get_store(request: Request) -> ConsultationStore:
    return request.app.state.store


@router.get("/health")
async def health():
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "MedNote.IA Backend",
    }


@router.post("/transcribe")
async def transcribe(
    audio: UploadFile = File(...),
    speech: SpeechService = Depends(get_speech_service),
):
    audio_bytes = await audio.read()
    transcript = await speech.transcribe(audio_bytes, audio.filename, audio.content_type)
    return {
        "transcript": transcript,
        "success": True,
        "message": "Transcription completed",
    }


@router.post("/diagnose")
async def diagnose(
    body: DiagnoseRequest,
    diagnosis: DiagnosisService = Depends(get_diagnosis_service),
):
    result = await diagnosis.generate_diagnosis(body.transcript)
    return {
        **result.model_dump(by_alias=True, mode="json"),
        "success": True,
        "message": "Diagnosis generated",
    }


@router.post("/chat")
async def chat(
    body: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
):
    answer = await chat_service.respond(body.message, body.context, body.chat_history)
    return {"message": answer, "success": True}


@router.get("/consultations")
async def list_consultations(limit: int = 10, store: ConsultationStore = Depends(get_store)):
    records = await store.list_consultations(limit)
    return {
        "success": True,
        "consultations": [record.model_dump(by_alias=True, mode="json") for record in records],
        "count": len(records),
    }


@router.get("/consultations/stats")
async def consultation_stats(store: ConsultationStore = Depends(get_store)):
    stats = await store.get_stats()
    return {"success": True, "stats": stats.model_dump(by_alias=True)}


@router.delete("/consultations/{consultation_id}")
async def delete_consultation(consultation_id: str, store: ConsultationStore = Depends(get_store)):
    await store.delete_consultation(consultation_id)
    return {"success": True, "message": "Consultation deleted"}
