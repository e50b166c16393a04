"""
Shared fixtures for the MedNote backend tests.

The OpenAI and Firestore clients are replaced by small in-memory fakes that
implement only the calls the services make.
"""
from __future__ import annotations

import copy
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import httpx
import openai
import pytest
from google.cloud import firestore

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from mednote.core.config import Settings  # noqa: E402
from mednote.services.consultation_store import ConsultationStore  # noqa: E402


# ---------------------------------------------------------------------------
# OpenAI fakes
# ---------------------------------------------------------------------------

class FakeCompletions:
    def __init__(self):
        self.content: Optional[str] = None
        self.error: Optional[Exception] = None
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeTranscriptions:
    def __init__(self):
        self.text = ""
        self.error: Optional[Exception] = None
        self.calls: List[Dict[str, Any]] = []

    async def create(self, **kwargs):
        audio_file = kwargs["file"]
        path = Path(audio_file.name)
        self.calls.append({
            **kwargs,
            "path": path,
            "existed": path.exists(),
            "payload": audio_file.read(),
        })
        if self.error is not None:
            raise self.error
        return self.text


class FakeLLMClient:
    def __init__(self):
        self.completions = FakeCompletions()
        self.transcriptions = FakeTranscriptions()
        self.chat = SimpleNamespace(completions=self.completions)
        self.audio = SimpleNamespace(transcriptions=self.transcriptions)

    def reply_with(self, content) -> None:
        self.completions.content = content if isinstance(content, str) or content is None else json.dumps(content)


def make_status_error(status: int, code: Optional[str] = None, cls=openai.APIStatusError):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status, request=request)
    body = {"message": "provider error", "type": code, "code": code}
    return cls("provider error", response=response, body=body)


def make_timeout_error():
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return openai.APITimeoutError(request=request)


# ---------------------------------------------------------------------------
# Firestore fakes
# ---------------------------------------------------------------------------

class FakeSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict[str, Any]]):
        self.id = doc_id
        self._data = data
        self.exists = data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeAggregation:
    def __init__(self, query: "FakeQuery"):
        self._query = query

    async def get(self):
        self._query._db.check()
        return [[SimpleNamespace(alias="count", value=len(self._query._matching()))]]


class FakeQuery:
    def __init__(self, db: "FakeFirestore", name: str, filters=(), order=None, limit_to=None):
        self._db = db
        self._name = name
        self._filters = list(filters)
        self._order = order
        self._limit = limit_to

    def _copy(self, **changes) -> "FakeQuery":
        params = {"filters": self._filters, "order": self._order, "limit_to": self._limit}
        params.update(changes)
        return FakeQuery(self._db, self._name, **params)

    def where(self, filter=None):
        self._db.queries.append(("where", filter.field_path, filter.op_string, filter.value))
        return self._copy(filters=self._filters + [filter])

    def order_by(self, field, direction="ASCENDING"):
        return self._copy(order=(field, direction))

    def limit(self, count):
        return self._copy(limit_to=count)

    def count(self):
        return FakeAggregation(self)

    def _matching(self):
        docs = list(self._db.collections.setdefault(self._name, {}).items())
        for flt in self._filters:
            assert flt.op_string == ">="
            docs = [(k, v) for k, v in docs if v.get(flt.field_path) is not None and v[flt.field_path] >= flt.value]
        if self._order is not None:
            field, direction = self._order
            docs.sort(key=lambda item: item[1][field], reverse=direction == firestore.Query.DESCENDING)
        if self._limit is not None:
            docs = docs[: self._limit]
        return docs

    async def stream(self):
        self._db.check()
        for doc_id, data in self._matching():
            yield FakeSnapshot(doc_id, copy.deepcopy(data))


class FakeDocument:
    def __init__(self, db: "FakeFirestore", name: str, doc_id: str):
        self._db = db
        self._name = name
        self.id = doc_id

    async def set(self, data):
        self._db.check()
        stored = {
            key: (self._db.server_now() if value is firestore.SERVER_TIMESTAMP else value)
            for key, value in data.items()
        }
        self._db.collections.setdefault(self._name, {})[self.id] = copy.deepcopy(stored)

    async def get(self):
        self._db.check()
        return FakeSnapshot(self.id, copy.deepcopy(self._db.collections.get(self._name, {}).get(self.id)))

    async def delete(self):
        self._db.check()
        self._db.collections.get(self._name, {}).pop(self.id, None)


class FakeCollection(FakeQuery):
    def document(self, doc_id: str) -> FakeDocument:
        return FakeDocument(self._db, self._name, doc_id)


class FakeFirestore:
    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.queries: List[tuple] = []
        self.error: Optional[Exception] = None
        self._clock_ticks = 0

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(self, name)

    def check(self) -> None:
        if self.error is not None:
            raise self.error

    def server_now(self) -> datetime:
        # Strictly increasing so that ordering by timestamp is deterministic.
        self._clock_ticks += 1
        return datetime(2026, 10, 19, 12, 0, self._clock_ticks, tzinfo=timezone.utc)

    def seed(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        self.collections.setdefault(collection, {})[doc_id] = dict(data)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings() -> Settings:
    return Settings(OPENAI_API_KEY="test-key", LOG_LEVEL="WARNING")


@pytest.fixture
def llm_client() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def firestore_db() -> FakeFirestore:
    return FakeFirestore()


@pytest.fixture
def store(firestore_db) -> ConsultationStore:
    return ConsultationStore(lambda: firestore_db, collection="MedNote")


@pytest.fixture
def diagnosis_payload() -> Dict[str, Any]:
    return {
        "diagnosis": "Quadro compatível com infecção viral de vias aéreas superiores",
        "diseases": ["Gripe", "Sinusite"],
        "exams": ["Hemograma"],
        "medications": ["Paracetamol"],
    }
