# backend/mednote/services/consultation_store.py

import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from google.api_core import exceptions as gcp_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from mednote.core.errors import ClientError, PersistenceError
from mednote.core.logging import get_logger
from mednote.models.consultation import ConsultationRecord, ConsultationStats

logger = get_logger(__name__)

STORE_ERRORS = (gcp_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError)


def local_now() -> datetime:
    return datetime.now().astimezone()


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_week(now: datetime) -> datetime:
    """Sunday 00:00 of the week containing ``now``."""
    days_since_sunday = (now.weekday() + 1) % 7
    return start_of_day(now) - timedelta(days=days_since_sunday)


class ConsultationStore:
    """
    Persistence for consultation records, one Firestore document per record.

    The Firestore client is obtained from ``client_factory`` on first use and
    reused afterwards. A factory failure is reported as a PersistenceError and
    attempted again on the next call.
    """

    def __init__(
        self,
        client_factory: Callable[[], Any],
        collection: str = "MedNote",
        clock: Callable[[], datetime] = local_now,
        max_limit: int = 100,
    ):
        self._client_factory = client_factory
        self._collection_name = collection
        self._clock = clock
        self._max_limit = max_limit
        self._client = None
        self._lock = threading.Lock()

    def _collection(self):
        if self._client is None:
            with self._lock:
                if self._client is None:
                    try:
                        self._client = self._client_factory()
                    except (*STORE_ERRORS, ValueError, OSError) as e:
                        logger.error(f"Could not initialize Firestore client: {e}")
                        raise PersistenceError("Document store unavailable") from e
        return self._client.collection(self._collection_name)

    async def save_consultation(self, record: ConsultationRecord) -> str:
        """Create or overwrite the document keyed by ``record.id``."""
        data: Dict[str, Any] = record.model_dump(by_alias=True)
        data["timestamp"] = firestore.SERVER_TIMESTAMP
        data["status"] = "completed"
        try:
            await self._collection().document(record.id).set(data)
        except STORE_ERRORS as e:
            raise PersistenceError("Failed to save consultation", {"id": record.id}) from e
        logger.info(f"Consultation saved: {record.id}")
        return record.id

    async def get_consultation(self, consultation_id: str) -> Optional[ConsultationRecord]:
        try:
            snapshot = await self._collection().document(consultation_id).get()
        except STORE_ERRORS as e:
            raise PersistenceError("Failed to load consultation", {"id": consultation_id}) from e
        if not snapshot.exists:
            return None
        return self._to_record(snapshot)

    async def list_consultations(self, limit: int = 10) -> List[ConsultationRecord]:
        """Newest first, at most ``limit`` records."""
        if limit < 1:
            raise ClientError("limit must be at least 1", {"limit": limit})
        if limit > self._max_limit:
            raise ClientError(
                f"limit must be at most {self._max_limit}",
                {"limit": limit, "max_limit": self._max_limit},
            )
        query = (
            self._collection()
            .order_by("timestamp", direction=firestore.Query.DESCENDING)
            .limit(limit)
        )
        try:
            return [self._to_record(snapshot) async for snapshot in query.stream()]
        except STORE_ERRORS as e:
            raise PersistenceError("Failed to list consultations") from e

    async def delete_consultation(self, consultation_id: str) -> None:
        """Delete a record. Deleting an unknown id succeeds without effect."""
        try:
            await self._collection().document(consultation_id).delete()
        except STORE_ERRORS as e:
            raise PersistenceError("Failed to delete consultation", {"id": consultation_id}) from e
        logger.info(f"Consultation deleted: {consultation_id}")

    async def get_stats(self) -> ConsultationStats:
        now = self._clock()
        collection = self._collection()
        try:
            total = await self._count(collection)
            today = await self._count(
                collection.where(filter=FieldFilter("timestamp", ">=", start_of_day(now)))
            )
            this_week = await self._count(
                collection.where(filter=FieldFilter("timestamp", ">=", start_of_week(now)))
            )
        except STORE_ERRORS as e:
            raise PersistenceError("Failed to compute consultation stats") from e
        return ConsultationStats(total=total, today=today, this_week=this_week)

    @staticmethod
    async def _count(query) -> int:
        results = await query.count().get()
        return int(results[0][0].value)

    @staticmethod
    def _to_record(snapshot) -> ConsultationRecord:
        data = snapshot.to_dict() or {}
        data["id"] = snapshot.id
        if data.get("createdAt") is None:
            data["createdAt"] = data.get("timestamp")
        return ConsultationRecord.model_validate(data)
