"""
Firebase Admin bootstrap.

The default Firebase app is initialized at most once per process; later
calls reuse it and return the same Firestore client.
"""
import threading

import firebase_admin
from firebase_admin import credentials, firestore_async

from mednote.core.config import Settings
from mednote.core.logging import get_logger

logger = get_logger(__name__)

_init_lock = threading.Lock()


def _credential(settings: Settings) -> credentials.Base:
    if settings.FIREBASE_PRIVATE_KEY:
        return credentials.Certificate({
            "type": "service_account",
            "project_id": settings.FIREBASE_PROJECT_ID,
            "private_key_id": settings.FIREBASE_PRIVATE_KEY_ID,
            "private_key": settings.FIREBASE_PRIVATE_KEY.replace("\\n", "\n"),
            "client_email": settings.FIREBASE_CLIENT_EMAIL,
            "client_id": settings.FIREBASE_CLIENT_ID,
            "token_uri": settings.FIREBASE_TOKEN_URI,
        })
    if settings.FIREBASE_CREDENTIALS_PATH:
        return credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
    return credentials.ApplicationDefault()


def get_firestore_client(settings: Settings):
    """Return the async Firestore client, initializing Firebase on first use."""
    with _init_lock:
        try:
            app = firebase_admin.get_app()
        except ValueError:
            options = {"projectId": settings.FIREBASE_PROJECT_ID} if settings.FIREBASE_PROJECT_ID else None
            app = firebase_admin.initialize_app(_credential(settings), options)
            logger.info(f"Firebase Admin SDK initialized (project={app.project_id})")
    return firestore_async.client(app)
