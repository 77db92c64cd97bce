"""Firebase app bootstrap shared by Firestore and Storage clients."""

import base64
import json
import logging
import os

import firebase_admin
from firebase_admin import credentials

from config import Settings

logger = logging.getLogger(__name__)


def load_firebase_credentials(creds_value: str) -> dict:
    """Load Firebase credentials from JSON string, file path, or base64."""
    if os.path.isfile(creds_value):
        with open(creds_value) as f:
            return json.load(f)

    try:
        return json.loads(creds_value)
    except json.JSONDecodeError:
        pass

    try:
        decoded = base64.b64decode(creds_value).decode("utf-8")
        return json.loads(decoded)
    except (ValueError, UnicodeDecodeError):
        pass

    raise ValueError("FIREBASE_CREDENTIALS is not valid JSON, file path, or base64")


def init_firebase_app(settings: Settings) -> dict:
    """Initialize the default Firebase app once and return the credentials dict."""
    creds_dict = load_firebase_credentials(settings.firebase_credentials)

    if not firebase_admin._apps:
        options = {}
        if settings.firebase_storage_bucket:
            options["storageBucket"] = settings.firebase_storage_bucket
        firebase_admin.initialize_app(credentials.Certificate(creds_dict), options or None)
        logger.info("Firebase app initialized for project %s", creds_dict.get("project_id"))

    return creds_dict
