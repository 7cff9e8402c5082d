"""
Firebase Admin SDK bootstrap shared by the Firestore store and auth.

Initialization is lazy: nothing touches Firebase until a caller asks for the app.
"""

import os
from pathlib import Path

import firebase_admin
from firebase_admin import credentials

from pitcrew.config import get_settings
from pitcrew.logging_config import get_logger

logger = get_logger(__name__)

# __file__ = backend/pitcrew/firebase.py -> .parent.parent = backend/
BACKEND_DIR = Path(__file__).parent.parent


def find_service_account_key() -> Path | None:
    """Look for a service account key in the usual places."""
    settings = get_settings()

    possible_paths = []
    if settings.firebase_credentials:
        possible_paths.append(Path(settings.firebase_credentials))
    possible_paths.extend([
        BACKEND_DIR / "serviceAccountKey.json",
        BACKEND_DIR / "firebase-service-account.json",
    ])
    # Firebase's default naming pattern: *-firebase-adminsdk-*.json
    possible_paths.extend(sorted(BACKEND_DIR.glob("*-firebase-adminsdk-*.json")))

    env_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", "")
    if env_path:
        possible_paths.append(Path(env_path))

    for key_path in possible_paths:
        if key_path.exists() and key_path.is_file():
            return key_path
    return None


def is_firebase_configured() -> bool:
    return find_service_account_key() is not None or bool(get_settings().firebase_project_id)


def get_firebase_app() -> firebase_admin.App:
    """Return the default Firebase app, initializing it on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass  # Need to initialize

    settings = get_settings()
    options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None

    key_path = find_service_account_key()
    if key_path is not None:
        app = firebase_admin.initialize_app(credentials.Certificate(str(key_path)), options)
        logger.info(f"Firebase Admin SDK initialized with: {key_path.name}")
        return app

    logger.warning("No Firebase service account key found! Falling back to default credentials.")
    return firebase_admin.initialize_app(options=options)
