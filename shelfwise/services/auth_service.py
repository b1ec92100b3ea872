"""
Authentication service
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from firebase_admin import auth as firebase_auth

logger = logging.getLogger(__name__)


class AuthService:
    """Verifies Firebase ID tokens issued to the web client"""

    def verify_firebase_token(self, id_token: str) -> Optional[dict]:
        """Verify Firebase ID token"""
        try:
            return firebase_auth.verify_id_token(id_token)
        except Exception as e:
            logger.warning(f"Error verifying Firebase token: {e}")
            return None

    def get_account(self, uid: str) -> dict:
        """Email, display name and sign-up time registered with Firebase for a uid"""
        record = firebase_auth.get_user(uid)

        registered_at = None
        created_ms = record.user_metadata.creation_timestamp if record.user_metadata else None
        if created_ms:
            registered_at = datetime.fromtimestamp(created_ms / 1000, tz=timezone.utc)

        return {
            "email": record.email or "",
            "name": record.display_name or "Reader",
            "avatar_url": record.photo_url,
            "registered_at": registered_at,
        }
