"""
Push notifications through Firebase Cloud Messaging.

The Firebase app is initialised on first send from a base64 encoded
service account. Sending is best effort: failures are logged and
returned, never raised to the caller.
"""

import base64
import json
from typing import Any, Dict, Iterable, Optional

import firebase_admin
from firebase_admin import credentials, messaging

from dintask.core.config import settings
from dintask.core.logging_config import logger


class PushService:
    def __init__(self):
        self._app = None

    @property
    def is_configured(self) -> bool:
        return bool(settings.FIREBASE_SERVICE_ACCOUNT_BASE64)

    def _get_app(self):
        if self._app is None:
            raw = base64.b64decode(settings.FIREBASE_SERVICE_ACCOUNT_BASE64).decode("utf-8")
            cred = credentials.Certificate(json.loads(raw))
            self._app = firebase_admin.initialize_app(cred, name="dintask")
            logger.info("[Push] Firebase Admin initialized")
        return self._app

    def send(
        self,
        tokens: Iterable[Optional[str]],
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Multicast to every non-empty token.

        Returns {"sent": n, "failed": n} or {"error": "..."}; an empty token
        list or missing configuration sends nothing.
        """
        valid = [t for t in tokens if t and t.strip()]
        if not valid:
            return {"sent": 0, "failed": 0}
        if not self.is_configured:
            logger.debug("[Push] Firebase not configured, skipping push")
            return {"sent": 0, "failed": 0}

        # FCM data payload values must be strings
        payload = {k: str(v) for k, v in (data or {}).items() if v is not None}
        try:
            message = messaging.MulticastMessage(
                tokens=valid,
                notification=messaging.Notification(title=title, body=body),
                data=payload,
            )
            response = messaging.send_each_for_multicast(message, app=self._get_app())
            logger.info(f"[Push] Sent {response.success_count} notifications, {response.failure_count} failed")
            return {"sent": response.success_count, "failed": response.failure_count}
        except Exception as e:
            logger.error(f"[Push] Error sending push notification: {e}")
            return {"error": str(e)}


push_service = PushService()
