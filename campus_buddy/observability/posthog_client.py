# campus_buddy/observability/posthog_client.py

"""
PostHog event tracking for Campus Buddy.

Tracking is best effort: when POSTHOG_API_KEY is missing the client is a
no-op, and capture failures are logged and dropped so a request never
fails because analytics did.
"""

import os
import logging
from typing import Optional, Dict, Any

from posthog import Posthog


logger = logging.getLogger(__name__)


class PostHogClient:

    def __init__(self, api_key: Optional[str] = None, host: Optional[str] = None):

        api_key = api_key or os.getenv("POSTHOG_API_KEY")
        host = host or os.getenv("POSTHOG_HOST", "https://app.posthog.com")

        self._client: Optional[Posthog] = None

        if not api_key:
            logger.warning("POSTHOG_API_KEY not set, analytics disabled")
            return

        try:
            self._client = Posthog(
                project_api_key=api_key,
                host=host,
                timeout=5,
                flush_interval=1,
            )
        except Exception as e:
            logger.error("Could not start PostHog", extra={"host": host, "error": str(e)})
            return

        logger.info("PostHog analytics enabled", extra={"host": host})


    @property
    def enabled(self) -> bool:
        return self._client is not None


    def _send(self, method: str, distinct_id: str, **kwargs):

        if not self.enabled:
            return

        try:
            getattr(self._client, method)(distinct_id=distinct_id, **kwargs)

        except Exception as e:
            logger.warning(
                "PostHog call dropped",
                extra={"method": method, "error": str(e), **kwargs},
            )


    def _track(
        self,
        distinct_id: str,
        event: str,
        properties: Optional[Dict[str, Any]] = None,
    ):
        self._send("capture", distinct_id, event=event, properties=properties or {})


    def identify_user(
        self,
        distinct_id: str,
        properties: Optional[Dict[str, Any]] = None,
    ):
        """
        distinct_id is the X-User-Id of the caller when known,
        otherwise the request id.
        """
        self._send("identify", distinct_id, properties=properties or {})


    # ==========================================================
    # CHAT
    # ==========================================================

    def track_chat(
        self,
        distinct_id: str,
        message: str,
        provider: Optional[str],
        latency: float,
        answered: bool,
    ):

        self._track(
            distinct_id,
            "chat_answered" if answered else "chat_unanswered",
            {
                "message_length": len(message),
                "provider": provider,
                "latency_seconds": latency,
            },
        )


    def track_syncspot_redirect(
        self,
        distinct_id: str,
        question: str,
        posted: bool,
    ):

        self._track(
            distinct_id,
            "syncspot_redirect",
            {
                "question_length": len(question),
                "posted": posted,
            },
        )


    # ==========================================================
    # DOCUMENTS
    # ==========================================================

    def track_document_processed(
        self,
        distinct_id: str,
        record_id: str,
        file_type: str,
        parsed_length: int,
        ai_processed: bool,
        latency: float,
    ):

        self._track(
            distinct_id,
            "document_processed",
            {
                "record_id": record_id,
                "file_type": file_type,
                "parsed_length": parsed_length,
                "ai_processed": ai_processed,
                "latency_seconds": latency,
            },
        )


    # ==========================================================
    # ERRORS
    # ==========================================================

    def track_error(
        self,
        distinct_id: str,
        error_type: str,
        error_message: str,
        endpoint: str,
    ):

        self._track(
            distinct_id,
            "system_error",
            {
                "error_type": error_type,
                "error_message": error_message,
                "endpoint": endpoint,
            },
        )


posthog_client = PostHogClient()
