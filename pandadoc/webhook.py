"""
Webhook Dispatching

Turns PandaDoc webhook batches into integrator callbacks.

Each recognised event runs in its own background thread so the inbound
HTTP request can be answered right away. Completed documents are
downloaded before the completion callback fires; the download waits for
PandaDoc to render the final PDF and is retried on failure.

Event payload:
    [
        {"event": "document_state_changed",
         "data": {"id": "...", "status": "document.completed", ...}},
        ...
    ]
"""

import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config import Settings
from .exceptions import DownloadFailedError, PandaDocError
from .types import DocumentStatus

logger = logging.getLogger(__name__)

STATE_CHANGED_EVENT = 'document_state_changed'

# Size of the fake PDF handed out in test mode
TEST_MODE_PDF_SIZE = 128


class WebhookHandler(ABC):
    """
    Callbacks invoked for PandaDoc document events.

    Implemented by the integrating application.
    """

    @abstractmethod
    def handle_document_change(self, document_id: str, status: str, details: Dict[str, Any]) -> Any:
        """Triggers when a PandaDoc document changed."""

    @abstractmethod
    def handle_document_complete(
        self,
        document_id: str,
        pdf: bytes,
        status: str,
        details: Dict[str, Any]
    ) -> Any:
        """Triggers when a PandaDoc document has been completed/signed."""

    def handle_download_failed(
        self,
        document_id: str,
        status: str,
        details: Dict[str, Any],
        error: DownloadFailedError
    ) -> Any:
        """Triggers when a completed document could not be downloaded."""
        logger.error(f"[PandaDoc] Giving up on document {document_id}: {error}")


def spawn_thread(target: Callable, *args) -> threading.Thread:
    """Run ``target`` in a daemon thread and return without waiting."""
    thread = threading.Thread(target=target, args=args, daemon=True, name='pandadoc-webhook')
    thread.start()
    return thread


class WebhookDispatcher:
    """
    Fans a webhook batch out into one background task per event.

    Downloads of completed documents are retried at most
    ``settings.download_max_attempts`` times (150 by default, about five
    minutes at the default backoff). Set it to 0 to retry forever.

    Usage:
        dispatcher = WebhookDispatcher(client, handler, client.settings)
        if not dispatcher.dispatch(payload):
            return '', 406
        return '', 200
    """

    def __init__(
        self,
        client,
        handler: WebhookHandler,
        settings: Optional[Settings] = None,
        sleep: Callable[[float], None] = time.sleep,
        spawn: Callable = spawn_thread
    ):
        self.client = client
        self.handler = handler
        self.settings = settings or getattr(client, 'settings', None) or Settings()
        self.sleep = sleep
        self.spawn = spawn

    @staticmethod
    def extract_events(payload: Any) -> Optional[List[Any]]:
        """
        Get the event list out of a webhook envelope.

        Accepts ``{"_json": [...]}`` as well as the bare list PandaDoc posts.
        Returns None when the envelope is malformed.
        """
        if isinstance(payload, dict):
            events = payload.get('_json')
            return events if isinstance(events, list) else None
        if isinstance(payload, list):
            return payload
        return None

    @staticmethod
    def parse_event(event: Any) -> Optional[Tuple[str, str, Dict[str, Any]]]:
        """Return (id, status, details) for a document state change, else None."""
        if not isinstance(event, dict) or event.get('event') != STATE_CHANGED_EVENT:
            return None
        details = event.get('data')
        if not isinstance(details, dict) or 'id' not in details or 'status' not in details:
            return None
        return details['id'], details['status'], details

    def dispatch(self, payload: Any) -> bool:
        """
        Schedule every recognised event in the envelope.

        Returns:
            False if the envelope is malformed (nothing scheduled), True otherwise
        """
        events = self.extract_events(payload)
        if events is None:
            logger.warning("[PandaDoc] Rejected malformed webhook envelope")
            return False

        for event in events:
            parsed = self.parse_event(event)
            if parsed is None:
                logger.debug(f"[PandaDoc] Dropping unrecognised webhook event: {event!r}")
                continue

            document_id, status, details = parsed
            logger.info(f"[PandaDoc] Scheduling {status} for document {document_id}")
            self.spawn(self.process_event, document_id, status, details)

        return True

    def process_event(self, document_id: str, status: str, details: Dict[str, Any]) -> None:
        """Task body: download if needed, then run the matching callback."""
        try:
            if status == DocumentStatus.COMPLETED:
                try:
                    pdf = self.fetch_document(document_id)
                except DownloadFailedError as e:
                    logger.error(f"[PandaDoc] {e}")
                    self.handler.handle_download_failed(document_id, status, details, e)
                    return
                self.handler.handle_document_complete(document_id, pdf, status, details)
            else:
                self.handler.handle_document_change(document_id, status, details)
        except Exception:
            logger.exception(f"[PandaDoc] Webhook callback failed for document {document_id}")

    def fetch_document(self, document_id: str) -> bytes:
        """
        Download a completed document, retrying until it succeeds.

        Waits ``download_delay`` before the first attempt and
        ``retry_backoff`` after each failure. Gives up after
        ``download_max_attempts`` attempts unless that is 0.
        """
        if self.settings.test_mode:
            logger.info("[PandaDoc] Using dummy data for tests")
            return os.urandom(TEST_MODE_PDF_SIZE)

        logger.info(f"[PandaDoc] Downloading document {document_id} in {self.settings.download_delay} seconds")
        self.sleep(self.settings.download_delay)

        max_attempts = self.settings.download_max_attempts
        attempts = 0
        while True:
            attempts += 1
            try:
                pdf = self.client.download_document(document_id)
            except PandaDocError as e:
                if max_attempts and attempts >= max_attempts:
                    raise DownloadFailedError(document_id, attempts, e) from e
                logger.info(
                    f"[PandaDoc] Retrying download of document {document_id} "
                    f"in {self.settings.retry_backoff} seconds: {e}"
                )
                self.sleep(self.settings.retry_backoff)
                continue

            logger.info(f"[PandaDoc] Successfully downloaded document {document_id}")
            return pdf
