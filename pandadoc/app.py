"""
Development webhook receiver.

Run with: flask --app pandadoc.app run --port 5005

Logs every PandaDoc event it receives. Reads its settings from the
environment (and a ``.env`` file in the working directory).
"""

import logging

from dotenv import load_dotenv
from flask import Flask

from .client import PandaDocClient
from .config import Settings
from .views import PandaDocWebhookView, register_webhook

logger = logging.getLogger(__name__)


class LoggingWebhookView(PandaDocWebhookView):
    """Webhook view that only logs what it receives."""

    def handle_document_change(self, document_id, status, details):
        logger.info(f"Document {document_id} changed to {status}")

    def handle_document_complete(self, document_id, pdf, status, details):
        logger.info(f"Document {document_id} completed, received {len(pdf)} bytes")


def create_app(settings=None, client=None, **dispatcher_options):
    app = Flask(__name__)

    if settings is None:
        load_dotenv()
        settings = Settings.from_env()

    logging.basicConfig(level=logging.INFO)

    client = client or PandaDocClient(settings)
    register_webhook(app, '/callbacks/pandadoc', LoggingWebhookView, client=client,
                     settings=settings, **dispatcher_options)

    return app
