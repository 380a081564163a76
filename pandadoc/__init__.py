"""
PandaDoc API Client

A client for the pandadoc.com public API plus a Flask webhook helper
for document state changes.

Usage:
    from pandadoc import PandaDocClient, Recipient

    client = PandaDocClient.from_env()  # reads PANDADOC_API_KEY
    recipients = [Recipient('jane@example.com', 'Jane', 'Example', 'signer1')]
    document_id = client.create_document('Sample.pdf', pdf_bytes, recipients)
    client.send_document(document_id, 'Document ready', 'Please sign this document')
    link = client.share_document(document_id, 'jane@example.com', 900)
"""

__version__ = '0.2.0'

from .types import (
    DocumentStatus,
    Recipient,
    Field,
    BasicDocumentResponse,
    DocumentResponse,
    DocumentListResponse,
    ErrorResponse,
    ShareLink
)

from .exceptions import (
    PandaDocError,
    ConfigurationError,
    PandaDocTransportError,
    PandaDocAPIError,
    UnexpectedResponseError,
    DownloadFailedError
)

from .config import Settings
from .client import PandaDocClient
from .webhook import WebhookDispatcher, WebhookHandler

__all__ = [
    # Types
    'DocumentStatus',
    'Recipient',
    'Field',
    'BasicDocumentResponse',
    'DocumentResponse',
    'DocumentListResponse',
    'ErrorResponse',
    'ShareLink',

    # Exceptions
    'PandaDocError',
    'ConfigurationError',
    'PandaDocTransportError',
    'PandaDocAPIError',
    'UnexpectedResponseError',
    'DownloadFailedError',

    # Services
    'Settings',
    'PandaDocClient',
    'WebhookDispatcher',
    'WebhookHandler',
]
