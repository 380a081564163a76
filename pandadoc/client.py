"""
PandaDoc Client

Thin wrapper around the PandaDoc public API for document workflows.
Handles authentication, request building, and error normalisation.

Each method performs exactly one HTTP call. Successful responses are
decoded into the records from ``pandadoc.types``; error responses raise
``PandaDocAPIError`` with PandaDoc's user facing message.
"""

import json
import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import requests

from .config import PANDADOC_APP_URL, Settings
from .exceptions import PandaDocAPIError
from .request_builder import (
    BODY,
    BYTES,
    OK,
    QUERY,
    FormData,
    Multipart,
    Request,
    add_optional_params,
    add_param,
    evaluate_response,
    method,
    url,
)
from .types import (
    BasicDocumentResponse,
    DocumentListResponse,
    DocumentResponse,
    ErrorResponse,
    Field,
    Recipient,
    ShareLink,
)

logger = logging.getLogger(__name__)

SHARE_URL_TEMPLATE = PANDADOC_APP_URL + '/s/{id}'

DOWNLOAD_OPTIONS = {
    'watermark_color': QUERY,
    'watermark_font_size': QUERY,
    'watermark_opacity': QUERY,
    'watermark_text': QUERY,
    'separate_files': QUERY,
}

DOWNLOAD_PROTECTED_OPTIONS = {
    'hard_copy_type': QUERY,
    'separate_files': QUERY,
}

LIST_OPTIONS = {
    'q': QUERY,
    'tag': QUERY,
    'status': QUERY,
    'count': QUERY,
    'page': QUERY,
    'deleted': QUERY,
    'id': QUERY,
    'template_id': QUERY,
    'folder_uuid': QUERY,
}


class PandaDocClient:
    """
    Client for PandaDoc API operations.

    Provides methods for:
        - Creating documents from a PDF
        - Sending and sharing documents
        - Reading status, details and document lists
        - Downloading and deleting documents

    Usage:
        client = PandaDocClient.from_env()
        document_id = client.create_document('Sample.pdf', pdf_bytes, recipients)
        client.send_document(document_id, 'Document ready', 'Please sign')
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        api_key: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        settings = settings or Settings()
        if api_key is not None:
            settings = replace(settings, api_key=api_key)
        if not settings.api_key:
            logger.warning("PandaDoc client created without an API key")

        self.settings = settings
        self._owns_session = session is None
        self.session = session or requests.Session()

    @classmethod
    def from_env(cls, environ=None, session: Optional[requests.Session] = None) -> 'PandaDocClient':
        """Create a client from ``PANDADOC_*`` environment variables."""
        return cls(Settings.from_env(environ), session=session)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # =========================================================================
    # DOCUMENTS
    # =========================================================================

    def create_document(
        self,
        name: str,
        pdf_bytes: bytes,
        recipients: Iterable[Union[Recipient, Dict[str, Any]]],
        fields: Optional[Mapping[str, Union[Field, Dict[str, Any]]]] = None,
        tags: Optional[List[str]] = None,
        parse_form_fields: bool = False
    ) -> str:
        """
        Create a new document from a PDF.

        Args:
            name: Document name, also used as the uploaded file name
            pdf_bytes: PDF content
            recipients: Recipient records or dicts with email/first_name/last_name/role
            fields: Optional field name -> Field to pre-fill form fields
            tags: Optional list of tags
            parse_form_fields: Let PandaDoc turn PDF form fields into PandaDoc fields

        Returns:
            The new document ID
        """
        data = {
            'name': name,
            'tags': list(tags or []),
            'fields': {key: _to_dict(value) for key, value in (fields or {}).items()},
            'recipients': [_to_dict(r) for r in recipients],
            'parse_form_fields': parse_form_fields
        }

        body = (
            Multipart()
            .add_field('data', json.dumps(data))
            .add_file_content(pdf_bytes, name, name='file', content_type='application/pdf')
        )

        request = url(method(Request(), 'POST'), '/documents')
        request = add_param(request, BODY, BODY, body)

        result = self._perform(request, [
            (201, BasicDocumentResponse),
            (400, ErrorResponse),
            (401, ErrorResponse),
            (403, ErrorResponse),
            (500, ErrorResponse),
        ])
        logger.info(f"Created PandaDoc document {result.id} ({result.status})")
        return result.id

    def send_document(
        self,
        document_id: str,
        subject: Optional[str] = None,
        message: Optional[str] = None,
        silent: bool = False
    ) -> BasicDocumentResponse:
        """
        Move a document to sent status and optionally email the recipients.

        Returns:
            The document with its new status
        """
        request = url(method(Request(), 'POST'), f'/documents/{document_id}/send')
        request = add_param(request, BODY, BODY, {
            'subject': subject,
            'message': message,
            'silent': silent
        })

        return self._perform(request, [
            (200, BasicDocumentResponse),
            (400, ErrorResponse),
            (401, ErrorResponse),
            (403, ErrorResponse),
            (404, ErrorResponse),
            (500, ErrorResponse),
        ])

    def document_status(self, document_id: str) -> BasicDocumentResponse:
        """Get the current status of a document."""
        request = url(method(Request(), 'GET'), f'/documents/{document_id}')

        return self._perform(request, [
            (200, BasicDocumentResponse),
            (401, ErrorResponse),
            (403, ErrorResponse),
            (404, ErrorResponse),
            (500, ErrorResponse),
        ])

    def document_details(self, document_id: str) -> DocumentResponse:
        """Get the full details of a document (recipients, fields, tokens...)."""
        request = url(method(Request(), 'GET'), f'/documents/{document_id}/details')

        return self._perform(request, [
            (200, DocumentResponse),
            (401, ErrorResponse),
            (403, ErrorResponse),
            (404, ErrorResponse),
            (500, ErrorResponse),
        ])

    def share_document(self, document_id: str, recipient_email: str, lifetime: int = 86_400) -> ShareLink:
        """
        Generate a link that lets a recipient open the document without logging in.

        Args:
            document_id: PandaDoc document ID
            recipient_email: Email of a recipient of the document
            lifetime: Link lifetime in seconds (default one day)

        Returns:
            ShareLink with the session URL and its expiry
        """
        request = url(method(Request(), 'POST'), f'/documents/{document_id}/session')
        request = add_param(request, BODY, BODY, {
            'recipient': recipient_email,
            'lifetime': lifetime
        })

        session = self._perform(request, [
            (201, BasicDocumentResponse),
            (400, ErrorResponse),
            (401, ErrorResponse),
            (403, ErrorResponse),
            (404, ErrorResponse),
            (500, ErrorResponse),
        ])
        return ShareLink(SHARE_URL_TEMPLATE.format(id=session.id), session.expires_at)

    def download_document(self, document_id: str, **options) -> bytes:
        """
        Download the PDF of any document.

        Accepts watermark_color, watermark_font_size, watermark_opacity,
        watermark_text and separate_files as keyword options.
        """
        request = url(method(Request(), 'GET'), f'/documents/{document_id}/download')
        request = add_optional_params(request, DOWNLOAD_OPTIONS, options)

        return self._perform(request, [
            (200, BYTES),
            (401, ErrorResponse),
            (403, ErrorResponse),
            (404, ErrorResponse),
            (500, ErrorResponse),
        ])

    def download_protected_document(
        self,
        document_id: str,
        hard_copy_type: Optional[str] = None,
        **options
    ) -> bytes:
        """Download the signed PDF of a completed document."""
        if hard_copy_type is not None:
            options['hard_copy_type'] = hard_copy_type

        request = url(method(Request(), 'GET'), f'/documents/{document_id}/download-protected')
        request = add_optional_params(request, DOWNLOAD_PROTECTED_OPTIONS, options)

        return self._perform(request, [
            (200, BYTES),
            (401, ErrorResponse),
            (403, ErrorResponse),
            (404, ErrorResponse),
            (500, ErrorResponse),
        ])

    def delete_document(self, document_id: str) -> bool:
        """Delete a document. Returns True once PandaDoc confirms."""
        request = url(method(Request(), 'DELETE'), f'/documents/{document_id}')

        return self._perform(request, [
            (204, OK),
            (401, ErrorResponse),
            (403, ErrorResponse),
            (404, ErrorResponse),
            (500, ErrorResponse),
        ])

    def list_documents(self, **filters) -> DocumentListResponse:
        """
        List documents, optionally filtered.

        Accepts q, tag, status, count, page, deleted, id, template_id
        and folder_uuid as keyword filters.
        """
        request = url(method(Request(), 'GET'), '/documents')
        request = add_optional_params(request, LIST_OPTIONS, filters)

        return self._perform(request, [
            (200, DocumentListResponse),
            (400, ErrorResponse),
            (401, ErrorResponse),
            (403, ErrorResponse),
            (500, ErrorResponse),
        ])

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def _headers(self) -> Dict[str, str]:
        """Get request headers with auth."""
        return {
            'User-Agent': self.settings.user_agent,
            'Authorization': f'API-Key {self.settings.api_key}'
        }

    def _send(self, request: Request) -> Union[requests.Response, requests.exceptions.RequestException]:
        kwargs = {
            'params': [(key, _query_value(value)) for key, value in request.params],
            'headers': {**self._headers(), **request.headers},
            'timeout': self.settings.timeout
        }

        body = request.body
        if isinstance(body, Multipart):
            kwargs['files'] = body.to_files()
        elif isinstance(body, FormData):
            kwargs['data'] = dict(body)
        elif isinstance(body, (dict, list)):
            kwargs['json'] = body
        elif body is not None:
            kwargs['data'] = body

        try:
            return self.session.request(request.method, f"{self.settings.base_url}{request.url}", **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"PandaDoc {request.method} {request.url} failed: {e}")
            return e

    def _perform(self, request: Request, mapping) -> Any:
        response = self._send(request)
        result = evaluate_response(response, mapping)

        if isinstance(result, ErrorResponse):
            logger.error(
                f"PandaDoc {request.method} {request.url} returned {response.status_code}: {result.user_msg}"
            )
            raise PandaDocAPIError(
                result.user_msg or f"PandaDoc request failed with status {response.status_code}",
                status_code=response.status_code,
                response_body=response.text
            )
        return result


def _to_dict(value: Any) -> Any:
    return value.to_dict() if hasattr(value, 'to_dict') else value


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return value
