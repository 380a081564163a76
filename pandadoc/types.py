"""
PandaDoc Type Definitions

Dataclasses representing the payloads exchanged with the PandaDoc API.
Request records are built by the caller; response records are decoded
fresh from every response and never cached.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

# fromisoformat() before 3.11 only takes 3 or 6 fractional digits
_FRACTION = re.compile(r'\.(\d+)')


def _pad_fraction(match) -> str:
    return '.' + match.group(1)[:6].ljust(6, '0')


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed) into an aware UTC datetime."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    text = _FRACTION.sub(_pad_fraction, str(value).replace('Z', '+00:00'), count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class DocumentStatus:
    """
    Document statuses reported by PandaDoc.

    Informational only. Transitions are driven by PandaDoc and
    never checked on this side.
    """
    DRAFT = "document.draft"
    UPLOADED = "document.uploaded"
    SENT = "document.sent"
    VIEWED = "document.viewed"
    WAITING_APPROVAL = "document.waiting_approval"
    APPROVED = "document.approved"
    REJECTED = "document.rejected"
    WAITING_PAY = "document.waiting_pay"
    PAID = "document.paid"
    COMPLETED = "document.completed"
    VOIDED = "document.voided"
    DECLINED = "document.declined"
    EXTERNAL_REVIEW = "document.external_review"


@dataclass(frozen=True)
class Recipient:
    """
    A signer or approver of a document.

    Attributes:
        email: Recipient email address
        first_name: Given name shown in PandaDoc
        last_name: Family name shown in PandaDoc
        role: Role name used by the document fields (e.g., "signer1")
    """
    email: str
    first_name: str
    last_name: str
    role: str

    def to_dict(self) -> Dict[str, str]:
        """Convert to PandaDoc API format."""
        return {
            'email': self.email,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'role': self.role
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Recipient':
        return cls(
            email=data.get('email'),
            first_name=data.get('first_name'),
            last_name=data.get('last_name'),
            role=data.get('role')
        )


@dataclass(frozen=True)
class Field:
    """A value used to pre-fill a PDF form field, and the role allowed to edit it."""
    value: Any
    role: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to PandaDoc API format."""
        return {'value': self.value, 'role': self.role}


@dataclass(frozen=True)
class BasicDocumentResponse:
    """The short view of a document returned by create, send, status and share calls."""
    id: str
    status: Optional[str] = None
    uuid: Optional[str] = None
    expires_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BasicDocumentResponse':
        return cls(
            id=data.get('id'),
            status=data.get('status'),
            uuid=data.get('uuid'),
            expires_at=parse_timestamp(data.get('expires_at'))
        )


@dataclass(frozen=True)
class DocumentResponse:
    """
    A document as returned by the details and list endpoints.

    Keys that are not modelled here (recipients, tokens, fields...)
    stay available in ``raw``.
    """
    id: str
    status: Optional[str] = None
    uuid: Optional[str] = None
    name: Optional[str] = None
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None
    expiration_date: Optional[datetime] = None
    version: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def recipients(self) -> List[Recipient]:
        """Recipients listed in the details payload, if any."""
        return [Recipient.from_dict(r) for r in self.raw.get('recipients') or []]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DocumentResponse':
        version = data.get('version')
        return cls(
            id=data.get('id'),
            status=data.get('status'),
            uuid=data.get('uuid'),
            name=data.get('name'),
            date_created=parse_timestamp(data.get('date_created')),
            date_modified=parse_timestamp(data.get('date_modified')),
            expiration_date=parse_timestamp(data.get('expiration_date')),
            version=str(version) if version is not None else None,
            raw=dict(data)
        )


@dataclass(frozen=True)
class DocumentListResponse:
    """Documents returned by the list endpoint, in server order."""
    results: Tuple[DocumentResponse, ...] = ()

    def __iter__(self):
        return iter(self.results)

    def __len__(self):
        return len(self.results)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DocumentListResponse':
        return cls(
            results=tuple(
                DocumentResponse.from_dict(d) for d in data.get('results') or [] if isinstance(d, dict)
            )
        )


@dataclass(frozen=True)
class ErrorResponse:
    """The user facing message of a failed API call."""
    user_msg: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'ErrorResponse':
        if not isinstance(data, dict):
            return cls(user_msg=str(data) if data is not None else None)
        # Older API versions use user_msg, current ones use detail
        message = data.get('user_msg') or data.get('detail')
        if isinstance(message, (dict, list)):
            message = str(message)
        return cls(user_msg=message)


class ShareLink(NamedTuple):
    """A recipient session link and the moment it stops working."""
    url: str
    expires_at: Optional[datetime]
