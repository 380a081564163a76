"""
Request Builder

Helpers for assembling a request description before it is handed to the
transport, and for turning the response into a typed result.

Requests are immutable values: every helper returns a new ``Request``.

Usage:
    request = Request()
    request = method(request, 'GET')
    request = url(request, f'/documents/{document_id}/download')
    request = add_optional_params(request, {'watermark_text': 'query'}, options)

    result = evaluate_response(response, [
        (200, BYTES),
        (404, ErrorResponse),
    ])
"""

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import requests

from .exceptions import PandaDocTransportError, UnexpectedResponseError
from .types import ErrorResponse

logger = logging.getLogger(__name__)

# Response shapes understood by decode()
RAW = False
OK = 'ok'
BYTES = 'bytes'

# Mapping key used when no status matches
DEFAULT = 'default'

# Parameter locations understood by add_param()
BODY = 'body'
HEADERS = 'headers'
FILE = 'file'
FORM = 'form'
QUERY = 'query'


@dataclass(frozen=True)
class Part:
    """One part of a multipart body."""
    name: str
    content: Union[str, bytes]
    filename: Optional[str] = None
    content_type: Optional[str] = None


@dataclass(frozen=True)
class Multipart:
    """An ordered multipart/form-data body."""
    parts: Tuple[Part, ...] = ()

    def add_field(self, name: str, value: str, content_type: Optional[str] = None) -> 'Multipart':
        return replace(self, parts=self.parts + (Part(name, value, None, content_type),))

    def add_file_content(
        self,
        content: bytes,
        filename: str,
        name: str = 'file',
        content_type: Optional[str] = None
    ) -> 'Multipart':
        return replace(self, parts=self.parts + (Part(name, content, filename, content_type),))

    def add_file(self, path: Union[str, Path], name: Optional[str] = None) -> 'Multipart':
        path = Path(path)
        return self.add_file_content(path.read_bytes(), path.name, name=name or 'file')

    def to_files(self) -> List[Tuple[str, tuple]]:
        """Render the parts in the ``files=`` format accepted by requests."""
        files = []
        for part in self.parts:
            if part.content_type:
                files.append((part.name, (part.filename, part.content, part.content_type)))
            else:
                files.append((part.name, (part.filename, part.content)))
        return files


class FormData(dict):
    """A urlencoded key/value body."""
    pass


@dataclass(frozen=True)
class Request:
    """Everything needed to perform one HTTP call."""
    method: Optional[str] = None
    url: Optional[str] = None
    params: Tuple[Tuple[str, Any], ...] = ()
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None


def method(request: Request, verb: str) -> Request:
    """Set the request method unless one is already set."""
    if request.method is not None:
        return request
    return replace(request, method=verb.upper())


def url(request: Request, path: str) -> Request:
    """Set the request URL unless one is already set."""
    if request.url is not None:
        return request
    return replace(request, url=path)


def add_param(request: Request, location: str, key: str, value: Any) -> Request:
    """
    Add a single parameter to the request.

    Args:
        request: Request collected so far
        location: One of body, headers, file, form or query
        key: Parameter name
        value: Parameter value (a file path for the file location)

    Returns:
        A new Request
    """
    if location == BODY:
        if key == BODY:
            return replace(request, body=value)
        body = _multipart_body(request)
        return replace(
            request,
            body=body.add_field(key, json.dumps(value), content_type='application/json')
        )

    if location == HEADERS:
        return replace(request, headers={**request.headers, key: value})

    if location == FILE:
        return replace(request, body=_multipart_body(request).add_file(value, name=key))

    if location == FORM:
        body = request.body if isinstance(request.body, FormData) else FormData()
        return replace(request, body=FormData({**body, key: value}))

    return replace(request, params=request.params + ((key, value),))


def add_optional_params(
    request: Request,
    definitions: Mapping[str, str],
    options: Union[Mapping[str, Any], Iterable[Tuple[str, Any]], None]
) -> Request:
    """
    Add the caller supplied options that are listed in ``definitions``.

    Args:
        request: Request collected so far
        definitions: Recognised option name -> parameter location
        options: Option pairs supplied by the caller

    Returns:
        A new Request, or the same one when no option applies
    """
    if not options:
        return request

    pairs = options.items() if isinstance(options, Mapping) else options
    for key, value in pairs:
        location = definitions.get(key)
        if location is None:
            logger.debug(f"Ignoring unknown option {key!r}")
            continue
        request = add_param(request, location, key, value)
    return request


def _multipart_body(request: Request) -> Multipart:
    if isinstance(request.body, Multipart):
        return request.body
    return Multipart()


# =============================================================================
# RESPONSE HANDLING
# =============================================================================

def decode(response: requests.Response, shape: Any) -> Any:
    """
    Decode a response into the requested shape.

    RAW returns the response itself, OK returns True, BYTES returns the
    body unparsed. Any other shape is a model class built from the JSON body.
    """
    if shape is RAW:
        return response
    if shape == OK:
        return True
    if shape == BYTES:
        return response.content

    try:
        data = response.json()
    except ValueError as e:
        if shape is ErrorResponse:
            return ErrorResponse(user_msg=response.text or None)
        raise UnexpectedResponseError(response) from e

    if shape is not ErrorResponse and not isinstance(data, dict):
        raise UnexpectedResponseError(response)
    return shape.from_dict(data)


def evaluate_response(result: Union[requests.Response, BaseException], mapping: List[Tuple[Any, Any]]) -> Any:
    """
    Map a completed exchange to a typed result.

    Args:
        result: The response, or the transport exception raised instead of one
        mapping: Ordered (status, shape) pairs, optionally with one (DEFAULT, shape)

    Returns:
        The decoded body of the first matching entry

    Raises:
        PandaDocTransportError: The request failed before a response arrived
        UnexpectedResponseError: No entry matched and there is no default
    """
    if isinstance(result, BaseException):
        raise PandaDocTransportError(f"PandaDoc request failed: {result}", original=result) from result

    default = None
    for status, shape in mapping:
        if status == DEFAULT:
            default = (shape,)
            continue
        if status == result.status_code:
            return decode(result, shape)

    if default is not None:
        return decode(result, default[0])

    raise UnexpectedResponseError(result)
