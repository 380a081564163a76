"""
Request builder and response evaluation tests.

Run with: python -m pytest tests/test_request_builder.py -v
"""

import json

import pytest
import requests

from pandadoc.exceptions import PandaDocTransportError, UnexpectedResponseError
from pandadoc.request_builder import (
    BYTES,
    DEFAULT,
    OK,
    RAW,
    FormData,
    Multipart,
    Request,
    add_optional_params,
    add_param,
    decode,
    evaluate_response,
    method,
    url,
)
from pandadoc.types import BasicDocumentResponse, ErrorResponse

from conftest import make_response


class TestRequestBuilding:
    """Test assembling requests."""

    def test_method_is_set_once(self):
        """The first method wins."""
        request = method(method(Request(), 'get'), 'POST')
        assert request.method == 'GET'

    def test_url_is_set_once(self):
        """The first URL wins."""
        request = url(url(Request(), '/documents'), '/other')
        assert request.url == '/documents'

    def test_builders_do_not_mutate(self):
        """Builders return new requests."""
        original = Request()
        add_param(original, 'query', 'page', 1)
        assert original.params == ()

    def test_body_key_replaces_body(self):
        """body/body sets the body verbatim."""
        multipart = Multipart().add_field('data', '{}')
        request = add_param(Request(), 'body', 'body', multipart)
        assert request.body is multipart

    def test_other_body_keys_build_multipart(self):
        """Other body keys append JSON encoded multipart fields."""
        request = add_param(Request(), 'body', 'data', {'name': 'x'})
        request = add_param(request, 'body', 'tags', ['a'])

        assert isinstance(request.body, Multipart)
        names = [p.name for p in request.body.parts]
        assert names == ['data', 'tags']
        assert json.loads(request.body.parts[0].content) == {'name': 'x'}
        assert request.body.parts[0].content_type == 'application/json'

    def test_headers_location(self):
        """headers sets a header."""
        request = add_param(Request(), 'headers', 'X-Test', '1')
        assert request.headers == {'X-Test': '1'}

    def test_file_location_reads_path(self, tmp_path):
        """file appends a file part read from disk."""
        path = tmp_path / 'contract.pdf'
        path.write_bytes(b'%PDF-1.4')

        request = add_param(Request(), 'file', 'file', str(path))

        part = request.body.parts[0]
        assert part.name == 'file'
        assert part.filename == 'contract.pdf'
        assert part.content == b'%PDF-1.4'

    def test_form_location_merges(self):
        """form merges into a key/value body."""
        request = add_param(Request(), 'form', 'a', 1)
        request = add_param(request, 'form', 'b', 2)
        assert isinstance(request.body, FormData)
        assert request.body == {'a': 1, 'b': 2}

    def test_query_location_appends(self):
        """Unknown locations append query pairs, keeping repeats."""
        request = add_param(Request(), 'query', 'tag', 'a')
        request = add_param(request, 'query', 'tag', 'b')
        assert request.params == (('tag', 'a'), ('tag', 'b'))


class TestOptionalParams:
    """Test filtering of caller options."""

    def test_unknown_keys_are_dropped(self):
        """Only keys listed in the definitions are applied."""
        request = add_optional_params(
            Request(), {'q': 'query'}, {'q': 'nda', 'bogus': 'x'}
        )
        assert request.params == (('q', 'nda'),)

    def test_empty_options_return_same_request(self):
        """An empty option list leaves the request untouched."""
        request = Request(method='GET', url='/documents')
        assert add_optional_params(request, {'q': 'query'}, []) is request
        assert add_optional_params(request, {'q': 'query'}, {}) is request

    def test_pairs_are_accepted(self):
        """Options may be given as a list of pairs."""
        request = add_optional_params(
            Request(), {'tag': 'query'}, [('tag', 'a'), ('tag', 'b')]
        )
        assert request.params == (('tag', 'a'), ('tag', 'b'))


class TestDecode:
    """Test decoding responses into shapes."""

    def test_raw_returns_response(self):
        response = make_response(200, {'id': 'X'})
        assert decode(response, RAW) is response

    def test_ok_returns_marker_without_parsing(self):
        """OK never parses the body."""
        response = make_response(204, content=b'not json')
        assert decode(response, OK) is True

    def test_bytes_returns_body_unmodified(self):
        """BYTES passes binary content through."""
        pdf = b'%PDF-1.4\x00\xff\xfe binary'
        response = make_response(200, content=pdf, content_type='application/pdf')
        assert decode(response, BYTES) == pdf

    def test_model_shape_parses_json(self):
        response = make_response(200, {'id': 'X', 'status': 'document.sent', 'uuid': 'Y'})
        result = decode(response, BasicDocumentResponse)
        assert result == BasicDocumentResponse(id='X', status='document.sent', uuid='Y')

    @pytest.mark.parametrize('content', [b'null', b'[]', b'"text"', b'42'])
    def test_model_shape_rejects_non_object_json(self, content):
        """JSON that is not an object cannot become a model."""
        response = make_response(200, content=content)
        with pytest.raises(UnexpectedResponseError) as exc_info:
            decode(response, BasicDocumentResponse)
        assert exc_info.value.response is response

    def test_error_shape_accepts_non_object_json(self):
        response = make_response(500, content=b'"Something broke"')
        assert decode(response, ErrorResponse) == ErrorResponse(user_msg='Something broke')

    def test_error_shape_tolerates_non_json(self):
        """An HTML error page still becomes an ErrorResponse."""
        response = make_response(500, content=b'<h1>Server Error</h1>', content_type='text/html')
        assert decode(response, ErrorResponse) == ErrorResponse(user_msg='<h1>Server Error</h1>')


class TestEvaluateResponse:
    """Test mapping statuses to shapes."""

    MAPPING = [
        (200, BasicDocumentResponse),
        (DEFAULT, ErrorResponse),
    ]

    def test_exact_match(self):
        response = make_response(200, {'id': 'A'})
        assert evaluate_response(response, self.MAPPING) == BasicDocumentResponse(id='A')

    def test_default_used_when_nothing_matches(self):
        """A 201 falls through to the default shape."""
        response = make_response(201, {'user_msg': 'fallback'})
        assert evaluate_response(response, self.MAPPING) == ErrorResponse(user_msg='fallback')

    def test_first_match_wins(self):
        """Earlier entries take priority over later ones with the same status."""
        response = make_response(200, {'id': 'A'})
        result = evaluate_response(response, [(200, OK), (200, BasicDocumentResponse)])
        assert result is True

    def test_specific_status_after_default(self):
        """A specific entry still matches even when listed after the default."""
        response = make_response(404, {'detail': 'Not found'})
        result = evaluate_response(response, [(DEFAULT, OK), (404, ErrorResponse)])
        assert result == ErrorResponse(user_msg='Not found')

    def test_unmapped_status_raises_with_response(self):
        response = make_response(418, {'teapot': True})
        with pytest.raises(UnexpectedResponseError) as exc_info:
            evaluate_response(response, [(200, OK)])
        assert exc_info.value.response is response
        assert exc_info.value.status_code == 418

    def test_transport_error_is_propagated(self):
        """A transport failure is raised with the original attached."""
        error = requests.exceptions.ConnectTimeout('timed out')
        with pytest.raises(PandaDocTransportError) as exc_info:
            evaluate_response(error, self.MAPPING)
        assert exc_info.value.original is error
        assert exc_info.value.__cause__ is error
