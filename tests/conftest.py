"""
Shared fixtures for the PandaDoc client tests.

No test talks to PandaDoc: the requests session is a mock that
returns canned ``requests.Response`` objects.
"""

import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from pandadoc import PandaDocClient, Settings


def make_response(status_code, body=None, content=None, content_type='application/json'):
    """Build a real requests.Response with a JSON (or raw) body."""
    response = requests.Response()
    response.status_code = status_code
    if content is None:
        content = json.dumps(body).encode('utf-8') if body is not None else b''
    response._content = content
    response.headers['Content-Type'] = content_type
    response.encoding = 'utf-8'
    return response


@pytest.fixture
def settings():
    return Settings(api_key='test-key', download_delay=30, retry_backoff=2)


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(settings, session):
    return PandaDocClient(settings, session=session)
