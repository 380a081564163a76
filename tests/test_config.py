"""
Settings tests.

Run with: python -m pytest tests/test_config.py -v
"""

import pytest

from pandadoc import PandaDocClient
from pandadoc.config import PANDADOC_API_URL, PANDADOC_SANDBOX_API_URL, Settings
from pandadoc.exceptions import ConfigurationError


class TestSettingsFromEnv:
    """Test reading PANDADOC_* variables."""

    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.api_key == ''
        assert settings.base_url == PANDADOC_API_URL
        assert settings.timeout == 30
        assert settings.download_delay == 30
        assert settings.retry_backoff == 2
        assert settings.download_max_attempts == 150
        assert settings.test_mode is False
        assert settings.user_agent.startswith('pandadoc-python/')

    def test_values_are_read(self):
        settings = Settings.from_env({
            'PANDADOC_API_KEY': 'abc',
            'PANDADOC_TIMEOUT': '10',
            'PANDADOC_TEST_MODE': 'true',
            'PANDADOC_DOWNLOAD_MAX_ATTEMPTS': '0',
            'PANDADOC_BASE_URL': 'http://localhost:9000/public/v1/',
        })
        assert settings.api_key == 'abc'
        assert settings.timeout == 10
        assert settings.test_mode is True
        assert settings.download_max_attempts == 0
        assert settings.base_url == 'http://localhost:9000/public/v1'

    def test_sandbox_switches_base_url(self):
        settings = Settings.from_env({'PANDADOC_SANDBOX': '1'})
        assert settings.base_url == PANDADOC_SANDBOX_API_URL

    def test_invalid_number_raises(self):
        with pytest.raises(ConfigurationError):
            Settings.from_env({'PANDADOC_TIMEOUT': 'soon'})

    def test_negative_number_raises(self):
        with pytest.raises(ConfigurationError):
            Settings.from_env({'PANDADOC_RETRY_BACKOFF': '-1'})


class TestClientConstruction:
    """Test building clients from settings."""

    def test_from_env(self, session):
        client = PandaDocClient.from_env({'PANDADOC_API_KEY': 'env-key'}, session=session)
        assert client.settings.api_key == 'env-key'

    def test_api_key_override(self, settings, session):
        """An explicit key wins over the settings one."""
        client = PandaDocClient(settings, api_key='other', session=session)
        assert client.settings.api_key == 'other'
        assert settings.api_key == 'test-key'

    def test_injected_session_is_not_closed(self, settings, session):
        with PandaDocClient(settings, session=session):
            pass
        session.close.assert_not_called()
