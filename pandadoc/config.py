import os
from dataclasses import dataclass

from . import __version__
from .exceptions import ConfigurationError

PANDADOC_API_URL = 'https://api.pandadoc.com/public/v1'
PANDADOC_SANDBOX_API_URL = 'https://api-sandbox.pandadoc.com/public/v1'
PANDADOC_APP_URL = 'https://app.pandadoc.com'

# Request timeout
DEFAULT_TIMEOUT = 30

# Webhook download of completed documents
DEFAULT_DOWNLOAD_DELAY = 30
DEFAULT_RETRY_BACKOFF = 2
DEFAULT_DOWNLOAD_MAX_ATTEMPTS = 150


def _env_bool(environ, name: str, default: bool = False) -> bool:
    value = environ.get(name)
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_number(environ, name: str, default, cast=float):
    value = environ.get(name)
    if value is None or value == '':
        return default
    try:
        number = cast(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    if number < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value!r}")
    return number


@dataclass(frozen=True)
class Settings:
    """
    Connection and webhook settings, built once and handed to the client.

    Attributes:
        api_key: PandaDoc API key sent as ``Authorization: API-Key <key>``
        base_url: API root, without trailing slash
        timeout: Per request timeout in seconds
        user_agent: Value of the User-Agent header
        test_mode: Webhook downloads return random bytes instead of calling the API
        download_delay: Seconds to wait before downloading a completed document
        retry_backoff: Seconds to wait between failed download attempts
        download_max_attempts: Download attempts before giving up (0 = never give up)
    """
    api_key: str = ''
    base_url: str = PANDADOC_API_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = f'pandadoc-python/{__version__}'
    test_mode: bool = False
    download_delay: float = DEFAULT_DOWNLOAD_DELAY
    retry_backoff: float = DEFAULT_RETRY_BACKOFF
    download_max_attempts: int = DEFAULT_DOWNLOAD_MAX_ATTEMPTS

    @classmethod
    def from_env(cls, environ=None) -> 'Settings':
        """Build settings from ``PANDADOC_*`` environment variables."""
        environ = os.environ if environ is None else environ

        base_url = environ.get('PANDADOC_BASE_URL')
        if not base_url:
            if _env_bool(environ, 'PANDADOC_SANDBOX'):
                base_url = PANDADOC_SANDBOX_API_URL
            else:
                base_url = PANDADOC_API_URL

        return cls(
            api_key=environ.get('PANDADOC_API_KEY', ''),
            base_url=base_url.rstrip('/'),
            timeout=_env_number(environ, 'PANDADOC_TIMEOUT', DEFAULT_TIMEOUT),
            user_agent=environ.get('PANDADOC_USER_AGENT') or cls.user_agent,
            test_mode=_env_bool(environ, 'PANDADOC_TEST_MODE'),
            download_delay=_env_number(environ, 'PANDADOC_DOWNLOAD_DELAY', DEFAULT_DOWNLOAD_DELAY),
            retry_backoff=_env_number(environ, 'PANDADOC_RETRY_BACKOFF', DEFAULT_RETRY_BACKOFF),
            download_max_attempts=_env_number(
                environ, 'PANDADOC_DOWNLOAD_MAX_ATTEMPTS', DEFAULT_DOWNLOAD_MAX_ATTEMPTS, cast=int
            ),
        )
