"""
PandaDoc Exceptions

Custom exceptions raised by the API client and the webhook dispatcher.
"""


class PandaDocError(Exception):
    """Base exception for all PandaDoc client errors."""
    pass


class ConfigurationError(PandaDocError):
    """
    Raised when client settings are invalid.

    This includes non-numeric timeouts and negative retry settings
    read from the environment.
    """
    pass


class PandaDocTransportError(PandaDocError):
    """
    Raised when a request never produced an HTTP response.

    Network failures and timeouts end up here. The underlying
    requests exception is kept on ``original``.
    """
    def __init__(self, message: str, original: BaseException = None):
        self.original = original
        super().__init__(message)


class PandaDocAPIError(PandaDocError):
    """
    Raised when PandaDoc answers with a mapped error status.

    The message is the human readable ``user_msg`` PandaDoc returned.
    """
    def __init__(self, message: str, status_code: int = None, response_body: str = None):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)


class UnexpectedResponseError(PandaDocAPIError):
    """
    Raised when the response status is not mapped for the operation.

    The raw ``requests.Response`` is kept on ``response``.
    """
    def __init__(self, response):
        self.response = response
        super().__init__(
            f"Unexpected PandaDoc response status {response.status_code}",
            status_code=response.status_code,
            response_body=response.text
        )


class DownloadFailedError(PandaDocError):
    """Raised inside a webhook task when a completed document cannot be downloaded."""
    def __init__(self, document_id: str, attempts: int, last_error: BaseException = None):
        self.document_id = document_id
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Failed to download document {document_id} after {attempts} attempts: {last_error}"
        )
