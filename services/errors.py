"""Errors raised by the provider clients"""
from typing import Any, Optional


class ProviderError(Exception):
    """Base class for failures talking to an external provider

    Attributes:
        provider: Provider name (runway, openrouter, imgbb, sendgrid)
        status_code: HTTP status returned by the provider, if any
        provider_response: The provider's error payload exactly as received
    """

    def __init__(
        self,
        message: str,
        provider: str = "",
        status_code: Optional[int] = None,
        provider_response: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status_code = status_code
        self.provider_response = provider_response

    def to_dict(self):
        """转换为字典格式，用于API响应"""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "provider": self.provider,
            "status_code": self.status_code,
            "provider_response": self.provider_response,
        }


class ProviderSubmissionError(ProviderError):
    """Job creation failed or the provider returned no task id"""


class ProviderQueryError(ProviderError):
    """Task status read failed or the response was malformed"""


class CompletionTransportError(ProviderError):
    """Network failure or non-success status from the completion provider

    Never escapes CompletionService.complete; it is converted into an
    error result there.
    """


class ImageUploadError(ProviderError):
    """Image hosting upload failed"""


class EmailDeliveryError(ProviderError):
    """Email delivery failed"""


def response_payload(response) -> Any:
    """Best-effort decode of an httpx response body: JSON if possible, else text"""
    try:
        return response.json()
    except ValueError:
        return response.text
