"""Exception hierarchy shared by the services and the HTTP layer."""

from __future__ import annotations

from typing import Optional


class InterviewApiError(Exception):
    """Base class for every error raised deliberately by this package."""


class ConfigurationError(InterviewApiError):
    """The AI provider configuration is missing or unusable."""


class DecryptionError(InterviewApiError):
    """A ciphertext could not be decrypted with the configured key."""


class ConfigDecryptionError(DecryptionError):
    """The configuration cookie could not be turned back into a config."""


class ProviderError(InterviewApiError):
    """Base class for failures talking to an upstream AI provider."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(message)
        self.provider = provider


class ProviderAPIError(ProviderError):
    """The provider answered with a non-success HTTP status."""

    def __init__(self, provider: str, status: int, reason: Optional[str] = None) -> None:
        self.status = status
        self.reason = reason or ""
        super().__init__(provider, f"{provider} API error: {status} {self.reason}".rstrip())


class ProviderConnectionError(ProviderError):
    """The request never produced an HTTP response (DNS, TLS, timeout...)."""


class ProviderResponseError(ProviderError):
    """The provider answered 2xx but the payload had an unexpected shape."""


class RoadmapError(InterviewApiError):
    """Base class for roadmap generation failures."""


class RoadmapParseError(RoadmapError):
    """The model output was not valid JSON."""


class RoadmapSchemaError(RoadmapError):
    """The model output parsed but lacks the required roadmap sections."""
