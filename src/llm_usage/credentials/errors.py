"""Exceptions raised by the credential store."""


class CredentialsError(Exception):
    """Base exception for credential loading and management."""

    def __init__(self, message: str, provider_id: str | None = None):
        super().__init__(message)
        self.provider_id = provider_id


class CredentialsNotFoundError(CredentialsError):
    """No credential document exists for the provider."""


class CredentialsParseError(CredentialsError):
    """The credential document is not valid JSON or has the wrong shape."""


class CredentialsValidationError(CredentialsError):
    """The credential document parsed but is missing required values."""


class UnknownProviderError(CredentialsError):
    """The provider id has no known credential document type."""


class AccountError(CredentialsError):
    """An account-management operation referenced a missing or duplicate account."""
