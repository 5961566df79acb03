"""Per-provider credential documents and their on-disk store."""

from llm_usage.credentials.errors import (
    AccountError,
    CredentialsError,
    CredentialsNotFoundError,
    CredentialsParseError,
    CredentialsValidationError,
    UnknownProviderError,
)
from llm_usage.credentials.models import (
    DEFAULT_ACCOUNT,
    APIKeyCredential,
    ClaudeCredentials,
    CookieCredential,
    CredentialDocument,
    KimiCredentials,
    MiniMaxCredentials,
    OAuthCredential,
    ZaiCredentials,
)
from llm_usage.credentials.store import CredentialStore, load_claude_cli_credentials

__all__ = [
    "DEFAULT_ACCOUNT",
    "APIKeyCredential",
    "AccountError",
    "ClaudeCredentials",
    "CookieCredential",
    "CredentialDocument",
    "CredentialStore",
    "CredentialsError",
    "CredentialsNotFoundError",
    "CredentialsParseError",
    "CredentialsValidationError",
    "KimiCredentials",
    "MiniMaxCredentials",
    "OAuthCredential",
    "UnknownProviderError",
    "ZaiCredentials",
    "load_claude_cli_credentials",
]
