"""Credential document schemas.

Every provider stores one JSON document. A document holds either a legacy
flat credential (implicitly the account named ``default``), an ``accounts``
mapping of account name to credential, or transiently both while being
migrated. The ``accounts`` mapping always wins when it is non-empty.
"""

from __future__ import annotations

import time
from datetime import timedelta
from types import MappingProxyType
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from llm_usage.credentials.errors import AccountError, CredentialsValidationError

DEFAULT_ACCOUNT = "default"


class AccountCredential(BaseModel):
    """One account's credential for a provider."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    required_fields: ClassVar[tuple[str, ...]] = ()

    def missing_fields(self) -> list[str]:
        """Return the JSON names of required fields that are empty."""
        missing = []
        for name in self.required_fields:
            if not getattr(self, name):
                field = type(self).model_fields[name]
                missing.append(field.alias or name)
        return missing


class OAuthCredential(AccountCredential):
    """OAuth token set (Claude)."""

    required_fields: ClassVar[tuple[str, ...]] = ("access_token",)

    access_token: str = Field(default="", alias="accessToken")
    refresh_token: str = Field(default="", alias="refreshToken")
    expires_at: int = Field(default=0, alias="expiresAt")  # Unix milliseconds
    scopes: list[str] = Field(default_factory=list)

    def is_expired(self, now_ms: int | None = None) -> bool:
        """Check whether the access token has expired.

        A zero ``expiresAt`` means no expiry was recorded.
        """
        if not self.expires_at:
            return False
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        return now_ms > self.expires_at

    def expires_in(self) -> timedelta | None:
        """Time left before the token expires, if an expiry is recorded."""
        if not self.expires_at:
            return None
        return timedelta(milliseconds=self.expires_at - int(time.time() * 1000))


class APIKeyCredential(AccountCredential):
    """Single API key (Kimi, Z.AI)."""

    required_fields: ClassVar[tuple[str, ...]] = ("api_key",)

    api_key: str = Field(default="", alias="apiKey")


class CookieCredential(AccountCredential):
    """Browser session cookie plus the account group id (MiniMax)."""

    required_fields: ClassVar[tuple[str, ...]] = ("cookie", "group_id")

    cookie: str = ""
    group_id: str = Field(default="", alias="groupId")


class CredentialDocument(BaseModel):
    """Base class for a provider's stored credential document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    account_type: ClassVar[type[AccountCredential]] = AccountCredential

    accounts: dict[str, Any] | None = None

    def legacy_credential(self) -> AccountCredential | None:
        """Return the legacy flat credential, if the document has one."""
        raise NotImplementedError

    def _clear_legacy(self) -> None:
        raise NotImplementedError

    def get_account(self, account_name: str = "") -> AccountCredential | None:
        """Resolve an account's credential.

        With an empty name: the ``default`` account if present, else the
        first account in document order, else the legacy credential.
        With a name: only the exact match (the legacy credential answers
        to ``default``), else None.
        """
        if not account_name:
            if self.accounts:
                if DEFAULT_ACCOUNT in self.accounts:
                    return self.accounts[DEFAULT_ACCOUNT]  # type: ignore[no-any-return]
                return next(iter(self.accounts.values()))  # type: ignore[no-any-return]
            return self.legacy_credential()

        if self.accounts:
            return self.accounts.get(account_name)
        if account_name == DEFAULT_ACCOUNT:
            return self.legacy_credential()
        return None

    def list_accounts(self) -> list[str]:
        """Account names in document order (``["default"]`` for a legacy document)."""
        if self.accounts:
            return list(self.accounts)
        if self.legacy_credential() is not None:
            return [DEFAULT_ACCOUNT]
        return []

    def validate_complete(self) -> None:
        """Check every account carries all required values.

        Raises:
            CredentialsValidationError: An account (or the legacy credential)
                is missing or incomplete.
        """
        if self.accounts:
            for name, account in self.accounts.items():
                missing = account.missing_fields()
                if missing:
                    raise CredentialsValidationError(
                        f"account {name!r} is missing {', '.join(missing)}"
                    )
            return

        legacy = self.legacy_credential()
        if legacy is None:
            raise CredentialsValidationError("no credentials found")
        missing = legacy.missing_fields()
        if missing:
            raise CredentialsValidationError(f"credentials are missing {', '.join(missing)}")

    def _promote_legacy(self) -> dict[str, Any]:
        """Move a legacy credential into ``accounts`` as ``default``."""
        if not self.accounts:
            legacy = self.legacy_credential()
            self.accounts = {}
            if legacy is not None:
                self.accounts[DEFAULT_ACCOUNT] = legacy
        self._clear_legacy()
        return self.accounts

    def set_account(self, account_name: str, credential: AccountCredential) -> None:
        """Insert or replace an account, moving a legacy credential to ``default`` first."""
        self._promote_legacy()[account_name or DEFAULT_ACCOUNT] = credential

    def remove_account(self, account_name: str) -> None:
        """Remove a named account from the ``accounts`` mapping.

        Raises:
            AccountError: The account does not exist.
        """
        accounts = self._promote_legacy()
        if account_name not in accounts:
            raise AccountError(f"account {account_name!r} not found")
        del accounts[account_name]

    def rename_account(self, old_name: str, new_name: str) -> None:
        """Rename an account, keeping its position in the mapping.

        Raises:
            AccountError: ``old_name`` is missing or ``new_name`` is taken.
        """
        accounts = self._promote_legacy()
        if old_name not in accounts:
            raise AccountError(f"account {old_name!r} not found")
        if new_name in accounts:
            raise AccountError(f"account {new_name!r} already exists")
        self.accounts = {
            (new_name if name == old_name else name): account
            for name, account in accounts.items()
        }

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with the on-disk field names, omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ClaudeCredentials(CredentialDocument):
    """Claude OAuth credentials (``claudeAiOauth`` is the legacy field)."""

    account_type: ClassVar[type[AccountCredential]] = OAuthCredential

    claude_ai_oauth: OAuthCredential | None = Field(default=None, alias="claudeAiOauth")
    accounts: dict[str, OAuthCredential] | None = None  # type: ignore[assignment]

    def legacy_credential(self) -> OAuthCredential | None:
        return self.claude_ai_oauth

    def _clear_legacy(self) -> None:
        self.claude_ai_oauth = None


class APIKeyCredentials(CredentialDocument):
    """API-key credentials (``apiKey`` is the legacy field)."""

    account_type: ClassVar[type[AccountCredential]] = APIKeyCredential

    api_key: str | None = Field(default=None, alias="apiKey")
    accounts: dict[str, APIKeyCredential] | None = None  # type: ignore[assignment]

    def legacy_credential(self) -> APIKeyCredential | None:
        if not self.api_key:
            return None
        return APIKeyCredential(api_key=self.api_key)

    def _clear_legacy(self) -> None:
        self.api_key = None


class KimiCredentials(APIKeyCredentials):
    """Kimi API credentials."""


class ZaiCredentials(APIKeyCredentials):
    """Z.AI API credentials."""


class MiniMaxCredentials(CredentialDocument):
    """MiniMax cookie credentials (``cookie``/``groupId`` are the legacy fields)."""

    account_type: ClassVar[type[AccountCredential]] = CookieCredential

    cookie: str | None = None
    group_id: str | None = Field(default=None, alias="groupId")
    accounts: dict[str, CookieCredential] | None = None  # type: ignore[assignment]

    def legacy_credential(self) -> CookieCredential | None:
        if not self.cookie:
            return None
        return CookieCredential(cookie=self.cookie, group_id=self.group_id or "")

    def _clear_legacy(self) -> None:
        self.cookie = None
        self.group_id = None


DOCUMENT_TYPES: MappingProxyType[str, type[CredentialDocument]] = MappingProxyType(
    {
        "claude": ClaudeCredentials,
        "kimi": KimiCredentials,
        "zai": ZaiCredentials,
        "minimax": MiniMaxCredentials,
    }
)
