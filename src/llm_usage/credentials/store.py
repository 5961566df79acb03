"""File-backed credential store.

One JSON document per provider id, ``<config_dir>/<provider_id>.json``,
readable only by the owning user.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from llm_usage.credentials.errors import (
    CredentialsError,
    CredentialsNotFoundError,
    CredentialsParseError,
    UnknownProviderError,
)
from llm_usage.credentials.models import (
    DOCUMENT_TYPES,
    CredentialDocument,
    OAuthCredential,
)
from llm_usage.fileutil import atomic_write_text, ensure_private_dir
from llm_usage.logging import get_logger

log = get_logger("llm_usage.credentials.store")


def document_type(provider_id: str) -> type[CredentialDocument]:
    """Return the credential document class for a provider id.

    Raises:
        UnknownProviderError: The provider id is not known.
    """
    try:
        return DOCUMENT_TYPES[provider_id]
    except KeyError:
        raise UnknownProviderError(
            f"unknown provider: {provider_id}", provider_id=provider_id
        ) from None


def _parse_document(
    provider_id: str, raw: str, source: Path
) -> CredentialDocument:
    doc_type = document_type(provider_id)
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise CredentialsParseError(
            f"failed to parse {source}: {e}", provider_id=provider_id
        ) from e

    if not isinstance(data, dict):
        raise CredentialsParseError(
            f"failed to parse {source}: expected a JSON object", provider_id=provider_id
        )

    try:
        document = doc_type.model_validate(data)
    except ValidationError as e:
        raise CredentialsParseError(
            f"failed to parse {source}: {e}", provider_id=provider_id
        ) from e

    try:
        document.validate_complete()
    except CredentialsError as e:
        e.provider_id = provider_id
        raise
    return document


class CredentialStore:
    """Loads and persists provider credential documents."""

    def __init__(self, config_dir: Path | str):
        """Initialize the store.

        Args:
            config_dir: Directory holding one document per provider.
        """
        self._config_dir = Path(config_dir)

    @property
    def config_dir(self) -> Path:
        """Directory holding the credential documents."""
        return self._config_dir

    def path_for(self, provider_id: str) -> Path:
        """Location of a provider's document."""
        return self._config_dir / f"{provider_id}.json"

    def exists(self, provider_id: str) -> bool:
        """Check whether a document exists for the provider (valid or not)."""
        return self.path_for(provider_id).is_file()

    def load(self, provider_id: str) -> CredentialDocument:
        """Load and validate a provider's document.

        Raises:
            UnknownProviderError: The provider id is not known.
            CredentialsNotFoundError: No document exists.
            CredentialsParseError: The document is not valid JSON or has the wrong shape.
            CredentialsValidationError: An account is missing required values.
            OSError: Any other read failure.
        """
        document_type(provider_id)
        path = self.path_for(provider_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise CredentialsNotFoundError(
                f"credentials not found: {path}", provider_id=provider_id
            ) from None

        return _parse_document(provider_id, raw, path)

    def save(self, provider_id: str, document: CredentialDocument) -> None:
        """Persist a document, replacing any previous one atomically.

        Raises:
            UnknownProviderError: The provider id is not known.
            OSError: The directory or file could not be written.
        """
        document_type(provider_id)
        ensure_private_dir(self._config_dir)
        payload = json.dumps(document.to_json_dict(), indent=2)
        atomic_write_text(self.path_for(provider_id), payload + "\n")
        log.info("credentials_saved", provider=provider_id)

    def delete(self, provider_id: str) -> None:
        """Remove a provider's document.

        Raises:
            CredentialsNotFoundError: No document exists.
        """
        path = self.path_for(provider_id)
        try:
            path.unlink()
        except FileNotFoundError:
            raise CredentialsNotFoundError(
                f"credentials not found: {path}", provider_id=provider_id
            ) from None
        log.info("credentials_deleted", provider=provider_id)

    def list_available(self) -> list[str]:
        """Provider ids that have a document, sorted, regardless of validity."""
        if not self._config_dir.is_dir():
            return []
        return sorted(p.stem for p in self._config_dir.glob("*.json") if p.is_file())

    def list_accounts(self, provider_id: str) -> list[str]:
        """Account names configured for a provider.

        Raises:
            CredentialsError: The document is missing or invalid.
        """
        return self.load(provider_id).list_accounts()

    def migrate_legacy_source(self, external_path: Path | str, provider_id: str) -> None:
        """Copy an external tool's credential file into this store.

        The external file must parse as this provider's document. An
        existing document is never overwritten.

        Raises:
            CredentialsNotFoundError: The external file does not exist.
            CredentialsError: A document already exists, or the external
                file is invalid.
        """
        external_path = Path(external_path)
        try:
            raw = external_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise CredentialsNotFoundError(
                f"source credentials not found: {external_path}", provider_id=provider_id
            ) from None

        if self.exists(provider_id):
            raise CredentialsError(
                f"credentials already exist: {self.path_for(provider_id)}",
                provider_id=provider_id,
            )

        document = _parse_document(provider_id, raw, external_path)
        self.save(provider_id, document)
        log.info("credentials_migrated", provider=provider_id, source=str(external_path))


def load_claude_cli_credentials(path: Path | str) -> OAuthCredential:
    """Read the OAuth token set written by the Claude CLI.

    Raises:
        CredentialsNotFoundError: The file does not exist.
        CredentialsParseError: The file is malformed.
        CredentialsValidationError: The file carries no access token.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise CredentialsNotFoundError(
            f"credentials not found: {path}", provider_id="claude"
        ) from None

    document = _parse_document("claude", raw, path)
    credential = document.get_account()
    if not isinstance(credential, OAuthCredential):
        raise CredentialsParseError(f"no OAuth credentials in {path}", provider_id="claude")
    return credential
