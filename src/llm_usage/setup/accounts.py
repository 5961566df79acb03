"""Account management on top of the credential store.

Adding an account to a legacy single-credential document first moves the
legacy credential into the ``accounts`` mapping as ``default``.
"""

from __future__ import annotations

from pathlib import Path

from llm_usage.credentials.errors import (
    AccountError,
    CredentialsError,
    CredentialsNotFoundError,
    UnknownProviderError,
)
from llm_usage.credentials.models import DEFAULT_ACCOUNT, AccountCredential, CredentialDocument
from llm_usage.credentials.store import CredentialStore, document_type
from llm_usage.logging import get_logger
from llm_usage.providers.registry import PROVIDERS, ProviderResources, ProviderSpec, get_spec

log = get_logger("llm_usage.setup.accounts")


def _require_known(provider_id: str) -> None:
    if get_spec(provider_id) is None:
        raise UnknownProviderError(f"unknown provider: {provider_id}", provider_id=provider_id)


def add_account(
    store: CredentialStore,
    provider_id: str,
    account_name: str,
    credential: AccountCredential,
) -> CredentialDocument:
    """Insert or replace an account and save the document.

    An unreadable existing document is replaced rather than repaired.

    Raises:
        UnknownProviderError: The provider id is not known.
        TypeError: ``credential`` is the wrong kind for the provider.
        AccountError: ``credential`` is missing required values.
        OSError: The document could not be written.
    """
    _require_known(provider_id)
    doc_type = document_type(provider_id)
    if not isinstance(credential, doc_type.account_type):
        raise TypeError(
            f"{provider_id} expects {doc_type.account_type.__name__}, "
            f"got {type(credential).__name__}"
        )

    account_name = account_name.strip() or DEFAULT_ACCOUNT
    missing = credential.missing_fields()
    if missing:
        raise AccountError(
            f"account {account_name!r} is missing {', '.join(missing)}", provider_id=provider_id
        )

    try:
        document = store.load(provider_id)
    except CredentialsNotFoundError:
        document = doc_type()
    except CredentialsError as e:
        log.warning("credentials_replaced", provider=provider_id, reason=str(e))
        document = doc_type()

    document.set_account(account_name, credential)
    store.save(provider_id, document)
    log.info("account_added", provider=provider_id, account=account_name)
    return document


def remove_account(store: CredentialStore, provider_id: str, account_name: str) -> None:
    """Remove an account; the document is deleted with its last account.

    Raises:
        AccountError: The account does not exist.
        CredentialsError: The document is missing or invalid.
    """
    _require_known(provider_id)
    if not account_name:
        raise AccountError("account name is required", provider_id=provider_id)

    document = store.load(provider_id)
    try:
        document.remove_account(account_name)
    except AccountError as e:
        e.provider_id = provider_id
        raise

    if document.accounts:
        store.save(provider_id, document)
    else:
        store.delete(provider_id)
    log.info("account_removed", provider=provider_id, account=account_name)


def rename_account(
    store: CredentialStore, provider_id: str, old_name: str, new_name: str
) -> None:
    """Rename an account.

    Raises:
        AccountError: ``old_name`` is missing or ``new_name`` already exists.
        CredentialsError: The document is missing or invalid.
    """
    _require_known(provider_id)
    if not old_name or not new_name:
        raise AccountError("both old and new account names are required", provider_id=provider_id)

    document = store.load(provider_id)
    try:
        document.rename_account(old_name, new_name)
    except AccountError as e:
        e.provider_id = provider_id
        raise
    store.save(provider_id, document)
    log.info("account_renamed", provider=provider_id, old=old_name, new=new_name)


def _external_available(spec: ProviderSpec, resources: ProviderResources) -> bool:
    if spec.load_external is None:
        return False
    try:
        spec.load_external(resources)
    except CredentialsError as e:
        log.debug("external_credentials_unavailable", provider=spec.id, reason=str(e))
        return False
    return True


def list_configured_accounts(
    store: CredentialStore,
    provider_id: str | None = None,
    resources: ProviderResources | None = None,
) -> dict[str, list[str]]:
    """Account names per configured provider.

    Includes the implicit ``default`` account of a provider whose external
    credential file is present. Invalid documents list no accounts.
    """
    if provider_id is not None:
        _require_known(provider_id)
        candidates = [provider_id]
    else:
        candidates = list(PROVIDERS)

    available = set(store.list_available())
    result: dict[str, list[str]] = {}
    for pid in candidates:
        spec = PROVIDERS[pid]
        accounts: list[str] = []
        configured = pid in available
        if configured:
            try:
                accounts = store.load(pid).list_accounts()
            except CredentialsError as e:
                log.debug("credentials_unavailable", provider=pid, reason=str(e))

        if resources is not None and _external_available(spec, resources):
            configured = True
            if DEFAULT_ACCOUNT not in accounts:
                accounts.append(DEFAULT_ACCOUNT)

        if configured or provider_id is not None:
            result[pid] = accounts
    return result


def migrate_claude_cli(store: CredentialStore, cli_credentials_path: Path | str) -> Path:
    """Copy the Claude CLI's credential file into the store.

    Returns:
        Path of the new ``claude.json``.

    Raises:
        CredentialsNotFoundError: The CLI credential file does not exist.
        CredentialsError: ``claude.json`` already exists or the file is invalid.
    """
    store.migrate_legacy_source(cli_credentials_path, "claude")
    return store.path_for("claude")
