"""Turn provider/account filters into the list of adapters to query.

Resolution only reads local files. Missing or invalid credentials make a
provider contribute zero instances; they are never reported as errors.
"""

from __future__ import annotations

from dataclasses import dataclass

from llm_usage.credentials.errors import CredentialsError
from llm_usage.credentials.models import DEFAULT_ACCOUNT, AccountCredential, CredentialDocument
from llm_usage.credentials.store import CredentialStore
from llm_usage.logging import get_logger
from llm_usage.providers.base import Provider
from llm_usage.providers.registry import ProviderResources, ProviderSpec, get_spec

log = get_logger("llm_usage.usage.resolver")

ALL_PROVIDERS = "all"


@dataclass
class ProviderInstance:
    """An adapter bound to one account."""

    provider: Provider
    account_name: str


def provider_ids(
    provider_filter: str, store: CredentialStore, default_provider: str = "claude"
) -> list[str]:
    """Candidate provider ids for a filter.

    ``""`` or ``"all"`` means every provider with a stored document, or
    ``default_provider`` when none is stored. Otherwise the comma-separated
    ids, in the given order, duplicates kept.
    """
    provider_filter = provider_filter.strip()
    if not provider_filter or provider_filter == ALL_PROVIDERS:
        return store.list_available() or [default_provider]
    return [pid.strip() for pid in provider_filter.split(",")]


def _load_document(store: CredentialStore, spec: ProviderSpec) -> CredentialDocument | None:
    try:
        return store.load(spec.id)
    except CredentialsError as e:
        log.debug("credentials_unavailable", provider=spec.id, reason=str(e))
        return None


def _load_external(spec: ProviderSpec, resources: ProviderResources) -> AccountCredential | None:
    if spec.load_external is None:
        return None
    try:
        return spec.load_external(resources)
    except CredentialsError as e:
        log.debug("external_credentials_unavailable", provider=spec.id, reason=str(e))
        return None


def _instance(
    spec: ProviderSpec,
    credential: AccountCredential | None,
    account_name: str,
    resources: ProviderResources,
) -> ProviderInstance | None:
    if credential is None:
        return None
    if not spec.is_usable(credential):
        log.debug("credentials_unusable", provider=spec.id, account=account_name)
        return None
    return ProviderInstance(spec.build(credential, resources), account_name)


def _resolve_dual_source(
    spec: ProviderSpec,
    account_filter: str,
    store: CredentialStore,
    resources: ProviderResources,
) -> list[ProviderInstance]:
    """Merge the external tool's credential with this tool's store.

    The external source only supplies the implicit ``default`` account.
    A named account filter consults the store alone.
    """
    external = _load_external(spec, resources)
    document = _load_document(store, spec)
    if external is None and document is None:
        return []

    if account_filter:
        if document is None:
            return []
        instance = _instance(spec, document.get_account(account_filter), account_filter, resources)
        return [instance] if instance else []

    instances: list[ProviderInstance] = []
    external_instance = _instance(spec, external, DEFAULT_ACCOUNT, resources)
    if external_instance is not None:
        instances.append(external_instance)

    if document is not None:
        for name in document.list_accounts():
            if external_instance is not None and name == DEFAULT_ACCOUNT:
                continue
            instance = _instance(spec, document.get_account(name), name, resources)
            if instance is not None:
                instances.append(instance)
    return instances


def _resolve_single_source(
    spec: ProviderSpec,
    account_filter: str,
    all_accounts: bool,
    store: CredentialStore,
    resources: ProviderResources,
) -> list[ProviderInstance]:
    document = _load_document(store, spec)
    if document is None:
        return []

    if all_accounts or not account_filter:
        names = document.list_accounts()
    else:
        names = [account_filter]

    instances = []
    for name in names:
        instance = _instance(spec, document.get_account(name), name, resources)
        if instance is not None:
            instances.append(instance)
    return instances


def resolve_providers(
    provider_filter: str = "",
    account_filter: str = "",
    all_accounts: bool = False,
    *,
    store: CredentialStore,
    resources: ProviderResources | None = None,
    default_provider: str = "claude",
) -> list[ProviderInstance]:
    """Resolve filters into adapter instances, in provider then account order.

    Args:
        provider_filter: ``""``/``"all"`` or comma-separated provider ids.
        account_filter: Account name to restrict to, or ``""`` for all.
        all_accounts: Include every account even when ``account_filter`` is set
            (store-only providers).
        store: Credential store to read documents from.
        resources: Shared cache/timeout/external-path settings for adapters.
        default_provider: Provider tried when nothing is configured.

    Returns:
        Instances to fetch; empty when nothing matches. Unknown provider
        ids are ignored.
    """
    resources = resources or ProviderResources()
    account_filter = account_filter.strip()

    instances: list[ProviderInstance] = []
    for pid in provider_ids(provider_filter, store, default_provider):
        spec = get_spec(pid)
        if spec is None:
            log.debug("unknown_provider_ignored", provider=pid)
            continue

        if spec.dual_source:
            found = _resolve_dual_source(spec, account_filter, store, resources)
        else:
            found = _resolve_single_source(spec, account_filter, all_accounts, store, resources)
        instances.extend(found)

    log.debug("providers_resolved", count=len(instances))
    return instances
