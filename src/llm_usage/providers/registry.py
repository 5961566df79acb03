"""Known providers and how to build an adapter from a stored credential.

The resolution core only sees :class:`ProviderSpec` objects; everything
vendor-specific about building an adapter lives in this module.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from types import MappingProxyType
from typing import Any

from llm_usage.cache import CacheManager
from llm_usage.config import Settings
from llm_usage.credentials.errors import CredentialsNotFoundError
from llm_usage.credentials.models import (
    AccountCredential,
    ClaudeCredentials,
    CredentialDocument,
    KimiCredentials,
    MiniMaxCredentials,
    OAuthCredential,
    ZaiCredentials,
)
from llm_usage.credentials.store import load_claude_cli_credentials
from llm_usage.providers.base import Provider
from llm_usage.providers.claude import ClaudeProvider
from llm_usage.providers.http import DEFAULT_TIMEOUT
from llm_usage.providers.kimi import KimiProvider
from llm_usage.providers.minimax import MiniMaxProvider
from llm_usage.providers.subscription import DEFAULT_SUBSCRIPTION_TTL
from llm_usage.providers.zai import ZaiProvider


@dataclass(frozen=True)
class ProviderResources:
    """Shared collaborators handed to every adapter built in one resolution."""

    cache: CacheManager | None = None
    timeout: float = DEFAULT_TIMEOUT
    subscription_ttl: timedelta | float = DEFAULT_SUBSCRIPTION_TTL
    claude_cli_path: Path | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> ProviderResources:
        """Build resources from application settings."""
        return cls(
            cache=CacheManager(settings.cache_dir),
            timeout=settings.request_timeout,
            subscription_ttl=settings.subscription_cache_ttl,
            claude_cli_path=settings.claude_cli_credentials_path,
        )


BuildFn = Callable[[Any, ProviderResources], Provider]
ExternalLoadFn = Callable[[ProviderResources], AccountCredential]


def _always_usable(credential: AccountCredential) -> bool:
    return True


@dataclass(frozen=True)
class ProviderSpec:
    """Static description of one provider."""

    id: str
    display_name: str
    document_type: type[CredentialDocument]
    build: BuildFn
    # Credential source outside this tool's store (implicit "default" account)
    load_external: ExternalLoadFn | None = None
    is_usable: Callable[[Any], bool] = _always_usable

    @property
    def dual_source(self) -> bool:
        """Whether credentials may also come from an external tool's file."""
        return self.load_external is not None


def _build_claude(credential: OAuthCredential, resources: ProviderResources) -> Provider:
    return ClaudeProvider(credential.access_token, timeout=resources.timeout)


def _load_claude_cli(resources: ProviderResources) -> AccountCredential:
    if resources.claude_cli_path is None:
        raise CredentialsNotFoundError("no Claude CLI credentials path", provider_id="claude")
    return load_claude_cli_credentials(resources.claude_cli_path)


def _claude_usable(credential: OAuthCredential) -> bool:
    return not credential.is_expired()


def _build_kimi(credential: Any, resources: ProviderResources) -> Provider:
    return KimiProvider(
        credential.api_key,
        cache=resources.cache,
        timeout=resources.timeout,
        subscription_ttl=resources.subscription_ttl,
    )


def _build_zai(credential: Any, resources: ProviderResources) -> Provider:
    return ZaiProvider(credential.api_key, timeout=resources.timeout)


def _build_minimax(credential: Any, resources: ProviderResources) -> Provider:
    return MiniMaxProvider(
        credential.cookie,
        credential.group_id,
        cache=resources.cache,
        timeout=resources.timeout,
        subscription_ttl=resources.subscription_ttl,
    )


PROVIDERS: MappingProxyType[str, ProviderSpec] = MappingProxyType(
    {
        "claude": ProviderSpec(
            id="claude",
            display_name="Claude",
            document_type=ClaudeCredentials,
            build=_build_claude,
            load_external=_load_claude_cli,
            is_usable=_claude_usable,
        ),
        "kimi": ProviderSpec(
            id="kimi",
            display_name="Kimi",
            document_type=KimiCredentials,
            build=_build_kimi,
        ),
        "zai": ProviderSpec(
            id="zai",
            display_name="Z.AI",
            document_type=ZaiCredentials,
            build=_build_zai,
        ),
        "minimax": ProviderSpec(
            id="minimax",
            display_name="MiniMax",
            document_type=MiniMaxCredentials,
            build=_build_minimax,
        ),
    }
)


def get_spec(provider_id: str) -> ProviderSpec | None:
    """Look up a provider by id."""
    return PROVIDERS.get(provider_id)


def display_name(provider_id: str) -> str:
    """Display name for a provider id, or the id itself if unknown."""
    spec = PROVIDERS.get(provider_id)
    return spec.display_name if spec else provider_id
