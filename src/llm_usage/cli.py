"""Command-line interface for llm-usage."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import click

from llm_usage.cache import CacheError, CacheManager
from llm_usage.config import KNOWN_PROVIDERS, Settings, get_settings
from llm_usage.credentials.errors import CredentialsError
from llm_usage.credentials.models import (
    DEFAULT_ACCOUNT,
    AccountCredential,
    APIKeyCredential,
    CookieCredential,
    OAuthCredential,
)
from llm_usage.credentials.store import CredentialStore
from llm_usage.logging import get_logger, setup_logging
from llm_usage.providers.registry import ProviderResources, display_name
from llm_usage.setup import accounts as account_setup
from llm_usage.usage.fetch import fetch_all
from llm_usage.usage.output import (
    build_waybar,
    format_json,
    format_pretty,
    waybar_error,
)
from llm_usage.usage.resolver import resolve_providers

log = get_logger("llm_usage.cli")

NO_PROVIDERS_MESSAGE = "No providers configured"


def _settings(ctx: click.Context) -> Settings:
    settings: Settings = ctx.obj["settings"]
    return settings


def _store(ctx: click.Context) -> CredentialStore:
    return CredentialStore(_settings(ctx).config_dir)


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, ensure_ascii=False))


@click.group(invoke_without_command=True)
@click.option(
    "--provider",
    "-p",
    default="all",
    show_default=True,
    help="Provider(s): claude, kimi, zai, minimax (comma-separated) or all",
)
@click.option("--account", "-a", default="", help="Account to query")
@click.option("--all-accounts", is_flag=True, help="Query every account of each provider")
@click.option("--json", "as_json", is_flag=True, help="Output JSON")
@click.option("--waybar", is_flag=True, help="Output a status-bar widget object")
@click.pass_context
def main(
    ctx: click.Context,
    provider: str,
    account: str,
    all_accounts: bool,
    as_json: bool,
    waybar: bool,
) -> None:
    """Show usage and quota statistics for your LLM subscriptions."""
    settings = get_settings()
    setup_logging(settings)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings

    if ctx.invoked_subcommand is not None:
        return
    if as_json and waybar:
        raise click.UsageError("--json and --waybar are mutually exclusive")

    try:
        instances = resolve_providers(
            provider,
            account,
            all_accounts,
            store=_store(ctx),
            resources=ProviderResources.from_settings(settings),
            default_provider=settings.default_provider,
        )
    except OSError as e:
        if waybar:
            _echo_json(waybar_error(str(e)))
            return
        raise click.ClickException(f"Failed to read credentials: {e}") from e

    if not instances:
        if waybar:
            _echo_json(waybar_error(NO_PROVIDERS_MESSAGE))
            return
        raise click.ClickException(
            f"{NO_PROVIDERS_MESSAGE}. Run `llm-usage setup add <provider>` first."
        )

    stats = asyncio.run(fetch_all(instances))
    log.debug("usage_fetched", rows=len(stats.providers), all_failed=stats.all_failed)

    if waybar:
        _echo_json(build_waybar(stats))
    elif as_json:
        click.echo(format_json(stats))
    else:
        click.echo(format_pretty(stats))


@main.command()
@click.option("--host", default=None, help="Bind host (default from settings)")
@click.option("--port", default=None, type=int, help="Bind port (default from settings)")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Serve usage over a read-only HTTP API."""
    from llm_usage.api.server import UsageAPIServer, run_server

    settings = _settings(ctx)
    server = UsageAPIServer.from_settings(settings, host=host, port=port)
    click.echo(f"Serving on http://{host or settings.api_host}:{port or settings.api_port}")
    try:
        asyncio.run(run_server(server))
    except KeyboardInterrupt:
        click.echo("Stopped.", err=True)


@main.group()
def setup() -> None:
    """Manage provider accounts."""


def _prompt_credential(
    provider_id: str,
    api_key: str | None,
    cookie: str | None,
    group_id: str | None,
    access_token: str | None,
    refresh_token: str | None,
    expires_at: int | None,
) -> AccountCredential:
    """Collect the credential for a provider, prompting for anything not given."""
    if provider_id == "claude":
        return OAuthCredential(
            access_token=access_token or click.prompt("OAuth access token", hide_input=True),
            refresh_token=refresh_token or "",
            expires_at=expires_at or 0,
        )
    if provider_id == "minimax":
        return CookieCredential(
            cookie=cookie or click.prompt("Session cookie", hide_input=True),
            group_id=group_id or click.prompt("GroupId"),
        )
    return APIKeyCredential(
        api_key=api_key or click.prompt(f"{display_name(provider_id)} API key", hide_input=True)
    )


@setup.command("add")
@click.argument("provider", type=click.Choice(KNOWN_PROVIDERS))
@click.option("--account", "-a", default=DEFAULT_ACCOUNT, show_default=True, help="Account name")
@click.option("--api-key", default=None, help="API key (kimi, zai)")
@click.option("--cookie", default=None, help="Session cookie (minimax)")
@click.option("--group-id", default=None, help="GroupId (minimax)")
@click.option("--access-token", default=None, help="OAuth access token (claude)")
@click.option("--refresh-token", default=None, help="OAuth refresh token (claude)")
@click.option("--expires-at", default=None, type=int, help="Token expiry, epoch ms (claude)")
@click.pass_context
def setup_add(
    ctx: click.Context,
    provider: str,
    account: str,
    api_key: str | None,
    cookie: str | None,
    group_id: str | None,
    access_token: str | None,
    refresh_token: str | None,
    expires_at: int | None,
) -> None:
    """Add or replace an account for PROVIDER."""
    credential = _prompt_credential(
        provider, api_key, cookie, group_id, access_token, refresh_token, expires_at
    )
    try:
        account_setup.add_account(_store(ctx), provider, account, credential)
    except (CredentialsError, OSError) as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Added {display_name(provider)} account '{account or DEFAULT_ACCOUNT}'.")


@setup.command("list")
@click.argument("provider", required=False, type=click.Choice(KNOWN_PROVIDERS))
@click.pass_context
def setup_list(ctx: click.Context, provider: str | None) -> None:
    """List configured accounts."""
    settings = _settings(ctx)
    try:
        configured = account_setup.list_configured_accounts(
            _store(ctx), provider, resources=ProviderResources.from_settings(settings)
        )
    except (CredentialsError, OSError) as e:
        raise click.ClickException(str(e)) from e

    if not configured:
        click.echo("No accounts configured.")
        return
    for pid, names in configured.items():
        click.echo(f"{display_name(pid)} ({pid}):")
        if not names:
            click.echo("  (no accounts)")
        for name in names:
            click.echo(f"  - {name}")


@setup.command("remove")
@click.argument("provider", type=click.Choice(KNOWN_PROVIDERS))
@click.argument("account")
@click.pass_context
def setup_remove(ctx: click.Context, provider: str, account: str) -> None:
    """Remove ACCOUNT from PROVIDER."""
    try:
        account_setup.remove_account(_store(ctx), provider, account)
    except (CredentialsError, OSError) as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Removed {display_name(provider)} account '{account}'.")


@setup.command("rename")
@click.argument("provider", type=click.Choice(KNOWN_PROVIDERS))
@click.argument("old_name")
@click.argument("new_name")
@click.pass_context
def setup_rename(ctx: click.Context, provider: str, old_name: str, new_name: str) -> None:
    """Rename account OLD_NAME of PROVIDER to NEW_NAME."""
    try:
        account_setup.rename_account(_store(ctx), provider, old_name, new_name)
    except (CredentialsError, OSError) as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Renamed {display_name(provider)} account '{old_name}' to '{new_name}'.")


@setup.command("migrate-claude")
@click.pass_context
def setup_migrate_claude(ctx: click.Context) -> None:
    """Copy Claude CLI credentials into llm-usage's store."""
    settings = _settings(ctx)
    try:
        path = account_setup.migrate_claude_cli(_store(ctx), settings.claude_cli_credentials_path)
    except (CredentialsError, OSError) as e:
        raise click.ClickException(f"Migration failed: {e}") from e
    click.echo("Migrated Claude CLI credentials.")
    click.echo(f"Credentials saved to: {path}")


@main.group()
def cache() -> None:
    """Manage the subscription lookup cache."""


@cache.command("clear")
@click.pass_context
def cache_clear(ctx: click.Context) -> None:
    """Remove every cached entry."""
    try:
        removed = CacheManager(_settings(ctx).cache_dir).clear()
    except CacheError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Removed {removed} cache entr{'y' if removed == 1 else 'ies'}.")


if __name__ == "__main__":  # pragma: no cover
    main()
