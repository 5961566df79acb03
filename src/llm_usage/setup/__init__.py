"""Non-interactive account management."""

from llm_usage.setup.accounts import (
    add_account,
    list_configured_accounts,
    migrate_claude_cli,
    remove_account,
    rename_account,
)

__all__ = [
    "add_account",
    "list_configured_accounts",
    "migrate_claude_cli",
    "remove_account",
    "rename_account",
]
