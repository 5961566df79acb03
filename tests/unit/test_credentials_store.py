"""Tests for the file-backed credential store."""

import json
import stat

import pytest

from llm_usage.credentials.errors import (
    CredentialsError,
    CredentialsNotFoundError,
    CredentialsParseError,
    CredentialsValidationError,
    UnknownProviderError,
)
from llm_usage.credentials.models import APIKeyCredential, KimiCredentials
from llm_usage.credentials.store import load_claude_cli_credentials


def write_json(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data) if not isinstance(data, str) else data)


class TestCredentialStoreLoad:
    """Tests for loading documents."""

    def test_not_found(self, store):
        with pytest.raises(CredentialsNotFoundError) as exc_info:
            store.load("kimi")
        assert exc_info.value.provider_id == "kimi"

    def test_unknown_provider(self, store):
        with pytest.raises(UnknownProviderError):
            store.load("openai")

    def test_invalid_json(self, store):
        write_json(store.path_for("kimi"), "{oops")
        with pytest.raises(CredentialsParseError):
            store.load("kimi")

    def test_not_an_object(self, store):
        write_json(store.path_for("kimi"), ["apiKey"])
        with pytest.raises(CredentialsParseError):
            store.load("kimi")

    def test_wrong_shape(self, store):
        write_json(store.path_for("kimi"), {"accounts": {"work": "not-an-object"}})
        with pytest.raises(CredentialsParseError):
            store.load("kimi")

    def test_incomplete(self, store):
        write_json(store.path_for("kimi"), {"accounts": {"work": {}}})
        with pytest.raises(CredentialsValidationError) as exc_info:
            store.load("kimi")
        assert exc_info.value.provider_id == "kimi"

    def test_legacy_document(self, store):
        write_json(store.path_for("kimi"), {"apiKey": "sk-legacy"})
        doc = store.load("kimi")
        assert isinstance(doc, KimiCredentials)
        assert doc.list_accounts() == ["default"]


class TestCredentialStoreSave:
    """Tests for saving and deleting documents."""

    def test_round_trip(self, store):
        doc = KimiCredentials()
        doc.set_account("work", APIKeyCredential(api_key="sk-work"))
        store.save("kimi", doc)

        loaded = store.load("kimi")
        assert loaded.get_account("work").api_key == "sk-work"
        assert json.loads(store.path_for("kimi").read_text()) == {
            "accounts": {"work": {"apiKey": "sk-work"}}
        }

    def test_file_and_dir_modes(self, store):
        doc = KimiCredentials()
        doc.set_account("default", APIKeyCredential(api_key="k"))
        store.save("kimi", doc)

        assert stat.S_IMODE(store.path_for("kimi").stat().st_mode) == 0o600
        assert stat.S_IMODE(store.config_dir.stat().st_mode) == 0o700

    def test_no_temp_files_left(self, store):
        doc = KimiCredentials()
        doc.set_account("default", APIKeyCredential(api_key="k"))
        store.save("kimi", doc)
        store.save("kimi", doc)

        assert sorted(p.name for p in store.config_dir.iterdir()) == ["kimi.json"]

    def test_delete(self, store):
        write_json(store.path_for("zai"), {"apiKey": "k"})
        store.delete("zai")
        assert not store.exists("zai")

        with pytest.raises(CredentialsNotFoundError):
            store.delete("zai")


class TestCredentialStoreListing:
    """Tests for listing providers and accounts."""

    def test_list_available_empty(self, store):
        assert store.list_available() == []

    def test_list_available_sorted(self, store):
        write_json(store.path_for("zai"), {"apiKey": "k"})
        write_json(store.path_for("kimi"), "garbage")
        (store.config_dir / "notes.txt").write_text("ignored")

        assert store.list_available() == ["kimi", "zai"]

    def test_list_accounts(self, store):
        write_json(
            store.path_for("kimi"),
            {"accounts": {"work": {"apiKey": "1"}, "home": {"apiKey": "2"}}},
        )
        assert store.list_accounts("kimi") == ["work", "home"]


class TestMigrateLegacySource:
    """Tests for importing an external tool's credential file."""

    def test_migrate(self, store, claude_cli_path):
        write_json(
            claude_cli_path,
            {"claudeAiOauth": {"accessToken": "tok", "refreshToken": "r", "expiresAt": 1}},
        )
        store.migrate_legacy_source(claude_cli_path, "claude")

        assert store.load("claude").get_account().access_token == "tok"
        assert claude_cli_path.exists()

    def test_missing_source(self, store, claude_cli_path):
        with pytest.raises(CredentialsNotFoundError):
            store.migrate_legacy_source(claude_cli_path, "claude")

    def test_destination_exists(self, store, claude_cli_path):
        write_json(claude_cli_path, {"claudeAiOauth": {"accessToken": "new"}})
        write_json(store.path_for("claude"), {"claudeAiOauth": {"accessToken": "old"}})

        with pytest.raises(CredentialsError, match="already exist"):
            store.migrate_legacy_source(claude_cli_path, "claude")
        assert store.load("claude").get_account().access_token == "old"


class TestLoadClaudeCLICredentials:
    """Tests for reading the Claude CLI credential file."""

    def test_load(self, claude_cli_path):
        write_json(claude_cli_path, {"claudeAiOauth": {"accessToken": "tok", "expiresAt": 99}})
        cred = load_claude_cli_credentials(claude_cli_path)
        assert cred.access_token == "tok"
        assert cred.expires_at == 99

    def test_missing(self, claude_cli_path):
        with pytest.raises(CredentialsNotFoundError):
            load_claude_cli_credentials(claude_cli_path)

    def test_without_token(self, claude_cli_path):
        write_json(claude_cli_path, {"claudeAiOauth": {"refreshToken": "r"}})
        with pytest.raises(CredentialsValidationError):
            load_claude_cli_credentials(claude_cli_path)
