"""Tests for the goldfinch command-line surface."""
import json

import pytest

from goldfinch.cli import main as cli_main
from goldfinch.cli.renderers import render_identifiers, render_matches, render_record, render_store
from goldfinch.secrets.domains.models import Match, MatchKind, SecretRecord, SecretStore


@pytest.fixture
def install_client(monkeypatch, temp_home, fake_client):
    """Route the CLI to a fake store client; returns a setter."""
    monkeypatch.setenv("GCP_PROJECT", "test-project")
    monkeypatch.delenv(cli_main.SECRETS_ENV_VAR, raising=False)

    def install(**kwargs):
        client = fake_client(**kwargs)
        monkeypatch.setattr(cli_main, "GCPSecretClient", lambda project_id: client)
        return client

    return install


def run(argv):
    """Run the CLI and return its exit code (0 when it returns normally)."""
    try:
        cli_main.main(argv)
    except SystemExit as e:
        return e.code
    return 0


class TestListCommand:

    def test_list_json(self, install_client, capsys):
        install_client(identifiers=["beta", "alpha"])
        assert run(["list"]) == 0
        assert json.loads(capsys.readouterr().out) == ["beta", "alpha"]

    def test_list_plain(self, install_client, capsys):
        install_client(identifiers=["beta", "alpha"])
        assert run(["--format", "plain", "list"]) == 0
        assert capsys.readouterr().out == "beta\nalpha\n"

    def test_format_accepted_after_subcommand(self, install_client, capsys):
        install_client(identifiers=["one"])
        assert run(["list", "-f", "plain"]) == 0
        assert capsys.readouterr().out == "one\n"

    def test_list_failure_exits_1(self, install_client, capsys):
        install_client(identifiers=[], list_error=PermissionError("denied"))
        assert run(["list"]) == 1
        assert "Failed to list secrets" in capsys.readouterr().err


class TestGetCommand:

    def test_get_single_json(self, install_client, capsys, sample_payloads):
        install_client(payloads=sample_payloads)
        assert run(["get", "my-app-config"]) == 0
        assert json.loads(capsys.readouterr().out) == sample_payloads["my-app-config"]

    def test_get_single_plain(self, install_client, capsys):
        install_client(payloads={"s": {"tags": ["prod", "important"], "port": 5432, "enabled": True}})
        assert run(["-f", "plain", "get", "s"]) == 0
        assert capsys.readouterr().out == 'enabled: true\nport: 5432\ntags: ["prod","important"]\n'

    def test_get_many_plain(self, install_client, capsys, sample_payloads):
        install_client(payloads=sample_payloads)
        assert run(["-f", "plain", "get", "my-app-urls", "my-app-config"]) == 0
        assert capsys.readouterr().out.splitlines() == [
            "my-app-config/api_key: abc123",
            "my-app-config/db_password: secret123",
            "my-app-urls/prod_db_url: https://prod.example.com",
            "my-app-urls/staging_db_url: https://staging.example.com",
        ]

    def test_get_from_environment(self, install_client, capsys, monkeypatch, sample_payloads):
        client = install_client(payloads=sample_payloads)
        monkeypatch.setenv(cli_main.SECRETS_ENV_VAR, "my-app-config, my-app-urls")
        assert run(["get"]) == 0
        assert json.loads(capsys.readouterr().out) == sample_payloads
        assert sorted(client.calls) == ["my-app-config", "my-app-urls"]

    def test_get_without_names_is_usage_error(self, install_client, capsys):
        install_client()
        assert run(["get"]) == 2
        assert cli_main.SECRETS_ENV_VAR in capsys.readouterr().err

    def test_get_invalid_name(self, install_client, capsys):
        install_client()
        assert run(["get", "app.config"]) == 2
        assert "Invalid secret name" in capsys.readouterr().err

    def test_get_partial_failure_prints_nothing(self, install_client, capsys):
        install_client(payloads={"s1": {"a": 1}}, errors={"s2": ConnectionError("network error")})
        assert run(["get", "s1", "s2"]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Failed to fetch secret 's2'" in captured.err

    def test_get_non_object_payload(self, install_client, capsys):
        install_client(payloads={"s": '["a"]'})
        assert run(["get", "s"]) == 1
        assert "not a JSON object" in capsys.readouterr().err

    def test_missing_project_is_config_error(self, install_client, monkeypatch, capsys):
        install_client(payloads={"s": {}})
        monkeypatch.delenv("GCP_PROJECT")
        assert run(["get", "s"]) == 2
        assert "Project ID not found" in capsys.readouterr().err


class TestSearchCommand:

    def test_search_all_json(self, install_client, capsys, sample_payloads):
        install_client(payloads=sample_payloads)
        assert run(["search", "app"]) == 0
        assert json.loads(capsys.readouterr().out) == [
            {"key": "[Secret] my-app-config", "value": "2 keys"},
            {"key": "[Secret] my-app-urls", "value": "2 keys"},
        ]

    def test_search_plain(self, install_client, capsys, sample_payloads):
        install_client(payloads=sample_payloads)
        assert run(["-f", "plain", "search", "db"]) == 0
        assert capsys.readouterr().out.splitlines() == [
            "my-app-config/db_password: secret123",
            "my-app-urls/prod_db_url: https://prod.example.com",
            "my-app-urls/staging_db_url: https://staging.example.com",
        ]

    def test_search_no_matches_exits_1(self, install_client, capsys, sample_payloads):
        install_client(payloads=sample_payloads)
        assert run(["search", "xyz_nonexistent"]) == 1
        assert "No secrets or keys found matching pattern 'xyz_nonexistent'" in capsys.readouterr().err

    def test_search_within_secret(self, install_client, capsys, sample_payloads):
        client = install_client(payloads=sample_payloads)
        assert run(["-f", "plain", "search", "db_url", "--secret", "my-app-urls"]) == 0
        assert capsys.readouterr().out.splitlines() == [
            "prod_db_url: https://prod.example.com",
            "staging_db_url: https://staging.example.com",
        ]
        assert client.calls == ["my-app-urls"]

    def test_search_within_secret_reports_name_match_first(self, install_client, capsys, sample_payloads):
        install_client(payloads=sample_payloads)
        assert run(["-f", "plain", "search", "url", "--secret", "my-app-urls"]) == 0
        assert capsys.readouterr().out.splitlines() == [
            "[Secret] my-app-urls: 2 keys",
            "prod_db_url: https://prod.example.com",
            "staging_db_url: https://staging.example.com",
        ]

    def test_search_within_secret_no_matches(self, install_client, capsys, sample_payloads):
        install_client(payloads=sample_payloads)
        assert run(["search", "xyz", "--secret", "my-app-config"]) == 1
        assert "No keys found matching pattern 'xyz' in secret 'my-app-config'" in capsys.readouterr().err


class TestParser:

    def test_invalid_format_rejected(self, capsys):
        assert run(["--format", "invalid", "list"]) == 2
        assert "invalid choice" in capsys.readouterr().err

    def test_version_flag(self, capsys):
        assert run(["--version"]) == 0
        assert "goldfinch" in capsys.readouterr().out

    def test_version_command(self, capsys):
        assert run(["version"]) == 0
        assert capsys.readouterr().out == f"goldfinch {cli_main.VERSION}\n"

    def test_no_command_shows_help(self, capsys):
        assert run([]) == 2
        assert "usage:" in capsys.readouterr().out


class TestRenderers:

    def test_plain_identifiers_empty(self):
        assert render_identifiers([], "plain") == ""

    def test_json_identifiers_empty(self):
        assert render_identifiers([], "json") == "[]"

    def test_json_keeps_unicode(self):
        record = SecretRecord.from_mapping("s", {"chinese": "密码", "emoji": "🔐"})
        assert "密码" in render_record(record, "json")
        assert render_record(record, "plain") == "chinese: 密码\nemoji: 🔐"

    def test_record_json_sorts_nested_keys(self):
        record = SecretRecord.from_mapping("s", {"o": {"z": 1, "a": 2}})
        rendered = render_record(record, "json")
        assert rendered.index('"a"') < rendered.index('"z"')

    def test_get_json_sorts_nested_keys(self, install_client, capsys):
        install_client(payloads={"s": '{"o": {"z": 1, "a": 2}}'})
        assert run(["get", "s"]) == 0
        out = capsys.readouterr().out
        assert out.index('"a"') < out.index('"z"')

    def test_store_json(self):
        store = SecretStore([SecretRecord.from_mapping("b", {"k": 1}), SecretRecord.from_mapping("a", {})])
        assert list(json.loads(render_store(store, "json"))) == ["a", "b"]

    def test_matches_keep_given_order(self):
        matches = [
            Match("z/key", "1", MatchKind.KEY),
            Match("[Secret] a", "0 keys", MatchKind.SECRET),
        ]
        assert render_matches(matches, "plain") == "z/key: 1\n[Secret] a: 0 keys"
