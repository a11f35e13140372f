# Area: Shared Tests
"""Tests for the ranked-turbo command line."""

import json
from unittest.mock import patch

import httpx
import pytest

from ranked_turbo._config import ENV_MAPPINGS
from ranked_turbo._store.client import RatingStoreClient
from ranked_turbo.cli import build_local_host, load_script, main, parse_args

from conftest import RecordingStore

BASE = "https://store.test"


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Isolated environment and a config file with file logging off."""
    for env_key in ENV_MAPPINGS:
        monkeypatch.delenv(env_key, raising=False)
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"store_base_url": BASE, "log_file": None}))
    with patch("ranked_turbo._config.load_dotenv"):
        yield str(config_path)


@pytest.fixture
def handler():
    return RecordingStore({"a1": 612})


@pytest.fixture
def mock_store(handler):
    def factory(config):
        return RatingStoreClient(config["store_base_url"], baseline=config["baseline"],
                                 transport=httpx.MockTransport(handler))
    with patch("ranked_turbo.cli._store_from_config", side_effect=factory):
        yield handler


def last_line(capsys):
    return capsys.readouterr().out.strip().splitlines()[-1]


class TestParseArgs:
    def test_put_parses_value(self):
        """Test that put parses its value as an integer."""
        args = parse_args(["put", "a1", "540"])
        assert args.command == "put"
        assert args.value == 540

    def test_command_is_required(self):
        """Test that running without a command exits."""
        with pytest.raises(SystemExit):
            parse_args([])


class TestStoreCommands:
    """Tests for get / put / init."""

    def test_get_prints_rating(self, cli_env, mock_store, capsys):
        """Test that get prints the stored rating."""
        assert main(["--config", cli_env, "get", "a1"]) == 0
        assert last_line(capsys) == "612"

    def test_get_missing_identity_fails(self, cli_env, mock_store, capsys):
        """Test that get on an unknown identity returns 1."""
        assert main(["--config", cli_env, "get", "nobody"]) == 1
        assert "not found" in capsys.readouterr().err

    def test_put_overwrites(self, cli_env, mock_store, capsys):
        """Test that put writes the new value to the store."""
        assert main(["--config", cli_env, "put", "a1", "540"]) == 0
        assert mock_store.values["a1"] == 540

    def test_put_failure_returns_error(self, cli_env, handler, mock_store, capsys):
        """Test that a rejected write returns 1."""
        handler.status = 403
        assert main(["--config", cli_env, "put", "a1", "540"]) == 1
        assert "write failed" in capsys.readouterr().err

    def test_init_creates_missing_record(self, cli_env, mock_store, capsys):
        """Test that init creates a baseline record."""
        assert main(["--config", cli_env, "init", "new1"]) == 0
        assert last_line(capsys) == "500"
        assert mock_store.values["new1"] == 500

    def test_store_url_flag_overrides_config(self, cli_env, mock_store):
        """Test that --store-url beats the config file."""
        main(["--config", cli_env, "--store-url", "https://other.test", "get", "a1"])
        assert mock_store.requests[0].url.host == "other.test"


class TestConfigErrors:
    def test_missing_store_url_fails(self, monkeypatch, capsys):
        """Test that a missing store URL is reported."""
        for env_key in ENV_MAPPINGS:
            monkeypatch.delenv(env_key, raising=False)
        with patch("ranked_turbo._config.load_dotenv"):
            assert main(["get", "a1"]) == 1
        assert "store_base_url" in capsys.readouterr().err


class TestScripts:
    """Tests for match script loading."""

    def test_missing_script_file_fails(self, cli_env, tmp_path, capsys):
        """Test that simulate reports a missing script file."""
        assert main(["--config", cli_env, "simulate", str(tmp_path / "absent.json")]) == 1
        assert "Error" in capsys.readouterr().err

    def test_script_requires_events(self, tmp_path):
        """Test that a script without events is rejected."""
        path = tmp_path / "match.json"
        path.write_text(json.dumps({"players": []}))
        with pytest.raises(ValueError, match="events"):
            load_script(str(path))

    def test_build_local_host(self):
        """Test that a script's players and units populate the host."""
        host = build_local_host({
            "players": [
                {"slot": 0, "identity": "a1", "team": 2, "name": "Alice"},
                {"slot": 1, "team": 3, "bot": True},
            ],
            "units": [{"index": 900, "team": 3, "unit_name": "npc_dota_badguys_fort", "is_building": True}],
            "events": [],
        })

        assert host.identity_of(0) == "a1"
        assert host.identity_of(1) == "0"
        assert host.resolve_entity(900).is_building is True
