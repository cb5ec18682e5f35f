"""Tests for the command-line interface."""

import json

import httpx
import pytest
from typer.testing import CliRunner

from pharmachain import cli
from pharmachain.engine import VerificationEngine

runner = CliRunner(env={"COLUMNS": "200"})


@pytest.fixture
def offline_cli(monkeypatch, test_settings, registry_factory):
    """Point the CLI at an engine with a dead registry and no ledger."""

    def handler(request):
        raise httpx.ConnectError("offline", request=request)

    def build():
        return VerificationEngine(config=test_settings, registry=registry_factory(handler))

    monkeypatch.setattr(cli, "VerificationEngine", build)


def test_verify_known_batch(offline_cli):
    result = runner.invoke(cli.app, ["verify", "68180-518-01", "--delay", "0"])
    assert result.exit_code == 0
    assert "CAUTION" in result.output


def test_verify_counterfeit_exits_nonzero(offline_cli):
    result = runner.invoke(cli.app, ["verify", "FAKE_COUNTERFEIT_001", "--delay", "0"])
    assert result.exit_code == 2
    assert "UNSAFE" in result.output


def test_verify_json(offline_cli):
    result = runner.invoke(cli.app, ["verify", "68180-518-01", "--json", "--delay", "0"])
    assert result.exit_code == 0
    start = result.output.index("[\n")
    reports = json.loads(result.output[start:])
    assert reports[0]["identifier"] == "68180-518-01"
    assert reports[0]["verdict"] == "CAUTION"


def test_register_invalid_json(offline_cli):
    result = runner.invoke(cli.app, ["register", "{not json"])
    assert result.exit_code == 1
    assert "Invalid batch JSON" in result.output


def test_register_offline_is_unavailable(offline_cli):
    payload = json.dumps({"batchId": "B1"})
    result = runner.invoke(cli.app, ["register", payload])
    assert result.exit_code == 1
    assert "Registration unavailable" in result.output


def test_check_registry_fallback(offline_cli):
    result = runner.invoke(cli.app, ["check-registry", "50458-220-10", "--delay", "0"])
    assert result.exit_code == 0
    assert "50458-220-10" in result.output
    assert "fallback" in result.output
