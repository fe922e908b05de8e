"""Tests for the scenario runner command line."""

import json
import logging

import pytest

from appchain_client.cli import build_parser, main
from appchain_client.config import AppchainConfig
from appchain_client.scenarios import SCENARIOS


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for field in AppchainConfig.model_fields.values():
        if field.alias:
            monkeypatch.delenv(field.alias, raising=False)
    monkeypatch.delenv("DEIP_CONFIG", raising=False)


def write_env(tmp_path, portal=None):
    path = tmp_path / ".cli.env"
    lines = ["DEIP_APPCHAIN_NODE_URL=http://127.0.0.1:1"]
    if portal is not None:
        lines.append(f"TENANT_GENERATE_PORTAL_CONFIG='{json.dumps({'portal': portal})}'")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestCli:

    def test_parser_rejects_unknown_scenario(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["unknown"])

    def test_portal_config_succeeds(self, tmp_path, caplog):
        path = write_env(tmp_path, portal={"name": "demo"})
        with caplog.at_level(logging.INFO, logger="appchain_client"):
            assert main(["portal-config", "--env-file", str(path)]) == 0
        assert "TENANT_PORTAL" in caplog.text

    def test_missing_portal_fails(self, tmp_path, caplog):
        path = write_env(tmp_path)
        with caplog.at_level(logging.ERROR, logger="appchain_client"):
            assert main(["portal-config", "--env-file", str(path)]) == 1
        assert "portal-config failed" in caplog.text

    def test_missing_env_file_fails(self, tmp_path):
        assert main(["portal-config", "--env-file", str(tmp_path / "missing.env")]) == 1

    def test_unexpected_error_is_logged(self, tmp_path, caplog, monkeypatch):
        def broken(ctx):
            raise KeyError("authority")

        monkeypatch.setitem(SCENARIOS, "portal-config", broken)
        path = write_env(tmp_path, portal={"name": "demo"})
        with caplog.at_level(logging.ERROR, logger="appchain_client"):
            assert main(["portal-config", "--env-file", str(path)]) == 1
        assert "unexpected error" in caplog.text
        assert "KeyError" in caplog.text
