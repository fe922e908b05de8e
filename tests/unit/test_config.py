"""Tests for configuration loading."""

import json

import pytest

from appchain_client.config import (
    FAUCET_DAO_FUNDING_AMOUNT,
    PROTOCOL_CHAIN_GRAPHENE,
    AppchainConfig,
    default_env_file,
    load_config,
    read_env_file,
)
from appchain_client.runtime.errors import ConfigError

FAUCET_ACCOUNT = {"username": "0x" + "01" * 20, "wif": "0x" + "02" * 32}
CORE_ASSET = {"id": "0x" + "00" * 20, "symbol": "UNIT", "precision": 18, "native": True}


def write_env(tmp_path, name=".test.env", **values):
    path = tmp_path / name
    lines = [f"{key}='{value}'" for key, value in values.items()]
    path.write_text("# appchain\n\n" + "\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestLoadConfig:

    def test_load_from_env_file(self, tmp_path):
        path = write_env(
            tmp_path,
            DEIP_APPCHAIN_NODE_URL="http://127.0.0.1:9933",
            DEIP_CHAIN_ID="deip-dev",
            DEIP_APPCHAIN_MILLISECS_PER_BLOCK="3000",
            DEIP_APPCHAIN_FAUCET_ACCOUNT=json.dumps(FAUCET_ACCOUNT),
            DEIP_APPCHAIN_CORE_ASSET=json.dumps(CORE_ASSET),
            DEIP_APPCHAIN_FAUCET_ASSETS=json.dumps([{"id": "0x" + "03" * 20, "symbol": "USD"}]),
        )

        config = load_config(path, environ={})

        assert config.node_url == "http://127.0.0.1:9933"
        assert config.chain_id == "deip-dev"
        assert config.block_time == 3.0
        assert config.faucet_account.username == FAUCET_ACCOUNT["username"]
        assert config.core_asset.native
        assert config.faucet_assets[0].symbol == "USD"
        assert config.faucet_assets[0].precision == 18
        assert config.portal_tenant is None

    def test_environment_overrides_file(self, tmp_path):
        path = write_env(tmp_path, DEIP_APPCHAIN_NODE_URL="http://file:9933")
        config = load_config(path, environ={"DEIP_APPCHAIN_NODE_URL": "http://env:9933", "HOME": "/root"})
        assert config.node_url == "http://env:9933"

    def test_default_env_file_name(self, tmp_path, monkeypatch):
        assert default_env_file({}).name == ".config.env"
        assert default_env_file({"DEIP_CONFIG": "local"}).name == ".local.env"

        monkeypatch.chdir(tmp_path)
        write_env(tmp_path, name=".local.env", DEIP_APPCHAIN_NODE_URL="http://local:9933")
        config = load_config(environ={"DEIP_CONFIG": "local"})
        assert config.node_url == "http://local:9933"

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.env", environ={})

    def test_missing_node_url(self, tmp_path):
        path = write_env(tmp_path, DEIP_CHAIN_ID="deip-dev")
        with pytest.raises(ConfigError):
            load_config(path, environ={})

    def test_malformed_json(self, tmp_path):
        path = write_env(
            tmp_path,
            DEIP_APPCHAIN_NODE_URL="http://127.0.0.1:9933",
            DEIP_APPCHAIN_CORE_ASSET="{not json",
        )
        with pytest.raises(ConfigError):
            load_config(path, environ={})

    def test_empty_json_values(self, tmp_path):
        path = write_env(
            tmp_path,
            DEIP_APPCHAIN_NODE_URL="http://127.0.0.1:9933",
            DEIP_APPCHAIN_FAUCET_ASSETS="",
            DEIP_PORTAL_TENANT="",
        )
        config = load_config(path, environ={})
        assert config.faucet_assets == []
        assert config.portal_tenant is None

    def test_read_env_file_strips_export_and_quotes(self, tmp_path):
        path = tmp_path / ".env"
        path.write_text('export A="1"\nB = \'two\'\n#C=3\nnot a pair\n', encoding="utf-8")
        assert read_env_file(path) == {"A": "1", "B": "two"}


class TestAppchainConfig:

    def test_funding_amounts_on_substrate(self):
        config = AppchainConfig(node_url="http://n")
        assert config.is_substrate
        assert config.dao_seed_funding_amount == 1_100_000_000_000_000_000
        assert config.dao_funding_amount == 1_000_000_000_000_000_000
        assert FAUCET_DAO_FUNDING_AMOUNT == 900 * 10 ** 18

    def test_funding_amounts_on_graphene(self):
        config = AppchainConfig(node_url="http://n", protocol_chain=PROTOCOL_CHAIN_GRAPHENE)
        assert config.dao_seed_funding_amount == 0
        assert config.dao_funding_amount == 10000

    def test_portal_tenant_aliases(self):
        config = AppchainConfig(
            node_url="http://n",
            portal_tenant={"id": "0x" + "04" * 20, "privKey": "0x" + "05" * 32,
                           "members": [{"daoId": "0x" + "06" * 20, "password": "pw"}]},
        )
        assert config.portal_tenant.priv_key == "0x" + "05" * 32
        assert config.portal_tenant.members[0].dao_id == "0x" + "06" * 20

    def test_frozen(self):
        config = AppchainConfig(node_url="http://n")
        with pytest.raises(Exception):
            config.node_url = "http://other"
