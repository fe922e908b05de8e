"""
Test factories for creating test data consistently.

Provides deterministic keys, configurations and scenario contexts wired to
an in-memory node.
"""

from __future__ import annotations
from typing import Any, Dict, Optional, Union

from appchain_client.config import AppchainConfig
from appchain_client.crypto.keys import KeyPair
from appchain_client.runtime.ids import random_hex_id
from appchain_client.scenarios.context import ScenarioContext
from appchain_client.tx.authority import Actor, Authority
from appchain_client.tx.operations import CreateDao

from .fake_node import NATIVE_ASSET_ID, FakeNode

FAUCET_ENDOWMENT = 10 ** 30
CHAIN_ID = "appchain-test"


def mk_keypair(seed: Union[int, bytes, None] = None, username: Optional[str] = None) -> KeyPair:
    """
    Create a deterministic key pair for testing.

    Args:
        seed: Int or bytes seed; random when omitted
        username: Optional label
    """
    if seed is None:
        return KeyPair.generate(username=username)
    if isinstance(seed, int):
        seed = seed.to_bytes(32, 'big')
    return KeyPair(seed.ljust(32, b'\x00')[:32], username=username)


def mk_node(*keys: KeyPair, amount: int = FAUCET_ENDOWMENT) -> FakeNode:
    """Fake node with each key endowed with ``amount`` of native balance."""
    return FakeNode(endowed={key.address: amount for key in keys}, chain_id=CHAIN_ID)


def mk_config(faucet_key: KeyPair, faucet_dao_id: Optional[str] = None, **overrides: Any) -> AppchainConfig:
    """Configuration for the fake node with a native core asset."""
    values: Dict[str, Any] = {
        "node_url": "http://fake-node:9933",
        "chain_id": CHAIN_ID,
        "millisecs_per_block": 6000,
        "faucet_account": {"username": faucet_dao_id or random_hex_id(), "wif": faucet_key.seed_hex},
        "core_asset": {"id": NATIVE_ASSET_ID, "symbol": "UNIT", "precision": 18, "native": True},
    }
    values.update(overrides)
    return AppchainConfig(**values)


def mk_context(node: FakeNode, config: AppchainConfig) -> ScenarioContext:
    """Scenario context whose session and sleep are backed by ``node``."""
    return ScenarioContext.from_config(config, session=node.session(), sleep=node.sleep)


def mk_key_dao(ctx: ScenarioContext, name: str, seed: Optional[int] = None) -> Actor:
    """Single-key DAO with a deterministic key when ``seed`` is given."""
    key = mk_keypair(seed, username=name.lower()) if seed is not None else None
    return ctx.create_key_dao(name, key=key)


def mk_create_dao(authority: Authority, dao_id: Optional[str] = None) -> CreateDao:
    return CreateDao(dao_id=dao_id or random_hex_id(), authority=authority)
