"""
Test bootstrap:
- Make the helpers package importable
- Provide a faucet key, an in-memory node and a scenario context wired to it
"""
import pathlib
import sys

import pytest

TESTS_DIR = pathlib.Path(__file__).parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from helpers.factories import mk_config, mk_context, mk_keypair, mk_node  # noqa: E402


@pytest.fixture
def faucet_key():
    """Deterministic key that holds the genesis balance."""
    return mk_keypair(0xFA0CE7, username="faucet")


@pytest.fixture
def node(faucet_key):
    return mk_node(faucet_key)


@pytest.fixture
def config(faucet_key):
    return mk_config(faucet_key)


@pytest.fixture
def ctx(node, config):
    context = mk_context(node, config)
    yield context
    context.close()


@pytest.fixture
def client(ctx):
    return ctx.client
