from .fake_node import FakeNode, FakeSession, MockResponse, NATIVE_ASSET_ID, TX_FEE
from .factories import mk_config, mk_context, mk_create_dao, mk_key_dao, mk_keypair, mk_node

__all__ = [
    "FakeNode",
    "FakeSession",
    "MockResponse",
    "NATIVE_ASSET_ID",
    "TX_FEE",
    "mk_config",
    "mk_context",
    "mk_create_dao",
    "mk_key_dao",
    "mk_keypair",
    "mk_node",
]
