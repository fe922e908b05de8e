"""
Token flow scenario.

Alice creates a fungible token under the next free asset id, issues it to
herself and transfers part of it to Bob, then creates an NFT class and
mints an instance to Bob.
"""

import logging
from typing import Any, Dict

from ..tx.operations import CreateAsset, CreateNftClass, IssueAsset, MintNft, TransferAsset
from .context import ScenarioContext, log_json_result

logger = logging.getLogger(__name__)

ISSUED_AMOUNT = 1_000_000
TRANSFERRED_AMOUNT = 250_000
NFT_INSTANCE_ID = 1


def _balance(ctx: ScenarioContext, owner: str, asset_id: str) -> int:
    record = ctx.client.get_asset_balance_by_owner(owner, asset_id)
    return int(record["balance"]) if record else 0


def run(ctx: ScenarioContext) -> Dict[str, Any]:
    ctx.connect()
    client = ctx.client

    alice = ctx.create_key_dao("Alice")
    bob = ctx.create_key_dao("Bob")

    asset_id = client.get_next_asset_id()
    logger.info("Creating fungible token %s ...", asset_id)
    ctx.execute(
        [
            CreateAsset(asset_id=asset_id, name="Alice Token", symbol="ALICE", decimals=2,
                        max_supply=ISSUED_AMOUNT * 10),
            IssueAsset(asset_id=asset_id, beneficiary=alice.address, amount=ISSUED_AMOUNT),
        ],
        alice, [alice],
        expect=lambda: _balance(ctx, alice.address, asset_id) >= ISSUED_AMOUNT,
    )
    log_json_result("Fungible token created", client.get_asset(asset_id))

    ctx.execute(
        TransferAsset(asset_id=asset_id, target=bob.address, amount=TRANSFERRED_AMOUNT),
        alice, [alice],
        expect=lambda: _balance(ctx, bob.address, asset_id) >= TRANSFERRED_AMOUNT,
    )
    balances = {
        "alice": _balance(ctx, alice.address, asset_id),
        "bob": _balance(ctx, bob.address, asset_id),
    }
    log_json_result("Fungible token balances", balances)

    class_id = client.get_next_nft_class_id()
    logger.info("Creating NFT class %s ...", class_id)
    ctx.execute(
        [
            CreateNftClass(class_id=class_id, name="Alice NFT", symbol="ANFT"),
            MintNft(class_id=class_id, instance_id=NFT_INSTANCE_ID, owner=bob.address),
        ],
        alice, [alice],
        expect=lambda: NFT_INSTANCE_ID in client.get_nft_instances_by_owner(bob.address, class_id),
    )
    log_json_result("NFT class created", client.get_nft_class(class_id))
    instances = client.get_nft_instances_by_owner(bob.address, class_id)
    log_json_result("Bob NFT instances", instances)

    return {
        "asset_id": asset_id,
        "class_id": class_id,
        "balances": balances,
        "instances": instances,
    }
