"""
NFT swap scenario.

Charlie's project publishes content and the Alice-Bob moderators mint an NFT
for it in one proposal. Dave then buys the NFT with a second proposal that
swaps core asset for the token atomically.
"""

import logging
from typing import Any, Dict

from ..codec.hashes import metadata_hash
from ..runtime.errors import AppchainError, ErrorCode
from ..runtime.ids import random_hex_id
from ..tx.operations import (
    CreateNftClass,
    CreateProject,
    CreateProjectContent,
    Decide,
    MintNft,
    ProposalItem,
    Propose,
    TransferNft,
)
from .context import ScenarioContext, log_json_result

logger = logging.getLogger(__name__)

NFT_INSTANCE_ID = 1
SWAP_PRICE = 99999


def _require_done(ctx: ScenarioContext, proposal_id: str) -> dict:
    proposal = ctx.client.get_proposal(proposal_id)
    if proposal is None or proposal.get("state") != "Done":
        state = proposal.get("state") if proposal else None
        raise AppchainError(
            f"Proposal {proposal_id} did not execute: {state}",
            ErrorCode.TRANSACTION_FAILED,
        )
    return proposal


def run(ctx: ScenarioContext) -> Dict[str, Any]:
    ctx.connect()
    client = ctx.client

    alice = ctx.create_key_dao("Alice")
    bob = ctx.create_key_dao("Bob")
    charlie = ctx.create_key_dao("Charlie")
    dave = ctx.create_key_dao("Dave")
    moderators = ctx.create_group_dao("Alice-Bob", [alice, bob], 1, [[alice]])

    logger.info("Creating Charlie DAO Project ...")
    project_id = random_hex_id()
    ctx.execute(
        CreateProject(
            project_id=project_id,
            team_id=charlie.dao_id,
            description=metadata_hash({"description": "Charlie DAO Project"}),
        ),
        charlie, [charlie],
        expect=ctx.project_exists(project_id),
    )
    log_json_result("Charlie DAO Project created", client.get_project(project_id))

    logger.info("Proposing content publication with NFT ...")
    content_id = random_hex_id()
    class_id = client.get_next_nft_class_id()
    publish_id = random_hex_id()
    ctx.execute(
        Propose(
            proposal_id=publish_id,
            batch=[
                ProposalItem(
                    call=CreateProjectContent(
                        content_id=content_id,
                        project_id=project_id,
                        team_id=charlie.dao_id,
                        description=metadata_hash({"description": "Charlie DAO Project Content"}),
                        content=metadata_hash({"content": content_id}),
                        authors=[charlie.dao_id],
                    ),
                    dao_id=charlie.dao_id,
                ),
                ProposalItem(
                    call=CreateNftClass(class_id=class_id, name="Content NFT", symbol="CNFT",
                                        project_id=project_id),
                    dao_id=moderators.dao_id,
                ),
                ProposalItem(
                    call=MintNft(class_id=class_id, instance_id=NFT_INSTANCE_ID, owner=moderators.address),
                    dao_id=moderators.dao_id,
                ),
            ],
        ),
        charlie, [charlie],
        expect=ctx.proposal_exists(publish_id),
    )
    ctx.execute(
        Decide(proposal_id=publish_id), charlie, [charlie],
        expect=ctx.decision_recorded(publish_id, charlie.dao_id),
    )
    ctx.execute(
        Decide(proposal_id=publish_id), moderators, [alice],
        expect=ctx.proposal_in_state(publish_id, "Done", "Failed"),
    )
    _require_done(ctx, publish_id)
    log_json_result("Content NFT minted", client.get_nft_class(class_id))

    logger.info("Proposing NFT swap with Dave ...")
    swap_id = random_hex_id()
    ctx.execute(
        Propose(
            proposal_id=swap_id,
            batch=[
                ProposalItem(call=ctx.core_transfer(moderators.address, SWAP_PRICE), dao_id=dave.dao_id),
                ProposalItem(
                    call=TransferNft(class_id=class_id, instance_id=NFT_INSTANCE_ID, dest=dave.address),
                    dao_id=moderators.dao_id,
                ),
            ],
        ),
        dave, [dave],
        expect=ctx.proposal_exists(swap_id),
    )
    ctx.execute(
        Decide(proposal_id=swap_id), dave, [dave],
        expect=ctx.decision_recorded(swap_id, dave.dao_id),
    )
    ctx.execute(
        Decide(proposal_id=swap_id), moderators, [bob],
        expect=ctx.proposal_in_state(swap_id, "Done", "Failed"),
    )
    _require_done(ctx, swap_id)

    dave_instances = client.get_nft_instances_by_owner(dave.address, class_id)
    moderator_instances = client.get_nft_instances_by_owner(moderators.address, class_id)
    log_json_result("NFT swapped", {"dave": dave_instances, "moderators": moderator_instances})

    return {
        "project": project_id,
        "content": content_id,
        "class_id": class_id,
        "proposals": [publish_id, swap_id],
        "instances": {"dave": dave_instances, "moderators": moderator_instances},
    }
