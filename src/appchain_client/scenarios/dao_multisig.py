"""
DAO multisig scenario.

Builds a hierarchy of single-key and multisig DAOs and drives operations
through every kind of approval chain:

    Alice, Bob, Charlie, Dave, Eve      single-key DAOs
    Alice-Bob, Eve-Charlie              1-of-2 DAOs
    Bob-Dave                            2-of-2 DAO
    Multigroup-1 (Eve-Charlie, Bob-Dave)  1-of-2 DAO of DAOs
    Multigroup-2 (Eve-Charlie, Bob-Dave)  2-of-2 DAO of DAOs

It then updates a DAO, creates and updates projects, and resolves a
proposal that needs the approval of four DAOs.
"""

import logging
from typing import Any, Dict

from ..codec.hashes import metadata_hash
from ..runtime.errors import AppchainError, ErrorCode
from ..runtime.ids import random_hex_id
from ..tx.operations import (
    CreateProject,
    Decide,
    ProposalItem,
    Propose,
    UpdateDao,
    UpdateProject,
)
from .context import ScenarioContext, log_json_result

logger = logging.getLogger(__name__)

PROPOSAL_TRANSFER_AMOUNT = 1_000_000_000


def run(ctx: ScenarioContext) -> Dict[str, Any]:
    ctx.connect()
    client = ctx.client

    alice = ctx.create_key_dao("Alice")
    bob = ctx.create_key_dao("Bob")
    charlie = ctx.create_key_dao("Charlie")
    dave = ctx.create_key_dao("Dave")
    eve = ctx.create_key_dao("Eve")

    alice_bob = ctx.create_group_dao("Alice-Bob", [alice, bob], 1, [[alice]])
    eve_charlie = ctx.create_group_dao("Eve-Charlie", [eve, charlie], 1, [[eve]])
    bob_dave = ctx.create_group_dao("Bob-Dave", [bob, dave], 2, [[bob], [dave]])

    multigroup1 = ctx.create_group_dao(
        "Multigroup-1", [eve_charlie, bob_dave], 1, [[eve_charlie, eve]]
    )
    multigroup2 = ctx.create_group_dao(
        "Multigroup-2", [eve_charlie, bob_dave], 2,
        [[eve_charlie, eve], [bob_dave, bob], [bob_dave, dave]],
    )

    logger.info("Updating Alice DAO ...")
    metadata = metadata_hash({"description": "Updated Alice DAO"})
    ctx.execute(
        UpdateDao(metadata=metadata), alice, [alice],
        expect=lambda: (client.get_account(alice.dao_id) or {}).get("metadata") == metadata,
    )
    log_json_result("Alice DAO updated", client.get_account(alice.dao_id))

    logger.info("Creating Alice DAO Project ...")
    alice_project_id = random_hex_id()
    ctx.execute(
        CreateProject(
            project_id=alice_project_id,
            team_id=alice.dao_id,
            description=metadata_hash({"description": "Alice DAO Project"}),
        ),
        alice, [alice],
        expect=ctx.project_exists(alice_project_id),
    )
    log_json_result("Alice DAO Project created", client.get_project(alice_project_id))

    logger.info("Updating Alice DAO Project ...")
    description = metadata_hash({"description": "Updated Alice DAO Project"})
    ctx.execute(
        UpdateProject(project_id=alice_project_id, description=description),
        alice, [alice],
        expect=lambda: (client.get_project(alice_project_id) or {}).get("description") == description,
    )
    log_json_result("Alice DAO Project updated", client.get_project(alice_project_id))

    logger.info("Creating Multigroup-2 DAO Project ...")
    multigroup2_project_id = random_hex_id()
    ctx.approve_all(
        CreateProject(
            project_id=multigroup2_project_id,
            team_id=multigroup2.dao_id,
            description=metadata_hash({"description": "Multigroup-2 DAO Project"}),
        ),
        multigroup2,
        [[eve_charlie, eve], [bob_dave, bob], [bob_dave, dave]],
        expect=ctx.project_exists(multigroup2_project_id),
    )
    log_json_result("Multigroup-2 DAO Project created", client.get_project(multigroup2_project_id))

    logger.info("Creating Eve-Charlie DAO Proposal ...")
    proposal_id = random_hex_id()
    alice_bob_project_id = random_hex_id()
    bob_dave_project_id = random_hex_id()
    propose = Propose(
        proposal_id=proposal_id,
        batch=[
            ProposalItem(
                call=CreateProject(
                    project_id=alice_bob_project_id,
                    team_id=alice_bob.dao_id,
                    description=metadata_hash({"description": "Alice-Bob DAO Project"}),
                ),
                dao_id=alice_bob.dao_id,
            ),
            ProposalItem(
                call=CreateProject(
                    project_id=bob_dave_project_id,
                    team_id=bob_dave.dao_id,
                    description=metadata_hash({"description": "Bob-Dave DAO Project"}),
                ),
                dao_id=bob_dave.dao_id,
            ),
            ProposalItem(
                call=ctx.core_transfer(bob_dave.address, PROPOSAL_TRANSFER_AMOUNT),
                dao_id=charlie.dao_id,
            ),
            ProposalItem(
                call=ctx.core_transfer(alice_bob.address, PROPOSAL_TRANSFER_AMOUNT),
                dao_id=multigroup1.dao_id,
            ),
        ],
    )
    ctx.execute(propose, eve_charlie, [eve], expect=ctx.proposal_exists(proposal_id))
    log_json_result("Eve-Charlie DAO Proposal created", client.get_proposal(proposal_id))

    approvals = [
        (alice_bob, [[alice]]),
        (bob_dave, [[bob], [dave]]),
        (charlie, [[charlie]]),
        (multigroup1, [[eve_charlie, eve]]),
    ]
    for index, (approver, paths) in enumerate(approvals):
        last = index == len(approvals) - 1
        decided = ctx.decision_recorded(proposal_id, approver.dao_id)
        if last:
            decided = ctx.proposal_in_state(proposal_id, "Done", "Failed")
        ctx.approve_all(Decide(proposal_id=proposal_id), approver, paths, expect=decided)
        logger.info("%s DAO approved the proposal", approver.name)

    proposal = client.get_proposal(proposal_id)
    if proposal.get("state") != "Done":
        raise AppchainError(
            f"Proposal {proposal_id} did not execute: {proposal.get('state')}",
            ErrorCode.TRANSACTION_FAILED,
        )

    alice_bob_project = client.get_project(alice_bob_project_id)
    bob_dave_project = client.get_project(bob_dave_project_id)
    log_json_result(
        "Eve-Charlie DAO Proposal resolved, new projects created",
        [alice_bob_project, bob_dave_project],
    )

    return {
        "daos": {
            actor.name: actor.dao_id
            for actor in (alice, bob, charlie, dave, eve, alice_bob, eve_charlie,
                          bob_dave, multigroup1, multigroup2)
        },
        "projects": [alice_project_id, multigroup2_project_id, alice_bob_project_id, bob_dave_project_id],
        "proposal": proposal_id,
    }
