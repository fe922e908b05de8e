"""
Scenario context.

Owns the client lifecycle and wires the composer, sequencer and faucet
together so that scenarios only describe who does what.
"""

from __future__ import annotations
import json
import logging
import time
from typing import Any, Callable, List, Optional, Sequence, Union

import requests

from ..codec.hashes import metadata_hash
from ..config import AppchainConfig
from ..crypto.keys import KeyPair
from ..faucet import Faucet
from ..recovery.retry import finality_policy
from ..rpc.client import ChainRpcClient
from ..runtime.errors import ConfigError
from ..runtime.ids import random_hex_id
from ..tx.authority import Actor, Authority
from ..tx.calls import Call
from ..tx.composer import Member, TransactionComposer
from ..tx.operations import CreateDao, Operation, Transfer, TransferAsset
from ..tx.sequencer import ApprovalSequencer, Expectation, SubmissionResult

logger = logging.getLogger(__name__)

Operations = Union[Operation, Call, Sequence[Union[Operation, Call]]]


def log_json_result(title: str, result: Any) -> None:
    """Log a titled result as indented JSON."""
    logger.info("%s:\n%s\n", title, json.dumps(result, indent=2, default=str))


class ScenarioContext:
    """
    Everything a scenario needs to talk to the chain.

    Example:
        ```python
        with ScenarioContext.from_config(load_config()) as ctx:
            ctx.connect()
            alice = ctx.create_key_dao("Alice")
        ```
    """

    def __init__(
        self,
        config: AppchainConfig,
        client: ChainRpcClient,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.client = client
        self.composer = TransactionComposer(client, config.chain_id)
        self.sequencer = ApprovalSequencer(
            client,
            block_time=config.block_time,
            chain_id=config.chain_id,
            policy=finality_policy(config.block_time, config.finality_attempts),
            sleep=sleep,
        )
        self._faucet: Optional[Faucet] = None

    @classmethod
    def from_config(
        cls,
        config: AppchainConfig,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> ScenarioContext:
        client = ChainRpcClient(config.node_url, timeout=config.rpc_timeout, session=session)
        return cls(config, client, sleep=sleep)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> ScenarioContext:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def connect(self) -> dict:
        """Query node identity and log it."""
        info = self.client.system_info()
        logger.info(
            "Connected to appchain node %s using %s v%s",
            info["chain"], info["name"], info["version"],
        )
        return info

    # =========================================================================
    # Funding
    # =========================================================================

    @property
    def faucet_key(self) -> KeyPair:
        if self.config.faucet_account is None:
            raise ConfigError("DEIP_APPCHAIN_FAUCET_ACCOUNT is not configured")
        return KeyPair.from_seed(self.config.faucet_account.wif, username="faucet")

    @property
    def faucet(self) -> Faucet:
        if self._faucet is None:
            if self.config.core_asset is None:
                raise ConfigError("DEIP_APPCHAIN_CORE_ASSET is not configured")
            self._faucet = Faucet(
                self.client, self.composer, self.sequencer, self.faucet_key, self.config.core_asset
            )
        return self._faucet

    def use_faucet_source(self, source: Union[KeyPair, Actor]) -> None:
        """Fund from ``source`` instead of the configured faucet key."""
        self.faucet.source = source

    def fund(self, recipient: str, amount: Optional[Union[int, str]]) -> Optional[SubmissionResult]:
        if not amount:
            return None
        return self.faucet.fund(recipient, amount)

    def core_transfer(self, recipient: str, amount: int) -> Operation:
        """Core-asset transfer operation, native or fungible per configuration."""
        core_asset = self.config.core_asset
        if core_asset is None:
            raise ConfigError("DEIP_APPCHAIN_CORE_ASSET is not configured")
        if core_asset.native:
            return Transfer(dest=recipient, value=amount)
        return TransferAsset(asset_id=core_asset.id, target=recipient, amount=amount)

    # =========================================================================
    # Submission
    # =========================================================================

    def execute(
        self,
        operations: Operations,
        acting: Union[Actor, Authority],
        path: Sequence[Member],
        expect: Optional[Expectation] = None,
    ) -> SubmissionResult:
        """
        Compose, sign and submit one approval.

        ``expect`` is checked only when this submission dispatches the
        operations; pending approvals are confirmed against their multisig
        record instead.
        """
        composed = self.composer.compose(operations, acting, path)
        result = self.sequencer.execute(composed, expect=expect if composed.executes else None)
        return result.raise_for_status()

    def approve_all(
        self,
        operations: Operations,
        acting: Union[Actor, Authority],
        paths: Sequence[Sequence[Member]],
        expect: Optional[Expectation] = None,
    ) -> SubmissionResult:
        """Submit one approval per path, in order."""
        result = None
        for path in paths:
            result = self.execute(operations, acting, path, expect=expect)
        return result

    # =========================================================================
    # Expectations
    # =========================================================================

    def dao_exists(self, dao_id: str) -> Expectation:
        return lambda: self.client.get_account(dao_id) is not None

    def project_exists(self, project_id: str) -> Expectation:
        return lambda: self.client.get_project(project_id) is not None

    def proposal_exists(self, proposal_id: str) -> Expectation:
        return lambda: self.client.get_proposal(proposal_id) is not None

    def proposal_in_state(self, proposal_id: str, *states: str) -> Expectation:
        def expect() -> bool:
            proposal = self.client.get_proposal(proposal_id)
            return proposal is not None and proposal.get("state") in states
        return expect

    def decision_recorded(self, proposal_id: str, dao_id: str, decision: str = "Approve") -> Expectation:
        def expect() -> bool:
            proposal = self.client.get_proposal(proposal_id) or {}
            return proposal.get("decisions", {}).get(dao_id) == decision
        return expect

    # =========================================================================
    # DAO helpers
    # =========================================================================

    def create_key_dao(self, name: str, dao_id: Optional[str] = None,
                       key: Optional[KeyPair] = None) -> Actor:
        """
        Create a DAO controlled by a single key.

        A fresh key is derived from ``name`` and a random password unless one
        is given. The key is funded before it creates the DAO and the DAO is
        funded afterwards.
        """
        logger.info("Creating %s DAO ...", name)
        key = key or KeyPair.from_password(name.lower(), random_hex_id(32))
        self.fund(key.address, self.config.dao_seed_funding_amount)

        dao_id = dao_id or random_hex_id()
        authority = Authority.single(key)
        create = CreateDao(
            dao_id=dao_id,
            authority=authority,
            metadata=metadata_hash({"description": f"{name} DAO"}),
        )
        self.execute(create, authority, [key], expect=self.dao_exists(dao_id))
        self.fund(dao_id, self.config.dao_funding_amount)

        log_json_result(f"{name} DAO created", self.client.get_account(dao_id))
        return Actor(dao_id=dao_id, authority=authority, key=key, name=name)

    def create_group_dao(self, name: str, members: List[Actor], threshold: int,
                         paths: Sequence[Sequence[Member]]) -> Actor:
        """
        Create a multisig DAO whose signatories are other DAOs.

        Args:
            name: Label used in metadata and logs
            members: Member DAOs
            threshold: Approvals required
            paths: One approver path per approval to submit
        """
        logger.info("Creating %s multisig DAO ...", name)
        dao_id = random_hex_id()
        authority = Authority(signatories=[m.address for m in members], threshold=threshold)
        create = CreateDao(
            dao_id=dao_id,
            authority=authority,
            metadata=metadata_hash({"description": f"{name} multisig DAO"}),
        )
        self.approve_all(create, authority, paths, expect=self.dao_exists(dao_id))
        self.fund(dao_id, self.config.dao_funding_amount)

        log_json_result(f"{name} multisig DAO created", self.client.get_account(dao_id))
        return Actor(dao_id=dao_id, authority=authority, name=name)
