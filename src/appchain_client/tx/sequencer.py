"""
Approval sequencer and finality waiter.

Submits one transaction at a time and tells the caller what became of it:

- ``REJECTED``: the transaction pool refused the extrinsic
- ``ACCEPTED_PENDING``: accepted, outcome not observed (fixed-wait mode)
- ``INCLUDED_SUCCESS``: the expected post-state was observed
- ``INCLUDED_FAILURE``: the extrinsic left the pool and the expected
  post-state never appeared

Network and other RPC errors propagate and abort the run.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Union

from ..recovery.retry import RetryPolicy, finality_policy
from ..runtime.errors import (
    AppchainError,
    FinalityTimeoutError,
    TransactionFailedError,
    TransactionRejectedError,
)
from .composer import ComposedTransaction
from .extrinsic import SignedExtrinsic, sign_extrinsic

if TYPE_CHECKING:
    from ..rpc.client import ChainRpcClient

logger = logging.getLogger(__name__)

Expectation = Callable[[], bool]


class SubmissionStatus(str, Enum):
    ACCEPTED_PENDING = "accepted_pending"
    INCLUDED_SUCCESS = "included_success"
    INCLUDED_FAILURE = "included_failure"
    REJECTED = "rejected"


@dataclass
class SubmissionResult:
    """Outcome of one submission."""
    status: SubmissionStatus
    tx_hash: Optional[str] = None
    error: Optional[AppchainError] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.status in (SubmissionStatus.ACCEPTED_PENDING, SubmissionStatus.INCLUDED_SUCCESS)

    def raise_for_status(self) -> SubmissionResult:
        """
        Raise if the submission was rejected or failed on chain.

        Raises:
            TransactionRejectedError: For ``REJECTED``
            TransactionFailedError: For ``INCLUDED_FAILURE``
        """
        if self.status is SubmissionStatus.REJECTED:
            raise self.error
        if self.status is SubmissionStatus.INCLUDED_FAILURE:
            raise TransactionFailedError(
                f"Transaction {self.tx_hash} left the pool without its expected effect",
                details={"tx_hash": self.tx_hash, "attempts": self.attempts},
            )
        return self


class ApprovalSequencer:
    """
    Submits extrinsics and waits for their effect.

    Example:
        ```python
        sequencer = ApprovalSequencer(client, block_time=6.0, chain_id="deip-dev")
        result = sequencer.execute(composed, expect=lambda: client.get_account(dao_id) is not None)
        result.raise_for_status()
        ```
    """

    def __init__(
        self,
        client: ChainRpcClient,
        block_time: float,
        chain_id: Optional[str] = None,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the sequencer.

        Args:
            client: RPC client
            block_time: Average block time in seconds
            chain_id: Chain identifier bound into signatures
            policy: Polling policy for ``submit_and_wait``
            sleep: Sleep function
        """
        self.client = client
        self.block_time = block_time
        self.chain_id = chain_id
        self.policy = policy or finality_policy(block_time)
        self._sleep = sleep

    def submit(self, extrinsic: Union[SignedExtrinsic, str]) -> SubmissionResult:
        """
        Submit to the transaction pool without waiting.

        Returns:
            ``ACCEPTED_PENDING`` or ``REJECTED``
        """
        encoded = extrinsic.encoded if isinstance(extrinsic, SignedExtrinsic) else extrinsic
        try:
            tx_hash = self.client.submit_extrinsic(encoded)
        except TransactionRejectedError as e:
            logger.warning("Transaction rejected by pool: %s", e)
            return SubmissionResult(SubmissionStatus.REJECTED, error=e)
        return SubmissionResult(SubmissionStatus.ACCEPTED_PENDING, tx_hash=tx_hash)

    def submit_and_sleep(self, extrinsic: Union[SignedExtrinsic, str],
                         timeout: Optional[float] = None) -> SubmissionResult:
        """
        Submit, then wait one block time without inspecting the outcome.

        Args:
            extrinsic: Signed extrinsic
            timeout: Wait in seconds, defaults to the block time
        """
        result = self.submit(extrinsic)
        if result.status is SubmissionStatus.REJECTED:
            return result
        self._sleep(self.block_time if timeout is None else timeout)
        return result

    def submit_and_wait(self, extrinsic: Union[SignedExtrinsic, str],
                        expect: Optional[Expectation] = None) -> SubmissionResult:
        """
        Submit and poll until ``expect()`` holds.

        Without an expectation this behaves like ``submit_and_sleep``.

        Raises:
            FinalityTimeoutError: If the policy runs out of attempts while the
                extrinsic is still pending
        """
        if expect is None:
            return self.submit_and_sleep(extrinsic)

        encoded = extrinsic.encoded if isinstance(extrinsic, SignedExtrinsic) else extrinsic
        result = self.submit(encoded)
        if result.status is SubmissionStatus.REJECTED:
            return result

        left_pool = False
        attempt = 0
        for attempt, delay in self.policy.delays():
            self._sleep(delay)
            if expect():
                logger.debug("Transaction %s observed after %d poll(s)", result.tx_hash, attempt)
                result.status = SubmissionStatus.INCLUDED_SUCCESS
                result.attempts = attempt
                return result
            if left_pool:
                logger.warning("Transaction %s was included without its expected effect", result.tx_hash)
                result.status = SubmissionStatus.INCLUDED_FAILURE
                result.attempts = attempt
                return result
            left_pool = encoded not in self.client.pending_extrinsics()

        raise FinalityTimeoutError(
            f"Transaction {result.tx_hash} not observed after {attempt} poll(s)",
            details={"tx_hash": result.tx_hash, "attempts": attempt},
        )

    def sign(self, composed: ComposedTransaction) -> SignedExtrinsic:
        """Sign a composed transaction at the signer's next nonce."""
        nonce = self.client.account_next_index(composed.signer.address)
        return sign_extrinsic(composed.call, composed.signer, nonce, self.chain_id)

    def execute(self, composed: ComposedTransaction,
                expect: Optional[Expectation] = None) -> SubmissionResult:
        """
        Sign and submit a composed transaction.

        Args:
            composed: Output of the composer
            expect: Expected post-state; defaults to the composed
                transaction's own approval check
        """
        extrinsic = self.sign(composed)
        return self.submit_and_wait(extrinsic, expect or composed.expect)
