"""
Faucet funding helper.

Transfers the core asset from a preconfigured funding account to an address
or DAO. By default a fungible-asset transfer is confirmed by polling the
recipient's asset balance until it has grown by the funded amount. The
assets RPC does not report native balances, so native transfers wait one
block and are assumed funded.
"""

from __future__ import annotations
import logging
from typing import Optional, Union

from .config import CoreAsset
from .crypto.address import to_account
from .crypto.keys import KeyPair
from .rpc.client import ChainRpcClient
from .tx.authority import Actor, Authority
from .tx.composer import TransactionComposer
from .tx.operations import Operation, Transfer, TransferAsset
from .tx.sequencer import ApprovalSequencer, SubmissionResult

logger = logging.getLogger(__name__)


class Faucet:
    """
    Funds accounts from a faucet key or faucet DAO.

    Repeated calls add to the recipient's balance; they never set it.
    """

    def __init__(
        self,
        client: ChainRpcClient,
        composer: TransactionComposer,
        sequencer: ApprovalSequencer,
        source: Union[KeyPair, Actor],
        core_asset: CoreAsset,
        confirm: bool = True,
    ):
        """
        Initialize the faucet.

        Args:
            client: RPC client
            composer: Transaction composer
            sequencer: Approval sequencer
            source: Funding key, or a DAO controlled by a single key
            core_asset: Asset handed out
            confirm: Poll the recipient balance after each transfer
        """
        self.client = client
        self.composer = composer
        self.sequencer = sequencer
        self.source = source
        self.core_asset = core_asset
        self.confirm = confirm

    def transfer_operation(self, recipient: str, amount: int) -> Operation:
        """Core-asset transfer of ``amount`` to ``recipient``."""
        if self.core_asset.native:
            return Transfer(dest=recipient, value=amount)
        return TransferAsset(asset_id=self.core_asset.id, target=recipient, amount=amount)

    def balance_of(self, owner: str) -> int:
        """Fungible core-asset balance of an address or DAO; missing records count as 0."""
        record = self.client.get_asset_balance_by_owner(owner, self.core_asset.id)
        if not record:
            return 0
        return int(record.get("balance", 0))

    def _balance_reached(self, address: str, amount: int):
        before = self.balance_of(address)

        def expect() -> bool:
            return self.balance_of(address) >= before + amount

        return expect

    def fund(self, recipient: str, amount: Optional[Union[int, str]],
             confirm: Optional[bool] = None) -> Optional[SubmissionResult]:
        """
        Fund an address or DAO.

        Args:
            recipient: Account address or DAO id
            amount: Amount in the asset's smallest unit; zero or None is a no-op
            confirm: Override the faucet's confirmation setting; ignored for
                the native asset

        Returns:
            SubmissionResult, or None if nothing was sent

        Raises:
            TransactionRejectedError: If the pool refuses the transfer
            TransactionFailedError: If the balance never grows
            FinalityTimeoutError: If the transfer stays pending too long
        """
        if not amount or not int(amount):
            return None
        amount = int(amount)
        address = to_account(recipient)
        confirm = (self.confirm if confirm is None else confirm) and not self.core_asset.native

        if isinstance(self.source, Actor):
            composed = self.composer.compose(self.transfer_operation(address, amount), self.source, [self.source])
        else:
            composed = self.composer.compose(
                self.transfer_operation(address, amount), Authority.single(self.source), [self.source]
            )

        expect = self._balance_reached(address, amount) if confirm else None
        logger.info("Funding %s with %d %s", address, amount, self.core_asset.symbol)
        result = self.sequencer.execute(composed, expect=expect)
        return result.raise_for_status()
