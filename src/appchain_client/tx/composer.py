"""
Transaction composer.

Builds the nested call a single key must sign to approve operations on
behalf of a DAO that may sit several multisig layers away from the key.

The caller supplies the acting entity and the approver path, for example
``[eve_charlie, eve]`` for an operation of Multigroup-2 approved by Eve
through the Eve-Charlie group. The composer walks the path from the acting
entity towards the key and, for every (group, member) hop, wraps the call
in the multisig layer the group's threshold and on-chain approval record
require:

- a group whose lone signatory is the member adds no layer
- threshold 1: ``asMultiThreshold1`` executes in one submission
- threshold above 1 with no record: first approval, ``approveAsMulti``
  with a null timepoint
- a record one approval short of the threshold: final approval,
  ``asMulti`` with the record's timepoint and the full call
- otherwise: intermediate approval, ``approveAsMulti`` with the timepoint

Each member that is a DAO then wraps the layer in ``onBehalf``. The
innermost wrap is therefore the operation's direct actor and the outermost
one the signing key.

Approval records live on chain and may disappear between composition and
inclusion, for instance when the depositor cancels them. The composer does
not track that: a final or intermediate approval built against a record
that is gone fails on chain with an unexpected timepoint, and composing
again starts over with a first approval.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Callable, List, Optional, Sequence, Union

from ..runtime.errors import CompositionError, ErrorCode
from ..crypto.keys import KeyPair
from .authority import Actor, Authority
from .calls import (
    ApproveAsMulti,
    AsMulti,
    AsMultiThreshold1,
    BatchAll,
    Call,
    OnBehalf,
    Timepoint,
    as_call,
    batch_all,
)
from .extrinsic import unsigned_extrinsic
from .operations import Operation

if TYPE_CHECKING:
    from ..rpc.client import ChainRpcClient

logger = logging.getLogger(__name__)

Member = Union[Actor, KeyPair]


class ApprovalStage(str, Enum):
    """What a multisig layer does when its submission is dispatched."""
    SINGLE_SHOT = "single_shot"
    FIRST = "first"
    INTERMEDIATE = "intermediate"
    FINAL = "final"

    @property
    def executes(self) -> bool:
        """True if dispatching this layer dispatches the wrapped call."""
        return self in (ApprovalStage.SINGLE_SHOT, ApprovalStage.FINAL)


@dataclass(frozen=True)
class ApprovalLayer:
    """One multisig hop of a composed transaction."""
    group_account: str
    member_address: str
    stage: ApprovalStage
    threshold: int
    call_hash: str
    timepoint: Optional[Timepoint] = None
    weight: Optional[int] = None


@dataclass
class ComposedTransaction:
    """
    Outer call plus the key that must sign it.

    ``layers`` are ordered innermost first. ``expect`` reports whether the
    submission's effect is visible on chain; it is set when execution stops
    at a pending approval and is otherwise left to the caller.
    """
    call: BatchAll
    signer: KeyPair
    layers: List[ApprovalLayer] = field(default_factory=list)
    expect: Optional[Callable[[], bool]] = None

    @property
    def pending_layer(self) -> Optional[ApprovalLayer]:
        """Layer where dispatch stops to wait for more approvals, if any."""
        for layer in reversed(self.layers):
            if not layer.stage.executes:
                return layer
        return None

    @property
    def executes(self) -> bool:
        """True if this submission dispatches the operations themselves."""
        return self.pending_layer is None


class TransactionComposer:
    """
    Composes multisig approval chains.

    Example:
        ```python
        composer = TransactionComposer(client, chain_id="deip-dev")
        composed = composer.compose(CreateProject(...), multigroup2, [eve_charlie, eve])
        ```
    """

    def __init__(self, client: ChainRpcClient, chain_id: Optional[str] = None):
        """
        Initialize the composer.

        Args:
            client: RPC client used for fee estimates and approval records
            chain_id: Chain identifier used for dry-run envelopes
        """
        self.client = client
        self.chain_id = chain_id

    def estimate_weight(self, call: Call, account: str) -> int:
        """Dispatch weight of ``call`` when originated by ``account``."""
        info = self.client.payment_info(unsigned_extrinsic(call, account, self.chain_id))
        return info.weight

    def compose(
        self,
        operations: Union[Operation, Call, Sequence[Union[Operation, Call]]],
        acting: Union[Actor, Authority],
        path: Sequence[Member],
    ) -> ComposedTransaction:
        """
        Compose the transaction one key submits for ``acting``.

        Args:
            operations: One operation or call, or several to batch atomically
            acting: DAO the operations run on behalf of, or a bare authority
                for operations originated by an authority account itself
                (such as creating a DAO)
            path: Approvers from a member of ``acting``'s authority down to
                the signing key; a trailing DAO that holds a key is extended
                with that key. A leading ``acting`` itself is skipped

        Returns:
            ComposedTransaction

        Raises:
            CompositionError: If the path is inconsistent with the authorities
                or the member has already approved the pending call
        """
        if isinstance(operations, (Operation, Call)):
            operations = [operations]
        if not operations:
            raise CompositionError("Nothing to compose", ErrorCode.INVALID_APPROVAL_PATH)

        inner = as_call(operations[0]) if len(operations) == 1 else batch_all(list(operations))

        if isinstance(acting, Actor):
            call: Call = OnBehalf(acting.dao_id, inner)
            group = acting.authority
        elif isinstance(acting, Authority):
            call = inner
            group = acting
        else:
            raise CompositionError(f"Cannot act as {type(acting).__name__}", ErrorCode.INVALID_AUTHORITY)

        hops = self._resolve_path(path)
        if isinstance(acting, Actor) and isinstance(hops[0], Actor) and hops[0].dao_id == acting.dao_id:
            hops = hops[1:]
        layers: List[ApprovalLayer] = []

        for position, member in enumerate(hops):
            if not group.has_member(member.address):
                raise CompositionError(
                    f"{member!r} is not a signatory of authority {group.account}",
                    ErrorCode.INVALID_AUTHORITY,
                    details={"member": member.address, "signatories": list(group.signatories)},
                )

            if not group.is_single:
                call, layer = self._wrap(call, group, member.address)
                layers.append(layer)

            if isinstance(member, Actor):
                call = OnBehalf(member.dao_id, call)
                group = member.authority
            elif position != len(hops) - 1:
                raise CompositionError("A key may only appear at the end of the approval path")

        signer = hops[-1]
        composed = ComposedTransaction(call=BatchAll((call,)), signer=signer, layers=layers)

        pending = composed.pending_layer
        if pending is not None:
            composed.expect = self._approval_recorded(pending)

        logger.debug(
            "Composed %d layer(s) for %s: %s",
            len(layers), signer.address, [layer.stage.value for layer in layers],
        )
        return composed

    def _resolve_path(self, path: Sequence[Member]) -> List[Member]:
        hops = list(path)
        if hops and isinstance(hops[-1], Actor) and hops[-1].key is not None:
            hops.append(hops[-1].key)
        if not hops or not isinstance(hops[-1], KeyPair):
            raise CompositionError("Approval path must end in a key pair")
        return hops

    def _wrap(self, call: Call, group: Authority, member_address: str):
        others = tuple(group.others(member_address))
        call_hash = call.hash_hex()

        if group.threshold <= 1:
            layer = ApprovalLayer(
                group_account=group.account,
                member_address=member_address,
                stage=ApprovalStage.SINGLE_SHOT,
                threshold=group.effective_threshold,
                call_hash=call_hash,
            )
            return AsMultiThreshold1(others, call), layer

        account = group.account
        weight = self.estimate_weight(call, account)
        record = self.client.get_multisig(account, call_hash)

        if record is None:
            stage = ApprovalStage.FIRST
            timepoint = None
        elif record.has_approved(member_address):
            raise CompositionError(
                f"{member_address} already approved call {call_hash}",
                ErrorCode.DUPLICATE_APPROVAL,
                details={"multisig": account, "approvals": list(record.approvals)},
            )
        elif len(record.approvals) + 1 >= group.threshold:
            stage = ApprovalStage.FINAL
            timepoint = record.when
        else:
            stage = ApprovalStage.INTERMEDIATE
            timepoint = record.when

        layer = ApprovalLayer(
            group_account=account,
            member_address=member_address,
            stage=stage,
            threshold=group.threshold,
            call_hash=call_hash,
            timepoint=timepoint,
            weight=weight,
        )

        if stage is ApprovalStage.FINAL:
            return AsMulti(group.threshold, others, timepoint, call, True, weight), layer
        return ApproveAsMulti(group.threshold, others, timepoint, call_hash, weight), layer

    def _approval_recorded(self, layer: ApprovalLayer) -> Callable[[], bool]:
        client = self.client

        def expect() -> bool:
            record = client.get_multisig(layer.group_account, layer.call_hash)
            return record is not None and record.has_approved(layer.member_address)

        return expect
