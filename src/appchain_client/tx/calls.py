"""
Call tree.

A call is either a bare operation or one of the wrappers the runtime offers
for acting through another account:

    Call = Direct(Operation)
         | OnBehalf(dao_id, Call)
         | AsMultiThreshold1(others, Call)
         | ApproveAsMulti(threshold, others, timepoint, call_hash, max_weight)
         | AsMulti(threshold, others, timepoint, Call, store_call, max_weight)
         | BatchAll([Call, ...])

Trees are composed bottom-up and only flattened into the wire form when
hashed or submitted. The hash of a call is BLAKE2b-256 over the canonical
JSON of its wire form.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from ..canonjson import dumps_canonical
from ..codec.hashes import hash_canonical
from ..runtime.ids import to_hex_id
from .operations import Operation


class Timepoint(BaseModel):
    """Block height and extrinsic index at which a multisig record was opened."""
    height: int = Field(..., ge=0)
    index: int = Field(..., ge=0)

    model_config = {"frozen": True}

    def encode(self) -> Dict[str, int]:
        return {"height": self.height, "index": self.index}


class MultisigRecord(BaseModel):
    """Pending approvals of one call hash on one multisig account."""
    when: Timepoint
    deposit: int = 0
    depositor: Optional[str] = None
    approvals: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    def has_approved(self, address: str) -> bool:
        return to_hex_id(address) in {to_hex_id(a) for a in self.approvals}


class Call:
    """Base class of call tree nodes."""

    def encode(self) -> Dict[str, Any]:
        raise NotImplementedError

    def hash(self) -> bytes:
        return hash_canonical(self.encode())

    def hash_hex(self) -> str:
        return "0x" + self.hash().hex()

    def to_hex(self) -> str:
        """Call data as submitted inside ``AsMulti``."""
        return "0x" + dumps_canonical(self.encode()).encode('utf-8').hex()


def _wrapper(module: str, method: str, **args) -> Dict[str, Any]:
    return {"module": module, "method": method, "args": args}


@dataclass(frozen=True)
class Direct(Call):
    operation: Operation

    def encode(self) -> Dict[str, Any]:
        return self.operation.encode()


@dataclass(frozen=True)
class OnBehalf(Call):
    """Perform ``call`` as the DAO ``dao_id``; originated by the DAO's authority."""
    dao_id: str
    call: Call

    def encode(self) -> Dict[str, Any]:
        return _wrapper("deipDao", "onBehalf", name=to_hex_id(self.dao_id), call=self.call.encode())


@dataclass(frozen=True)
class AsMultiThreshold1(Call):
    """Single-shot multisig: one member dispatches for a threshold-1 group."""
    other_signatories: Tuple[str, ...]
    call: Call

    def encode(self) -> Dict[str, Any]:
        return _wrapper("multisig", "asMultiThreshold1",
                        other_signatories=list(self.other_signatories),
                        call=self.call.encode())


@dataclass(frozen=True)
class ApproveAsMulti(Call):
    """Approve a call by hash; opens the record when ``timepoint`` is None."""
    threshold: int
    other_signatories: Tuple[str, ...]
    timepoint: Optional[Timepoint]
    call_hash: str
    max_weight: int

    def encode(self) -> Dict[str, Any]:
        return _wrapper("multisig", "approveAsMulti",
                        threshold=self.threshold,
                        other_signatories=list(self.other_signatories),
                        maybe_timepoint=self.timepoint.encode() if self.timepoint else None,
                        call_hash=self.call_hash,
                        max_weight=self.max_weight)


@dataclass(frozen=True)
class AsMulti(Call):
    """Approve with full call data; executes the call once the threshold is met."""
    threshold: int
    other_signatories: Tuple[str, ...]
    timepoint: Optional[Timepoint]
    call: Call
    store_call: bool
    max_weight: int

    def encode(self) -> Dict[str, Any]:
        return _wrapper("multisig", "asMulti",
                        threshold=self.threshold,
                        other_signatories=list(self.other_signatories),
                        maybe_timepoint=self.timepoint.encode() if self.timepoint else None,
                        call=self.call.encode(),
                        store_call=self.store_call,
                        max_weight=self.max_weight)


@dataclass(frozen=True)
class BatchAll(Call):
    """Dispatch every call in order; any failure reverts all of them."""
    calls: Tuple[Call, ...]

    def encode(self) -> Dict[str, Any]:
        return _wrapper("utility", "batchAll", calls=[c.encode() for c in self.calls])


def as_call(item: Union[Operation, Call]) -> Call:
    """Lift an operation into the call tree."""
    if isinstance(item, Call):
        return item
    if isinstance(item, Operation):
        return Direct(item)
    raise TypeError(f"Expected Operation or Call, got {type(item).__name__}")


def batch_all(items: List[Union[Operation, Call]]) -> BatchAll:
    return BatchAll(tuple(as_call(i) for i in items))


__all__ = [
    "Timepoint",
    "MultisigRecord",
    "Call",
    "Direct",
    "OnBehalf",
    "AsMultiThreshold1",
    "ApproveAsMulti",
    "AsMulti",
    "BatchAll",
    "as_call",
    "batch_all",
]
