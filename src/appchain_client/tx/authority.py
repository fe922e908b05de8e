"""
Authorities and DAO actors.

An Authority is the signatory set and threshold that controls a DAO. An
Actor is a DAO as seen from the client: its id, derived address, current
authority and, for single-key DAOs, the key that controls it.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..crypto.address import authority_account, dao_id_to_address, sort_addresses
from ..crypto.keys import KeyPair
from ..runtime.errors import InvalidIdError
from ..runtime.ids import to_hex_id


class Authority(BaseModel):
    """
    Signatory set plus approval threshold.

    All signatories weigh 1, so the threshold can never exceed the number of
    signatories. Threshold 0 and 1 both mean a single approval suffices.
    """
    signatories: List[str] = Field(..., min_length=1, description="Member account addresses")
    threshold: int = Field(default=0, ge=0, description="Approvals required")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator('signatories')
    @classmethod
    def normalize_signatories(cls, v: List[str]) -> List[str]:
        try:
            normalized = [to_hex_id(s) for s in v]
        except InvalidIdError as e:
            raise ValueError(e.message)
        if len(set(normalized)) != len(normalized):
            raise ValueError("signatories must be distinct")
        return normalized

    @model_validator(mode='after')
    def check_threshold(self) -> Authority:
        if self.threshold > len(self.signatories):
            raise ValueError(
                f"threshold {self.threshold} exceeds {len(self.signatories)} signatories"
            )
        return self

    @classmethod
    def single(cls, key: KeyPair) -> Authority:
        """Authority of a DAO controlled by one key."""
        return cls(signatories=[key.address], threshold=0)

    @property
    def is_single(self) -> bool:
        return len(self.signatories) == 1

    @property
    def effective_threshold(self) -> int:
        return max(self.threshold, 1)

    @property
    def account(self) -> str:
        """Account that must originate calls authorized by this authority."""
        return authority_account(self.signatories, self.threshold)

    def has_member(self, address: str) -> bool:
        return to_hex_id(address) in self.signatories

    def others(self, address: str) -> List[str]:
        """Sorted co-signatories of ``address``."""
        member = to_hex_id(address)
        return sort_addresses(s for s in self.signatories if s != member)

    def encode(self) -> Dict[str, Any]:
        return {"signatories": list(self.signatories), "threshold": self.threshold}


@dataclass
class Actor:
    """A DAO identity."""
    dao_id: str
    authority: Authority
    key: Optional[KeyPair] = None
    name: Optional[str] = None

    def __post_init__(self):
        self.dao_id = to_hex_id(self.dao_id)

    @property
    def address(self) -> str:
        return dao_id_to_address(self.dao_id)

    def __repr__(self) -> str:
        label = f"{self.name}, " if self.name else ""
        return f"Actor({label}{self.dao_id})"
