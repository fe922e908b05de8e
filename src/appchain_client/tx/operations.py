"""
Operation types.

Each operation is a single state-changing intent addressed to one runtime
module and method. Operations know nothing about who signs them; the
composer decides which DAO they run on behalf of.

The wire form of every operation is ``{"module", "method", "args"}``.
"""

from __future__ import annotations
from abc import ABC
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..crypto.address import to_account
from ..runtime.errors import InvalidIdError
from ..runtime.ids import to_hex_id
from .authority import Authority

DEFAULT_DOMAIN = "0x8e2a3711649993a87848337b9b401dcf64425e2d"


def _hex(v: Any) -> str:
    try:
        return to_hex_id(v)
    except InvalidIdError as e:
        raise ValueError(e.message)


def _account(v: str) -> str:
    try:
        return to_account(v)
    except InvalidIdError as e:
        raise ValueError(e.message)


def _amount(v: Union[int, str]) -> int:
    amount = int(v)
    if amount < 0:
        raise ValueError("amount must not be negative")
    return amount


# =============================================================================
# Base Operation
# =============================================================================

class Operation(BaseModel, ABC):
    """
    Base class for all operations.

    Subclasses declare ``module`` and ``method`` and implement ``args``.
    """
    module: ClassVar[str]
    method: ClassVar[str]

    model_config = {"populate_by_name": True, "frozen": True}

    def args(self) -> Dict[str, Any]:
        raise NotImplementedError

    def encode(self) -> Dict[str, Any]:
        return {"module": self.module, "method": self.method, "args": self.args()}


# =============================================================================
# DAO operations
# =============================================================================

class CreateDao(Operation):
    """
    Create a DAO with the given authority.

    Must be originated by the authority's own account.
    """
    module: ClassVar[str] = "deipDao"
    method: ClassVar[str] = "create"

    dao_id: str = Field(..., alias="id")
    authority: Authority
    metadata: Optional[str] = None

    @field_validator('dao_id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _hex(v)

    def args(self) -> Dict[str, Any]:
        return {"id": self.dao_id, "authority": self.authority.encode(), "metadata": self.metadata}


class UpdateDao(Operation):
    module: ClassVar[str] = "deipDao"
    method: ClassVar[str] = "updateDao"

    metadata: Optional[str] = None

    def args(self) -> Dict[str, Any]:
        return {"metadata": self.metadata}


class AlterDaoAuthority(Operation):
    """Replace the authority of the originating DAO."""
    module: ClassVar[str] = "deipDao"
    method: ClassVar[str] = "alterAuthority"

    authority: Authority

    def args(self) -> Dict[str, Any]:
        return {"authority": self.authority.encode()}


class AddDaoMember(Operation):
    """
    Add another DAO's address to the originating DAO's signatories.

    The threshold is left unchanged.
    """
    module: ClassVar[str] = "deipDao"
    method: ClassVar[str] = "addMember"

    member: str

    @field_validator('member')
    @classmethod
    def validate_member(cls, v: str) -> str:
        return _hex(v)

    def args(self) -> Dict[str, Any]:
        return {"member": self.member}


# =============================================================================
# Project operations
# =============================================================================

class CreateProject(Operation):
    module: ClassVar[str] = "deip"
    method: ClassVar[str] = "createProject"

    project_id: str = Field(..., alias="external_id")
    team_id: str
    description: str
    domains: List[str] = Field(default_factory=lambda: [DEFAULT_DOMAIN])
    is_private: bool = False

    @field_validator('project_id', 'team_id')
    @classmethod
    def validate_ids(cls, v: str) -> str:
        return _hex(v)

    @field_validator('domains')
    @classmethod
    def validate_domains(cls, v: List[str]) -> List[str]:
        return [_hex(d) for d in v]

    def args(self) -> Dict[str, Any]:
        return {
            "is_private": self.is_private,
            "external_id": self.project_id,
            "team_id": {"Dao": self.team_id},
            "description": self.description,
            "domains": list(self.domains),
        }


class UpdateProject(Operation):
    module: ClassVar[str] = "deip"
    method: ClassVar[str] = "updateProject"

    project_id: str
    description: Optional[str] = None
    is_private: Optional[bool] = None

    @field_validator('project_id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _hex(v)

    def args(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "description": self.description,
            "is_private": self.is_private,
        }


class CreateProjectContent(Operation):
    module: ClassVar[str] = "deip"
    method: ClassVar[str] = "createProjectContent"

    content_id: str = Field(..., alias="external_id")
    project_id: str
    team_id: str
    content_type: int = 1
    description: str
    content: str
    authors: List[str] = Field(default_factory=list)
    references: List[str] = Field(default_factory=list)

    @field_validator('content_id', 'project_id', 'team_id')
    @classmethod
    def validate_ids(cls, v: str) -> str:
        return _hex(v)

    @field_validator('authors', 'references')
    @classmethod
    def validate_id_lists(cls, v: List[str]) -> List[str]:
        return [_hex(i) for i in v]

    def args(self) -> Dict[str, Any]:
        return {
            "external_id": self.content_id,
            "project_external_id": self.project_id,
            "team_id": {"Dao": self.team_id},
            "content_type": self.content_type,
            "description": self.description,
            "content": self.content,
            "authors": list(self.authors),
            "references": list(self.references),
        }


# =============================================================================
# Proposal operations
# =============================================================================

class Decision(str, Enum):
    APPROVE = "Approve"
    REJECT = "Reject"


class ProposalItem(BaseModel):
    """One call of a proposal batch and the DAO that must accept it."""
    call: Any
    dao_id: str

    model_config = {"frozen": True}

    @field_validator('dao_id')
    @classmethod
    def validate_dao(cls, v: str) -> str:
        return _hex(v)

    @field_validator('call')
    @classmethod
    def validate_call(cls, v: Any) -> Any:
        if not (isinstance(v, Operation) or callable(getattr(v, "hash_hex", None))):
            raise ValueError("proposal item call must be an operation or call")
        return v

    def encode(self) -> Dict[str, Any]:
        return {"call": self.call.encode(), "account": {"Dao": self.dao_id}}


class Propose(Operation):
    """
    Create a proposal.

    Executes atomically once every DAO named in the batch approves.
    """
    module: ClassVar[str] = "deipProposal"
    method: ClassVar[str] = "propose"

    proposal_id: str = Field(..., alias="external_id")
    batch: List[ProposalItem] = Field(..., min_length=1)
    expiration_time: Optional[int] = None

    @field_validator('proposal_id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _hex(v)

    @property
    def members(self) -> List[str]:
        """Distinct DAO ids whose approval the proposal needs, in batch order."""
        return list(dict.fromkeys(item.dao_id for item in self.batch))

    def args(self) -> Dict[str, Any]:
        return {
            "batch": [item.encode() for item in self.batch],
            "external_id": self.proposal_id,
            "expiration_time": self.expiration_time,
        }


class Decide(Operation):
    module: ClassVar[str] = "deipProposal"
    method: ClassVar[str] = "decide"

    proposal_id: str
    decision: Decision = Decision.APPROVE

    @field_validator('proposal_id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _hex(v)

    def args(self) -> Dict[str, Any]:
        return {"proposal_id": self.proposal_id, "decision": self.decision.value}


# =============================================================================
# Native balance and fungible asset operations
# =============================================================================

class Transfer(Operation):
    """Native balance transfer."""
    module: ClassVar[str] = "balances"
    method: ClassVar[str] = "transfer"

    dest: str
    value: int

    @field_validator('dest')
    @classmethod
    def validate_dest(cls, v: str) -> str:
        return _account(v)

    @field_validator('value', mode='before')
    @classmethod
    def validate_value(cls, v: Union[int, str]) -> int:
        return _amount(v)

    def args(self) -> Dict[str, Any]:
        return {"dest": self.dest, "value": str(self.value)}


class CreateAsset(Operation):
    """Create a fungible asset administered by the originating account."""
    module: ClassVar[str] = "assets"
    method: ClassVar[str] = "createAsset"

    asset_id: str = Field(..., alias="id")
    name: str
    symbol: str
    decimals: int = Field(default=18, ge=0)
    min_balance: int = 1
    max_supply: Optional[int] = None

    @field_validator('asset_id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _hex(v)

    def args(self) -> Dict[str, Any]:
        return {
            "id": self.asset_id,
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "min_balance": str(self.min_balance),
            "max_supply": None if self.max_supply is None else str(self.max_supply),
        }


class IssueAsset(Operation):
    module: ClassVar[str] = "assets"
    method: ClassVar[str] = "issueAsset"

    asset_id: str = Field(..., alias="id")
    beneficiary: str
    amount: int

    @field_validator('asset_id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _hex(v)

    @field_validator('beneficiary')
    @classmethod
    def validate_beneficiary(cls, v: str) -> str:
        return _account(v)

    @field_validator('amount', mode='before')
    @classmethod
    def validate_amount(cls, v: Union[int, str]) -> int:
        return _amount(v)

    def args(self) -> Dict[str, Any]:
        return {"id": self.asset_id, "beneficiary": self.beneficiary, "amount": str(self.amount)}


class TransferAsset(Operation):
    module: ClassVar[str] = "assets"
    method: ClassVar[str] = "transfer"

    asset_id: str = Field(..., alias="id")
    target: str
    amount: int

    @field_validator('asset_id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _hex(v)

    @field_validator('target')
    @classmethod
    def validate_target(cls, v: str) -> str:
        return _account(v)

    @field_validator('amount', mode='before')
    @classmethod
    def validate_amount(cls, v: Union[int, str]) -> int:
        return _amount(v)

    def args(self) -> Dict[str, Any]:
        return {"id": self.asset_id, "target": self.target, "amount": str(self.amount)}


# =============================================================================
# Non-fungible token operations
# =============================================================================

class CreateNftClass(Operation):
    module: ClassVar[str] = "uniques"
    method: ClassVar[str] = "createClass"

    class_id: str
    name: Optional[str] = None
    symbol: Optional[str] = None
    project_id: Optional[str] = None

    @field_validator('class_id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _hex(v)

    @field_validator('project_id')
    @classmethod
    def validate_project(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _hex(v)

    def args(self) -> Dict[str, Any]:
        return {
            "class_id": self.class_id,
            "name": self.name,
            "symbol": self.symbol,
            "project_id": self.project_id,
        }


class MintNft(Operation):
    module: ClassVar[str] = "uniques"
    method: ClassVar[str] = "mint"

    class_id: str
    instance_id: int = Field(..., ge=0)
    owner: str

    @field_validator('class_id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _hex(v)

    @field_validator('owner')
    @classmethod
    def validate_owner(cls, v: str) -> str:
        return _account(v)

    def args(self) -> Dict[str, Any]:
        return {"class_id": self.class_id, "instance_id": self.instance_id, "owner": self.owner}


class TransferNft(Operation):
    module: ClassVar[str] = "uniques"
    method: ClassVar[str] = "transfer"

    class_id: str
    instance_id: int = Field(..., ge=0)
    dest: str

    @field_validator('class_id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _hex(v)

    @field_validator('dest')
    @classmethod
    def validate_dest(cls, v: str) -> str:
        return _account(v)

    def args(self) -> Dict[str, Any]:
        return {"class_id": self.class_id, "instance_id": self.instance_id, "dest": self.dest}


__all__ = [
    "DEFAULT_DOMAIN",
    "Operation",
    "CreateDao",
    "UpdateDao",
    "AlterDaoAuthority",
    "AddDaoMember",
    "CreateProject",
    "UpdateProject",
    "CreateProjectContent",
    "Decision",
    "ProposalItem",
    "Propose",
    "Decide",
    "Transfer",
    "CreateAsset",
    "IssueAsset",
    "TransferAsset",
    "CreateNftClass",
    "MintNft",
    "TransferNft",
]
