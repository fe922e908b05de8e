"""
Runtime configuration.

Loaded once at process start from the environment and an optional env file,
then immutable. The env file is ``.{DEIP_CONFIG}.env`` when ``DEIP_CONFIG``
is set and ``.config.env`` otherwise; variables already present in the
environment take precedence over the file.
"""

from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from .runtime.errors import ConfigError, InvalidIdError
from .runtime.ids import to_hex_id

logger = logging.getLogger(__name__)


def _hex(v: str) -> str:
    try:
        return to_hex_id(v)
    except InvalidIdError as e:
        raise ValueError(e.message)


PROTOCOL_CHAIN_GRAPHENE = 1
PROTOCOL_CHAIN_SUBSTRATE = 2

FAUCET_DAO_FUNDING_AMOUNT = 900_000_000_000_000_000_000  # 900 MUNIT
SUBSTRATE_DAO_SEED_FUNDING_AMOUNT = 1_100_000_000_000_000_000  # 1.1 MUNIT
SUBSTRATE_DAO_FUNDING_AMOUNT = 1_000_000_000_000_000_000  # 1 MUNIT
GRAPHENE_DAO_FUNDING_AMOUNT = 10_000


class FaucetAccount(BaseModel):
    """Faucet DAO id and the seed of the key that controls it."""
    username: str
    wif: str

    model_config = {"frozen": True}

    @field_validator('username', 'wif')
    @classmethod
    def validate_hex(cls, v: str) -> str:
        return _hex(v)


class AssetSpec(BaseModel):
    id: str
    symbol: str
    precision: int = 18

    model_config = {"frozen": True}

    @field_validator('id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _hex(v)


class CoreAsset(AssetSpec):
    """Asset the faucet hands out; ``native`` selects the balances module."""
    native: bool = False


class TenantMember(BaseModel):
    dao_id: str = Field(..., alias="daoId")
    password: str

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator('dao_id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        return _hex(v)


class PortalTenant(BaseModel):
    id: str
    priv_key: str = Field(..., alias="privKey")
    members: List[TenantMember] = Field(default_factory=list)

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator('id', 'priv_key')
    @classmethod
    def validate_hex(cls, v: str) -> str:
        return _hex(v)


class AppchainConfig(BaseModel):
    """
    Appchain client configuration.

    Field aliases are the environment variable names.
    """
    node_url: str = Field(..., alias="DEIP_APPCHAIN_NODE_URL")
    chain_id: Optional[str] = Field(default=None, alias="DEIP_CHAIN_ID")
    protocol_chain: int = Field(default=PROTOCOL_CHAIN_SUBSTRATE, alias="DEIP_PROTOCOL_CHAIN")
    millisecs_per_block: int = Field(default=6000, gt=0, alias="DEIP_APPCHAIN_MILLISECS_PER_BLOCK")
    faucet_account: Optional[FaucetAccount] = Field(default=None, alias="DEIP_APPCHAIN_FAUCET_ACCOUNT")
    core_asset: Optional[CoreAsset] = Field(default=None, alias="DEIP_APPCHAIN_CORE_ASSET")
    faucet_assets: List[AssetSpec] = Field(default_factory=list, alias="DEIP_APPCHAIN_FAUCET_ASSETS")
    portal_tenant: Optional[PortalTenant] = Field(default=None, alias="DEIP_PORTAL_TENANT")
    generate_portal_config: Optional[Dict[str, Any]] = Field(default=None, alias="TENANT_GENERATE_PORTAL_CONFIG")
    finality_attempts: int = Field(default=8, ge=1, alias="DEIP_APPCHAIN_FINALITY_ATTEMPTS")
    rpc_timeout: float = Field(default=30.0, gt=0, alias="DEIP_APPCHAIN_RPC_TIMEOUT")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator(
        'faucet_account', 'core_asset', 'faucet_assets', 'portal_tenant', 'generate_portal_config',
        mode='before',
    )
    @classmethod
    def parse_json(cls, v: Any, info: ValidationInfo) -> Any:
        if isinstance(v, str):
            if not v.strip():
                return [] if info.field_name == 'faucet_assets' else None
            return json.loads(v)
        return v

    @property
    def block_time(self) -> float:
        """Block time in seconds."""
        return self.millisecs_per_block / 1000.0

    @property
    def is_substrate(self) -> bool:
        return self.protocol_chain == PROTOCOL_CHAIN_SUBSTRATE

    @property
    def dao_seed_funding_amount(self) -> int:
        """Amount funded to a fresh key before it creates its DAO."""
        return SUBSTRATE_DAO_SEED_FUNDING_AMOUNT if self.is_substrate else 0

    @property
    def dao_funding_amount(self) -> int:
        """Amount funded to a freshly created DAO."""
        return SUBSTRATE_DAO_FUNDING_AMOUNT if self.is_substrate else GRAPHENE_DAO_FUNDING_AMOUNT


def default_env_file(environ: Optional[Mapping[str, str]] = None) -> Path:
    environ = os.environ if environ is None else environ
    name = environ.get("DEIP_CONFIG")
    return Path(f".{name}.env" if name else ".config.env")


def read_env_file(path: Union[str, Path]) -> Dict[str, str]:
    """
    Parse a dotenv-style file.

    Blank lines and ``#`` comments are skipped; values may be wrapped in
    single or double quotes.
    """
    values: Dict[str, str] = {}
    with open(path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith('#') and '=' in line:
                key, value = line.split('=', 1)
                key = key.strip()
                if key.startswith('export '):
                    key = key[len('export '):].strip()
                value = value.strip()
                if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
                    value = value[1:-1]
                values[key] = value
    return values


def load_config(env_file: Optional[Union[str, Path]] = None,
                environ: Optional[Mapping[str, str]] = None) -> AppchainConfig:
    """
    Load configuration from an env file and the environment.

    Args:
        env_file: Explicit env file; a missing explicit file is an error
        environ: Environment mapping, defaults to ``os.environ``

    Raises:
        ConfigError: If the file is missing or a value is invalid
    """
    environ = dict(os.environ if environ is None else environ)

    if env_file is not None:
        path = Path(env_file)
        if not path.exists():
            raise ConfigError(f"Env file not found: {path}")
    else:
        path = default_env_file(environ)

    values: Dict[str, str] = {}
    if path.exists():
        logger.debug("Loading config from %s", path)
        values.update(read_env_file(path))
    values.update({k: v for k, v in environ.items() if k in _ENV_NAMES})

    try:
        return AppchainConfig.model_validate(values)
    except (ValidationError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}", cause=e)


_ENV_NAMES = frozenset(f.alias for f in AppchainConfig.model_fields.values() if f.alias)
