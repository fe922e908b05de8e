"""
Tenant portal setup.

Idempotently provisions what a portal deployment expects to find on chain:

1. the faucet DAO, controlled by the faucet key and funded from it
2. the tenant DAO with each configured member DAO added as a signatory
3. the default faucet assets, issued in full to the faucet DAO

Anything that already exists is left as is, so the setup can be rerun.
"""

import logging
from typing import Any, Dict, List, Optional

from ..codec.hashes import metadata_hash
from ..config import FAUCET_DAO_FUNDING_AMOUNT
from ..crypto.keys import KeyPair
from ..runtime.errors import ConfigError
from ..tx.authority import Actor, Authority
from ..tx.operations import AddDaoMember, CreateAsset, CreateDao, IssueAsset
from .context import ScenarioContext, log_json_result

logger = logging.getLogger(__name__)

FAUCET_ASSET_MAX_SUPPLY = 999_999_999_999_999


def _existing_actor(ctx: ScenarioContext, dao_id: str, key: Optional[KeyPair] = None,
                    name: Optional[str] = None) -> Optional[Actor]:
    record = ctx.client.get_account(dao_id)
    if record is None:
        return None
    return Actor(dao_id=dao_id, authority=Authority.model_validate(record["authority"]), key=key, name=name)


def create_faucet_dao(ctx: ScenarioContext) -> Actor:
    """Create and fund the faucet DAO unless it already exists."""
    faucet_account = ctx.config.faucet_account
    if faucet_account is None:
        raise ConfigError("DEIP_APPCHAIN_FAUCET_ACCOUNT is not configured")
    key = ctx.faucet_key

    existing = _existing_actor(ctx, faucet_account.username, key=key, name="Faucet")
    if existing is not None:
        logger.info("Faucet DAO %s already exists", existing.dao_id)
        return existing

    logger.info("Creating Faucet DAO ...")
    authority = Authority.single(key)
    ctx.execute(
        CreateDao(
            dao_id=faucet_account.username,
            authority=authority,
            metadata=metadata_hash({"description": "Faucet DAO"}),
        ),
        authority, [key],
        expect=ctx.dao_exists(faucet_account.username),
    )
    faucet_dao = Actor(dao_id=faucet_account.username, authority=authority, key=key, name="Faucet")
    log_json_result("Faucet DAO created", ctx.client.get_account(faucet_dao.dao_id))

    if ctx.config.is_substrate:
        ctx.fund(faucet_dao.address, FAUCET_DAO_FUNDING_AMOUNT)
    return faucet_dao


def create_tenant_dao(ctx: ScenarioContext) -> Actor:
    """Create the tenant DAO and make every configured member DAO a signatory."""
    tenant = ctx.config.portal_tenant
    if tenant is None:
        raise ConfigError("DEIP_PORTAL_TENANT is not configured")

    tenant_key = KeyPair.from_seed(tenant.priv_key, username=tenant.id)
    tenant_dao = _existing_actor(ctx, tenant.id, key=tenant_key, name="Tenant")
    if tenant_dao is None:
        tenant_dao = ctx.create_key_dao("Tenant", dao_id=tenant.id, key=tenant_key)

    for member in tenant.members:
        member_key = KeyPair.from_password(member.dao_id, member.password)
        member_dao = _existing_actor(ctx, member.dao_id, key=member_key, name="Tenant Member")
        if member_dao is None:
            member_dao = ctx.create_key_dao("Tenant Member", dao_id=member.dao_id, key=member_key)

        if tenant_dao.authority.has_member(member_dao.address):
            continue

        logger.info("Adding Tenant Member DAO %s to Tenant DAO %s ...", member_dao.dao_id, tenant_dao.dao_id)
        ctx.execute(
            AddDaoMember(member=member_dao.address),
            tenant_dao, [tenant_key],
            expect=lambda dao_id=tenant_dao.dao_id, address=member_dao.address: _has_signatory(ctx, dao_id, address),
        )
        tenant_dao = _existing_actor(ctx, tenant.id, key=tenant_key, name="Tenant")
        log_json_result(
            f"Tenant Member DAO {member_dao.dao_id} added to Tenant DAO {tenant_dao.dao_id}",
            ctx.client.get_account(tenant_dao.dao_id),
        )

    log_json_result("Tenant DAO finalized", ctx.client.get_account(tenant_dao.dao_id))
    return tenant_dao


def create_default_faucet_assets(ctx: ScenarioContext, faucet_dao: Actor) -> List[Dict[str, Any]]:
    """Create each configured faucet asset that is missing and issue it to the faucet DAO."""
    assets = []
    for spec in ctx.config.faucet_assets:
        existing = ctx.client.get_asset(spec.id)
        if existing is not None:
            assets.append(existing)
            continue

        logger.info("Creating and issuing %s asset to %s DAO ...", spec.symbol, faucet_dao.dao_id)
        ctx.execute(
            [
                CreateAsset(
                    asset_id=spec.id,
                    name=f"Asset {spec.symbol}",
                    symbol=spec.symbol,
                    decimals=spec.precision,
                    min_balance=1,
                    max_supply=FAUCET_ASSET_MAX_SUPPLY,
                ),
                IssueAsset(asset_id=spec.id, beneficiary=faucet_dao.address, amount=FAUCET_ASSET_MAX_SUPPLY),
            ],
            faucet_dao, [faucet_dao],
            expect=lambda asset_id=spec.id: ctx.client.get_asset(asset_id) is not None,
        )
        asset = ctx.client.get_asset(spec.id)
        assets.append(asset)
        log_json_result(f"{spec.symbol} asset created and issued to {faucet_dao.dao_id} DAO", asset)
    return assets


def _has_signatory(ctx: ScenarioContext, dao_id: str, address: str) -> bool:
    record = ctx.client.get_account(dao_id)
    return record is not None and address in record["authority"]["signatories"]


def run(ctx: ScenarioContext) -> Dict[str, Any]:
    ctx.connect()
    logger.info("Setting up Tenant Portal ...")
    faucet_dao = create_faucet_dao(ctx)
    tenant_dao = create_tenant_dao(ctx)
    assets = create_default_faucet_assets(ctx, faucet_dao)
    logger.info("Tenant Portal is set.")
    return {
        "faucet": faucet_dao.dao_id,
        "tenant": tenant_dao.dao_id,
        "members": list(tenant_dao.authority.signatories),
        "assets": [asset["id"] for asset in assets],
    }
