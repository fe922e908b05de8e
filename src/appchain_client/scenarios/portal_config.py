"""
Portal config generator.

Generates the key material for a new tenant portal and prints the
``TENANT`` and ``TENANT_PORTAL`` environment values. Nothing is sent to the
node.
"""

import json
import logging
import secrets
from typing import Any, Dict

from ..codec.hashes import blake2_256_hex
from ..crypto.keys import KeyPair
from ..runtime.errors import ConfigError
from ..runtime.ids import random_hex_id, to_hex_id
from .context import ScenarioContext, log_json_result

logger = logging.getLogger(__name__)

PORTAL_ID_DIGITS = 40
PASSWORD_LENGTH = 16


def generate_portal_id(length: int = PORTAL_ID_DIGITS) -> str:
    """Random decimal portal id; 40 digits read as hex make a DAO id."""
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


def generate_user(username: str) -> Dict[str, Any]:
    """Fresh password and DAO id, plus the key derived from ``username`` and the password."""
    password = blake2_256_hex(secrets.token_bytes(20))[2:2 + PASSWORD_LENGTH]
    return {
        "password": password,
        "dao_id": random_hex_id(),
        "key": KeyPair.from_password(username, password),
    }


def run(ctx: ScenarioContext) -> Dict[str, Any]:
    settings = ctx.config.generate_portal_config or {}
    portal = settings.get("portal")
    if not portal:
        raise ConfigError("TENANT_GENERATE_PORTAL_CONFIG must contain a portal")

    tenant_id = to_hex_id(portal.get("_id") or generate_portal_id())
    name = portal.get("name", "portal")

    tenant_user = generate_user(f"{name}_tenant")
    portal_user = generate_user(f"{name}_portal")

    tenant = {
        "id": tenant_id,
        "privKey": tenant_user["key"].seed_hex,
        "pubKey": tenant_user["key"].address,
        "members": [{"daoId": tenant_user["dao_id"], "password": tenant_user["password"]}],
    }
    tenant_portal = {
        "privKey": portal_user["key"].seed_hex,
        "pubKey": portal_user["key"].address,
    }

    log_json_result("TENANT", tenant)
    log_json_result("TENANT_PORTAL", tenant_portal)
    logger.info(
        "New portal env values:\nTENANT='%s'\nTENANT_PORTAL='%s'",
        json.dumps(tenant), json.dumps(tenant_portal),
    )
    return {"TENANT": tenant, "TENANT_PORTAL": tenant_portal}
