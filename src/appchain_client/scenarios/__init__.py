"""
Scenarios runnable from the command line.

Each scenario is a function ``run(ctx)`` that returns a JSON-serialisable
summary of what it created.
"""

from typing import Any, Callable, Dict

from . import dao_multisig, nft_swap, portal_config, tenant_portal, token_flow
from .context import ScenarioContext, log_json_result

Scenario = Callable[[ScenarioContext], Dict[str, Any]]

SCENARIOS: Dict[str, Scenario] = {
    "dao-multisig": dao_multisig.run,
    "token-flow": token_flow.run,
    "nft-swap": nft_swap.run,
    "tenant-portal": tenant_portal.run,
    "portal-config": portal_config.run,
}

__all__ = ["SCENARIOS", "Scenario", "ScenarioContext", "log_json_result"]
