#!/usr/bin/env python3
"""
Command line entry point.

Runs one named scenario against the node configured in the environment or
env file::

    appchain-scenarios dao-multisig --env-file .local.env
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import load_config
from .runtime.errors import AppchainError
from .scenarios import SCENARIOS, ScenarioContext, log_json_result

logger = logging.getLogger("appchain_client")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run appchain DAO scenarios")
    parser.add_argument('scenario', choices=sorted(SCENARIOS), help='Scenario to run')
    parser.add_argument('--env-file', help='Env file to load instead of .{DEIP_CONFIG}.env')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Run a scenario and return the process exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    try:
        config = load_config(args.env_file)
        with ScenarioContext.from_config(config) as ctx:
            result = SCENARIOS[args.scenario](ctx)
    except AppchainError as e:
        logger.error("Scenario %s failed: %s", args.scenario, e)
        return 1
    except Exception:
        logger.exception("Scenario %s failed with an unexpected error", args.scenario)
        return 1

    log_json_result(f"Scenario {args.scenario} finished", result)
    logger.info("Successfully finished!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
