"""
Appchain DAO client.

Composes, signs and sequences multisig approval chains for DAOs on a
Substrate-style appchain, plus the runnable scenarios built on top of them.
"""

from .config import AppchainConfig, load_config
from .crypto import KeyPair, authority_account, dao_id_to_address, multi_account_id
from .faucet import Faucet
from .recovery import ExponentialBackoff, FixedBackoff, RetryPolicy, finality_policy
from .rpc import ChainRpcClient, PaymentInfo
from .runtime.errors import *
from .tx import *

__version__ = "0.1.0"
