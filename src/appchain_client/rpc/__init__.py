"""
Appchain node JSON-RPC access.
"""

from .client import ChainRpcClient, PaymentInfo

__all__ = ["ChainRpcClient", "PaymentInfo"]
