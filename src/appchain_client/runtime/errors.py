"""
Appchain Error Model

This module provides the error handling framework for the appchain client.
Node-side JSON-RPC errors, transaction-pool rejections, composition mistakes
and finality timeouts each map to a distinct exception type so that callers
can tell a rejected transaction from an unreachable node.
"""

from __future__ import annotations
import json
from typing import Optional, Dict, Any
from enum import IntEnum


class ErrorCode(IntEnum):
    """Client error codes."""

    # Success
    OK = 0

    # General errors (1-99)
    UNKNOWN = 1
    INTERNAL = 2
    INVALID_ID = 3
    NOT_FOUND = 4
    CONFIG_ERROR = 5

    # Encoding errors (100-199)
    ENCODING_ERROR = 100
    INVALID_JSON = 101

    # Network errors (200-299)
    NETWORK_ERROR = 200
    CONNECTION_FAILED = 201
    TIMEOUT = 202

    # Signing errors (300-399)
    INVALID_KEY = 300
    INVALID_SIGNATURE = 301

    # Transaction errors (400-499)
    RPC_ERROR = 400
    TRANSACTION_REJECTED = 401
    TRANSACTION_FAILED = 402
    FINALITY_TIMEOUT = 403

    # Composition errors (500-599)
    INVALID_AUTHORITY = 500
    INVALID_APPROVAL_PATH = 501
    DUPLICATE_APPROVAL = 502


# Substrate transaction-pool error codes returned by author_submitExtrinsic
POOL_INVALID_TRANSACTION = 1010
POOL_UNKNOWN_TRANSACTION = 1011
POOL_IMMEDIATELY_DROPPED = 1012
POOL_ALREADY_IMPORTED = 1013
POOL_TOO_LOW_PRIORITY = 1014

POOL_REJECTION_CODES = frozenset({
    POOL_INVALID_TRANSACTION,
    POOL_UNKNOWN_TRANSACTION,
    POOL_IMMEDIATELY_DROPPED,
    POOL_ALREADY_IMPORTED,
    POOL_TOO_LOW_PRIORITY,
})


class AppchainError(Exception):
    """
    Base class for all appchain client errors.

    Provides structured error information: a client error code, free-form
    details and the underlying cause.
    """

    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        """
        Initialize an appchain error.

        Args:
            message: Error message
            code: Error code
            details: Additional error details
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        parts = [f"[{self.code.name}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ConfigError(AppchainError):
    """Missing or malformed configuration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.CONFIG_ERROR, details, cause)


class InvalidIdError(AppchainError):
    """Entity id that is not valid hex."""

    def __init__(self, message: str = "Invalid entity id",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.INVALID_ID, details, cause)


class NetworkError(AppchainError):
    """Network-related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.NETWORK_ERROR, details, cause)


class RequestTimeoutError(NetworkError):
    """HTTP request timeouts."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, details, cause)
        self.code = ErrorCode.TIMEOUT


class RpcError(AppchainError):
    """
    JSON-RPC error object returned by the node.

    The message concatenates code, message and JSON-encoded data the same
    way for every method so logs stay greppable.
    """

    def __init__(self, rpc_code: Optional[int], rpc_message: str, data: Any = None,
                 code: ErrorCode = ErrorCode.RPC_ERROR):
        super().__init__(f"{rpc_code} {rpc_message}: {json.dumps(data)}", code)
        self.rpc_code = rpc_code
        self.rpc_message = rpc_message
        self.data = data


class TransactionRejectedError(RpcError):
    """The transaction pool refused the extrinsic."""

    def __init__(self, rpc_code: Optional[int], rpc_message: str, data: Any = None):
        super().__init__(rpc_code, rpc_message, data, ErrorCode.TRANSACTION_REJECTED)


class TransactionFailedError(AppchainError):
    """The extrinsic left the pool but its expected effect never appeared."""

    def __init__(self, message: str = "Transaction failed",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.TRANSACTION_FAILED, details, cause)


class FinalityTimeoutError(AppchainError):
    """The expected post-state was not observed within the polling budget."""

    def __init__(self, message: str = "Timed out waiting for finality",
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.FINALITY_TIMEOUT, details, cause)


class SigningError(AppchainError):
    """Key or signature errors."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_KEY,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


class CompositionError(AppchainError):
    """Inconsistent authority nesting or approval path."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INVALID_APPROVAL_PATH,
                 details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, code, details, cause)


def error_from_rpc(error: Any) -> RpcError:
    """
    Create an appropriate error from a JSON-RPC error object.

    Args:
        error: The ``error`` member of a JSON-RPC response

    Returns:
        TransactionRejectedError for pool rejections, RpcError otherwise
    """
    if not isinstance(error, dict):
        return RpcError(None, str(error))

    rpc_code = error.get("code")
    message = error.get("message", "Unknown error")
    data = error.get("data")

    if rpc_code in POOL_REJECTION_CODES:
        return TransactionRejectedError(rpc_code, message, data)
    return RpcError(rpc_code, message, data)


__all__ = [
    "ErrorCode",
    "POOL_REJECTION_CODES",
    "AppchainError",
    "ConfigError",
    "InvalidIdError",
    "NetworkError",
    "RequestTimeoutError",
    "RpcError",
    "TransactionRejectedError",
    "TransactionFailedError",
    "FinalityTimeoutError",
    "SigningError",
    "CompositionError",
    "error_from_rpc",
]
