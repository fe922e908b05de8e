"""
Appchain JSON-RPC client.

Thin typed wrapper over the node's JSON-RPC 2.0 endpoint. Every entity id is
normalized to a 0x-prefixed hex string before dispatch. The client is
constructed explicitly and owns its HTTP session unless one is injected.
"""

from __future__ import annotations
import json
import logging
import random
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel, Field

from ..crypto.address import to_account
from ..runtime.errors import (
    AppchainError,
    ErrorCode,
    NetworkError,
    RequestTimeoutError,
    error_from_rpc,
)
from ..runtime.ids import to_hex_id
from ..tx.calls import MultisigRecord

logger = logging.getLogger(__name__)


class PaymentInfo(BaseModel):
    """Dry-run fee estimate of an extrinsic."""
    weight: int
    dispatch_class: str = Field(default="normal", alias="class")
    partial_fee: int = Field(default=0, alias="partialFee")

    model_config = {"populate_by_name": True}


class ChainRpcClient:
    """
    JSON-RPC client for an appchain node.

    Example:
        ```python
        with ChainRpcClient("http://127.0.0.1:9933") as client:
            dao = client.get_account("0x8e2a3711649993a87848337b9b401dcf64425e2d")
        ```
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the client.

        Args:
            url: Node HTTP RPC URL
            timeout: Request timeout in seconds
            session: Optional requests.Session for connection pooling
        """
        self._url = url
        self._timeout = timeout
        self._session = session or requests.Session()
        self._owns_session = session is None

    @property
    def url(self) -> str:
        return self._url

    def close(self) -> None:
        """Close the HTTP session if owned by this client."""
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> ChainRpcClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # =========================================================================
    # Low-level RPC
    # =========================================================================

    def _call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """
        Make a JSON-RPC 2.0 call.

        Args:
            method: RPC method name
            params: Positional parameters

        Returns:
            The ``result`` member of the response

        Raises:
            RpcError: If the node returns an error object
            TransactionRejectedError: If the transaction pool refuses a submission
            NetworkError: If the node cannot be reached
        """
        request_data: Dict[str, Any] = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params if params is not None else [],
            "id": random.randint(1, 1_000_000),
        }
        logger.debug("RPC %s %s", method, request_data["params"])

        try:
            response = self._session.post(
                self._url,
                json=request_data,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )

            if response.status_code != 200:
                raise NetworkError(
                    f"HTTP {response.status_code}: {response.reason}",
                    details={"method": method, "status": response.status_code},
                )

            response_data = response.json()

        except requests.exceptions.Timeout as e:
            raise RequestTimeoutError(f"Request to {self._url} timed out", {"method": method}, e)
        except json.JSONDecodeError as e:
            raise AppchainError(f"Invalid JSON response: {e}", ErrorCode.INVALID_JSON, {"method": method}, e)
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"HTTP request failed: {e}", {"method": method}, e)

        if response_data.get("error") is not None:
            error = error_from_rpc(response_data["error"])
            logger.debug("RPC %s failed: %s", method, error)
            raise error

        return response_data.get("result")

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Make a raw JSON-RPC call."""
        return self._call(method, params)

    # =========================================================================
    # Node
    # =========================================================================

    def system_info(self) -> Dict[str, str]:
        """Chain name, node implementation name and version."""
        return {
            "chain": self._call("system_chain"),
            "name": self._call("system_name"),
            "version": self._call("system_version"),
        }

    def account_next_index(self, address: str) -> int:
        """Next nonce of an account, counting extrinsics still in the pool."""
        return int(self._call("system_accountNextIndex", [to_hex_id(address)]))

    # =========================================================================
    # Entity reads
    # =========================================================================

    def get_account(self, dao_id: str) -> Optional[Dict[str, Any]]:
        """DAO by id, or None."""
        return self._call("deipDao_get", [None, to_hex_id(dao_id)])

    def get_project(self, project_id: str) -> Optional[Dict[str, Any]]:
        return self._call("deip_getProject", [None, to_hex_id(project_id)])

    def get_proposal(self, proposal_id: str) -> Optional[Dict[str, Any]]:
        return self._call("deipProposal_get", [None, to_hex_id(proposal_id)])

    def get_asset(self, asset_id: str) -> Optional[Dict[str, Any]]:
        return self._call("assets_getAsset", [None, to_hex_id(asset_id)])

    def get_asset_balance_by_owner(self, owner: str, asset_id: str) -> Optional[Dict[str, Any]]:
        """
        Balance record of ``owner`` for a fungible asset.

        Args:
            owner: Account address or DAO id
            asset_id: Asset id
        """
        return self._call("assets_getAssetBalanceByOwner", [None, to_account(owner), to_hex_id(asset_id)])

    def get_nft_class(self, class_id: str) -> Optional[Dict[str, Any]]:
        return self._call("uniques_getClass", [None, to_hex_id(class_id)])

    def get_nft_instances_by_owner(self, owner: str, class_id: str) -> List[int]:
        """Instance ids of an NFT class held by ``owner`` (address or DAO id)."""
        result = self._call("uniques_getClassInstancesByOwner", [None, to_account(owner), to_hex_id(class_id)])
        return result or []

    def get_next_asset_id(self) -> str:
        return to_hex_id(self._call("assets_getNextAvailableAssetId", [None]))

    def get_next_nft_class_id(self) -> str:
        return to_hex_id(self._call("uniques_getNextAvailableClassId", [None]))

    # =========================================================================
    # Multisig and fees
    # =========================================================================

    def get_multisig(self, multi_account: str, call_hash: str) -> Optional[MultisigRecord]:
        """
        Pending approval record of a call on a multisig account.

        Returns:
            MultisigRecord, or None when no approval has been recorded
        """
        result = self._call("multisig_getMultisig", [None, to_hex_id(multi_account), to_hex_id(call_hash)])
        if result is None:
            return None
        return MultisigRecord.model_validate(result)

    def payment_info(self, extrinsic: str) -> PaymentInfo:
        """
        Dry-run an encoded extrinsic for its weight and fee.

        Args:
            extrinsic: Hex envelope, signed or unsigned
        """
        result = self._call("payment_queryInfo", [extrinsic, None])
        return PaymentInfo.model_validate(result)

    # =========================================================================
    # Transaction pool
    # =========================================================================

    def submit_extrinsic(self, extrinsic: str) -> str:
        """
        Submit a signed extrinsic to the transaction pool.

        Returns:
            Transaction hash

        Raises:
            TransactionRejectedError: If the pool refuses it
        """
        tx_hash = self._call("author_submitExtrinsic", [extrinsic])
        logger.debug("Submitted extrinsic %s", tx_hash)
        return tx_hash

    def pending_extrinsics(self) -> List[str]:
        """Encoded extrinsics waiting in the pool."""
        return self._call("author_pendingExtrinsics") or []
