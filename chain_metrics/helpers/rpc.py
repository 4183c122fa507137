"""Bitcoin Core JSON-RPC client."""

import itertools

from types import TracebackType
from typing import Any, Self

import httpx
from pydantic import ValidationError

from chain_metrics.helpers.constants import DEFAULT_TIMEOUT, GET_BLOCK_VERBOSITY
from chain_metrics.helpers.errors import NodeConnectionError, RPCQueryError
from chain_metrics.helpers.logging import get_logger
from chain_metrics.helpers.rpc_models import (
    Block,
    BlockchainInfo,
    GetBlockchainInfoRequest,
    GetBlockCountRequest,
    GetBlockHashRequest,
    GetBlockRequest,
    JsonRpcRequest,
    JsonRpcResponse,
)


logger = get_logger(__name__)

AUTH_FAILURE_STATUSES = frozenset({401, 403})


class NodeClient:
    """Read-only JSON-RPC client for a Bitcoin Core node."""

    def __init__(
        self,
        rpc_url: str,
        auth: tuple[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize node client.

        Args:
            rpc_url: Node JSON-RPC endpoint URL
            auth: Optional (user, password) pair for HTTP basic auth
            timeout: Default timeout for requests in seconds
            http_client: Optional preconfigured httpx client

        Raises:
            ValueError: If rpc_url is empty or None
        """
        if not rpc_url:
            msg = "RPC URL cannot be empty"
            raise ValueError(msg)

        self.rpc_url = rpc_url
        self.timeout = timeout
        self._http = http_client or httpx.Client(auth=auth, timeout=timeout)
        self._ids = itertools.count(1)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        self._http.close()

    def _send(self, request: JsonRpcRequest) -> Any:
        """Post one request and return its result.

        Raises:
            NodeConnectionError: If the node is unreachable or rejects auth
            RPCQueryError: If the node reports an error for the call
        """
        method = request.method
        logger.debug("RPC %s %s", method, request.params)

        try:
            response = self._http.post(
                self.rpc_url, json=request.model_dump(), timeout=self.timeout
            )
        except httpx.TransportError as e:
            msg = f"Cannot reach node at {self.rpc_url}: {e}"
            raise NodeConnectionError(msg) from e

        if response.status_code in AUTH_FAILURE_STATUSES:
            msg = (
                f"Authentication with node at {self.rpc_url} failed "
                f"(HTTP {response.status_code})"
            )
            raise NodeConnectionError(msg)

        # Bitcoin Core reports RPC errors with HTTP 404/500 and a JSON body
        try:
            body = JsonRpcResponse.model_validate(response.json())
        except ValueError:
            if response.is_error:
                raise RPCQueryError(
                    method, response.reason_phrase or "HTTP error", response.status_code
                ) from None
            raise RPCQueryError(method, "malformed response") from None

        if body.error is not None:
            raise RPCQueryError(method, body.error.message, body.error.code)

        if response.is_error:
            raise RPCQueryError(
                method, response.reason_phrase or "HTTP error", response.status_code
            )

        return body.result

    def get_block_hash(self, block_height: int) -> str:
        """Get the hash of the block at a height on the active chain.

        Args:
            block_height: Block height

        Returns:
            Block hash as a hex string
        """
        result = self._send(
            GetBlockHashRequest(params=[block_height], id=next(self._ids))
        )
        if not isinstance(result, str):
            raise RPCQueryError("getblockhash", f"unexpected result {result!r}")
        return result

    def get_block(self, block_hash: str) -> Block:
        """Get a block with its txids.

        Args:
            block_hash: Block hash

        Returns:
            Parsed block
        """
        result = self._send(
            GetBlockRequest(
                params=[block_hash, GET_BLOCK_VERBOSITY], id=next(self._ids)
            )
        )
        try:
            return Block.model_validate(result)
        except ValidationError as e:
            raise RPCQueryError("getblock", f"unexpected result: {e}") from e

    def get_blockchain_info(self) -> BlockchainInfo:
        """Get the node's blockchain state summary."""
        result = self._send(GetBlockchainInfoRequest(id=next(self._ids)))
        try:
            return BlockchainInfo.model_validate(result)
        except ValidationError as e:
            raise RPCQueryError("getblockchaininfo", f"unexpected result: {e}") from e

    def get_block_count(self) -> int:
        """Get the height of the chain tip."""
        result = self._send(GetBlockCountRequest(id=next(self._ids)))
        if not isinstance(result, int) or isinstance(result, bool):
            raise RPCQueryError("getblockcount", f"unexpected result {result!r}")
        return result


__all__ = ["NodeClient"]
