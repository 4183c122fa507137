"""Pydantic models for Bitcoin Core JSON-RPC requests and responses."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from chain_metrics.helpers.constants import JSONRPC_VERSION


class JsonRpcRequest(BaseModel):
    """JSON-RPC 1.0 request model."""

    jsonrpc: str = Field(default=JSONRPC_VERSION, description="JSON-RPC version")
    method: str = Field(..., description="Method name to call")
    params: list[Any] = Field(
        default_factory=list, description="Method parameters"
    )
    id: int | str = Field(..., description="Request ID")


class GetBlockHashRequest(JsonRpcRequest):
    """JSON-RPC request for getblockhash."""

    method: str = Field(default="getblockhash", frozen=True)


class GetBlockRequest(JsonRpcRequest):
    """JSON-RPC request for getblock with txids."""

    method: str = Field(default="getblock", frozen=True)


class GetBlockchainInfoRequest(JsonRpcRequest):
    """JSON-RPC request for getblockchaininfo."""

    method: str = Field(default="getblockchaininfo", frozen=True)
    params: list[Any] = Field(default_factory=list, frozen=True)


class GetBlockCountRequest(JsonRpcRequest):
    """JSON-RPC request for getblockcount."""

    method: str = Field(default="getblockcount", frozen=True)
    params: list[Any] = Field(default_factory=list, frozen=True)


class RpcError(BaseModel):
    """Error object returned by the node."""

    code: int
    message: str


class JsonRpcResponse(BaseModel):
    """JSON-RPC response envelope."""

    result: Any = None
    error: RpcError | None = None
    id: int | str | None = None


class Block(BaseModel):
    """Block as returned by ``getblock <hash> 1``."""

    model_config = ConfigDict(populate_by_name=True)

    hash: str
    height: int
    time: int
    tx: list[str]
    n_tx: int | None = Field(default=None, alias="nTx")
    previous_block_hash: str | None = Field(default=None, alias="previousblockhash")


class BlockchainInfo(BaseModel):
    """Subset of ``getblockchaininfo`` this tool reads."""

    model_config = ConfigDict(populate_by_name=True)

    chain: str
    blocks: int
    headers: int | None = None
    best_block_hash: str | None = Field(default=None, alias="bestblockhash")
    difficulty: float | None = None


__all__ = [
    "Block",
    "BlockchainInfo",
    "GetBlockCountRequest",
    "GetBlockHashRequest",
    "GetBlockRequest",
    "GetBlockchainInfoRequest",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "RpcError",
]
