"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from unittest.mock import MagicMock

import pytest
from pydantic import SecretStr

from chain_metrics.context import AppContext
from chain_metrics.helpers.config import RPCSettings, UserPassAuth
from chain_metrics.helpers.errors import RPCQueryError
from chain_metrics.helpers.rpc import NodeClient
from chain_metrics.helpers.rpc_models import Block


RPC_URL = "http://127.0.0.1:8332"


# Apply timeout to integration tests, a live node can be slow to answer
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Add timeout marker to integration tests."""
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(pytest.mark.timeout(120))


@pytest.fixture
def rpc_url() -> str:
    """Node URL used by unit tests."""
    return RPC_URL


@pytest.fixture
def settings() -> RPCSettings:
    """RPC settings with user/password credentials."""
    return RPCSettings(
        url=RPC_URL,
        auth=UserPassAuth(user="bitcoin", password=SecretStr("password")),
    )


@pytest.fixture
def make_block() -> Callable[..., Block]:
    """Factory for blocks with a given height, timestamp and transaction count."""

    def _make_block(height: int, time: int, tx_count: int = 1) -> Block:
        return Block(
            hash=f"{height:064x}",
            height=height,
            time=time,
            tx=[f"{height:032x}{i:032x}" for i in range(tx_count)],
            nTx=tx_count,
        )

    return _make_block


@pytest.fixture
def chain_context(
    settings: RPCSettings, make_block: Callable[..., Block]
) -> Callable[..., AppContext]:
    """Factory for an AppContext backed by an in-memory chain.

    Takes a mapping of height to timestamp, or to a (timestamp, tx_count)
    tuple, and an optional tip height (defaults to the highest height).
    Heights missing from the mapping fail like a real node does.
    """

    def _chain_context(
        timestamps: dict[int, int | tuple[int, int]], tip: int | None = None
    ) -> AppContext:
        blocks: dict[int, Block] = {}
        for height, value in timestamps.items():
            time, tx_count = value if isinstance(value, tuple) else (value, 1)
            blocks[height] = make_block(height, time, tx_count)
        by_hash = {block.hash: block for block in blocks.values()}

        def get_block_hash(block_height: int) -> str:
            if block_height not in blocks:
                raise RPCQueryError("getblockhash", "Block height out of range", -8)
            return blocks[block_height].hash

        def get_block(block_hash: str) -> Block:
            if block_hash not in by_hash:
                raise RPCQueryError("getblock", "Block not found", -5)
            return by_hash[block_hash]

        client = MagicMock(spec=NodeClient)
        client.get_block_hash.side_effect = get_block_hash
        client.get_block.side_effect = get_block
        client.get_block_count.return_value = (
            tip if tip is not None else max(blocks, default=0)
        )
        return AppContext(settings, client=client)

    return _chain_context
