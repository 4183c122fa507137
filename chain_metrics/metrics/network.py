"""Network identity reported by the node."""

from enum import StrEnum
from typing import Self

from chain_metrics.context import AppContext
from chain_metrics.helpers.errors import UnknownNetworkError
from chain_metrics.helpers.logging import get_logger


logger = get_logger(__name__)


class Network(StrEnum):
    """Chains a Bitcoin Core node can run on, keyed by the node's chain name."""

    MAINNET = "main"
    TESTNET = "test"
    TESTNET4 = "testnet4"
    SIGNET = "signet"
    REGTEST = "regtest"

    @classmethod
    def from_node(cls, chain: str) -> Self:
        """Map a ``getblockchaininfo`` chain name onto a variant.

        Raises:
            UnknownNetworkError: If the name is not one of the known chains
        """
        try:
            return cls(chain)
        except ValueError:
            raise UnknownNetworkError(chain) from None

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Network.MAINNET: "bitcoin",
    Network.TESTNET: "testnet",
    Network.TESTNET4: "testnet4",
    Network.SIGNET: "signet",
    Network.REGTEST: "regtest",
}


def get_chain(ctx: AppContext) -> Network:
    """Get the network the node is running on."""
    info = ctx.client.get_blockchain_info()
    network = Network.from_node(info.chain)
    logger.debug("Node reports chain %s at height %d", network, info.blocks)
    return network


__all__ = ["Network", "get_chain"]
