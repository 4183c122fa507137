"""Exception types raised while querying the node and deriving metrics."""


class ChainMetricsError(Exception):
    """Base class for every error the CLI reports to the user."""


class ConfigurationError(ChainMetricsError, ValueError):
    """Raised when the RPC endpoint or credentials are missing or invalid."""


class NodeConnectionError(ChainMetricsError):
    """Raised when the node cannot be reached or rejects our credentials."""


class RPCQueryError(ChainMetricsError):
    """Raised when a single RPC call fails.

    Attributes:
        method: RPC method that failed
        code: Error code reported by the node (or HTTP status), if any
        message: Human-readable error message
    """

    def __init__(self, method: str, message: str, code: int | None = None) -> None:
        self.method = method
        self.code = code
        self.message = message
        detail = f"{method} failed: {message}"
        if code is not None:
            detail = f"{detail} (code {code})"
        super().__init__(detail)


class InvalidHeightError(ChainMetricsError, ValueError):
    """Raised for a block height that can never be valid."""

    def __init__(self, block_height: int, reason: str | None = None) -> None:
        self.block_height = block_height
        msg = reason or f"Invalid block height: {block_height}"
        super().__init__(msg)


class GenesisBlockError(InvalidHeightError):
    """Raised when a predecessor of the genesis block is requested."""

    def __init__(self, block_height: int = 0) -> None:
        super().__init__(
            block_height,
            f"Block {block_height} is the genesis block and has no predecessor",
        )


class EpochBoundaryError(ChainMetricsError, ArithmeticError):
    """Raised when averaging over an epoch that has no elapsed blocks yet."""

    def __init__(self, block_height: int) -> None:
        self.block_height = block_height
        msg = (
            f"Block {block_height} is the first block of its difficulty epoch, "
            "no average available"
        )
        super().__init__(msg)


class TransactionCountOverflowError(ChainMetricsError, OverflowError):
    """Raised when a block reports more transactions than fit the result width."""

    def __init__(self, block_height: int, count: int, limit: int) -> None:
        self.block_height = block_height
        self.count = count
        self.limit = limit
        msg = (
            f"Block {block_height} reports {count} transactions, "
            f"more than the supported maximum of {limit}"
        )
        super().__init__(msg)


class UnknownNetworkError(ChainMetricsError, ValueError):
    """Raised when the node reports a chain name we do not recognise."""

    def __init__(self, chain: str) -> None:
        self.chain = chain
        super().__init__(f"Unknown network reported by node: {chain!r}")


__all__ = [
    "ChainMetricsError",
    "ConfigurationError",
    "EpochBoundaryError",
    "GenesisBlockError",
    "InvalidHeightError",
    "NodeConnectionError",
    "RPCQueryError",
    "TransactionCountOverflowError",
    "UnknownNetworkError",
]
