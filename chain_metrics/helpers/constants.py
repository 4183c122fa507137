"""Common configuration constants used across the application."""

# Chain Constants
DIFFICULTY_EPOCH_LENGTH = 2016
"""Number of consecutive blocks sharing one difficulty target"""

GENESIS_HEIGHT = 0
"""Height of the first block in the chain"""

MAX_TRANSACTION_COUNT = 2**32 - 1
"""Largest transaction count reported for a block (32-bit unsigned)"""

# HTTP and Network Constants
DEFAULT_TIMEOUT = 30.0
"""Default RPC request timeout in seconds"""

JSONRPC_VERSION = "1.0"
"""JSON-RPC envelope version understood by every Bitcoin Core release"""

GET_BLOCK_VERBOSITY = 1
"""getblock verbosity returning a JSON object with txids"""

# Environment Variables
RPC_URL_ENV = "BITCOIN_RPC_URL"
RPC_USER_ENV = "BITCOIN_RPC_USER"
RPC_PASSWORD_ENV = "BITCOIN_RPC_PASSWORD"  # noqa: S105
RPC_TIMEOUT_ENV = "BITCOIN_RPC_TIMEOUT"
COOKIE_FILE_ENV = "COOKIE_FILE"
LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_LOG_LEVEL = "WARNING"
"""Log level used when neither an argument nor LOG_LEVEL is given"""

# Time Constants
SECONDS_PER_MINUTE = 60
SECONDS_PER_DAY = 86_400


__all__ = [
    "COOKIE_FILE_ENV",
    "DEFAULT_LOG_LEVEL",
    "DEFAULT_TIMEOUT",
    "DIFFICULTY_EPOCH_LENGTH",
    "GENESIS_HEIGHT",
    "GET_BLOCK_VERBOSITY",
    "JSONRPC_VERSION",
    "LOG_LEVEL_ENV",
    "MAX_TRANSACTION_COUNT",
    "RPC_PASSWORD_ENV",
    "RPC_TIMEOUT_ENV",
    "RPC_URL_ENV",
    "RPC_USER_ENV",
    "SECONDS_PER_DAY",
    "SECONDS_PER_MINUTE",
]
