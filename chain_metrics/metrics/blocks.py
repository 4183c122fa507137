"""Block timing and transaction metrics derived from node queries.

All durations are signed ``int`` seconds. Block timestamps come from miners
and are not monotonic, so negative intervals are passed through unchanged.
"""

from datetime import UTC, datetime

from chain_metrics.context import AppContext
from chain_metrics.helpers.constants import (
    DIFFICULTY_EPOCH_LENGTH,
    GENESIS_HEIGHT,
    MAX_TRANSACTION_COUNT,
)
from chain_metrics.helpers.durations import truncate_div
from chain_metrics.helpers.errors import (
    EpochBoundaryError,
    GenesisBlockError,
    InvalidHeightError,
    TransactionCountOverflowError,
)
from chain_metrics.helpers.logging import get_logger
from chain_metrics.helpers.rpc_models import Block


logger = get_logger(__name__)


def _check_height(block_height: int) -> None:
    if block_height < GENESIS_HEIGHT:
        raise InvalidHeightError(block_height)


def epoch_start_height(block_height: int) -> int:
    """Height of the first block in the difficulty epoch containing a block.

    Example:
        >>> epoch_start_height(300_000)
        298368
    """
    _check_height(block_height)
    return block_height - block_height % DIFFICULTY_EPOCH_LENGTH


def get_block_by_height(ctx: AppContext, block_height: int) -> Block:
    """Fetch a block by height.

    Takes two round-trips: height to hash, then hash to block.

    Args:
        ctx: Application context
        block_height: Block height

    Returns:
        The block on the node's active chain

    Raises:
        InvalidHeightError: If the height is negative
        RPCQueryError: If the node has no block at that height
    """
    _check_height(block_height)
    block_hash = ctx.client.get_block_hash(block_height)
    return ctx.client.get_block(block_hash)


def get_block_time(ctx: AppContext, block_height: int) -> int:
    """Header timestamp of a block, in seconds since the epoch."""
    return get_block_by_height(ctx, block_height).time


def avg_time_to_mine(ctx: AppContext, block_height: int) -> int:
    """Average seconds per block since the start of the block's difficulty epoch.

    Args:
        ctx: Application context
        block_height: Block height

    Returns:
        Average seconds per block, truncated toward zero

    Raises:
        EpochBoundaryError: If the block is the first of its epoch
    """
    _check_height(block_height)
    blocks_in_epoch = block_height % DIFFICULTY_EPOCH_LENGTH
    if blocks_in_epoch == 0:
        raise EpochBoundaryError(block_height)

    first_block_in_epoch = epoch_start_height(block_height)
    total_diff = get_block_time(ctx, block_height) - get_block_time(
        ctx, first_block_in_epoch
    )
    avg_diff = truncate_div(total_diff, blocks_in_epoch)

    logger.debug(
        "Blocks %d..%d took %ds, %ds per block",
        first_block_in_epoch,
        block_height,
        total_diff,
        avg_diff,
    )
    return avg_diff


def time_to_mine(ctx: AppContext, block_height: int) -> int:
    """Seconds between a block's timestamp and its predecessor's.

    Raises:
        GenesisBlockError: If the block is the genesis block
    """
    _check_height(block_height)
    if block_height == GENESIS_HEIGHT:
        raise GenesisBlockError(block_height)
    return get_block_time(ctx, block_height) - get_block_time(ctx, block_height - 1)


def guess_time_to_mine_next_block(
    ctx: AppContext, now: datetime | None = None
) -> int:
    """Estimate seconds until the next block using the tip's epoch average.

    A negative result means the average block time has already elapsed since
    the tip was mined.

    Args:
        ctx: Application context
        now: Current time, defaults to the system clock

    Returns:
        Estimated seconds remaining, possibly negative

    Raises:
        EpochBoundaryError: If the tip is the first block of its epoch
    """
    tip = ctx.client.get_block_count()
    avg_time = avg_time_to_mine(ctx, tip)

    now_ts = int((now or datetime.now(UTC)).timestamp())
    elapsed = now_ts - get_block_time(ctx, tip)

    logger.debug("Tip %d mined %ds ago, average is %ds", tip, elapsed, avg_time)
    return avg_time - elapsed


def number_of_transactions(ctx: AppContext, block_height: int) -> int:
    """Number of transactions in a block, coinbase included.

    Raises:
        TransactionCountOverflowError: If the count exceeds 2**32 - 1
    """
    block = get_block_by_height(ctx, block_height)
    count = len(block.tx)
    if count > MAX_TRANSACTION_COUNT:
        raise TransactionCountOverflowError(block_height, count, MAX_TRANSACTION_COUNT)
    return count


__all__ = [
    "avg_time_to_mine",
    "epoch_start_height",
    "get_block_by_height",
    "get_block_time",
    "guess_time_to_mine_next_block",
    "number_of_transactions",
    "time_to_mine",
]
