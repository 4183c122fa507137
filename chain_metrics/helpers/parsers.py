"""Parsing utilities for node credentials and user input."""

from chain_metrics.helpers.errors import ConfigurationError, InvalidHeightError


def parse_cookie(contents: str) -> tuple[str, str]:
    """Split the contents of a node cookie file into a user/password pair.

    Args:
        contents: Raw cookie file contents in "user:password" form

    Returns:
        tuple[str, str]: The user and password

    Raises:
        ConfigurationError: If the contents have no ":" separator

    Example:
        >>> parse_cookie("__cookie__:abc123\\n")
        ('__cookie__', 'abc123')
    """
    user, sep, password = contents.strip().partition(":")
    if not sep or not user:
        msg = "Cookie file is malformed, expected 'user:password'"
        raise ConfigurationError(msg)
    return user, password


def parse_block_height(value: str | int) -> int:
    """Parse a block height, rejecting anything below the genesis block.

    Args:
        value: Height as given on the command line or in code

    Returns:
        int: The block height

    Raises:
        InvalidHeightError: If the value is not a non-negative integer

    Example:
        >>> parse_block_height("300000")
        300000
    """
    try:
        height = int(value)
    except (TypeError, ValueError):
        msg = f"Block height must be a non-negative integer, got {value!r}"
        raise InvalidHeightError(-1, msg) from None

    if height < 0:
        msg = f"Block height must be a non-negative integer, got {height}"
        raise InvalidHeightError(height, msg)
    return height


__all__ = ["parse_block_height", "parse_cookie"]
