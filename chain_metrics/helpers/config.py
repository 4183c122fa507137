"""Configuration management and environment variable utilities."""

import math
import os
from pathlib import Path

from typing import Annotated, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr

from chain_metrics.helpers.constants import (
    COOKIE_FILE_ENV,
    DEFAULT_TIMEOUT,
    RPC_PASSWORD_ENV,
    RPC_TIMEOUT_ENV,
    RPC_URL_ENV,
    RPC_USER_ENV,
)
from chain_metrics.helpers.errors import ConfigurationError
from chain_metrics.helpers.parsers import parse_cookie


# Load environment variables from .env file
load_dotenv()


def get_required_env(key: str) -> str:
    """Get a required environment variable.

    Args:
        key: Environment variable name

    Returns:
        Environment variable value

    Raises:
        ConfigurationError: If the environment variable is not set

    Example:
        ```python
        from chain_metrics.helpers.config import get_required_env

        rpc_url = get_required_env("BITCOIN_RPC_URL")
        ```
    """
    value = os.getenv(key)
    if not value:
        msg = f"{key} environment variable is not set"
        raise ConfigurationError(msg)
    return value


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default
    """
    return os.getenv(key, default)


class CookieAuth(BaseModel):
    """Authenticate with the cookie file the node writes on startup."""

    kind: Literal["cookie"] = "cookie"
    cookie_file: Path

    def credentials(self) -> tuple[str, str]:
        """Read the cookie file and return its user/password pair.

        Raises:
            ConfigurationError: If the file cannot be read or is malformed
        """
        try:
            contents = self.cookie_file.read_text(encoding="utf-8")
        except OSError as e:
            msg = f"Cannot read cookie file {self.cookie_file}: {e.strerror or e}"
            raise ConfigurationError(msg) from e
        except UnicodeDecodeError:
            msg = f"Cookie file {self.cookie_file} is not valid UTF-8"
            raise ConfigurationError(msg) from None
        return parse_cookie(contents)


class UserPassAuth(BaseModel):
    """Authenticate with an rpcuser/rpcpassword pair."""

    kind: Literal["userpass"] = "userpass"
    user: str
    password: SecretStr

    def credentials(self) -> tuple[str, str]:
        """Return the configured user/password pair."""
        return self.user, self.password.get_secret_value()


RPCAuth = Annotated[CookieAuth | UserPassAuth, Field(discriminator="kind")]


class RPCSettings(BaseModel):
    """Everything needed to open a connection to the node."""

    url: str
    auth: RPCAuth
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, allow_inf_nan=False)


def get_rpc_auth() -> CookieAuth | UserPassAuth:
    """Pick the credential source from the environment.

    COOKIE_FILE wins when set; otherwise both BITCOIN_RPC_USER and
    BITCOIN_RPC_PASSWORD are required.

    Raises:
        ConfigurationError: If neither credential source is configured
    """
    cookie_file = os.getenv(COOKIE_FILE_ENV)
    if cookie_file:
        return CookieAuth(cookie_file=Path(cookie_file).expanduser())

    user = os.getenv(RPC_USER_ENV)
    password = os.getenv(RPC_PASSWORD_ENV)
    if user and password:
        return UserPassAuth(user=user, password=SecretStr(password))

    msg = (
        f"No RPC credentials configured, set {COOKIE_FILE_ENV} or both "
        f"{RPC_USER_ENV} and {RPC_PASSWORD_ENV}"
    )
    raise ConfigurationError(msg)


def load_rpc_settings(env_file: str | Path | None = None) -> RPCSettings:
    """Build RPC settings from the process environment.

    Args:
        env_file: Optional extra .env file loaded before reading variables.
            Values already present in the environment are not overridden.

    Returns:
        Validated RPC settings

    Raises:
        ConfigurationError: If the URL, credentials or timeout are invalid

    Example:
        ```python
        from chain_metrics.helpers.config import load_rpc_settings

        settings = load_rpc_settings()
        print(settings.url)
        ```
    """
    if env_file is not None:
        if not Path(env_file).is_file():
            msg = f"Env file not found: {env_file}"
            raise ConfigurationError(msg)
        load_dotenv(env_file)

    url = get_required_env(RPC_URL_ENV)
    auth = get_rpc_auth()

    raw_timeout = get_optional_env(RPC_TIMEOUT_ENV)
    try:
        timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
    except ValueError:
        msg = f"{RPC_TIMEOUT_ENV} must be a number, got {raw_timeout!r}"
        raise ConfigurationError(msg) from None
    if not math.isfinite(timeout) or timeout <= 0:
        msg = (
            f"{RPC_TIMEOUT_ENV} must be a positive finite number, "
            f"got {raw_timeout!r}"
        )
        raise ConfigurationError(msg)

    return RPCSettings(url=url, auth=auth, timeout=timeout)


__all__ = [
    "CookieAuth",
    "RPCAuth",
    "RPCSettings",
    "UserPassAuth",
    "get_optional_env",
    "get_required_env",
    "get_rpc_auth",
    "load_rpc_settings",
]
