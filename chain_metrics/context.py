"""Application context shared by every metric function."""

import threading

from types import TracebackType
from typing import Self

from chain_metrics.helpers.config import RPCSettings
from chain_metrics.helpers.errors import ConfigurationError, NodeConnectionError
from chain_metrics.helpers.logging import get_logger
from chain_metrics.helpers.rpc import NodeClient


logger = get_logger(__name__)


class AppContext:
    """Owns the process-wide node connection.

    Built once at startup and passed to every metric function. The node
    client is created on first access to ``client`` and reused afterwards.
    """

    def __init__(
        self, settings: RPCSettings, client: NodeClient | None = None
    ) -> None:
        """Initialize the context.

        Args:
            settings: RPC endpoint and credentials
            client: Optional prebuilt node client, skips lazy creation
        """
        self.settings = settings
        self._client = client
        self._lock = threading.Lock()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def connected(self) -> bool:
        """Whether the node client has been created."""
        return self._client is not None

    @property
    def client(self) -> NodeClient:
        """The node client, created on first use.

        Raises:
            NodeConnectionError: If the credentials cannot be resolved
        """
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = self._connect()
        return self._client

    def _connect(self) -> NodeClient:
        try:
            auth = self.settings.auth.credentials()
        except ConfigurationError as e:
            msg = f"Cannot connect to node: {e}"
            raise NodeConnectionError(msg) from e

        logger.debug(
            "Connecting to %s using %s credentials",
            self.settings.url,
            self.settings.auth.kind,
        )
        return NodeClient(self.settings.url, auth=auth, timeout=self.settings.timeout)

    def close(self) -> None:
        """Close the node client if one was created."""
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None


__all__ = ["AppContext"]
