"""Tests for the command-line interface."""

import logging
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from chain_metrics import cli
from chain_metrics.context import AppContext
from chain_metrics.helpers.config import CookieAuth, RPCSettings
from chain_metrics.helpers.errors import ConfigurationError, RPCQueryError
from chain_metrics.helpers.logging import loggers
from chain_metrics.helpers.rpc_models import BlockchainInfo


def squash(text: str) -> str:
    """Collapse whitespace so console wrapping does not matter."""
    return " ".join(text.split())


@pytest.fixture
def use_context(
    monkeypatch: pytest.MonkeyPatch, settings: RPCSettings
) -> Callable[[AppContext], None]:
    """Make the CLI run against a given context instead of a real node."""

    def _use_context(ctx: AppContext) -> None:
        monkeypatch.setattr(cli, "load_rpc_settings", lambda env_file=None: settings)
        monkeypatch.setattr(cli, "AppContext", lambda _settings: ctx)

    return _use_context


@pytest.fixture
def restore_log_levels() -> Generator[None]:
    """Put cached logger levels back after a test changes them."""
    previous = {name: cached.level for name, cached in loggers.items()}
    yield
    for name, level in previous.items():
        loggers[name].setLevel(level)
        for handler in loggers[name].handlers:
            handler.setLevel(level)


class TestParser:
    """Tests for argument parsing."""

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that --version prints the version and exits cleanly."""
        with pytest.raises(SystemExit) as exc:
            cli.main(["--version"])

        assert exc.value.code == 0
        assert "0.1.0" in capsys.readouterr().out

    def test_height_is_required(self) -> None:
        """Test that subcommands taking a height fail without one."""
        with pytest.raises(SystemExit) as exc:
            cli.main(["time-to-mine"])

        assert exc.value.code == 2

    @pytest.mark.parametrize("height", ["-5", "abc"])
    def test_invalid_height_is_usage_error(
        self, height: str, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test that bad heights are rejected by the parser."""
        with pytest.raises(SystemExit) as exc:
            cli.main(["number-of-transactions", height])

        assert exc.value.code == 2
        assert "non-negative integer" in capsys.readouterr().err

    def test_no_command(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that running without a subcommand fails with a message."""
        assert cli.main([]) == 1

        err = capsys.readouterr().err
        assert "No command provided" in err
        assert "time-to-mine" in err


class TestCommands:
    """Tests for each subcommand's output."""

    def test_chain(
        self,
        chain_context: Callable[..., AppContext],
        use_context: Callable[[AppContext], None],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test printing the network name."""
        ctx = chain_context({0: 1_231_006_505})
        ctx.client.get_blockchain_info.return_value = BlockchainInfo(
            chain="main", blocks=0
        )
        use_context(ctx)

        assert cli.main(["chain"]) == 0
        assert capsys.readouterr().out.strip() == "bitcoin"

    def test_time_to_mine(
        self,
        chain_context: Callable[..., AppContext],
        use_context: Callable[[AppContext], None],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test printing seconds and minutes for a block."""
        use_context(chain_context({23: 1_231_472_369, 24: 1_231_473_035}))

        assert cli.main(["time-to-mine", "24"]) == 0
        assert capsys.readouterr().out.strip() == "666s, 11min"

    def test_avg_time_to_mine(
        self,
        chain_context: Callable[..., AppContext],
        use_context: Callable[[AppContext], None],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test printing the epoch average."""
        use_context(chain_context({2016: 0, 2020: 2_400}))

        assert cli.main(["avg-time-to-mine", "2020"]) == 0
        assert squash(capsys.readouterr().out) == (
            "Average time to mine in epoch: 600s, 10min"
        )

    def test_number_of_transactions(
        self,
        chain_context: Callable[..., AppContext],
        use_context: Callable[[AppContext], None],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test printing a block's transaction count."""
        use_context(chain_context({300_000: (1_399_703_554, 237)}))

        assert cli.main(["number-of-transactions", "300000"]) == 0
        assert capsys.readouterr().out.strip() == "237 transactions"

    def test_next_block(
        self,
        chain_context: Callable[..., AppContext],
        use_context: Callable[[AppContext], None],
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test printing an overdue estimate with days."""
        use_context(chain_context({2016: 0, 2020: 2_400}))
        monkeypatch.setattr(cli, "guess_time_to_mine_next_block", lambda ctx: -125)

        assert cli.main(["next-block"]) == 0
        out = capsys.readouterr().out.splitlines()
        assert out[0].strip() == "Next block will be mined in:"
        assert out[1].strip() == "-125s, -2min, 0days"


class TestErrors:
    """Tests for error reporting."""

    def test_genesis_time_to_mine(
        self,
        chain_context: Callable[..., AppContext],
        use_context: Callable[[AppContext], None],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test that a domain error is one line on stderr and exit code 1."""
        use_context(chain_context({0: 1_231_006_505}))

        assert cli.main(["time-to-mine", "0"]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert squash(captured.err) == (
            "Error: Block 0 is the genesis block and has no predecessor"
        )

    def test_epoch_boundary(
        self,
        chain_context: Callable[..., AppContext],
        use_context: Callable[[AppContext], None],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test that an epoch boundary is reported, not a traceback."""
        use_context(chain_context({4032: 1_000}))

        assert cli.main(["avg-time-to-mine", "4032"]) == 1
        assert "first block of its difficulty epoch" in squash(
            capsys.readouterr().err
        )

    def test_query_error(
        self,
        chain_context: Callable[..., AppContext],
        use_context: Callable[[AppContext], None],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test that node errors are printed with their message."""
        use_context(chain_context({0: 1_231_006_505}))

        assert cli.main(["number-of-transactions", "999999999"]) == 1
        err = squash(capsys.readouterr().err)
        assert err.startswith("Error: getblockhash failed")
        assert "Block height out of range" in err

    def test_configuration_error(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test that missing configuration exits non-zero."""

        def fail(env_file: str | None = None) -> RPCSettings:
            msg = "BITCOIN_RPC_URL environment variable is not set"
            raise ConfigurationError(msg)

        monkeypatch.setattr(cli, "load_rpc_settings", fail)

        assert cli.main(["chain"]) == 1
        assert "BITCOIN_RPC_URL" in capsys.readouterr().err

    def test_unexpected_errors_propagate(
        self,
        chain_context: Callable[..., AppContext],
        use_context: Callable[[AppContext], None],
    ) -> None:
        """Test that only domain errors are turned into exit codes."""
        ctx = chain_context({0: 1_231_006_505})
        ctx.client.get_blockchain_info.side_effect = RuntimeError("boom")
        use_context(ctx)

        with pytest.raises(RuntimeError, match="boom"):
            cli.main(["chain"])

    def test_client_closed_after_error(
        self,
        chain_context: Callable[..., AppContext],
        use_context: Callable[[AppContext], None],
    ) -> None:
        """Test that the connection is closed even when a command fails."""
        ctx = chain_context({0: 1_231_006_505})
        client = ctx.client
        client.get_blockchain_info.side_effect = RPCQueryError(
            "getblockchaininfo", "Loading block index...", -28
        )
        use_context(ctx)

        assert cli.main(["chain"]) == 1
        client.close.assert_called_once_with()

    def test_binary_cookie_file(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test that an undecodable cookie file is one error line."""
        cookie = tmp_path / ".cookie"
        cookie.write_bytes(b"\xff\xfe:\x80\x81")
        settings = RPCSettings(
            url="http://127.0.0.1:8332", auth=CookieAuth(cookie_file=cookie)
        )
        monkeypatch.setattr(cli, "load_rpc_settings", lambda env_file=None: settings)

        assert cli.main(["chain"]) == 1
        err = squash(capsys.readouterr().err)
        assert err.startswith("Error: Cannot connect to node")
        assert "not valid UTF-8" in err

    def test_non_finite_timeout(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test that a NaN timeout is reported as a configuration error."""
        monkeypatch.setenv("BITCOIN_RPC_URL", "http://127.0.0.1:8332")
        monkeypatch.setenv("BITCOIN_RPC_USER", "bitcoin")
        monkeypatch.setenv("BITCOIN_RPC_PASSWORD", "password")
        monkeypatch.setenv("BITCOIN_RPC_TIMEOUT", "nan")
        monkeypatch.delenv("COOKIE_FILE", raising=False)

        assert cli.main(["chain"]) == 1
        assert "BITCOIN_RPC_TIMEOUT" in capsys.readouterr().err


@pytest.mark.usefixtures("restore_log_levels")
class TestLogLevel:
    """Tests for how the CLI picks the log level."""

    def test_unknown_environment_level_is_ignored(
        self,
        chain_context: Callable[..., AppContext],
        use_context: Callable[[AppContext], None],
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test that a bad LOG_LEVEL falls back to WARNING."""
        monkeypatch.setenv("LOG_LEVEL", "verbose")
        ctx = chain_context({0: 1_231_006_505})
        ctx.client.get_blockchain_info.return_value = BlockchainInfo(
            chain="regtest", blocks=0
        )
        use_context(ctx)

        assert cli.main(["chain"]) == 0
        assert capsys.readouterr().out.strip() == "regtest"
        assert cli.logger.level == logging.WARNING

    def test_verbose_sets_debug(
        self,
        chain_context: Callable[..., AppContext],
        use_context: Callable[[AppContext], None],
    ) -> None:
        """Test that --verbose wins over the environment."""
        ctx = chain_context({0: 1_231_006_505})
        ctx.client.get_blockchain_info.return_value = BlockchainInfo(
            chain="main", blocks=0
        )
        use_context(ctx)

        assert cli.main(["--verbose", "chain"]) == 0
        assert cli.logger.level == logging.DEBUG

    def test_level_from_env_file(
        self,
        chain_context: Callable[..., AppContext],
        settings: RPCSettings,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test that LOG_LEVEL loaded with --env-file takes effect."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        ctx = chain_context({0: 1_231_006_505})
        ctx.client.get_blockchain_info.return_value = BlockchainInfo(
            chain="main", blocks=0
        )

        def load_env_file(env_file: str | None = None) -> RPCSettings:
            assert env_file == "regtest.env"
            monkeypatch.setenv("LOG_LEVEL", "info")
            return settings

        monkeypatch.setattr(cli, "load_rpc_settings", load_env_file)
        monkeypatch.setattr(cli, "AppContext", lambda _settings: ctx)

        assert cli.main(["--env-file", "regtest.env", "chain"]) == 0
        assert cli.logger.level == logging.INFO
