"""Allow running the CLI with ``python -m chain_metrics``."""

from chain_metrics.cli import cli


if __name__ == "__main__":
    cli()
