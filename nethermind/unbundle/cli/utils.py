import logging
import os
from logging import Logger

import click
from rich.console import Console
from rich.logging import RichHandler

from nethermind.unbundle.decoding.artifacts import ARTIFACTS_DIR_ENV
from nethermind.unbundle.types.networks import SupportedChain, default_rpc

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("cli")


def cli_logger_config(instrument_logger: Logger, level: int = logging.WARNING) -> Console:
    rich_console = Console()
    instrument_logger.handlers.clear()

    instrument_logger.addHandler(RichHandler(show_path=False, console=rich_console))
    instrument_logger.setLevel(level)
    return rich_console


def group_options(*options):
    """Decorator to group multiple click options together"""

    def wrapper(function):
        for option in reversed(options):
            function = option(function)
        return function

    return wrapper


def resolve_json_rpc(json_rpc: str | None, chain_id: int) -> str:
    """
    Returns the RPC url to use for a chain.  An explicit url (or the JSON_RPC environment variable) wins, then
    BASE_RPC_URL for Base mainnet, then the chain's default RPC.
    """
    if json_rpc:
        return json_rpc
    if chain_id == SupportedChain.base.value and os.environ.get("BASE_RPC_URL"):
        return os.environ["BASE_RPC_URL"]
    return default_rpc(chain_id)


# -------------------------------------------------------
#    CLI Secrets, Connections, and Configurations
# -------------------------------------------------------
json_rpc_option = click.option(
    "--json-rpc",
    "-rpc",
    "json_rpc",
    default=lambda: os.environ.get("JSON_RPC"),
    help="RPC url to fetch transactions from.  If not provided, will use the JSON_RPC environment variable, then "
    "BASE_RPC_URL for Base, then a public RPC for the chain",
)
artifacts_dir_option = click.option(
    "--artifacts-dir",
    "artifacts_dir",
    type=click.Path(file_okay=False),
    default=lambda: os.environ.get(ARTIFACTS_DIR_ENV),
    help=f"Directory of compiled contract artifacts used as ABI sources.  If not provided, will use the "
    f"{ARTIFACTS_DIR_ENV} environment variable, then ./artifacts",
)
chain_option = click.option(
    "--chain",
    "-c",
    "chain",
    default="8453",
    show_default=True,
    help="Chain ID (hex or decimal, e.g. 0x2105 or 8453)",
)
verbose_option = click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Show full decode output",
)
