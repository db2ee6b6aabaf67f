import logging
import sys

import click

from nethermind.unbundle.cli.utils import artifacts_dir_option, group_options

# isort: skip_file
# pylint: disable=import-outside-toplevel

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("cli")

DEFAULT_REQUIRED_FUNCTIONS = ("setPrice", "mintFor", "setTokenURI", "deploy", "execute")


@click.group("abis", short_help="Inspect the ABIs used for decoding")
def abis_group():
    """Inspect & verify the function tables built from contract artifacts"""


@abis_group.command("list")
@group_options(artifacts_dir_option)
@click.option("--full-signatures", is_flag=True, default=False)
@click.option("--fallback", is_flag=True, default=False, help="List the built-in fallback ABIs only")
def list_abis(artifacts_dir: str | None, full_signatures: bool, fallback: bool):
    """Lists the ABIs merged into the decoder, and the functions each ABI decodes"""
    from nethermind.unbundle.cli.utils import cli_logger_config
    from nethermind.unbundle.decoding import get_registry

    console = cli_logger_config(root_logger)
    registry = get_registry(artifacts_dir)

    if fallback:
        table, title = registry.fallback_table(), "Fallback ABIs"
    else:
        table, title = registry.merged_table(), "Merged ABIs"

    console.print(f"Artifacts dir: {registry.artifacts_dir}", markup=False, highlight=False)
    console.print(table.decoder_table(full_signatures=full_signatures, title=title))
    console.print(f"{len(table)} functions")


@abis_group.command("verify")
@group_options(artifacts_dir_option)
@click.option("--min-functions", type=int, default=100, show_default=True)
@click.option(
    "--require",
    "required_names",
    multiple=True,
    help="Function name that must be present.  Can be input multiple times.  "
    f"Default: {', '.join(DEFAULT_REQUIRED_FUNCTIONS)}",
)
def verify_abis(artifacts_dir: str | None, min_functions: int, required_names: tuple[str, ...]):
    """Verifies that the merged ABI loaded the expected contract functions"""
    from nethermind.unbundle.cli.utils import cli_logger_config
    from nethermind.unbundle.decoding import get_registry, verify_registry

    console = cli_logger_config(root_logger)
    table = get_registry(artifacts_dir).merged_table()

    problems = verify_registry(table, min_functions, list(required_names or DEFAULT_REQUIRED_FUNCTIONS))
    if problems:
        for problem in problems:
            console.print(f"[red]{problem}")
        sys.exit(1)

    console.print(f"[green]ABI verification passed.  Merged ABI has {len(table)} functions")


@click.command("identify")
@click.argument("init_code")
@group_options(artifacts_dir_option)
def identify_command(init_code: str, artifacts_dir: str | None):
    """Identifies the contract deployed by a piece of init code"""
    from eth_utils import decode_hex

    from nethermind.unbundle.cli.utils import cli_logger_config
    from nethermind.unbundle.decoding import ContractIdentifier, get_signature_store

    cli_logger_config(root_logger)

    try:
        code = decode_hex(init_code)
    except ValueError:
        raise click.BadParameter("Init code must be a hex string", param_hint="INIT_CODE")

    contract_kind = ContractIdentifier(get_signature_store(artifacts_dir)).identify(code)
    click.echo(contract_kind or "unidentified")
