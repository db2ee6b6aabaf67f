import logging
import sys

import click

from nethermind.unbundle.cli.utils import (
    artifacts_dir_option,
    chain_option,
    group_options,
    json_rpc_option,
    verbose_option,
)

# isort: skip_file
# pylint: disable=too-many-arguments,import-outside-toplevel

root_logger = logging.getLogger("nethermind")
logger = root_logger.getChild("unbundle").getChild("cli")


@click.command("decode")
@click.argument("tx_hash")
@group_options(chain_option, verbose_option, json_rpc_option, artifacts_dir_option)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the decode result as JSON")
def decode_command(tx_hash: str, chain: str, verbose: bool, json_rpc: str | None, artifacts_dir: str | None, as_json):
    """Decode a transaction, unwrapping bundled user operations and smart account calls"""
    from rich.table import Table
    from rich.panel import Panel

    from nethermind.unbundle.analyzer import decode_transaction
    from nethermind.unbundle.cli.utils import cli_logger_config, resolve_json_rpc
    from nethermind.unbundle.types.networks import chain_name, parse_chain_id
    from nethermind.unbundle.types.utils import dataclass_to_json

    console = cli_logger_config(root_logger, logging.DEBUG if verbose and not as_json else logging.WARNING)

    try:
        chain_id = parse_chain_id(chain)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--chain")

    rpc_url = resolve_json_rpc(json_rpc, chain_id)
    logger.debug(f"Decoding {tx_hash} on {chain_name(chain_id)} using {rpc_url}")

    result = decode_transaction(tx_hash, rpc_url, verbose=verbose, artifacts_dir=artifacts_dir)

    if as_json:
        click.echo(dataclass_to_json(result))
        if not result.success:
            sys.exit(1)
        return

    if not result.success:
        console.print(f"[red]Error:[/red] {result.error}")
        if verbose and result.verbose_output:
            console.print(result.verbose_output, markup=False, highlight=False)
        sys.exit(1)

    if verbose and result.verbose_output:
        console.print(result.verbose_output, markup=False, highlight=False)

    if result.calls:
        call_table = Table(title="[bold magenta]Calls", show_lines=True)
        call_table.add_column("Function", style="bold")
        call_table.add_column("Target")
        call_table.add_column("Args")
        for call in result.calls:
            call_table.add_row(call.function, call.target, "\n".join(f"{k}={v}" for k, v in call.args.items()))
        console.print(call_table)

    if result.summary:
        console.print(
            Panel(
                f"[cyan]Amount:[/cyan] {result.summary.amount}\n"
                f"[cyan]From:[/cyan] {result.summary.from_address}\n"
                f"[cyan]Beneficiary:[/cyan] {result.summary.beneficiary}",
                title="[bold]Summary",
                width=80,
            )
        )
