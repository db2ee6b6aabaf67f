import click

from nethermind.unbundle.cli.abis import abis_group, identify_command
from nethermind.unbundle.cli.decode import decode_command


@click.group()
def unbundle_cli():
    """Command Line Interface for decoding Account Abstraction transactions"""


# Adding Commands
unbundle_cli.add_command(decode_command, name="decode")
unbundle_cli.add_command(abis_group, name="abis")
unbundle_cli.add_command(identify_command, name="identify")
