"""
Main CLI group for the unsubscribe scanner.
"""

import click
from unsub_scanner import __version__
from unsub_scanner.config import load_config_from_env_file
from .commands.scan import scan, hosts


@click.group()
@click.version_option(version=__version__, prog_name='Unsubscribe Scanner')
def cli():
    """
    Unsubscribe Scanner - collect unsubscribe links from an IMAP mailbox.

    Scans recent mail, keeps the most recent unsubscribe link for each
    sender, and writes them to a text file.
    """
    load_config_from_env_file()


cli.add_command(scan, name='scan')
cli.add_command(hosts, name='hosts')


def main():
    """Console script entry point."""
    cli()


if __name__ == '__main__':
    main()
