#!/usr/bin/env python3

import click

from ghchecks.commands.status import status_handler
from ghchecks.commands.open import open_handler
from ghchecks.commands.auth import login_handler, logout_handler


@click.group()
@click.version_option(package_name='ghchecks')
def cli():
    """ghchecks - GitHub check runs for the commit you have checked out.

    Finds the repository from the `origin` remote and the commit from
    HEAD, so no pull request number is needed.
    """
    pass


cli.add_command(status_handler)
cli.add_command(open_handler)
cli.add_command(login_handler)
cli.add_command(logout_handler)


def main():
    cli()

if __name__ == "__main__":
    main()
