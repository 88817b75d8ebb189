"""
Handles the 'login' and 'logout' commands.

login runs the GitHub device authorization flow and stores the token;
logout forgets it.
"""

import click

from ..api import create_credential_store, open_url
from ..cli_utils import standard_command, add_common_options


def device_prompt(progress, open_browser: bool = True):
    """
    Build the callback that tells the user how to authorize.

    Args:
        progress: Progress reporter for stderr output
        open_browser: Try to open the verification URL
    """
    def prompt(codes):
        progress.prompt(
            f"Please enter the code {codes.user_code} at {codes.verification_uri}"
        )
        if open_browser and not open_url(codes.verification_uri):
            progress.warning("Could not open a browser; visit the URL above manually")
        progress("Waiting for authorization...")
    return prompt


def browser_enabled(config, no_browser: bool = False) -> bool:
    return not no_browser and bool(config.get('auth', {}).get('open_browser', True))


@click.command(name='login')
@click.option('--no-browser', is_flag=True, help='Do not open the verification page automatically')
@add_common_options('verbose')
@standard_command()
def login_handler(no_browser, progress, config, **kwargs):
    """Log in to GitHub so private repositories can be queried.

    \b
    Starts the OAuth device flow: enter the displayed code on the
    GitHub page and the token is saved for later commands.

    Examples:

    \b
        ghchecks login
        ghchecks login --no-browser
    """
    store = create_credential_store(
        config, on_prompt=device_prompt(progress, browser_enabled(config, no_browser))
    )
    store.login()
    click.echo("Successfully logged in!", err=True)


@click.command(name='logout')
@add_common_options('verbose')
@standard_command()
def logout_handler(progress, config, **kwargs):
    """Forget the stored GitHub token."""
    store = create_credential_store(config)
    if store.logout():
        click.echo("Successfully logged out", err=True)
    else:
        click.echo("Not logged in", err=True)
