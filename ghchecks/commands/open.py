"""
Handles the 'open' command: pick a check run and open it in the browser.
"""

import click

from ..api import GHChecks, open_url
from ..render import render_run_choices
from ..cli_utils import standard_command, add_common_options
from ..exit_codes import CommandError, USAGE_ERROR
from .auth import device_prompt, browser_enabled


def choose_run(summary, run_name=None):
    """
    Pick the check run to open.

    With --name the match is by name; a single run is picked without
    asking; otherwise the user chooses from a numbered list.
    """
    if run_name:
        run = summary.find(run_name)
        if run is None:
            names = ", ".join(r.name for r in summary.runs)
            raise CommandError(f"No check run named {run_name!r}. Available: {names}", USAGE_ERROR)
        return run

    if len(summary.runs) == 1:
        return summary.runs[0]

    render_run_choices(summary.runs)
    index = click.prompt(
        "Select a check run",
        type=click.IntRange(1, len(summary.runs)),
        default=1,
        err=True,
    )
    return summary.runs[index - 1]


@click.command(name='open')
@add_common_options('owner', 'repo', 'ref', 'cwd')
@click.option('-n', '--name', 'run_name', default=None, help='Open the check run with this name')
@click.option('--print-url', is_flag=True, help='Print the URL instead of launching a browser')
@add_common_options('verbose')
@standard_command()
def open_handler(owner, repo, ref, cwd, run_name, print_url, progress, config, **kwargs):
    """Open a check run for the current commit in the browser.

    Examples:

    \b
        ghchecks open
        ghchecks open --name build
        ghchecks open --ref main --print-url
    """
    checks = GHChecks(config, on_prompt=device_prompt(progress, browser_enabled(config)))
    identity, ref_spec = checks.resolve(path=cwd, owner=owner, repo=repo, ref=ref)

    progress(f"Fetching check runs for {identity}@{ref_spec.label}...")
    summary = checks.status_service.fetch_status(identity, ref_spec)

    if not summary.runs:
        click.echo(f"No check runs found for {ref_spec.label} in {identity}", err=True)
        return None

    click.echo(f"Found {len(summary.runs)} runs for {ref_spec.label}", err=True)
    run = choose_run(summary, run_name)

    if not run.url:
        raise CommandError(f"No url found for run `{run.name}`")

    if print_url:
        click.echo(run.url)
    elif not open_url(run.url):
        progress.warning("Could not launch a browser")
        click.echo(run.url)
    return None
