"""
Handles the 'status' command for displaying check runs.

This command follows our design principles:
- Interactive terminal: table output
- Piped/redirected: JSONL streaming (one record per check run, then a summary)
- --verbose/-v for progress output
- --quiet/-q to suppress data output
- Thin CLI layer that connects services to output
"""

import click

from ..api import GHChecks
from ..render import render_status_table
from ..cli_utils import standard_command, add_common_options, is_interactive
from .auth import device_prompt, browser_enabled


def status_records(identity, ref, summary):
    """Yield one dict per check run, then the summary."""
    for run in summary.runs:
        record = {'type': 'check_run', 'repository': identity.full_name, 'ref': ref.value}
        record.update(run.to_dict())
        yield record

    record = {'type': 'summary', 'repository': identity.full_name, 'ref': ref.value}
    record.update(summary.to_dict())
    yield record


@click.command(name='status')
@add_common_options('owner', 'repo', 'ref', 'cwd')
@click.option('--table/--no-table', default=None, help='Display as formatted table (auto-detected by default)')
@click.option('--urls', is_flag=True, help='Include each check run URL in the table')
@add_common_options('format', 'verbose', 'quiet')
@standard_command(streaming=True)
def status_handler(owner, repo, ref, cwd, table, urls, progress, config, quiet, **kwargs):
    """Show check runs for the current commit.

    \b
    The repository comes from the `origin` remote and the commit from
    HEAD unless --owner/--repo/--ref say otherwise. Public repositories
    work without logging in; private ones start a GitHub login.

    Examples:

    \b
        ghchecks status
        ghchecks status --ref main
        ghchecks status --owner octocat --repo hello-world --ref 7fd1a60
        ghchecks status --no-table | jq .conclusion
    """
    # Auto-detect table mode if not specified
    if table is None:
        table = is_interactive()

    checks = GHChecks(config, on_prompt=device_prompt(progress, browser_enabled(config)))

    progress("Resolving repository and commit...")
    identity, ref_spec = checks.resolve(path=cwd, owner=owner, repo=repo, ref=ref)

    progress(f"Fetching check runs for {identity}@{ref_spec.label}...")
    summary = checks.status_service.fetch_status(identity, ref_spec)

    if table:
        if not quiet:
            render_status_table(summary, identity, ref_spec, show_urls=urls)
        return None

    return status_records(identity, ref_spec, summary)
