"""
Tests for the ghchecks CLI commands using click's CliRunner.
"""

import json
from unittest.mock import Mock, patch

import pytest
from click.testing import CliRunner

from ghchecks.cli import cli
from ghchecks.commands.auth import device_prompt
from ghchecks.domain import Credential, RefSpec, RepositoryIdentity
from ghchecks.exit_codes import (
    AUTH_ERROR,
    NOT_FOUND_ERROR,
    RATE_LIMITED,
    UNRESOLVED_ERROR,
    USAGE_ERROR,
    AuthorizationFailed,
    CommitNotFound,
    RateLimited,
    RepositoryUnresolved,
)
from ghchecks.infra import FileStore
from ghchecks.infra.oauth_client import DeviceCode
from ghchecks.services import aggregate

from tests.helpers import make_page, make_run

IDENTITY = RepositoryIdentity("octocat", "hello-world")
REF = RefSpec("7fd1a60b01f91b314f59955a4e4d4e80d8edf11d", display_name="main")


def json_lines(output):
    return [json.loads(line) for line in output.splitlines() if line.startswith('{')]


@pytest.fixture
def runner(monkeypatch):
    # Progress auto-detects from the CliRunner's non-tty stderr
    monkeypatch.setattr('ghchecks.progress._progress', None)
    return CliRunner()


@pytest.fixture
def summary():
    return aggregate([make_page(
        make_run(1, "build"),
        make_run(2, "lint", conclusion="failure"),
    )])


@pytest.fixture
def checks(summary):
    """Patch the GHChecks facade used by status and open."""
    instance = Mock()
    instance.resolve.return_value = (IDENTITY, REF)
    instance.status_service.fetch_status.return_value = summary
    with patch('ghchecks.commands.status.GHChecks', return_value=instance), \
         patch('ghchecks.commands.open.GHChecks', return_value=instance):
        yield instance


class TestCli:

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ['--help'])
        assert result.exit_code == 0
        for command in ('status', 'open', 'login', 'logout'):
            assert command in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert '0.3.0' in result.output


class TestStatusCommand:

    def test_streams_jsonl_when_piped(self, runner, checks):
        result = runner.invoke(cli, ['status'])

        assert result.exit_code == 0
        records = json_lines(result.output)
        assert [r['type'] for r in records] == ['check_run', 'check_run', 'summary']
        assert records[0]['name'] == 'build'
        assert records[0]['repository'] == 'octocat/hello-world'
        assert records[1]['conclusion'] == 'failure'
        assert records[2]['overall'] == 'some_failed'
        assert records[2]['total'] == 2

    def test_passes_flags_to_resolution(self, runner, checks, tmp_path):
        runner.invoke(cli, ['status', '--owner', 'octocat', '--repo', 'hello-world',
                            '--ref', 'main', '-C', str(tmp_path)])

        checks.resolve.assert_called_once_with(
            path=str(tmp_path), owner='octocat', repo='hello-world', ref='main')
        checks.status_service.fetch_status.assert_called_once_with(IDENTITY, REF)

    def test_table_output(self, runner, checks):
        result = runner.invoke(cli, ['status', '--table'])

        assert result.exit_code == 0
        assert 'Found 2 runs for main in octocat/hello-world' in result.output
        assert 'Some checks failed' in result.output

    def test_json_format(self, runner, checks):
        result = runner.invoke(cli, ['status', '--no-table', '--format', 'json'])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert len(data) == 3

    def test_quiet_suppresses_data(self, runner, checks):
        result = runner.invoke(cli, ['status', '--quiet'])

        assert result.exit_code == 0
        assert result.output.strip() == ''

    def test_unresolved_repository(self, runner, checks):
        checks.resolve.side_effect = RepositoryUnresolved()

        result = runner.invoke(cli, ['status'])

        assert result.exit_code == UNRESOLVED_ERROR
        assert '--owner' in result.output
        errors = json_lines(result.output)
        assert errors[0]['type'] == 'RepositoryUnresolved'
        assert errors[0]['exit_code'] == UNRESOLVED_ERROR

    def test_commit_not_found(self, runner, checks):
        checks.status_service.fetch_status.side_effect = CommitNotFound("main was not found")

        result = runner.invoke(cli, ['status'])

        assert result.exit_code == NOT_FOUND_ERROR
        assert 'main was not found' in result.output

    def test_authorization_failure(self, runner, checks):
        checks.status_service.fetch_status.side_effect = AuthorizationFailed(
            "Authorization was denied", reason="denied")

        result = runner.invoke(cli, ['status'])

        assert result.exit_code == AUTH_ERROR
        assert 'Authorization was denied' in result.output
        assert json_lines(result.output)[0]['reason'] == 'denied'

    def test_rate_limited_reports_retry_after(self, runner, checks):
        checks.status_service.fetch_status.side_effect = RateLimited(
            "GitHub rate limit exceeded; retry in 3600s", retry_after=3600)

        result = runner.invoke(cli, ['status'])

        assert result.exit_code == RATE_LIMITED
        assert json_lines(result.output)[0]['retry_after'] == 3600


class TestOpenCommand:

    def test_open_by_name(self, runner, checks):
        with patch('ghchecks.commands.open.open_url', return_value=True) as open_url:
            result = runner.invoke(cli, ['open', '--name', 'lint'])

        assert result.exit_code == 0
        open_url.assert_called_once_with('https://github.com/octocat/hello-world/runs/2')

    def test_print_url(self, runner, checks):
        with patch('ghchecks.commands.open.open_url') as open_url:
            result = runner.invoke(cli, ['open', '-n', 'build', '--print-url'])

        assert result.exit_code == 0
        assert 'https://github.com/octocat/hello-world/runs/1' in result.output
        open_url.assert_not_called()

    def test_prompts_when_several_runs(self, runner, checks):
        result = runner.invoke(cli, ['open', '--print-url'], input='2\n')

        assert result.exit_code == 0
        assert 'Found 2 runs for main' in result.output
        assert 'https://github.com/octocat/hello-world/runs/2' in result.output

    def test_single_run_needs_no_prompt(self, runner, checks):
        checks.status_service.fetch_status.return_value = aggregate([make_page(make_run(9, "only"))])

        result = runner.invoke(cli, ['open', '--print-url'])

        assert result.exit_code == 0
        assert 'runs/9' in result.output

    def test_unknown_name(self, runner, checks):
        result = runner.invoke(cli, ['open', '--name', 'deploy'])

        assert result.exit_code == USAGE_ERROR
        assert "No check run named 'deploy'" in result.output

    def test_no_runs(self, runner, checks):
        checks.status_service.fetch_status.return_value = aggregate([make_page()])

        result = runner.invoke(cli, ['open'])

        assert result.exit_code == 0
        assert 'No check runs found for main' in result.output

    def test_browser_failure_prints_url(self, runner, checks):
        with patch('ghchecks.commands.open.open_url', return_value=False):
            result = runner.invoke(cli, ['open', '--name', 'build'])

        assert result.exit_code == 0
        assert 'Could not launch a browser' in result.output
        assert 'https://github.com/octocat/hello-world/runs/1' in result.output


class TestAuthCommands:

    def test_login(self, runner):
        store = Mock()
        store.login.return_value = Credential(token="gho_abc")
        with patch('ghchecks.commands.auth.create_credential_store', return_value=store):
            result = runner.invoke(cli, ['login', '--no-browser'])

        assert result.exit_code == 0
        assert 'Successfully logged in!' in result.output
        store.login.assert_called_once()

    def test_login_failure(self, runner):
        store = Mock()
        store.login.side_effect = AuthorizationFailed("The device code expired", reason="expired")
        with patch('ghchecks.commands.auth.create_credential_store', return_value=store):
            result = runner.invoke(cli, ['login'])

        assert result.exit_code == AUTH_ERROR
        assert 'The device code expired' in result.output

    def test_logout(self, runner, tmp_path, monkeypatch):
        path = tmp_path / 'credentials.json'
        FileStore(path).write(Credential(token="gho_abc").to_dict())
        monkeypatch.setenv('GHCHECKS_CREDENTIALS', str(path))

        result = runner.invoke(cli, ['logout'])
        assert result.exit_code == 0
        assert 'Successfully logged out' in result.output
        assert not path.exists()

        result = runner.invoke(cli, ['logout'])
        assert result.exit_code == 0
        assert 'Not logged in' in result.output


class TestDevicePrompt:

    CODES = DeviceCode("dev", "ABCD-1234", "https://github.com/login/device", 900, 5)

    def test_shows_code_and_opens_browser(self):
        progress = Mock()
        with patch('ghchecks.commands.auth.open_url', return_value=True) as open_url:
            device_prompt(progress)(self.CODES)

        progress.prompt.assert_called_once_with(
            "Please enter the code ABCD-1234 at https://github.com/login/device")
        open_url.assert_called_once_with("https://github.com/login/device")
        progress.warning.assert_not_called()

    def test_browser_failure_warns(self):
        progress = Mock()
        with patch('ghchecks.commands.auth.open_url', return_value=False):
            device_prompt(progress)(self.CODES)

        progress.warning.assert_called_once()

    def test_no_browser(self):
        progress = Mock()
        with patch('ghchecks.commands.auth.open_url') as open_url:
            device_prompt(progress, open_browser=False)(self.CODES)

        open_url.assert_not_called()
