"""
Tests for domain objects: RepositoryIdentity, RefSpec, CheckRun and
Credential.
"""

from datetime import datetime, timedelta, timezone

import pytest

from ghchecks.domain import (
    CheckConclusion,
    CheckRun,
    CheckStatus,
    Credential,
    RefKind,
    RefSpec,
    RepositoryIdentity,
    StatusSummary,
    OverallStatus,
)

from tests.helpers import make_run, run_data


class TestRepositoryIdentity:

    def test_full_name_and_url(self):
        identity = RepositoryIdentity("octocat", "hello-world")
        assert identity.full_name == "octocat/hello-world"
        assert str(identity) == "octocat/hello-world"
        assert identity.html_url == "https://github.com/octocat/hello-world"
        assert identity.to_dict() == {"owner": "octocat", "name": "hello-world"}

    @pytest.mark.parametrize("owner,name", [
        ("", "hello-world"),
        ("octocat", ""),
        ("octo/cat", "hello-world"),
        ("octocat", "."),
    ])
    def test_invalid_slugs_rejected(self, owner, name):
        with pytest.raises(ValueError):
            RepositoryIdentity(owner, name)

    def test_is_hashable_and_comparable(self):
        a = RepositoryIdentity("octocat", "hello-world")
        b = RepositoryIdentity("octocat", "hello-world")
        assert a == b
        assert len({a, b}) == 1


class TestRefSpec:

    def test_parse_full_sha(self):
        ref = RefSpec.parse("7fd1a60b01f91b314f59955a4e4d4e80d8edf11d")
        assert ref.kind == RefKind.SHA
        assert ref.label == "7fd1a60"

    def test_parse_branch(self):
        ref = RefSpec.parse(" main ")
        assert ref.kind == RefKind.BRANCH_NAME
        assert ref.value == "main"
        assert ref.label == "main"

    def test_short_hex_word_is_not_a_sha(self):
        assert RefSpec.parse("cafe").kind == RefKind.BRANCH_NAME

    def test_display_name_wins(self):
        ref = RefSpec("7fd1a60b01f91b314f59955a4e4d4e80d8edf11d", display_name="main")
        assert ref.label == "main"
        assert ref.to_dict()["display_name"] == "main"

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            RefSpec("  ")


class TestCheckRun:

    def test_from_api_response(self):
        run = CheckRun.from_api_response(run_data(42, "build"))

        assert run.id == 42
        assert run.name == "build"
        assert run.status == CheckStatus.COMPLETED
        assert run.conclusion == CheckConclusion.SUCCESS
        assert run.started_at == datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        assert run.url == "https://github.com/octocat/hello-world/runs/42"

    @pytest.mark.parametrize("status", ["queued", "waiting", "requested", "pending", None])
    def test_not_started_statuses_are_queued(self, status):
        run = CheckRun.from_api_response(run_data(1, status=status))
        assert run.status == CheckStatus.QUEUED
        assert run.conclusion is None
        assert run.state_label == "queued"

    def test_unknown_conclusion_is_dropped(self):
        run = CheckRun.from_api_response(run_data(1, conclusion="mystery"))
        assert run.conclusion is None
        assert run.state_label == "completed"

    def test_url_falls_back_to_details_url(self):
        run = CheckRun.from_api_response(run_data(1, html_url=None))
        assert run.url == "https://ci.example.com/1"

    def test_missing_timestamps(self):
        run = CheckRun.from_api_response(run_data(1, started_at=None, completed_at="garbage"))
        assert run.started_at is None
        assert run.completed_at is None

    def test_failing(self):
        assert make_run(1, conclusion="failure").is_failing
        assert not make_run(1, conclusion="cancelled").is_failing
        assert not make_run(1, status="in_progress").is_failing

    def test_to_dict(self):
        data = make_run(7, "lint", conclusion="skipped").to_dict()
        assert data["id"] == 7
        assert data["status"] == "completed"
        assert data["conclusion"] == "skipped"
        assert data["started_at"] == "2024-05-01T10:00:00+00:00"


class TestStatusSummary:

    def test_find_exact_then_case_insensitive(self):
        summary = StatusSummary(
            runs=(make_run(1, "Build"), make_run(2, "build")),
            overall=OverallStatus.ALL_PASSED,
        )
        assert summary.find("build").id == 2
        assert summary.find("BUILD").id == 1
        assert summary.find("deploy") is None


class TestCredential:

    NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_from_token_response(self):
        credential = Credential.from_token_response(
            {"access_token": "ghu_abc", "token_type": "bearer", "scope": "repo,read:org",
             "expires_in": 28800, "refresh_token": "ghr_xyz"},
            now=self.NOW,
        )

        assert credential.token == "ghu_abc"
        assert credential.scopes == frozenset({"repo", "read:org"})
        assert credential.expires_at == self.NOW + timedelta(hours=8)
        assert credential.refresh_token == "ghr_xyz"

    def test_non_expiring_token(self):
        credential = Credential.from_token_response({"access_token": "gho_abc"})
        assert credential.expires_at is None
        assert not credential.is_expired(self.NOW)

    def test_expiry(self):
        credential = Credential(token="t", expires_at=self.NOW)
        assert credential.is_expired(self.NOW)
        assert not credential.is_expired(self.NOW - timedelta(seconds=1))

    def test_persisted_form(self):
        credential = Credential(token="gho_abc", scopes=frozenset({"repo"}),
                                expires_at=self.NOW)
        restored = Credential.from_dict(credential.to_dict())
        assert restored == credential

    def test_naive_expiry_is_utc(self):
        credential = Credential.from_dict({"token": "t", "expires_at": "2024-05-01T12:00:00"})
        assert credential.expires_at == self.NOW

    def test_repr_hides_token(self):
        assert "gho_secret" not in repr(Credential(token="gho_secret"))

    def test_empty_token_rejected(self):
        with pytest.raises(ValueError):
            Credential(token="")
