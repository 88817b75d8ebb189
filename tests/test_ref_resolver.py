"""
Tests for resolving the ref whose check runs are queried.
"""

import unittest
from unittest.mock import Mock

from ghchecks.domain import RefKind
from ghchecks.exit_codes import NoCommitsYet, RepositoryUnresolved
from ghchecks.infra import GitClient
from ghchecks.services import resolve_ref

SHA = "7fd1a60b01f91b314f59955a4e4d4e80d8edf11d"


class TestResolveRef(unittest.TestCase):

    def setUp(self):
        self.git = Mock(spec=GitClient)
        self.git.is_git_repo.return_value = True
        self.git.head_sha.return_value = SHA
        self.git.head_ref_name.return_value = "main"

    def test_head_on_branch(self):
        ref = resolve_ref(self.git, "/work")

        self.assertEqual(ref.value, SHA)
        self.assertEqual(ref.kind, RefKind.SHA)
        self.assertEqual(ref.label, "main")
        self.git.head_sha.assert_called_once_with("/work")

    def test_detached_head_labels_with_short_sha(self):
        self.git.head_ref_name.return_value = None

        ref = resolve_ref(self.git)

        self.assertEqual(ref.label, "7fd1a60")

    def test_explicit_sha(self):
        ref = resolve_ref(self.git, ref="7fd1a60")

        self.assertEqual(ref.kind, RefKind.SHA)
        self.assertEqual(ref.value, "7fd1a60")
        self.git.head_sha.assert_not_called()

    def test_explicit_branch(self):
        ref = resolve_ref(self.git, ref="feature/login")

        self.assertEqual(ref.kind, RefKind.BRANCH_NAME)
        self.assertEqual(ref.label, "feature/login")

    def test_blank_ref_falls_back_to_head(self):
        ref = resolve_ref(self.git, ref="  ")
        self.assertEqual(ref.value, SHA)

    def test_no_commits_yet(self):
        self.git.head_sha.return_value = None

        with self.assertRaises(NoCommitsYet):
            resolve_ref(self.git)

    def test_not_a_repository(self):
        self.git.is_git_repo.return_value = False

        with self.assertRaises(RepositoryUnresolved):
            resolve_ref(self.git, "/tmp")


if __name__ == '__main__':
    unittest.main()
