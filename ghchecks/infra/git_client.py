"""
Git client infrastructure for ghchecks.

Provides a clean abstraction over git command execution.
All git operations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from business logic

Only read-only commands are issued.
"""

import subprocess
from typing import Optional, List, Tuple, Dict
import logging

logger = logging.getLogger(__name__)


class GitClient:
    """
    Abstraction over git commands.

    Example:
        client = GitClient()
        remotes = client.remotes("/path/to/repo")
        sha = client.head_sha("/path/to/repo")
    """

    def __init__(self, timeout: int = 30, git_bin: str = "git"):
        """
        Initialize GitClient.

        Args:
            timeout: Command timeout in seconds (default: 30)
            git_bin: git executable to run
        """
        self.timeout = timeout
        self.git_bin = git_bin

    def _run(self, args: List[str], cwd: Optional[str] = None) -> Tuple[Optional[str], int]:
        """
        Run a git command.

        Args:
            args: Arguments passed to git
            cwd: Working directory (None for the current one)

        Returns:
            Tuple of (stdout, returncode)
        """
        cmd = [self.git_bin] + args
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
            output = result.stdout
            if result.returncode != 0 and result.stderr:
                logger.debug(f"git {' '.join(args)} failed: {result.stderr.strip()}")
            return output.strip() if output else None, result.returncode

        except subprocess.TimeoutExpired:
            logger.warning(f"Git command timed out: {' '.join(cmd)}")
            return None, -1
        except OSError as e:
            logger.error(f"Git command failed: {' '.join(cmd)} - {e}")
            return None, -1

    def is_git_repo(self, path: Optional[str] = None) -> bool:
        """Check if path is inside a git working copy."""
        output, code = self._run(["rev-parse", "--is-inside-work-tree"], cwd=path)
        return code == 0 and output == "true"

    def remotes(self, path: Optional[str] = None) -> Dict[str, str]:
        """
        Get all configured remotes.

        Returns:
            Mapping of remote name to URL, in git config order
        """
        output, code = self._run(
            ["config", "--get-regexp", r"^remote\..*\.url$"], cwd=path
        )
        if code != 0 or not output:
            return {}

        remotes: Dict[str, str] = {}
        for line in output.split('\n'):
            key, _, url = line.strip().partition(' ')
            if not key or not url:
                continue
            # remote.<name>.url, where <name> may itself contain dots
            name = key[len('remote.'):-len('.url')]
            remotes.setdefault(name, url.strip())
        return remotes

    def head_sha(self, path: Optional[str] = None) -> Optional[str]:
        """
        Get the full SHA of HEAD.

        Returns:
            SHA or None when HEAD does not resolve (no commits yet)
        """
        output, code = self._run(["rev-parse", "--verify", "--quiet", "HEAD^{commit}"], cwd=path)
        if code == 0 and output:
            return output.strip()
        return None

    def head_ref_name(self, path: Optional[str] = None) -> Optional[str]:
        """
        Get the branch name HEAD points at.

        Returns:
            Branch name, or None when detached or unborn
        """
        output, code = self._run(["rev-parse", "--abbrev-ref", "HEAD"], cwd=path)
        if code == 0 and output and output != "HEAD":
            return output.strip()
        return None
