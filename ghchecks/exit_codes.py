"""
Standard exit codes and error types for ghchecks commands.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
UNRESOLVED_ERROR = 64    # Could not work out which repository/commit to query
API_ERROR = 65           # GitHub answered with an unexpected error
CONFIG_ERROR = 66        # Configuration file error
PERMISSION_ERROR = 67    # Insufficient permissions
NETWORK_ERROR = 68       # Network connection failed
AUTH_ERROR = 69          # Authentication/authorization failed
DATA_ERROR = 70          # Data format or validation error
NOT_FOUND_ERROR = 72     # Repository or commit not found on GitHub
RATE_LIMITED = 73        # GitHub rate limit exhausted
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class RepositoryUnresolved(CommandError):
    """Raised when no GitHub owner/repo can be derived from git or flags."""
    def __init__(self, message: str = (
            "Unable to determine the GitHub repository. Please supply the owner "
            "and repository name manually with `--owner` and `--repo`")):
        super().__init__(message, UNRESOLVED_ERROR)


class NoCommitsYet(CommandError):
    """Raised when HEAD does not point at a commit."""
    def __init__(self, message: str = "The repository has no commits yet"):
        super().__init__(message, UNRESOLVED_ERROR)


class AuthorizationFailed(CommandError):
    """Raised when the device authorization flow does not yield a token."""
    def __init__(self, message: str, reason: str = "failed"):
        super().__init__(message, AUTH_ERROR)
        self.reason = reason


class AuthenticationExpired(CommandError):
    """Raised when GitHub rejects the token with a 401."""
    def __init__(self, message: str = "GitHub rejected the stored access token"):
        super().__init__(message, AUTH_ERROR)


class RepositoryNotFound(CommandError):
    """Raised when the repository does not exist or is not visible to us."""
    def __init__(self, message: str):
        super().__init__(message, NOT_FOUND_ERROR)


class CommitNotFound(CommandError):
    """Raised when GitHub does not know the commit (usually not pushed yet)."""
    def __init__(self, message: str):
        super().__init__(message, NOT_FOUND_ERROR)


class RateLimited(CommandError):
    """Raised when the GitHub rate limit outlasts the retry budget."""
    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message, RATE_LIMITED)
        self.retry_after = retry_after


class NetworkFailure(CommandError):
    """Raised when a request keeps failing after all retries."""
    def __init__(self, message: str):
        super().__init__(message, NETWORK_ERROR)


class APIError(CommandError):
    """Raised when an external API call fails."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, API_ERROR)
        self.status_code = status_code


class ConfigError(CommandError):
    """Raised when there's a configuration error."""
    def __init__(self, message: str):
        super().__init__(message, CONFIG_ERROR)
