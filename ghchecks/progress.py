"""
Progress reporting utilities for ghchecks.

Everything goes to stderr so stdout stays clean for data. Plain
progress lines only appear on a terminal (or with --verbose); errors,
warnings and login prompts are always shown because the user has to
act on them.
"""

import sys
import os
from typing import Optional

ANSI = {
    'reset': '\033[0m',
    'bold': '\033[1m',
    'dim': '\033[2m',
    'red': '\033[31m',
    'yellow': '\033[33m',
}


class ProgressReporter:
    """Writes status lines to stderr while stdout carries check-run data."""

    def __init__(self, enabled: Optional[bool] = None, use_colors: Optional[bool] = None):
        """
        Initialize progress reporter.

        Args:
            enabled: Explicitly enable/disable progress. None = auto-detect
            use_colors: Use ANSI colors in output
        """
        # Auto-detect: show progress if stderr is a terminal
        self.enabled = sys.stderr.isatty() if enabled is None else enabled

        if use_colors is None:
            self.use_colors = sys.stderr.isatty() and os.environ.get('NO_COLOR') is None
        else:
            self.use_colors = use_colors

    def _colorize(self, text: str, color: str) -> str:
        if self.use_colors and color in ANSI:
            return f"{ANSI[color]}{text}{ANSI['reset']}"
        return text

    def _emit(self, text: str) -> None:
        print(text, file=sys.stderr, flush=True)

    def __call__(self, message: str, force: bool = False):
        """
        Show a progress line such as "Fetching check runs...".

        Args:
            message: Progress message to display
            force: Show even when progress is disabled
        """
        if force or self.enabled:
            self._emit(self._colorize(message, 'dim'))

    def error(self, message: str):
        self._emit(self._colorize(f"ERROR: {message}", 'red'))

    def warning(self, message: str):
        self._emit(self._colorize(f"WARNING: {message}", 'yellow'))

    def prompt(self, message: str):
        """Instructions the user must act on, e.g. the device login code."""
        self._emit(self._colorize(message, 'bold'))


# Global progress reporter instance
_progress = None


def get_progress(enabled: Optional[bool] = None) -> ProgressReporter:
    """
    Get the global progress reporter.

    Args:
        enabled: Override auto-detection of progress display
    """
    global _progress
    if _progress is None or enabled is not None:
        _progress = ProgressReporter(enabled)
    return _progress


# Environment variable override
if os.environ.get('GHCHECKS_PROGRESS') == '0':
    _progress = ProgressReporter(enabled=False)
elif os.environ.get('GHCHECKS_PROGRESS') == '1':
    _progress = ProgressReporter(enabled=True)
