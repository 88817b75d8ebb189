"""
Common CLI utilities and decorators for consistent command behavior.
"""

import json
import sys
import click
from functools import wraps
from typing import Any, Generator
from .progress import get_progress
from .config import load_config, configure_logging
from .exit_codes import (
    SUCCESS, INTERRUPTED,
    get_exit_code_for_exception, CommandError
)
from .format_utils import format_output, get_format_from_env


def standard_command(streaming: bool = False):
    """
    Decorator that provides standard CLI behavior:
    - Configuration loading and logging setup
    - Progress reporting on stderr
    - Clean data output on stdout
    - Automatic --verbose/-v flag handling
    - Automatic --quiet/-q flag to suppress data output
    - Consistent error handling and exit codes

    Args:
        streaming: If True, output items as they are produced.
                  If False, collect results and output at end.
    """
    def decorator(func):

        @wraps(func)
        def wrapper(*args, **kwargs):
            # Extract flags
            verbose = kwargs.get('verbose', False)
            quiet = kwargs.get('quiet', False)
            output_format = kwargs.get('format', None)

            # Get format from env if not specified
            if output_format is None:
                output_format = get_format_from_env('jsonl')

            # Initialize progress reporter
            progress = get_progress(enabled=verbose or None)

            try:
                config = load_config()
                configure_logging(config, verbose=verbose)

                # Inject progress and config into kwargs
                kwargs['progress'] = progress
                kwargs['config'] = config

                # Call the actual command
                result = func(*args, **kwargs)

                # Handle output based on result type (unless quiet mode)
                if quiet:
                    # In quiet mode, consume the generator but don't output
                    if isinstance(result, Generator):
                        for _ in result:
                            pass
                elif result is None:
                    # Command handles its own output
                    pass
                elif isinstance(result, Generator):
                    items = result if streaming or output_format == 'jsonl' else list(result)
                    for line in format_output(items, output_format):
                        print(line, flush=True)
                elif isinstance(result, (list, tuple)):
                    for line in format_output(iter(result), output_format):
                        print(line, flush=True)
                elif isinstance(result, dict):
                    for line in format_output([result], output_format):
                        print(line, flush=True)
                else:
                    print(result, flush=True)

                # Successful completion
                sys.exit(SUCCESS)

            except (KeyboardInterrupt, click.Abort):
                progress.error("Interrupted by user")
                sys.exit(INTERRUPTED)
            except click.ClickException:
                # Click exceptions already have their exit code
                raise
            except CommandError as e:
                # Our custom command errors with specific exit codes
                progress.error(str(e))
                if not quiet and not sys.stdout.isatty():
                    error_obj = {
                        "error": str(e),
                        "type": type(e).__name__,
                        "exit_code": e.exit_code
                    }
                    # Login failures say why; rate limits say when to retry
                    if getattr(e, "reason", None):
                        error_obj["reason"] = e.reason
                    if getattr(e, "retry_after", None) is not None:
                        error_obj["retry_after"] = e.retry_after
                    print(json.dumps(error_obj, ensure_ascii=False), flush=True)
                sys.exit(e.exit_code)
            except Exception as e:
                progress.error(f"Command failed: {e}")
                if not quiet and not sys.stdout.isatty():
                    error_obj = {
                        "error": str(e),
                        "type": type(e).__name__
                    }
                    print(json.dumps(error_obj, ensure_ascii=False), flush=True)
                # Exit with appropriate code
                sys.exit(get_exit_code_for_exception(e))

        return wrapper
    return decorator


# Standard options that many commands share
common_options = {
    'verbose': click.option('-v', '--verbose', is_flag=True,
                           help='Show progress and debug logging'),
    'quiet': click.option('-q', '--quiet', is_flag=True,
                         help='Suppress data output, show only errors'),
    'format': click.option('-f', '--format',
                         type=click.Choice(['jsonl', 'json', 'yaml', 'csv']),
                         help='Output format when not rendering a table '
                              '(default: jsonl, or from GHCHECKS_FORMAT env)'),
    'cwd': click.option('-C', '--cwd', type=click.Path(exists=True, file_okay=False),
                        default=None, help='Run as if started in this directory'),
    'owner': click.option('--owner', default=None,
                          help='Repository owner (default: parsed from the origin remote)'),
    'repo': click.option('--repo', default=None,
                         help='Repository name (default: parsed from the origin remote)'),
    'ref': click.option('--ref', default=None,
                        help='Commit SHA or branch to query (default: HEAD)'),
}


def add_common_options(*option_names):
    """
    Decorator to add common options to a command.

    Example:
        @add_common_options('verbose', 'quiet')
        def my_command(verbose, quiet):
            ...
    """
    def decorator(func):
        for name in reversed(option_names):
            if name in common_options:
                func = common_options[name](func)
        return func
    return decorator


def is_interactive() -> bool:
    """True when stdout is a terminal (human reading rather than a pipe)."""
    return sys.stdout.isatty()
