"""Shell utilities.

Provides simple wrappers around subprocess calls for the external tools
(yarn workspaces, changesets), plus output formatting helpers.
"""

from __future__ import annotations

import shlex
import subprocess
import sys

from .errors import ExternalToolError


def capture(*args: str) -> subprocess.CompletedProcess[str]:
    """Run a command and capture stdout/stderr as text.

    Never raises on a non-zero exit; callers decide which exit codes
    are acceptable for the tool they are driving.

    Args:
        *args: Command and arguments (e.g., "yarn", "workspaces", "info").

    Returns:
        CompletedProcess with returncode, stdout and stderr.
    """
    print(f"  $ {shlex.join(args)}")
    return subprocess.run(args, capture_output=True, text=True, check=False)


def run(*args: str) -> None:
    """Run a command, streaming its output to the terminal.

    Used for long-running installs so users can see progress.

    Raises:
        ExternalToolError: If the command exits non-zero.
    """
    print(f"  $ {shlex.join(args)}")
    result = subprocess.run(args, check=False)
    if result.returncode != 0:
        raise ExternalToolError(
            f"{shlex.join(args)} failed with exit code {result.returncode}",
            returncode=result.returncode,
        )


def tool_error(result: subprocess.CompletedProcess[str]) -> ExternalToolError:
    """Build an ExternalToolError from a finished process.

    Prefers the tool's stderr text, falling back to a generic message
    when the tool failed silently.
    """
    message = result.stderr.strip()
    if not message:
        message = (
            f"{shlex.join(result.args)} failed with exit code {result.returncode}"
        )
    return ExternalToolError(message, returncode=result.returncode)


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of a check in CI logs.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def info(msg: str) -> None:
    """Print a single informational line."""
    print(msg)


def warn(msg: str) -> None:
    """Print a warning line to stderr."""
    print(f"WARNING: {msg}", file=sys.stderr)
