"""Reading pending releases from the changesets CLI.

Two readers share one entry point, read_pending_releases():

- structured: installs the CLI if needed and asks `changeset status` to
  write its JSON report to a file (`--output`). This is the default.
- legacy: scrapes the pretty-printed `changeset status` output. Kept for
  repos pinned to changesets versions without `--output`.

A single call uses exactly one of them.
"""

from __future__ import annotations

import re
import subprocess
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from .errors import ExternalToolError, MalformedOutputError
from .models import ChangesetReport, ReleaseEntry, StatusFile
from .shell import capture, run, tool_error, warn

ENTRY_MARKER = "🦋  - "
SEVERITY_HEADER = re.compile(r"Packages to be bumped at (major|minor|patch)")


def status_file_path(run_id: str) -> Path:
    """Per-run name for the structured status report.

    Must stay relative: changesets joins `--output` onto its working
    directory, absolute paths included.
    """
    return Path(f"changeset-status-{run_id}.json")


def ensure_changeset_cli(
    changeset_command: Sequence[str], install_command: Sequence[str]
) -> None:
    """Install the changesets CLI unless it is already available.

    Raises:
        ExternalToolError: If the install command fails.
    """
    result = capture(*changeset_command, "--version")
    if result.returncode == 0:
        print(f"  changesets {result.stdout.strip()}")
        return
    print("  changesets CLI not found, installing")
    run(*install_command)


def parse_status_file(path: Path) -> ChangesetReport:
    """Load the JSON report written by `changeset status --output`.

    Raises:
        MalformedOutputError: If the file is missing or not a valid report.
    """
    if not path.exists():
        raise MalformedOutputError(f"changeset status did not write {path}")
    try:
        status = StatusFile.model_validate_json(path.read_text())
    except ValidationError as exc:
        raise MalformedOutputError(f"Invalid changeset status report: {exc}") from exc
    return ChangesetReport(releases=status.releases)


def parse_status_text(output: str) -> ChangesetReport:
    """Recover pending releases from pretty-printed `changeset status` output.

    Entry lines look like "🦋  - @scope/pkg", grouped under headers such as
    "🦋  info Packages to be bumped at minor:". Lines are trimmed first so
    indentation and blank separators between groups don't matter.

    Any other line is dropped without complaint, so a garbled entry line
    is indistinguishable from a header. That is a known limit of this
    reader, not something to tighten here.
    """
    releases: list[ReleaseEntry] = []
    severity = None
    for line in output.splitlines():
        line = line.strip()
        if line.startswith(ENTRY_MARKER):
            releases.append(
                ReleaseEntry(name=line[len(ENTRY_MARKER) :].strip(), type=severity)
            )
            continue
        header = SEVERITY_HEADER.search(line)
        if header:
            severity = header.group(1)
    return ChangesetReport(releases=releases)


def _check_status(
    result: subprocess.CompletedProcess[str], no_changesets_exit_code: int
) -> bool:
    """Validate a `changeset status` exit code.

    Returns:
        True if the tool reported that no changeset data exists.

    Raises:
        ExternalToolError: For any other non-zero exit.
    """
    if result.returncode == 0:
        return False
    if result.returncode == no_changesets_exit_code:
        print("  No changesets found")
        return True
    raise tool_error(result)


def read_structured(
    base: str,
    *,
    changeset_command: Sequence[str],
    install_command: Sequence[str],
    run_id: str,
    no_changesets_exit_code: int = 1,
) -> ChangesetReport:
    """Pending releases since ``base``, read from the JSON status file."""
    ensure_changeset_cli(changeset_command, install_command)

    relative = status_file_path(run_id)
    output = Path.cwd() / relative
    output.unlink(missing_ok=True)
    try:
        result = capture(
            *changeset_command, "status", "--since", base, "--output", str(relative)
        )
        if result.stderr.strip():
            warn(result.stderr.strip())
        if _check_status(result, no_changesets_exit_code):
            return ChangesetReport()
        return parse_status_file(output)
    finally:
        output.unlink(missing_ok=True)


def read_legacy(
    base: str,
    *,
    changeset_command: Sequence[str],
    no_changesets_exit_code: int = 1,
) -> ChangesetReport:
    """Pending releases since ``base``, scraped from status stdout."""
    result = capture(*changeset_command, "status", "--since", base)
    if _check_status(result, no_changesets_exit_code):
        return ChangesetReport()
    if result.stderr.strip():
        raise ExternalToolError(result.stderr.strip(), returncode=result.returncode)
    return parse_status_text(result.stdout)


def read_pending_releases(
    base: str,
    *,
    mode: str = "structured",
    changeset_command: Sequence[str] = ("yarn", "changeset"),
    install_command: Sequence[str] = ("yarn", "add", "-W", "--dev", "@changesets/cli"),
    run_id: str = "local",
    no_changesets_exit_code: int = 1,
) -> ChangesetReport:
    """Ask the changesets CLI which packages have pending releases.

    Args:
        base: Revision or branch to diff against (`--since`).
        mode: "structured" (JSON file) or "legacy" (text scraping).
        changeset_command: Base command for the changesets CLI.
        install_command: Used by structured mode when the CLI is missing.
        run_id: Keys the structured status file so concurrent runs on the
                same machine don't collide.
        no_changesets_exit_code: Exit code meaning "nothing pending". It
                gives an empty report instead of an error; otherwise a
                freshly installed tool would block every PR.

    Raises:
        ExternalToolError: If the CLI fails.
        MalformedOutputError: If its report can't be parsed.
        ValueError: For an unknown mode.
    """
    if mode == "structured":
        report = read_structured(
            base,
            changeset_command=changeset_command,
            install_command=install_command,
            run_id=run_id,
            no_changesets_exit_code=no_changesets_exit_code,
        )
    elif mode == "legacy":
        report = read_legacy(
            base,
            changeset_command=changeset_command,
            no_changesets_exit_code=no_changesets_exit_code,
        )
    else:
        raise ValueError(f"Unknown changeset reader mode: {mode!r}")

    for entry in report.releases:
        print(f"  {entry.name}: {entry.type or 'unknown'}")
    return report
