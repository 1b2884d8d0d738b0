"""Workspace discovery and file-to-package attribution.

Relies on the repo using yarn workspaces; the listing command can be
swapped through configuration for anything that emits the same envelope.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence

from pydantic import ValidationError

from .errors import MalformedOutputError
from .models import WorkspaceEntry, normalize_path
from .shell import capture, tool_error


def parse_workspaces(stdout: str) -> dict[str, WorkspaceEntry]:
    """Parse `yarn workspaces --json info` output.

    Yarn wraps the real payload in a log envelope whose "data" field is
    itself a JSON-encoded string, so it is decoded twice:

        {"type": "log", "data": "{\\"pkg\\": {\\"location\\": \\"packages/pkg\\"}}"}

    Raises:
        MalformedOutputError: If either layer fails to decode or the payload
            doesn't map names to objects with a location.
    """
    try:
        envelope = json.loads(stdout)
        info = json.loads(envelope["data"])
    except (json.JSONDecodeError, KeyError, TypeError) as exc:
        raise MalformedOutputError(f"Unexpected workspaces output: {exc}") from exc

    if not isinstance(info, dict):
        raise MalformedOutputError("Workspaces payload is not a JSON object")

    workspaces: dict[str, WorkspaceEntry] = {}
    for name, details in info.items():
        try:
            workspaces[name] = WorkspaceEntry(name=name, location=details["location"])
        except (KeyError, TypeError, ValidationError) as exc:
            raise MalformedOutputError(
                f"Workspace {name!r} has no usable location: {exc}"
            ) from exc
    return workspaces


def list_workspaces(command: Sequence[str]) -> dict[str, WorkspaceEntry]:
    """Run the workspace listing command and return name → WorkspaceEntry.

    Raises:
        ExternalToolError: If the command exits non-zero or writes to stderr.
            A broken listing can't be worked around, so it is never retried.
        MalformedOutputError: If the output can't be parsed.
    """
    result = capture(*command)
    if result.returncode != 0 or result.stderr.strip():
        raise tool_error(result)

    workspaces = parse_workspaces(result.stdout)
    for entry in workspaces.values():
        print(f"  {entry.name} ({entry.location})")
    return workspaces


def resolve_package(path: str, workspaces: Mapping[str, WorkspaceEntry]) -> str | None:
    """Find the package that owns a changed file.

    Probes the file's directory from the deepest level up, so a file in a
    nested workspace is attributed to the nearest enclosing package rather
    than an ancestor.

    Example:
        With workspaces at "packages/app" and "packages/app/plugins/x",
        "packages/app/plugins/x/src/index.ts" resolves to the plugin.

    Returns:
        The owning package name, or None when the file is outside every
        workspace (root config, docs, ...). That is not an error.
    """
    # Remove file name from path
    directory, _, _ = path.rpartition("/")
    directory = normalize_path(directory)
    parts = [part for part in directory.split("/") if part and part != "."]

    for depth in range(len(parts), 0, -1):
        candidate = "/".join(parts[:depth])
        for entry in workspaces.values():
            if entry.location == candidate:
                return entry.name
    return None


def touched_packages(
    changed_files: Iterable[str], workspaces: Mapping[str, WorkspaceEntry]
) -> list[str]:
    """Map changed files to package names, in first-encounter order."""
    names: dict[str, None] = {}
    for path in changed_files:
        name = resolve_package(path, workspaces)
        if name is not None:
            names.setdefault(name)
    return list(names)
