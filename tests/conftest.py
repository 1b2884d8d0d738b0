"""Shared test fixtures."""

from __future__ import annotations

import json
import subprocess

import pytest

from changeset_gate.models import TriggerEvent, WorkspaceEntry


def completed(
    stdout: str = "", stderr: str = "", returncode: int = 0
) -> subprocess.CompletedProcess[str]:
    """Build a CompletedProcess as returned by shell.capture()."""
    return subprocess.CompletedProcess(
        args=("yarn",), returncode=returncode, stdout=stdout, stderr=stderr
    )


def workspaces_stdout(locations: dict[str, str]) -> str:
    """Yarn's double-encoded `workspaces --json info` output."""
    data = {
        name: {"location": loc, "workspaceDependencies": []}
        for name, loc in locations.items()
    }
    return json.dumps({"type": "log", "data": json.dumps(data)})


LEGACY_STATUS = """\
🦋  info Packages to be bumped at patch:
        🦋  info
        🦋  - @owner/pkg1
        🦋  ---
        🦋  info Packages to be bumped at minor:

        🦋  - @owner/pkgA
          🦋  - @owner/pkg2
        🦋  ---
        🦋  info Packages to be bumped at major:
        🦋  - @owner/pkgB"""


@pytest.fixture
def sample_workspaces() -> dict[str, WorkspaceEntry]:
    """Two sibling packages under packages/."""
    return {
        "@owner/pkg1": WorkspaceEntry(name="@owner/pkg1", location="./packages/pkg1"),
        "@owner/pkgB": WorkspaceEntry(name="@owner/pkgB", location="./packages/pkgB"),
    }


@pytest.fixture
def pr_event() -> TriggerEvent:
    """A pull_request event from a feature branch."""
    return TriggerEvent(
        name="pull_request",
        payload={
            "pull_request": {
                "base": {"ref": "main", "sha": "base000"},
                "head": {"ref": "feature/thing", "sha": "1234567890"},
            }
        },
    )
