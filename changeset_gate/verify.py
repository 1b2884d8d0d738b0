"""Changeset verification: touched packages → revisions → pending releases → verdict.

This module orchestrates a single check:
1. Skip when nothing changed or the PR is an automated release PR
2. List workspace packages and attribute each changed file to one
3. Resolve the base/head revisions from the trigger event
4. Ask the changesets CLI which packages have pending releases
5. Fail if any touched package is missing from that list

Informational lines are printed as they happen and also collected on the
result so callers (and tests) can inspect exactly what was reported.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .changesets import read_pending_releases
from .config import GateConfig
from .events import SUPPORTED_EVENTS, get_base_and_head, head_ref
from .models import TriggerEvent, VerificationResult
from .shell import info, step
from .workspaces import list_workspaces, touched_packages

NO_FILES = "No changed files found. Skipping."
RELEASE_PR = "Release PR detected. Skipping."
NO_PACKAGES = "No packages to verify. Skipping."
ALL_PRESENT = "All packages have changeset entries"


def unsupported_event_message(event_name: str) -> str:
    return (
        f"This action only supports pull requests and pushes, {event_name} events "
        "are not supported. Please submit an issue on this action's GitHub repo "
        "if you believe this in correct."
    )


def missing_revision_message(event_name: str) -> str:
    return (
        f"Could not read the base revision from the {event_name} event payload. "
        "Check that GITHUB_EVENT_PATH points at the event JSON."
    )


def missing_entries_message(missing: Sequence[str]) -> str:
    return (
        f"Changeset entry required for {', '.join(missing)} because there have "
        "been changes since the last release."
    )


def verify(
    changed_files: Sequence[str],
    event: TriggerEvent,
    config: GateConfig | None = None,
) -> VerificationResult:
    """Check that every package touched by ``changed_files`` has a changeset.

    Args:
        changed_files: Repo-relative paths changed by the PR or push.
        event: The triggering event.
        config: Resolved settings; defaults when omitted.

    Returns:
        A pass, skip or fail result. Skips are successful no-ops.

    Raises:
        ExternalToolError: If yarn or the changesets CLI fails.
        MalformedOutputError: If their output can't be parsed.
    """
    config = config or GateConfig()
    messages: list[str] = []

    def report(msg: str) -> None:
        info(msg)
        messages.append(msg)

    def skip(reason: str) -> VerificationResult:
        report(reason)
        return VerificationResult(status="skip", reason=reason, messages=messages)

    def fail(reason: str, **fields: Any) -> VerificationResult:
        report(reason)
        return VerificationResult(
            status="fail", reason=reason, messages=messages, **fields
        )

    if not changed_files:
        return skip(NO_FILES)

    if head_ref(event).startswith(config.release_branch_prefix):
        return skip(RELEASE_PR)

    step("Resolving workspace packages")
    workspaces = list_workspaces(config.workspaces_command)
    packages = touched_packages(changed_files, workspaces)
    if not packages:
        return skip(NO_PACKAGES)
    report(f"Packages to verify: {', '.join(packages)}")

    base, _head = get_base_and_head(event)
    if not base:
        if event.name in SUPPORTED_EVENTS:
            return fail(missing_revision_message(event.name), kind="missing_revision")
        return fail(unsupported_event_message(event.name), kind="unsupported_event")

    step(f"Reading changesets since {base}")
    pending = read_pending_releases(
        base,
        mode=config.mode,
        changeset_command=config.changeset_command,
        install_command=config.install_command,
        run_id=config.run_id,
        no_changesets_exit_code=config.no_changesets_exit_code,
    )

    with_entries = set(pending.package_names)
    missing = [name for name in packages if name not in with_entries]
    if missing:
        return fail(
            missing_entries_message(missing), kind="missing_changesets", missing=missing
        )

    report(ALL_PRESENT)
    return VerificationResult(status="pass", messages=messages)
