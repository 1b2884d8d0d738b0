"""Data models for changeset-gate.

These Pydantic models represent the core data structures passed between
the event resolver, the workspace locator, the changeset reader and the
verification orchestrator. All of them live for a single run.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

BumpType = Literal["major", "minor", "patch", "none"]


def normalize_path(path: str) -> str:
    """Drop a leading "./" and any trailing slashes from a repo-relative path."""
    while path.startswith("./"):
        path = path[2:]
    return path.rstrip("/")


class TriggerEvent(BaseModel):
    """The CI event that triggered the run.

    Attributes:
        name: Event kind, e.g. "pull_request", "pull_request_target", "push".
        payload: Raw webhook payload for the event.
    """

    name: str = ""
    payload: dict[str, Any] = Field(default_factory=dict)


class WorkspaceEntry(BaseModel):
    """A single package in the monorepo workspace.

    Attributes:
        name: Package name as declared in its package.json.
        location: Package root relative to the repo root, without a
                  leading "./" or trailing slash.
    """

    name: str
    location: str

    @field_validator("location")
    @classmethod
    def _normalize_location(cls, value: str) -> str:
        return normalize_path(value)


class ReleaseEntry(BaseModel):
    """A pending release reported by the changeset tool.

    Only ``name`` is used by verification; the rest is carried along so the
    report can be echoed in full.

    Attributes:
        name: Package that will be released.
        type: Bump severity. None only when recovered from legacy text
              without a severity header.
        old_version: Version before the release, if reported.
        new_version: Version after the release, if reported.
        changesets: Ids of the changeset files contributing to the release.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    type: BumpType | None = None
    old_version: str | None = Field(default=None, alias="oldVersion")
    new_version: str | None = Field(default=None, alias="newVersion")
    changesets: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("changesets", "changeSets"),
    )


class ChangesetReport(BaseModel):
    """Pending releases since the base revision, in report order."""

    releases: list[ReleaseEntry] = Field(default_factory=list)

    @property
    def package_names(self) -> list[str]:
        """Names of packages with pending releases, duplicates removed."""
        return list(dict.fromkeys(entry.name for entry in self.releases))


class StatusFile(BaseModel):
    """The file written by `changeset status --output`.

    Unlike ChangesetReport, "releases" is required: a file without it is
    not a report at all.
    """

    releases: list[ReleaseEntry]


class VerificationResult(BaseModel):
    """Outcome of a single verification run.

    Attributes:
        status: "pass", "skip" or "fail".
        reason: Skip reason or failure message; empty on pass.
        kind: Failure kind ("missing_changesets", "unsupported_event" or
              "missing_revision").
        missing: Touched packages without a changeset entry, in the order
                 they were first seen in the changed-file list.
        messages: Informational lines emitted during the run, in order.
    """

    status: Literal["pass", "skip", "fail"]
    reason: str = ""
    kind: (
        Literal["missing_changesets", "unsupported_event", "missing_revision"] | None
    ) = None
    missing: list[str] = Field(default_factory=list)
    messages: list[str] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.status == "fail"
