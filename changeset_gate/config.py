"""Configuration loading.

Settings live under [tool.changeset-gate] in the repo's root pyproject.toml.
Uses tomlkit, same as the rest of our pyproject handling, so the table can
sit next to formatted, commented project metadata without surprises.
Values given on the command line (or via the matching environment
variables) override whatever the file says.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Literal

import tomlkit
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError

Mode = Literal["structured", "legacy"]

TOOL_TABLE = "changeset-gate"


class GateConfig(BaseModel):
    """Resolved settings for a verification run.

    Attributes:
        mode: Which changeset reader to use. "structured" reads the JSON
              file written by `changeset status --output`; "legacy" scrapes
              its pretty-printed stdout.
        release_branch_prefix: Head refs starting with this are automated
              release PRs and always skip the check.
        no_changesets_exit_code: Exit code of `changeset status` meaning
              "nothing pending" rather than a failure.
        workspaces_command: Command listing workspace packages as JSON.
        changeset_command: Base command for the changeset CLI.
        install_command: Command installing the changeset CLI when the
              presence check fails.
        run_id: Key for the per-run status file.
    """

    model_config = ConfigDict(extra="forbid")

    mode: Mode = "structured"
    release_branch_prefix: str = "changeset-release/"
    no_changesets_exit_code: int = 1
    workspaces_command: list[str] = Field(
        default_factory=lambda: ["yarn", "workspaces", "--json", "info"]
    )
    changeset_command: list[str] = Field(default_factory=lambda: ["yarn", "changeset"])
    install_command: list[str] = Field(
        default_factory=lambda: ["yarn", "add", "-W", "--dev", "@changesets/cli"]
    )
    run_id: str = "local"


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a pyproject.toml file."""
    return tomlkit.parse(path.read_text())


def get_tool_settings(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Extract [tool.changeset-gate] as a plain dict with snake_case keys.

    Keys may be written in kebab-case (the TOML convention) or snake_case.
    """
    table = doc.get("tool", {}).get(TOOL_TABLE)
    if not table:
        return {}
    return {str(key).replace("-", "_"): value for key, value in table.unwrap().items()}


def load_config(pyproject: Path | None = None, **overrides: Any) -> GateConfig:
    """Build a GateConfig from pyproject.toml plus explicit overrides.

    Args:
        pyproject: Path to the root pyproject.toml. A missing file is fine;
                   defaults are used.
        **overrides: Settings from the CLI. None values are ignored so that
                     unset options fall through to the file.

    Raises:
        ConfigError: If a setting has the wrong type or an unknown value.
    """
    settings: dict[str, Any] = {}
    if pyproject is not None and pyproject.exists():
        settings.update(get_tool_settings(load_pyproject(pyproject)))
    settings.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return GateConfig(**settings)
    except ValidationError as exc:
        raise ConfigError(f"Invalid changeset-gate configuration:\n{exc}") from exc


def parse_changed_files(raw: str) -> list[str]:
    """Decode the changed_files input, a JSON array of path strings.

    Raises:
        ConfigError: If the input is not a JSON array of strings.
    """
    try:
        files = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON for changed_files: {exc}") from exc
    if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
        raise ConfigError("changed_files must be a JSON array of strings")
    return files
