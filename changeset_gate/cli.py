"""CLI entry point for changeset-gate."""

from __future__ import annotations

import secrets
from pathlib import Path

import click

from changeset_gate.config import load_config, parse_changed_files
from changeset_gate.events import load_event
from changeset_gate.verify import verify


@click.group()
@click.version_option(package_name="changeset-gate")
def cli() -> None:
    """Require a changeset entry for every monorepo package a change touches."""


@cli.command()
@click.option(
    "--changed-files",
    envvar="INPUT_CHANGED_FILES",
    required=True,
    help="JSON array of changed file paths.",
)
@click.option(
    "--event-name",
    envvar="GITHUB_EVENT_NAME",
    default="",
    help="Triggering event kind (pull_request, push, ...).",
)
@click.option(
    "--event-path",
    envvar="GITHUB_EVENT_PATH",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON file with the event payload.",
)
@click.option(
    "--run-id",
    envvar="GITHUB_RUN_ID",
    default=None,
    help="Unique id for this run; keys the changeset status file.",
)
@click.option(
    "--mode",
    envvar="INPUT_MODE",
    type=click.Choice(["structured", "legacy"]),
    default=None,
    help="How to read `changeset status`: JSON output file or legacy text.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default="pyproject.toml",
    show_default=True,
    help="pyproject.toml holding [tool.changeset-gate] settings.",
)
def check(
    changed_files: str,
    event_name: str,
    event_path: Path | None,
    run_id: str | None,
    mode: str | None,
    config_path: Path,
) -> None:
    """Fail unless every touched package has a pending changeset."""
    # Any error, expected or not, must end the run with a clear message
    try:
        config = load_config(
            config_path,
            mode=mode,
            run_id=run_id or secrets.token_hex(8),
        )
        files = parse_changed_files(changed_files)
        event = load_event(event_name, event_path)
        result = verify(files, event, config)
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc

    if result.failed:
        raise click.ClickException(result.reason)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
