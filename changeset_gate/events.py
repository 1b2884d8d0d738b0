"""Trigger event handling.

Turns the host's event descriptor (event name plus webhook payload) into
the base/head revision pair the changeset tool diffs against.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .errors import MalformedOutputError
from .models import TriggerEvent

PULL_REQUEST_EVENTS = frozenset({"pull_request", "pull_request_target"})
SUPPORTED_EVENTS = PULL_REQUEST_EVENTS | {"push"}


def _dig(payload: dict[str, Any], *keys: str) -> str:
    """Walk nested dicts, returning "" if any key is missing or not a dict."""
    node: Any = payload
    for key in keys:
        if not isinstance(node, dict):
            return ""
        node = node.get(key)
    return node if isinstance(node, str) else ""


def get_base_and_head(event: TriggerEvent) -> tuple[str, str]:
    """Resolve the (base, head) revisions for an event.

    Pull requests diff against the target branch name, which the changeset
    tool resolves itself; pushes diff the before/after commit SHAs.

    Returns:
        (base, head), or ("", "") for event kinds we don't support.
    """
    if event.name in PULL_REQUEST_EVENTS:
        return (
            _dig(event.payload, "pull_request", "base", "ref"),
            _dig(event.payload, "pull_request", "head", "sha"),
        )
    if event.name == "push":
        return _dig(event.payload, "before"), _dig(event.payload, "after")
    return "", ""


def head_ref(event: TriggerEvent) -> str:
    """Source branch of a pull request event, or "" for anything else."""
    return _dig(event.payload, "pull_request", "head", "ref")


def load_event(name: str, path: Path | None) -> TriggerEvent:
    """Build a TriggerEvent from the event name and its payload file.

    Args:
        name: Event kind (GITHUB_EVENT_NAME).
        path: JSON payload file (GITHUB_EVENT_PATH). None or a missing file
              gives an empty payload.

    Raises:
        MalformedOutputError: If the payload file is not a JSON object.
    """
    if path is None or not path.exists():
        return TriggerEvent(name=name)
    try:
        payload = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise MalformedOutputError(f"Invalid event payload in {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedOutputError(f"Event payload in {path} is not a JSON object")
    return TriggerEvent(name=name, payload=payload)
