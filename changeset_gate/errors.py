"""Error types raised by changeset-gate.

Skips and verdicts are not errors: an unsupported event kind or a package
missing its changeset entry comes back as a failed VerificationResult.
These exceptions cover the cases where the run cannot reach a verdict.
"""

from __future__ import annotations


class ChangesetGateError(Exception):
    """Base class for all changeset-gate errors."""


class ExternalToolError(ChangesetGateError):
    """A subprocess exited unexpectedly or wrote to its error stream.

    The message is the tool's own error text so it can be surfaced verbatim.
    """

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class MalformedOutputError(ChangesetGateError):
    """A tool produced output that could not be parsed into the expected shape."""


class ConfigError(ChangesetGateError):
    """Invalid configuration or CLI input."""
