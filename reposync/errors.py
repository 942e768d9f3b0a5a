"""Error taxonomy for the sync orchestrator.

Every error here is fatal to the run that raised it. Recovery is always a
human re-invocation after the underlying condition has been fixed.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reposync.models import SyncOutcome


class ReposyncError(Exception):
    """Base class for every orchestration failure."""


class ConfigurationError(ReposyncError):
    """Invalid invocation or configuration, reported before any I/O."""


class VersionResolutionError(ReposyncError):
    """A version token could not be resolved for the requested kind."""

    def __init__(self, token: str, kind: str, reason: str):
        self.token = token
        self.kind = kind
        self.reason = reason
        super().__init__(f"Cannot resolve {kind} version '{token}': {reason}")


class TreeError(ReposyncError):
    """The target directory is in a state the orchestrator refuses to touch."""

    def __init__(self, path: str | Path, message: str):
        self.path = Path(path)
        super().__init__(message)


class AmbiguousTreeError(TreeError):
    """A non-empty directory that matches no known checkout layout."""

    def __init__(self, path: str | Path):
        super().__init__(path, f"{path} is not a cros, arc, or empty directory.")


class KindMismatchError(TreeError):
    """An already-classified tree was asked to change kind."""


class SyncFailure(ReposyncError):
    """The underlying sync tool reported failure.

    Carries the captured output so the operator can diagnose the failure
    before re-running.
    """

    def __init__(
        self,
        path: str | Path,
        step: str,
        outcome: SyncOutcome,
        version: str = "",
    ):
        self.path = Path(path)
        self.step = step
        self.outcome = outcome
        self.version = version
        target = f"{self.path} ({version})" if version else str(self.path)
        super().__init__(
            f"{step} failed for {target} with exit code {outcome.exit_code}"
        )


class ReferenceSyncError(SyncFailure):
    """The reference mirror is missing or could not be synced."""


class PrimarySyncError(SyncFailure):
    """Preparing or syncing the primary target failed."""
