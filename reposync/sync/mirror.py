"""Reference mirror coordinator — refresh the mirror before it seeds a clone.

The mirror must be current before the primary tree reads from it; a stale
mirror can seed inconsistent history. A requested mirror that cannot be
synced fails the whole run instead of silently falling back to a slower
path without a reference.

Concurrent refreshes of the same mirror from unrelated runs are not
serialized here.
"""

from __future__ import annotations

import logging
from pathlib import Path

from reposync.errors import ReferenceSyncError
from reposync.models import ReferenceMirror, SyncOutcome
from reposync.sync.executor import SyncExecutor

logger = logging.getLogger(__name__)


class MirrorCoordinator:
    """Keeps an optional reference mirror up to date."""

    def __init__(self, executor: SyncExecutor):
        self.executor = executor

    def refresh(
        self,
        reference: str | Path | None,
        force: bool = False,
        verbose: bool = False,
    ) -> ReferenceMirror | None:
        """Sync the mirror at ``reference``, if one was requested.

        Raises:
            ReferenceSyncError: If the mirror is missing or its sync fails.
        """
        if not reference:
            return None

        path = Path(reference).expanduser().absolute()
        if not path.is_dir():
            raise ReferenceSyncError(
                path,
                "reference sync",
                SyncOutcome(success=False, exit_code=1, output=f"{path} is not a directory\n"),
            )

        logger.warning("Updating the mirror at %s...", path)
        outcome = self.executor.sync(path, force=force, verbose=verbose)
        self.executor.check(outcome, path, "reference sync", error=ReferenceSyncError)
        return ReferenceMirror(path=path)
