"""Sync executor — prepare a tree's manifest and run ``repo sync`` in it.

The executor takes an already resolved ``VersionSpec``; it never looks
versions up itself. A failed tool invocation is always fatal and never
retried: retrying against a partially updated tree can make it worse.
"""

from __future__ import annotations

import logging
from pathlib import Path

from reposync.config import Settings
from reposync.errors import PrimarySyncError, SyncFailure
from reposync.models import ReferenceMirror, RepoKind, SyncOutcome, VersionSpec
from reposync.utils.process import CommandRunner, run_command
from reposync.versions import TOT, split_full_version

logger = logging.getLogger(__name__)

# Flags that make ``repo sync`` discard local modifications.
FORCE_FLAGS = ("--force-sync", "--force-remove-dirty")


class SyncExecutor:
    """Runs the underlying ``repo`` tool against a single tree."""

    def __init__(
        self,
        settings: Settings | None = None,
        runner: CommandRunner = run_command,
        repo_tool: str | None = None,
    ):
        self.settings = settings or Settings()
        self.runner = runner
        self.repo_tool = repo_tool or self.settings.repo_tool

    # ── Preparation ──────────────────────────────────────────────────

    def init_args(
        self,
        version: VersionSpec,
        reference: ReferenceMirror | None = None,
    ) -> list[str]:
        """Build the ``repo init`` command line for a resolved version."""
        if not version.is_resolved:
            raise ValueError(f"Version {version.raw_token!r} has not been resolved")

        if version.kind == RepoKind.ARC:
            args = [self.repo_tool, "init", "-u", self.settings.arc_manifest_url, "-b", version.resolved]
        elif version.resolved == TOT:
            args = [self.repo_tool, "init", "-u", self.settings.cros_manifest_url, "-b", "main"]
        else:
            milestone, build = split_full_version(version.resolved)
            args = [
                self.repo_tool,
                "init",
                "-u",
                self.settings.cros_manifest_versions_url,
                "-m",
                f"buildspecs/{milestone}/{build}.xml",
            ]

        if reference and version.kind == RepoKind.CROS:
            args.append(f"--reference={reference.path}")
        return args

    def prepare(
        self,
        target: Path,
        version: VersionSpec,
        reference: ReferenceMirror | None = None,
    ) -> SyncOutcome:
        """Point the tree's manifest at ``version``.

        Raises:
            PrimarySyncError: If ``repo init`` fails.
        """
        logger.info("Setting up %s repo at %s for %s", version.kind.label, target, version)
        result = self.runner(self.init_args(version, reference), cwd=target)
        outcome = SyncOutcome(success=result.ok, exit_code=result.returncode, output=result.output)
        self.check(outcome, target, "prepare", str(version), error=PrimarySyncError)
        return outcome

    # ── Sync ─────────────────────────────────────────────────────────

    def sync_args(self, force: bool = False) -> list[str]:
        args = [self.repo_tool, "sync"]
        if self.settings.sync_jobs:
            args.append(f"-j{self.settings.sync_jobs}")
        if force:
            args.extend(FORCE_FLAGS)
        return args

    def sync(self, target: Path, force: bool = False, verbose: bool = False) -> SyncOutcome:
        """Run ``repo sync`` in ``target`` and report its outcome.

        Args:
            target: Tree to sync.
            force: Discard local modifications instead of failing on them.
            verbose: Stream the tool's output as it runs instead of only
                     surfacing it on failure.
        """
        result = self.runner(self.sync_args(force), cwd=target, stream=verbose)
        outcome = SyncOutcome(
            success=result.ok,
            exit_code=result.returncode,
            output=result.output,
            streamed=verbose,
        )
        if outcome.success:
            logger.info("Synced %s", target)
        return outcome

    @staticmethod
    def check(
        outcome: SyncOutcome,
        target: Path,
        step: str,
        version: str = "",
        error: type[SyncFailure] = PrimarySyncError,
    ) -> None:
        """Raise ``error`` if ``outcome`` is not a success."""
        if outcome.success:
            return
        logger.error("%s failed for %s (exit code %d)", step, target, outcome.exit_code)
        raise error(target, step, outcome, version=version)
