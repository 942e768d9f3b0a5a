"""Orchestrator — sequence detection, resolution, mirror refresh, and sync.

One run walks a fixed sequence of steps and stops at the first failure::

    START -> KIND_SELECTED -> VERSION_RESOLVED -> PATHS_PREPARED
          -> REFERENCE_SYNCED (only with a mirror) -> PRIMARY_SYNCED -> DONE

Any error moves the run to FAILED and is re-raised unchanged. Nothing is
retried and nothing is kept between runs except the tree on disk.
"""

from __future__ import annotations

import logging
from enum import Enum

from reposync.config import Settings
from reposync.detect import detect_tree
from reposync.errors import AmbiguousTreeError, ConfigurationError, ReposyncError, TreeError
from reposync.models import (
    Detection,
    RepoKind,
    SyncReport,
    SyncRequest,
    TargetRepository,
    TreeState,
    VersionSpec,
)
from reposync.sync.executor import SyncExecutor
from reposync.sync.mirror import MirrorCoordinator
from reposync.utils.paths import resolve_target
from reposync.versions import VersionResolver

logger = logging.getLogger(__name__)


class SyncState(Enum):
    START = "start"
    KIND_SELECTED = "kind_selected"
    VERSION_RESOLVED = "version_resolved"
    PATHS_PREPARED = "paths_prepared"
    REFERENCE_SYNCED = "reference_synced"
    PRIMARY_SYNCED = "primary_synced"
    DONE = "done"
    FAILED = "failed"


def select_kind(request: SyncRequest) -> tuple[RepoKind, str | None]:
    """Return the requested kind and its path option.

    Raises:
        ConfigurationError: Unless exactly one of ``cros``/``arc`` is given.
    """
    has_cros = request.cros is not None
    has_arc = request.arc is not None
    if has_cros == has_arc:
        raise ConfigurationError("Please specify either --cros or --arc.")
    if has_arc:
        return RepoKind.ARC, request.arc
    return RepoKind.CROS, request.cros


class Orchestrator:
    """Runs one sync request from start to finish."""

    def __init__(
        self,
        settings: Settings | None = None,
        resolver: VersionResolver | None = None,
        executor: SyncExecutor | None = None,
        detector=detect_tree,
    ):
        self.settings = settings or Settings()
        self.resolver = resolver or VersionResolver(self.settings)
        self.executor = executor or SyncExecutor(self.settings)
        self.mirrors = MirrorCoordinator(self.executor)
        self.detector = detector
        self.state = SyncState.START
        self.steps: list[str] = []

    def _advance(self, state: SyncState) -> None:
        logger.debug("sync state: %s -> %s", self.state.value, state.value)
        self.state = state
        self.steps.append(state.value)

    def run(self, request: SyncRequest) -> SyncReport:
        """Execute ``request``.

        Raises:
            ReposyncError: On the first failing step; see ``reposync.errors``.
        """
        if self.state != SyncState.START:
            raise RuntimeError("An Orchestrator runs exactly once")
        try:
            return self._run(request)
        except ReposyncError:
            self._advance(SyncState.FAILED)
            raise

    def _run(self, request: SyncRequest) -> SyncReport:
        requested_kind, path_option = select_kind(request)
        self._advance(SyncState.KIND_SELECTED)

        version = self.resolver.resolve(request.version, requested_kind)
        self._advance(SyncState.VERSION_RESOLVED)

        target = TargetRepository(path=resolve_target(path_option), kind=requested_kind)
        logger.info(
            "Syncing %s to %s %s",
            target.path,
            version,
            "forcibly..." if request.force else "...",
        )

        self._prepare_paths(target)
        if target.kind != version.kind:
            # Tokens never cross namespaces; re-resolve for the tree we found.
            version = self.resolver.resolve(request.version, target.kind)
        self._advance(SyncState.PATHS_PREPARED)

        reference_option = request.reference or self.settings.default_reference
        reference = self.mirrors.refresh(
            reference_option, force=request.force, verbose=request.verbose
        )
        if reference:
            self._advance(SyncState.REFERENCE_SYNCED)

        outcome = self._sync_primary(target, version, reference, request)
        self._advance(SyncState.PRIMARY_SYNCED)

        report = SyncReport(
            target=target,
            version=version,
            outcome=outcome,
            reference=reference,
            requested_kind=requested_kind,
            steps=self.steps,
        )
        self._advance(SyncState.DONE)
        logger.info("Synced %s to %s", target.path, version)
        return report

    def _prepare_paths(self, target: TargetRepository) -> Detection:
        detection = self.detector(target.path)

        if detection.state == TreeState.AMBIGUOUS:
            logger.error("%s is not a cros, arc, or empty directory", target.path)
            raise AmbiguousTreeError(target.path)

        if detection.state == TreeState.NOT_PRESENT:
            logger.info("Creating %s ...", target.path)
            try:
                target.path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise TreeError(target.path, f"Cannot create {target.path}: {e}") from e
            return detection

        if detection.state == TreeState.EMPTY_DIRECTORY:
            return detection

        detected = detection.detected_kind
        if detected != target.kind:
            logger.warning(
                "%s repo detected at %s; syncing it as %s instead of %s",
                detected.label,
                target.path,
                detected.label,
                target.kind.label,
            )
        target.adopt_kind(detected, detection.prior_version)
        logger.info(
            "Previous %s version was: %s",
            detected.label,
            detection.prior_version or "(unknown)",
        )
        return detection

    def _sync_primary(self, target, version: VersionSpec, reference, request: SyncRequest):
        self.executor.prepare(target.path, version, reference)
        outcome = self.executor.sync(target.path, force=request.force, verbose=request.verbose)
        self.executor.check(outcome, target.path, "sync", str(version))
        return outcome


def run_sync(request: SyncRequest, settings: Settings | None = None) -> SyncReport:
    """Build an ``Orchestrator`` honoring ``request.repo_tool`` and run it."""
    settings = settings or Settings()
    executor = SyncExecutor(settings, repo_tool=request.repo_tool)
    return Orchestrator(settings, executor=executor).run(request)
