"""Data model for a single sync run.

A run touches at most two trees: the primary target and an optional
reference mirror. Nothing here is persisted; the on-disk checkout is the
only state that survives a run.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path

from reposync.errors import KindMismatchError


class RepoKind(Enum):
    """Which ecosystem a source tree belongs to."""

    UNSET = "unset"
    CROS = "cros"
    ARC = "arc"

    @property
    def label(self) -> str:
        return {"cros": "CROS", "arc": "ARC"}.get(self.value, "unknown")


class TreeState(Enum):
    """Classification of a target directory before it is synced."""

    NOT_PRESENT = "not_present"
    EMPTY_DIRECTORY = "empty_directory"
    EXISTING_ARC = "existing_arc"
    EXISTING_CROS = "existing_cros"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class Detection:
    """Result of inspecting a target directory."""

    path: Path
    state: TreeState
    prior_version: str | None = None

    @property
    def detected_kind(self) -> RepoKind | None:
        """Kind implied by an existing checkout, None when there is no evidence."""
        if self.state == TreeState.EXISTING_ARC:
            return RepoKind.ARC
        if self.state == TreeState.EXISTING_CROS:
            return RepoKind.CROS
        return None


@dataclass
class TargetRepository:
    """The tree being synchronized.

    ``kind`` starts as whatever the caller selected (or UNSET) and is fixed
    once filesystem evidence classifies the tree.
    """

    path: Path
    kind: RepoKind = RepoKind.UNSET
    prior_version: str | None = None
    _classified: bool = field(default=False, repr=False)

    def adopt_kind(self, kind: RepoKind, prior_version: str | None = None) -> None:
        """Fix the tree's kind from filesystem evidence.

        Raises:
            KindMismatchError: If the tree was already classified as another kind.
        """
        if kind == RepoKind.UNSET:
            raise KindMismatchError(self.path, f"Cannot classify {self.path} as unset")
        if self._classified and kind != self.kind:
            raise KindMismatchError(
                self.path,
                f"{self.path} is a {self.kind.label} tree and cannot be "
                f"treated as {kind.label}",
            )
        self.kind = kind
        self.prior_version = prior_version
        self._classified = True

    @property
    def is_classified(self) -> bool:
        return self._classified


@dataclass(frozen=True)
class VersionSpec:
    """A user-supplied version token and, once looked up, its canonical form."""

    raw_token: str
    kind: RepoKind
    resolved: str | None = None

    @property
    def is_resolved(self) -> bool:
        return self.resolved is not None

    def with_resolved(self, resolved: str) -> VersionSpec:
        return replace(self, resolved=resolved)

    def __str__(self) -> str:
        return self.resolved or self.raw_token


@dataclass(frozen=True)
class ReferenceMirror:
    """A local tree used to seed the primary clone with shared objects."""

    path: Path


@dataclass(frozen=True)
class SyncOutcome:
    """Result of a single invocation of the underlying sync tool."""

    success: bool
    exit_code: int
    output: str = ""
    streamed: bool = False


@dataclass
class SyncRequest:
    """Everything the operator asked for in one invocation."""

    version: str
    cros: str | None = None
    arc: str | None = None
    reference: str | None = None
    force: bool = False
    verbose: bool = False
    repo_tool: str | None = None


@dataclass
class SyncReport:
    """What a successful run did, for the final summary."""

    target: TargetRepository
    version: VersionSpec
    outcome: SyncOutcome
    reference: ReferenceMirror | None = None
    requested_kind: RepoKind = RepoKind.UNSET
    steps: list[str] = field(default_factory=list)

    @property
    def kind_overridden(self) -> bool:
        return self.requested_kind != self.target.kind

    def summary(self) -> str:
        lines = [
            f"Target:    {self.target.path}",
            f"Kind:      {self.target.kind.label}"
            + (" (detected)" if self.kind_overridden else ""),
            f"Version:   {self.version}",
            f"Previous:  {self.target.prior_version or '(none)'}",
            f"Reference: {self.reference.path if self.reference else '(none)'}",
            f"Result:    {'PASS' if self.outcome.success else 'FAIL'}",
        ]
        return "\n".join(lines)
