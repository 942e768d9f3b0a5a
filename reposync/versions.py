"""Version resolver — turn a user token into the version that gets synced.

ChromeOS and ARC version independently, so each kind has its own namespace:

- ChromeOS tokens are ``tot`` (latest development, passed through), a build
  number (``15278.0.0``), a full version (``R110-15278.0.0``) or a milestone
  (``R110``). Everything but ``tot`` is checked against the release archive
  of a reference board and comes back as a full version.
- ARC tokens are release channel names (``rvc``, ``tm``, ``master``) mapped
  to manifest branches, or one of those branch names verbatim.

A token that cannot be resolved is fatal; there is no fallback.
"""

from __future__ import annotations

import logging
import re

from reposync.config import Settings
from reposync.errors import VersionResolutionError
from reposync.models import RepoKind, VersionSpec
from reposync.utils.process import CommandRunner, run_command

logger = logging.getLogger(__name__)

TOT = "tot"

FULL_VERSION_RE = re.compile(r"^R(\d+)-(\d+)\.(\d+)\.(\d+)$")
BUILD_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")
MILESTONE_RE = re.compile(r"^R(\d+)$")
ARCHIVE_ENTRY_RE = re.compile(r"/(R\d+-\d+\.\d+\.\d+)/?$")

ARCHIVE_URL = "gs://chromeos-image-archive/{board}-release/"


def version_key(full_version: str) -> tuple[int, ...]:
    """Sort key for ``R<milestone>-<build>.<branch>.<patch>`` strings."""
    match = FULL_VERSION_RE.match(full_version)
    if not match:
        raise ValueError(f"Not a full ChromeOS version: {full_version}")
    return tuple(int(g) for g in match.groups())


def split_full_version(full_version: str) -> tuple[str, str]:
    """Split ``R110-15278.0.0`` into ``("110", "15278.0.0")``."""
    milestone, build = full_version[1:].split("-", 1)
    return milestone, build


class VersionResolver:
    """Resolves version tokens for either kind of tree."""

    def __init__(
        self,
        settings: Settings | None = None,
        runner: CommandRunner = run_command,
    ):
        self.settings = settings or Settings()
        self.runner = runner

    def resolve(self, token: str, kind: RepoKind) -> VersionSpec:
        """Resolve ``token`` in the namespace of ``kind``.

        Raises:
            VersionResolutionError: If the token is unknown for that kind.
        """
        spec = VersionSpec(raw_token=token.strip(), kind=kind)
        if kind == RepoKind.CROS:
            resolved = self.resolve_cros(spec.raw_token)
        elif kind == RepoKind.ARC:
            resolved = self.resolve_arc(spec.raw_token)
        else:
            raise VersionResolutionError(token, kind.label, "tree kind is not known")

        if resolved != spec.raw_token:
            logger.info("Resolved %s version %s -> %s", kind.label, spec.raw_token, resolved)
        return spec.with_resolved(resolved)

    # ── ChromeOS ─────────────────────────────────────────────────────

    def resolve_cros(self, token: str, board: str | None = None) -> str:
        if token == TOT:
            return token

        board = board or self.settings.reference_board
        if not (
            FULL_VERSION_RE.match(token)
            or BUILD_VERSION_RE.match(token)
            or MILESTONE_RE.match(token)
        ):
            raise VersionResolutionError(
                token, "CROS", "expected tot, R<milestone>, <build>.<branch>.<patch> "
                "or R<milestone>-<build>.<branch>.<patch>"
            )

        available = self._list_archive(token, board)

        if FULL_VERSION_RE.match(token):
            matches = [v for v in available if v == token]
        elif BUILD_VERSION_RE.match(token):
            matches = [v for v in available if v.endswith(f"-{token}")]
        else:
            matches = [v for v in available if v.startswith(f"{token}-")]

        if not matches:
            raise VersionResolutionError(token, "CROS", f"no release found for board {board}")
        return max(matches, key=version_key)

    def _list_archive(self, token: str, board: str) -> list[str]:
        url = ARCHIVE_URL.format(board=board)
        result = self.runner([self.settings.gsutil_tool, "ls", url])
        if not result.ok:
            raise VersionResolutionError(
                token, "CROS", f"listing {url} failed: {result.output.strip()}"
            )

        versions = []
        for line in result.output.splitlines():
            match = ARCHIVE_ENTRY_RE.search(line.strip())
            if match:
                versions.append(match.group(1))
        return versions

    # ── ARC ──────────────────────────────────────────────────────────

    def resolve_arc(self, token: str) -> str:
        branches = self.settings.arc_branches
        if token in branches:
            return branches[token]
        if token in branches.values():
            return token
        known = ", ".join(sorted(branches))
        raise VersionResolutionError(token, "ARC", f"unknown branch (known: {known})")


def resolve_version(
    token: str,
    kind: RepoKind,
    settings: Settings | None = None,
    runner: CommandRunner = run_command,
) -> VersionSpec:
    """Convenience wrapper around ``VersionResolver.resolve``."""
    return VersionResolver(settings, runner=runner).resolve(token, kind)
