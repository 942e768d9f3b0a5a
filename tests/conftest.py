"""Shared fakes for tests that would otherwise shell out to repo/gsutil."""

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from reposync.utils.process import CommandResult

ARCHIVE_LISTING = """\
gs://chromeos-image-archive/eve-release/R109-15236.0.0/
gs://chromeos-image-archive/eve-release/R110-15263.0.0/
gs://chromeos-image-archive/eve-release/R110-15278.0.0/
gs://chromeos-image-archive/eve-release/R110-15278.64.0/
gs://chromeos-image-archive/eve-release/LATEST-main
"""


@dataclass
class Call:
    args: list[str]
    cwd: Path | None
    stream: bool

    @property
    def verb(self) -> str:
        return self.args[1] if len(self.args) > 1 else ""


@dataclass
class FakeRunner:
    """Records commands and answers them without running anything.

    ``fail`` holds ``(verb, cwd)`` pairs (or bare verbs) that should exit 1.
    """

    archive: str = ARCHIVE_LISTING
    fail: set = field(default_factory=set)
    calls: list[Call] = field(default_factory=list)

    def __call__(self, args, cwd=None, stream=False) -> CommandResult:
        call = Call(args=[str(a) for a in args], cwd=Path(cwd) if cwd else None, stream=stream)
        self.calls.append(call)

        if call.verb == "ls":
            if "ls" in self.fail:
                return CommandResult(call.args, 1, "AccessDeniedException: 403\n")
            return CommandResult(call.args, 0, self.archive)

        if call.verb in self.fail or (call.verb, call.cwd) in self.fail:
            return CommandResult(call.args, 1, f"error: {call.verb} failed\n")
        return CommandResult(call.args, 0, f"{call.verb} ok\n")

    def verbs(self, cwd: Path | None = None) -> list[str]:
        return [c.verb for c in self.calls if cwd is None or c.cwd == cwd]


@pytest.fixture
def runner():
    return FakeRunner()
