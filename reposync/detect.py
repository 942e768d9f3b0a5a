"""Repository type detector — classify a directory before syncing into it."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Callable

from reposync.models import Detection, TreeState
from reposync.utils.git_ops import read_manifest_branch
from reposync.utils.paths import has_marker, is_empty_dir

logger = logging.getLogger(__name__)

ARC_MARKER = "Android.bp"
CROS_VERSION_FILE = "src/third_party/chromiumos-overlay/chromeos/config/chromeos_version.sh"

_VERSION_VAR_RE = re.compile(r"^\s*(?:export\s+)?(CHROMEOS_(?:BUILD|BRANCH|PATCH))=(\d+)", re.M)


def read_cros_version(tree: str | Path) -> str:
    """Read the synced ChromeOS version (``<build>.<branch>.<patch>``).

    Raises:
        ValueError: If the version file is missing or incomplete.
    """
    version_file = Path(tree) / CROS_VERSION_FILE
    try:
        text = version_file.read_text()
    except OSError as e:
        raise ValueError(f"Cannot read {version_file}: {e}") from e

    values = dict(_VERSION_VAR_RE.findall(text))
    try:
        return ".".join(
            values[k] for k in ("CHROMEOS_BUILD", "CHROMEOS_BRANCH", "CHROMEOS_PATCH")
        )
    except KeyError as e:
        raise ValueError(f"{version_file} does not define {e.args[0]}") from e


def read_arc_version(tree: str | Path) -> str:
    """Read the manifest branch an ARC tree is synced to."""
    return read_manifest_branch(tree)


def detect_tree(
    path: str | Path,
    arc_version_reader: Callable[[Path], str] = read_arc_version,
    cros_version_reader: Callable[[Path], str] = read_cros_version,
) -> Detection:
    """Classify ``path`` as missing, empty, an ARC tree, a CROS tree, or ambiguous.

    The prior ARC version is advisory: if it cannot be read the tree is still
    classified as ARC, with no prior version.
    """
    path = Path(path)

    if not path.exists():
        return Detection(path, TreeState.NOT_PRESENT)

    if path.is_dir() and has_marker(path, ARC_MARKER):
        try:
            prior = arc_version_reader(path)
        except Exception as e:
            logger.warning("Could not determine the ARC version of %s: %s", path, e)
            prior = None
        return Detection(path, TreeState.EXISTING_ARC, prior)

    if path.is_dir():
        try:
            return Detection(path, TreeState.EXISTING_CROS, cros_version_reader(path))
        except ValueError:
            pass

        if is_empty_dir(path):
            return Detection(path, TreeState.EMPTY_DIRECTORY)

    return Detection(path, TreeState.AMBIGUOUS)
