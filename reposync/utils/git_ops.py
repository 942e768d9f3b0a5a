"""Git operations — inspect the manifest checkout of a repo-managed tree."""

from __future__ import annotations

from pathlib import Path

from git import Repo, InvalidGitRepositoryError, NoSuchPathError

MANIFEST_DIR = ".repo/manifests"


def read_manifest_branch(tree: str | Path) -> str:
    """Return the manifest branch a repo-managed tree was initialized with.

    ``repo init -b <branch>`` records the branch as the merge ref of the
    ``default`` branch in the manifest checkout.

    Raises:
        ValueError: If the tree has no readable manifest checkout.
    """
    manifest_path = Path(tree) / MANIFEST_DIR
    try:
        repo = Repo(manifest_path)
    except (InvalidGitRepositoryError, NoSuchPathError):
        raise ValueError(f"No manifest checkout found at {manifest_path}")

    reader = repo.config_reader()
    merge = reader.get_value('branch "default"', "merge", default="")
    if merge:
        return str(merge).removeprefix("refs/heads/")

    if not repo.head.is_detached:
        return str(repo.active_branch)

    raise ValueError(f"Manifest branch is not recorded in {manifest_path}")

