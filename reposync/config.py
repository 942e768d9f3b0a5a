"""Settings — optional YAML configuration for reposync.

All keys are optional. The file is looked up at ``$REPOSYNC_CONFIG`` first,
then ``~/.config/reposync/config.yaml``. A missing file means defaults.

Example::

    reference_board: eve
    default_reference: /work/cros-mirror
    sync_jobs: 16
    arc_branches:
      udc: udc-arc
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from reposync.errors import ConfigurationError

CONFIG_ENV_VAR = "REPOSYNC_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/reposync/config.yaml")

DEFAULT_REFERENCE_BOARD = "eve"

# Release channel -> internal manifest branch.
DEFAULT_ARC_BRANCHES: dict[str, str] = {
    "pi": "pi-arc",
    "rvc": "rvc-arc",
    "tm": "tm-arc",
    "master": "master-arc-dev",
}


@dataclass
class Settings:
    """Resolved configuration for one invocation."""

    reference_board: str = DEFAULT_REFERENCE_BOARD
    default_reference: str | None = None
    repo_tool: str = "repo"
    gsutil_tool: str = "gsutil"
    sync_jobs: int | None = None
    cros_manifest_url: str = "https://chrome-internal.googlesource.com/chromeos/manifest-internal"
    cros_manifest_versions_url: str = (
        "https://chrome-internal.googlesource.com/chromeos/manifest-versions"
    )
    arc_manifest_url: str = "https://googleplex-android.googlesource.com/a/platform/manifest"
    arc_branches: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ARC_BRANCHES))


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from YAML, falling back to defaults.

    Args:
        path: Explicit config file. When omitted, ``$REPOSYNC_CONFIG`` or the
              default location is used, and a missing file is not an error.

    Raises:
        ConfigurationError: If the file is unreadable, malformed, or has
                            unknown keys, or an explicit path does not exist.
    """
    explicit = path is not None or bool(os.environ.get(CONFIG_ENV_VAR))
    config_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH).expanduser()

    if not config_path.exists():
        if explicit:
            raise ConfigurationError(f"Config file not found: {config_path}")
        return Settings()

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read config {config_path}: {e}") from e

    return settings_from_dict(data or {}, source=str(config_path))


def settings_from_dict(data: dict, source: str = "<config>") -> Settings:
    """Build ``Settings`` from a parsed mapping."""
    if not isinstance(data, dict):
        raise ConfigurationError(f"{source}: expected a mapping at the top level")

    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"{source}: unknown key(s): {', '.join(unknown)}")

    values = dict(data)
    branches = values.pop("arc_branches", None) or {}
    if not isinstance(branches, dict):
        raise ConfigurationError(f"{source}: arc_branches must be a mapping")

    jobs = values.get("sync_jobs")
    if jobs is not None and (type(jobs) is not int or jobs < 1):
        raise ConfigurationError(f"{source}: sync_jobs must be a positive integer")

    settings = Settings(**values)
    settings.arc_branches.update({str(k): str(v) for k, v in branches.items()})
    return settings
