"""Tests for version resolution in the ChromeOS and ARC namespaces."""

import pytest

from reposync.config import Settings
from reposync.errors import VersionResolutionError
from reposync.models import RepoKind
from reposync.versions import VersionResolver, resolve_version, version_key


# --- ChromeOS ---


def test_tot_passes_through_without_lookup(runner):
    spec = resolve_version("tot", RepoKind.CROS, runner=runner)
    assert spec.resolved == "tot"
    assert spec.raw_token == "tot"
    assert runner.calls == []


def test_build_version_resolves_to_full_version(runner):
    spec = resolve_version("15278.0.0", RepoKind.CROS, runner=runner)
    assert spec.resolved == "R110-15278.0.0"
    assert spec.kind == RepoKind.CROS
    assert runner.calls[0].args == [
        "gsutil", "ls", "gs://chromeos-image-archive/eve-release/",
    ]


def test_milestone_resolves_to_newest_release(runner):
    spec = resolve_version("R110", RepoKind.CROS, runner=runner)
    assert spec.resolved == "R110-15278.64.0"


def test_full_version_must_exist(runner):
    assert resolve_version("R109-15236.0.0", RepoKind.CROS, runner=runner).resolved == "R109-15236.0.0"
    with pytest.raises(VersionResolutionError):
        resolve_version("R109-15236.1.0", RepoKind.CROS, runner=runner)


def test_unknown_build_is_fatal(runner):
    with pytest.raises(VersionResolutionError, match="no release found for board eve"):
        resolve_version("99999.0.0", RepoKind.CROS, runner=runner)


def test_malformed_token_fails_before_lookup(runner):
    with pytest.raises(VersionResolutionError):
        resolve_version("latest", RepoKind.CROS, runner=runner)
    assert runner.calls == []


def test_failed_archive_listing_is_fatal(runner):
    runner.fail.add("ls")
    with pytest.raises(VersionResolutionError, match="403"):
        resolve_version("15278.0.0", RepoKind.CROS, runner=runner)


def test_reference_board_is_configurable(runner):
    runner.archive = "gs://chromeos-image-archive/brya-release/R120-15662.0.0/\n"
    settings = Settings(reference_board="brya")
    spec = VersionResolver(settings, runner=runner).resolve("15662.0.0", RepoKind.CROS)
    assert spec.resolved == "R120-15662.0.0"
    assert "brya-release" in runner.calls[0].args[-1]


def test_arc_channel_is_not_a_cros_version(runner):
    with pytest.raises(VersionResolutionError):
        resolve_version("rvc", RepoKind.CROS, runner=runner)


def test_version_key_orders_numerically():
    versions = ["R110-15278.9.0", "R110-15278.10.0", "R99-14000.0.0"]
    assert max(versions, key=version_key) == "R110-15278.10.0"


# --- ARC ---


def test_arc_channels_map_to_branches():
    assert resolve_version("rvc", RepoKind.ARC).resolved == "rvc-arc"
    assert resolve_version("tm", RepoKind.ARC).resolved == "tm-arc"
    assert resolve_version("master", RepoKind.ARC).resolved == "master-arc-dev"


def test_arc_branch_name_passes_through():
    assert resolve_version("master-arc-dev", RepoKind.ARC).resolved == "master-arc-dev"


def test_unknown_arc_token_is_fatal():
    with pytest.raises(VersionResolutionError, match="unknown branch"):
        resolve_version("tot", RepoKind.ARC)


def test_arc_branches_from_settings():
    settings = Settings()
    settings.arc_branches["udc"] = "udc-arc"
    assert resolve_version("udc", RepoKind.ARC, settings=settings).resolved == "udc-arc"


def test_unset_kind_cannot_be_resolved():
    with pytest.raises(VersionResolutionError):
        resolve_version("tot", RepoKind.UNSET)


def test_unlaunchable_gsutil_is_a_resolution_error(tmp_path):
    tool = tmp_path / "gsutil"
    tool.write_text("#!/bin/sh\n")
    tool.chmod(0o644)
    settings = Settings(gsutil_tool=str(tool))
    with pytest.raises(VersionResolutionError, match="Cannot run"):
        resolve_version("15278.0.0", RepoKind.CROS, settings=settings)
