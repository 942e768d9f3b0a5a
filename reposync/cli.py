"""reposync CLI — the main entry point for syncing source checkouts."""

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from reposync import __version__

console = Console()

EXIT_FAILURE = 1


def _load_settings(config_path: str | None):
    from reposync.config import load_settings

    return load_settings(config_path)


def _fail(error) -> None:
    """Print an orchestration error and exit non-zero."""
    from reposync.errors import SyncFailure

    console.print(f"\n[red]FAILED[/] {escape(str(error))}", soft_wrap=True)
    # Streamed output is already on the terminal.
    if isinstance(error, SyncFailure) and error.outcome.output and not error.outcome.streamed:
        console.print(
            Panel(
                Text(error.outcome.output.rstrip()),
                title=f"{error.step} output",
                border_style="red",
            )
        )
    raise SystemExit(EXIT_FAILURE)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Minimum severity of log lines",
)
def main(log_level: str):
    """reposync — bring ChromeOS and Android/ARC checkouts to a known version.

    Detects what kind of tree a directory holds, resolves symbolic version
    names, refreshes an optional reference mirror, and runs the sync.
    """
    from reposync.log import configure_logging

    configure_logging(log_level)


# ── Sync ─────────────────────────────────────────────────────────────


@main.command()
@click.option(
    "--cros",
    is_flag=False,
    flag_value="",
    default=None,
    help="Target cros repo dir. If given without a value, the current directory is used.",
)
@click.option(
    "--arc",
    is_flag=False,
    flag_value="",
    default=None,
    help="Target android repo dir. If given without a value, the current directory is used.",
)
@click.option("--reference", default=None, help="Path to a local reference repo to speed up syncing")
@click.option(
    "--version",
    "version",
    required=True,
    help="Version to sync. cros: 15278.0.0, R110, tot. arc: rvc, tm, master",
)
@click.option("--force", is_flag=True, help="Destructive sync (discard local changes)")
@click.option("--verbose", is_flag=True, help="Output the repo sync log as it happens")
@click.option("--config", "config_path", default=None, help="Path to a YAML config file")
@click.option("--repo", "repo_tool", default=None, hidden=True)
def sync(
    cros: str | None,
    arc: str | None,
    reference: str | None,
    version: str,
    force: bool,
    verbose: bool,
    config_path: str | None,
    repo_tool: str | None,
):
    """Synchronize a cros or android/arc repository.

    Exactly one of --cros or --arc must be given.
    """
    from reposync.errors import ReposyncError
    from reposync.models import SyncRequest
    from reposync.sync.orchestrator import run_sync, select_kind

    request = SyncRequest(
        version=version,
        cros=cros,
        arc=arc,
        reference=reference,
        force=force,
        verbose=verbose,
        repo_tool=repo_tool,
    )

    try:
        select_kind(request)
        settings = _load_settings(config_path)
        report = run_sync(request, settings)
    except ReposyncError as e:
        _fail(e)
        return

    console.print(Panel(Text(report.summary()), title="Sync Result"))
    if report.kind_overridden:
        console.print(
            f"[yellow]![/] Requested {report.requested_kind.label}, "
            f"but an existing {report.target.kind.label} tree was found and synced.",
            soft_wrap=True,
        )


# ── Detect ───────────────────────────────────────────────────────────


@main.command()
@click.argument("path", required=False, default=None)
def detect(path: str | None):
    """Show what kind of tree PATH holds (default: current directory)."""
    from reposync.detect import detect_tree
    from reposync.models import TreeState
    from reposync.utils.paths import resolve_target

    detection = detect_tree(resolve_target(path))

    style = "red" if detection.state == TreeState.AMBIGUOUS else "green"
    kind = detection.detected_kind

    console.print(
        f"\n[bold blue]reposync[/] — Tree detection: {escape(str(detection.path))}\n",
        soft_wrap=True,
    )
    console.print(f"  State:   [{style}]{detection.state.value}[/]")
    console.print(f"  Kind:    {kind.label if kind else '-'}")
    console.print(f"  Version: {escape(detection.prior_version or '-')}")

    if detection.state == TreeState.AMBIGUOUS:
        raise SystemExit(EXIT_FAILURE)


# ── Resolve ──────────────────────────────────────────────────────────


@main.command()
@click.argument("version")
@click.option("--arc", is_flag=True, help="Resolve an android/arc branch instead of a cros version")
@click.option("--board", default=None, help="Reference board for cros lookups")
@click.option("--config", "config_path", default=None, help="Path to a YAML config file")
def resolve(version: str, arc: bool, board: str | None, config_path: str | None):
    """Print the canonical version VERSION resolves to."""
    from reposync.errors import ReposyncError
    from reposync.models import RepoKind
    from reposync.versions import VersionResolver

    try:
        settings = _load_settings(config_path)
        if board:
            settings.reference_board = board
        spec = VersionResolver(settings).resolve(version, RepoKind.ARC if arc else RepoKind.CROS)
    except ReposyncError as e:
        _fail(e)
        return

    console.print(f"  [cyan]{escape(spec.raw_token)}[/] -> [green]{escape(spec.resolved)}[/]")


if __name__ == "__main__":
    main()
