"""CLI application entry point."""

from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich.table import Table

from source_provider.config.loader import CONFIG_FILENAME, load_config
from source_provider.config.schema import SourceProviderConfig
from source_provider.core.errors import SourceError
from source_provider.core.provider import SourceProvider
from source_provider.fetch.workspace import Workspace
from source_provider.utils.output import (
    console,
    print_error,
    print_info,
    print_success,
    print_warning,
    setup_logging,
)
from source_provider.utils.paths import expand_path

app = typer.Typer(
    name="source-provider",
    help="Fetch package sources and materialize clean copies for building",
    no_args_is_help=True,
)

# Cache subcommand group
cache_app = typer.Typer(
    name="cache",
    help="Inspect and prune the workspace cache",
    no_args_is_help=True,
)
app.add_typer(cache_app, name="cache")


# Template for init command
TEMPLATE_CONFIG = """version: "1.0"

settings:
  workspace_dir: "~/.cache/source-provider"
  target_dirs:
    - "build/sources"
  registry_url: "https://static.crates.io/crates"

sources: {}
  # Example: exact version from the registry
  # serde:
  #   registry: serde
  #   version: "1.0.197"

  # Example: git repository, tracked at its remote HEAD
  # rand:
  #   git: "https://github.com/rust-random/rand"

  # Example: local directory
  # mine:
  #   path: "./crates/mine"
"""

ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config file (merged on top of the default search)",
)
WorkspaceOption = typer.Option(
    None,
    "--workspace",
    "-w",
    help="Override the workspace (cache) directory",
)
RegistryOption = typer.Option(
    None, "--registry", help="Registry package as NAME@VERSION"
)
GitOption = typer.Option(None, "--git", help="Git repository URL")
PathOption = typer.Option(None, "--path", help="Local source directory")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show debug logging"
    ),
):
    """Fetch package sources and materialize clean copies for building."""
    setup_logging(verbose)


def _load(config: Optional[Path]) -> SourceProviderConfig:
    """Load configuration, exiting with a readable error on failure."""
    try:
        return load_config(config)
    except ValidationError as e:
        print_error("Configuration validation failed:")
        console.print(e)
        raise typer.Exit(1)
    except (OSError, yaml.YAMLError) as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(1)


def _workspace(cfg: SourceProviderConfig, override: Optional[Path]) -> Workspace:
    settings = cfg.settings
    if override is not None:
        settings = settings.model_copy(update={"workspace_dir": str(override)})
    return Workspace.from_settings(settings)


def provider_from_options(
    registry: Optional[str], git: Optional[str], path: Optional[Path]
) -> SourceProvider:
    """Build a provider from exactly one of the origin options.

    Raises:
        typer.Exit: If not exactly one origin is given or it is malformed
    """
    given = [o for o in (registry, git, path) if o is not None]
    if len(given) != 1:
        print_error("Exactly one of --registry, --git or --path is required")
        raise typer.Exit(1)

    if registry is not None:
        name, sep, version = registry.rpartition("@")
        if not sep or not name or not version:
            print_error(f"Expected NAME@VERSION, got: {registry}")
            raise typer.Exit(1)
        return SourceProvider.from_registry(name, version)
    if git is not None:
        return SourceProvider.from_repository(git)
    return SourceProvider.from_local_directory(path)


@app.command()
def fetch(
    registry: Optional[str] = RegistryOption,
    git: Optional[str] = GitOption,
    path: Optional[Path] = PathOption,
    config: Optional[Path] = ConfigOption,
    workspace: Optional[Path] = WorkspaceOption,
):
    """Fetch a source into the workspace cache."""
    provider = provider_from_options(registry, git, path)
    ws = _workspace(_load(config), workspace)

    try:
        provider.fetch(ws)
    except SourceError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Fetched {provider}")
    if commit := provider.commit(ws):
        print_info(f"Commit: {commit}")


@app.command()
def materialize(
    dest: Path = typer.Argument(..., help="Directory to create (replaced if it exists)"),
    registry: Optional[str] = RegistryOption,
    git: Optional[str] = GitOption,
    path: Optional[Path] = PathOption,
    config: Optional[Path] = ConfigOption,
    workspace: Optional[Path] = WorkspaceOption,
    no_fetch: bool = typer.Option(
        False,
        "--no-fetch",
        help="Use the cached copy only, fail if it was never fetched",
    ),
):
    """Copy a source to DEST, deleting anything already there."""
    provider = provider_from_options(registry, git, path)
    ws = _workspace(_load(config), workspace)

    try:
        if not no_fetch:
            provider.fetch(ws)
        provider.materialize(ws, dest)
    except SourceError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Materialized {provider} at {dest}")


@app.command()
def sync(
    config: Optional[Path] = ConfigOption,
    workspace: Optional[Path] = WorkspaceOption,
    target: Optional[str] = typer.Option(
        None,
        "--target",
        "-t",
        help="Override target directory",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be done without making changes",
    ),
):
    """Fetch every configured source and materialize it into the targets.

    Each source lands in <target>/<source name>, replacing what was there.
    """
    cfg = _load(config)

    if not cfg.sources:
        print_warning("No sources configured")
        return

    target_dirs = [target] if target else cfg.settings.target_dirs

    if dry_run:
        print_warning("DRY RUN MODE - No changes will be made")
        for target_dir_str in target_dirs:
            target_dir = expand_path(target_dir_str)
            print_info(f"Would materialize {len(cfg.sources)} source(s) into {target_dir}")
            for name, source in cfg.sources.items():
                console.print(f"  • {name}: {source.to_provider()}")
        return

    ws = _workspace(cfg, workspace)
    errors = []

    for name, source in cfg.sources.items():
        provider = source.to_provider()
        try:
            provider.fetch(ws)
            for target_dir_str in target_dirs:
                dest = expand_path(target_dir_str) / name
                provider.materialize(ws, dest)
                print_success(f"{name}: {provider} -> {dest}")
        except SourceError as e:
            print_error(f"{name}: {e}")
            errors.append(name)

    if errors:
        console.print()
        print_error(f"Failed to sync {len(errors)} source(s): {', '.join(errors)}")
        raise typer.Exit(1)


@app.command()
def init(
    path: Optional[Path] = typer.Argument(
        None,
        help=f"Path where config should be created (default: ./{CONFIG_FILENAME})",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite existing config file",
    ),
):
    """Create a sources.yaml template."""
    if path is None:
        path = Path.cwd() / CONFIG_FILENAME

    if path.exists() and not force:
        print_error(f"Config file already exists: {path}")
        print_info("Use --force to overwrite")
        raise typer.Exit(1)

    try:
        path.write_text(TEMPLATE_CONFIG)
    except OSError as e:
        print_error(f"Failed to create config: {e}")
        raise typer.Exit(1)

    print_success(f"Created config file: {path}")
    print_info("Edit the file to configure your sources")


@app.command()
def validate(config: Optional[Path] = ConfigOption):
    """Validate the configuration."""
    cfg = _load(config)
    print_success("Configuration is valid")

    console.print()
    console.print(f"[bold]Workspace:[/bold] {expand_path(cfg.settings.workspace_dir)}")
    console.print(f"[bold]Sources:[/bold] {len(cfg.sources)}")
    for name, source in cfg.sources.items():
        console.print(f"  • {name}: {source.to_provider()}")

    console.print()
    console.print("[bold]Target directories:[/bold]")
    for target in cfg.settings.target_dirs:
        console.print(f"  • {target}")


@cache_app.command("list")
def cache_list(
    config: Optional[Path] = ConfigOption,
    workspace: Optional[Path] = WorkspaceOption,
):
    """List cached sources."""
    ws = _workspace(_load(config), workspace)
    entries = list(ws.entries())

    if not entries:
        print_info(f"Workspace is empty: {ws.root}")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Kind", style="green")
    table.add_column("Source", no_wrap=True)
    table.add_column("Revision")
    table.add_column("Fetched At")

    for kind, _, metadata in entries:
        if kind == Workspace.REGISTRY_KIND:
            source = f"{metadata.get('name', '')} {metadata.get('version', '')}"
            revision = (metadata.get("sha256") or "")[:12]
        else:
            source = metadata.get("url", "")
            revision = (metadata.get("commit") or "")[:12]
        table.add_row(kind, source, revision, metadata.get("fetched_at", ""))

    console.print(table)


@cache_app.command("purge")
def cache_purge(
    registry: Optional[str] = RegistryOption,
    git: Optional[str] = GitOption,
    config: Optional[Path] = ConfigOption,
    workspace: Optional[Path] = WorkspaceOption,
):
    """Remove one source from the cache."""
    provider = provider_from_options(registry, git, None)
    ws = _workspace(_load(config), workspace)

    if not provider.is_fetched(ws):
        print_warning(f"{provider} is not cached")
        return

    try:
        provider.purge(ws)
    except OSError as e:
        print_error(f"Failed to purge {provider}: {e}")
        raise typer.Exit(1)

    print_success(f"Purged {provider}")


@cache_app.command("clear")
def cache_clear(
    config: Optional[Path] = ConfigOption,
    workspace: Optional[Path] = WorkspaceOption,
    force: bool = typer.Option(
        False,
        "--force",
        help="Skip confirmation prompt",
    ),
):
    """Remove every cached source."""
    ws = _workspace(_load(config), workspace)

    if not force:
        confirm = typer.confirm(f"Remove everything in {ws.root}?", default=False)
        if not confirm:
            print_info("Cancelled")
            return

    try:
        ws.clear()
    except OSError as e:
        print_error(f"Failed to clear cache: {e}")
        raise typer.Exit(1)

    print_success(f"Cleared workspace: {ws.root}")


if __name__ == "__main__":
    app()
