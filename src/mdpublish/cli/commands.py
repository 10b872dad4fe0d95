"""CLI command implementations"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdpublish.config import Settings, Target, get_notion_token, load_config, resolve_target_src
from mdpublish.core.cache import cache_file_path, load_cache
from mdpublish.core.merkle import build_merkle_tree, diff_merkle_trees
from mdpublish.core.models import SyncResult
from mdpublish.core.remote import ThrottledStore
from mdpublish.core.scan import scan_source
from mdpublish.core.sync import SyncOptions, sync_target
from mdpublish.errors import PublishError
from mdpublish.log import init_logging
from mdpublish.notion.client import NotionClient


ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to md-publish.yml")]
TargetOption = Annotated[Optional[str], typer.Option("--target", "-t", help="Only process this target")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(path: Optional[Path], overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(path, overrides=overrides)
    except PublishError as e:
        _fail(str(e))


def _config_dir(path: Optional[Path]) -> Path:
    return path.parent if path is not None else Path(".")


def _select_targets(settings: Settings, name: Optional[str]) -> list[Target]:
    if not name:
        return settings.targets
    targets = [t for t in settings.targets if t.name == name]
    if not targets:
        _fail(f"Target not found: {name}")
    return targets


async def _run_sync(
    settings: Settings,
    targets: list[Target],
    options: SyncOptions,
    config_dir: Path,
    ) -> SyncResult:
    """Sync targets in order, summing their results into one."""
    total = SyncResult()
    if options.dry_run:
        for target in targets:
            _merge(total, await sync_target(target, None, settings, options, config_dir))
        return total

    async with NotionClient(get_notion_token(settings), settings.notion) as client:
        store = ThrottledStore(client, settings.concurrency, settings.max_retries, settings.retry_base_delay)
        for target in targets:
            _merge(total, await sync_target(target, store, settings, options, config_dir))
    return total


def _merge(total: SyncResult, result: SyncResult) -> None:
    total.created += result.created
    total.updated += result.updated
    total.skipped += result.skipped
    total.errors.extend(result.errors)


def sync_cmd(
    config: ConfigOption = None,
    target: TargetOption = None,
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Print the plan without writing to Notion")] = False,
    force: Annotated[bool, typer.Option("--force", "-f", help="Ignore the cache and update every page")] = False,
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="debug, info, warning or error")] = None,
    ):
    """Publish every configured target (or one) to Notion."""
    settings = _settings(config, overrides={"log_level": log_level})
    init_logging(settings.log_level)
    targets = _select_targets(settings, target)

    if dry_run:
        typer.echo("=== DRY RUN ===")
    try:
        result = asyncio.run(_run_sync(settings, targets, SyncOptions(dry_run=dry_run, force=force), _config_dir(config)))
    except (PublishError, OSError) as e:
        _fail("Sync failed", e)

    typer.echo(
        f"Sync complete - "
        f"{result.created} created, "
        f"{result.updated} updated, "
        f"{result.skipped} skipped"
    )
    if result.errors:
        typer.echo(f"Errors ({len(result.errors)}):", err=True)
        for err in result.errors:
            typer.echo(f"  - {err.path}: {err.error}", err=True)
        raise typer.Exit(1)


def status_cmd(
    config: ConfigOption = None,
    target: TargetOption = None,
    ):
    """Show local changes since the last sync without contacting Notion."""
    settings = _settings(config)
    config_dir = _config_dir(config)

    for t in _select_targets(settings, target):
        try:
            tree = build_merkle_tree(scan_source(resolve_target_src(t, config_dir)))
        except PublishError as e:
            _fail(f"Cannot scan target {t.name}", e)
        cached = load_cache(cache_file_path(t.name, config_dir, settings.cache_dir))
        diff = diff_merkle_trees(cached.tree if cached else None, tree)

        typer.echo(f"{t.name}:" + ("" if cached else " (no cache, full sync pending)"))
        for label, paths in (("added", diff.added), ("modified", diff.modified), ("deleted", diff.deleted)):
            for path in paths:
                typer.echo(f"  {label}: {path}")
        if not diff.has_changes:
            typer.echo("  up to date")
