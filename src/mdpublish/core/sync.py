"""Reconciliation of the source tree against remote pages, and per-target sync orchestration"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mdpublish.config import Settings, Target, resolve_target_src
from mdpublish.core.blocks import markdown_to_blocks
from mdpublish.core.cache import cache_file_path, load_cache, save_cache
from mdpublish.core.index import build_source_path_index, discover_managed_pages
from mdpublish.core.merkle import DiffResult, build_merkle_tree, diff_merkle_trees
from mdpublish.core.models import DocumentNode, SyncError, SyncResult
from mdpublish.core.pages import append_blocks, create_page, replace_page_content, update_page_title
from mdpublish.core.remote import PageStore
from mdpublish.core.scan import scan_source
from mdpublish.core.tree import build_page_tree
from mdpublish.core.utils.paths import get_parent_source_path, is_readme


logger = logging.getLogger(__name__)

DRY_RUN_PREFIX = "dry-run-"


@dataclass
class SyncOptions:
    dry_run: bool = False
    force:   bool = False


def _label(node: DocumentNode) -> str:
    return node.source_path or "(root)"


def changed_paths(diff: DiffResult) -> set[str]:
    """Paths whose page must be rewritten: added, modified, and directories that lost their README."""
    changes = diff.changed
    changes.update(get_parent_source_path(p) or "" for p in diff.deleted if is_readme(p))
    return changes


def is_changed(node: DocumentNode, changes: Optional[set[str]]) -> bool:
    """None means full resync; directories also change with their README."""
    if changes is None:
        return True
    if node.source_path in changes:
        return True
    return node.readme_source_path is not None and node.readme_source_path in changes


async def reconcile(
    node: DocumentNode,
    parent_id: str,
    index: dict[str, str],
    changes: Optional[set[str]],
    result: SyncResult,
    store: Optional[PageStore],
    dry_run: bool = False,
    ) -> str:
    """Create, update, or skip the page for node, then recurse into its children.

    The node's own page id is resolved before any child starts, so children always
    see their parent's id. Failures are recorded in result and never abort the
    walk; children of a failed creation get '' as their parent.
    """
    page_id = index.get(node.source_path, "")
    try:
        if not page_id:
            if dry_run:
                page_id = f"{DRY_RUN_PREFIX}{node.source_path or 'root'}"
                logger.info("[dry-run] create %s (%s)", node.title, _label(node))
            else:
                logger.info("Creating %s (%s)", node.title, _label(node))
                page_id = await create_page(store, parent_id, node.title, node.source_path)
                index[node.source_path] = page_id
                if node.content:
                    await append_blocks(store, page_id, markdown_to_blocks(node.content))
            result.created += 1
        elif is_changed(node, changes):
            if dry_run:
                logger.info("[dry-run] update %s (%s)", node.title, _label(node))
            else:
                logger.info("Updating %s (%s)", node.title, _label(node))
                await update_page_title(store, page_id, node.title)
                await replace_page_content(store, page_id, markdown_to_blocks(node.content))
            result.updated += 1
        else:
            logger.debug("Unchanged %s", _label(node))
            result.skipped += 1
    except Exception as e:
        logger.error("Failed to sync %s: %s", _label(node), e)
        result.errors.append(SyncError(path=_label(node), error=str(e)))

    if node.children:
        await asyncio.gather(*(
            reconcile(child, page_id, index, changes, result, store, dry_run)
            for child in node.children
        ))
    return page_id


async def sync_target(
    target: Target,
    store: Optional[PageStore],
    settings: Settings,
    options: Optional[SyncOptions] = None,
    config_dir: Path = Path("."),
    ) -> SyncResult:
    """Sync one target: scan, hash, diff against cache, discover, reconcile, save cache.

    store may be None for a dry run. Scan, validation and discovery errors
    propagate; per-page errors are collected in the returned SyncResult.
    """
    options = options or SyncOptions()
    src_root = resolve_target_src(target, config_dir)
    logger.info("Syncing target %s: %s -> %s", target.name, src_root, target.parent_page_id)

    entries = scan_source(src_root)
    tree = build_merkle_tree(entries)
    page_tree = build_page_tree(entries, src_root.name)

    cache_path = cache_file_path(target.name, config_dir, settings.cache_dir)
    cached = None if options.force else load_cache(cache_path)
    changes: Optional[set[str]] = None
    if cached is not None:
        diff = diff_merkle_trees(cached.tree, tree)
        changes = changed_paths(diff)
        logger.info(
            "Changes since last sync: %d added, %d modified, %d deleted",
            len(diff.added), len(diff.modified), len(diff.deleted),
        )
        for path in diff.deleted:
            logger.warning("Removed locally, remote page left in place: %s", path)

    if options.dry_run:
        index: dict[str, str] = {}
    else:
        managed = await discover_managed_pages(store, target.parent_page_id)
        index = build_source_path_index(managed)
        logger.info("Found %d managed page(s)", len(managed))

    result = SyncResult()
    await reconcile(page_tree, target.parent_page_id, index, changes, result, store, options.dry_run)

    if not options.dry_run:
        save_cache(cache_path, tree)
    return result
