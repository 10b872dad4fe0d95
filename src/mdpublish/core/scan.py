"""Filesystem discovery of markdown files and directories under a source root"""

import logging
from pathlib import Path

from mdpublish.core.models import ScanEntry
from mdpublish.core.utils.paths import MD_SUFFIX, get_source_path
from mdpublish.errors import NotFoundError


logger = logging.getLogger(__name__)


def _scan_dir(dir_path: Path, src_root: Path) -> list[ScanEntry]:
    entries: list[ScanEntry] = []
    for item in sorted(dir_path.iterdir(), key=lambda p: p.name):
        if item.name.startswith("."):
            continue
        source_path = get_source_path(item, src_root)
        if item.is_dir():
            entries.append(ScanEntry(source_path=source_path, is_directory=True))
            entries.extend(_scan_dir(item, src_root))
        elif item.suffix.lower() == MD_SUFFIX:
            entries.append(ScanEntry(
                source_path=source_path,
                is_directory=False,
                content=item.read_text(encoding="utf-8", errors="replace"),
            ))
    return entries


def scan_source(src_root: Path) -> list[ScanEntry]:
    """Return directories and .md files under src_root in sorted depth-first order.

    Undecodable bytes in a file become U+FFFD rather than failing the scan.
    """
    if not src_root.is_dir():
        raise NotFoundError(f"Source directory does not exist: {src_root}")
    entries = _scan_dir(src_root, src_root)
    logger.debug("Scanned %d entries under %s", len(entries), src_root)
    return entries
