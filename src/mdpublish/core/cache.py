"""Per-target persistence of the Merkle tree from the last sync run"""

import logging
import re
import time
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from mdpublish.core.merkle import MerkleNode


logger = logging.getLogger(__name__)

CACHE_VERSION = 1
CACHE_DIR = ".md-publish-cache"
_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9_-]")


class MerkleCache(BaseModel):
    version:   int
    tree:      MerkleNode
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))   # epoch ms


def cache_file_path(target_name: str, config_dir: Path, cache_dir: str = CACHE_DIR) -> Path:
    """Deterministic cache location for a target; unsafe filename chars become '_'."""
    safe_name = _UNSAFE_CHARS_RE.sub("_", target_name)
    return config_dir / cache_dir / f"{safe_name}.json"


def load_cache(path: Path) -> MerkleCache | None:
    """Return the cached record, or None when missing, unreadable, or from another version."""
    if not path.exists():
        return None
    try:
        cache = MerkleCache.model_validate_json(path.read_text(encoding="utf-8"))
    except (OSError, ValidationError) as e:
        logger.warning("Ignoring unreadable cache %s: %s", path, e)
        return None
    if cache.version != CACHE_VERSION:
        logger.info("Cache %s has version %d (expected %d); forcing full sync", path, cache.version, CACHE_VERSION)
        return None
    return cache


def save_cache(path: Path, tree: MerkleNode) -> MerkleCache:
    """Write tree as the new baseline for path, creating the cache directory."""
    cache = MerkleCache(version=CACHE_VERSION, tree=tree)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(cache.model_dump_json(indent=2), encoding="utf-8")
    logger.debug("Saved cache %s", path)
    return cache
