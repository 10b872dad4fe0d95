"""Source path normalization: platform paths to forward-slash root-relative identifiers"""

import os
from pathlib import Path

from mdpublish.errors import ValidationError


MD_SUFFIX = ".md"
README_NAME = "readme.md"


def to_posix_path(path: str) -> str:
    """Replace the platform separator with forward slashes."""
    return "/".join(path.split(os.sep))


def get_source_path(path: Path, src_root: Path) -> str:
    """Return the forward-slash path of path relative to src_root ('' for the root itself)."""
    rel = os.path.relpath(path, src_root)
    return "" if rel == "." else to_posix_path(rel)


def is_valid_source_path(source_path: str) -> bool:
    """True if source_path is root-relative and cannot escape the root."""
    if source_path.startswith("/") or source_path.startswith("."):
        return False
    return ".." not in source_path


def validate_source_path(source_path: str) -> str:
    """Return source_path unchanged or raise ValidationError."""
    if not is_valid_source_path(source_path):
        raise ValidationError(f"Invalid source path: {source_path!r}")
    return source_path


def get_parent_source_path(source_path: str) -> str | None:
    """Parent path of source_path, '' for top-level entries, None for the root."""
    if not source_path:
        return None
    return source_path.rsplit("/", 1)[0] if "/" in source_path else ""


def get_base_name(source_path: str, remove_ext: bool = False) -> str:
    """Last segment of source_path, optionally without its .md extension."""
    name = source_path.rsplit("/", 1)[-1]
    if remove_ext and name.lower().endswith(MD_SUFFIX):
        return name[:-len(MD_SUFFIX)]
    return name


def is_readme(source_path: str) -> bool:
    return get_base_name(source_path).lower() == README_NAME


def get_dir_source_path(source_path: str) -> str:
    """Directory containing a .md file; directories map to themselves."""
    if source_path.lower().endswith(MD_SUFFIX):
        return get_parent_source_path(source_path) or ""
    return source_path


def iter_ancestors(source_path: str):
    """Yield every proper ancestor of source_path, nearest first, ending with the root ''."""
    parent = get_parent_source_path(source_path)
    while parent is not None:
        yield parent
        parent = get_parent_source_path(parent)
