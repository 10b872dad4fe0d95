"""Source tree assembly: scan entries to a hierarchy of DocumentNodes"""

import logging

from mdpublish.core.models import DocumentNode, ScanEntry
from mdpublish.core.utils.paths import (
    get_base_name,
    get_parent_source_path,
    is_readme,
    iter_ancestors,
)
from mdpublish.core.utils.title import extract_h1, get_page_title, sanitize_title


logger = logging.getLogger(__name__)


def _depth(source_path: str) -> int:
    return len(source_path.split("/")) if source_path else 0


def _directory_node(source_path: str, fallback_title: str, readme: ScanEntry | None) -> DocumentNode:
    """Directory page titled and filled from its README when one exists."""
    title, content = fallback_title, ""
    if readme is not None and readme.content:
        h1 = extract_h1(readme.content)
        if h1:
            title = sanitize_title(h1)
        content = readme.content
    return DocumentNode(
        source_path=source_path,
        title=title,
        content=content,
        is_directory=True,
        readme_source_path=readme.source_path if readme is not None else None,
    )


def build_page_tree(entries: list[ScanEntry], root_name: str) -> DocumentNode:
    """Assemble scan entries into a DocumentNode tree rooted at the source directory.

    Directories implied by a file path but missing from entries are synthesized.
    README.md files become the content of their directory instead of separate pages;
    when case variants collide the first in scan order wins.
    """
    files = [e for e in entries if not e.is_directory]
    readmes: dict[str, ScanEntry] = {}
    for e in files:
        if not is_readme(e.source_path):
            continue
        parent = get_parent_source_path(e.source_path) or ""
        if parent in readmes:
            logger.warning("Ignoring %s: %s already provides the page for this directory",
                           e.source_path, readmes[parent].source_path)
            continue
        readmes[parent] = e

    dir_paths = {e.source_path for e in entries if e.is_directory}
    for f in files:
        dir_paths.update(a for a in iter_ancestors(f.source_path) if a)
    for d in list(dir_paths):
        dir_paths.update(a for a in iter_ancestors(d) if a)

    root = _directory_node("", sanitize_title(root_name), readmes.get(""))
    dirs: dict[str, DocumentNode] = {"": root}

    ordered = [e.source_path for e in entries if e.is_directory]
    ordered += sorted(dir_paths - set(ordered))
    for path in sorted(dict.fromkeys(ordered), key=_depth):
        node = _directory_node(path, sanitize_title(get_base_name(path)), readmes.get(path))
        dirs[path] = node
        dirs[get_parent_source_path(path) or ""].children.append(node)

    for f in files:
        if is_readme(f.source_path):
            continue
        content = f.content or ""
        dirs[get_parent_source_path(f.source_path) or ""].children.append(DocumentNode(
            source_path=f.source_path,
            title=get_page_title(content, get_base_name(f.source_path, remove_ext=True)),
            content=content,
            is_directory=False,
        ))

    return root
