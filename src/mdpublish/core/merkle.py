"""Merkle hash tree over the source tree and tree-shaped diffing between runs"""

from pydantic import BaseModel

from mdpublish.core.models import ScanEntry
from mdpublish.core.utils.hashing import compute_hash, compute_node_hash
from mdpublish.core.utils.paths import get_base_name, iter_ancestors, validate_source_path


class MerkleNode(BaseModel):
    """A file or directory hash; directories fold in their children's hashes."""
    source_path: str
    hash:        str
    children:    dict[str, "MerkleNode"] = {}

    @property
    def is_leaf(self) -> bool:
        return not self.children


class DiffResult(BaseModel):
    """Source paths that appeared, changed, or disappeared between two trees."""
    added:    list[str] = []
    modified: list[str] = []
    deleted:  list[str] = []

    @property
    def changed(self) -> set[str]:
        """Paths whose remote page needs writing (added or modified)."""
        return set(self.added) | set(self.modified)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.modified or self.deleted)


def _depth(source_path: str) -> int:
    return len(source_path.split("/")) if source_path else 0


def build_merkle_tree(entries: list[ScanEntry]) -> MerkleNode:
    """Build the hash tree for entries in two passes.

    Pass one collects the full path set, adding every ancestor directory (with
    empty content) that entries imply but do not list. Pass two folds hashes
    bottom-up, deepest paths first. Raises ValidationError on an invalid path.
    """
    contents: dict[str, str] = {"": ""}
    for entry in entries:
        path = validate_source_path(entry.source_path)
        contents[path] = entry.content or ""
        for ancestor in iter_ancestors(path):
            contents.setdefault(ancestor, "")

    children: dict[str, list[str]] = {path: [] for path in contents}
    for path in contents:
        parent = next(iter_ancestors(path), None)
        if parent is not None:
            children[parent].append(path)

    nodes: dict[str, MerkleNode] = {}
    for path in sorted(contents, key=_depth, reverse=True):
        own_hash = compute_hash(contents[path])
        kids = {get_base_name(c): nodes[c] for c in sorted(children[path])}
        node_hash = compute_node_hash(own_hash, [k.hash for k in kids.values()]) if kids else own_hash
        nodes[path] = MerkleNode(source_path=path, hash=node_hash, children=kids)

    return nodes[""]


def collect_paths(node: MerkleNode, paths: list[str]) -> list[str]:
    """Append every non-root source path under node (pre-order) to paths."""
    if node.source_path:
        paths.append(node.source_path)
    for name in sorted(node.children):
        collect_paths(node.children[name], paths)
    return paths


def _diff_nodes(old: MerkleNode, new: MerkleNode, result: DiffResult) -> None:
    if old.hash == new.hash:
        return

    for name in sorted(new.children):
        new_child = new.children[name]
        old_child = old.children.get(name)
        if old_child is None:
            collect_paths(new_child, result.added)
        elif old_child.hash != new_child.hash:
            if old_child.is_leaf and new_child.is_leaf:
                result.modified.append(new_child.source_path)
                continue
            if old_child.is_leaf or new_child.is_leaf:
                # file <-> directory switch: force a rebuild of this page
                result.modified.append(new_child.source_path)
            _diff_nodes(old_child, new_child, result)

    for name in sorted(old.children):
        if name not in new.children:
            collect_paths(old.children[name], result.deleted)


def diff_merkle_trees(old: MerkleNode | None, new: MerkleNode) -> DiffResult:
    """Classify every source path as added, modified, or deleted.

    Subtrees with equal root hashes are never descended into. Deleted paths are
    reported only; nothing downstream removes remote pages.
    """
    result = DiffResult()
    if old is None:
        collect_paths(new, result.added)
        return result
    _diff_nodes(old, new, result)
    return result
