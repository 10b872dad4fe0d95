"""Unit tests for core/tree.py"""

from mdpublish.core.models import ScanEntry
from mdpublish.core.tree import build_page_tree


def _file(path, content=""):
    return ScanEntry(source_path=path, is_directory=False, content=content)


def _dir(path):
    return ScanEntry(source_path=path, is_directory=True)


def _find(node, path):
    if node.source_path == path:
        return node
    for child in node.children:
        found = _find(child, path)
        if found is not None:
            return found
    return None


def test_root_takes_readme_title_and_content():
    """The root README supplies the root title and body but is not its own page."""
    root = build_page_tree([_file("README.md", "# Handbook\nWelcome"), _file("intro.md", "# Intro")], "docs")
    assert root.source_path == ""
    assert root.title == "Handbook"
    assert root.content == "# Handbook\nWelcome"
    assert root.readme_source_path == "README.md"
    assert [c.source_path for c in root.children] == ["intro.md"]


def test_root_without_readme_uses_directory_name():
    root = build_page_tree([_file("a.md", "text")], "my-docs")
    assert root.title == "my-docs"
    assert root.content == ""
    assert root.readme_source_path is None


def test_file_title_falls_back_to_stem():
    root = build_page_tree([_file("getting-started.md", "no heading")], "docs")
    assert root.children[0].title == "getting-started"


def test_directory_readme_titles_directory():
    entries = [_dir("guide"), _file("guide/readme.md", "# The Guide"), _file("guide/setup.md", "# Setup")]
    root = build_page_tree(entries, "docs")
    guide = _find(root, "guide")
    assert guide.is_directory
    assert guide.title == "The Guide"
    assert guide.readme_source_path == "guide/readme.md"
    assert [c.title for c in guide.children] == ["Setup"]


def test_missing_directories_are_synthesized():
    """Files whose directories were never listed still hang under directory pages."""
    root = build_page_tree([_file("a/b/deep.md", "# Deep")], "docs")
    a = _find(root, "a")
    b = _find(root, "a/b")
    assert a is not None and b is not None
    assert b in a.children
    assert _find(b, "a/b/deep.md").title == "Deep"


def test_empty_directory_becomes_page():
    root = build_page_tree([_dir("empty")], "docs")
    empty = _find(root, "empty")
    assert empty.is_directory and empty.children == []
    assert empty.title == "empty"


def test_duplicate_readme_variants_warn(caplog):
    """With README.md and readme.md side by side, the first is used and the other is reported."""
    entries = [_file("README.md", "# Upper"), _file("readme.md", "# Lower"), _file("a.md", "# A")]
    with caplog.at_level("WARNING", logger="mdpublish.core.tree"):
        root = build_page_tree(entries, "docs")
    assert root.title == "Upper"
    assert root.readme_source_path == "README.md"
    assert [c.source_path for c in root.children] == ["a.md"]
    assert "Ignoring readme.md" in caplog.text
