"""Integration tests for the sync and status commands"""

from typer.testing import CliRunner

from mdpublish.cli.cli import app


CONFIG = """\
version: 1
targets:
  - name: docs
    src: ./docs
    parent_page_id: root-page
"""


def _project(tmp_path, write_tree):
    write_tree(tmp_path, {
        "md-publish.yml": CONFIG,
        "docs/README.md": "# Docs\n",
        "docs/guide.md": "# Guide\n\nText.\n",
    })
    return tmp_path


def test_sync_dry_run(tmp_path, monkeypatch, write_tree):
    """--dry-run plans every page without a token or a cache write."""
    monkeypatch.chdir(_project(tmp_path, write_tree))
    monkeypatch.delenv("NOTION_TOKEN", raising=False)

    result = CliRunner().invoke(app, ["sync", "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "=== DRY RUN ===" in result.output
    assert "2 created, 0 updated, 0 skipped" in result.output
    assert not (tmp_path / ".md-publish-cache").exists()


def test_sync_with_explicit_config_path(tmp_path, write_tree):
    _project(tmp_path, write_tree)
    result = CliRunner().invoke(app, ["sync", "--dry-run", "--config", str(tmp_path / "md-publish.yml")])
    assert result.exit_code == 0, result.output


def test_sync_missing_token_fails(tmp_path, monkeypatch, write_tree):
    monkeypatch.chdir(_project(tmp_path, write_tree))
    monkeypatch.delenv("NOTION_TOKEN", raising=False)

    result = CliRunner().invoke(app, ["sync"])
    assert result.exit_code == 1
    assert "NOTION_TOKEN" in result.output


def test_sync_unknown_target(tmp_path, monkeypatch, write_tree):
    monkeypatch.chdir(_project(tmp_path, write_tree))
    result = CliRunner().invoke(app, ["sync", "--dry-run", "--target", "nope"])
    assert result.exit_code == 1
    assert "Target not found: nope" in result.output


def test_sync_missing_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(app, ["sync"])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_sync_missing_source_dir(tmp_path, monkeypatch, write_tree):
    write_tree(tmp_path, {"md-publish.yml": CONFIG})
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(app, ["sync", "--dry-run"])
    assert result.exit_code == 1
    assert "Source directory does not exist" in result.output


def test_status_without_cache(tmp_path, monkeypatch, write_tree):
    """status lists every path as added until the first sync."""
    monkeypatch.chdir(_project(tmp_path, write_tree))
    result = CliRunner().invoke(app, ["status"])
    assert result.exit_code == 0, result.output
    assert "docs: (no cache, full sync pending)" in result.output
    assert "added: guide.md" in result.output
    assert "added: README.md" in result.output


def test_sync_dry_run_with_invalid_utf8_file(tmp_path, monkeypatch, write_tree):
    """A file with undecodable bytes is published with replacement characters."""
    monkeypatch.chdir(_project(tmp_path, write_tree))
    (tmp_path / "docs" / "bad.md").write_bytes(b"# Bad\n\xff\xfe\n")

    result = CliRunner().invoke(app, ["sync", "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "3 created, 0 updated, 0 skipped" in result.output
