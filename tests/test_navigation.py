"""Tests for navigation tree generation (mdocs.navigation)."""

import os

import pytest

from mdocs.navigation import build_navigation, navigation_paths


@pytest.fixture
def docs_tree(docs_root, create_doc):
    create_doc("index.md", "# Home\n", title="Home", order=0)
    create_doc("getting-started.md", "# Start\n", title="Getting Started", order=1)
    create_doc("faq.md", "# FAQ\n", title="FAQ")
    create_doc("guide/index.md", "# Guide\n", title="Guide", order=2)
    create_doc("guide/b.md", "", title="Beta", order=2)
    create_doc("guide/a.md", "", title="Alpha", order=2)
    create_doc("guide/c.md", "No front matter\n")
    create_doc("guide/quoted.md", "", title="Quoted", order='"1"')
    create_doc("api/ref.md", "# Reference\n")
    create_doc("_drafts/wip.md", "", title="Draft")
    create_doc(".cache/hidden.md", "", title="Hidden")
    (docs_root / "guide" / "broken.md").write_text("---\ntitle: [unclosed\n---\n")
    return docs_root


class TestBuildNavigation:
    def test_sections_sorted_by_order_then_title(self, docs_tree):
        sections = build_navigation(docs_tree)
        assert [(s.title, s.path, s.order) for s in sections] == [
            ("Home", "index.md", 0),
            ("Guide", "guide/index.md", 2),
            ("api", None, 999),
        ]

    def test_root_items_exclude_index(self, docs_tree):
        root_section = build_navigation(docs_tree)[0]
        assert [item.path for item in root_section.items] == ["getting-started.md", "faq.md"]

    def test_items_sorted_by_order_then_title(self, docs_tree):
        guide = build_navigation(docs_tree)[1]
        assert [(item.title, item.order) for item in guide.items] == [
            ("Quoted", 1),
            ("Alpha", 2),
            ("Beta", 2),
            ("c", 999),
        ]

    def test_drafts_hidden_and_unparseable_are_excluded(self, docs_tree):
        paths = navigation_paths(build_navigation(docs_tree))
        assert "_drafts/wip.md" not in paths
        assert ".cache/hidden.md" not in paths
        assert "guide/broken.md" not in paths

    def test_navigation_paths_collects_sections_and_items(self, docs_tree):
        assert navigation_paths(build_navigation(docs_tree)) == {
            "index.md",
            "getting-started.md",
            "faq.md",
            "guide/index.md",
            "guide/a.md",
            "guide/b.md",
            "guide/c.md",
            "guide/quoted.md",
            "api/ref.md",
        }

    def test_base_path_limits_tree(self, docs_tree):
        sections = build_navigation(docs_tree, "guide")
        assert [s.title for s in sections] == ["Guide"]

    def test_missing_directory(self, tmp_path):
        assert build_navigation(tmp_path / "nope") == []

    def test_empty_directory(self, docs_root):
        assert build_navigation(docs_root) == []

    def test_root_without_index_uses_default_title(self, docs_root, create_doc):
        create_doc("only.md", "", title="Only")
        sections = build_navigation(docs_root)
        assert sections[0].title == "Documentation"
        assert sections[0].path is None


class TestSymlinkedDirectories:
    def test_symlink_loop_is_not_followed(self, docs_root, create_doc):
        create_doc("guide/a.md", "", title="A")
        os.symlink(docs_root / "guide", docs_root / "guide" / "loop")

        sections = build_navigation(docs_root)

        assert len(sections) == 1
        assert navigation_paths(sections) == {"guide/a.md"}

    def test_directory_outside_root_is_not_published(self, docs_root, create_doc, tmp_path):
        outside = tmp_path / "private"
        outside.mkdir()
        (outside / "secret.md").write_text("---\ntitle: Secret\n---\n")
        create_doc("index.md", "", title="Home")
        os.symlink(outside, docs_root / "linked")

        paths = navigation_paths(build_navigation(docs_root))

        assert paths == {"index.md"}
