"""Tests for core business logic in mdocs.core.

Test organization:
- CRUD operations (read, write, delete)
- edit_document: dry run, front matter preservation, batch failure, races
- Listing, search and navigation
- Folder/section creation and navigation order
- Move and rename with link updates
- Health and validation wrappers

Design:
- Test behaviors, not implementations
- Every test should catch a real bug class
"""

from pathlib import Path

import pytest

from mdocs import core
from mdocs.errors import (
    AccessDeniedError,
    DocsError,
    DocumentExistsError,
    DocumentNotFoundError,
    EditNotFoundError,
)
from mdocs.models import Edit
from mdocs.parser import parse_document


def _edit(old: str, new: str) -> Edit:
    return Edit(old_text=old, new_text=new)


# ─────────────────────────────────────────────────────────────────────────────
# CRUD
# ─────────────────────────────────────────────────────────────────────────────


class TestReadWriteDelete:
    @pytest.mark.asyncio
    async def test_read_document(self, docs_root, create_doc):
        create_doc("guide/intro.md", "# Intro\n", title="Intro", tags=["a"])

        document = await core.read_document(docs_root, "guide/intro.md")

        assert document.path == "guide/intro.md"
        assert document.front_matter == {"title": "Intro", "tags": ["a"]}
        assert document.body == "# Intro\n"

    @pytest.mark.asyncio
    async def test_read_missing_document(self, docs_root):
        with pytest.raises(DocumentNotFoundError) as exc_info:
            await core.read_document(docs_root, "nope.md")
        assert "nope.md" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_write_creates_directories(self, docs_root):
        rel = await core.write_document(docs_root, "new/deep/doc.md", "---\ntitle: New\n---\nBody\n")

        assert rel == "new/deep/doc.md"
        assert (docs_root / "new/deep/doc.md").read_text() == "---\ntitle: New\n---\nBody\n"

    @pytest.mark.asyncio
    async def test_write_outside_root_is_denied(self, docs_root):
        with pytest.raises(AccessDeniedError):
            await core.write_document(docs_root, "../escape.md", "x")
        assert not (docs_root.parent / "escape.md").exists()

    @pytest.mark.asyncio
    async def test_delete_document(self, docs_root, create_doc):
        path = create_doc("old.md", "bye\n")
        assert await core.delete_document(docs_root, "old.md") == "old.md"
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_delete_missing_document(self, docs_root):
        with pytest.raises(DocumentNotFoundError):
            await core.delete_document(docs_root, "ghost.md")


# ─────────────────────────────────────────────────────────────────────────────
# edit_document
# ─────────────────────────────────────────────────────────────────────────────


class TestEditDocument:
    @pytest.mark.asyncio
    async def test_edit_writes_body_and_returns_diff(self, docs_root, create_doc):
        path = create_doc("doc.md", "one\ntwo\n", title="Doc")

        result = await core.edit_document(docs_root, "doc.md", [_edit("two", "TWO")])

        assert result.path == "doc.md"
        assert result.edits_applied == 1
        assert result.dry_run is False
        assert "+TWO" in result.diff
        assert path.read_text() == "---\ntitle: Doc\n---\none\nTWO\n"

    @pytest.mark.asyncio
    async def test_dry_run_does_not_write(self, docs_root, create_doc):
        path = create_doc("doc.md", "one\ntwo\n", title="Doc")
        before = path.read_bytes()

        result = await core.edit_document(docs_root, "doc.md", [_edit("two", "TWO")], dry_run=True)

        assert result.dry_run is True
        assert "+TWO" in result.diff
        assert path.read_bytes() == before

    @pytest.mark.asyncio
    async def test_real_edit_matches_dry_run_preview(self, docs_root, create_doc):
        path = create_doc("doc.md", "intro\n  step one\n  step two\noutro\n", title="Doc")
        edits = [_edit("step one\nstep two", "step one\nstep 2"), _edit("outro", "end")]

        preview = await core.edit_document(docs_root, "doc.md", edits, dry_run=True)
        applied = await core.edit_document(docs_root, "doc.md", edits)

        assert applied.diff == preview.diff
        assert "-  step two\n+  step 2\n" in preview.diff
        assert path.read_text() == "---\ntitle: Doc\n---\nintro\n  step one\n  step 2\nend\n"

    @pytest.mark.asyncio
    async def test_front_matter_bytes_preserved(self, docs_root):
        raw = "---\ntitle:    Spaced   # trailing comment\ntags: [a,  b]\n---\nbody text\n"
        path = docs_root / "doc.md"
        path.write_text(raw)

        await core.edit_document(docs_root, "doc.md", [_edit("body", "new body")])

        assert path.read_text() == raw.replace("body text", "new body text")

    @pytest.mark.asyncio
    async def test_edits_never_touch_front_matter(self, docs_root, create_doc):
        create_doc("doc.md", "Nothing here\n", title="Needle")

        with pytest.raises(EditNotFoundError):
            await core.edit_document(docs_root, "doc.md", [_edit("Needle", "Haystack")])

    @pytest.mark.asyncio
    async def test_failed_batch_writes_nothing(self, docs_root, create_doc):
        path = create_doc("doc.md", "alpha\nbeta\n", title="Doc")
        before = path.read_bytes()

        with pytest.raises(EditNotFoundError) as exc_info:
            await core.edit_document(
                docs_root,
                "doc.md",
                [_edit("alpha", "ALPHA"), _edit("gamma", "GAMMA")],
            )

        assert exc_info.value.path == "doc.md"
        assert path.read_bytes() == before

    @pytest.mark.asyncio
    async def test_edit_missing_document(self, docs_root):
        with pytest.raises(DocumentNotFoundError):
            await core.edit_document(docs_root, "missing.md", [_edit("a", "b")])

    @pytest.mark.asyncio
    async def test_edit_outside_root_is_denied(self, docs_root):
        with pytest.raises(AccessDeniedError):
            await core.edit_document(docs_root, "../../etc/hosts", [_edit("a", "b")])

    @pytest.mark.asyncio
    async def test_stale_read_modify_write_clobbers_intervening_write(
        self, docs_root, create_doc, monkeypatch
    ):
        """Last write wins: an edit computed from a stale read overwrites newer content."""
        path = create_doc("doc.md", "version one\n", title="T")
        stale = path.read_text()

        # Another writer lands between our read and our write
        await core.write_document(docs_root, "doc.md", "---\ntitle: T\n---\nversion two\n")
        monkeypatch.setattr(core, "read_text", lambda *args, **kwargs: stale)

        await core.edit_document(docs_root, "doc.md", [_edit("version one", "version one edited")])

        assert path.read_text() == "---\ntitle: T\n---\nversion one edited\n"


# ─────────────────────────────────────────────────────────────────────────────
# Listing, search, navigation
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def small_tree(create_doc, docs_root) -> Path:
    create_doc("index.md", "Welcome\n", title="Home", order=0)
    create_doc("install.md", "Run the INSTALLER.\n", title="Install", order=1)
    create_doc("guide/usage.md", "Usage notes.\n", title="Usage", tags=["howto"])
    return docs_root


class TestListAndSearch:
    @pytest.mark.asyncio
    async def test_list_non_recursive_by_default(self, small_tree):
        assert await core.list_documents(small_tree) == ["index.md", "install.md"]

    @pytest.mark.asyncio
    async def test_list_recursive(self, small_tree):
        assert await core.list_documents(small_tree, recursive=True) == [
            "guide/usage.md",
            "index.md",
            "install.md",
        ]

    @pytest.mark.asyncio
    async def test_list_base_path(self, small_tree):
        assert await core.list_documents(small_tree, "guide") == ["guide/usage.md"]

    @pytest.mark.asyncio
    async def test_list_outside_root_is_denied(self, small_tree):
        with pytest.raises(AccessDeniedError):
            await core.list_documents(small_tree, "..")

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, small_tree):
        assert await core.search_documents(small_tree, "installer") == ["install.md"]

    @pytest.mark.asyncio
    async def test_search_matches_front_matter(self, small_tree):
        assert await core.search_documents(small_tree, "HOWTO") == ["guide/usage.md"]

    @pytest.mark.asyncio
    async def test_search_no_match(self, small_tree):
        assert await core.search_documents(small_tree, "kubernetes") == []

    @pytest.mark.asyncio
    async def test_generate_navigation(self, small_tree):
        sections = await core.generate_navigation(small_tree)

        assert [s.title for s in sections] == ["Home", "guide"]
        assert [item.path for item in sections[0].items] == ["install.md"]


# ─────────────────────────────────────────────────────────────────────────────
# Folders, sections and order
# ─────────────────────────────────────────────────────────────────────────────


class TestStructure:
    @pytest.mark.asyncio
    async def test_create_folder_with_readme(self, docs_root):
        rel = await core.create_folder(docs_root, "user-guide")

        assert rel == "user-guide"
        readme = parse_document("user-guide/README.md", (docs_root / "user-guide/README.md").read_text())
        assert readme.front_matter["title"] == "User Guide"
        assert readme.front_matter["status"] == "draft"
        assert readme.front_matter["description"]

    @pytest.mark.asyncio
    async def test_create_folder_without_readme(self, docs_root):
        await core.create_folder(docs_root, "empty", create_readme=False)
        assert (docs_root / "empty").is_dir()
        assert list((docs_root / "empty").iterdir()) == []

    @pytest.mark.asyncio
    async def test_create_folder_keeps_existing_readme(self, docs_root, create_doc):
        path = create_doc("guide/README.md", "Mine\n", title="Mine")
        await core.create_folder(docs_root, "guide")
        assert path.read_text() == "---\ntitle: Mine\n---\nMine\n"

    @pytest.mark.asyncio
    async def test_create_section(self, docs_root):
        rel = await core.create_section(docs_root, "API Reference", "api", order=3)

        assert rel == "api/index.md"
        document = await core.read_document(docs_root, rel)
        assert document.front_matter["title"] == "API Reference"
        assert document.front_matter["order"] == 3

        sections = await core.generate_navigation(docs_root)
        assert [(s.title, s.path) for s in sections] == [("API Reference", "api/index.md")]

    @pytest.mark.asyncio
    async def test_create_section_refuses_existing_index(self, docs_root, create_doc):
        create_doc("api/index.md", "", title="Existing")
        with pytest.raises(DocumentExistsError):
            await core.create_section(docs_root, "API", "api")

    @pytest.mark.asyncio
    async def test_update_navigation_order(self, docs_root, create_doc):
        create_doc("doc.md", "\n# Body\n", title="Doc", order=5)

        document = await core.update_navigation_order(docs_root, "doc.md", 2)

        assert document.front_matter == {"title": "Doc", "order": 2}
        reread = await core.read_document(docs_root, "doc.md")
        assert reread.front_matter["order"] == 2
        assert reread.body == "\n# Body\n"

    @pytest.mark.asyncio
    async def test_update_navigation_order_fractional(self, docs_root, create_doc):
        create_doc("doc.md", "", title="Doc")
        await core.update_navigation_order(docs_root, "doc.md", 1.5)
        assert (await core.read_document(docs_root, "doc.md")).front_matter["order"] == 1.5


# ─────────────────────────────────────────────────────────────────────────────
# Move / rename
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def linked_tree(create_doc, docs_root) -> Path:
    create_doc("index.md", "[G](guide/old.md) [G2](guide/old.md#sec) [abs](/guide/old.md) [ext](https://x.io)\n")
    create_doc("guide/other.md", "[o](old.md) [self](other.md)\n")
    create_doc("guide/old.md", "[sib](other.md) [top](#top)\n", title="Old")
    return docs_root


class TestMoveDocument:
    @pytest.mark.asyncio
    async def test_move_updates_references(self, linked_tree):
        result = await core.move_document(linked_tree, "guide/old.md", "archive/new.md")

        assert result == {"source": "guide/old.md", "destination": "archive/new.md", "links_updated": 5}
        assert not (linked_tree / "guide/old.md").exists()
        assert (linked_tree / "index.md").read_text() == (
            "[G](archive/new.md) [G2](archive/new.md#sec) [abs](/archive/new.md) [ext](https://x.io)\n"
        )
        assert (linked_tree / "guide/other.md").read_text() == "[o](../archive/new.md) [self](other.md)\n"
        assert (linked_tree / "archive/new.md").read_text() == (
            "---\ntitle: Old\n---\n[sib](../guide/other.md) [top](#top)\n"
        )

    @pytest.mark.asyncio
    async def test_move_without_reference_updates(self, linked_tree):
        before = (linked_tree / "index.md").read_text()

        result = await core.move_document(
            linked_tree, "guide/old.md", "archive/new.md", update_references=False
        )

        assert result["links_updated"] == 0
        assert (linked_tree / "index.md").read_text() == before
        assert (linked_tree / "archive/new.md").read_text() == "---\ntitle: Old\n---\n[sib](other.md) [top](#top)\n"

    @pytest.mark.asyncio
    async def test_move_refuses_to_overwrite(self, linked_tree):
        with pytest.raises(DocumentExistsError):
            await core.move_document(linked_tree, "guide/old.md", "guide/other.md")
        assert (linked_tree / "guide/old.md").exists()

    @pytest.mark.asyncio
    async def test_move_missing_source(self, linked_tree):
        with pytest.raises(DocumentNotFoundError):
            await core.move_document(linked_tree, "guide/nope.md", "x.md")

    @pytest.mark.asyncio
    async def test_move_outside_root_is_denied(self, linked_tree):
        with pytest.raises(AccessDeniedError):
            await core.move_document(linked_tree, "guide/old.md", "../outside.md")

    @pytest.mark.asyncio
    async def test_rename_keeps_directory_and_extension(self, linked_tree):
        result = await core.rename_document(linked_tree, "guide/old.md", "renamed")

        assert result["destination"] == "guide/renamed.md"
        assert (linked_tree / "guide/other.md").read_text() == "[o](renamed.md) [self](other.md)\n"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "a/b.md", "..", "x\\y.md"])
    async def test_rename_rejects_invalid_names(self, linked_tree, name):
        with pytest.raises(DocsError):
            await core.rename_document(linked_tree, "guide/old.md", name)


# ─────────────────────────────────────────────────────────────────────────────
# Health and validation
# ─────────────────────────────────────────────────────────────────────────────


class TestHealthAndValidation:
    @pytest.mark.asyncio
    async def test_health_on_missing_root(self, tmp_path):
        result = await core.check_documentation_health(tmp_path / "no-docs")
        assert result.score == 100
        assert result.total_documents == 0

    @pytest.mark.asyncio
    async def test_health_outside_root_is_denied(self, docs_root):
        with pytest.raises(AccessDeniedError):
            await core.check_documentation_health(docs_root, "../")

    @pytest.mark.asyncio
    async def test_health_uses_default_required_fields(self, docs_root, create_doc):
        create_doc("index.md", "", title="Home")

        result = await core.check_documentation_health(docs_root)

        assert sorted(i.message for i in result.issues) == [
            "Missing required field: description",
            "Missing required field: status",
        ]

    @pytest.mark.asyncio
    async def test_validate_links(self, docs_root, create_doc):
        create_doc("a.md", "[ok](b.md) [bad](nope.md) [web](https://x.io)\n")
        create_doc("b.md", "[back](a.md#top)\n")

        result = await core.validate_links(docs_root)

        assert result.documents_checked == 2
        assert result.links_checked == 3
        assert [(b.path, b.link, b.text) for b in result.broken_links] == [("a.md", "nope.md", "bad")]

    @pytest.mark.asyncio
    async def test_validate_metadata(self, docs_root, create_doc):
        create_doc("a.md", "", title="A", description="d", status="draft")
        create_doc("b.md", "", title="B")

        result = await core.validate_metadata(docs_root)

        assert result.documents_checked == 2
        assert result.required_fields == ["title", "description", "status"]
        assert result.completeness == 67
        assert [(m.path, m.field) for m in result.missing] == [("b.md", "description"), ("b.md", "status")]

    @pytest.mark.asyncio
    async def test_validate_metadata_custom_fields(self, docs_root, create_doc):
        create_doc("a.md", "", owner="docs")
        result = await core.validate_metadata(docs_root, required_fields=["owner"])
        assert result.completeness == 100
        assert result.missing == []

    @pytest.mark.asyncio
    async def test_health_with_no_required_fields(self, docs_root, create_doc):
        create_doc("index.md", "", title="Home")

        result = await core.check_documentation_health(docs_root, required_fields=[])

        assert result.issues == []
        assert result.metadata_completeness == 100
        assert result.score == 100

    @pytest.mark.asyncio
    async def test_validate_metadata_with_no_required_fields(self, docs_root, create_doc):
        create_doc("a.md", "", title="A")

        result = await core.validate_metadata(docs_root, required_fields=[])

        assert result.required_fields == []
        assert result.completeness == 100
        assert result.missing == []
