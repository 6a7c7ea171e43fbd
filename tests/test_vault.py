"""Tests for reading notes, frontmatter, links and tags from a vault."""

import logging
from pathlib import PurePosixPath

import pytest

from obsidian_bases.values import Frontmatter
from obsidian_bases.vault import (
    LinkStyle,
    extract_inline_tags,
    extract_link_targets,
    extract_links,
    parse_frontmatter,
    read_file,
    read_vault,
    resolve_link,
    split_frontmatter,
)

PLAN_NOTE = """\
---
status: active
priority: 3
tags:
  - project
  - "#work"
---
# Plan

See [[Reference]] and [[Reference#Scope|the scope]] for #planning.
Also [draft](../Drafts/Plan%20v2.md) and [site](https://example.com).

![[diagram.png]]

```
[[InsideCode]] #notatag
```
"""


@pytest.fixture
def vault(tmp_path):
    (tmp_path / "Projects").mkdir()
    (tmp_path / "Projects" / "Plan.md").write_text(PLAN_NOTE, encoding="utf-8")
    (tmp_path / "Projects" / "Reference.md").write_text("Plain note.\n", encoding="utf-8")
    (tmp_path / "Home.md").write_text("---\nstatus: done\n---\n", encoding="utf-8")
    (tmp_path / "image.png").write_bytes(b"\x89PNG")
    (tmp_path / ".obsidian").mkdir()
    (tmp_path / ".obsidian" / "app.md").write_text("hidden", encoding="utf-8")
    return tmp_path


# =============================================================================
# Frontmatter
# =============================================================================


class TestFrontmatter:
    def test_split(self):
        raw, body = split_frontmatter("---\na: 1\n---\nBody\n")

        assert raw == "a: 1"
        assert body == "Body\n"

    def test_no_frontmatter(self):
        assert split_frontmatter("Just text") == (None, "Just text")
        assert parse_frontmatter("Just text") is None

    def test_must_start_on_first_line(self):
        raw, _ = split_frontmatter("\n---\na: 1\n---\n")

        assert raw is None

    def test_crlf_line_endings(self):
        raw, body = split_frontmatter("---\r\na: 1\r\n---\r\nBody")

        assert raw == "a: 1"
        assert body == "Body"

    def test_parse_lifts_known_fields(self):
        frontmatter = parse_frontmatter("---\ntags: [a, b]\naliases: Alias\nstatus: x\n---\n")

        assert frontmatter.tags == ("a", "b")
        assert frontmatter.aliases == ("Alias",)
        assert frontmatter.values == {"status": "x"}

    def test_empty_block(self):
        assert parse_frontmatter("---\n---\nBody") == Frontmatter()

    def test_invalid_yaml_is_logged(self, caplog):
        with caplog.at_level(logging.ERROR):
            result = parse_frontmatter("---\na: [unclosed\n---\n", source="Bad.md")

        assert result is None
        assert "Failed to parse frontmatter in Bad.md" in caplog.text

    def test_non_mapping_is_logged(self, caplog):
        with caplog.at_level(logging.ERROR):
            result = parse_frontmatter("---\n- a\n- b\n---\n", source="List.md")

        assert result is None
        assert "expected a mapping, got list" in caplog.text


# =============================================================================
# Links
# =============================================================================


class TestLinks:
    def test_extract_targets(self):
        targets = extract_link_targets(PLAN_NOTE)

        assert targets == [
            "Reference.md",
            "Reference.md",
            "../Drafts/Plan v2.md",
            "diagram.png",
        ]

    def test_inline_code_is_ignored(self):
        assert extract_link_targets("`[[Nope]]` [[Yes]]") == ["Yes.md"]

    def test_tilde_fence_is_ignored(self):
        assert extract_link_targets("~~~\n[[Nope]]\n~~~\n[[Yes]]") == ["Yes.md"]

    @pytest.mark.parametrize(
        "target, style, expected",
        [
            ("Reference.md", LinkStyle.INFER, "Projects/Reference.md"),
            ("./Reference.md", LinkStyle.INFER, "Projects/Reference.md"),
            ("../Home.md", LinkStyle.INFER, "Home.md"),
            ("Notes/Other.md", LinkStyle.INFER, "Notes/Other.md"),
            ("/Home.md", LinkStyle.INFER, "Home.md"),
            ("Reference.md", LinkStyle.FROM_VAULT_ROOT, "Reference.md"),
            ("Notes/Other.md", LinkStyle.RELATIVE_TO_FILE, "Projects/Notes/Other.md"),
            ("/Home.md", LinkStyle.RELATIVE_TO_FILE, "Home.md"),
        ],
    )
    def test_resolve_link(self, target, style, expected):
        assert resolve_link(target, "Projects/Plan.md", style) == expected

    def test_extract_links_deduplicates(self):
        links = extract_links(PLAN_NOTE, "Projects/Plan.md")

        assert links == [
            "Projects/Reference.md",
            "Drafts/Plan v2.md",
            "Projects/diagram.png",
        ]


class TestInlineTags:
    def test_tags(self):
        assert extract_inline_tags("Hello #one and #two/sub.") == {"one", "two/sub"}

    def test_headings_are_not_tags(self):
        assert extract_inline_tags("# Title\n## Sub") == set()

    def test_numbers_are_not_tags(self):
        assert extract_inline_tags("Issue #12") == set()

    def test_code_and_links_are_ignored(self):
        text = "`#code` [x](page#anchor) [[Note#Section]] #real"

        assert extract_inline_tags(text) == {"real"}


# =============================================================================
# Reading
# =============================================================================


class TestReadVault:
    def test_reads_sorted_and_skips_dot_dirs(self, vault):
        files = read_vault(vault)

        assert [str(f.path) for f in files] == [
            "Home.md",
            "Projects/Plan.md",
            "Projects/Reference.md",
            "image.png",
        ]

    def test_note_contents(self, vault):
        plan = read_file(vault / "Projects" / "Plan.md", vault)

        assert plan.path == PurePosixPath("Projects/Plan.md")
        assert plan.tags == frozenset({"project", "work", "planning"})
        assert plan.links[0] == "Projects/Reference.md"
        assert plan.frontmatter.values["priority"] == 3
        assert plan.metadata.size > 0
        assert plan.metadata.mtime is not None

    def test_attachment_has_metadata_only(self, vault):
        image = read_file(vault / "image.png", vault)

        assert image.frontmatter is None
        assert image.links == ()
        assert image.metadata.size == 4

    def test_without_recursion(self, vault):
        files = read_vault(vault, recurse=False)

        assert [str(f.path) for f in files] == ["Home.md", "image.png"]

    def test_link_style(self, vault):
        files = read_vault(vault, link_style=LinkStyle.FROM_VAULT_ROOT)
        plan = next(f for f in files if f.path.name == "Plan.md")

        assert plan.links[0] == "Reference.md"

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_vault(tmp_path / "nope")
