"""Reading notes from an Obsidian vault on disk."""

from obsidian_bases.vault.frontmatter import parse_frontmatter, split_frontmatter
from obsidian_bases.vault.links import (
    LinkStyle,
    extract_inline_tags,
    extract_link_targets,
    extract_links,
    resolve_link,
)
from obsidian_bases.vault.reader import read_file, read_vault

__all__ = [
    "LinkStyle",
    "extract_inline_tags",
    "extract_link_targets",
    "extract_links",
    "parse_frontmatter",
    "read_file",
    "read_vault",
    "resolve_link",
    "split_frontmatter",
]
