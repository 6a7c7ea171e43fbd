"""YAML frontmatter extraction for markdown notes."""

import logging
import re

import yaml

from obsidian_bases.values.file import Frontmatter

logger = logging.getLogger(__name__)

_FRONTMATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*\r?(?:\n|\Z)", re.S | re.M)


def split_frontmatter(text: str) -> tuple[str | None, str]:
    """Split a note into its raw frontmatter block and body.

    The block must start on the first line. Returns ``(None, text)`` when
    there is no frontmatter.
    """
    match = _FRONTMATTER_RE.match(text)
    if match is None:
        return None, text
    return match.group(1), text[match.end():]


def parse_frontmatter(text: str, source: str = "<string>") -> Frontmatter | None:
    """Parse the frontmatter of a note.

    Invalid YAML, or YAML that is not a mapping, is logged and ignored.
    """
    raw, _ = split_frontmatter(text)
    if raw is None:
        return None

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        logger.error("Failed to parse frontmatter in %s: %s", source, e)
        return None

    if data is None:
        return Frontmatter()
    if not isinstance(data, dict):
        logger.error(
            "Failed to parse frontmatter in %s: expected a mapping, got %s",
            source,
            type(data).__name__,
        )
        return None
    return Frontmatter.from_mapping(data)
