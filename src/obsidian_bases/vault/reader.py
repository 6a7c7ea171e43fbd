"""Read a vault directory into FileValues."""

import logging
import os
from datetime import datetime
from pathlib import Path, PurePosixPath

from obsidian_bases.values.file import FileMetadata, FileValue
from obsidian_bases.vault.frontmatter import parse_frontmatter, split_frontmatter
from obsidian_bases.vault.links import LinkStyle, extract_inline_tags, extract_links

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = {".md"}


def _metadata(stat: os.stat_result) -> FileMetadata:
    created = getattr(stat, "st_birthtime", None) or stat.st_ctime
    return FileMetadata(
        size=stat.st_size,
        ctime=datetime.fromtimestamp(created),
        mtime=datetime.fromtimestamp(stat.st_mtime),
    )


def read_file(
    path: Path,
    vault_dir: Path,
    link_style: LinkStyle = LinkStyle.INFER,
) -> FileValue:
    """Build the FileValue for one file in the vault.

    Markdown files get frontmatter, tags and links; any other file only
    carries its path and filesystem metadata.
    """
    relative = PurePosixPath(path.relative_to(vault_dir).as_posix())
    metadata = _metadata(path.stat())

    if path.suffix.lower() not in MARKDOWN_EXTENSIONS:
        return FileValue(relative, metadata)

    text = path.read_text(encoding="utf-8", errors="replace")
    frontmatter = parse_frontmatter(text, source=str(relative))
    _, body = split_frontmatter(text)

    tags = set(extract_inline_tags(body))
    if frontmatter is not None and frontmatter.tags:
        tags.update(tag.lstrip("#") for tag in frontmatter.tags)

    return FileValue(
        relative,
        metadata,
        links=tuple(extract_links(body, str(relative), link_style)),
        tags=frozenset(tags),
        frontmatter=frontmatter,
    )


def read_vault(
    vault_dir: Path | str,
    link_style: LinkStyle = LinkStyle.INFER,
    recurse: bool = True,
) -> list[FileValue]:
    """Read every file of a vault in sorted path order.

    Directories whose name starts with a dot (``.obsidian``, ``.git``) are
    skipped.

    Raises:
        FileNotFoundError: If ``vault_dir`` is not a directory
    """
    vault_dir = Path(vault_dir)
    if not vault_dir.is_dir():
        raise FileNotFoundError(f"Vault directory not found: {vault_dir}")

    files: list[FileValue] = []
    for root, dirnames, filenames in os.walk(vault_dir):
        if recurse:
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        else:
            dirnames[:] = []
        for filename in sorted(filenames):
            files.append(read_file(Path(root) / filename, vault_dir, link_style))

    files.sort(key=lambda f: str(f.path))
    logger.debug("Read %d files from %s", len(files), vault_dir)
    return files
