"""Link and tag extraction from markdown notes.

Links are collected from wikilinks (``[[target|alias]]``), embeds
(``![[image.png]]``) and markdown links (``[text](target)``). External
URLs, recognised by ``://``, are skipped. Each target is resolved to a
vault-relative POSIX path according to a LinkStyle.
"""

import posixpath
import re
from enum import Enum

_FENCE_RE = re.compile(r"^[ \t]*(```|~~~)")
_WIKILINK_RE = re.compile(r"!?\[\[([^\[\]|#]*)(?:#[^\[\]|]*)?(?:\|[^\[\]]*)?\]\]")
_MARKDOWN_LINK_RE = re.compile(r"!?\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")
_INLINE_CODE_RE = re.compile(r"`[^`\n]*`")
_TAG_RE = re.compile(r"(?<![\w#/&])#([\w/-]+)")


class LinkStyle(str, Enum):
    """How link targets are resolved to vault paths.

    INFER treats ``./`` and ``../`` targets and bare file names as relative
    to the linking file and everything else as relative to the vault root.
    """

    INFER = "infer"
    FROM_VAULT_ROOT = "from_vault_root"
    RELATIVE_TO_FILE = "relative_to_file"


def _strip_fenced_code(text: str) -> str:
    lines = []
    fence: str | None = None
    for line in text.splitlines():
        match = _FENCE_RE.match(line)
        if fence is None:
            if match:
                fence = match.group(1)
                continue
            lines.append(line)
        elif match and match.group(1) == fence:
            fence = None
    return "\n".join(lines)


def extract_link_targets(body: str) -> list[str]:
    """Return raw link targets in document order, external URLs excluded."""
    text = _INLINE_CODE_RE.sub("", _strip_fenced_code(body))
    found: list[tuple[int, str]] = []

    for match in _WIKILINK_RE.finditer(text):
        target = match.group(1).strip()
        if not target:
            continue
        # Wikilinks to notes omit the extension
        if not posixpath.splitext(target)[1]:
            target += ".md"
        found.append((match.start(), target))

    for match in _MARKDOWN_LINK_RE.finditer(text):
        target = match.group(1).split("#", 1)[0]
        if target:
            found.append((match.start(), target.replace("%20", " ")))

    found.sort(key=lambda item: item[0])
    return [target for _, target in found if "://" not in target]


def resolve_link(target: str, source_path: str, style: LinkStyle = LinkStyle.INFER) -> str:
    """Resolve a link target found in ``source_path`` to a vault-relative path."""
    folder = posixpath.dirname(source_path)

    if style == LinkStyle.INFER:
        relative = (
            target.startswith("./")
            or target.startswith("../")
            or "/" not in target.strip("/")
        )
    else:
        relative = style == LinkStyle.RELATIVE_TO_FILE

    if target.startswith("/"):
        relative = False

    joined = posixpath.join(folder, target) if relative else target.lstrip("/")
    return posixpath.normpath(joined)


def extract_links(body: str, source_path: str, style: LinkStyle = LinkStyle.INFER) -> list[str]:
    """Extract and resolve all links of a note, without duplicates."""
    links: list[str] = []
    for target in extract_link_targets(body):
        resolved = resolve_link(target, source_path, style)
        if resolved not in links:
            links.append(resolved)
    return links


def extract_inline_tags(body: str) -> set[str]:
    """Collect ``#tags`` from the note body, ignoring code and link targets."""
    text = _INLINE_CODE_RE.sub("", _strip_fenced_code(body))
    text = _WIKILINK_RE.sub("", text)
    text = _MARKDOWN_LINK_RE.sub("", text)

    tags = set()
    for match in _TAG_RE.finditer(text):
        tag = match.group(1).rstrip("/")
        # Purely numeric strings such as "#1" are not tags
        if tag and not tag.isdigit():
            tags.add(tag)
    return tags
