"""File values: a note (or attachment) in the vault.

A FileValue carries everything the expression language can ask about a
file: its vault-relative path, filesystem metadata, outgoing links, tags and
parsed frontmatter. Two file values are equal when their paths are equal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePosixPath
from typing import Any, Sequence

from obsidian_bases.errors import IncorrectArgumentType
from obsidian_bases.functions import (
    FunctionCategory,
    FunctionDefinition,
    FunctionParameter,
    FunctionRegistry,
    expect_count,
    expect_range,
    expect_type,
)
from obsidian_bases.values.core import (
    COMMON_METHODS,
    NULL,
    BooleanValue,
    DateValue,
    LinkValue,
    ListValue,
    NumberValue,
    ObjectValue,
    StringValue,
    Value,
    to_value,
)

KNOWN_FRONTMATTER_FIELDS = ("tags", "aliases", "cssclasses")


def _string_list(raw: Any) -> tuple[str, ...] | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return (raw,)
    if isinstance(raw, (list, tuple)):
        return tuple(str(item) for item in raw if item is not None)
    return (str(raw),)


@dataclass(frozen=True)
class Frontmatter:
    """Parsed YAML frontmatter of a note.

    ``tags``, ``aliases`` and ``cssclasses`` are lifted out of the mapping;
    ``values`` holds every other key as loaded from YAML.
    """

    tags: tuple[str, ...] | None = None
    aliases: tuple[str, ...] | None = None
    cssclasses: tuple[str, ...] | None = None
    values: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> Frontmatter:
        values = {str(k): v for k, v in data.items() if k not in KNOWN_FRONTMATTER_FIELDS}
        return cls(
            tags=_string_list(data.get("tags")),
            aliases=_string_list(data.get("aliases")),
            cssclasses=_string_list(data.get("cssclasses")),
            values=values,
        )

    def has_property(self, name: str) -> bool:
        if name in KNOWN_FRONTMATTER_FIELDS:
            return getattr(self, name) is not None
        return name in self.values

    def properties(self) -> dict[str, Value]:
        """All properties as values, known fields included."""
        result = {key: to_value(value) for key, value in self.values.items()}
        for name in KNOWN_FRONTMATTER_FIELDS:
            known = getattr(self, name)
            if known is not None:
                result[name] = ListValue(tuple(StringValue(item) for item in known))
        return result


@dataclass(frozen=True)
class FileMetadata:
    size: int = 0
    ctime: datetime | None = None
    mtime: datetime | None = None


@dataclass(frozen=True, eq=False)
class FileValue(Value):
    path: PurePosixPath
    metadata: FileMetadata = field(default_factory=FileMetadata)
    links: tuple[str, ...] = ()
    tags: frozenset[str] = frozenset()
    frontmatter: Frontmatter | None = None

    type_name = "file"
    methods = FunctionRegistry("file", parent=COMMON_METHODS)
    fields = {}

    def __post_init__(self):
        if not isinstance(self.path, PurePosixPath):
            object.__setattr__(self, "path", PurePosixPath(self.path))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileValue):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    @property
    def folder(self) -> str:
        parent = str(self.path.parent)
        return "" if parent == "." else parent

    def display(self) -> str:
        return str(self.path)

    def to_python(self) -> str:
        return str(self.path)


# -----------------------------------------------------------------------------
# Implementations
# -----------------------------------------------------------------------------


def _has_tag(this: FileValue, args: Sequence[Value]) -> Value:
    expect_range(args, 1)
    for index in range(len(args)):
        tag = expect_type(args, index, StringValue, "string").value
        if tag in this.tags:
            return BooleanValue(True)
    return BooleanValue(False)


def _has_link(this: FileValue, args: Sequence[Value]) -> Value:
    expect_count(args, 1)
    target = args[0]
    if isinstance(target, StringValue):
        needle = target.value
        return BooleanValue(
            any(needle in link or PurePosixPath(link).stem == needle for link in this.links)
        )
    if isinstance(target, FileValue):
        return BooleanValue(str(target.path) in this.links)
    raise IncorrectArgumentType(0, target.type_name, "string or file")


def _in_folder(this: FileValue, args: Sequence[Value]) -> Value:
    expect_count(args, 1)
    folder = expect_type(args, 0, StringValue, "string").value
    parent = this.folder
    return BooleanValue(
        parent == folder
        or parent.startswith(f"{folder}/")
        or parent.endswith(f"/{folder}")
        or f"/{folder}/" in parent
    )


def _has_property(this: FileValue, args: Sequence[Value]) -> Value:
    expect_count(args, 1)
    name = expect_type(args, 0, StringValue, "string").value
    return BooleanValue(this.frontmatter is not None and this.frontmatter.has_property(name))


def _as_link(this: FileValue, args: Sequence[Value]) -> Value:
    expect_range(args, 0, 1)
    display = expect_type(args, 0, StringValue, "string").value if args else None
    return LinkValue(str(this.path), display)


def _optional_date(value: datetime | None) -> Value:
    return NULL if value is None else DateValue(value)


# -----------------------------------------------------------------------------
# Registration
# -----------------------------------------------------------------------------


def _register_file_methods() -> None:
    methods = FileValue.methods
    FileValue.fields.update(
        {
            "name": lambda this: StringValue(this.path.stem),
            "path": lambda this: StringValue(str(this.path)),
            "ext": lambda this: StringValue(this.path.suffix.lstrip(".")),
            "folder": lambda this: StringValue(this.folder),
            "size": lambda this: NumberValue(this.metadata.size),
            "ctime": lambda this: _optional_date(this.metadata.ctime),
            "mtime": lambda this: _optional_date(this.metadata.mtime),
            "tags": lambda this: ListValue(tuple(StringValue(t) for t in sorted(this.tags))),
            "links": lambda this: ListValue(tuple(StringValue(link) for link in this.links)),
            "properties": lambda this: ObjectValue(
                this.frontmatter.properties() if this.frontmatter is not None else {}
            ),
        }
    )

    methods.register(
        FunctionDefinition(
            name="hasTag",
            description="Returns true if the file has any of the given tags",
            category=FunctionCategory.FILE,
            parameters=[FunctionParameter("tags", "string", "Tags without '#'", variadic=True)],
            return_type="boolean",
            examples=['file.hasTag("project")', 'file.hasTag("book", "article")'],
            implementation=_has_tag,
        )
    )

    methods.register(
        FunctionDefinition(
            name="hasLink",
            description="Returns true if the file links to the target",
            category=FunctionCategory.FILE,
            parameters=[FunctionParameter("target", "string|file", "Link target or file")],
            return_type="boolean",
            examples=['file.hasLink("Index")'],
            implementation=_has_link,
        )
    )

    methods.register(
        FunctionDefinition(
            name="inFolder",
            description="Returns true if the file is inside the folder",
            category=FunctionCategory.FILE,
            parameters=[FunctionParameter("folder", "string", "Folder path")],
            return_type="boolean",
            examples=['file.inFolder("Projects")'],
            implementation=_in_folder,
        )
    )

    methods.register(
        FunctionDefinition(
            name="hasProperty",
            description="Returns true if the frontmatter defines the property",
            category=FunctionCategory.FILE,
            parameters=[FunctionParameter("name", "string", "Property name")],
            return_type="boolean",
            examples=['file.hasProperty("status")'],
            implementation=_has_property,
        )
    )

    methods.register(
        FunctionDefinition(
            name="asLink",
            description="Returns a link to the file",
            category=FunctionCategory.FILE,
            parameters=[FunctionParameter("display", "string", "Display text", required=False)],
            return_type="link",
            examples=["file.asLink()", 'file.asLink("Home")'],
            implementation=_as_link,
        )
    )


_register_file_methods()
