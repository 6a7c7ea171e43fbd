"""Base file configuration types.

These mirror the ``.base`` YAML document. ``from_dict`` builds them from a
document that has already passed ``validate_base_document``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ViewType(str, Enum):
    TABLE = "table"
    CARDS = "cards"
    LIST = "list"
    MAP = "map"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


# =============================================================================
# Filters
# =============================================================================


@dataclass
class FilterNode:
    """Base class for filter tree nodes."""

    @classmethod
    def from_data(cls, data: Any) -> FilterNode:
        """Build a filter node from a string or an and/or/not mapping."""
        if isinstance(data, str):
            return ExpressionFilter(data)
        (key, items), = data.items()
        node_cls = {"and": AndFilter, "or": OrFilter, "not": NotFilter}[key]
        return node_cls([cls.from_data(child) for child in items])

    def to_data(self) -> Any:
        raise NotImplementedError


@dataclass
class AndFilter(FilterNode):
    children: list[FilterNode] = field(default_factory=list)

    def to_data(self) -> Any:
        return {"and": [child.to_data() for child in self.children]}


@dataclass
class OrFilter(FilterNode):
    children: list[FilterNode] = field(default_factory=list)

    def to_data(self) -> Any:
        return {"or": [child.to_data() for child in self.children]}


@dataclass
class NotFilter(FilterNode):
    children: list[FilterNode] = field(default_factory=list)

    def to_data(self) -> Any:
        return {"not": [child.to_data() for child in self.children]}


@dataclass
class ExpressionFilter(FilterNode):
    source: str = ""

    def to_data(self) -> Any:
        return self.source


# =============================================================================
# Properties and views
# =============================================================================


@dataclass
class PropertyConfig:
    """Display settings for a property column."""

    display_name: str | None = None

    @classmethod
    def from_dict(cls, data: dict | None) -> PropertyConfig:
        return cls(display_name=(data or {}).get("displayName"))

    def to_dict(self) -> dict[str, Any]:
        if self.display_name is None:
            return {}
        return {"displayName": self.display_name}


@dataclass
class SortField:
    property: str
    direction: SortDirection = SortDirection.ASC

    @classmethod
    def from_dict(cls, data: dict) -> SortField:
        return cls(property=data["property"], direction=SortDirection(data["direction"]))

    def to_dict(self) -> dict[str, Any]:
        return {"property": self.property, "direction": self.direction.value}


@dataclass
class View:
    """One view of a base: a table, card grid, list or map."""

    type: ViewType
    name: str | None = None
    filters: FilterNode | None = None
    order: list[str] = field(default_factory=list)
    limit: int | None = None
    sort: list[SortField] = field(default_factory=list)
    image: str | None = None
    column_size: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> View:
        filters = data.get("filters")
        return cls(
            type=ViewType(data["type"]),
            name=data.get("name"),
            filters=FilterNode.from_data(filters) if filters is not None else None,
            order=list(data.get("order", [])),
            limit=data.get("limit"),
            sort=[SortField.from_dict(entry) for entry in data.get("sort", [])],
            image=data.get("image"),
            column_size={str(k): v for k, v in data.get("columnSize", {}).items()},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert back to the YAML document shape, omitting unset fields."""
        result: dict[str, Any] = {"type": self.type.value}
        if self.name is not None:
            result["name"] = self.name
        if self.filters is not None:
            result["filters"] = self.filters.to_data()
        if self.order:
            result["order"] = list(self.order)
        if self.limit is not None:
            result["limit"] = self.limit
        if self.sort:
            result["sort"] = [s.to_dict() for s in self.sort]
        if self.image is not None:
            result["image"] = self.image
        if self.column_size:
            result["columnSize"] = dict(self.column_size)
        return result


@dataclass
class BaseFile:
    """A parsed ``.base`` document."""

    filters: FilterNode | None = None
    formulas: dict[str, str] = field(default_factory=dict)
    properties: dict[str, PropertyConfig] = field(default_factory=dict)
    views: list[View] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> BaseFile:
        filters = data.get("filters")
        return cls(
            filters=FilterNode.from_data(filters) if filters is not None else None,
            formulas={str(name): source for name, source in data.get("formulas", {}).items()},
            properties={
                str(name): PropertyConfig.from_dict(config)
                for name, config in data.get("properties", {}).items()
            },
            views=[View.from_dict(view) for view in data.get("views", [])],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict suitable for ``yaml.safe_dump``."""
        result: dict[str, Any] = {}
        if self.filters is not None:
            result["filters"] = self.filters.to_data()
        if self.formulas:
            result["formulas"] = dict(self.formulas)
        if self.properties:
            result["properties"] = {
                name: config.to_dict() for name, config in self.properties.items()
            }
        result["views"] = [view.to_dict() for view in self.views]
        return result
