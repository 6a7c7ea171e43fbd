"""Load base files from YAML.

Documents are checked against ``schemas/base.schema.json`` before they are
turned into BaseFile objects. Each problem is reported with a breadcrumb
such as ``views[1].sort[0].direction``.
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from obsidian_bases.errors import SchemaError
from obsidian_bases.schema.types import BaseFile

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"
BASE_SCHEMA = "base.schema.json"

_TYPE_NAMES = {
    "object": "a mapping",
    "array": "a list",
    "string": "a string",
    "integer": "an integer",
    "number": "a number",
    "boolean": "a boolean",
    "null": "null",
}


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_schema(name: str) -> dict[str, Any]:
    schema_path = _SCHEMAS_DIR / name
    with schema_path.open(encoding="utf-8") as fh:
        return json.load(fh)


@lru_cache(maxsize=None)
def _validator() -> Draft202012Validator:
    return Draft202012Validator(_load_schema(BASE_SCHEMA))


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    return type(value).__name__


def _without_nulls(doc: Any) -> Any:
    """Drop keys left empty in YAML (``formulas:`` with nothing after it).

    Applies to the document and to each view, where every key is optional.
    """
    if not isinstance(doc, dict):
        return doc
    result = {k: v for k, v in doc.items() if v is not None}
    views = result.get("views")
    if isinstance(views, list):
        result["views"] = [
            {k: v for k, v in view.items() if v is not None} if isinstance(view, dict) else view
            for view in views
        ]
    return result


def _breadcrumb(error: ValidationError) -> str:
    """Convert a jsonschema error path to ``views[1].sort[0].direction``."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(f".{p}")
    return "".join(parts).lstrip(".") or "base file"


def _describe(error: ValidationError) -> str:
    if error.validator == "type":
        got = _type_name(error.instance)
        if "title" in error.schema:
            return (
                f"invalid {error.schema['title']}, expected "
                f"{error.schema['description']}, got {got}"
            )
        expected = error.validator_value
        if isinstance(expected, str):
            expected = [expected]
        names = " or ".join(_TYPE_NAMES.get(t, t) for t in expected)
        return f"expected {names}, got {got}"
    if error.validator == "enum":
        allowed = ", ".join(str(v) for v in error.validator_value)
        return f"expected one of {allowed}, got {error.instance!r}"
    return error.message


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_base_document(doc: Any) -> list[str]:
    """Check a loaded YAML document against the base file schema.

    Returns:
        One ``"<breadcrumb>: <message>"`` string per problem, empty when valid
    """
    errors = sorted(
        _validator().iter_errors(doc),
        key=lambda e: [str(p) for p in e.absolute_path],
    )
    return [f"{_breadcrumb(error)}: {_describe(error)}" for error in errors]


def load_base_str(text: str) -> BaseFile:
    """Parse a ``.base`` document from a YAML string.

    Raises:
        SchemaError: If the text is not valid YAML or has the wrong structure
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SchemaError(f"invalid YAML: {e}") from e

    if data is None:
        return BaseFile()

    doc = _without_nulls(data)
    issues = validate_base_document(doc)
    if issues:
        logger.debug("Base document has %d schema issue(s)", len(issues))
        raise SchemaError("; ".join(issues))
    return BaseFile.from_dict(doc)


def load_base_file(path: Path | str) -> BaseFile:
    """Load a ``.base`` file from disk."""
    with open(path, encoding="utf-8") as f:
        return load_base_str(f.read())
