"""Structural traversal of schema documents along literal properties/items nesting."""

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from .paths import ITEMS, PROPERTIES, ROOT_PATH, PathCodec, StructuralPath, is_valid_segment

logger = logging.getLogger(__name__)

ROLE_SCHEMA = "schema"
ROLE_PROPERTIES = "properties"

KIND_OBJECT = "object"
KIND_ARRAY = "array"
KIND_PRIMITIVE = "primitive"
KIND_OPAQUE = "opaque"

_SCALARS = (str, int, float, bool, type(None))


def declared_types(fragment: Any) -> List[str]:
    if not isinstance(fragment, Mapping):
        return []
    declared = fragment.get("type")
    if isinstance(declared, str):
        return [declared]
    if isinstance(declared, list):
        return [item for item in declared if isinstance(item, str)]
    return []


def schema_kind(fragment: Any) -> str:
    """Classify a schema fragment; never raises."""
    if isinstance(fragment, Mapping):
        types = declared_types(fragment)
        if "object" in types and isinstance(fragment.get("properties"), Mapping):
            return KIND_OBJECT
        if "array" in types and isinstance(fragment.get("items"), Mapping):
            return KIND_ARRAY
        return KIND_PRIMITIVE
    if isinstance(fragment, _SCALARS):
        return KIND_PRIMITIVE
    return KIND_OPAQUE


def type_label(fragment: Any) -> str:
    types = declared_types(fragment)
    if types:
        return "|".join(types)
    if isinstance(fragment, Mapping) and "$ref" in fragment:
        return "reference"
    if isinstance(fragment, Mapping):
        return "any"
    if isinstance(fragment, _SCALARS):
        return "literal"
    return "unknown"


@dataclass(frozen=True)
class SchemaCursor:
    """A position in the schema tree addressed by a structural path.

    ``role`` is ``schema`` for a schema fragment and ``properties`` for the
    pseudo node standing for an object's property container; in the latter
    case ``fragment`` is the owning object schema.
    """

    path: StructuralPath
    fragment: Any
    role: str = ROLE_SCHEMA

    @property
    def kind(self) -> str:
        if self.role == ROLE_PROPERTIES:
            return ROLE_PROPERTIES
        return schema_kind(self.fragment)

    @property
    def name(self) -> str:
        segments = self.path.segments
        return segments[-1] if segments else ROOT_PATH

    def children(self) -> List["SchemaCursor"]:
        kind = self.kind
        if kind == KIND_OBJECT:
            return [SchemaCursor(self.path.child(PROPERTIES), self.fragment, ROLE_PROPERTIES)]
        if kind == KIND_ARRAY:
            return [SchemaCursor(self.path.child(ITEMS), self.fragment["items"])]
        if kind == ROLE_PROPERTIES:
            properties = self.fragment.get("properties") or {}
            cursors = []
            for name, value in properties.items():
                if not is_valid_segment(name):
                    logger.info("Skipping property %r under %s: not addressable as a path segment", name, self.path)
                    continue
                cursors.append(SchemaCursor(self.path.child(name), value))
            return cursors
        return []

    def required_names(self) -> List[str]:
        if self.role != ROLE_PROPERTIES:
            return []
        required = self.fragment.get("required")
        if not isinstance(required, list):
            return []
        return [str(name) for name in required]


def root_cursor(schema: Any) -> SchemaCursor:
    return SchemaCursor(ROOT_PATH, schema)


def resolve(schema: Any, path: str) -> Optional[SchemaCursor]:
    """Walk ``path`` from the document root; ``None`` when it does not exist.

    A trailing ``properties``/``items`` segment is resolved through its owning
    object/array schema first.
    """
    target = PathCodec.parse(path)
    owner_segments = target.owner.segments
    cursor: Optional[SchemaCursor] = root_cursor(schema)
    for segment in owner_segments:
        cursor = _step(cursor, segment)
        if cursor is None:
            return None
    if target.ends_with_pseudo_segment:
        cursor = _step(cursor, target.segments[-1])
    return cursor


def _step(cursor: SchemaCursor, segment: str) -> Optional[SchemaCursor]:
    for child in cursor.children():
        if child.name == segment:
            return child
    return None
