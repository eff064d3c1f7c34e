"""Structural path values and their codec."""

from typing import Iterable, List, Optional

ROOT = "root"
SEPARATOR = "."
PROPERTIES = "properties"
ITEMS = "items"
PSEUDO_SEGMENTS = (PROPERTIES, ITEMS)


def is_valid_segment(name: object) -> bool:
    """Whether a property name can be addressed as one path segment."""
    return isinstance(name, str) and name != "" and SEPARATOR not in name


class StructuralPath(str):
    """Canonical dotted address of a schema subtree, e.g. ``root.properties.foo``.

    Instances compare and hash like plain strings so they can key caller-owned
    dictionaries. Build them through :class:`PathCodec`, never by string
    interpolation.
    """

    __slots__ = ()

    @property
    def segments(self) -> List[str]:
        return PathCodec.to_segments(self)

    @property
    def depth(self) -> int:
        return len(self.segments)

    @property
    def is_root(self) -> bool:
        return self == ROOT

    @property
    def parent(self) -> Optional["StructuralPath"]:
        segments = self.segments
        if not segments:
            return None
        return PathCodec.from_segments(segments[:-1])

    @property
    def ends_with_pseudo_segment(self) -> bool:
        segments = self.segments
        return bool(segments) and segments[-1] in PSEUDO_SEGMENTS

    @property
    def owner(self) -> "StructuralPath":
        """The object/array path owning a trailing ``properties``/``items`` segment."""
        if self.ends_with_pseudo_segment:
            return PathCodec.from_segments(self.segments[:-1])
        return self

    def child(self, segment: str) -> "StructuralPath":
        return PathCodec.from_segments(self.segments + [segment])

    def is_descendant_of(self, other: str) -> bool:
        ancestor = PathCodec.to_segments(other)
        own = self.segments
        return len(own) > len(ancestor) and own[: len(ancestor)] == ancestor


class PathCodec:
    """Converts between dotted paths and the tree editor's segment arrays."""

    @staticmethod
    def to_segments(path: Optional[str]) -> List[str]:
        if not path:
            return []
        pieces = [piece for piece in str(path).split(SEPARATOR) if piece]
        return PathCodec._strip_root(pieces)

    @staticmethod
    def from_segments(segments: Iterable[str]) -> StructuralPath:
        pieces = [str(segment) for segment in segments if segment not in (None, "")]
        pieces = PathCodec._strip_root(pieces)
        return StructuralPath(SEPARATOR.join([ROOT, *pieces]))

    @staticmethod
    def parse(path: Optional[str]) -> StructuralPath:
        if isinstance(path, StructuralPath):
            return path
        return PathCodec.from_segments(PathCodec.to_segments(path))

    @staticmethod
    def _strip_root(pieces: List[str]) -> List[str]:
        # "root.root.properties" is a double-prefixed path, not a property called root.
        index = 0
        while index < len(pieces) and pieces[index] == ROOT:
            index += 1
        return pieces[index:]


ROOT_PATH = StructuralPath(ROOT)
