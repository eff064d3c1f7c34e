"""Read-only snapshot of the caller's per-path collapse flags."""

from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional

from .paths import ROOT_PATH, PathCodec, StructuralPath


def _coerce(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    # Marker objects from the tree editor (e.g. "max depth reached") mean expanded.
    return False if value else None


class CollapsedState(Mapping[str, bool]):
    """Immutable view of which structural paths are collapsed.

    Absent paths default to collapsed. An absent root is undecided and does not
    hide its own immediate structure.
    """

    def __init__(self, entries: Optional[Mapping[str, Any]] = None) -> None:
        normalized: Dict[str, bool] = {}
        for raw_path, raw_value in (entries or {}).items():
            value = _coerce(raw_value)
            if value is None:
                continue
            normalized[PathCodec.parse(raw_path)] = value
        self._entries = MappingProxyType(normalized)

    def __getitem__(self, path: str) -> bool:
        return self._entries[PathCodec.parse(path)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        return PathCodec.parse(path) in self._entries

    def __repr__(self) -> str:
        return f"CollapsedState({dict(self._entries)!r})"

    @property
    def root_decided(self) -> bool:
        return ROOT_PATH in self._entries

    def is_collapsed(self, path: str) -> bool:
        key = PathCodec.parse(path)
        value = self._entries.get(key)
        if value is not None:
            return value
        return not key.is_root

    def is_explicitly_expanded(self, path: str) -> bool:
        return self._entries.get(PathCodec.parse(path)) is False

    def expanded_paths(self) -> List[StructuralPath]:
        return [StructuralPath(path) for path, value in self._entries.items() if value is False]

    def with_toggle(self, path: str, collapsed: bool) -> "CollapsedState":
        updated = dict(self._entries)
        updated[PathCodec.parse(path)] = bool(collapsed)
        return CollapsedState(updated)

    def to_dict(self) -> Dict[str, bool]:
        return dict(self._entries)
