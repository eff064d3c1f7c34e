"""Diagram and synchronization settings with .env support."""

import os
from dataclasses import dataclass, field
from typing import Callable, Optional, TypeVar

from dotenv import load_dotenv

ENV_PREFIX = "SCHEMA_DIAGRAM_"

T = TypeVar("T")


@dataclass(frozen=True)
class DiagramConfig:
    """Options consumed by the graph builder.

    ``max_individual_properties`` and ``max_individual_array_items`` below 1
    disable the corresponding truncation.
    """

    max_depth: int = 3
    group_properties: bool = False
    max_individual_properties: int = 5
    max_individual_array_items: int = 5
    truncate_ancestral: bool = False


@dataclass(frozen=True)
class SyncSettings:
    diagram: DiagramConfig = field(default_factory=DiagramConfig)
    debounce_seconds: float = 0.5
    position_quiet_seconds: float = 0.25
    bulk_max_paths: int = 100
    bulk_sibling_slice: int = 20
    bulk_expand_depth: int = 3
    bulk_stagger_seconds: float = 0.0
    bulk_batch_size: int = 10


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _env(name: str, parse: Callable[[str], T], default: T) -> T:
    raw = os.getenv(f"{ENV_PREFIX}{name}")
    if raw is None or not raw.strip():
        return default
    try:
        return parse(raw.strip())
    except ValueError as error:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name}: {error}") from error


def _seconds_from_ms(raw: str) -> float:
    return float(raw) / 1000.0


def load_settings(dotenv_path: Optional[str] = None) -> SyncSettings:
    """Build settings from the environment, reading a .env file first if present."""
    load_dotenv(dotenv_path)
    defaults = SyncSettings()
    diagram_defaults = defaults.diagram
    diagram = DiagramConfig(
        max_depth=_env("MAX_DEPTH", int, diagram_defaults.max_depth),
        group_properties=_env("GROUP_PROPERTIES", _parse_bool, diagram_defaults.group_properties),
        max_individual_properties=_env(
            "MAX_INDIVIDUAL_PROPERTIES", int, diagram_defaults.max_individual_properties
        ),
        max_individual_array_items=_env(
            "MAX_INDIVIDUAL_ARRAY_ITEMS", int, diagram_defaults.max_individual_array_items
        ),
        truncate_ancestral=_env(
            "TRUNCATE_ANCESTRAL", _parse_bool, diagram_defaults.truncate_ancestral
        ),
    )
    return SyncSettings(
        diagram=diagram,
        debounce_seconds=_env("DEBOUNCE_MS", _seconds_from_ms, defaults.debounce_seconds),
        position_quiet_seconds=_env(
            "POSITION_QUIET_MS", _seconds_from_ms, defaults.position_quiet_seconds
        ),
        bulk_max_paths=_env("BULK_MAX_PATHS", int, defaults.bulk_max_paths),
        bulk_sibling_slice=_env("BULK_SIBLING_SLICE", int, defaults.bulk_sibling_slice),
        bulk_expand_depth=_env("BULK_EXPAND_DEPTH", int, defaults.bulk_expand_depth),
        bulk_stagger_seconds=_env(
            "BULK_STAGGER_MS", _seconds_from_ms, defaults.bulk_stagger_seconds
        ),
        bulk_batch_size=_env("BULK_BATCH_SIZE", int, defaults.bulk_batch_size),
    )
