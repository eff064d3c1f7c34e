"""Pipeline phases for one diagram regeneration."""

from .build import GraphBuildPhase
from .edges import EdgeValidationPhase
from .positions import PositionOverlayPhase

__all__ = [
    "GraphBuildPhase",
    "PositionOverlayPhase",
    "EdgeValidationPhase",
]
