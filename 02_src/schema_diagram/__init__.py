"""Core package for the schema-to-diagram synchronization engine."""

from .builder import SchemaGraphBuilder, generate_nodes_and_edges, truncate_ancestral_boxes
from .bulk_fold import BulkFoldController
from .collapsed_state import CollapsedState
from .config import DiagramConfig, SyncSettings, load_settings
from .edge_validator import validate_edges
from .graph_model import GraphEdge, GraphElements, GraphNode, GraphSnapshot, Position
from .graph_orchestrator import GraphOrchestrator
from .paths import ROOT_PATH, PathCodec, StructuralPath
from .pipeline import PipelinePhase, PipelineRunner
from .position_memory import PositionMemory
from .regeneration import RegenerationInputs, RegenerationPipeline
from .scheduler import RegenerationScheduler, SchedulerState
from .sync import DiagramSynchronizer
from .timers import AsyncioTimerService

__all__ = [
    "PathCodec",
    "StructuralPath",
    "ROOT_PATH",
    "CollapsedState",
    "DiagramConfig",
    "SyncSettings",
    "load_settings",
    "Position",
    "GraphNode",
    "GraphEdge",
    "GraphElements",
    "GraphSnapshot",
    "GraphOrchestrator",
    "SchemaGraphBuilder",
    "generate_nodes_and_edges",
    "truncate_ancestral_boxes",
    "validate_edges",
    "PositionMemory",
    "BulkFoldController",
    "PipelinePhase",
    "PipelineRunner",
    "RegenerationInputs",
    "RegenerationPipeline",
    "RegenerationScheduler",
    "SchedulerState",
    "DiagramSynchronizer",
    "AsyncioTimerService",
]
