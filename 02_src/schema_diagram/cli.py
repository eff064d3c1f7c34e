"""CLI entrypoint helpers for a one-shot diagram regeneration."""

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .collapsed_state import CollapsedState
from .config import DiagramConfig, load_settings
from .graph_orchestrator import elements_to_json
from .regeneration import RegenerationInputs, RegenerationPipeline

logger = logging.getLogger(__name__)


def _read_json(path: str) -> Optional[Any]:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as error:
        logger.warning("Could not read JSON from %s: %s", path, error)
        return None


def run_pipeline(
    schema_path: str,
    collapsed_path: str = "",
    config: Optional[DiagramConfig] = None,
) -> Dict[str, Any]:
    config = config or DiagramConfig()
    schema = _read_json(schema_path)
    collapsed_raw = _read_json(collapsed_path) if collapsed_path else None
    if collapsed_raw is not None and not isinstance(collapsed_raw, dict):
        logger.warning("Ignoring collapsed state in %s: expected a JSON object", collapsed_path)
        collapsed_raw = None

    inputs = RegenerationInputs(
        schema=schema,
        collapsed=CollapsedState(collapsed_raw),
        config=config,
        error=schema is None,
    )
    pipeline = RegenerationPipeline()
    if inputs.is_degenerate:
        nodes, edges = [], []
        report: Dict[str, Any] = {"node_count": 0, "edge_count": 0, "dropped_edge_count": 0}
    else:
        elements = pipeline.run(inputs)
        nodes, edges = elements.nodes, elements.edges
        report = pipeline.last_report

    artifact = elements_to_json(nodes, edges)
    artifact["generation"] = 1
    artifact["meta"] = {
        "schema_path": schema_path,
        "collapsed_path": collapsed_path,
        "config": {
            "max_depth": config.max_depth,
            "group_properties": config.group_properties,
            "max_individual_properties": config.max_individual_properties,
            "max_individual_array_items": config.max_individual_array_items,
            "truncate_ancestral": config.truncate_ancestral,
        },
        "report": report,
    }
    return artifact


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a schema as diagram nodes/edges and save JSON artifact.")
    parser.add_argument("--schema-path", required=True, help="Path to the JSON schema document.")
    parser.add_argument(
        "--collapsed-path",
        default="",
        help="Optional JSON object mapping structural paths to collapsed flags.",
    )
    parser.add_argument(
        "--output-path",
        default="03_data/diagram/graph_artifact.json",
        help="Where to save resulting diagram artifact JSON.",
    )
    parser.add_argument("--max-depth", type=int, default=None, help="Traversal depth ceiling.")
    parser.add_argument(
        "--group-properties",
        action="store_true",
        default=None,
        help="Merge scalar sibling properties into their container node.",
    )
    parser.add_argument(
        "--truncate-ancestral",
        action="store_true",
        default=None,
        help="Compact single-child ancestor chains above expanded nodes.",
    )
    return parser.parse_args(argv)


def _config_from_args(args: argparse.Namespace) -> DiagramConfig:
    base = load_settings().diagram
    return DiagramConfig(
        max_depth=base.max_depth if args.max_depth is None else args.max_depth,
        group_properties=base.group_properties if args.group_properties is None else True,
        max_individual_properties=base.max_individual_properties,
        max_individual_array_items=base.max_individual_array_items,
        truncate_ancestral=base.truncate_ancestral if args.truncate_ancestral is None else True,
    )


def main(argv: List[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    artifact = run_pipeline(
        schema_path=args.schema_path,
        collapsed_path=args.collapsed_path,
        config=_config_from_args(args),
    )
    output_path = Path(args.output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(artifact, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"Diagram artifact saved to: {output_path.resolve()}")
    print(
        "Counts:",
        f"nodes={len(artifact['nodes'])}",
        f"edges={len(artifact['edges'])}",
        f"dropped_edges={artifact['meta']['report'].get('dropped_edge_count', 0)}",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
