#!/usr/bin/env python3
"""Install a component and its dependencies from a knowledge base export.

Usage:
    uv run python scripts/install_component.py COMPONENT_ID --kb kb.json [--best-effort]

Reads a node-link JSON export of the knowledge graph, resolves the
component's dependencies, downloads and installs each in order, then
prints one line per component.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from sc_component_manager.config import ComponentManagerConfig, FailurePolicy
from sc_component_manager.memory import KnowledgeGraphGateway, NetworkXGraphStore
from sc_component_manager.workflows import InstallPipeline


def main() -> None:
    parser = argparse.ArgumentParser(description="Install a knowledge-base component")
    parser.add_argument("component_id", help="System identifier of the component")
    parser.add_argument("--kb", required=True, help="Path to node-link graph JSON")
    parser.add_argument("--config", help="Path to a JSON configuration file")
    parser.add_argument("--download-dir", help="Override the download directory")
    parser.add_argument(
        "--best-effort",
        action="store_true",
        help="Keep installing after a component fails",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    kb_path = Path(args.kb)
    if not kb_path.exists():
        print(f"ERROR: {kb_path} not found")
        sys.exit(1)

    config = ComponentManagerConfig.from_file(Path(args.config)) if args.config else ComponentManagerConfig()
    overrides: dict[str, object] = {}
    if args.download_dir:
        overrides["download_dir"] = Path(args.download_dir)
    if args.best_effort:
        overrides["failure_policy"] = FailurePolicy.BEST_EFFORT
    if overrides:
        config = config.model_copy(update=overrides)

    store = NetworkXGraphStore()
    store.load(kb_path)
    print(f"Loaded {store.node_count()} nodes, {store.edge_count()} arcs from {kb_path}")

    pipeline = InstallPipeline(KnowledgeGraphGateway(store, config.keynodes), config)
    report = pipeline.run(args.component_id)

    if report.resolution_error is not None:
        print(f"ABORTED: {report.resolution_error}")
        sys.exit(2)

    for component_id in report.order:
        outcome = report.outcomes[component_id]
        reason = f"  {outcome.error}" if outcome.error is not None else ""
        print(f"{outcome.status.value:>10}  {component_id}{reason}")
    print(f"\nDone in {report.latency_ms:.0f} ms.")

    sys.exit(0 if report.ok else 1)


if __name__ == "__main__":
    main()
