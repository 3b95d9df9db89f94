"""optimize CLI command: lay out a mind-map graph stored as JSON.

Reads nodes and edges, runs the grid annealer and writes the graph back
with every node's new location.

Usage:
    mindmap-layout optimize map.json
    mindmap-layout optimize map.json -o laid_out.json --seed 42
    mindmap-layout optimize map.json --aspect-ratio 1.78 --min-edge-length 30
    mindmap-layout optimize map.json --dry-run
    mindmap-layout optimize map.json --format json 2> progress.jsonl
"""

from __future__ import annotations

import json
import signal
import sys
import time
from contextlib import contextmanager, nullcontext
from pathlib import Path

from mindmap_layout.config import Config, ConfigError
from mindmap_layout.exceptions import MindMapLayoutError
from mindmap_layout.graph import MindMapGraph
from mindmap_layout.layout import AnnealingStats, LayoutOptimizer
from mindmap_layout.logging import enable_verbose
from mindmap_layout.progress import cancel_when, create_json_callback

from .progress import annealing_progress, spinner


def load_graph(path: Path) -> MindMapGraph:
    """Read a graph from the JSON exchange format."""
    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise ValueError("top-level JSON value must be an object")
    return MindMapGraph.from_dict(data)


def save_graph(graph: MindMapGraph, path: Path) -> None:
    path.write_text(json.dumps(graph.to_dict(), indent=2) + "\n")


@contextmanager
def _interrupt_flag():
    """Turn Ctrl-C into a flag so the anneal stops between batches."""
    state = {"interrupted": False}

    def handler(signum, frame):
        state["interrupted"] = True

    try:
        previous = signal.signal(signal.SIGINT, handler)
    except ValueError:
        # Not in the main thread; leave SIGINT alone
        yield state
        return
    try:
        yield state
    finally:
        signal.signal(signal.SIGINT, previous)


def _print_summary(stats: AnnealingStats, nodes: int, edges: int, elapsed: float) -> None:
    print("\n--- Layout Summary ---")
    print(f"  Nodes: {nodes}")
    print(f"  Edges: {edges}")
    print(f"  Initial cost: {stats.initial_cost:.1f}")
    print(f"  Final cost: {stats.final_cost:.1f}")
    print(f"  Improvement: {-stats.gain * 100:.1f}%")
    print(f"  Temperature levels: {stats.levels}")
    print(f"  Moves: {stats.moves} ({stats.accepted} accepted)")
    print(f"  Wall time: {elapsed:.2f}s")
    if stats.cancelled:
        print("  Interrupted: layout reflects the arrangement at interruption")


def _summary_dict(stats: AnnealingStats, nodes: int, edges: int, elapsed: float) -> dict:
    return {
        "nodes": nodes,
        "edges": edges,
        "initial_cost": stats.initial_cost,
        "final_cost": stats.final_cost,
        "gain": stats.gain,
        "levels": stats.levels,
        "batches": stats.batches,
        "accepted": stats.accepted,
        "rejected": stats.rejected,
        "cancelled": stats.cancelled,
        "elapsed": elapsed,
    }


def run_optimize(
    graph_path: str,
    *,
    output_path: str | None = None,
    aspect_ratio: float | None = None,
    min_edge_length: float | None = None,
    seed: int | None = None,
    output_format: str | None = None,
    dry_run: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    config: Config | None = None,
) -> int:
    """Run layout optimization on a JSON graph file.

    Unset options fall back to the loaded configuration.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    if config is None:
        try:
            config = Config.load()
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    aspect_ratio = config.layout.aspect_ratio if aspect_ratio is None else aspect_ratio
    min_edge_length = config.layout.min_edge_length if min_edge_length is None else min_edge_length
    seed = config.anneal.seed if seed is None else seed
    output_format = output_format or config.defaults.format
    verbose = verbose or config.defaults.verbose
    quiet = quiet or config.defaults.quiet

    if verbose:
        enable_verbose("DEBUG")

    source = Path(graph_path)
    if not source.exists():
        print(f"Error: graph file not found: {graph_path}", file=sys.stderr)
        return 1
    target = Path(output_path) if output_path else source

    try:
        with spinner("Reading graph...", quiet=quiet):
            graph = load_graph(source)
    except (OSError, ValueError, MindMapLayoutError) as e:
        print(f"Error reading graph: {e}", file=sys.stderr)
        return 1

    nodes, edges = len(graph.nodes()), len(graph.edges())
    show_text = not quiet and output_format == "table"
    if show_text:
        print(f"Read graph: {graph_path}")
        print(f"  Nodes: {nodes}")
        print(f"  Edges: {edges}")

    try:
        optimizer = LayoutOptimizer(graph, schedule=config.anneal.to_schedule(), seed=seed)
        optimizer.initialize(aspect_ratio, min_edge_length)
    except MindMapLayoutError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if dry_run:
        if output_format == "json":
            print(json.dumps({"nodes": nodes, "edges": edges, "initial_cost": optimizer.cost}))
        elif not quiet:
            layout = optimizer.layout
            print(f"\n[dry-run] Lattice: {len(layout.rows)} x {layout.cols}")
            print(f"  Initial cost: {optimizer.cost:.1f}")
        return 0

    start_time = time.monotonic()
    if output_format == "json" and not quiet:
        display = nullcontext(create_json_callback())
    else:
        display = annealing_progress(quiet=quiet)

    with _interrupt_flag() as state, display as callback:

        def keep_going() -> bool:
            return not state["interrupted"]

        stats = optimizer.optimize(progress_callback=cancel_when(callback, keep_going))
    optimizer.extract()
    elapsed = time.monotonic() - start_time

    if output_format == "json":
        print(json.dumps(_summary_dict(stats, nodes, edges, elapsed), indent=2))
    elif not quiet:
        _print_summary(stats, nodes, edges, elapsed)

    try:
        save_graph(graph, target)
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1

    if show_text:
        print(f"\nWrote result to: {target}")
    return 0
