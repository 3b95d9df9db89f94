"""
Command-line interface for mindmap-layout.

    mindmap-layout optimize <graph.json>   - Lay out a mind-map graph
    mindmap-layout config [--show|--init]  - Inspect or create configuration

Examples:
    mindmap-layout optimize map.json --seed 42
    mindmap-layout optimize map.json -o out.json --format json
    mindmap-layout config --init
"""

import argparse
import sys
from typing import List, Optional

from mindmap_layout import __version__

__all__ = ["main"]


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the mindmap-layout CLI."""
    parser = argparse.ArgumentParser(
        prog="mindmap-layout",
        description="Automatic grid layout for mind-map graphs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--version", action="version", version=f"mindmap-layout {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    optimize_parser = subparsers.add_parser("optimize", help="Lay out a JSON graph")
    optimize_parser.add_argument("graph", help="Path to graph .json file")
    optimize_parser.add_argument(
        "-o", "--output", help="Output file (default: overwrite the input)"
    )
    optimize_parser.add_argument(
        "--aspect-ratio", type=float, help="Target width/height ratio of the layout"
    )
    optimize_parser.add_argument(
        "--min-edge-length", type=float, help="Spacing between neighbouring nodes"
    )
    optimize_parser.add_argument("--seed", type=int, help="Random seed for reproducible layouts")
    optimize_parser.add_argument("--format", choices=["table", "json"], help="Summary format")
    optimize_parser.add_argument(
        "--dry-run", action="store_true", help="Only report the initial lattice and cost"
    )
    optimize_parser.add_argument("-v", "--verbose", action="store_true")
    optimize_parser.add_argument("-q", "--quiet", action="store_true")

    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_parser.add_argument(
        "--show", action="store_true", help="Show effective configuration with sources"
    )
    config_parser.add_argument("--init", action="store_true", help="Create template config file")
    config_parser.add_argument("--paths", action="store_true", help="Show config file paths")
    config_parser.add_argument("--user", action="store_true", help="Use user config for --init")
    config_parser.add_argument("config_action", nargs="?", choices=["get"], help="Config action")
    config_parser.add_argument("config_key", nargs="?", help="Config key (e.g., layout.aspect_ratio)")

    args = parser.parse_args(argv)

    if args.command == "optimize":
        from .optimize_cmd import run_optimize

        return run_optimize(
            args.graph,
            output_path=args.output,
            aspect_ratio=args.aspect_ratio,
            min_edge_length=args.min_edge_length,
            seed=args.seed,
            output_format=args.format,
            dry_run=args.dry_run,
            verbose=args.verbose,
            quiet=args.quiet,
        )

    if args.command == "config":
        return _run_config(args)

    parser.print_help()
    return 0


def _run_config(args) -> int:
    from .config_cmd import main as config_main

    sub_argv = [
        flag
        for flag, enabled in (
            ("--show", args.show),
            ("--init", args.init),
            ("--paths", args.paths),
            ("--user", args.user),
        )
        if enabled
    ]
    if args.config_action:
        sub_argv.append(args.config_action)
    if args.config_key:
        sub_argv.append(args.config_key)
    return config_main(sub_argv)


if __name__ == "__main__":
    sys.exit(main())
