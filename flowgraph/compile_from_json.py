"""
compile_from_json.py — CLI for the flowgraph compiler
=====================================================
Compiles an editor graph JSON file into a LangGraph Python script.

Usage
-----
    flowgraph-compile <graph.json> [options]
    python -m flowgraph.compile_from_json <graph.json> [options]

Options
-------
    --target  {compiler,llm}  Code generator (default: compiler)
                                compiler — deterministic local compiler
                                llm      — OpenAI model (needs OPENAI_API_KEY)
    --out     <dir>           Output directory (default: compiled/)
    --print                   Print the generated source to stdout instead of writing a file
    --canonical               Print the sanitized graph JSON and exit
    --strict                  Reject edges that touch non-NODE nodes (default: warn)

The input may be a bare graph ({"nodes": [...], "edges": [...]}) or the
request body the editor posts ({"graphJSON": {...}}).

Examples
--------
    flowgraph-compile graphs/chatbot.json
    flowgraph-compile graphs/chatbot.json --print
    flowgraph-compile graphs/chatbot.json --target llm --out build/
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from pathlib import Path

from flowgraph.compiler.deserialiser import json_to_ir
from flowgraph.compiler.errors import ConfigurationError, GenerationError, ValidationError
from flowgraph.compiler.schema import validate_file
from flowgraph.config import STRATEGIES, STRATEGY_COMPILER, load_settings
from flowgraph.log import configure_logging
from flowgraph.service import build_backend, generate_code

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="flowgraph-compile",
        description="Compile a flowgraph JSON graph to LangGraph Python.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    p.add_argument(
        "graph_json",
        metavar="graph.json",
        help="Path to the graph JSON file to compile.",
    )
    p.add_argument(
        "--target",
        choices=STRATEGIES,
        default=STRATEGY_COMPILER,
        help="Code generator. compiler (default) is deterministic; llm calls OpenAI.",
    )
    p.add_argument(
        "--out",
        metavar="DIR",
        default="compiled",
        help="Output directory for the compiled .py file (default: compiled/).",
    )
    p.add_argument(
        "--print",
        dest="print_only",
        action="store_true",
        help="Print generated source to stdout instead of writing a file.",
    )
    p.add_argument(
        "--canonical",
        action="store_true",
        help="Print the sanitized graph JSON instead of compiling it.",
    )
    p.add_argument(
        "--strict",
        action="store_true",
        help="Treat edges to non-NODE nodes as errors rather than warnings.",
    )
    return p


def _stem_to_filename(stem: str) -> str:
    """Turn 'my-chat bot' → 'my_chat_bot.py'."""
    safe = stem.lower().replace("-", "_").replace(" ", "_")
    return f"{safe}.py"


def main(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1
    configure_logging(settings.log_level)

    json_path = Path(args.graph_json)
    if not json_path.exists():
        print(f"[error] File not found: {json_path}", file=sys.stderr)
        return 1

    # ── Validate JSON ────────────────────────────────────────────────────────
    try:
        graph = validate_file(json_path, strict=args.strict)
    except json.JSONDecodeError as exc:
        print(f"[error] Invalid JSON: {exc}", file=sys.stderr)
        return 1
    except ValidationError as exc:
        print(f"[error] Graph validation failed: {exc}", file=sys.stderr)
        return 1

    if args.canonical:
        print(json.dumps(graph, ensure_ascii=False, indent=2))
        return 0

    ir = json_to_ir(graph)
    print(f"[compile_from_json] target : {args.target}", file=sys.stderr)
    print(f"[compile_from_json] nodes  : {len(ir.nodes)}", file=sys.stderr)
    print(f"[compile_from_json] edges  : {len(ir.edges)}", file=sys.stderr)

    # ── Generate ─────────────────────────────────────────────────────────────
    try:
        backend = build_backend(dataclasses.replace(settings, strategy=args.target))
        source = asyncio.run(generate_code(ir, backend))
    except ConfigurationError as exc:
        print(f"[error] Configuration: {exc}", file=sys.stderr)
        return 1
    except GenerationError as exc:
        logger.debug("Generation failed", exc_info=exc)
        print(f"[error] Generation failed: {exc}", file=sys.stderr)
        return 1

    # ── Output ───────────────────────────────────────────────────────────────
    if args.print_only:
        sys.stdout.write(source)
        return 0

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / _stem_to_filename(json_path.stem)
    out_path.write_text(source, encoding="utf-8")

    print(f"[compile_from_json] wrote  : {out_path}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
