"""
flowgraph Compiler
==================
Deterministic graph → LangGraph transpiler.

Pipeline:
    raw JSON    →  [schema.sanitize_graph]   →  canonical dict
    canonical   →  [deserialiser.json_to_ir] →  IRGraph
    IRGraph     →  [scheduler]               →  IRSchedule
    IRSchedule  →  [emitter]                 →  Python source str

Public API
----------
    from flowgraph.compiler import compile_graph

    source = compile_graph({"nodes": [...], "edges": [...]})
    print(source)
"""

from __future__ import annotations

from typing import Any, Optional

from .deserialiser import json_to_ir
from .emitter import emit
from .errors import ConfigurationError, FlowGraphError, GenerationError, ValidationError
from .ir import IRGraph
from .scheduler import Scheduler
from .schema import sanitize_graph


def compile_ir(ir: IRGraph, bootstrap: Optional[str] = None) -> str:
    """Compile an already-canonical IRGraph to LangGraph source."""
    return emit(Scheduler(ir).build(), bootstrap=bootstrap)


def compile_graph(
    data: Any,
    *,
    strict: bool = False,
    bootstrap: Optional[str] = None,
) -> str:
    """
    Validate raw graph JSON and compile it to LangGraph source.

    Args:
        data:       The editor's graph JSON (``{"nodes": [...], "edges": [...]}``).
        strict:     Reject edges that touch non-"NODE" nodes.
        bootstrap:  Replacement for the default bootstrap fragment.

    Returns:
        Complete Python source as a single string.

    Raises:
        ValidationError: If the graph is rejected.  Nothing is emitted.
    """
    return compile_ir(json_to_ir(sanitize_graph(data, strict=strict)), bootstrap=bootstrap)


__all__ = [
    "ConfigurationError",
    "FlowGraphError",
    "GenerationError",
    "ValidationError",
    "compile_graph",
    "compile_ir",
]
