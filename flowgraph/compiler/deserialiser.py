"""
flowgraph Compiler — Canonical Graph Deserialiser
=================================================
Converts a canonical graph dict (the output of schema.sanitize_graph) into an
IRGraph.  The input is trusted to be canonical; call json_to_ir_checked() when
starting from raw editor JSON.
"""

from __future__ import annotations

from typing import Any, Dict

from .ir import IREdge, IRGraph, IRNode
from .schema import DEFAULT_NODE_TYPE, sanitize_graph


def json_to_ir(data: Dict[str, Any]) -> IRGraph:
    nodes = [
        IRNode(
            id=raw["id"],
            type_name=raw.get("type", DEFAULT_NODE_TYPE),
            label=raw.get("label"),
            code=raw.get("code"),
        )
        for raw in data.get("nodes", [])
    ]
    edges = [IREdge(source=raw["source"], target=raw["target"])
             for raw in data.get("edges", [])]
    return IRGraph(nodes=nodes, edges=edges)


def json_to_ir_checked(data: Any, *, strict: bool = False) -> IRGraph:
    """Sanitize raw editor JSON, then deserialise it."""
    return json_to_ir(sanitize_graph(data, strict=strict))


__all__ = ["json_to_ir", "json_to_ir_checked"]
