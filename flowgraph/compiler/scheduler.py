"""
flowgraph Compiler — Emission Scheduler
=======================================
Maps an IRGraph → IRSchedule: the resolved, ordered plan the emitter turns
into program text.

All naming decisions are made here, in one pass over the nodes, before any
edge is resolved.  The emitter never derives a name itself.

Function naming
---------------
Every node whose type has a registered template gets a function name:

    slugify(label or id)          e.g.  "Call API"  →  call_api

Collisions between distinct names are suffixed in input order (_2, _3, ...).

Edge expressions
----------------
    START / END  →  the bare START / END markers imported by the preamble
    node id      →  repr() of that node's display name
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .errors import ValidationError
from .ir import IRGraph
from .naming import assign_function_names
from .schema import SENTINELS
from .templates import is_emitted


# ── Scheduled node (resolved reference) ─────────────────────────────────────

@dataclass
class ScheduledNode:
    node_id: str
    node_name: str
    type_name: str
    function_name: str
    code: Optional[str] = None


@dataclass
class ScheduledEdge:
    source_expr: str
    target_expr: str


# ── Full emission schedule ───────────────────────────────────────────────────

@dataclass
class IRSchedule:
    # Nodes that produce a function + registration, in input order.
    nodes: List[ScheduledNode] = field(default_factory=list)
    # Connection statements, in input order.
    edges: List[ScheduledEdge] = field(default_factory=list)


# ── Scheduler ────────────────────────────────────────────────────────────────

class Scheduler:
    def __init__(self, ir: IRGraph):
        self.ir = ir

    def _schedule_nodes(self) -> List[ScheduledNode]:
        emitted = [n for n in self.ir.nodes if is_emitted(n.type_name)]
        names   = assign_function_names(n.name for n in emitted)
        return [
            ScheduledNode(
                node_id=node.id,
                node_name=node.name,
                type_name=node.type_name,
                function_name=fn,
                code=node.code,
            )
            for node, fn in zip(emitted, names)
        ]

    def _endpoint_expr(self, endpoint: str, location: str) -> str:
        if endpoint in SENTINELS:
            return endpoint
        node = self.ir.get_node(endpoint)
        if node is None:
            raise ValidationError(f"unknown node '{endpoint}'", location)
        return repr(node.name)

    def build(self) -> IRSchedule:
        schedule = IRSchedule(nodes=self._schedule_nodes())

        for i, edge in enumerate(self.ir.edges):
            schedule.edges.append(ScheduledEdge(
                source_expr=self._endpoint_expr(edge.source, f"edges[{i}].source"),
                target_expr=self._endpoint_expr(edge.target, f"edges[{i}].target"),
            ))
        return schedule


__all__ = ["IRSchedule", "ScheduledEdge", "ScheduledNode", "Scheduler"]
