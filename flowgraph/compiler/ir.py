"""
flowgraph Compiler — Intermediate Representation
================================================
IRGraph is the typed form of a canonical graph.

It is the data model shared between the pipeline phases:

    raw JSON  →  [schema]  →  canonical dict  →  [deserialiser]  →  IRGraph
                                                                      ↓
                                                               [scheduler]  →  IRSchedule
                                                                                  ↓
                                                                             [emitter]  →  Python source str

IR objects are never mutated after the deserialiser builds them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# ── Node ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class IRNode:
    id: str
    type_name: str = "NODE"
    label: Optional[str] = None
    code: Optional[str] = None

    @property
    def name(self) -> str:
        """Authoritative display name: the label when present, else the id."""
        return self.label or self.id

    def to_dict(self) -> Dict[str, str]:
        data = {"id": self.id, "type": self.type_name}
        if self.label is not None:
            data["label"] = self.label
        if self.code is not None:
            data["code"] = self.code
        return data


# ── Edge ─────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class IREdge:
    source: str
    target: str

    def to_dict(self) -> Dict[str, str]:
        return {"source": self.source, "target": self.target}


# ── Graph ─────────────────────────────────────────────────────────────────────

@dataclass
class IRGraph:
    # Insertion order from the editor is preserved in both lists.
    nodes: List[IRNode] = field(default_factory=list)
    edges: List[IREdge] = field(default_factory=list)

    # ── Convenience queries ────────────────────────────────────────────────

    def get_node(self, node_id: str) -> Optional[IRNode]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }
