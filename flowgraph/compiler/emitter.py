"""
flowgraph Compiler — LangGraph Source Emitter
=============================================
Turns an IRSchedule into one block of Python source in LangGraph's
StateGraph idiom.  Output layout, top to bottom:

    from langgraph.graph import StateGraph, START, END      (preamble)
    <bootstrap fragment>                                    (once)
    def <function_name>(state: State): ...                  (per node)
    graph_builder = StateGraph(State)                       (once)
    graph_builder.add_node("<NAME>", <function_name>)       (per node)
    graph_builder.add_edge(<source>, <target>)              (per edge)
    graph = graph_builder.compile()                         (once)

The output contains no timestamps or other run-dependent text, so the same
schedule always produces byte-identical source.
"""

from __future__ import annotations

from typing import List, Optional

from .scheduler import IRSchedule
from .templates import (
    BOOTSTRAP,
    GRAPH_CONSTRUCTION,
    GRAPH_FINALIZATION,
    PREAMBLE,
    CodeWriter,
    get_template,
)


# ── Sections ──────────────────────────────────────────────────────────────────

def _bootstrap(fragment: str) -> List[str]:
    return fragment.strip("\n").splitlines()


def _functions(schedule: IRSchedule) -> List[str]:
    w = CodeWriter(indent=0)
    for snode in schedule.nodes:
        get_template(snode.type_name).emit_function(snode, w)
        w.blank(2)
    return w.lines()


def _assembly(schedule: IRSchedule) -> List[str]:
    w = CodeWriter(indent=0)
    w.writeln(GRAPH_CONSTRUCTION)
    for snode in schedule.nodes:
        get_template(snode.type_name).emit_registration(snode, w)

    if schedule.edges:
        w.blank()
    for edge in schedule.edges:
        w.writeln(f"graph_builder.add_edge({edge.source_expr}, {edge.target_expr})")

    w.blank()
    w.writeln(GRAPH_FINALIZATION)
    return w.lines()


# ── Public API ────────────────────────────────────────────────────────────────

def emit(schedule: IRSchedule, bootstrap: Optional[str] = None) -> str:
    sections = [
        PREAMBLE,
        _bootstrap(BOOTSTRAP if bootstrap is None else bootstrap),
        _functions(schedule),
        _assembly(schedule),
    ]
    lines: List[str] = []
    for i, section in enumerate(sections):
        if i and section and lines and lines[-1] != "":
            lines.extend(["", ""])
        lines.extend(section)
    return "\n".join(lines) + "\n"


__all__ = ["emit"]
