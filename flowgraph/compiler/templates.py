"""
flowgraph Compiler — Output Templates
=====================================
Everything the emitter writes that does not come from the user's graph lives
here: the fixed preamble, the bootstrap ("base") fragment, and one template
per node type.

A NodeTemplate provides two emission hooks:

  emit_function(node, writer)
      Emits the module-level function that implements the node.

  emit_registration(node, writer)
      Emits the graph_builder.add_node(...) statement for the node.

Node types without a registered template are rendering hints for the editor
only: they produce no function and no registration.

Adding a new node type
----------------------
1. Subclass NodeTemplate.
2. Override both hooks.
3. Register: TEMPLATE_REGISTRY["MY_TYPE"] = MyTemplate()
"""

from __future__ import annotations

import textwrap
from typing import Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .scheduler import ScheduledNode


# ── Code writer ───────────────────────────────────────────────────────────────

class CodeWriter:
    """Simple indented string accumulator."""

    def __init__(self, indent: int = 0):
        self._lines: List[str] = []
        self._indent = indent

    def writeln(self, line: str = "") -> "CodeWriter":
        if line:
            self._lines.append("    " * self._indent + line)
        else:
            self._lines.append("")
        return self

    def blank(self, count: int = 1) -> "CodeWriter":
        for _ in range(count):
            self.writeln()
        return self

    def push(self) -> "CodeWriter":
        self._indent += 1
        return self

    def pop(self) -> "CodeWriter":
        self._indent = max(0, self._indent - 1)
        return self

    def extend(self, lines: List[str]) -> "CodeWriter":
        for line in lines:
            self.writeln(line)
        return self

    def lines(self) -> List[str]:
        return self._lines


# ── Fixed program sections ────────────────────────────────────────────────────

PREAMBLE: List[str] = [
    "from langgraph.graph import StateGraph, START, END",
]

BOOTSTRAP = textwrap.dedent("""\
    from typing import Annotated

    from typing_extensions import TypedDict

    from langgraph.graph.message import add_messages
    from langchain.chat_models import init_chat_model

    llm = init_chat_model("openai:gpt-4.1")


    class State(TypedDict):
        messages: Annotated[list, add_messages]
    """)

GRAPH_CONSTRUCTION = "graph_builder = StateGraph(State)"
GRAPH_FINALIZATION = "graph = graph_builder.compile()"


# ── Built-in node fragments (editor palette) ─────────────────────────────────

NODE_CODE_TEMPLATES: Dict[str, Dict[str, str]] = {
    "Conv": {
        "label": "Chatbot",
        "description": "Conversational node: sends the message history to the LLM.",
        "code": 'return {"messages": [llm.invoke(state["messages"])]}\n',
    },
}


# ── Body helpers ──────────────────────────────────────────────────────────────

def not_implemented_statement(node_name: str) -> str:
    message = f"Node {node_name!r} is not implemented"
    return f"raise NotImplementedError({message!r})"


def body_lines(code: Optional[str]) -> List[str]:
    """
    Split a code fragment into function-body lines.

    Common leading indentation is removed (the editor stores fragments
    indented), and leading / trailing blank lines are dropped.  Everything
    else is kept exactly as written.
    """
    if code is None:
        return []
    lines = textwrap.dedent(code).splitlines()
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def has_statement(lines: List[str]) -> bool:
    """True if *lines* contain anything besides blank lines and comments."""
    return any(line.strip() and not line.lstrip().startswith("#") for line in lines)


# ── Base template ─────────────────────────────────────────────────────────────

class NodeTemplate:
    """
    Base class: emits nothing.  Used for node types that carry no
    transpilation semantics.
    """

    emits = False

    def emit_function(self, node: "ScheduledNode", writer: CodeWriter) -> None:
        pass

    def emit_registration(self, node: "ScheduledNode", writer: CodeWriter) -> None:
        pass


# ── NODE ──────────────────────────────────────────────────────────────────────

class FunctionNodeTemplate(NodeTemplate):
    """
    A "NODE" becomes ``def <function_name>(state: State):`` with the user's
    fragment as its body.  A missing (or comment-only) fragment raises
    NotImplementedError when the node runs.
    """

    emits = True

    def emit_function(self, node: "ScheduledNode", writer: CodeWriter) -> None:
        lines = body_lines(node.code)
        writer.writeln(f"def {node.function_name}(state: State):")
        writer.push()
        writer.extend(lines)
        if not has_statement(lines):
            writer.writeln(not_implemented_statement(node.node_name))
        writer.pop()

    def emit_registration(self, node: "ScheduledNode", writer: CodeWriter) -> None:
        writer.writeln(f"graph_builder.add_node({node.node_name!r}, {node.function_name})")


# ── Registry ──────────────────────────────────────────────────────────────────

TEMPLATE_REGISTRY: Dict[str, NodeTemplate] = {
    "NODE": FunctionNodeTemplate(),
}

_DEFAULT = NodeTemplate()


def get_template(type_name: str) -> NodeTemplate:
    return TEMPLATE_REGISTRY.get(type_name, _DEFAULT)


def is_emitted(type_name: str) -> bool:
    return get_template(type_name).emits


__all__ = [
    "BOOTSTRAP",
    "CodeWriter",
    "FunctionNodeTemplate",
    "GRAPH_CONSTRUCTION",
    "GRAPH_FINALIZATION",
    "NODE_CODE_TEMPLATES",
    "NodeTemplate",
    "PREAMBLE",
    "TEMPLATE_REGISTRY",
    "body_lines",
    "get_template",
    "has_statement",
    "is_emitted",
    "not_implemented_statement",
]
