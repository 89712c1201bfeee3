"""
flowgraph — transpile visually authored node graphs into LangGraph programs.

    from flowgraph import compile_graph

    source = compile_graph({
        "nodes": [{"id": "chatbot", "code": 'return {"messages": [llm.invoke(state["messages"])]}'}],
        "edges": [{"source": "START", "target": "chatbot"},
                  {"source": "chatbot", "target": "END"}],
    })
"""

from flowgraph.compiler import (
    ConfigurationError,
    FlowGraphError,
    GenerationError,
    ValidationError,
    compile_graph,
)
from flowgraph.service import transpile

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "FlowGraphError",
    "GenerationError",
    "ValidationError",
    "compile_graph",
    "transpile",
]
