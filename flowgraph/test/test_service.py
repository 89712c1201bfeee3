import asyncio

import pytest

from flowgraph.compiler import compile_graph
from flowgraph.compiler.errors import ConfigurationError, GenerationError, ValidationError
from flowgraph.config import Settings
from flowgraph.generator import LLMGenerator
from flowgraph.service import StructuralBackend, build_backend, transpile

GRAPH = {
    "nodes": [{"id": "n1"}],
    "edges": [{"source": "START", "target": "n1"}, {"source": "n1", "target": "END"}],
}


class RecordingBackend:
    name = "recording"

    def __init__(self, code="graph = graph_builder.compile()\n"):
        self.code = code
        self.graphs = []

    async def generate(self, graph):
        self.graphs.append(graph)
        return self.code


class TestTranspile:

    def test_default_backend_is_the_compiler(self):
        result = asyncio.run(transpile(GRAPH))
        assert result == {"code": compile_graph(GRAPH)}

    def test_backend_receives_canonical_graph(self):
        backend = RecordingBackend()
        raw = {"nodes": [{"id": " n1 ", "label": "  Chat\x00 ", "extra": 1}], "edges": []}
        asyncio.run(transpile(raw, backend))
        graph = backend.graphs[0]
        assert graph.to_dict() == {"nodes": [{"id": "n1", "type": "NODE", "label": "Chat"}], "edges": []}

    def test_validation_short_circuits(self):
        backend = RecordingBackend()
        with pytest.raises(ValidationError):
            asyncio.run(transpile({"nodes": [{"id": "bad id"}]}, backend))
        assert backend.graphs == []

    def test_empty_backend_output(self):
        with pytest.raises(GenerationError):
            asyncio.run(transpile(GRAPH, RecordingBackend(code="  ")))

    def test_strict_flag_is_forwarded(self):
        graph = {
            "nodes": [{"id": "a"}, {"id": "b", "type": "group"}],
            "edges": [{"source": "a", "target": "b"}],
        }
        with pytest.raises(ValidationError):
            asyncio.run(transpile(graph, strict=True))

    def test_structural_backend_bootstrap(self):
        backend = StructuralBackend(bootstrap="class State(dict):\n    pass\n")
        code = asyncio.run(transpile(GRAPH, backend))["code"]
        assert "class State(dict):" in code


class TestBuildBackend:

    def test_compiler(self):
        assert isinstance(build_backend(Settings()), StructuralBackend)

    def test_llm(self):
        backend = build_backend(Settings(strategy="llm", openai_api_key="sk-test"))
        assert isinstance(backend, LLMGenerator)

    def test_llm_without_credential(self):
        with pytest.raises(ConfigurationError):
            build_backend(Settings(strategy="llm"))
