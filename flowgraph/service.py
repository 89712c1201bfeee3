"""
The transpile operation: raw graph JSON in, ``{"code": ...}`` out.

    from flowgraph.service import transpile

    result = await transpile({"nodes": [...], "edges": [...]})
    print(result["code"])

Validation always runs first; a rejected graph never reaches a backend.
Each call is independent: backends are passed in, nothing is cached here.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol

from flowgraph.compiler import compile_ir
from flowgraph.compiler.deserialiser import json_to_ir_checked
from flowgraph.compiler.errors import GenerationError
from flowgraph.compiler.ir import IRGraph
from flowgraph.config import STRATEGY_LLM, Settings

logger = logging.getLogger(__name__)


class Backend(Protocol):
    name: str

    async def generate(self, graph: IRGraph) -> str: ...


class StructuralBackend:
    """Strategy-A backend: the deterministic local compiler."""

    name = "compiler"

    def __init__(self, bootstrap: Optional[str] = None):
        self.bootstrap = bootstrap

    async def generate(self, graph: IRGraph) -> str:
        return compile_ir(graph, bootstrap=self.bootstrap)


def build_backend(settings: Settings) -> Backend:
    """
    Raises:
        ConfigurationError: If the configured strategy lacks what it needs.
    """
    if settings.strategy == STRATEGY_LLM:
        from flowgraph.generator import LLMGenerator
        return LLMGenerator.from_settings(settings)
    return StructuralBackend()


async def generate_code(graph: IRGraph, backend: Optional[Backend] = None) -> str:
    backend = backend or StructuralBackend()
    logger.info(
        "Transpiling graph with %s backend (%d nodes, %d edges)",
        backend.name, len(graph.nodes), len(graph.edges),
    )
    code = await backend.generate(graph)
    if not code or not code.strip():
        raise GenerationError(f"{backend.name} backend returned no code")
    return code


async def transpile(
    data: Any,
    backend: Optional[Backend] = None,
    *,
    strict: bool = False,
) -> Dict[str, str]:
    """
    Validate *data* and generate program text for it.

    Raises:
        ValidationError:    The graph was rejected; no backend was called.
        ConfigurationError: Propagated from the backend.
        GenerationError:    The backend failed or returned unusable output.
    """
    graph = json_to_ir_checked(data, strict=strict)
    return {"code": await generate_code(graph, backend)}


__all__ = ["Backend", "StructuralBackend", "build_backend", "generate_code", "transpile"]
