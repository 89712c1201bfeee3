"""
LLM-backed code generation.

    from flowgraph.generator import LLMGenerator

    generator = LLMGenerator(api_key="sk-...")
    source = await generator.generate(ir_graph)
"""

from .client import DEFAULT_MODEL, LLMGenerator, extract_code
from .prompt import RULES, build_messages

__all__ = ["DEFAULT_MODEL", "LLMGenerator", "RULES", "build_messages", "extract_code"]
