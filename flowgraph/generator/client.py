"""
LLM-backed generation: sends the canonical graph plus the fixed rule
document to an OpenAI chat model and returns the program text it writes.

Unlike the structural compiler this path is not deterministic.  The output is
only checked for shape: non-empty, and it must build and compile a
StateGraph.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Optional

import openai

from flowgraph.compiler.errors import ConfigurationError, GenerationError
from flowgraph.compiler.ir import IRGraph
from flowgraph.config import Settings

from .prompt import build_messages

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1-mini"

_FENCE = re.compile(r"^```[A-Za-z0-9_+-]*[ \t]*\n(.*?)\n?```\s*$", re.DOTALL)


def extract_code(text: Optional[str]) -> str:
    """
    Strip a surrounding Markdown fence and check the result looks like a
    LangGraph program.

    Raises:
        GenerationError: If nothing usable is left.
    """
    code = (text or "").strip()
    match = _FENCE.match(code)
    if match:
        code = match.group(1).strip()
    if not code:
        raise GenerationError("generator returned empty output")
    if "StateGraph" not in code or ".compile(" not in code:
        raise GenerationError("generator output is not a LangGraph program")
    return code + "\n"


class LLMGenerator:
    """
    Strategy-B backend.

    Args:
        client:       An ``openai.AsyncOpenAI``-compatible client.  Built from
                      *api_key* when omitted.
        api_key:      OpenAI credential; required when *client* is omitted.
        model:        Chat model name.
        timeout:      Seconds before a generation fails with GenerationError.
        max_retries:  Retries performed by the OpenAI client itself.
    """

    name = "llm"

    def __init__(
        self,
        client: Any = None,
        *,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        max_retries: int = 2,
    ):
        if client is None:
            if not api_key:
                raise ConfigurationError("OPENAI_API_KEY is not set")
            client = openai.AsyncOpenAI(
                api_key=api_key,
                timeout=timeout,
                max_retries=max_retries,
            )
        self._client = client
        self.model = model
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "LLMGenerator":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.model,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
        )

    async def generate(self, graph: IRGraph) -> str:
        messages = build_messages(graph.to_dict())
        logger.info(
            "Requesting generation from %s (%d nodes, %d edges)",
            self.model, len(graph.nodes), len(graph.edges),
        )
        try:
            completion = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    temperature=0,
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise GenerationError(f"generation timed out after {self.timeout:g}s") from exc
        except openai.OpenAIError as exc:
            raise GenerationError(f"generation request failed: {exc}") from exc
        except Exception as exc:
            raise GenerationError(f"generation request failed: {exc}") from exc

        choices = getattr(completion, "choices", None) or []
        message = getattr(choices[0], "message", None) if choices else None
        content = getattr(message, "content", None)
        return extract_code(content)


__all__ = ["DEFAULT_MODEL", "LLMGenerator", "extract_code"]
