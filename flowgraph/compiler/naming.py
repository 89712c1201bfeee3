"""
Function-name derivation for emitted node functions.

    slugify("Chatbot")           -> "chatbot"
    slugify("Call API v2")       -> "call_api_v2"
    slugify("HTTPRequestNode")   -> "http_request_node"
    slugify("2nd pass")          -> "node_2nd_pass"
    slugify("graph")             -> "graph_node"      (reserved by the output)

slugify() is a pure function of the name.  assign_function_names() makes the
result unique within one graph by suffixing later collisions with _2, _3, ...
in input order.
"""

from __future__ import annotations

import builtins
import keyword
import re
import unicodedata
from typing import Iterable, List, Set

# Names bound by the emitted program: module globals and the node parameter.
OUTPUT_GLOBALS: frozenset[str] = frozenset({
    "graph",
    "graph_builder",
    "llm",
    "state",
    "add_messages",
    "init_chat_model",
})

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_NON_ALNUM      = re.compile(r"[^A-Za-z0-9]+")


def _is_reserved(name: str) -> bool:
    return (
        keyword.iskeyword(name)
        or name in OUTPUT_GLOBALS
        or hasattr(builtins, name)
    )


def slugify(name: str) -> str:
    """Reduce *name* to an ASCII snake_case Python identifier."""
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    split = _CAMEL_BOUNDARY.sub("_", ascii_name)
    slug = _NON_ALNUM.sub("_", split).strip("_").lower()
    if not slug:
        slug = "node"
    if slug[0].isdigit():
        slug = f"node_{slug}"
    if _is_reserved(slug):
        slug = f"{slug}_node"
    return slug


def unique_name(base: str, taken: Set[str]) -> str:
    candidate, n = base, 2
    while candidate in taken:
        candidate = f"{base}_{n}"
        n += 1
    return candidate


def assign_function_names(names: Iterable[str]) -> List[str]:
    """Slug every name, disambiguating collisions in iteration order."""
    taken: Set[str] = set()
    result: List[str] = []
    for name in names:
        fn = unique_name(slugify(name), taken)
        taken.add(fn)
        result.append(fn)
    return result


__all__ = ["OUTPUT_GLOBALS", "assign_function_names", "slugify", "unique_name"]
