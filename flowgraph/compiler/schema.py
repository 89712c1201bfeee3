"""
flowgraph Compiler — Graph JSON Schema + Sanitizer
===================================================
Turns an untrusted JSON value from the editor into the canonical graph that
the scheduler, emitter and LLM generator consume.  Nothing downstream of this
module ever sees raw editor input.

Canonical JSON format
---------------------

    {
      "nodes": [
        {
          "id":    "chatbot_1",            // [A-Za-z0-9_-]{1,128}, unique (required)
          "type":  "NODE",                 // discriminator, defaults to "NODE"
          "label": "Chatbot",              // display name, <= 120 chars (optional)
          "code":  "return {...}"          // function body, <= 20000 chars (optional)
        }
      ],
      "edges": [
        { "source": "START",     "target": "chatbot_1" },
        { "source": "chatbot_1", "target": "END" }
      ]
    }

Optional keys are either present and sanitized, or absent.  They are never
null or the empty string.

Every sanitizer below is a total function ``raw value -> sanitized value``
that raises ValidationError naming the offending location.  sanitize_graph()
composes them and then runs the structural checks that need the whole graph.
"""

from __future__ import annotations

import json
import re
import warnings
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import ValidationError


# ── Limits ───────────────────────────────────────────────────────────────────

MAX_GRAPH_NODES            = 200
MAX_GRAPH_EDGES            = 600
MAX_GRAPH_SERIALIZED_BYTES = 200_000
MAX_ID_LENGTH              = 128
MAX_NAME_LENGTH            = 120
MAX_CODE_LENGTH            = 20_000

START = "START"
END   = "END"
SENTINELS: frozenset[str] = frozenset({START, END})
# Node names the LangGraph runtime keeps for its own entry and exit nodes.
RUNTIME_RESERVED_NAMES: frozenset[str] = frozenset({"__start__", "__end__"})

DEFAULT_NODE_TYPE = "NODE"

_INLINE_CONTROL    = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_MULTILINE_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_IDENTIFIER        = re.compile(r"[A-Za-z0-9_-]+")


# ── Validation helpers ────────────────────────────────────────────────────────

def _require(condition: bool, message: str, location: Optional[str] = None) -> None:
    if not condition:
        raise ValidationError(message, location)


def _ensure_object(value: Any, location: str) -> Dict[str, Any]:
    _require(isinstance(value, dict), "must be a JSON object", location)
    return value


def _ensure_array(value: Any, location: str) -> List[Any]:
    if value is None:
        return []
    _require(isinstance(value, list), "must be an array", location)
    return value


def _ensure_string(value: Any, location: str) -> str:
    _require(isinstance(value, str), "must be a string", location)
    return value


# ── Text sanitizers ──────────────────────────────────────────────────────────

def sanitize_inline_text(value: str) -> str:
    """Drop every C0/C1 control character and trim surrounding whitespace."""
    return _INLINE_CONTROL.sub("", value).strip()


def sanitize_multiline_text(value: str) -> str:
    """Drop control characters but keep tabs and line breaks."""
    return _MULTILINE_CONTROL.sub("", value)


# ── Field sanitizers ─────────────────────────────────────────────────────────

def sanitize_id(value: Any, location: str) -> str:
    """
    Identifier rule shared by node ids and edge endpoints.

    Surrounding whitespace is trimmed.  A control character anywhere else
    rejects the value: deleting it silently could fold two distinct ids into
    one.
    """
    _require(value is not None, "identifier is required", location)
    text = _ensure_string(value, location).strip()
    _require(bool(text), "identifier is required", location)
    _require(
        _INLINE_CONTROL.search(text) is None,
        "identifier must not contain control characters",
        location,
    )
    _require(
        len(text) <= MAX_ID_LENGTH,
        f"identifier must not exceed {MAX_ID_LENGTH} characters",
        location,
    )
    _require(
        _IDENTIFIER.fullmatch(text) is not None,
        "identifier may only contain letters, digits, '-' or '_'",
        location,
    )
    return text


def sanitize_type(value: Any, location: str) -> str:
    if value is None:
        return DEFAULT_NODE_TYPE
    text = sanitize_inline_text(_ensure_string(value, location))
    _require(
        len(text) <= MAX_NAME_LENGTH,
        f"type must not exceed {MAX_NAME_LENGTH} characters",
        location,
    )
    return text or DEFAULT_NODE_TYPE


def sanitize_label(value: Any, location: str) -> Optional[str]:
    if value is None:
        return None
    text = sanitize_multiline_text(_ensure_string(value, location)).strip()
    if not text:
        return None
    _require(
        len(text) <= MAX_NAME_LENGTH,
        f"label must not exceed {MAX_NAME_LENGTH} characters",
        location,
    )
    return text


def sanitize_code(value: Any, location: str) -> Optional[str]:
    if value is None:
        return None
    text = sanitize_multiline_text(_ensure_string(value, location))
    if not text.strip():
        return None
    _require(
        len(text) <= MAX_CODE_LENGTH,
        f"code must not exceed {MAX_CODE_LENGTH} characters",
        location,
    )
    return text


# ── Item sanitizers ──────────────────────────────────────────────────────────

def sanitize_node(value: Any, index: int) -> Dict[str, str]:
    ctx  = f"nodes[{index}]"
    data = _ensure_object(value, ctx)

    node = {
        "id":   sanitize_id(data.get("id"), f"{ctx}.id"),
        "type": sanitize_type(data.get("type"), f"{ctx}.type"),
    }
    label = sanitize_label(data.get("label"), f"{ctx}.label")
    if label is not None:
        node["label"] = label
    code = sanitize_code(data.get("code"), f"{ctx}.code")
    if code is not None:
        node["code"] = code
    return node


def sanitize_edge(value: Any, index: int) -> Dict[str, str]:
    ctx  = f"edges[{index}]"
    data = _ensure_object(value, ctx)
    return {
        "source": sanitize_id(data.get("source"), f"{ctx}.source"),
        "target": sanitize_id(data.get("target"), f"{ctx}.target"),
    }


def display_name(node: Dict[str, str]) -> str:
    """The authoritative NAME of a canonical node: label if present, else id."""
    return node.get("label") or node["id"]


def serialized_size(graph: Dict[str, Any]) -> int:
    """UTF-8 byte length of the compact JSON form of *graph*."""
    text = json.dumps(graph, ensure_ascii=False, separators=(",", ":"))
    return len(text.encode("utf-8"))


# ── Structural checks ────────────────────────────────────────────────────────

def _check_structure(graph: Dict[str, Any], strict: bool) -> None:
    types: Dict[str, str] = {}
    node_names: Dict[str, str] = {}
    names: Dict[str, int] = {}

    for i, node in enumerate(graph["nodes"]):
        ctx = f"nodes[{i}].id"
        node_id = node["id"]
        _require(
            node_id not in SENTINELS,
            f"'{node_id}' is reserved for the graph entry/exit markers",
            ctx,
        )
        _require(node_id not in types, f"duplicate node id '{node_id}'", ctx)
        types[node_id] = node["type"]

        name = display_name(node)
        node_names[node_id] = name
        _require(
            name not in RUNTIME_RESERVED_NAMES,
            f"node name '{name}' is reserved by the LangGraph runtime",
            f"nodes[{i}].label" if "label" in node else ctx,
        )
        if node["type"] != DEFAULT_NODE_TYPE:
            continue
        if name in names:
            raise ValidationError(
                f"node name {name!r} is already used by nodes[{names[name]}]",
                f"nodes[{i}]",
            )
        names[name] = i

    for i, edge in enumerate(graph["edges"]):
        for end in ("source", "target"):
            ctx = f"edges[{i}].{end}"
            endpoint = edge[end]
            if endpoint in SENTINELS:
                continue
            _require(endpoint in types, f"unknown node '{endpoint}'", ctx)
            if types[endpoint] != DEFAULT_NODE_TYPE:
                owner = names.get(node_names[endpoint])
                _require(
                    owner is None,
                    f"node '{endpoint}' shares its name with nodes[{owner}] "
                    f"and cannot be an edge endpoint",
                    ctx,
                )
                msg = (
                    f"node '{endpoint}' has type '{types[endpoint]}' "
                    f"and is not emitted as a graph node"
                )
                if strict:
                    raise ValidationError(msg, ctx)
                warnings.warn(f"{ctx}: {msg}", stacklevel=3)


# ── Public API ───────────────────────────────────────────────────────────────

def sanitize_graph(data: Any, *, strict: bool = False) -> Dict[str, Any]:
    """
    Sanitize and validate a raw graph JSON value.

    Args:
        data:   The parsed JSON value supplied by the editor.
        strict: When True, an edge touching a node whose type is not "NODE"
                is an error.  When False (default) it only warns.

    Returns:
        The canonical graph as a plain dict.

    Raises:
        ValidationError: On any violation.  Nothing is partially accepted.
    """
    graph = _ensure_object(data, "graph")
    nodes = _ensure_array(graph.get("nodes"), "graph.nodes")
    edges = _ensure_array(graph.get("edges"), "graph.edges")

    _require(
        len(nodes) <= MAX_GRAPH_NODES,
        f"too many nodes ({len(nodes)} > {MAX_GRAPH_NODES})",
        "graph.nodes",
    )
    _require(
        len(edges) <= MAX_GRAPH_EDGES,
        f"too many edges ({len(edges)} > {MAX_GRAPH_EDGES})",
        "graph.edges",
    )

    canonical = {
        "nodes": [sanitize_node(node, i) for i, node in enumerate(nodes)],
        "edges": [sanitize_edge(edge, i) for i, edge in enumerate(edges)],
    }

    size = serialized_size(canonical)
    _require(
        size <= MAX_GRAPH_SERIALIZED_BYTES,
        f"serialized graph is too large ({size} > {MAX_GRAPH_SERIALIZED_BYTES} bytes)",
        "graph",
    )

    _check_structure(canonical, strict)
    return canonical


def validate_generation_request(payload: Any, *, strict: bool = False) -> Dict[str, Any]:
    """Validate the HTTP body shape ``{"graphJSON": {...}}``."""
    body = _ensure_object(payload, "body")
    return {"graphJSON": sanitize_graph(body.get("graphJSON"), strict=strict)}


def validate_file(path: Union[str, Path], *, strict: bool = False) -> Dict[str, Any]:
    """
    Load and sanitize a graph JSON file.

    Accepts either a bare graph or the ``{"graphJSON": ...}`` request body.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValidationError: If the graph is invalid.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as fh:
        data = json.load(fh)
    if isinstance(data, dict) and "graphJSON" in data:
        return validate_generation_request(data, strict=strict)["graphJSON"]
    return sanitize_graph(data, strict=strict)


__all__ = [
    "DEFAULT_NODE_TYPE",
    "END",
    "MAX_CODE_LENGTH",
    "MAX_GRAPH_EDGES",
    "MAX_GRAPH_NODES",
    "MAX_GRAPH_SERIALIZED_BYTES",
    "MAX_ID_LENGTH",
    "MAX_NAME_LENGTH",
    "RUNTIME_RESERVED_NAMES",
    "SENTINELS",
    "START",
    "display_name",
    "sanitize_code",
    "sanitize_edge",
    "sanitize_graph",
    "sanitize_id",
    "sanitize_inline_text",
    "sanitize_label",
    "sanitize_multiline_text",
    "sanitize_node",
    "sanitize_type",
    "serialized_size",
    "validate_file",
    "validate_generation_request",
]
