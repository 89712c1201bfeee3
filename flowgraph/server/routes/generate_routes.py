"""
Code-generation REST routes.

All routes are mounted under /api by main.py.  Errors raised from flowgraph
(ValidationError, ConfigurationError, GenerationError) are turned into
responses by the exception handlers registered in main.py.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from flowgraph.compiler.deserialiser import json_to_ir
from flowgraph.compiler.schema import validate_generation_request
from flowgraph.compiler.templates import NODE_CODE_TEMPLATES
from flowgraph.config import Settings
from flowgraph.service import Backend, build_backend, generate_code

router = APIRouter()


# ── Dependencies ──────────────────────────────────────────────────────────────

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_backend_factory(settings: Settings = Depends(get_settings)) -> Callable[[], Backend]:
    """Backends are built per request, after the graph has been validated."""
    return lambda: build_backend(settings)


async def read_json_body(request: Request) -> Any:
    content_type = request.headers.get("content-type", "")
    if "application/json" not in content_type.lower():
        raise HTTPException(status_code=415, detail="Content-Type must be application/json")
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(status_code=400, detail="Body must be valid JSON")


# ── Response models ───────────────────────────────────────────────────────────

class GenerateResponse(BaseModel):
    code: str


class ValidateResponse(BaseModel):
    graphJSON: Dict[str, Any]


class NodeTemplateOut(BaseModel):
    key: str
    label: str
    description: str
    code: str


# ── POST /generate ────────────────────────────────────────────────────────────

@router.post("/generate", response_model=GenerateResponse)
async def generate(
    body: Any = Depends(read_json_body),
    make_backend: Callable[[], Backend] = Depends(get_backend_factory),
) -> GenerateResponse:
    payload = validate_generation_request(body)
    code = await generate_code(json_to_ir(payload["graphJSON"]), make_backend())
    return GenerateResponse(code=code)


# ── POST /graph/validate ──────────────────────────────────────────────────────

@router.post("/graph/validate", response_model=ValidateResponse)
async def validate_graph(body: Any = Depends(read_json_body)) -> ValidateResponse:
    return ValidateResponse(**validate_generation_request(body))


# ── GET /node-templates ───────────────────────────────────────────────────────

@router.get("/node-templates", response_model=List[NodeTemplateOut])
async def list_node_templates() -> List[NodeTemplateOut]:
    return [NodeTemplateOut(key=key, **tmpl) for key, tmpl in NODE_CODE_TEMPLATES.items()]
