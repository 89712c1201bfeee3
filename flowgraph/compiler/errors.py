"""
flowgraph error taxonomy.

Three kinds reach the caller and each maps to a different operator response:

  ValidationError     bad input; the caller fixes the graph and resubmits
  ConfigurationError  broken deployment (e.g. missing credential)
  GenerationError     the transpilation step failed or produced unusable text
"""

from __future__ import annotations

from typing import Optional


class FlowGraphError(Exception):
    """Base class for every error raised by flowgraph."""


class ValidationError(FlowGraphError, ValueError):
    """Raised when a graph fails sanitization or structural validation."""

    def __init__(self, message: str, location: Optional[str] = None):
        super().__init__(f"{location}: {message}" if location else message)
        self.location = location
        self.reason = message


class ConfigurationError(FlowGraphError):
    """Raised when a required environment dependency is absent."""


class GenerationError(FlowGraphError):
    """Raised when code generation fails or returns unusable output."""


__all__ = [
    "FlowGraphError",
    "ValidationError",
    "ConfigurationError",
    "GenerationError",
]
