"""
Runtime configuration, read from the environment.

A ``.env`` file in the working directory (or the path given to
``load_settings``) is loaded first, so secrets such as OPENAI_API_KEY do not
need a manual ``export``.  Values already present in the environment win.

    FLOWGRAPH_STRATEGY      compiler | llm          (default: compiler)
    OPENAI_API_KEY          credential for the llm strategy
    FLOWGRAPH_MODEL         chat model              (default: gpt-4.1-mini)
    FLOWGRAPH_TIMEOUT       seconds per generation  (default: 60)
    FLOWGRAPH_MAX_RETRIES   client retries          (default: 2)
    FLOWGRAPH_LOG_LEVEL     logging level name      (default: INFO)
    FLOWGRAPH_CORS_ORIGINS  comma-separated origins (default: *)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from flowgraph.compiler.errors import ConfigurationError

STRATEGY_COMPILER = "compiler"
STRATEGY_LLM      = "llm"
STRATEGIES = (STRATEGY_COMPILER, STRATEGY_LLM)


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{key} must be positive, got {raw!r}")
    return value


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}")
    if value < 0:
        raise ConfigurationError(f"{key} must not be negative, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    strategy: str = STRATEGY_COMPILER
    openai_api_key: Optional[str] = None
    model: str = "gpt-4.1-mini"
    timeout: float = 60.0
    max_retries: int = 2
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env

        strategy = (env.get("FLOWGRAPH_STRATEGY") or STRATEGY_COMPILER).strip().lower()
        if strategy not in STRATEGIES:
            raise ConfigurationError(
                f"FLOWGRAPH_STRATEGY must be one of {', '.join(STRATEGIES)}, got {strategy!r}"
            )

        origins = [o.strip() for o in (env.get("FLOWGRAPH_CORS_ORIGINS") or "*").split(",")]

        return cls(
            strategy=strategy,
            openai_api_key=env.get("OPENAI_API_KEY") or None,
            model=env.get("FLOWGRAPH_MODEL") or cls.model,
            timeout=_float(env, "FLOWGRAPH_TIMEOUT", cls.timeout),
            max_retries=_int(env, "FLOWGRAPH_MAX_RETRIES", cls.max_retries),
            log_level=(env.get("FLOWGRAPH_LOG_LEVEL") or cls.log_level).upper(),
            cors_origins=[o for o in origins if o],
        )


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """Load ``.env`` (if any) and build Settings from the process environment."""
    load_dotenv(dotenv_path)
    return Settings.from_env()


__all__ = [
    "STRATEGIES",
    "STRATEGY_COMPILER",
    "STRATEGY_LLM",
    "Settings",
    "load_settings",
]
