"""Runtime settings, read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_PLAN_FILE = "plan.json"


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name, "") or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive, using %s", name, raw, default)
        return default
    return value


@dataclass
class Settings:
    """Producer and CLI settings."""

    openai_api_key: str = ""
    model: str = DEFAULT_MODEL
    base_url: str | None = None
    request_timeout: float = 30.0
    temperature: float = 0.8
    max_tokens: int = 3000
    default_total_days: float = 14.0
    plan_file: str = DEFAULT_PLAN_FILE

    @property
    def ai_enabled(self) -> bool:
        return bool(self.openai_api_key)

    def to_dict(self) -> dict:
        return {
            "ai_enabled": self.ai_enabled,
            "model": self.model,
            "base_url": self.base_url,
            "request_timeout": self.request_timeout,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "default_total_days": self.default_total_days,
            "plan_file": self.plan_file,
        }

    @classmethod
    def from_env(cls) -> Settings:
        """Resolution order for the model: GOALPLAN_MODEL, OPENAI_MODEL, default."""
        model = (os.getenv("GOALPLAN_MODEL", "") or "").strip() or (os.getenv("OPENAI_MODEL", "") or "").strip()
        return cls(
            openai_api_key=(os.getenv("OPENAI_API_KEY", "") or "").strip(),
            model=model or DEFAULT_MODEL,
            base_url=(os.getenv("OPENAI_BASE_URL", "") or "").strip() or None,
            request_timeout=_env_float("GOALPLAN_TIMEOUT", 30.0),
            default_total_days=_env_float("GOALPLAN_DEFAULT_DAYS", 14.0),
            plan_file=(os.getenv("GOALPLAN_PLAN_FILE", "") or "").strip() or DEFAULT_PLAN_FILE,
        )
