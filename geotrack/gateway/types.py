"""Core types and DTOs for the platform query layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Platform(str, Enum):
    """AI assistants / answer engines that can be queried."""

    CHATGPT = "chatgpt"
    CHATGPT_SEARCH = "chatgpt_search"
    PERPLEXITY = "perplexity"
    GEMINI = "gemini"
    CLAUDE = "claude"
    COPILOT = "copilot"
    GROK = "grok"


# ---------------------------------------------------------------------------
# PlatformResponse: unified DTO (output of the client)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlatformResponse:
    """One answer (or one failure) from one platform for one query string.

    Exactly one of ``raw_text`` / ``error`` is meaningful: when ``error`` is
    set, ``raw_text`` is empty and the response must not be parsed.
    """

    platform: Platform
    query: str
    raw_text: str = ""
    elapsed_ms: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dict for storage/API."""
        return {
            "platform": self.platform.value,
            "query": self.query,
            "raw_text": self.raw_text,
            "elapsed_ms": self.elapsed_ms,
            "timestamp": self.timestamp.isoformat(),
            "error": self.error,
        }


# ---------------------------------------------------------------------------
# Platform config
# ---------------------------------------------------------------------------


@dataclass
class PlatformConfig:
    """Request parameters shared by all platform adapters."""

    model: str = ""  # empty = adapter default
    temperature: float = 0.7
    max_tokens: int = 1000
    system_prompt: str = ""


# System prompt for chat-style platforms; answer engines (Perplexity) get the raw query.
RECOMMENDATION_SYSTEM_PROMPT = (
    "You are a helpful assistant that provides restaurant recommendations based on "
    "the user's location and preferences. Be specific and include real restaurant "
    "names when possible."
)
