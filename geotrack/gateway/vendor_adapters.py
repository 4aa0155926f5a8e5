"""Platform adapters: protocol-level handling for each AI platform.

Each adapter turns a query string into the platform's HTTP protocol, sends
it, and returns the answer text. Failures are raised as ``PlatformError``;
the ``PlatformQueryClient`` converts them into error responses.

Platform-specific behaviors:
  - ChatGPT: Standard OpenAI chat completions
  - ChatGPT Search: OpenAI search-preview model (no temperature parameter)
  - Perplexity: OpenAI-compatible, query sent without a system prompt
  - Gemini: Google AI generateContent, finishReason SAFETY → error
  - Claude: Anthropic Messages API
  - Grok: x.ai, OpenAI-compatible
  - Mock: canned restaurant answers for local runs and tests
"""

from __future__ import annotations

import asyncio
import logging
import re
from abc import ABC, abstractmethod

import httpx

from geotrack.gateway.types import (
    RECOMMENDATION_SYSTEM_PROMPT,
    Platform,
    PlatformConfig,
)

logger = logging.getLogger(__name__)


class PlatformError(Exception):
    """A single platform call failed (timeout, transport, rejected request)."""

    def __init__(self, message: str, platform: Platform | None = None, status_code: int = 0):
        super().__init__(message)
        self.platform = platform
        self.status_code = status_code


class BaseVendorAdapter(ABC):
    """Base class for all platform adapters."""

    platform: Platform
    default_model: str = ""

    def __init__(self, api_key: str = "", config: PlatformConfig | None = None, **kwargs):
        self.api_key = api_key
        self.config = config or PlatformConfig(system_prompt=RECOMMENDATION_SYSTEM_PROMPT)

    @property
    def model(self) -> str:
        return self.config.model or self.default_model

    @abstractmethod
    async def complete(self, prompt: str, timeout: float = 60.0) -> str:
        """Send one prompt and return the answer text. Raises PlatformError."""
        ...

    async def _post_json(
        self,
        url: str,
        payload: dict,
        timeout: float,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> dict:
        """POST a JSON payload and return the decoded body, mapping httpx failures to PlatformError."""
        try:
            async with httpx.AsyncClient(timeout=timeout) as client:
                resp = await client.post(
                    url,
                    json=payload,
                    params=params,
                    headers={"Content-Type": "application/json", **(headers or {})},
                )

            if resp.status_code == 429:
                raise PlatformError(
                    f"Rate limited by {self.platform.value}",
                    self.platform,
                    status_code=429,
                )

            resp.raise_for_status()
            return resp.json()

        except httpx.TimeoutException as e:
            raise PlatformError(f"{self.platform.value} timeout after {timeout}s", self.platform) from e
        except httpx.HTTPStatusError as e:
            raise PlatformError(
                f"{self.platform.value} API error: {e.response.status_code}",
                self.platform,
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise PlatformError(f"{self.platform.value} request failed: {e}", self.platform) from e
        except ValueError as e:
            # Non-JSON body
            raise PlatformError(f"{self.platform.value} returned malformed JSON", self.platform) from e

    def _require_key(self) -> None:
        if not self.api_key:
            raise PlatformError(f"No API key configured for {self.platform.value}", self.platform)


# ---------------------------------------------------------------------------
# OpenAI-compatible chat completions (ChatGPT, Perplexity, Grok)
# ---------------------------------------------------------------------------


class _ChatCompletionsAdapter(BaseVendorAdapter):
    """Shared request/response handling for OpenAI-compatible endpoints."""

    api_url: str = ""
    send_system_prompt: bool = True
    send_temperature: bool = True

    def _payload(self, prompt: str) -> dict:
        messages = []
        if self.send_system_prompt and self.config.system_prompt:
            messages.append({"role": "system", "content": self.config.system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.config.max_tokens,
        }
        if self.send_temperature:
            payload["temperature"] = self.config.temperature
        return payload

    async def complete(self, prompt: str, timeout: float = 60.0) -> str:
        self._require_key()
        data = await self._post_json(
            self.api_url,
            self._payload(prompt),
            timeout,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise PlatformError(f"{self.platform.value} response has no choices", self.platform) from e


class ChatGPTAdapter(_ChatCompletionsAdapter):
    """OpenAI Chat Completions adapter."""

    platform = Platform.CHATGPT
    default_model = "gpt-4o"
    api_url = "https://api.openai.com/v1/chat/completions"


class ChatGPTSearchAdapter(ChatGPTAdapter):
    """OpenAI web-search model; it rejects sampling parameters."""

    platform = Platform.CHATGPT_SEARCH
    default_model = "gpt-4o-search-preview"
    send_temperature = False


class PerplexityAdapter(_ChatCompletionsAdapter):
    """Perplexity answer engine; the query is sent as the only message."""

    platform = Platform.PERPLEXITY
    default_model = "sonar"
    api_url = "https://api.perplexity.ai/chat/completions"
    send_system_prompt = False


class GrokAdapter(_ChatCompletionsAdapter):
    """x.ai Grok adapter (OpenAI-compatible)."""

    platform = Platform.GROK
    default_model = "grok-2-latest"
    api_url = "https://api.x.ai/v1/chat/completions"


# ---------------------------------------------------------------------------
# Gemini Adapter (Google AI)
# ---------------------------------------------------------------------------


class GeminiAdapter(BaseVendorAdapter):
    """Google Gemini adapter with SAFETY filter detection."""

    platform = Platform.GEMINI
    default_model = "gemini-2.0-flash"
    api_url_template = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

    async def complete(self, prompt: str, timeout: float = 60.0) -> str:
        self._require_key()
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self.config.temperature,
                "maxOutputTokens": self.config.max_tokens,
            },
        }
        # System instruction (separate from contents in Gemini API)
        if self.config.system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": self.config.system_prompt}]}

        data = await self._post_json(
            self.api_url_template.format(model=self.model),
            payload,
            timeout,
            params={"key": self.api_key},
        )

        candidates = data.get("candidates", [])
        if not candidates:
            block_reason = data.get("promptFeedback", {}).get("blockReason", "")
            raise PlatformError(f"Gemini returned no candidates (blocked: {block_reason or 'unknown'})", self.platform)

        candidate = candidates[0]
        if candidate.get("finishReason") == "SAFETY":
            raise PlatformError("Gemini safety filter triggered", self.platform)

        parts = candidate.get("content", {}).get("parts", [])
        return "".join(p.get("text", "") for p in parts if "text" in p)


# ---------------------------------------------------------------------------
# Claude Adapter (Anthropic)
# ---------------------------------------------------------------------------


class ClaudeAdapter(BaseVendorAdapter):
    """Anthropic Messages API adapter."""

    platform = Platform.CLAUDE
    default_model = "claude-3-5-sonnet-20241022"
    api_url = "https://api.anthropic.com/v1/messages"
    api_version = "2023-06-01"

    async def complete(self, prompt: str, timeout: float = 60.0) -> str:
        self._require_key()
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
        }
        if self.config.system_prompt:
            payload["system"] = self.config.system_prompt

        data = await self._post_json(
            self.api_url,
            payload,
            timeout,
            headers={"x-api-key": self.api_key, "anthropic-version": self.api_version},
        )
        blocks = data.get("content", [])
        return "".join(b.get("text", "") for b in blocks if b.get("type") == "text")


# ---------------------------------------------------------------------------
# Mock Adapter (canned answers)
# ---------------------------------------------------------------------------

_CITY_PATTERNS = [
    re.compile(r"in\s+([A-Z][a-zA-Z\s]+?)(?:\s*,|\s+near|\s+area|$)", re.IGNORECASE),
    re.compile(r"near\s+([A-Z][a-zA-Z\s]+?)(?:\s*,|$)", re.IGNORECASE),
    re.compile(r"([A-Z][a-zA-Z\s]+?)\s+(?:restaurant|food|dining)", re.IGNORECASE),
]


def extract_city(query: str) -> str | None:
    """Best-effort city name from a query like 'best sushi in Portland'."""
    for pattern in _CITY_PATTERNS:
        match = pattern.search(query)
        if match:
            return match.group(1).strip()
    return None


class MockAdapter(BaseVendorAdapter):
    """Returns canned restaurant answers shaped like real platform output.

    Perplexity gets prose with bold names, every other platform gets a
    numbered list, so both position-detection paths are exercised.
    """

    def __init__(self, platform: Platform = Platform.CHATGPT, latency: float = 0.0, **kwargs):
        super().__init__(api_key="", **kwargs)
        self.platform = platform
        self.latency = latency

    async def complete(self, prompt: str, timeout: float = 60.0) -> str:
        if self.latency > 0:
            await asyncio.sleep(self.latency)

        query = prompt.lower()
        city = extract_city(prompt) or "the area"

        if "italian" in query or "pasta" in query:
            return self._italian(city)
        if "mexican" in query or "tacos" in query:
            return self._mexican(city)
        if "japanese" in query or "sushi" in query:
            return self._japanese(city)
        return self._generic(city)

    def _italian(self, city: str) -> str:
        if self.platform == Platform.PERPLEXITY:
            return f"""Based on recent reviews and local recommendations, here are the top Italian restaurants in {city}:

**Mario's Italian Kitchen** is a standout choice, known for their authentic handmade pasta and cozy atmosphere. Their carbonara and bolognese are particularly praised.

**Tony's Pizza Napoletana** offers award-winning Neapolitan-style pizza with multiple styles to choose from.

**Caffe Sport** has been a neighborhood favorite since 1969, serving generous portions of Sicilian-style dishes.

For a more upscale experience, **Flour + Water** offers a modern take on Italian cuisine with an incredible pasta tasting menu.

Sources: Yelp, TripAdvisor, local food blogs"""

        return f"""Here are some of the best Italian restaurants in {city}:

1. **Tony's Pizza Napoletana** - Award-winning pizzeria with 12 different styles of pizza
2. **Mario's Italian Kitchen** - Authentic family-run restaurant known for homemade pasta and traditional recipes
3. **Flour + Water** - Modern Italian with an incredible pasta tasting menu
4. **Caffe Sport** - Classic Sicilian-style dishes in a charming atmosphere
5. **Delfina** - Refined Italian classics in a welcoming setting

Each restaurant offers a unique dining experience, from traditional to modern interpretations of Italian cuisine."""

    @staticmethod
    def _mexican(city: str) -> str:
        return f"""For the best Mexican food in {city}, consider these top options:

1. **La Taqueria** - Famous for their perfectly grilled carne asada tacos
2. **El Farolito** - Late-night favorite known for their massive burritos
3. **Nopalito** - Upscale Mexican using organic, local ingredients
4. **Tacolicious** - Modern taqueria with creative flavor combinations
5. **Taqueria Cancún** - Authentic street-style tacos and tortas

These spots range from casual street food to refined dining, all offering authentic Mexican flavors."""

    @staticmethod
    def _japanese(city: str) -> str:
        return f"""Here are the best Japanese restaurants in {city}:

1. **Sushi Ran** - Premium omakase experience with the freshest fish
2. **Ramen Shop** - Rich, flavorful broths and handmade noodles
3. **Ippuku** - Authentic izakaya with yakitori and sake
4. **Domo** - Traditional kaiseki dining
5. **Marufuku Ramen** - Hakata-style tonkotsu ramen

Whether you're craving sushi, ramen, or izakaya fare, these restaurants deliver authentic Japanese cuisine."""

    @staticmethod
    def _generic(city: str) -> str:
        return f"""Here are some highly recommended restaurants in {city}:

1. **The Local Kitchen** - Farm-to-table American cuisine
2. **Bistro Central** - French-inspired comfort food
3. **Spice Route** - Flavorful Indian and Southeast Asian dishes
4. **Harbor Grill** - Fresh seafood with waterfront views
5. **The Steakhouse** - Prime cuts and classic sides

These restaurants offer diverse cuisines and consistently receive excellent reviews from locals and visitors alike."""


# ---------------------------------------------------------------------------
# Adapter registry
# ---------------------------------------------------------------------------

ADAPTER_REGISTRY: dict[Platform, type[BaseVendorAdapter]] = {
    Platform.CHATGPT: ChatGPTAdapter,
    Platform.CHATGPT_SEARCH: ChatGPTSearchAdapter,
    Platform.PERPLEXITY: PerplexityAdapter,
    Platform.GEMINI: GeminiAdapter,
    Platform.CLAUDE: ClaudeAdapter,
    Platform.GROK: GrokAdapter,
}


def get_adapter(platform: Platform, api_key: str, **kwargs) -> BaseVendorAdapter:
    """Factory: get the appropriate adapter for a platform."""
    cls = ADAPTER_REGISTRY.get(platform)
    if cls is None:
        raise ValueError(f"Platform {platform.value} is not supported")
    return cls(api_key=api_key, **kwargs)
