"""Platform Query Client: entry point for sending queries to AI platforms.

  1. Resolves the adapter for a platform (real, mock, or unsupported)
  2. Bounds every call with a finite timeout
  3. Converts every failure into an error ``PlatformResponse``
  4. Fans one query out to several platforms concurrently

Usage:
    client = PlatformQueryClient(api_keys={"chatgpt": "sk-..."}, use_mock=False)

    response = await client.query(Platform.CHATGPT, "best pizza in Chicago")
    responses = await client.query_multiple([Platform.CHATGPT, Platform.PERPLEXITY], "best pizza in Chicago")
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone

from geotrack.core.config import ConfigurationError, settings
from geotrack.core.metrics import record_platform_call
from geotrack.gateway.types import (
    RECOMMENDATION_SYSTEM_PROMPT,
    Platform,
    PlatformConfig,
    PlatformResponse,
)
from geotrack.gateway.vendor_adapters import (
    ADAPTER_REGISTRY,
    BaseVendorAdapter,
    MockAdapter,
    PlatformError,
    get_adapter,
)

logger = logging.getLogger(__name__)


class PlatformQueryClient:
    """Sends one query to one or more platforms and never raises for call failures."""

    def __init__(
        self,
        api_keys: dict[str, str] | None = None,
        adapters: dict[Platform, BaseVendorAdapter] | None = None,
        timeout_seconds: float | None = None,
        use_mock: bool | None = None,
        mock_latency: float | None = None,
    ):
        """
        Args:
            api_keys: Mapping of platform name → API key (real adapters)
            adapters: Pre-built adapters per platform; take precedence over api_keys
            timeout_seconds: Per-call bound, defaults to settings.platform_timeout_seconds
            use_mock: Serve canned answers instead of calling real platforms
            mock_latency: Simulated latency for mock answers, in seconds
        """
        timeout = settings.platform_timeout_seconds if timeout_seconds is None else timeout_seconds
        if timeout <= 0:
            raise ConfigurationError(f"timeout_seconds must be positive, got {timeout}")

        self.timeout = float(timeout)
        self.api_keys = settings.api_keys() if api_keys is None else api_keys
        self.use_mock = settings.use_mock_responses if use_mock is None else use_mock
        self.mock_latency = settings.mock_latency_seconds if mock_latency is None else mock_latency

        self._adapters: dict[Platform, BaseVendorAdapter] = dict(adapters or {})

    def _get_adapter(self, platform: Platform) -> BaseVendorAdapter:
        """Get or create the adapter for a platform. Raises PlatformError if unavailable."""
        if platform not in self._adapters:
            if platform not in ADAPTER_REGISTRY:
                raise PlatformError(f"Platform {platform.value} is not supported", platform)
            if self.use_mock:
                self._adapters[platform] = MockAdapter(platform=platform, latency=self.mock_latency)
            else:
                api_key = self.api_keys.get(platform.value, "")
                if not api_key:
                    raise PlatformError(f"No API key configured for {platform.value}", platform)
                config = PlatformConfig(
                    model=settings.models().get(platform.value, ""),
                    temperature=settings.platform_temperature,
                    max_tokens=settings.platform_max_tokens,
                    system_prompt=RECOMMENDATION_SYSTEM_PROMPT,
                )
                self._adapters[platform] = get_adapter(platform, api_key, config=config)
        return self._adapters[platform]

    async def query(self, platform: Platform | str, text: str, timeout: float | None = None) -> PlatformResponse:
        """Send one query to one platform.

        Returns a PlatformResponse with either ``raw_text`` or ``error`` set.
        ``timeout`` overrides the client-wide bound for this call.
        Only a name that is not a Platform at all raises (ValueError).
        """
        platform = Platform(platform)
        bound = self.timeout if timeout is None else timeout
        if bound <= 0:
            raise ConfigurationError(f"timeout must be positive, got {bound}")
        timestamp = datetime.now(timezone.utc)
        start = time.monotonic()
        error: str | None = None
        raw_text = ""

        try:
            adapter = self._get_adapter(platform)
            raw_text = await asyncio.wait_for(adapter.complete(text, timeout=bound), timeout=bound)
        except asyncio.TimeoutError:
            error = f"{platform.value} timeout after {bound}s"
        except PlatformError as e:
            error = str(e)
        except Exception as e:
            logger.exception("Unexpected error querying %s", platform.value)
            error = f"{platform.value} unexpected error: {e}"

        elapsed_ms = int((time.monotonic() - start) * 1000)
        record_platform_call(platform.value, error is None, elapsed_ms)

        if error is not None:
            logger.warning(
                "Query failed on %s (%dms): %s",
                platform.value,
                elapsed_ms,
                error,
                extra={"platform": platform.value},
            )
            return PlatformResponse(
                platform=platform,
                query=text,
                elapsed_ms=elapsed_ms,
                timestamp=timestamp,
                error=error,
            )

        logger.debug("Query answered by %s in %dms (%d chars)", platform.value, elapsed_ms, len(raw_text))
        return PlatformResponse(
            platform=platform,
            query=text,
            raw_text=raw_text,
            elapsed_ms=elapsed_ms,
            timestamp=timestamp,
        )

    async def query_multiple(
        self,
        platforms: list[Platform | str],
        text: str,
        timeout: float | None = None,
    ) -> list[PlatformResponse]:
        """Send one query to several platforms concurrently.

        Responses come back in the same order as ``platforms``, regardless
        of which call finishes first.
        """
        if not platforms:
            return []
        return list(await asyncio.gather(*(self.query(p, text, timeout=timeout) for p in platforms)))
