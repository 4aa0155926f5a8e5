import asyncio

import pytest

from geotrack.gateway.client import PlatformQueryClient
from geotrack.gateway.types import Platform
from geotrack.gateway.vendor_adapters import BaseVendorAdapter, PlatformError
from geotrack.tracking.types import Business, Competitor


class ScriptedAdapter(BaseVendorAdapter):
    """Adapter returning a fixed answer (or error) after an optional delay."""

    def __init__(self, platform: Platform, text: str = "", delay: float = 0.0, error: str | None = None, on_call=None):
        super().__init__()
        self.platform = platform
        self.text = text
        self.delay = delay
        self.error = error
        self.on_call = on_call
        self.calls: list[str] = []

    async def complete(self, prompt: str, timeout: float = 60.0) -> str:
        self.calls.append(prompt)
        if self.on_call is not None:
            self.on_call(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error:
            raise PlatformError(self.error, self.platform)
        return self.text


@pytest.fixture
def business():
    return Business(
        id="biz-1",
        name="Mario's Italian Kitchen",
        aliases=("Marios Italian",),
        website_url="mariositalian.com",
        cuisine_type="Italian",
        city="San Francisco",
    )


@pytest.fixture
def competitors():
    return [
        Competitor(id="c1", name="Tony's Pizza Napoletana"),
        Competitor(id="c2", name="Flour + Water"),
    ]


@pytest.fixture
def mock_client():
    """Client serving canned answers with no latency."""
    return PlatformQueryClient(api_keys={}, use_mock=True, mock_latency=0.0, timeout_seconds=5.0)
