"""Platform Query Layer.

Sends a query string to AI assistants / answer engines and returns the raw
answer text as a unified ``PlatformResponse``:
  - Vendor-Specific Adapters (protocol differences, httpx)
  - Mock Adapter (canned answers for local runs)
  - PlatformQueryClient (per-call timeout, parallel fan-out, never raises)
"""
