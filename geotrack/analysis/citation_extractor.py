"""Citation Extractor: Pipeline Step 2.

Finds an outbound citation URL in a raw answer:
  - Inline hyperlinks: [text](url), scanned first
  - Bare URLs: https://example.com
  - A URL whose host matches the business website wins
  - Otherwise the earliest URL in the text still counts as a citation

Malformed URLs never raise; they simply don't match.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

from geotrack.analysis.types import CitationFinding

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# URL / link extraction patterns
# ---------------------------------------------------------------------------

# Markdown-style links: [anchor text](url)
_MD_LINK_PATTERN = re.compile(
    r"\[([^\]]+)\]\((https?://[^\s)]+)\)",
)

# Bare URLs
_BARE_URL_PATTERN = re.compile(
    r"https?://[^\s<>\"{}|\\^`\[\]]+",
)

_TRAILING_PUNCTUATION = ".,;:!?)"


def _extract_domain(url: str) -> str:
    """Extract domain from URL, stripping www. prefix. Empty when unparseable."""
    if "://" not in url:
        url = f"https://{url}"
    try:
        domain = urlparse(url).hostname or ""
    except ValueError:
        return ""
    if domain.startswith("www."):
        domain = domain[4:]
    return domain.lower()


def _host_matches(url: str, business_domain: str) -> bool:
    domain = _extract_domain(url)
    return bool(domain) and (domain == business_domain or domain.endswith("." + business_domain))


def _markdown_urls(text: str) -> list[str]:
    return [m.group(2) for m in _MD_LINK_PATTERN.finditer(text)]


def _bare_urls(text: str) -> list[str]:
    urls = []
    for match in _BARE_URL_PATTERN.finditer(text):
        url = match.group(0).rstrip(_TRAILING_PUNCTUATION)
        if url:
            urls.append(url)
    return urls


def _earliest_url(text: str) -> str | None:
    """URL that starts earliest in the text, whether linked or bare."""
    candidates = [(m.start(2), m.group(2)) for m in _MD_LINK_PATTERN.finditer(text)]
    for match in _BARE_URL_PATTERN.finditer(text):
        url = match.group(0).rstrip(_TRAILING_PUNCTUATION)
        if url:
            candidates.append((match.start(), url))
    if not candidates:
        return None
    return min(candidates, key=lambda item: item[0])[1]


def extract_urls(text: str) -> list[str]:
    """All URLs in scan order (markdown targets, then bare URLs), deduplicated."""
    seen: set[str] = set()
    urls: list[str] = []
    for url in _markdown_urls(text) + _bare_urls(text):
        if url not in seen:
            seen.add(url)
            urls.append(url)
    return urls


def find_citation(text: str, website_url: str | None = None) -> CitationFinding:
    """Find the citation attributable to the business, or any citation at all.

    Args:
        text: Raw answer text.
        website_url: Business website, with or without a scheme.

    Returns:
        CitationFinding with the matching URL, else the first URL in the
        text, else no citation.
    """
    if not text:
        return CitationFinding()

    md_urls = _markdown_urls(text)
    bare_urls = _bare_urls(text)

    business_domain = _extract_domain(website_url.strip()) if website_url and website_url.strip() else ""
    if business_domain:
        for url in md_urls:
            if _host_matches(url, business_domain):
                return CitationFinding(has_citation=True, url=url)
        for url in bare_urls:
            if _host_matches(url, business_domain):
                return CitationFinding(has_citation=True, url=url)

    # Any outbound link is still a citation signal
    first = _earliest_url(text)
    if first is None:
        return CitationFinding()
    return CitationFinding(has_citation=True, url=first)
