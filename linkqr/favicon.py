"""Favicon lookup for the auto-detected logo."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote, urlparse

import httpx

from .exceptions import ImageLoadError
from .images import load_image
from .qr_generator import is_valid_url


logger = logging.getLogger(__name__)

FAVICON_PROBE_TIMEOUT = 3.0


def google_favicon_url(domain: str, size: int = 64) -> str:
    return f"https://www.google.com/s2/favicons?domain={quote(domain)}&sz={size}"


def favicon_candidates(url: str) -> list[str]:
    """Ordered favicon locations to try for *url*; empty when *url* is invalid."""
    if not is_valid_url(url):
        return []
    parsed = urlparse(url.strip())
    domain = parsed.hostname or parsed.netloc
    host = f"[{domain}]" if ":" in domain else domain
    origin = f"{parsed.scheme}://{host}"
    return [
        google_favicon_url(domain, 64),
        f"https://icons.duckduckgo.com/ip3/{quote(domain)}.ico",
        google_favicon_url(domain, 32),
        f"{origin}/favicon.ico",
        f"{origin}/favicon.png",
        f"{origin}/apple-touch-icon.png",
    ]


def probe_favicon(candidate: str, timeout: float = FAVICON_PROBE_TIMEOUT,
                  client: Optional[httpx.Client] = None) -> bool:
    try:
        load_image(candidate, timeout, client=client)
    except ImageLoadError as exc:
        logger.info("Favicon candidate failed: %s (%s)", candidate, exc)
        return False
    return True


def resolve_favicon(url: str, timeout: float = FAVICON_PROBE_TIMEOUT,
                    client: Optional[httpx.Client] = None) -> Optional[str]:
    """Return the first favicon that loads for *url*.

    Candidates are probed one at a time. When none of them loads, the 64px
    Google service URL is returned anyway; ``None`` only comes back for input
    that is not a URL.
    """
    candidates = favicon_candidates(url)
    if not candidates:
        return None

    logger.info("Detecting favicon for %s", url)
    for index, candidate in enumerate(candidates, start=1):
        logger.debug("Testing favicon %d/%d: %s", index, len(candidates), candidate)
        if probe_favicon(candidate, timeout=timeout, client=client):
            logger.info("Using favicon %s", candidate)
            return candidate

    fallback = candidates[0]
    logger.warning("No favicon candidate loaded for %s, falling back to %s", url, fallback)
    return fallback
