"""Loading images from inline data URLs or remote addresses."""

from __future__ import annotations

import io
import logging
from typing import Optional

import httpx
from PIL import Image

from .exceptions import ImageLoadError
from .qr_generator import data_url_to_bytes


logger = logging.getLogger(__name__)

USER_AGENT = "LinkQR/1.0"


def is_inline_source(source: str) -> bool:
    return (source or "").startswith("data:")


def decode_image(raw: bytes) -> Image.Image:
    """Fully decode *raw* bytes into a Pillow image."""
    try:
        image = Image.open(io.BytesIO(raw))
        image.load()
    except Exception as exc:
        raise ImageLoadError(f"Could not decode image: {exc}") from exc
    return image


def fetch_bytes(url: str, timeout: float, client: Optional[httpx.Client] = None) -> bytes:
    """GET *url* without credentials, bounded by *timeout* seconds."""
    try:
        if client is None:
            with httpx.Client(follow_redirects=True, headers={"User-Agent": USER_AGENT}) as own_client:
                response = own_client.get(url, timeout=timeout)
        else:
            response = client.get(url, timeout=timeout)
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise ImageLoadError(f"Timed out after {timeout}s loading {url}") from exc
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise ImageLoadError(f"Request for {url} failed: {exc}") from exc
    return response.content


def load_image(source: str, timeout: float, client: Optional[httpx.Client] = None) -> Image.Image:
    """Load an image from a ``data:`` URL or over HTTP(S).

    Inline sources are decoded locally and never touch the network; anything
    else is fetched with a plain GET bounded by *timeout*.
    """
    if not source:
        raise ImageLoadError("Empty image source")
    if is_inline_source(source):
        try:
            raw = data_url_to_bytes(source)
        except ValueError as exc:
            raise ImageLoadError(str(exc)) from exc
    else:
        raw = fetch_bytes(source, timeout, client=client)
    return decode_image(raw)
