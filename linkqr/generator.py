"""Ties validation, encoding, favicon lookup, compositing and history together."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .compositor import LOGO_LOAD_TIMEOUT, QR_LOAD_TIMEOUT, composite_logo
from .exceptions import InvalidURLError
from .favicon import FAVICON_PROBE_TIMEOUT, resolve_favicon
from .models import (
    DEFAULT_QR_SIZE,
    AutoDetectedFavicon,
    GeneratorState,
    LogoSource,
    QrRenderRequest,
    QrRenderResult,
    UploadedImage,
)
from .qr_generator import generate_qr_data_url, is_valid_url, require_valid_url


logger = logging.getLogger(__name__)

DESTRUCTIVE = "destructive"
WARNING = "warning"


class QRCodeGenerator:
    """Runs one generation cycle at a time and records its outcome on ``state``.

    ``history`` is any object with ``add(url)`` and ``clear()``, normally a
    :class:`history_store.HistoryStore`.
    """

    def __init__(
        self,
        history: Any,
        state: Optional[GeneratorState] = None,
        settings: Optional[dict] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        settings = settings or {}
        self.history = history
        self.state = state if state is not None else GeneratorState()
        self.client = client
        self.favicon_timeout = float(settings.get("favicon_timeout", FAVICON_PROBE_TIMEOUT))
        self.logo_timeout = float(settings.get("logo_timeout", LOGO_LOAD_TIMEOUT))
        self.qr_timeout = float(settings.get("qr_timeout", QR_LOAD_TIMEOUT))

    def detect_favicon(self, url: str) -> Optional[str]:
        if not is_valid_url(url):
            return None

        self.state.detecting_logo = True
        try:
            favicon = resolve_favicon(url, timeout=self.favicon_timeout, client=self.client)
        except Exception:
            logger.exception("Favicon detection failed for %s", url)
            self.state.detected_favicon = ""
            return None
        finally:
            self.state.detecting_logo = False

        self.state.detected_favicon = favicon or ""
        return favicon

    def _resolve_logo(
        self, url: str, logo_source: Optional[LogoSource], auto_detect: bool
    ) -> Optional[LogoSource]:
        if isinstance(logo_source, UploadedImage) and logo_source.data_url:
            logger.info("Using uploaded logo file %s", logo_source.name or "<unnamed>")
            return logo_source
        if isinstance(logo_source, AutoDetectedFavicon) and logo_source.url:
            return logo_source
        if auto_detect:
            favicon = self.detect_favicon(url)
            if favicon:
                return AutoDetectedFavicon(url=favicon)
        return None

    def _apply_logo(self, qr_data_url: str, logo: Optional[LogoSource]) -> QrRenderResult:
        if logo is None:
            logger.info("No logo URL available for integration")
            self.state.notify(
                "No Logo Found",
                "Could not detect or load logo, generating QR code without logo",
                WARNING,
            )
            return QrRenderResult(image=qr_data_url, used_logo=False)

        composed = composite_logo(
            qr_data_url,
            logo.source,
            client=self.client,
            qr_timeout=self.qr_timeout,
            logo_timeout=self.logo_timeout,
        )
        if not composed.used_logo or composed.image == qr_data_url:
            logger.warning("Logo integration returned original QR code, no changes made")
            self.state.notify(
                "Logo Integration Issue",
                "Logo could not be integrated, using QR code without logo",
                WARNING,
            )
            return QrRenderResult(image=qr_data_url, used_logo=False)

        self.state.notify("Success!", "QR code with logo generated successfully")
        return composed

    def render(self, request: QrRenderRequest, logo_enabled: bool = False,
               auto_detect: bool = True) -> QrRenderResult:
        """Encode *request* and, when asked, overlay its logo. Raises on hard failures."""
        qr_data_url = generate_qr_data_url(request.target_url, size=request.pixel_size)
        if not logo_enabled:
            return QrRenderResult(image=qr_data_url, used_logo=False)

        logo = self._resolve_logo(request.target_url, request.logo, auto_detect)
        return self._apply_logo(qr_data_url, logo)

    def generate(
        self,
        url: str,
        size: int = DEFAULT_QR_SIZE,
        logo_enabled: bool = False,
        logo_source: Optional[LogoSource] = None,
        auto_detect: bool = True,
        record_history: bool = True,
    ) -> Optional[QrRenderResult]:
        """Generate a QR code for *url* and publish it on ``state.result``.

        Returns ``None`` when validation fails or generation errors out; the
        previously displayed result is left in place in both cases. The URL
        goes into history only when *record_history* is set.
        """
        try:
            target_url = require_valid_url(url)
        except InvalidURLError as exc:
            title = "URL Required" if not (url or "").strip() else "Invalid URL"
            self.state.notify(title, str(exc), DESTRUCTIVE)
            return None

        self.state.is_generating = True
        try:
            request = QrRenderRequest(target_url=target_url, pixel_size=int(size), logo=logo_source)
            result = self.render(request, logo_enabled=logo_enabled, auto_detect=auto_detect)
        except Exception:
            logger.exception("QR generation error for %s", target_url)
            self.state.notify(
                "Generation Failed",
                "Failed to generate QR code. Please try again.",
                DESTRUCTIVE,
            )
            return None
        finally:
            self.state.is_generating = False

        self.state.result = result
        if record_history:
            try:
                self.history.add(target_url)
            except OSError:
                logger.exception("Could not save %s to recent URLs", target_url)

        self.state.notify(
            "QR Code Generated!",
            "QR code with logo is ready!" if logo_enabled
            else "Your QR code is ready to download or share",
        )
        return result

    def select_history_entry(self, url: str, **options: Any) -> Optional[QrRenderResult]:
        """Regenerate a code for a history entry without reordering history."""
        options["record_history"] = False
        return self.generate(url, **options)

    def record_download(self) -> None:
        self.state.notify("Downloaded!", "QR code saved to your device")

    def clear_history(self) -> None:
        self.history.clear()
        self.state.notify("History Cleared", "Recent URLs have been cleared")
