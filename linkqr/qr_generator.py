import base64
import binascii
import io
import logging
from urllib.parse import urlparse

import qrcode
from PIL import Image

from .exceptions import InvalidURLError, QRGenerationError
from .models import DEFAULT_QR_SIZE


logger = logging.getLogger(__name__)

FOREGROUND_COLOR = "#1f2937"
BACKGROUND_COLOR = "#ffffff"
QR_MARGIN = 2
# Pixels per module when the symbol has more modules than the requested size.
OVERSIZE_SCALE = 4


def is_valid_url(text: str) -> bool:
    """Return True when *text* parses into a scheme and a host."""
    candidate = (text or "").strip()
    if not candidate:
        return False
    try:
        parsed = urlparse(candidate)
    except ValueError:
        return False
    try:
        hostname = parsed.hostname
    except ValueError:
        return False
    return bool(parsed.scheme) and parsed.scheme.isalpha() and bool(hostname)


def require_valid_url(text: str) -> str:
    candidate = (text or "").strip()
    if not candidate:
        raise InvalidURLError("Please enter a URL to generate QR code")
    if not is_valid_url(candidate):
        raise InvalidURLError("Please enter a valid URL (e.g., https://example.com)")
    return candidate


def image_to_data_url(image: Image.Image) -> str:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return bytes_to_data_url(buffer.getvalue(), "image/png")


def bytes_to_data_url(raw: bytes, mime_type: str = "image/png") -> str:
    encoded = base64.b64encode(raw).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def data_url_to_bytes(data_url: str) -> bytes:
    """Decode the payload of a base64 ``data:`` URL."""
    if not data_url or not data_url.startswith("data:"):
        raise ValueError("Not a data URL")
    header, sep, payload = data_url.partition(",")
    if not sep or ";base64" not in header:
        raise ValueError("Only base64 data URLs are supported")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Malformed data URL payload: {exc}") from exc


def generate_qr_data_url(data: str, size: int = DEFAULT_QR_SIZE) -> str:
    """Encode *data* as a ``size`` x ``size`` PNG QR code and return it as a data URL.

    The highest error-correction level is always used so that a centre logo
    can cover part of the symbol without making it unreadable.
    """
    try:
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            box_size=10,
            border=QR_MARGIN,
        )
        qr.add_data(data)
        qr.make(fit=True)

        total_modules = qr.modules_count + 2 * QR_MARGIN
        if total_modules > size:
            logger.warning(
                "%d modules do not fit in %dpx, rendering at %dpx per module instead",
                total_modules, size, OVERSIZE_SCALE,
            )
            qr.box_size = OVERSIZE_SCALE

        qr_img = qr.make_image(fill_color=FOREGROUND_COLOR, back_color=BACKGROUND_COLOR).convert("RGB")
        if total_modules <= size and qr_img.size != (size, size):
            qr_img = qr_img.resize((size, size), Image.NEAREST)
        data_url = image_to_data_url(qr_img)
    except Exception as exc:
        raise QRGenerationError(f"Failed to encode QR code: {exc}") from exc

    logger.debug("Encoded %d-character payload into %dpx QR code", len(data), size)
    return data_url
