"""Exception types raised inside the QR generator."""


class LinkQRError(Exception):
    """Base exception for the generator."""


class InvalidURLError(LinkQRError, ValueError):
    """Input could not be parsed as a scheme + host URL."""


class QRGenerationError(LinkQRError):
    """The base QR code could not be encoded."""


class ImageLoadError(LinkQRError):
    """An image source failed to load, timed out, or could not be decoded."""
