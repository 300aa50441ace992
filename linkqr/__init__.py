"""Core package for the URL to QR code generator.

This package exposes the pieces the Streamlit app wires together.
"""

from .compositor import composite_logo
from .favicon import resolve_favicon
from .generator import QRCodeGenerator
from .models import GeneratorState, QrRenderResult, RecentUrlEntry
from .qr_generator import generate_qr_data_url, is_valid_url

__all__ = [
    "GeneratorState",
    "QRCodeGenerator",
    "QrRenderResult",
    "RecentUrlEntry",
    "composite_logo",
    "generate_qr_data_url",
    "is_valid_url",
    "resolve_favicon",
]
