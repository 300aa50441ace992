"""Data types shared by the generator, the history store and the UI."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union


QR_SIZES = (128, 256, 512, 1024)
DEFAULT_QR_SIZE = 256

SIZE_LABELS = {
    128: "Small (128px)",
    256: "Medium (256px)",
    512: "Large (512px)",
    1024: "Extra Large (1024px)",
}


@dataclass(slots=True)
class RecentUrlEntry:
    """A URL that produced a QR code, with its epoch-millisecond timestamp."""

    url: str
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: Any) -> "RecentUrlEntry":
        if not isinstance(data, dict):
            raise ValueError(f"History entry must be an object, got {type(data).__name__}")
        url = data.get("url")
        timestamp = data.get("timestamp")
        if not isinstance(url, str) or not url:
            raise ValueError("History entry is missing a url")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError("History entry is missing a numeric timestamp")
        return cls(url=url, timestamp=int(timestamp))


@dataclass(slots=True)
class AutoDetectedFavicon:
    url: str

    @property
    def source(self) -> str:
        return self.url


@dataclass(slots=True)
class UploadedImage:
    data_url: str
    mime_type: str = "image/png"
    name: str = ""

    @property
    def source(self) -> str:
        return self.data_url


LogoSource = Union[AutoDetectedFavicon, UploadedImage]


@dataclass(slots=True)
class QrRenderRequest:
    target_url: str
    pixel_size: int = DEFAULT_QR_SIZE
    logo: Optional[LogoSource] = None

    def __post_init__(self) -> None:
        if self.pixel_size not in QR_SIZES:
            raise ValueError(f"Unsupported QR size {self.pixel_size}; choose one of {QR_SIZES}")


@dataclass(slots=True)
class QrRenderResult:
    """PNG data URL plus whether a logo actually made it onto the image."""

    image: str
    used_logo: bool = False


@dataclass(slots=True)
class Notice:
    title: str
    description: str = ""
    variant: str = "default"  # default, warning or destructive

    @property
    def is_error(self) -> bool:
        return self.variant == "destructive"

    @property
    def is_warning(self) -> bool:
        return self.variant == "warning"


@dataclass
class GeneratorState:
    """Observable fields the UI renders; written only by QRCodeGenerator."""

    is_generating: bool = False
    detecting_logo: bool = False
    detected_favicon: str = ""
    result: Optional[QrRenderResult] = None
    notices: list[Notice] = field(default_factory=list)

    def notify(self, title: str, description: str = "", variant: str = "default") -> Notice:
        notice = Notice(title=title, description=description, variant=variant)
        self.notices.append(notice)
        return notice

    def pop_notices(self) -> list[Notice]:
        pending = list(self.notices)
        self.notices.clear()
        return pending
