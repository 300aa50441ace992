import html
import json
import time

from .models import UploadedImage
from .qr_generator import bytes_to_data_url, data_url_to_bytes


def download_filename(with_logo, now_ms=None):
    """Name for a downloaded QR image, e.g. ``qr-code-with-logo-1700000000000.png``."""
    stamp = int(time.time() * 1000) if now_ms is None else int(now_ms)
    return f"qr-code-{'with-logo-' if with_logo else ''}{stamp}.png"


def png_bytes(data_url):
    return data_url_to_bytes(data_url)


def read_uploaded_logo(uploaded_file):
    """
    Turn an uploaded file into an UploadedImage.
    Returns None when nothing was uploaded or the file is not an image.
    """
    if uploaded_file is None:
        return None

    mime_type = (getattr(uploaded_file, "type", "") or "").lower()
    if not mime_type.startswith("image/"):
        return None

    return UploadedImage(
        data_url=bytes_to_data_url(uploaded_file.getvalue(), mime_type),
        mime_type=mime_type,
        name=getattr(uploaded_file, "name", "") or "",
    )


CLIPBOARD_TEMPLATE = """
<button id="copy-qr" style="width:100%;padding:0.45rem 0.75rem;border:1px solid #d1d5db;
  border-radius:0.5rem;background:#ffffff;cursor:pointer;font-size:0.9rem;">{label}</button>
<div id="copy-status" style="font-size:0.8rem;color:#b91c1c;margin-top:0.25rem;"></div>
<script>
const dataUrl = {data_url};
const button = document.getElementById("copy-qr");
const status = document.getElementById("copy-status");
button.addEventListener("click", async () => {{
  try {{
    const response = await fetch(dataUrl);
    const blob = await response.blob();
    await navigator.clipboard.write([new ClipboardItem({{"image/png": blob}})]);
    button.textContent = "Copied";
    status.style.color = "#15803d";
    status.textContent = "QR code copied to clipboard";
    setTimeout(() => {{ button.textContent = {label_js}; status.textContent = ""; }}, 2000);
  }} catch (error) {{
    console.error("Copy failed:", error);
    status.style.color = "#b91c1c";
    status.textContent = "Unable to copy QR code to clipboard";
  }}
}});
</script>
"""


def clipboard_widget_html(data_url, label="Copy"):
    """HTML for a button that writes the PNG at *data_url* to the system clipboard."""
    return CLIPBOARD_TEMPLATE.format(
        label=html.escape(label),
        label_js=json.dumps(label),
        data_url=json.dumps(data_url),
    )
