"""Scenario tests for the generation orchestrator."""

import io

import httpx
import pytest
from PIL import Image

from linkqr import generator as generator_module
from linkqr.generator import QRCodeGenerator
from linkqr.models import AutoDetectedFavicon, GeneratorState, QrRenderResult, UploadedImage
from linkqr.qr_generator import data_url_to_bytes

from conftest import make_png, make_png_data_url


@pytest.fixture
def no_network(mock_client):
    def handler(request):
        raise AssertionError(f"unexpected request to {request.url}")

    return mock_client(handler)


@pytest.fixture
def generator(history, no_network):
    return QRCodeGenerator(history, client=no_network)


def titles(state):
    return [notice.title for notice in state.notices]


def test_plain_generation_produces_png_and_history(generator, history):
    result = generator.generate("https://example.com", size=256, logo_enabled=False)

    assert result is not None
    assert result.used_logo is False
    image = Image.open(io.BytesIO(data_url_to_bytes(result.image)))
    assert image.format == "PNG"
    assert image.size == (256, 256)
    assert generator.state.result is result
    assert [(entry.url, entry.timestamp) for entry in history.entries] == [
        ("https://example.com", history.entries[0].timestamp)
    ]
    assert titles(generator.state) == ["QR Code Generated!"]
    assert generator.state.is_generating is False


def test_invalid_url_produces_nothing(generator, history):
    assert generator.generate("not-a-url") is None

    assert generator.state.result is None
    assert history.entries == []
    notice = generator.state.notices[0]
    assert notice.title == "Invalid URL"
    assert notice.is_error


def test_blank_url_requires_input(generator, history):
    assert generator.generate("   ") is None

    assert titles(generator.state) == ["URL Required"]
    assert history.entries == []


def test_auto_detect_uses_fallback_when_every_candidate_fails(history, mock_client, failing_handler, monkeypatch):
    used = {}

    def fake_composite(qr_image, logo_image, **kwargs):
        used["logo"] = logo_image
        return QrRenderResult(image=qr_image + "#logo", used_logo=True)

    monkeypatch.setattr(generator_module, "composite_logo", fake_composite)
    gen = QRCodeGenerator(history, client=mock_client(failing_handler))

    result = gen.generate("https://example.com", logo_enabled=True)

    assert used["logo"] == "https://www.google.com/s2/favicons?domain=example.com&sz=64"
    assert gen.state.detected_favicon == used["logo"]
    assert gen.state.detecting_logo is False
    assert result.used_logo is True


def test_uploaded_logo_is_preferred_over_detection(generator):
    logo = UploadedImage(data_url=make_png_data_url((64, 64)), name="logo.png")

    result = generator.generate("https://example.com", logo_enabled=True, logo_source=logo, auto_detect=True)

    assert result.used_logo is True
    assert "Success!" in titles(generator.state)
    assert generator.state.detected_favicon == ""


def test_detected_favicon_is_composited(history, mock_client):
    def handler(request):
        if request.url.host == "www.google.com":
            return httpx.Response(200, content=make_png((128, 128), (37, 99, 235, 255)))
        return httpx.Response(404)

    gen = QRCodeGenerator(history, client=mock_client(handler))

    result = gen.generate("https://example.com", size=512, logo_enabled=True)

    assert result.used_logo is True
    image = Image.open(io.BytesIO(data_url_to_bytes(result.image))).convert("RGBA")
    assert image.size == (512, 512)
    assert image.getpixel((256, 256)) == (37, 99, 235, 255)


def test_unchanged_composite_is_reported(generator, monkeypatch):
    monkeypatch.setattr(
        generator_module,
        "composite_logo",
        lambda qr_image, logo_image, **kwargs: QrRenderResult(image=qr_image, used_logo=False),
    )

    result = generator.generate(
        "https://example.com",
        logo_enabled=True,
        logo_source=AutoDetectedFavicon(url="https://example.com/favicon.ico"),
    )

    assert result.used_logo is False
    assert "Logo Integration Issue" in titles(generator.state)
    assert generator.state.result is result


def test_logo_without_source_generates_plain_code(generator):
    result = generator.generate("https://example.com", logo_enabled=True, auto_detect=False)

    assert result.used_logo is False
    assert titles(generator.state) == ["No Logo Found", "QR Code Generated!"]


def test_hard_failure_keeps_previous_result(generator, history, monkeypatch):
    previous = generator.generate("https://example.com")
    generator.state.pop_notices()

    def explode(*args, **kwargs):
        raise RuntimeError("encoder unavailable")

    monkeypatch.setattr(generator_module, "generate_qr_data_url", explode)

    assert generator.generate("https://other.example") is None
    assert generator.state.result is previous
    assert titles(generator.state) == ["Generation Failed"]
    assert [entry.url for entry in history.entries] == ["https://example.com"]
    assert generator.state.is_generating is False


def test_selecting_history_entry_regenerates_without_reordering(generator, history):
    generator.generate("https://a.example")
    generator.generate("https://b.example")

    result = generator.select_history_entry("https://a.example", size=128)

    assert result is not None
    assert Image.open(io.BytesIO(data_url_to_bytes(result.image))).size == (128, 128)
    assert [entry.url for entry in history.entries] == ["https://b.example", "https://a.example"]


def test_clear_history(generator, history):
    generator.generate("https://example.com")

    generator.clear_history()

    assert history.entries == []
    assert generator.state.notices[-1].title == "History Cleared"


def test_detecting_flag_is_set_while_resolving(history, monkeypatch):
    state = GeneratorState()
    seen = []

    def fake_resolve(url, timeout, client):
        seen.append(state.detecting_logo)
        return "https://example.com/favicon.ico"

    monkeypatch.setattr(generator_module, "resolve_favicon", fake_resolve)
    gen = QRCodeGenerator(history, state=state)

    assert gen.detect_favicon("https://example.com") == "https://example.com/favicon.ico"
    assert seen == [True]
    assert state.detecting_logo is False
    assert state.detected_favicon == "https://example.com/favicon.ico"


def test_detection_error_clears_detected_favicon(history, monkeypatch):
    state = GeneratorState(detected_favicon="https://old.example/favicon.ico")

    def broken_resolve(url, timeout, client):
        raise RuntimeError("resolver crashed")

    monkeypatch.setattr(generator_module, "resolve_favicon", broken_resolve)
    gen = QRCodeGenerator(history, state=state)

    assert gen.detect_favicon("https://example.com") is None
    assert state.detected_favicon == ""
    assert state.detecting_logo is False


def test_settings_override_timeouts(history):
    gen = QRCodeGenerator(history, settings={"favicon_timeout": 1.5, "logo_timeout": 2, "qr_timeout": 4})

    assert (gen.favicon_timeout, gen.logo_timeout, gen.qr_timeout) == (1.5, 2.0, 4.0)


def test_unsupported_size_is_a_generation_failure(generator, history):
    assert generator.generate("https://example.com", size=300) is None
    assert titles(generator.state) == ["Generation Failed"]
    assert history.entries == []


def test_hostless_url_is_rejected_without_history(generator, history):
    assert generator.generate("http://:80") is None

    assert titles(generator.state) == ["Invalid URL"]
    assert history.entries == []


def test_logo_degradations_are_warnings_not_errors(generator):
    generator.generate("https://example.com", logo_enabled=True, auto_detect=False)

    notice = generator.state.notices[0]
    assert notice.title == "No Logo Found"
    assert notice.is_warning
    assert not notice.is_error


def test_record_download_posts_notice(generator):
    generator.record_download()

    assert titles(generator.state) == ["Downloaded!"]
