"""Tests for the shared data types."""

import pytest

from linkqr.models import GeneratorState, QrRenderRequest, RecentUrlEntry, UploadedImage


def test_recent_url_entry_round_trip_shape():
    entry = RecentUrlEntry.from_dict({"url": "https://example.com", "timestamp": 1700000000000.0})

    assert entry.timestamp == 1700000000000
    assert entry.to_dict() == {"url": "https://example.com", "timestamp": 1700000000000}


@pytest.mark.parametrize(
    "data",
    [None, [], {"url": "", "timestamp": 1}, {"url": "https://x.example", "timestamp": "1"},
     {"url": "https://x.example", "timestamp": True}],
)
def test_recent_url_entry_rejects_malformed(data):
    with pytest.raises(ValueError):
        RecentUrlEntry.from_dict(data)


def test_render_request_only_accepts_known_sizes():
    assert QrRenderRequest("https://example.com", 1024).pixel_size == 1024
    with pytest.raises(ValueError, match="Unsupported QR size"):
        QrRenderRequest("https://example.com", 300)


def test_logo_source_exposes_compositor_input():
    assert UploadedImage(data_url="data:image/png;base64,AA==").source == "data:image/png;base64,AA=="


def test_pop_notices_drains_queue():
    state = GeneratorState()
    state.notify("Invalid URL", "bad", "destructive")

    notices = state.pop_notices()

    assert [notice.title for notice in notices] == ["Invalid URL"]
    assert notices[0].is_error
    assert state.notices == []
