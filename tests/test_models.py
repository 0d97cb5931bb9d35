from datetime import timezone

import pytest

from annotator_app.domains.annotation.models.annotation_models import (
    Module, Screenshot, Event, EventType, ScreenshotStatus, PageLabel, parse_timestamp
)
from annotator_app.shared.exceptions import InvalidInputError
from tests.helpers import make_event


def test_module_key_lowercases_and_hyphenates_whitespace():
    assert Module.derive_key("  Home   Page ") == "home-page"
    assert Module.create("Order\tHistory").key == "order-history"


def test_blank_module_name_is_rejected():
    with pytest.raises(InvalidInputError):
        Module.create("   ")


def test_legacy_screenshot_order_arranges_screenshots():
    module = Module.from_dict({
        "name": "Legacy",
        "screenshotOrder": ["c", "a"],
        "screenshots": [
            {"id": "a", "name": "A"},
            {"id": "b", "name": "B"},
            {"id": "c", "name": "C"},
        ]
    })
    assert [s.id for s in module.screenshots] == ["c", "a", "b"]
    assert "screenshotOrder" not in module.to_dict()


def test_screenshot_defaults():
    screenshot = Screenshot.from_dict({"name": "Landing"})
    assert screenshot.status is ScreenshotStatus.TODO
    assert screenshot.label_id is None
    assert screenshot.events == []
    assert screenshot.updated_at == screenshot.created_at


@pytest.mark.parametrize("raw,expected", [
    ("pageview", EventType.PAGE_VIEW),
    ("PageView", EventType.PAGE_VIEW),
    ("track_event", EventType.TRACK_EVENT),
    ("outlink", EventType.OUTLINK),
])
def test_event_type_parsing(raw, expected):
    assert EventType.parse(raw) is expected


def test_unknown_event_type_is_rejected():
    with pytest.raises(InvalidInputError):
        Event.from_dict(make_event("s1", event_type="click"))


def test_event_requires_coordinates():
    data = make_event("s1")
    del data["coordinates"]
    with pytest.raises(InvalidInputError):
        Event.from_dict(data)


def test_event_serializes_with_persisted_field_names():
    event = Event.from_dict(make_event("s1", id="e1", dimensions=["1"], description="hero banner"))
    data = event.to_dict()
    assert data["eventType"] == "pageview"
    assert data["screenshotId"] == "s1"
    assert data["coordinates"] == {"startX": 10.0, "startY": 20.0, "width": 30.0, "height": 5.0}
    assert data["description"] == "hero banner"


def test_browser_timestamps_with_z_suffix_parse():
    parsed = parse_timestamp("2024-03-01T12:30:00.000Z")
    assert parsed.tzinfo == timezone.utc
    assert parsed.hour == 12


def test_page_label_ids_are_prefixed():
    assert PageLabel.generate_id().startswith("label_")
