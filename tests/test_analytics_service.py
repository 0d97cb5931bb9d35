from annotator_app.domains.annotation.models.annotation_models import (
    Module, Screenshot, Event, EventType, ScreenshotStatus
)
from annotator_app.domains.annotation.services.analytics_service import (
    count_events_by_type, count_events_by_screenshot, total_events_by_type, summarize_modules
)
from tests.helpers import make_event


def module_with_events(name, *screens):
    module = Module.create(name)
    for index, (event_types, status) in enumerate(screens):
        screenshot = Screenshot(id=f"{module.key}-{index}", name=f"S{index}", url="", page_name=module.key,
                                status=status)
        screenshot.events = [
            Event.from_dict(make_event(screenshot.id, event_type=event_type)) for event_type in event_types
        ]
        module.screenshots.append(screenshot)
    return module


def test_counts_per_module_only_include_present_types():
    checkout = module_with_events(
        "Checkout",
        (["pageview", "trackevent"], ScreenshotStatus.TODO),
        (["pageview"], ScreenshotStatus.DONE),
    )
    empty = Module.create("Empty")

    assert count_events_by_type([checkout, empty]) == {
        "checkout": {EventType.PAGE_VIEW: 2, EventType.TRACK_EVENT: 1},
        "empty": {},
    }


def test_counts_per_screenshot():
    checkout = module_with_events("Checkout", (["outlink", "outlink"], ScreenshotStatus.TODO), ([], ScreenshotStatus.TODO))
    assert count_events_by_screenshot(checkout) == {
        "checkout-0": {EventType.OUTLINK: 2},
        "checkout-1": {},
    }


def test_totals_include_every_type():
    modules = [
        module_with_events("A", (["pageview"], ScreenshotStatus.TODO)),
        module_with_events("B", (["pageview", "trackevent"], ScreenshotStatus.TODO)),
    ]
    assert total_events_by_type(modules) == {
        EventType.PAGE_VIEW: 2,
        EventType.TRACK_EVENT: 1,
        EventType.OUTLINK: 0,
    }


def test_module_summaries():
    checkout = module_with_events(
        "Checkout",
        (["pageview", "trackevent"], ScreenshotStatus.DONE),
        ([], ScreenshotStatus.IN_PROGRESS),
        (["pageview"], ScreenshotStatus.DONE),
    )
    [summary] = summarize_modules([checkout])

    assert summary.screenshot_count == 3
    assert summary.total_events == 3
    assert summary.to_dict() == {
        "key": "checkout",
        "name": "Checkout",
        "screenshotCount": 3,
        "statusCounts": {"TODO": 0, "IN_PROGRESS": 1, "DONE": 2},
        "eventCounts": {"pageview": 2, "trackevent": 1},
        "totalEvents": 3,
    }
