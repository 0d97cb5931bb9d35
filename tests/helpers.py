"""Shared builders for test data"""
from typing import Any, Dict


def make_event(screenshot_id: str, event_type: str = "pageview", **overrides) -> Dict[str, Any]:
    data = {
        "eventType": event_type,
        "name": "checkout_view",
        "category": "Checkout",
        "action": "view",
        "coordinates": {"startX": 10.0, "startY": 20.0, "width": 30.0, "height": 5.0},
        "screenshotId": screenshot_id
    }
    data.update(overrides)
    return data


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
