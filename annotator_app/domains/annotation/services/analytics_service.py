"""
Annotation Domain - Analytics Aggregation

Pure event counts over a module list for the summary views.
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Any, List, Sequence

from annotator_app.domains.annotation.models.annotation_models import (
    Module, EventType, ScreenshotStatus
)


def count_events_by_type(modules: Sequence[Module]) -> Dict[str, Dict[EventType, int]]:
    """module key -> {event type: count}, only types that occur are present"""
    counts = {}
    for module in modules:
        counter = Counter()
        for screenshot in module.screenshots:
            for event in screenshot.events:
                counter[event.event_type] += 1
        counts[module.key] = dict(counter)
    return counts


def count_events_by_screenshot(module: Module) -> Dict[str, Dict[EventType, int]]:
    """screenshot id -> {event type: count} within one module"""
    return {
        screenshot.id: dict(Counter(event.event_type for event in screenshot.events))
        for screenshot in module.screenshots
    }


def total_events_by_type(modules: Sequence[Module]) -> Dict[EventType, int]:
    """Totals across all modules, with every event type present"""
    totals = {event_type: 0 for event_type in EventType}
    for by_type in count_events_by_type(modules).values():
        for event_type, count in by_type.items():
            totals[event_type] += count
    return totals


@dataclass
class ModuleSummary:
    """Screenshot and event totals for one module"""
    key: str
    name: str
    screenshot_count: int
    status_counts: Dict[ScreenshotStatus, int] = field(default_factory=dict)
    event_counts: Dict[EventType, int] = field(default_factory=dict)

    @property
    def total_events(self) -> int:
        return sum(self.event_counts.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "screenshotCount": self.screenshot_count,
            "statusCounts": {status.value: count for status, count in self.status_counts.items()},
            "eventCounts": {event_type.value: count for event_type, count in self.event_counts.items()},
            "totalEvents": self.total_events
        }


def summarize_modules(modules: Sequence[Module]) -> List[ModuleSummary]:
    event_counts = count_events_by_type(modules)
    summaries = []
    for module in modules:
        statuses = {status: 0 for status in ScreenshotStatus}
        for screenshot in module.screenshots:
            statuses[screenshot.status] += 1

        summaries.append(ModuleSummary(
            key=module.key,
            name=module.name,
            screenshot_count=len(module.screenshots),
            status_counts=statuses,
            event_counts=event_counts[module.key]
        ))
    return summaries
