"""
Annotation Domain - Entity Graph Data Models

Modules own ordered screenshots, screenshots own their events. Field names in
``to_dict`` output match the persisted JSON document (camelCase).
"""
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, Any, Optional, List

from annotator_app.shared.exceptions import InvalidInputError

_WHITESPACE_RUN = re.compile(r"\s+")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp, accepting the ``Z`` suffix browsers emit"""
    if value is None or isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise InvalidInputError(f"Invalid timestamp: {value}", field="timestamp", value=value)


def format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _require_object(data: Any, entity: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise InvalidInputError(f"{entity} must be an object")
    return data


def _require_list(data: Dict[str, Any], key: str, entity: str) -> List[Any]:
    items = data.get(key) or []
    if not isinstance(items, list):
        raise InvalidInputError(f"{entity} field '{key}' must be a list", field=key)
    return items


def _require(data: Dict[str, Any], key: str, entity: str) -> Any:
    _require_object(data, entity)
    if data.get(key) is None:
        raise InvalidInputError(f"{entity} field '{key}' is required", field=key)
    return data[key]


class EventType(str, Enum):
    """Kind of analytics event an annotation describes"""
    PAGE_VIEW = "pageview"
    TRACK_EVENT = "trackevent"
    OUTLINK = "outlink"

    @classmethod
    def parse(cls, value: Any) -> 'EventType':
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower().replace("_", "")
        for member in cls:
            if member.value == normalized:
                return member
        raise InvalidInputError(f"Unknown event type: {value}", field="eventType", value=value)


class ScreenshotStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"

    @classmethod
    def parse(cls, value: Any) -> 'ScreenshotStatus':
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidInputError(f"Unknown screenshot status: {value}", field="status", value=value)


@dataclass
class ImageSize:
    """Rendered size of a screenshot image, in pixels"""
    width: float
    height: float

    @property
    def is_degenerate(self) -> bool:
        return self.width == 0 or self.height == 0


@dataclass
class Coordinates:
    """Bounding box of an annotation: start corner plus extent"""
    start_x: float
    start_y: float
    width: float
    height: float

    @classmethod
    def from_corners(cls, x1: float, y1: float, x2: float, y2: float) -> 'Coordinates':
        """Box from two opposite corners of a drag, in any direction"""
        return cls(
            start_x=min(x1, x2),
            start_y=min(y1, y2),
            width=abs(x2 - x1),
            height=abs(y2 - y1)
        )

    def to_dict(self) -> Dict[str, float]:
        return {
            "startX": self.start_x,
            "startY": self.start_y,
            "width": self.width,
            "height": self.height
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Coordinates':
        try:
            return cls(
                start_x=float(_require(data, "startX", "Coordinates")),
                start_y=float(_require(data, "startY", "Coordinates")),
                width=float(_require(data, "width", "Coordinates")),
                height=float(_require(data, "height", "Coordinates"))
            )
        except (TypeError, ValueError):
            raise InvalidInputError("Coordinates must be numeric", field="coordinates", value=data)


@dataclass
class Event:
    """Spatial and analytics annotation on a screenshot"""
    id: str
    event_type: EventType
    name: str
    category: str
    action: str
    coordinates: Coordinates
    screenshot_id: str
    value: Optional[str] = None
    description: Optional[str] = None
    dimensions: List[str] = field(default_factory=list)
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        result = {
            "id": self.id,
            "eventType": self.event_type.value,
            "name": self.name,
            "category": self.category,
            "action": self.action,
            "value": self.value,
            "dimensions": list(self.dimensions),
            "coordinates": self.coordinates.to_dict(),
            "screenshotId": self.screenshot_id,
            "updatedAt": format_timestamp(self.updated_at)
        }
        if self.description is not None:
            result["description"] = self.description
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Event':
        """Create event from dictionary"""
        _require_object(data, "Event")
        dimensions = _require_list(data, "dimensions", "Event")

        return cls(
            id=str(data.get("id") or new_id()),
            event_type=EventType.parse(_require(data, "eventType", "Event")),
            name=str(data.get("name") or ""),
            category=str(data.get("category") or ""),
            action=str(data.get("action") or ""),
            coordinates=Coordinates.from_dict(_require(data, "coordinates", "Event")),
            screenshot_id=str(_require(data, "screenshotId", "Event")),
            value=data.get("value"),
            description=data.get("description"),
            dimensions=[str(d) for d in dimensions],
            updated_at=parse_timestamp(data.get("updatedAt"))
        )


@dataclass
class Screenshot:
    """Captured page image with its embedded events"""
    id: str
    name: str
    url: str
    page_name: str
    status: ScreenshotStatus = ScreenshotStatus.TODO
    label_id: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    events: List[Event] = field(default_factory=list)

    def touch(self):
        self.updated_at = utc_now()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "name": self.name,
            "url": self.url,
            "pageName": self.page_name,
            "labelId": self.label_id,
            "status": self.status.value,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
            "events": [event.to_dict() for event in self.events]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Screenshot':
        """Create screenshot from dictionary"""
        _require_object(data, "Screenshot")
        events = _require_list(data, "events", "Screenshot")
        created_at = parse_timestamp(data.get("createdAt")) or utc_now()
        updated_at = parse_timestamp(data.get("updatedAt")) or created_at

        return cls(
            id=str(data.get("id") or new_id()),
            name=str(_require(data, "name", "Screenshot")),
            url=str(data.get("url") or data.get("path") or ""),
            page_name=str(data.get("pageName") or ""),
            status=ScreenshotStatus.parse(data.get("status") or ScreenshotStatus.TODO),
            label_id=data.get("labelId"),
            created_at=created_at,
            updated_at=updated_at,
            events=[Event.from_dict(e) for e in events]
        )


@dataclass
class Module:
    """Named, ordered grouping of screenshots"""
    id: str
    name: str
    key: str
    screenshots: List[Screenshot] = field(default_factory=list)

    @staticmethod
    def derive_key(name: str) -> str:
        """URL-safe key: lower-cased name with whitespace runs replaced by hyphens"""
        return _WHITESPACE_RUN.sub("-", name.strip().lower())

    @classmethod
    def create(cls, name: str) -> 'Module':
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Module name is required", field="name")
        return cls(id=new_id(), name=name, key=cls.derive_key(name))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "name": self.name,
            "key": self.key,
            "screenshots": [screenshot.to_dict() for screenshot in self.screenshots]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Module':
        """
        Create module from dictionary.

        Documents written by older clients keep a separate ``screenshotOrder``
        id list; screenshots are arranged by it, unlisted ones appended.
        """
        name = str(_require(data, "name", "Module"))
        screenshots = [Screenshot.from_dict(s) for s in _require_list(data, "screenshots", "Module")]

        order = data.get("screenshotOrder")
        if order:
            by_id = {s.id: s for s in screenshots}
            ordered = [by_id[sid] for sid in order if sid in by_id]
            listed = {s.id for s in ordered}
            screenshots = ordered + [s for s in screenshots if s.id not in listed]

        return cls(
            id=str(data.get("id") or new_id()),
            name=name,
            key=str(data.get("key") or cls.derive_key(name)),
            screenshots=screenshots
        )


@dataclass
class Dimension:
    """Named, typed tracking variable an event can reference"""
    id: str
    name: str
    description: Optional[str] = None
    type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {"id": self.id, "name": self.name}
        if self.description is not None:
            result["description"] = self.description
        if self.type is not None:
            result["type"] = self.type
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Dimension':
        return cls(
            id=str(_require(data, "id", "Dimension")).strip(),
            name=str(_require(data, "name", "Dimension")).strip(),
            description=data.get("description"),
            type=data.get("type")
        )


@dataclass
class PageLabel:
    id: str
    name: str

    @staticmethod
    def generate_id() -> str:
        return f"label_{uuid.uuid4()}"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PageLabel':
        return cls(
            id=str(_require(data, "id", "PageLabel")).strip(),
            name=str(_require(data, "name", "PageLabel")).strip()
        )
