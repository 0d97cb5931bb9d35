"""
Annotation Domain - Vocabulary Registries

Flat, deduplicated lists that populate the event form: dimensions, event
categories, event action names, event names and page labels. Each registry
keeps insertion order, trims input, and persists through the injected store
with one read and one write per mutation.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, Callable, List, Optional, Union

from annotator_app.domains.annotation.models.annotation_models import Dimension, PageLabel
from annotator_app.domains.annotation.repositories.annotation_store import (
    AnnotationStore, DIMENSIONS, EVENT_CATEGORIES, EVENT_ACTION_NAMES, EVENT_NAMES, PAGE_LABELS
)
from annotator_app.shared.exceptions import InvalidInputError, DuplicateEntryError, EntryNotFoundError

logger = logging.getLogger(__name__)


def normalize_text(value: Any, field: str = "name") -> str:
    """Trimmed text; blank input is rejected before any registry access"""
    text = "" if value is None else str(value).strip()
    if not text:
        raise InvalidInputError(f"{field} must not be empty", field=field)
    return text


class VocabularyRegistry(ABC):
    """list / add / remove over one persisted collection"""

    collection: str = ""
    entry_label: str = "entry"

    def __init__(self, store: AnnotationStore):
        self.store = store

    @abstractmethod
    def parse_items(self, items: List[Any]) -> List[Any]:
        """Raw stored items -> entries"""

    @abstractmethod
    def serialize_entries(self, entries: List[Any]) -> List[Any]:
        """Entries -> raw stored items"""

    @abstractmethod
    async def add(self, entry: Any) -> Any:
        """Append a new entry; duplicates are rejected"""

    @abstractmethod
    async def remove(self, key: str) -> Any:
        """Remove the entry addressed by ``key``"""

    async def list_entries(self) -> List[Any]:
        """All entries in insertion order"""
        return self.parse_items(await self.store.read_collection(self.collection))

    async def _modify(self, mutate: Callable[[List[Any]], Any]) -> Any:
        def apply(items: List[Any]) -> Any:
            entries = self.parse_items(items)
            result = mutate(entries)
            items[:] = self.serialize_entries(entries)
            return result

        return await self.store.modify_collection(self.collection, apply)

    def _not_found(self, key: str) -> EntryNotFoundError:
        return EntryNotFoundError(
            f"{self.entry_label.capitalize()} not found: {key}",
            resource_type=self.collection, resource_id=key
        )

    def _duplicate(self, value: str, field: str = "name") -> DuplicateEntryError:
        return DuplicateEntryError(
            f"{self.entry_label.capitalize()} with {field} '{value}' already exists",
            field=field, value=value
        )


class StringRegistry(VocabularyRegistry):
    """Unique strings: event categories, action names, event names"""

    def __init__(self, store: AnnotationStore, collection: str, entry_label: str):
        super().__init__(store)
        self.collection = collection
        self.entry_label = entry_label

    def parse_items(self, items: List[Any]) -> List[str]:
        # Older documents stored some entries as {"name": ...} objects
        values = []
        for item in items:
            value = item.get("name") if isinstance(item, dict) else item
            if value:
                values.append(str(value))
        return values

    def serialize_entries(self, entries: List[str]) -> List[str]:
        return list(entries)

    async def add(self, entry: str) -> str:
        value = normalize_text(entry, self.entry_label)

        def append(values: List[str]) -> str:
            if value in values:
                raise self._duplicate(value)
            values.append(value)
            return value

        await self._modify(append)
        logger.info(f"Added {self.entry_label}: {value}")
        return value

    async def remove(self, key: str) -> str:
        value = normalize_text(key, self.entry_label)

        def drop(values: List[str]) -> str:
            if value not in values:
                raise self._not_found(value)
            values.remove(value)
            return value

        await self._modify(drop)
        logger.info(f"Removed {self.entry_label}: {value}")
        return value

    async def rename(self, old: str, new: str) -> str:
        old_value = normalize_text(old, self.entry_label)
        new_value = normalize_text(new, self.entry_label)

        def replace(values: List[str]) -> str:
            if old_value not in values:
                raise self._not_found(old_value)
            if new_value != old_value and new_value in values:
                raise self._duplicate(new_value)
            values[values.index(old_value)] = new_value
            return new_value

        await self._modify(replace)
        logger.info(f"Renamed {self.entry_label} '{old_value}' to '{new_value}'")
        return new_value


class DimensionRegistry(VocabularyRegistry):
    """Dimensions are unique by id and, separately, by name"""

    collection = DIMENSIONS
    entry_label = "dimension"

    def parse_items(self, items: List[Any]) -> List[Dimension]:
        return [Dimension.from_dict(item) for item in items if isinstance(item, dict)]

    def serialize_entries(self, entries: List[Dimension]) -> List[Dict[str, Any]]:
        return [dimension.to_dict() for dimension in entries]

    def _find(self, dimensions: List[Dimension], dimension_id: str) -> Dimension:
        dimension = next((d for d in dimensions if d.id == dimension_id), None)
        if dimension is None:
            raise self._not_found(dimension_id)
        return dimension

    async def add(self, entry: Union[Dimension, Dict[str, Any]]) -> Dimension:
        data = entry.to_dict() if isinstance(entry, Dimension) else dict(entry or {})
        dimension = Dimension(
            id=normalize_text(data.get("id"), "id"),
            name=normalize_text(data.get("name"), "name"),
            description=data.get("description"),
            type=data.get("type")
        )

        def append(dimensions: List[Dimension]) -> Dimension:
            if any(d.id == dimension.id for d in dimensions):
                raise self._duplicate(dimension.id, field="id")
            if any(d.name == dimension.name for d in dimensions):
                raise self._duplicate(dimension.name, field="name")
            dimensions.append(dimension)
            return dimension

        await self._modify(append)
        logger.info(f"Added dimension {dimension.id}: {dimension.name}")
        return dimension

    async def remove(self, key: str) -> Dimension:
        dimension_id = normalize_text(key, "id")

        def drop(dimensions: List[Dimension]) -> Dimension:
            dimension = self._find(dimensions, dimension_id)
            dimensions.remove(dimension)
            return dimension

        dimension = await self._modify(drop)
        logger.info(f"Removed dimension {dimension_id}")
        return dimension

    async def update(self, key: str, changes: Dict[str, Any]) -> Dimension:
        """Change name, description or type; the id is fixed"""
        dimension_id = normalize_text(key, "id")
        name: Optional[str] = normalize_text(changes["name"], "name") if "name" in changes else None

        def apply(dimensions: List[Dimension]) -> Dimension:
            dimension = self._find(dimensions, dimension_id)
            if name is not None and any(d.name == name and d is not dimension for d in dimensions):
                raise self._duplicate(name, field="name")
            if name is not None:
                dimension.name = name
            if "description" in changes:
                dimension.description = changes["description"]
            if "type" in changes:
                dimension.type = changes["type"]
            return dimension

        return await self._modify(apply)


class LabelRegistry(VocabularyRegistry):
    """Page labels: generated ids, unique names"""

    collection = PAGE_LABELS
    entry_label = "page label"

    def parse_items(self, items: List[Any]) -> List[PageLabel]:
        return [PageLabel.from_dict(item) for item in items if isinstance(item, dict)]

    def serialize_entries(self, entries: List[PageLabel]) -> List[Dict[str, Any]]:
        return [label.to_dict() for label in entries]

    def _find(self, labels: List[PageLabel], label_id: str) -> PageLabel:
        label = next((existing for existing in labels if existing.id == label_id), None)
        if label is None:
            raise self._not_found(label_id)
        return label

    async def add(self, entry: Union[str, Dict[str, Any]]) -> PageLabel:
        raw_name = entry.get("name") if isinstance(entry, dict) else entry
        label = PageLabel(id=PageLabel.generate_id(), name=normalize_text(raw_name, "name"))

        def append(labels: List[PageLabel]) -> PageLabel:
            if any(existing.name == label.name for existing in labels):
                raise self._duplicate(label.name)
            labels.append(label)
            return label

        await self._modify(append)
        logger.info(f"Added page label {label.id}: {label.name}")
        return label

    async def remove(self, key: str) -> PageLabel:
        label_id = normalize_text(key, "id")

        def drop(labels: List[PageLabel]) -> PageLabel:
            label = self._find(labels, label_id)
            labels.remove(label)
            return label

        label = await self._modify(drop)
        logger.info(f"Removed page label {label_id}")
        return label

    async def rename(self, key: str, name: str) -> PageLabel:
        label_id = normalize_text(key, "id")
        new_name = normalize_text(name, "name")

        def apply(labels: List[PageLabel]) -> PageLabel:
            label = self._find(labels, label_id)
            if any(existing.name == new_name and existing is not label for existing in labels):
                raise self._duplicate(new_name)
            label.name = new_name
            return label

        return await self._modify(apply)


class VocabularyService:
    """
    The five registries over one store.

    Routes address registries by the slugs in ``REGISTRY_SLUGS``.
    """

    REGISTRY_SLUGS = {
        "dimensions": "dimensions",
        "event-categories": "event_categories",
        "event-actions": "event_action_names",
        "event-names": "event_names",
        "page-labels": "page_labels",
    }

    def __init__(self, store: AnnotationStore):
        self.store = store
        self.dimensions = DimensionRegistry(store)
        self.event_categories = StringRegistry(store, EVENT_CATEGORIES, "event category")
        self.event_action_names = StringRegistry(store, EVENT_ACTION_NAMES, "event action")
        self.event_names = StringRegistry(store, EVENT_NAMES, "event name")
        self.page_labels = LabelRegistry(store)

    def registry(self, slug: str) -> VocabularyRegistry:
        attribute = self.REGISTRY_SLUGS.get(slug)
        if attribute is None:
            raise EntryNotFoundError(f"Unknown vocabulary: {slug}", resource_type="vocabulary", resource_id=slug)
        return getattr(self, attribute)

    async def options(self) -> Dict[str, Any]:
        """All five lists from a single read, shaped for event-form drop-downs"""
        registries = {
            "dimensions": self.dimensions,
            "eventCategories": self.event_categories,
            "eventActionNames": self.event_action_names,
            "eventNames": self.event_names,
            "pageLabels": self.page_labels,
        }
        collections = await self.store.read_collections(*(r.collection for r in registries.values()))

        options = {}
        for key, registry in registries.items():
            entries = registry.parse_items(collections[registry.collection])
            options[key] = [e.to_dict() if hasattr(e, "to_dict") else e for e in entries]
        return options
