"""
Annotation Domain - Entity Graph Store

Backend-independent CRUD over modules, screenshots and events. Concrete
stores only supply ``_load`` and ``_save``; every operation here performs one
read of the backing medium, computes the new state in memory and performs at
most one write.

There is no optimistic concurrency control: two writers racing on the same
document both succeed and the last write wins.
"""
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Any, Callable, Optional, List, Sequence, Tuple, Union

from annotator_app.domains.annotation.models.annotation_models import (
    Module, Screenshot, Event, ScreenshotStatus, utc_now
)
from annotator_app.infrastructure.assets.asset_store import AssetStore
from annotator_app.infrastructure.monitoring.metrics import MetricsCollector
from annotator_app.shared.exceptions import (
    DomainException, ValidationError, InvalidInputError, DuplicateEntryError,
    ModuleKeyNotFoundError, ScreenshotNotFoundError, EventNotFoundError,
    BackendIOError, PartialFailureError
)

logger = logging.getLogger(__name__)

MODULES = "modules"
DIMENSIONS = "dimensions"
EVENT_CATEGORIES = "eventCategories"
EVENT_ACTION_NAMES = "eventActionNames"
EVENT_NAMES = "eventNames"
PAGE_LABELS = "pageLabels"

ALL_COLLECTIONS = (MODULES, DIMENSIONS, EVENT_CATEGORIES, EVENT_ACTION_NAMES, EVENT_NAMES, PAGE_LABELS)

SCREENSHOT_UPDATABLE_FIELDS = {"name", "status", "labelId", "url", "pageName"}


@dataclass
class DeletionResult:
    """Outcome of a delete whose metadata write succeeded"""
    removed: Any
    warnings: List[PartialFailureError] = field(default_factory=list)

    @property
    def assets_deleted(self) -> bool:
        return not self.warnings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "removed": self.removed.to_dict(),
            "warnings": [warning.to_dict() for warning in self.warnings]
        }


class GraphIndex:
    """
    Id lookups over a loaded module list.

    Building the index also checks the graph's uniqueness invariants, so it
    doubles as validation for wholesale replacement.
    """

    def __init__(self, modules: Sequence[Module]):
        self.modules_by_key: Dict[str, Module] = {}
        self.screenshots: Dict[str, Tuple[Module, Screenshot]] = {}
        self.events: Dict[str, Tuple[Screenshot, Event]] = {}

        for module in modules:
            if module.key in self.modules_by_key:
                raise DuplicateEntryError(
                    f"Module key '{module.key}' is not unique", field="key", value=module.key
                )
            self.modules_by_key[module.key] = module

            for screenshot in module.screenshots:
                if screenshot.id in self.screenshots:
                    raise DuplicateEntryError(
                        f"Screenshot id '{screenshot.id}' is not unique", field="id", value=screenshot.id
                    )
                self.screenshots[screenshot.id] = (module, screenshot)

                for event in screenshot.events:
                    if event.id in self.events:
                        raise DuplicateEntryError(
                            f"Event id '{event.id}' is not unique", field="id", value=event.id
                        )
                    if event.screenshot_id != screenshot.id:
                        raise InvalidInputError(
                            f"Event '{event.id}' is embedded in screenshot '{screenshot.id}' "
                            f"but references '{event.screenshot_id}'",
                            field="screenshotId", value=event.screenshot_id
                        )
                    self.events[event.id] = (screenshot, event)

    def module(self, key: str) -> Module:
        module = self.modules_by_key.get(key)
        if module is None:
            raise ModuleKeyNotFoundError(f"Module not found: {key}", resource_id=key)
        return module

    def screenshot(self, screenshot_id: str) -> Tuple[Module, Screenshot]:
        found = self.screenshots.get(screenshot_id)
        if found is None:
            raise ScreenshotNotFoundError(f"Screenshot not found: {screenshot_id}", resource_id=screenshot_id)
        return found

    def event(self, event_id: str) -> Tuple[Screenshot, Event]:
        found = self.events.get(event_id)
        if found is None:
            raise EventNotFoundError(f"Event not found: {event_id}", resource_id=event_id)
        return found


class AnnotationStore(ABC):
    """
    Durable CRUD over the module/screenshot/event graph.

    Responsibilities:
    - Load and persist collections through the concrete backend
    - Enforce graph invariants before any write
    - Cascade screenshot deletes to embedded events and the image asset
    """

    backend_name = "abstract"

    def __init__(self, asset_store: Optional[AssetStore] = None, metrics: Optional[MetricsCollector] = None):
        self.asset_store = asset_store
        self.metrics = metrics

    @abstractmethod
    async def _load(self, *collections: str) -> Dict[str, Any]:
        """Read the named collections (a backend may return more)"""

    @abstractmethod
    async def _save(self, state: Dict[str, Any], *collections: str):
        """Persist the named collections of ``state``"""

    # Backend access

    def _record(self, operation: str, success: bool, start_time: float):
        if self.metrics is not None:
            self.metrics.record_domain_request(
                "storage", success, time.time() - start_time,
                context={"operation": operation, "backend": self.backend_name}
            )

    async def _read_state(self, operation: str, *collections: str) -> Dict[str, Any]:
        start_time = time.time()
        try:
            state = await self._load(*collections)
        except BackendIOError:
            self._record(operation, False, start_time)
            raise
        self._record(operation, True, start_time)
        return state

    async def _write_state(self, operation: str, state: Dict[str, Any], *collections: str):
        start_time = time.time()
        try:
            await self._save(state, *collections)
        except BackendIOError:
            self._record(operation, False, start_time)
            raise
        self._record(operation, True, start_time)

    @staticmethod
    def _collection(state: Dict[str, Any], name: str) -> List[Any]:
        items = state.get(name)
        return list(items) if isinstance(items, list) else []

    def _modules_from(self, state: Dict[str, Any]) -> List[Module]:
        try:
            return [Module.from_dict(m) for m in self._collection(state, MODULES)]
        except ValidationError as e:
            raise BackendIOError(
                "Stored modules document is malformed", backend=self.backend_name, operation="load", cause=e
            )

    @staticmethod
    def _store_modules(state: Dict[str, Any], modules: Sequence[Module]):
        state[MODULES] = [module.to_dict() for module in modules]

    async def _delete_asset(self, locator: str) -> Optional[PartialFailureError]:
        """Best-effort asset delete; metadata is authoritative, so failures only warn"""
        if self.asset_store is None or not locator:
            return None
        try:
            await self.asset_store.delete(locator)
        except DomainException as e:
            logger.warning(f"Metadata removed but asset deletion failed for {locator}: {e}")
            return PartialFailureError(
                f"Asset {locator} could not be deleted; metadata removal was kept",
                locator=locator, cause=e
            )
        return None

    # Generic collections (vocabulary registries)

    async def read_collection(self, name: str) -> List[Any]:
        state = await self._read_state(f"read_{name}", name)
        return self._collection(state, name)

    async def modify_collection(self, name: str, mutate: Callable[[List[Any]], Any]) -> Any:
        """
        Read one collection, let ``mutate`` edit the list in place, write it back.

        Anything ``mutate`` raises aborts the operation before the write.
        """
        state = await self._read_state(f"modify_{name}", name)
        items = self._collection(state, name)
        result = mutate(items)
        state[name] = items
        await self._write_state(f"modify_{name}", state, name)
        return result

    async def read_collections(self, *names: str) -> Dict[str, List[Any]]:
        state = await self._read_state("read_collections", *names)
        return {name: self._collection(state, name) for name in names}

    # Modules

    async def get_modules(self) -> List[Module]:
        state = await self._read_state("get_modules", MODULES)
        return self._modules_from(state)

    async def get_module(self, key: str) -> Module:
        return GraphIndex(await self.get_modules()).module(key)

    async def put_modules(self, modules: Sequence[Union[Module, Dict[str, Any]]]) -> List[Module]:
        """Replace the whole module list; validated completely before the single write"""
        parsed = [m if isinstance(m, Module) else Module.from_dict(m) for m in modules]
        GraphIndex(parsed)

        state = await self._read_state("put_modules", MODULES)
        self._store_modules(state, parsed)
        await self._write_state("put_modules", state, MODULES)

        logger.info(f"Replaced module list ({len(parsed)} modules)")
        return parsed

    async def create_module(self, name: str) -> Module:
        module = Module.create(name)

        state = await self._read_state("create_module", MODULES)
        modules = self._modules_from(state)
        if any(m.key == module.key for m in modules):
            raise DuplicateEntryError(
                f"Module with key '{module.key}' already exists", field="key", value=module.key
            )

        modules.append(module)
        self._store_modules(state, modules)
        await self._write_state("create_module", state, MODULES)

        logger.info(f"Created module '{module.name}' ({module.key})")
        return module

    async def rename_module(self, key: str, name: str) -> Module:
        """Change the display name; the key stays stable for existing URLs"""
        name = (name or "").strip()
        if not name:
            raise InvalidInputError("Module name is required", field="name")

        state = await self._read_state("rename_module", MODULES)
        modules = self._modules_from(state)
        module = GraphIndex(modules).module(key)
        module.name = name
        self._store_modules(state, modules)
        await self._write_state("rename_module", state, MODULES)

        logger.info(f"Renamed module {key} to '{name}'")
        return module

    async def delete_module(self, key: str) -> DeletionResult:
        state = await self._read_state("delete_module", MODULES)
        modules = self._modules_from(state)
        module = GraphIndex(modules).module(key)
        modules.remove(module)
        self._store_modules(state, modules)
        await self._write_state("delete_module", state, MODULES)

        logger.info(f"Deleted module {key} with {len(module.screenshots)} screenshots")
        result = DeletionResult(removed=module)
        for screenshot in module.screenshots:
            warning = await self._delete_asset(screenshot.url)
            if warning:
                result.warnings.append(warning)
        return result

    # Screenshots

    async def list_screenshots(self) -> List[Tuple[Module, Screenshot]]:
        """Every screenshot paired with its owning module, in module order"""
        return [(m, s) for m in await self.get_modules() for s in m.screenshots]

    async def get_screenshot(self, screenshot_id: str) -> Screenshot:
        _, screenshot = GraphIndex(await self.get_modules()).screenshot(screenshot_id)
        return screenshot

    def _check_label(self, state: Dict[str, Any], label_id: Optional[str]):
        if label_id is None:
            return
        known = {str(label.get("id")) for label in self._collection(state, PAGE_LABELS) if isinstance(label, dict)}
        if label_id not in known:
            raise ValidationError(f"Unknown page label: {label_id}", field="labelId", value=label_id)

    async def create_screenshot(self, module_key: str, screenshot_data: Dict[str, Any]) -> Screenshot:
        """Append a new screenshot to the addressed module's sequence"""
        data = dict(screenshot_data or {})
        data["events"] = []
        data.setdefault("pageName", module_key)
        if not str(data.get("name") or "").strip():
            raise InvalidInputError("Screenshot name is required", field="name")
        screenshot = Screenshot.from_dict(data)
        screenshot.name = screenshot.name.strip()

        state = await self._read_state("create_screenshot", MODULES, PAGE_LABELS)
        modules = self._modules_from(state)
        index = GraphIndex(modules)
        module = index.module(module_key)
        if screenshot.id in index.screenshots:
            raise DuplicateEntryError(
                f"Screenshot id '{screenshot.id}' already exists", field="id", value=screenshot.id
            )
        self._check_label(state, screenshot.label_id)

        module.screenshots.append(screenshot)
        self._store_modules(state, modules)
        await self._write_state("create_screenshot", state, MODULES)

        logger.info(f"Added screenshot '{screenshot.name}' to module {module_key}")
        return screenshot

    async def update_screenshot(self, screenshot_id: str, changes: Dict[str, Any]) -> Screenshot:
        """Update name, status, label, url or page name of one screenshot"""
        unknown = set(changes) - SCREENSHOT_UPDATABLE_FIELDS
        if unknown:
            raise InvalidInputError(
                f"Screenshot fields cannot be updated: {', '.join(sorted(unknown))}", field="fields"
            )
        if "name" in changes and not str(changes["name"] or "").strip():
            raise InvalidInputError("Screenshot name is required", field="name")
        status = ScreenshotStatus.parse(changes["status"]) if "status" in changes else None

        state = await self._read_state("update_screenshot", MODULES, PAGE_LABELS)
        modules = self._modules_from(state)
        _, screenshot = GraphIndex(modules).screenshot(screenshot_id)
        if "labelId" in changes:
            self._check_label(state, changes["labelId"])

        if "name" in changes:
            screenshot.name = str(changes["name"]).strip()
        if status is not None:
            screenshot.status = status
        if "labelId" in changes:
            screenshot.label_id = changes["labelId"]
        if "url" in changes:
            screenshot.url = str(changes["url"] or "")
        if "pageName" in changes:
            screenshot.page_name = str(changes["pageName"] or "")
        screenshot.touch()

        self._store_modules(state, modules)
        await self._write_state("update_screenshot", state, MODULES)
        return screenshot

    async def reorder_screenshots(self, module_key: str, screenshot_ids: Sequence[str]) -> Module:
        """Persist a new screenshot sequence; must be a permutation of the current one"""
        state = await self._read_state("reorder_screenshots", MODULES)
        modules = self._modules_from(state)
        module = GraphIndex(modules).module(module_key)

        ids = list(screenshot_ids)
        current = {s.id: s for s in module.screenshots}
        if len(ids) != len(set(ids)) or set(ids) != set(current):
            raise ValidationError(
                "Screenshot order must list every screenshot of the module exactly once",
                field="screenshotIds"
            )

        module.screenshots = [current[sid] for sid in ids]
        self._store_modules(state, modules)
        await self._write_state("reorder_screenshots", state, MODULES)

        logger.info(f"Reordered {len(ids)} screenshots in module {module_key}")
        return module

    async def delete_screenshot(self, screenshot_id: str) -> DeletionResult:
        """
        Remove a screenshot and its embedded events, then its image asset.

        The asset delete happens after the metadata write; if it fails the
        result carries a PartialFailureError warning and the metadata change
        stands.
        """
        state = await self._read_state("delete_screenshot", MODULES)
        modules = self._modules_from(state)
        module, screenshot = GraphIndex(modules).screenshot(screenshot_id)
        module.screenshots.remove(screenshot)
        self._store_modules(state, modules)
        await self._write_state("delete_screenshot", state, MODULES)

        logger.info(f"Deleted screenshot {screenshot_id} ({len(screenshot.events)} events) from {module.key}")
        result = DeletionResult(removed=screenshot)
        warning = await self._delete_asset(screenshot.url)
        if warning:
            result.warnings.append(warning)
        return result

    # Events

    @staticmethod
    def _coerce_event(event: Union[Event, Dict[str, Any]], require_id: bool = False) -> Event:
        if isinstance(event, Event):
            return event
        if require_id and not (isinstance(event, dict) and event.get("id")):
            raise InvalidInputError("Event id is required", field="id")
        return Event.from_dict(event)

    def _check_dimensions(self, state: Dict[str, Any], event: Event):
        known = {str(d.get("id")) for d in self._collection(state, DIMENSIONS) if isinstance(d, dict)}
        unknown = [d for d in event.dimensions if d not in known]
        if unknown:
            raise ValidationError(
                f"Unknown dimensions: {', '.join(unknown)}", field="dimensions", value=unknown
            )

    async def list_events(self, screenshot_id: str) -> List[Event]:
        """Events of one screenshot; an unknown screenshot has none"""
        index = GraphIndex(await self.get_modules())
        found = index.screenshots.get(screenshot_id)
        return list(found[1].events) if found else []

    async def create_event(self, event: Union[Event, Dict[str, Any]]) -> Event:
        event = self._coerce_event(event)

        state = await self._read_state("create_event", MODULES, DIMENSIONS)
        modules = self._modules_from(state)
        index = GraphIndex(modules)
        _, screenshot = index.screenshot(event.screenshot_id)
        if event.id in index.events:
            raise DuplicateEntryError(f"Event id '{event.id}' already exists", field="id", value=event.id)
        self._check_dimensions(state, event)

        event.updated_at = utc_now()
        screenshot.events.append(event)
        screenshot.touch()
        self._store_modules(state, modules)
        await self._write_state("create_event", state, MODULES)

        logger.info(f"Created {event.event_type.value} event {event.id} on screenshot {screenshot.id}")
        return event

    async def update_event(self, event: Union[Event, Dict[str, Any]]) -> Event:
        """Full-record replace by id; a changed screenshotId moves the event"""
        event = self._coerce_event(event, require_id=True)

        state = await self._read_state("update_event", MODULES, DIMENSIONS)
        modules = self._modules_from(state)
        index = GraphIndex(modules)
        old_screenshot, old_event = index.event(event.id)
        _, new_screenshot = index.screenshot(event.screenshot_id)
        self._check_dimensions(state, event)

        event.updated_at = utc_now()
        if new_screenshot is old_screenshot:
            position = old_screenshot.events.index(old_event)
            old_screenshot.events[position] = event
        else:
            old_screenshot.events.remove(old_event)
            new_screenshot.events.append(event)
            old_screenshot.touch()
        new_screenshot.touch()

        self._store_modules(state, modules)
        await self._write_state("update_event", state, MODULES)

        logger.info(f"Updated event {event.id}")
        return event

    async def delete_event(self, event_id: str) -> Event:
        state = await self._read_state("delete_event", MODULES)
        modules = self._modules_from(state)
        screenshot, event = GraphIndex(modules).event(event_id)
        screenshot.events.remove(event)
        screenshot.touch()
        self._store_modules(state, modules)
        await self._write_state("delete_event", state, MODULES)

        logger.info(f"Deleted event {event_id} from screenshot {screenshot.id}")
        return event
