import pytest

from annotator_app.domains.annotation.models.annotation_models import EventType, ScreenshotStatus
from annotator_app.domains.annotation.services.vocabulary_service import VocabularyService
from annotator_app.shared.exceptions import (
    DuplicateEntryError, EventNotFoundError, InvalidInputError, ModuleKeyNotFoundError,
    ScreenshotNotFoundError, ValidationError
)
from tests.helpers import make_event


# Modules

async def test_create_module_derives_key(store):
    module = await store.create_module("  Home Page ")
    assert module.name == "Home Page"
    assert module.key == "home-page"
    assert [m.key for m in await store.get_modules()] == ["home-page"]


async def test_module_keys_collide_case_insensitively(store):
    await store.create_module("Home Page")
    with pytest.raises(DuplicateEntryError) as excinfo:
        await store.create_module("home   page")
    assert excinfo.value.context["field"] == "key"
    assert len(await store.get_modules()) == 1


async def test_rename_keeps_key(store):
    await store.create_module("Home Page")
    renamed = await store.rename_module("home-page", "Landing")
    assert renamed.name == "Landing"
    assert renamed.key == "home-page"
    assert (await store.get_module("home-page")).name == "Landing"


async def test_unknown_module_key(store):
    with pytest.raises(ModuleKeyNotFoundError) as excinfo:
        await store.get_module("missing")
    assert excinfo.value.status_code == 404
    with pytest.raises(ModuleKeyNotFoundError):
        await store.delete_module("missing")


async def test_put_modules_validates_before_writing(store, checkout):
    duplicated = [m.to_dict() for m in await store.get_modules()] + [{"name": "checkout"}]
    with pytest.raises(DuplicateEntryError):
        await store.put_modules(duplicated)
    assert [m.key for m in await store.get_modules()] == ["checkout"]


async def test_put_modules_rejects_shared_screenshot_ids(store):
    modules = [
        {"name": "One", "screenshots": [{"id": "s1", "name": "A"}]},
        {"name": "Two", "screenshots": [{"id": "s1", "name": "B"}]},
    ]
    with pytest.raises(DuplicateEntryError):
        await store.put_modules(modules)
    assert await store.get_modules() == []


@pytest.mark.parametrize("modules", [
    [{"name": "One", "screenshots": ["oops"]}],
    [{"name": "One", "screenshots": "oops"}],
    [{"name": "One", "screenshots": [{"name": "A", "events": ["e"]}]}],
    [{"name": "One", "screenshots": [{"name": "A", "events": "e"}]}],
])
async def test_put_modules_rejects_malformed_nested_entries(store, checkout, modules):
    with pytest.raises(InvalidInputError):
        await store.put_modules(modules)
    assert [m.key for m in await store.get_modules()] == ["checkout"]


async def test_put_modules_replaces_everything(store, checkout):
    saved = await store.put_modules([{"name": "Search"}, {"name": "Cart", "key": "cart"}])
    assert [m.key for m in saved] == ["search", "cart"]
    assert [m.key for m in await store.get_modules()] == ["search", "cart"]


async def test_delete_module_removes_its_screenshots(store, checkout):
    result = await store.delete_module("checkout")
    assert result.removed.key == "checkout"
    assert await store.get_modules() == []
    assert await store.list_events(checkout.screenshots[0].id) == []


# Screenshots

async def test_create_screenshot_appends_in_order(store, checkout):
    assert [s.name for s in checkout.screenshots] == ["A", "B", "C"]
    assert all(s.page_name == "checkout" for s in checkout.screenshots)
    assert all(s.status is ScreenshotStatus.TODO for s in checkout.screenshots)


async def test_create_screenshot_on_unknown_module(store):
    with pytest.raises(ModuleKeyNotFoundError):
        await store.create_screenshot("nowhere", {"name": "A"})


async def test_new_screenshots_start_without_events(store, checkout):
    screenshot = await store.create_screenshot("checkout", {
        "name": "D",
        "events": [make_event("x")]
    })
    assert screenshot.events == []


async def test_update_screenshot_fields(store, checkout):
    label = await VocabularyService(store).page_labels.add("Reviewed")
    target = checkout.screenshots[1]

    updated = await store.update_screenshot(target.id, {
        "name": " B2 ", "status": "IN_PROGRESS", "labelId": label.id
    })
    assert updated.name == "B2"
    assert updated.status is ScreenshotStatus.IN_PROGRESS
    assert updated.label_id == label.id
    assert updated.updated_at >= target.updated_at

    stored = await store.get_screenshot(target.id)
    assert stored.name == "B2"
    assert stored.label_id == label.id


async def test_update_screenshot_rejects_unknown_label_and_fields(store, checkout):
    target = checkout.screenshots[0].id
    with pytest.raises(ValidationError):
        await store.update_screenshot(target, {"labelId": "label_missing"})
    with pytest.raises(InvalidInputError):
        await store.update_screenshot(target, {"events": []})
    with pytest.raises(InvalidInputError):
        await store.update_screenshot(target, {"status": "ARCHIVED"})
    with pytest.raises(ScreenshotNotFoundError):
        await store.update_screenshot("missing", {"name": "x"})


async def test_reorder_is_persisted(store, checkout):
    a, b, c = (s.id for s in checkout.screenshots)
    await store.reorder_screenshots("checkout", [b, a, c])
    assert [s.name for s in (await store.get_module("checkout")).screenshots] == ["B", "A", "C"]


async def test_reorder_requires_a_permutation(store, checkout):
    a, b, c = (s.id for s in checkout.screenshots)
    for ids in ([a, b], [a, b, c, c], [a, b, "other"]):
        with pytest.raises(ValidationError):
            await store.reorder_screenshots("checkout", ids)
    assert [s.name for s in (await store.get_module("checkout")).screenshots] == ["A", "B", "C"]


async def test_delete_screenshot_cascades_to_events(store, checkout):
    target = checkout.screenshots[0]
    await store.create_event(make_event(target.id))
    await store.create_event(make_event(target.id, event_type="trackevent"))

    result = await store.delete_screenshot(target.id)
    assert result.removed.id == target.id
    assert len(result.removed.events) == 2
    assert await store.list_events(target.id) == []
    assert [s.name for s in (await store.get_module("checkout")).screenshots] == ["B", "C"]

    with pytest.raises(ScreenshotNotFoundError):
        await store.get_screenshot(target.id)


async def test_list_screenshots_pairs_with_module(store, checkout):
    pairs = await store.list_screenshots()
    assert [(m.key, s.name) for m, s in pairs] == [("checkout", "A"), ("checkout", "B"), ("checkout", "C")]


# Events

async def test_create_and_list_events(store, checkout):
    target = checkout.screenshots[2].id
    event = await store.create_event(make_event(target, id="evt-1"))
    assert event.event_type is EventType.PAGE_VIEW
    assert event.updated_at is not None

    events = await store.list_events(target)
    assert [e.id for e in events] == ["evt-1"]
    assert events[0].coordinates.start_x == 10.0


async def test_list_events_of_unknown_screenshot_is_empty(store):
    assert await store.list_events("missing") == []


async def test_create_event_requires_existing_screenshot(store, checkout):
    with pytest.raises(ScreenshotNotFoundError):
        await store.create_event(make_event("missing"))


async def test_event_ids_are_unique(store, checkout):
    first, second = checkout.screenshots[0].id, checkout.screenshots[1].id
    await store.create_event(make_event(first, id="evt-1"))
    with pytest.raises(DuplicateEntryError):
        await store.create_event(make_event(second, id="evt-1"))


async def test_event_dimensions_must_exist(store, checkout):
    target = checkout.screenshots[0].id
    with pytest.raises(ValidationError):
        await store.create_event(make_event(target, dimensions=["1"]))

    await VocabularyService(store).dimensions.add({"id": "1", "name": "Browser"})
    event = await store.create_event(make_event(target, dimensions=["1"]))
    assert event.dimensions == ["1"]


async def test_update_event_replaces_in_place(store, checkout):
    target = checkout.screenshots[0].id
    await store.create_event(make_event(target, id="e1"))
    await store.create_event(make_event(target, id="e2"))

    await store.update_event(make_event(target, id="e1", event_type="outlink", name="partner_link"))
    events = await store.list_events(target)
    assert [e.id for e in events] == ["e1", "e2"]
    assert events[0].event_type is EventType.OUTLINK
    assert events[0].name == "partner_link"


async def test_update_event_moves_between_screenshots(store, checkout):
    source, destination = checkout.screenshots[0].id, checkout.screenshots[2].id
    await store.create_event(make_event(source, id="e1"))

    moved = await store.update_event(make_event(destination, id="e1"))
    assert moved.screenshot_id == destination
    assert await store.list_events(source) == []
    assert [e.id for e in await store.list_events(destination)] == ["e1"]


async def test_update_or_delete_unknown_event(store, checkout):
    target = checkout.screenshots[0].id
    with pytest.raises(EventNotFoundError):
        await store.update_event(make_event(target, id="ghost"))
    with pytest.raises(InvalidInputError):
        await store.update_event(make_event(target))
    with pytest.raises(EventNotFoundError):
        await store.delete_event("ghost")


async def test_delete_event(store, checkout):
    target = checkout.screenshots[1].id
    await store.create_event(make_event(target, id="e1"))
    removed = await store.delete_event("e1")
    assert removed.id == "e1"
    assert await store.list_events(target) == []


async def test_storage_operations_are_measured(store, metrics, checkout):
    storage = metrics.get_domain_metrics("storage")
    assert storage["request_count"] > 0
    assert storage["error_count"] == 0
    assert storage["operations"]["create_module"] == 2
