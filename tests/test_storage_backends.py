import json

import pytest

from annotator_app.domains.annotation.repositories.local_document_store import LocalDocumentStore
from annotator_app.domains.annotation.repositories.s3_document_store import S3DocumentStore
from annotator_app.domains.annotation.services.vocabulary_service import VocabularyService
from annotator_app.infrastructure.persistence.json_document import LocalJsonDocument
from annotator_app.infrastructure.persistence.s3_documents import S3DocumentSet
from annotator_app.shared.exceptions import BackendIOError
from tests.conftest import BUCKET


# Local JSON document

def test_missing_document_reads_as_empty_collections(tmp_path):
    document = LocalJsonDocument(tmp_path / "nope.json", ["modules", "pageLabels"])
    assert document.load() == {"modules": [], "pageLabels": []}


def test_save_replaces_atomically(tmp_path):
    path = tmp_path / "nested" / "doc.json"
    document = LocalJsonDocument(path, ["modules"])
    document.save({"modules": [{"name": "A"}]})

    assert json.loads(path.read_text()) == {"modules": [{"name": "A"}]}
    assert not path.with_suffix(".json.tmp").exists()


def test_corrupt_document_is_a_backend_error(tmp_path):
    path = tmp_path / "doc.json"
    path.write_text("{not json")
    with pytest.raises(BackendIOError) as excinfo:
        LocalJsonDocument(path).load()
    assert excinfo.value.context["backend"] == "local"


async def test_local_store_keeps_every_collection_in_one_document(local_store):
    await local_store.create_module("Checkout")
    await VocabularyService(local_store).event_categories.add("Search")

    document = json.loads(local_store.document.path.read_text())
    assert set(document) == {
        "modules", "dimensions", "eventCategories", "eventActionNames", "eventNames", "pageLabels"
    }
    assert document["modules"][0]["key"] == "checkout"
    assert document["eventCategories"] == ["Search"]


async def test_local_store_reads_legacy_documents(tmp_path):
    path = tmp_path / "legacy.json"
    path.write_text(json.dumps({
        "modules": [{
            "id": "m1",
            "name": "Home Page",
            "screenshotOrder": ["s2", "s1"],
            "screenshots": [
                {"id": "s1", "name": "First", "url": "/a.png", "events": []},
                {"id": "s2", "name": "Second", "url": "/b.png", "events": []}
            ]
        }],
        "eventCategories": [{"name": "Navigation"}, "Search"]
    }))
    store = LocalDocumentStore(path)

    module = await store.get_module("home-page")
    assert [s.id for s in module.screenshots] == ["s2", "s1"]
    assert await VocabularyService(store).event_categories.list_entries() == ["Navigation", "Search"]


async def test_malformed_modules_surface_as_backend_errors(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"modules": [{"id": "m1"}]}))
    with pytest.raises(BackendIOError):
        await LocalDocumentStore(path).get_modules()


async def test_failed_reads_are_measured(tmp_path, metrics):
    path = tmp_path / "doc.json"
    path.write_text("[]")
    store = LocalDocumentStore(path, metrics=metrics)
    with pytest.raises(BackendIOError):
        await store.get_modules()
    assert metrics.get_domain_metrics("storage")["error_count"] == 1


# S3 document set

async def test_s3_collections_use_separate_wrapped_objects(s3_store, s3_client):
    await s3_store.create_module("Checkout")
    vocabulary = VocabularyService(s3_store)
    await vocabulary.event_categories.add("Search")
    await vocabulary.event_action_names.add("submit")
    await vocabulary.event_names.add("search_submit")
    await vocabulary.dimensions.add({"id": "1", "name": "Browser"})
    label = await vocabulary.page_labels.add("Done")

    def stored(key):
        return json.loads(s3_client.body(key))

    assert stored("data/modules.json")["modules"][0]["key"] == "checkout"
    assert stored("data/event-categories.json") == {"eventCategory": ["Search"]}
    assert stored("data/event-actions.json") == {"eventAction": ["submit"]}
    assert stored("data/event-names.json") == {"eventNames": ["search_submit"]}
    assert stored("data/dimensions.json") == {"dimensions": [{"id": "1", "name": "Browser"}]}
    assert stored("data/page-labels.json") == {"pageLabels": [{"id": label.id, "name": "Done"}]}


async def test_s3_vocabulary_write_leaves_modules_object_alone(s3_store, s3_client):
    await s3_store.create_module("Checkout")
    before = s3_client.body("data/modules.json")
    await VocabularyService(s3_store).event_categories.add("Search")
    assert s3_client.body("data/modules.json") == before


async def test_s3_missing_objects_read_as_empty(s3_store):
    assert await s3_store.get_modules() == []
    assert await VocabularyService(s3_store).options() == {
        "dimensions": [], "eventCategories": [], "eventActionNames": [], "eventNames": [], "pageLabels": []
    }


async def test_s3_invalid_json_is_a_backend_error(s3_client):
    s3_client.put_object(Bucket=BUCKET, Key="data/modules.json", Body=b"<html>")
    store = S3DocumentStore(S3DocumentSet(s3_client, BUCKET))
    with pytest.raises(BackendIOError) as excinfo:
        await store.get_modules()
    assert excinfo.value.context["backend"] == "s3"


async def test_s3_write_failure_is_a_backend_error(s3_store, s3_client):
    s3_client.fail_puts = True
    with pytest.raises(BackendIOError):
        await s3_store.create_module("Checkout")
    s3_client.fail_puts = False
    assert await s3_store.get_modules() == []


def test_s3_document_keys_follow_prefix(s3_client):
    assert S3DocumentSet(s3_client, BUCKET).object_key("modules") == "data/modules.json"
    assert S3DocumentSet(s3_client, BUCKET, prefix="/annotator/data/").object_key("modules") == \
        "annotator/data/modules.json"
    assert S3DocumentSet(s3_client, BUCKET, prefix="").object_key("modules") == "modules.json"


def test_s3_bucket_is_required(s3_client):
    with pytest.raises(BackendIOError):
        S3DocumentSet(s3_client, "")
