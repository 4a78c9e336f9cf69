"""Tests for the create pipeline (non-eager paths)."""

from unittest.mock import AsyncMock

import pytest

from recordstore import (
    DataStore,
    HookStage,
    IllegalArgumentError,
    MemoryAdapter,
    NonexistentResourceError,
    Options,
    ResourceDefinition,
    ResourceHooks,
)
from recordstore.pipeline.create import PRE_BACKEND_STAGES


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def adapter():
    return MemoryAdapter()


@pytest.fixture
def store(adapter):
    store = DataStore()
    store.register_adapter("memory", adapter)
    store.define_resource(ResourceDefinition(name="document", default_adapter="memory"))
    return store


@pytest.fixture
def events(store):
    """Collect every event emitted by the store as (name, payload) pairs."""
    collected = []
    for event in ("beforeCreate", "afterCreate", "beforeInject", "afterInject"):
        store.emitter.on("*", event, lambda r, e, p: collected.append((e, p)))
    return collected


class Document(dict):
    pass


# =============================================================================
# End to end
# =============================================================================


class TestCreateEndToEnd:
    @pytest.mark.asyncio
    async def test_resolves_with_generated_id(self, store):
        document = await store.create("document", {"author": "John Anderson"})
        assert document["author"] == "John Anderson"
        assert document["id"] == "DOC-00001"

    @pytest.mark.asyncio
    async def test_created_record_is_the_stored_record(self, store):
        document = await store.create("document", {"author": "John Anderson"})
        stored = store.get("document", document["id"])
        assert stored is document
        assert stored == {"id": "DOC-00001", "author": "John Anderson"}

    @pytest.mark.asyncio
    async def test_adapter_persisted_record(self, store, adapter):
        document = await store.create("document", {"author": "John Anderson"})
        definition = store.definition_for("document")
        assert adapter.get(definition, document["id"]) == document

    @pytest.mark.asyncio
    async def test_commit_metadata(self, store):
        document = await store.create("document", {"author": "John Anderson"})
        id = document["id"]

        assert store.previous("document", id) == document
        assert store.previous("document", id) is not document
        assert store.last_saved("document", id) is not None
        assert store.completed_query("document", id) is not None
        assert store.is_modified("document", id) is False

    @pytest.mark.asyncio
    async def test_previous_attributes_are_deep_copied(self, store):
        document = await store.create("document", {"tags": ["a"]})
        document["tags"].append("b")
        assert store.previous("document", document["id"]) == {
            "id": document["id"],
            "tags": ["a"],
        }

    @pytest.mark.asyncio
    async def test_records_are_added_to_collection(self, store):
        first = await store.create("document", {"author": "A"})
        second = await store.create("document", {"author": "B"})
        assert store.get_all("document") == [first, second]

    @pytest.mark.asyncio
    async def test_input_attrs_are_not_stored(self, store):
        attrs = {"author": "John Anderson"}
        document = await store.create("document", attrs)
        assert document is not attrs
        assert "id" not in attrs

    @pytest.mark.parametrize("upsert", [True, False])
    @pytest.mark.asyncio
    async def test_empty_string_id_gets_generated_id(self, store, upsert):
        document = await store.create("document", {"id": "", "author": "A"}, {"upsert": upsert})

        assert document["id"] == "DOC-00001"
        assert store.get("document", "DOC-00001") is document
        assert store.get("document", "") is None

    @pytest.mark.asyncio
    async def test_record_class_wraps_stored_record(self, adapter):
        store = DataStore()
        store.register_adapter("memory", adapter)
        store.define_resource(
            ResourceDefinition(name="document", default_adapter="memory", record_class=Document)
        )
        document = await store.create("document", {"author": "A"})
        assert isinstance(document, Document)

    @pytest.mark.asyncio
    async def test_use_class_false_stores_plain_dict(self, adapter):
        store = DataStore()
        store.register_adapter("memory", adapter)
        store.define_resource(
            ResourceDefinition(name="document", default_adapter="memory", record_class=Document)
        )
        document = await store.create("document", {"author": "A"}, {"use_class": False})
        assert type(document) is dict


# =============================================================================
# Preconditions
# =============================================================================


class TestPreconditions:
    def test_unknown_resource_raises_synchronously(self, store):
        with pytest.raises(NonexistentResourceError, match=r"DS.create\(nope, attrs\[, options\]\): nope"):
            store.create("nope", {})

    @pytest.mark.parametrize("attrs", [None, "author", ["a"], 5])
    def test_non_dict_attrs_raise_synchronously(self, store, attrs):
        with pytest.raises(IllegalArgumentError, match="attrs: Must be an object!"):
            store.create("document", attrs)

    def test_unknown_option_raises_synchronously(self, store):
        with pytest.raises(IllegalArgumentError, match="eagerly"):
            store.create("document", {}, {"eagerly": True})

    @pytest.mark.asyncio
    async def test_unknown_adapter_fails_the_call(self, store):
        with pytest.raises(IllegalArgumentError, match="Adapter 'http'"):
            await store.create("document", {"author": "A"}, {"adapter": "http"})
        assert store.get_all("document") == []


# =============================================================================
# Hooks
# =============================================================================


class TestCreateHooks:
    def test_pre_backend_stages(self):
        assert PRE_BACKEND_STAGES == (
            HookStage.BEFORE_VALIDATE,
            HookStage.VALIDATE,
            HookStage.AFTER_VALIDATE,
            HookStage.BEFORE_CREATE,
        )

    @pytest.mark.asyncio
    async def test_stages_run_in_order(self, adapter):
        calls = []

        def recorder(stage):
            def fn(resource_name, attrs):
                calls.append((stage, resource_name))
            return fn

        store = DataStore()
        store.register_adapter("memory", adapter)
        store.define_resource(ResourceDefinition(
            name="document",
            default_adapter="memory",
            hooks=ResourceHooks(
                before_validate=recorder("beforeValidate"),
                validate=recorder("validate"),
                after_validate=recorder("afterValidate"),
                before_create=recorder("beforeCreate"),
                after_create=recorder("afterCreate"),
            ),
        ))

        await store.create("document", {"author": "A"})
        assert calls == [
            ("beforeValidate", "document"),
            ("validate", "document"),
            ("afterValidate", "document"),
            ("beforeCreate", "document"),
            ("afterCreate", "document"),
        ]

    @pytest.mark.asyncio
    async def test_hooks_transform_attrs(self, store):
        async def add_slug(resource_name, attrs):
            return {**attrs, "slug": attrs["title"].lower()}

        document = await store.create(
            "document", {"title": "Hello"}, {"before_create": add_slug}
        )
        assert document["slug"] == "hello"

    @pytest.mark.asyncio
    async def test_after_create_sees_adapter_response(self, store):
        seen = {}

        def capture(resource_name, attrs):
            seen.update(attrs)

        await store.create("document", {"author": "A"}, {"after_create": capture})
        assert seen == {"id": "DOC-00001", "author": "A"}

    @pytest.mark.asyncio
    async def test_validate_failure_skips_adapter(self, store):
        adapter = AsyncMock()
        store.register_adapter("mock", adapter)
        error = ValueError("author is required")

        def validate(resource_name, attrs):
            raise error

        with pytest.raises(ValueError) as exc_info:
            await store.create("document", {}, {"validate": validate, "adapter": "mock"})

        assert exc_info.value is error
        adapter.create.assert_not_awaited()
        assert store.get_all("document") == []

    @pytest.mark.asyncio
    async def test_adapter_error_passes_through(self, store):
        adapter = AsyncMock()
        error = ConnectionError("backend down")
        adapter.create.side_effect = error
        store.register_adapter("mock", adapter)

        with pytest.raises(ConnectionError) as exc_info:
            await store.create("document", {"author": "A"}, {"adapter": "mock"})

        assert exc_info.value is error
        assert store.get_all("document") == []

    @pytest.mark.asyncio
    async def test_adapter_receives_serialized_attrs_and_options(self, store):
        adapter = AsyncMock()
        adapter.create.return_value = {"id": 7, "author": "A"}
        store.register_adapter("mock", adapter)

        await store.create(
            "document",
            {"author": "A"},
            Options(adapter="mock", params={"endpoint": "/docs"}),
        )

        definition, attrs, options = adapter.create.await_args.args
        assert definition is store.definition_for("document")
        assert attrs == {"author": "A"}
        assert options.params == {"endpoint": "/docs"}

    @pytest.mark.asyncio
    async def test_codec_overrides(self, store):
        adapter = AsyncMock()
        adapter.create.return_value = {"data": {"id": 1, "author": "A"}}
        store.register_adapter("mock", adapter)

        document = await store.create(
            "document",
            {"author": "A"},
            {
                "adapter": "mock",
                "serialize": lambda name, attrs: {"payload": attrs},
                "deserialize": lambda name, response: response["data"],
            },
        )

        assert adapter.create.await_args.args[1] == {"payload": {"author": "A"}}
        assert document == {"id": 1, "author": "A"}
        assert store.get("document", 1) is document


# =============================================================================
# cache_response
# =============================================================================


class TestCacheResponse:
    @pytest.mark.asyncio
    async def test_detached_record_matches_response(self, store):
        document = await store.create("document", {"author": "A"}, {"cache_response": False})
        assert document == {"id": "DOC-00001", "author": "A"}

    @pytest.mark.asyncio
    async def test_store_untouched(self, store):
        existing = store.inject("document", {"id": "X", "author": "B"})
        index = store.index_for("document")
        before = (dict(index.index), list(index.collection), dict(index.meta))

        document = await store.create("document", {"author": "A"}, {"cache_response": False})

        assert store.get("document", document["id"]) is None
        assert (dict(index.index), list(index.collection), dict(index.meta)) == before
        assert store.get_all("document") == [existing]

    @pytest.mark.asyncio
    async def test_detached_record_uses_record_class(self, adapter):
        store = DataStore()
        store.register_adapter("memory", adapter)
        store.define_resource(
            ResourceDefinition(name="document", default_adapter="memory", record_class=Document)
        )
        document = await store.create("document", {"author": "A"}, {"cache_response": False})
        assert isinstance(document, Document)


# =============================================================================
# Notifications
# =============================================================================


class TestNotifications:
    @pytest.mark.asyncio
    async def test_event_order(self, store, events):
        await store.create("document", {"author": "A"})
        assert [name for name, _ in events] == [
            "beforeCreate",
            "afterCreate",
            "beforeInject",
            "afterInject",
        ]

    @pytest.mark.asyncio
    async def test_payloads_are_copies(self, store, events):
        document = await store.create("document", {"author": "A"})
        payloads = dict(events)

        assert payloads["beforeCreate"] == {"author": "A"}
        assert payloads["afterCreate"] == document
        assert payloads["afterCreate"] is not document

    @pytest.mark.asyncio
    async def test_notify_false_emits_nothing(self, store, events):
        await store.create("document", {"author": "A"}, {"notify": False})
        assert events == []

    @pytest.mark.asyncio
    async def test_resource_default_notify(self, adapter):
        store = DataStore()
        store.register_adapter("memory", adapter)
        store.define_resource(
            ResourceDefinition(name="document", default_adapter="memory", notify=False)
        )
        seen = []
        store.emitter.on("document", "beforeCreate", lambda *args: seen.append(args))

        await store.create("document", {"author": "A"})
        assert seen == []

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_fail_create(self, store, caplog):
        def explode(resource_name, event_name, payload):
            raise RuntimeError("listener bug")

        store.emitter.on("document", "afterCreate", explode)
        document = await store.create("document", {"author": "A"})

        assert store.get("document", document["id"]) is document
        assert "listener bug" in caplog.text
