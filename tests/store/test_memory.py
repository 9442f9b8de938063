"""Tests for the in-memory document store."""

import pytest

from trellis.errors import DocumentNotFound, InvalidPath, StoreError


@pytest.mark.asyncio
async def test_create_read(store):
    doc_id = await store.create("boards/b1/lists", {"title": "Todo", "order": 0})
    assert len(doc_id) == 20
    assert await store.read(f"boards/b1/lists/{doc_id}") == {"title": "Todo", "order": 0}


@pytest.mark.asyncio
async def test_read_missing(store):
    assert await store.read("boards/b1/lists/nope") is None


@pytest.mark.asyncio
async def test_read_returns_copy(store):
    await store.set("c/d", {"tags": ["a"]})
    fields = await store.read("c/d")
    fields["tags"].append("b")
    assert await store.read("c/d") == {"tags": ["a"]}


@pytest.mark.asyncio
async def test_update_merges(store):
    await store.set("c/d", {"title": "A", "order": 3})
    await store.update("c/d", {"order": 0})
    assert await store.read("c/d") == {"title": "A", "order": 0}


@pytest.mark.asyncio
async def test_update_missing_raises(store):
    with pytest.raises(DocumentNotFound):
        await store.update("c/nope", {"order": 0})


@pytest.mark.asyncio
async def test_delete_missing_is_noop(store):
    await store.delete("c/nope")
    assert store.commits == 1


@pytest.mark.asyncio
async def test_query_only_direct_children(store):
    await store.set("lists/A/cards/x", {"order": 0})
    await store.set("lists/A/cards/y", {"order": 1})
    await store.set("lists/B/cards/z", {"order": 0})
    docs = await store.query("lists/A/cards")
    assert sorted(d.id for d in docs) == ["x", "y"]
    assert await store.query("lists/A") == []


@pytest.mark.asyncio
async def test_bad_paths(store):
    with pytest.raises(InvalidPath):
        await store.set("nocollection", {})
    with pytest.raises(InvalidPath):
        store.batch().delete("trailing/")


# --- batches ---


@pytest.mark.asyncio
async def test_batch_applies_together(store):
    await store.set("c/a", {"order": 0})
    await store.set("c/b", {"order": 1})
    batch = store.batch()
    batch.update("c/a", {"order": 1}).update("c/b", {"order": 0}).delete("c/x")
    await batch.commit()
    assert (await store.read("c/a"))["order"] == 1
    assert (await store.read("c/b"))["order"] == 0


@pytest.mark.asyncio
async def test_batch_is_all_or_nothing(store):
    await store.set("c/a", {"order": 0})
    batch = store.batch()
    batch.update("c/a", {"order": 5})
    batch.update("c/missing", {"order": 1})
    with pytest.raises(DocumentNotFound):
        await batch.commit()
    assert (await store.read("c/a"))["order"] == 0


@pytest.mark.asyncio
async def test_batch_require_missing_rejects_everything(store):
    await store.set("c/a", {"order": 0})
    batch = store.batch().require("c/gone").delete("c/a").set("d/a", {"order": 0})
    with pytest.raises(DocumentNotFound):
        await batch.commit()
    assert store.paths() == ["c/a"]


@pytest.mark.asyncio
async def test_batch_require_present_is_not_reported_as_change(store):
    await store.set("c/a", {})
    await store.set("c/b", {})
    seen = []
    store.subscribe("c", seen.append)
    await store.batch().require("c/a").delete("c/b").commit()
    assert seen == [["c/b"]]
    assert await store.read("c/a") == {}


@pytest.mark.asyncio
async def test_batch_commit_twice(store):
    batch = store.batch().set("c/a", {})
    await batch.commit()
    with pytest.raises(StoreError):
        await batch.commit()


@pytest.mark.asyncio
async def test_fail_next(store):
    store.fail_next()
    with pytest.raises(StoreError):
        await store.set("c/a", {})
    await store.set("c/a", {})
    assert await store.read("c/a") == {}


@pytest.mark.asyncio
async def test_fail_on_predicate(store):
    store.fail_on(lambda ops: any(op.path == "c/b" for op in ops))
    await store.set("c/a", {})
    with pytest.raises(StoreError):
        await store.set("c/b", {})
    store.fail_on(None)
    await store.set("c/b", {})


# --- subscriptions ---


@pytest.mark.asyncio
async def test_subscribe_prefix(store):
    seen = []
    store.subscribe("lists/A/cards", seen.append)
    await store.set("lists/A/cards/x", {})
    await store.set("lists/B/cards/y", {})
    await store.set("lists/AB/cards/z", {})
    assert seen == [["lists/A/cards/x"]]


@pytest.mark.asyncio
async def test_subscribe_exact_document(store):
    seen = []
    store.subscribe("users/u/boards/b1", seen.append)
    await store.set("users/u/boards/b1", {"name": "x"})
    await store.delete("users/u/boards/b1")
    assert seen == [["users/u/boards/b1"], ["users/u/boards/b1"]]


@pytest.mark.asyncio
async def test_batch_notifies_once(store):
    seen = []
    store.subscribe("c", seen.append)
    await store.batch().set("c/a", {}).set("c/b", {}).commit()
    assert seen == [["c/a", "c/b"]]


@pytest.mark.asyncio
async def test_unsubscribe(store):
    seen = []
    unsubscribe = store.subscribe("c", seen.append)
    unsubscribe()
    unsubscribe()
    await store.set("c/a", {})
    assert seen == []
    assert store.subscription_count == 0


@pytest.mark.asyncio
async def test_failing_callback_does_not_break_others(store, caplog):
    seen = []

    def broken(paths):
        raise RuntimeError("boom")

    store.subscribe("c", broken)
    store.subscribe("c", seen.append)
    await store.set("c/a", {})
    assert seen == [["c/a"]]
    assert "boom" in caplog.text


@pytest.mark.asyncio
async def test_failed_commit_does_not_notify(store):
    seen = []
    store.subscribe("c", seen.append)
    store.fail_next()
    with pytest.raises(StoreError):
        await store.set("c/a", {})
    assert seen == []
