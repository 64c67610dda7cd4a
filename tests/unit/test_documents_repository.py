from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import OperationFailure

from submission_store.config import DBConfig
from submission_store.db.database import DatabaseContext
from submission_store.db.repositories.documents import load_document, remove_document, save_document


@pytest.mark.asyncio
async def test_save_upserts_by_normalized_id(ctx):
    ctx.prefix = "acme."
    doc_id = ObjectId()
    collection = ctx.db["acme.project"]
    collection.find_one_and_update.return_value = {"_id": doc_id, "name": "demo"}

    saved = await save_document(ctx, "project", {"_id": str(doc_id), "name": "demo"})

    assert saved == {"_id": doc_id, "name": "demo"}
    collection.find_one_and_update.assert_awaited_once_with(
        {"_id": doc_id},
        {"$set": {"name": "demo"}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )


@pytest.mark.asyncio
async def test_save_without_id_generates_one(ctx):
    collection = ctx.db["project"]
    await save_document(ctx, "project", {"name": "demo"})
    query = collection.find_one_and_update.await_args.args[0]
    assert isinstance(query["_id"], ObjectId)


@pytest.mark.asyncio
async def test_save_error_returns_none(ctx, caplog):
    ctx.db["project"].find_one_and_update.side_effect = OperationFailure("boom")
    assert await save_document(ctx, "project", {"name": "demo"}) is None
    assert "Error saving document to project" in caplog.text


@pytest.mark.asyncio
async def test_load_first_match(ctx):
    collection = ctx.db["forms"]
    collection.find_one.return_value = {"_id": 1}
    assert await load_document(ctx, "forms") == {"_id": 1}
    collection.find_one.assert_awaited_once_with({})

    await load_document(ctx, "forms", {"path": "contact"})
    assert collection.find_one.await_args.args[0] == {"path": "contact"}


@pytest.mark.asyncio
async def test_remove_returns_deleted_count(ctx):
    collection = ctx.db["project"]
    collection.delete_one.return_value = MagicMock(deleted_count=1)
    assert await remove_document(ctx, "project") == 1

    collection.delete_one.side_effect = OperationFailure("boom")
    assert await remove_document(ctx, "project") is None


@pytest.mark.asyncio
async def test_not_connected_returns_none():
    context = DatabaseContext(DBConfig())
    assert await save_document(context, "project", {}) is None
    assert await load_document(context, "project") is None
    assert await remove_document(context, "project") is None
