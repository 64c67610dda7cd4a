"""
Generic document repository functions.

Unscoped single-document helpers for project-level records (project and form
definitions, settings). Submissions must go through the scoped repository.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from bson import ObjectId
from pymongo import ReturnDocument

from submission_store.db.database import DatabaseContext
from submission_store.db.identifiers import normalize_id

logger = logging.getLogger(__name__)


async def save_document(ctx: DatabaseContext, name: str, item: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """Upsert `item` by its ``_id`` and return the stored document."""
    collection = ctx.collection(name)
    if collection is None:
        return None
    doc_id = normalize_id(item.get("_id"))
    if doc_id is None:
        doc_id = ObjectId()
    fields = {key: value for key, value in item.items() if key != "_id"}
    try:
        logger.debug("db.save() %s", name)
        return await collection.find_one_and_update(
            {"_id": doc_id},
            {"$set": fields},
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
    except Exception as e:
        logger.error("Error saving document to %s: %s", name, e)
    return None


async def load_document(
    ctx: DatabaseContext,
    name: str,
    query: Optional[Dict[str, Any]] = None,
) -> Optional[Dict[str, Any]]:
    collection = ctx.collection(name)
    if collection is None:
        return None
    try:
        logger.debug("db.load() %s", name)
        return await collection.find_one(query or {})
    except Exception as e:
        logger.error("Error loading document from %s: %s", name, e)
    return None


async def remove_document(
    ctx: DatabaseContext,
    name: str,
    query: Optional[Dict[str, Any]] = None,
) -> Optional[int]:
    """Physically delete one matching document; returns the deleted count."""
    collection = ctx.collection(name)
    if collection is None:
        return None
    try:
        logger.debug("db.remove() %s", name)
        result = await collection.delete_one(query or {})
    except Exception as e:
        logger.error("Error removing document from %s: %s", name, e)
        return None
    return result.deleted_count
