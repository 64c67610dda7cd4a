"""
Per-form collection resolution.

Forms may route their submissions into a custom collection. Resolved handles
are kept in a small LRU cache keyed by the unprefixed collection name. With
the default capacity of one this is a most-recently-used slot: alternating
between forms with different custom collections re-creates and re-indexes
on every switch, so deployments that interleave many such forms should raise
``collection_cache_size``.
"""
from __future__ import annotations

import logging
from collections import OrderedDict
from typing import TYPE_CHECKING, Any, Optional

from pymongo.errors import CollectionInvalid

from submission_store.db.schemas import FormScope

if TYPE_CHECKING:
    from submission_store.db.database import DatabaseContext

logger = logging.getLogger(__name__)


class CollectionResolver:
    def __init__(self, context: "DatabaseContext", capacity: int = 1):
        self._context = context
        self._capacity = max(1, capacity)
        self._cache: "OrderedDict[str, Any]" = OrderedDict()

    @property
    def cached_names(self) -> list:
        return list(self._cache.keys())

    def clear(self) -> None:
        self._cache.clear()

    async def resolve(self, scope: Optional[FormScope]) -> Any:
        """Return the collection handle that holds `scope`'s submissions.

        Returns None only when the store is not connected.
        """
        db = self._context.db
        if db is None:
            return None
        name = scope.collection if scope else None
        if not name:
            return self._context.default_collection

        cached = self._cache.get(name)
        if cached is not None:
            self._cache.move_to_end(name)
            return cached

        full_name = self._context.collection_name(name)
        try:
            logger.debug("db.createCollection() %s", full_name)
            await db.create_collection(full_name)
        except CollectionInvalid:
            logger.debug("Collection %s already exists", full_name)
        except Exception as e:
            logger.error("Cannot create collection %s: %s", full_name, e)

        collection = db[full_name]
        await self._context.indexes.setup(collection, scope)

        self._cache[name] = collection
        while len(self._cache) > self._capacity:
            self._cache.popitem(last=False)
        return collection
