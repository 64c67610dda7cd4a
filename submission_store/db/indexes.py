"""
Index maintenance for submission collections.

Every collection gets the baseline tenant/lifecycle indexes; forms can flag
individual fields with ``dbIndex`` to get an index on ``data.<path>``.
Index work is best effort: failures are logged and never reach the caller.
"""
from __future__ import annotations

import logging
from typing import Any, List, Optional

from pymongo import ASCENDING

from submission_store.db.schemas import FormScope

logger = logging.getLogger(__name__)

BASELINE_INDEX_FIELDS = ("project", "form", "deleted", "modified")
CREATED_FIELD = "created"


def data_path(path: str) -> str:
    return f"data.{path}"


def schema_index_paths(scope: Optional[FormScope]) -> List[str]:
    """Return the ``data.<path>`` keys for every component flagged ``dbIndex``."""
    if not scope or not scope.form or not scope.form.components:
        return []
    paths: List[str] = []

    def _collect(component, components, path):
        if component.get("dbIndex") and path:
            paths.append(data_path(path))

    scope.each_component(scope.form.components, _collect)
    return paths


class IndexManager:
    def __init__(self, ttl: Optional[int] = None):
        self.ttl = ttl

    async def setup(self, collection: Any, scope: Optional[FormScope] = None) -> None:
        """Ensure baseline indexes plus any schema-driven ones on `collection`."""
        if collection is None:
            return
        for field in BASELINE_INDEX_FIELDS:
            await self.add_index(collection, field)

        # The created field carries either the expiring index or a plain one, never both
        if self.ttl:
            try:
                logger.debug("db.addIndex() %s ttl=%s", CREATED_FIELD, self.ttl)
                await collection.create_index(
                    [(CREATED_FIELD, ASCENDING)],
                    background=True,
                    expireAfterSeconds=self.ttl,
                )
            except Exception as e:
                logger.error("Cannot add TTL index: %s", e)
        else:
            await self.add_index(collection, CREATED_FIELD)

        try:
            paths = schema_index_paths(scope)
        except Exception as e:
            logger.error("Cannot walk form schema for indexes: %s", e)
            paths = []
        for path in paths:
            await self.add_index(collection, path)

    async def add_index(self, collection: Any, path: str) -> None:
        try:
            logger.debug("db.addIndex() %s", path)
            await collection.create_index([(path, ASCENDING)], background=True)
        except Exception as e:
            logger.error("Cannot add index %s: %s", path, e)

    async def remove_index(self, collection: Any, path: str) -> None:
        try:
            logger.debug("db.removeIndex() %s", path)
            await collection.drop_index([(path, ASCENDING)])
        except Exception as e:
            logger.error("Cannot remove index %s: %s", path, e)
