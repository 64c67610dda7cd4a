"""
Store connection lifecycle.

`DatabaseContext` owns the driver client, the default submissions
collection, the index manager and the collection resolver. It is built once
per process, connected at startup and closed at shutdown; every store
operation receives it explicitly.
"""
from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from motor.motor_asyncio import AsyncIOMotorClient

from submission_store.config import DBConfig
from submission_store.db.collections import CollectionResolver
from submission_store.db.indexes import IndexManager

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "submissions"
PROJECT_COLLECTION = "project"
FORM_COLLECTION = "forms"


class DatabaseContext:
    def __init__(self, config: Optional[DBConfig] = None):
        self.config = config or DBConfig()
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Any = None
        self.default_collection: Any = None
        self.prefix = ""
        self.indexes = IndexManager(ttl=self.config.ttl)
        self.collections = CollectionResolver(self, capacity=self.config.collection_cache_size)

    @property
    def connected(self) -> bool:
        return self.db is not None

    def collection_name(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def collection(self, name: str) -> Any:
        if self.db is None:
            return None
        return self.db[self.collection_name(name)]

    async def connect(self, prefix: Optional[str] = None) -> None:
        """Open the store connection and prime the default collections.

        Any failure here is fatal: it is logged and the process exits.
        """
        prefix = self.config.prefix if prefix is None else prefix
        self.prefix = f"{prefix}." if prefix else ""
        try:
            logger.debug("db.connect()")
            client = AsyncIOMotorClient(self.config.url, **self.config.client_options())
            await client.admin.command("ping")
            self.client = client
            self.db = client.get_default_database(self.config.database)
            if self.config.drop_on_connect:
                logger.info("Dropping database %s on connect", self.db.name)
                await client.drop_database(self.db.name)
            await self.indexes.add_index(self.collection(PROJECT_COLLECTION), "name")
            self.default_collection = self.collection(DEFAULT_COLLECTION)
            await self.indexes.setup(self.default_collection)
            logger.info("Connected to database %s", self.db.name)
        except Exception as e:
            logger.critical("Cannot connect to database: %s", e)
            sys.exit(1)

    async def close(self) -> None:
        if self.client is not None:
            self.client.close()
        self.client = None
        self.db = None
        self.default_collection = None
        self.collections.clear()
