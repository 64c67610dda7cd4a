import os
import shutil
import subprocess
import uuid

import pytest
import pytest_asyncio

from submission_store.config import DBConfig
from submission_store.db.crud import RecordStore
from submission_store.db.database import DatabaseContext


def _require_docker():
    # Allow explicit skip to avoid failing when docker isn't accessible
    if os.getenv("SKIP_DOCKER_TESTS") == "1":
        pytest.skip("SKIP_DOCKER_TESTS=1")
    if not shutil.which("docker"):
        pytest.skip("Docker CLI is not available; skipping tests that require containers")
    try:
        proc = subprocess.run(["docker", "info"], capture_output=True, text=True, timeout=5)
        if proc.returncode != 0:
            pytest.skip("Docker daemon is not available; skipping tests that require containers")
    except Exception:
        pytest.skip("Docker daemon is not available; skipping tests that require containers")


# Session-wide MongoDB test container
@pytest.fixture(scope="session")
def mongo_url():
    _require_docker()
    from testcontainers.mongodb import MongoDbContainer

    container = MongoDbContainer(os.getenv("TEST_MONGO_IMAGE", "mongo:7"))
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Could not start MongoDB test container: {e}")
    try:
        yield container.get_connection_url()
    finally:
        container.stop()


@pytest_asyncio.fixture
async def context_factory(mongo_url):
    """Build connected contexts on a throwaway database; dropped after the test."""
    created = []
    database = f"store_{uuid.uuid4().hex[:10]}"

    async def _create(prefix: str = "it", **config):
        ctx = DatabaseContext(DBConfig(url=mongo_url, database=database, **config))
        await ctx.connect(prefix)
        created.append(ctx)
        return ctx

    yield _create

    for index, ctx in enumerate(created):
        if index == 0 and ctx.client is not None:
            await ctx.client.drop_database(ctx.db.name)
        await ctx.close()


@pytest_asyncio.fixture
async def context(context_factory):
    return await context_factory()


@pytest.fixture
def store(context):
    return RecordStore(context)
