from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from submission_store.config import DBConfig
from submission_store.db.database import DatabaseContext
from submission_store.db.schemas import FormDefinition, FormScope, ProjectRef


def make_collection(name: str = "submissions"):
    """Mock motor collection with awaitable driver methods and a chainable cursor."""
    collection = MagicMock(name=name)
    collection.name = name
    collection.create_index = AsyncMock(return_value="index_1")
    collection.drop_index = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock()
    collection.find_one = AsyncMock(return_value=None)
    collection.update_one = AsyncMock()
    collection.count_documents = AsyncMock(return_value=0)
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.delete_one = AsyncMock()

    cursor = MagicMock(name=f"{name}.cursor")
    cursor.limit.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])
    collection.find.return_value = cursor
    return collection


def make_db(collections: Optional[Dict[str, Any]] = None):
    collections = {} if collections is None else collections
    db = MagicMock(name="db")
    db.name = "appserver"
    db.create_collection = AsyncMock()
    db.__getitem__.side_effect = lambda name: collections.setdefault(name, make_collection(name))
    db.collections = collections
    return db


def make_scope(
    form_id: Any = None,
    project_id: Any = None,
    collection: Optional[str] = None,
    components: Optional[List[Dict[str, Any]]] = None,
) -> FormScope:
    form = FormDefinition.model_validate({
        "_id": form_id if form_id is not None else str(ObjectId()),
        "settings": {"collection": collection},
        "components": components or [],
    })
    project = ProjectRef.model_validate({"_id": project_id if project_id is not None else str(ObjectId())})
    return FormScope(form=form, project=project)


@pytest.fixture
def scope_factory():
    return make_scope


@pytest.fixture
def scope():
    return make_scope()


@pytest.fixture
def collection_factory():
    return make_collection


@pytest.fixture
def mock_db():
    return make_db()


@pytest.fixture
def ctx(mock_db):
    """DatabaseContext wired to a mocked database, as if connect() had succeeded."""
    context = DatabaseContext(DBConfig())
    context.db = mock_db
    context.default_collection = mock_db["submissions"]
    return context
