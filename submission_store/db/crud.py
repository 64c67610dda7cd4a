"""
Record store facade.

Public CRUD/query surface used by action handlers and the HTTP layer.
Delegates to `repositories.submissions` and folds every non-success outcome
into a benign default (None, [], 0, False), so callers cannot tell an absent
record from a store failure. Callers that need the distinction use the
repository functions directly.
"""
from typing import Any, Dict, Iterable, List, Mapping, Optional

from submission_store.db.database import DatabaseContext
from submission_store.db.repositories import submissions as repo_submissions
from submission_store.db.schemas import FormScope


class RecordStore:
    def __init__(self, context: DatabaseContext):
        self.context = context

    async def create(
        self,
        scope: FormScope,
        record: Mapping[str, Any],
        allow_fields: Iterable[str] = (),
    ) -> Optional[Dict[str, Any]]:
        result = await repo_submissions.create_submission(self.context, scope, record, allow_fields)
        return result.unwrap_or(None)

    async def read(self, scope: FormScope, submission_id: Any) -> Optional[Dict[str, Any]]:
        result = await repo_submissions.get_submission(self.context, scope, submission_id)
        return result.unwrap_or(None)

    async def update(
        self,
        scope: FormScope,
        submission_id: Any,
        update: Optional[Mapping[str, Any]],
        allow_fields: Iterable[str] = (),
    ) -> Optional[Dict[str, Any]]:
        # Unchanged and missing records both come back as None
        result = await repo_submissions.update_submission(
            self.context, scope, submission_id, update, allow_fields
        )
        return result.unwrap_or(None)

    async def delete(self, scope: FormScope, submission_id: Any) -> bool:
        result = await repo_submissions.delete_submission(self.context, scope, submission_id)
        return bool(result.unwrap_or(False))

    async def find(
        self,
        scope: FormScope,
        query: Optional[Dict[str, Any]] = None,
        limit: int = repo_submissions.DEFAULT_LIMIT,
        skip: int = repo_submissions.DEFAULT_SKIP,
        sort: repo_submissions.SortSpec = None,
        projection: Optional[Mapping[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        result = await repo_submissions.find_submissions(
            self.context, scope, query, limit=limit, skip=skip, sort=sort, projection=projection
        )
        return result.unwrap_or([])

    async def find_one(self, scope: FormScope, query: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        result = await repo_submissions.find_one_submission(self.context, scope, query)
        return result.unwrap_or(None)

    async def count(self, scope: FormScope, query: Optional[Dict[str, Any]] = None) -> int:
        result = await repo_submissions.count_submissions(self.context, scope, query)
        return result.unwrap_or(0)

    async def index(self, scope: FormScope, query: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Return ``{items, limit, skip, count}`` for a flat query mapping."""
        filters, paging = repo_submissions.split_index_query(query)
        items = await self.find(
            scope,
            dict(filters),
            limit=paging["limit"],
            skip=paging["skip"],
            sort=paging["sort"],
            projection=paging["projection"],
        )
        count = await self.count(scope, dict(filters))
        return {"items": items, "limit": paging["limit"], "skip": paging["skip"], "count": count}

    async def add_indexes(self, scope: FormScope, paths: Iterable[str]) -> None:
        await repo_submissions.add_indexes(self.context, scope, paths)

    async def remove_indexes(self, scope: FormScope, paths: Iterable[str]) -> None:
        await repo_submissions.remove_indexes(self.context, scope, paths)
