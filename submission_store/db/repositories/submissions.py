"""
Submission repository functions.

Implements scoped create/read/update/soft-delete, paged search and
form-driven index maintenance. Every store failure is caught here and
reported through `OperationResult`; nothing raises past this module.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from pymongo import ASCENDING, DESCENDING

from submission_store.db.database import DatabaseContext
from submission_store.db.identifiers import normalize_id
from submission_store.db.indexes import data_path
from submission_store.db.results import OperationResult
from submission_store.db.schemas import FormScope
from submission_store.db.scope_utils import apply_scope_filter

logger = logging.getLogger(__name__)

CREATE_FIELDS = (
    "data",
    "metadata",
    "modified",
    "created",
    "deleted",
    "form",
    "project",
    "owner",
    "access",
)
UPDATE_FIELDS = ("data", "metadata", "modified")

DEFAULT_LIMIT = 10
DEFAULT_SKIP = 0
DEFAULT_SORT: Dict[str, int] = {"created": DESCENDING}
SORT_ALIASES = {"asc": ASCENDING, "ascending": ASCENDING, "desc": DESCENDING, "descending": DESCENDING}
PAGING_KEYS = ("limit", "skip", "sort", "select")

NOT_CONNECTED = "store is not connected"

SortSpec = Union[None, str, Mapping[str, int], Sequence[Tuple[str, int]]]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def pick(record: Mapping[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """Return only the allow-listed top-level keys of `record`."""
    return {field: record[field] for field in fields if field in record}


def _sort_direction(value: Any) -> Optional[int]:
    if isinstance(value, str):
        alias = SORT_ALIASES.get(value.strip().lower())
        if alias is not None:
            return alias
    try:
        direction = int(value)
    except (TypeError, ValueError):
        return None
    return direction if direction in (ASCENDING, DESCENDING) else None


def parse_sort(sort: SortSpec) -> List[Tuple[str, int]]:
    """Normalize a sort spec into pymongo's list-of-pairs form.

    Accepts a mapping, a list of pairs, or a comma separated string where a
    leading ``-`` means descending (``"-created,data.name"``). Directions
    may be ``1``/``-1`` or ``"asc"``/``"desc"``; entries with any other
    direction are dropped, and an empty result means the default sort.
    """
    if not sort:
        return list(DEFAULT_SORT.items())
    keys: List[Tuple[str, int]] = []
    if isinstance(sort, str):
        for part in sort.split(","):
            part = part.strip()
            if not part:
                continue
            if part.startswith("-"):
                keys.append((part[1:], DESCENDING))
            else:
                keys.append((part, ASCENDING))
        return keys or list(DEFAULT_SORT.items())

    pairs = sort.items() if isinstance(sort, Mapping) else sort
    for pair in pairs:
        try:
            key, value = pair
        except (TypeError, ValueError):
            continue
        direction = _sort_direction(value)
        if isinstance(key, str) and key and direction is not None:
            keys.append((key, direction))
    return keys or list(DEFAULT_SORT.items())


def parse_select(select: Any) -> Dict[str, bool]:
    if not select:
        return {}
    if isinstance(select, Mapping):
        return {field: bool(flag) for field, flag in select.items()}
    if isinstance(select, (list, tuple, set)):
        fields = [str(field) for field in select]
    else:
        fields = str(select).split(",")
    return {field.strip(): True for field in fields if field.strip()}


def _as_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def split_index_query(query: Optional[Mapping[str, Any]]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Separate paging keys from the filter of a flat index query.

    Returns ``(filter, paging)`` where paging holds ``limit``, ``skip``,
    ``sort`` and ``projection``. Falsy limits fall back to the default.
    """
    query = dict(query or {})
    raw = {key: query.pop(key, None) for key in PAGING_KEYS}
    paging = {
        "limit": _as_int(raw["limit"], DEFAULT_LIMIT) or DEFAULT_LIMIT,
        "skip": _as_int(raw["skip"], DEFAULT_SKIP),
        "sort": parse_sort(raw["sort"]),
        "projection": parse_select(raw["select"]),
    }
    return query, paging


def _id_query(submission_id: Any) -> Dict[str, Any]:
    return {"_id": normalize_id(submission_id)}


async def create_submission(
    ctx: DatabaseContext,
    scope: FormScope,
    record: Mapping[str, Any],
    allow_fields: Iterable[str] = (),
) -> OperationResult:
    record = dict(record or {})
    now = _now()
    record["deleted"] = None
    record["created"] = now
    record["modified"] = now
    if scope is not None and scope.form_id:
        record["form"] = normalize_id(scope.form_id)
    if scope is not None and scope.project_id:
        record["project"] = normalize_id(scope.project_id)
    if record.get("owner"):
        record["owner"] = normalize_id(record["owner"])
    try:
        collection = await ctx.collections.resolve(scope)
        if collection is None:
            return OperationResult.failure(RuntimeError(NOT_CONNECTED))
        document = pick(record, list(CREATE_FIELDS) + list(allow_fields))
        logger.debug("db.create() %s", document)
        result = await collection.insert_one(document)
        if not result.inserted_id:
            return OperationResult.failure(RuntimeError("insert did not return an identifier"))
    except Exception as e:
        logger.error("Error creating submission: %s", e)
        return OperationResult.failure(e)
    return await get_submission(ctx, scope, result.inserted_id)


async def get_submission(ctx: DatabaseContext, scope: FormScope, submission_id: Any) -> OperationResult:
    if not submission_id:
        return OperationResult.reject("submission id is required")
    try:
        logger.debug("db.read() %s", submission_id)
        collection = await ctx.collections.resolve(scope)
        if collection is None:
            return OperationResult.failure(RuntimeError(NOT_CONNECTED))
        item = await collection.find_one(apply_scope_filter(scope, _id_query(submission_id)))
    except Exception as e:
        logger.error("Error reading submission %s: %s", submission_id, e)
        return OperationResult.failure(e)
    if item is None:
        return OperationResult.missing()
    return OperationResult.success(item)


async def update_submission(
    ctx: DatabaseContext,
    scope: FormScope,
    submission_id: Any,
    update: Optional[Mapping[str, Any]],
    allow_fields: Iterable[str] = (),
) -> OperationResult:
    if not submission_id or not update:
        return OperationResult.reject("submission id and update are required")
    patch = dict(update)
    patch["modified"] = _now()
    try:
        logger.debug("db.update() %s %s", submission_id, patch)
        collection = await ctx.collections.resolve(scope)
        if collection is None:
            return OperationResult.failure(RuntimeError(NOT_CONNECTED))
        result = await collection.update_one(
            apply_scope_filter(scope, _id_query(submission_id)),
            {"$set": pick(patch, list(UPDATE_FIELDS) + list(allow_fields))},
        )
    except Exception as e:
        logger.error("Error updating submission %s: %s", submission_id, e)
        return OperationResult.failure(e)
    if result.matched_count == 0:
        return OperationResult.missing()
    if result.modified_count == 0:
        return OperationResult.no_change()
    return await get_submission(ctx, scope, submission_id)


async def delete_submission(ctx: DatabaseContext, scope: FormScope, submission_id: Any) -> OperationResult:
    """Soft delete: stamp ``deleted`` so scoped queries stop matching the record."""
    if not submission_id:
        return OperationResult.reject("submission id is required")
    try:
        logger.debug("db.delete() %s", submission_id)
        collection = await ctx.collections.resolve(scope)
        if collection is None:
            return OperationResult.failure(RuntimeError(NOT_CONNECTED))
        result = await collection.update_one(
            apply_scope_filter(scope, _id_query(submission_id)),
            {"$set": {"deleted": _now()}},
        )
    except Exception as e:
        logger.error("Error deleting submission %s: %s", submission_id, e)
        return OperationResult.failure(e)
    if result.modified_count > 0:
        return OperationResult.success(True)
    if result.matched_count == 0:
        return OperationResult.missing()
    return OperationResult.no_change()


async def find_submissions(
    ctx: DatabaseContext,
    scope: FormScope,
    query: Optional[Dict[str, Any]] = None,
    limit: int = DEFAULT_LIMIT,
    skip: int = DEFAULT_SKIP,
    sort: SortSpec = None,
    projection: Optional[Mapping[str, Any]] = None,
) -> OperationResult:
    try:
        logger.debug("db.find() %s", query)
        collection = await ctx.collections.resolve(scope)
        if collection is None:
            return OperationResult.failure(RuntimeError(NOT_CONNECTED))
        cursor = collection.find(apply_scope_filter(scope, query), dict(projection) if projection else None)
        cursor = cursor.limit(limit).skip(skip).sort(parse_sort(sort))
        items = await cursor.to_list(length=None)
    except Exception as e:
        logger.error("Error finding submissions: %s", e)
        return OperationResult.failure(e)
    return OperationResult.success(items)


async def find_one_submission(
    ctx: DatabaseContext,
    scope: FormScope,
    query: Optional[Dict[str, Any]] = None,
) -> OperationResult:
    try:
        logger.debug("db.findOne() %s", query)
        collection = await ctx.collections.resolve(scope)
        if collection is None:
            return OperationResult.failure(RuntimeError(NOT_CONNECTED))
        item = await collection.find_one(apply_scope_filter(scope, query))
    except Exception as e:
        logger.error("Error finding submission: %s", e)
        return OperationResult.failure(e)
    if item is None:
        return OperationResult.missing()
    return OperationResult.success(item)


async def count_submissions(
    ctx: DatabaseContext,
    scope: FormScope,
    query: Optional[Dict[str, Any]] = None,
) -> OperationResult:
    try:
        logger.debug("db.count() %s", query)
        collection = await ctx.collections.resolve(scope)
        if collection is None:
            return OperationResult.failure(RuntimeError(NOT_CONNECTED))
        count = await collection.count_documents(apply_scope_filter(scope, query))
    except Exception as e:
        logger.error("Error counting submissions: %s", e)
        return OperationResult.failure(e)
    return OperationResult.success(count)


async def index_submissions(
    ctx: DatabaseContext,
    scope: FormScope,
    query: Optional[Mapping[str, Any]] = None,
) -> OperationResult:
    """List one page of submissions plus the total match count."""
    filters, paging = split_index_query(query)
    logger.debug("db.index() %s", filters)
    # find() mutates its filter while scoping, so count gets its own copy
    found = await find_submissions(
        ctx,
        scope,
        dict(filters),
        limit=paging["limit"],
        skip=paging["skip"],
        sort=paging["sort"],
        projection=paging["projection"],
    )
    if not found.ok:
        return found
    counted = await count_submissions(ctx, scope, dict(filters))
    if not counted.ok:
        return counted
    return OperationResult.success({
        "items": found.value,
        "limit": paging["limit"],
        "skip": paging["skip"],
        "count": counted.value,
    })


async def add_indexes(ctx: DatabaseContext, scope: FormScope, paths: Iterable[str]) -> OperationResult:
    collection = await ctx.collections.resolve(scope)
    if collection is None:
        return OperationResult.failure(RuntimeError(NOT_CONNECTED))
    for path in paths:
        await ctx.indexes.add_index(collection, data_path(path))
    return OperationResult.success()


async def remove_indexes(ctx: DatabaseContext, scope: FormScope, paths: Iterable[str]) -> OperationResult:
    collection = await ctx.collections.resolve(scope)
    if collection is None:
        return OperationResult.failure(RuntimeError(NOT_CONNECTED))
    for path in paths:
        await ctx.indexes.remove_index(collection, data_path(path))
    return OperationResult.success()
