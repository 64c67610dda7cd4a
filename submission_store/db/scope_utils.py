"""
Scope filtering utilities for tenant isolation.

Every submission query passes through `apply_scope_filter`, which pins it to
the active project and form and hides soft-deleted records. There is no
other path into the store, so this is where tenant isolation is enforced.
"""
from typing import Any, Dict, Optional

from submission_store.db.identifiers import normalize_id
from submission_store.db.schemas import FormScope

ID_FIELDS = ("_id", "owner")
LOGICAL_OPERATORS = ("$or", "$and")


def apply_scope_filter(
    scope: Optional[FormScope],
    query: Optional[Dict[str, Any]] = None,
    sub_query: bool = False,
) -> Dict[str, Any]:
    """
    Scope a MongoDB filter to the caller's project and form.

    Args:
        scope: Active form scope (may be None for unscoped reads)
        query: Caller filter; mutated in place
        sub_query: True for clauses nested under $or/$and

    Returns:
        The same filter, with identifiers normalized and, at the top level,
        ``project``/``form``/``deleted`` constraints injected. Nested clauses
        only get identifier normalization; they are combined under the
        top-level constraints.
    """
    if query is None:
        query = {}

    for field in ID_FIELDS:
        if query.get(field) is not None:
            query[field] = normalize_id(query[field])

    if query.get("form") is not None:
        query["form"] = normalize_id(query["form"])
    elif not sub_query and scope is not None and scope.form_id:
        query["form"] = normalize_id(scope.form_id)

    if not sub_query:
        if scope is not None and scope.project_id:
            query["project"] = normalize_id(scope.project_id)
        query["deleted"] = {"$eq": None}

    for key in LOGICAL_OPERATORS:
        clauses = query.get(key)
        if isinstance(clauses, list):
            for clause in clauses:
                if isinstance(clause, dict):
                    apply_scope_filter(scope, clause, sub_query=True)

    return query
