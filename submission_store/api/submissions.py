"""
Submissions API endpoints.

Thin HTTP glue over `RecordStore`; every route runs under the project/form
scope resolved from the path.
"""
from typing import Any, Dict, Mapping

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder

from submission_store.api.deps import get_scope, get_store
from submission_store.db import schemas
from submission_store.db.crud import RecordStore
from submission_store.db.schemas import FormScope

router = APIRouter(prefix="/project/{project_id}/form/{form_id}/submission", tags=["submissions"])

# Filter keys owned by the route scope; the URL can never override them
SCOPE_KEYS = ("form", "project", "deleted")


def _serialize(record: Any) -> Any:
    return jsonable_encoder(record, custom_encoder={ObjectId: str})


def _url_filter(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Return query params usable as a filter, minus scope keys and operators."""
    return {
        key: value
        for key, value in params.items()
        if key not in SCOPE_KEYS and not key.startswith("$")
    }


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Submission not found")


@router.get("", response_model=schemas.SubmissionIndex)
async def list_submissions_endpoint(
    request: Request,
    scope: FormScope = Depends(get_scope),
    store: RecordStore = Depends(get_store),
):
    result = await store.index(scope, _url_filter(request.query_params))
    result["items"] = _serialize(result["items"])
    return result


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_submission_endpoint(
    submission: schemas.SubmissionCreate,
    scope: FormScope = Depends(get_scope),
    store: RecordStore = Depends(get_store),
) -> Dict[str, Any]:
    created = await store.create(scope, submission.model_dump(exclude_none=True))
    if created is None:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Submission could not be saved")
    return _serialize(created)


@router.get("/{submission_id}")
async def get_submission_endpoint(
    submission_id: str,
    scope: FormScope = Depends(get_scope),
    store: RecordStore = Depends(get_store),
) -> Dict[str, Any]:
    record = await store.read(scope, submission_id)
    if record is None:
        raise _not_found()
    return _serialize(record)


@router.put("/{submission_id}")
async def update_submission_endpoint(
    submission_id: str,
    submission: schemas.SubmissionUpdate,
    scope: FormScope = Depends(get_scope),
    store: RecordStore = Depends(get_store),
) -> Dict[str, Any]:
    record = await store.update(scope, submission_id, submission.model_dump(exclude_none=True))
    if record is None:
        raise _not_found()
    return _serialize(record)


@router.delete("/{submission_id}")
async def delete_submission_endpoint(
    submission_id: str,
    scope: FormScope = Depends(get_scope),
    store: RecordStore = Depends(get_store),
):
    if not await store.delete(scope, submission_id):
        raise _not_found()
    return {"message": "Submission deleted successfully"}
