"""
API dependency helpers.

Resolves the store context and the per-request form scope for routes.
"""
from fastapi import Depends, HTTPException, Request, status

from submission_store.db.crud import RecordStore
from submission_store.db.database import FORM_COLLECTION, PROJECT_COLLECTION, DatabaseContext
from submission_store.db.identifiers import normalize_id
from submission_store.db.repositories.documents import load_document
from submission_store.db.schemas import FormDefinition, FormScope, ProjectRef


def get_context(request: Request) -> DatabaseContext:
    return request.app.state.db


def get_store(ctx: DatabaseContext = Depends(get_context)) -> RecordStore:
    return RecordStore(ctx)


# Contract:
# Returns a FormScope for the form within the project named by the path.
# Raises 404 if either document cannot be loaded.
async def get_scope(
    project_id: str,
    form_id: str,
    ctx: DatabaseContext = Depends(get_context),
) -> FormScope:
    project = await load_document(ctx, PROJECT_COLLECTION, {"_id": normalize_id(project_id)})
    if not project:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    form = await load_document(
        ctx,
        FORM_COLLECTION,
        {"_id": normalize_id(form_id), "project": project["_id"]},
    )
    if not form:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Form not found")
    return FormScope(
        form=FormDefinition.model_validate(form),
        project=ProjectRef.model_validate(project),
    )
