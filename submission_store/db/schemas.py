from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from submission_store.utils.components import Component, ComponentVisitor, each_component


# Scope documents
class FormSettings(BaseModel):
    model_config = ConfigDict(extra="allow")

    collection: Optional[str] = None


class FormDefinition(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Any = Field(default=None, alias="_id")
    title: Optional[str] = None
    name: Optional[str] = None
    path: Optional[str] = None
    settings: FormSettings = Field(default_factory=FormSettings)
    components: List[Dict[str, Any]] = Field(default_factory=list)

    # Stored forms may carry explicit nulls for either field
    @field_validator("settings", mode="before")
    @classmethod
    def _null_settings(cls, value: Any) -> Any:
        return FormSettings() if value is None else value

    @field_validator("components", mode="before")
    @classmethod
    def _null_components(cls, value: Any) -> Any:
        return [] if value is None else value


class ProjectRef(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Any = Field(default=None, alias="_id")
    name: Optional[str] = None


@dataclass
class FormScope:
    """Caller-owned context for a single store operation.

    The access layer only reads it: the form and project identify the tenant,
    and `each_component` walks the form schema for index discovery.
    """

    form: Optional[FormDefinition] = None
    project: Optional[ProjectRef] = None

    @property
    def form_id(self) -> Any:
        return self.form.id if self.form else None

    @property
    def project_id(self) -> Any:
        return self.project.id if self.project else None

    @property
    def collection(self) -> Optional[str]:
        """Custom collection name configured on the form, if any."""
        if self.form and self.form.settings:
            return self.form.settings.collection or None
        return None

    def each_component(self, components: Optional[List[Component]], visitor: ComponentVisitor) -> None:
        each_component(components, visitor)


# Submission payloads (HTTP glue)
class SubmissionCreate(BaseModel):
    data: Dict[str, Any] = Field(default_factory=dict)
    metadata: Optional[Dict[str, Any]] = None
    owner: Optional[str] = None
    access: Optional[List[Dict[str, Any]]] = None


class SubmissionUpdate(BaseModel):
    data: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


class SubmissionIndex(BaseModel):
    items: List[Dict[str, Any]]
    limit: int
    skip: int
    count: int
