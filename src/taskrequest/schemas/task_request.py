"""
Task request schemas.

Pydantic models for the composite body POSTed to
``/api/facilitymanagement/taskrequest`` and for the per-run inputs that drive
the lookups. API-facing models serialize with camelCase aliases:

    task_request.model_dump(by_alias=True, exclude_none=True)
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


class EntityReference(BaseModel):
    """Reference to another platform record, optionally tagged with its module."""

    id: int | str
    module: str | None = None


class GeoLocation(BaseModel):
    street: str | None = None
    number: str | None = None
    zip_code: str | None = Field(default=None, alias="zipCode")
    city: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    model_config = {"populate_by_name": True}


class AttachmentValue(BaseModel):
    """Reference from an attachment group to one stored file."""

    id: str
    type: str
    props: dict[str, Any] = Field(default_factory=dict)
    is_deleted: bool = Field(default=False, alias="isDeleted")

    model_config = {"populate_by_name": True}


class Attachment(BaseModel):
    type: str
    value: list[AttachmentValue]


class StoredFile(BaseModel):
    id: str
    content_type: str = Field(alias="contentType")
    name: str
    url: str

    model_config = {"populate_by_name": True}


class AttachmentInfo(BaseModel):
    """Attachment groups plus the stored-file records they point at, linked by id."""

    attachments: list[Attachment]
    stored_files: list[StoredFile] = Field(alias="storedFiles")

    model_config = {"populate_by_name": True}


class TaskRequest(BaseModel):
    """Composite task request as accepted by the platform."""

    tags: list[str] = Field(default_factory=list)
    notifier: EntityReference
    title: str
    description: str
    subjects: list[EntityReference]
    kind: EntityReference
    type: EntityReference
    geo_location: GeoLocation | None = Field(default=None, alias="geoLocation")
    attachment_info: AttachmentInfo | None = Field(default=None, alias="attachmentInfo")

    model_config = {"populate_by_name": True}

    def to_payload(self) -> dict[str, Any]:
        """JSON body for the POST, absent optional fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class TaskRequestDefaults(BaseModel):
    """Static task-request fields, read from the ``arxs.defaults`` config section."""

    title: str = "Titel"
    description: str = "Omschrijving"
    tags: list[str] = Field(default_factory=list)
    geo_location: GeoLocation | None = None


class TaskRequestInput(BaseModel):
    """Lookup inputs for one run.

    Attributes:
        user_name: Exact ``userName`` of the notifying employee
        module: Platform module whose classification hierarchy is used
        kind_name: Exact ``name`` of the kind directly under the module root
        type_name: Exact ``name`` of the type under the kind's grouping level
        subject_unique_number: Exact ``uniqueNumber`` of the equipment
        image_path: Optional local image to upload and attach
    """

    user_name: str = Field(..., min_length=1)
    module: str = Field(..., min_length=1)
    kind_name: str = Field(..., min_length=1)
    type_name: str = Field(..., min_length=1)
    subject_unique_number: str = Field(..., min_length=1)
    image_path: Path | None = None
