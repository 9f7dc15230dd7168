"""Pydantic schemas for platform payloads and run inputs."""

from taskrequest.schemas.code_elements import (
    KIND_HIERARCHY_TYPES,
    CodeElement,
    ModuleMetadataEntry,
    parse_code_elements,
)
from taskrequest.schemas.task_request import (
    Attachment,
    AttachmentInfo,
    AttachmentValue,
    EntityReference,
    GeoLocation,
    StoredFile,
    TaskRequest,
    TaskRequestDefaults,
    TaskRequestInput,
)

__all__ = [
    # Code elements
    "KIND_HIERARCHY_TYPES",
    "CodeElement",
    "ModuleMetadataEntry",
    "parse_code_elements",
    # Task request
    "Attachment",
    "AttachmentInfo",
    "AttachmentValue",
    "EntityReference",
    "GeoLocation",
    "StoredFile",
    "TaskRequest",
    "TaskRequestDefaults",
    "TaskRequestInput",
]
