"""Assemble and submit the composite task request."""

import logging
from collections.abc import Mapping
from typing import Any

from taskrequest.api_client import ArxsApiClient
from taskrequest.schemas.code_elements import CodeElement
from taskrequest.schemas.task_request import (
    AttachmentInfo,
    EntityReference,
    TaskRequest,
    TaskRequestDefaults,
)

logger = logging.getLogger(__name__)

# Module tags the platform expects on polymorphic references
NOTIFIER_MODULE = "Employee"
SUBJECT_MODULE = "EquipmentInstallation"


def compose_task_request(
    notifier: Mapping[str, Any],
    kind: CodeElement,
    type_: CodeElement,
    subject: Mapping[str, Any],
    attachment_info: AttachmentInfo | None = None,
    defaults: TaskRequestDefaults | None = None,
) -> TaskRequest:
    """
    Build the task request from resolved entities and static fields.

    Structural assembly only; the platform validates the result on submit.
    """
    defaults = defaults or TaskRequestDefaults()
    return TaskRequest(
        tags=list(defaults.tags),
        notifier=EntityReference(id=notifier["id"], module=NOTIFIER_MODULE),
        title=defaults.title,
        description=defaults.description,
        subjects=[EntityReference(id=subject["id"], module=SUBJECT_MODULE)],
        kind=EntityReference(id=kind.id),
        type=EntityReference(id=type_.id),
        geo_location=defaults.geo_location,
        attachment_info=attachment_info,
    )


async def submit_task_request(
    client: ArxsApiClient, task_request: TaskRequest
) -> dict[str, Any]:
    """
    POST the task request and return the server-assigned record.

    Raises:
        SubmissionFailure: The platform rejected the request; the remote
            error payload is on ``payload``
    """
    created = await client.create_task_request(task_request.to_payload())
    task_request_id = created.get("id") if isinstance(created, Mapping) else None
    logger.info(
        "Task request created",
        extra={"task_request_id": task_request_id},
    )
    return created
