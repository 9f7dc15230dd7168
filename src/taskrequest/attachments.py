"""Attachment sub-structure for an uploaded image."""

import uuid

from taskrequest.schemas.task_request import (
    Attachment,
    AttachmentInfo,
    AttachmentValue,
    StoredFile,
)

IMAGE_CONTENT_TYPE = "image/png"
IMAGE_FILE_NAME = "photo.png"
ATTACHMENT_TYPE = "Image"
STORED_FILE_TYPE = "StoredFile"


def build_attachment(file_url: str | None) -> AttachmentInfo | None:
    """
    Map an uploaded file URL to the task request's ``attachmentInfo``.

    One fresh id per call links the attachment value to its stored-file
    record. Returns None when there is no URL (the image is optional).
    """
    if not file_url:
        return None

    file_id = str(uuid.uuid4())
    return AttachmentInfo(
        attachments=[
            Attachment(
                type=ATTACHMENT_TYPE,
                value=[
                    AttachmentValue(
                        id=file_id,
                        type=STORED_FILE_TYPE,
                        props={},
                        is_deleted=False,
                    )
                ],
            )
        ],
        stored_files=[
            StoredFile(
                id=file_id,
                content_type=IMAGE_CONTENT_TYPE,
                name=IMAGE_FILE_NAME,
                url=file_url,
            )
        ],
    )
