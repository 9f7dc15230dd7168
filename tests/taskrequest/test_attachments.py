"""Tests for the attachmentInfo builder."""

import uuid

from taskrequest.attachments import (
    ATTACHMENT_TYPE,
    IMAGE_CONTENT_TYPE,
    IMAGE_FILE_NAME,
    STORED_FILE_TYPE,
    build_attachment,
)


class TestBuildAttachment:
    """Test build_attachment."""

    def test_no_url_gives_no_attachment(self):
        assert build_attachment(None) is None
        assert build_attachment("") is None

    def test_attachment_and_stored_file_share_one_id(self):
        info = build_attachment("https://blob.test/container/photo.png")

        value_id = info.attachments[0].value[0].id
        assert info.stored_files[0].id == value_id
        uuid.UUID(value_id)

    def test_fresh_id_per_call(self):
        first = build_attachment("https://blob.test/a.png")
        second = build_attachment("https://blob.test/a.png")

        assert first.stored_files[0].id != second.stored_files[0].id

    def test_payload_shape(self):
        url = "https://blob.test/container/photo.png?sv=2021&sig=abc"
        info = build_attachment(url)

        payload = info.model_dump(by_alias=True)
        file_id = payload["storedFiles"][0]["id"]
        assert payload == {
            "attachments": [
                {
                    "type": ATTACHMENT_TYPE,
                    "value": [
                        {
                            "id": file_id,
                            "type": STORED_FILE_TYPE,
                            "props": {},
                            "isDeleted": False,
                        }
                    ],
                }
            ],
            "storedFiles": [
                {
                    "id": file_id,
                    "contentType": IMAGE_CONTENT_TYPE,
                    "name": IMAGE_FILE_NAME,
                    "url": url,
                }
            ],
        }
