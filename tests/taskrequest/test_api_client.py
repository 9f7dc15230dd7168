"""
Unit tests for the ARXS API client.

Tests ArxsApiClient with mocked HTTP responses including:
- Authorization header injection
- Non-2xx, timeout and connection failures per stage
- All endpoint methods
- Session management
"""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import aiohttp
import pytest

from core.errors.exceptions import FetchFailure, SubmissionFailure, UploadFailure
from core.types import ErrorCategory
from taskrequest.api_client import (
    BLOB_AUTHORIZATION_PATH,
    CODE_ELEMENTS_PATH,
    EMPLOYEES_PATH,
    TASK_REQUEST_PATH,
    ArxsApiClient,
    _remote_message,
)
from taskrequest.auth import BearerToken
from taskrequest.schemas.code_elements import CodeElement

BASE_URL = "https://arxs.test"


def _response(status=200, json_data=None, text="", reason="OK"):
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.reason = reason
    mock_response.json = AsyncMock(return_value=json_data)
    mock_response.text = AsyncMock(return_value=text)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)
    return mock_response


@pytest.fixture
def api_client():
    """Create API client with a fixed credential."""
    return ArxsApiClient(
        base_url=BASE_URL + "/",
        credential=BearerToken("jwt-123"),
        timeout_seconds=5,
    )


# ============================================================================
# Construction
# ============================================================================


class TestArxsApiClientInit:
    """Test constructor validation."""

    def test_strips_trailing_slash(self, api_client):
        assert api_client.base_url == BASE_URL

    def test_requires_base_url(self):
        with pytest.raises(ValueError, match="base_url"):
            ArxsApiClient(base_url="", credential=BearerToken("t"))

    def test_requires_http_scheme(self):
        with pytest.raises(ValueError, match="http"):
            ArxsApiClient(base_url="arxs.test", credential=BearerToken("t"))

    def test_requires_credential(self):
        with pytest.raises(ValueError, match="credential"):
            ArxsApiClient(base_url=BASE_URL, credential=None)


# ============================================================================
# Requests
# ============================================================================


class TestRequest:
    """Test the shared request path."""

    @pytest.mark.asyncio
    async def test_sends_bearer_token_and_timeout(self, api_client):
        mock_response = _response(json_data=[])

        with patch("aiohttp.ClientSession.request", return_value=mock_response) as mock_req:
            await api_client.get_employees()

        args, kwargs = mock_req.call_args
        assert args == ("GET", BASE_URL + EMPLOYEES_PATH)
        assert kwargs["headers"]["Authorization"] == "Bearer jwt-123"
        assert "Content-Type" not in kwargs["headers"]
        assert kwargs["timeout"].total == 5
        await api_client.close()

    @pytest.mark.asyncio
    async def test_404_raises_fetch_failure_with_path(self, api_client):
        mock_response = _response(status=404, text="", reason="Not Found")

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            with pytest.raises(FetchFailure) as exc_info:
                await api_client.get_employees()

        error = exc_info.value
        assert error.path == EMPLOYEES_PATH
        assert error.status_code == 404
        assert error.category == ErrorCategory.PERMANENT
        assert error.stage == "fetch"
        assert "404" in str(error)
        await api_client.close()

    @pytest.mark.asyncio
    async def test_500_is_transient(self, api_client):
        mock_response = _response(status=500, text="boom", reason="Internal Server Error")

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            with pytest.raises(FetchFailure) as exc_info:
                await api_client.get_equipments()

        assert exc_info.value.category == ErrorCategory.TRANSIENT
        assert exc_info.value.payload == "boom"
        await api_client.close()

    @pytest.mark.asyncio
    async def test_timeout_raises_fetch_failure(self, api_client):
        mock_response = AsyncMock()
        mock_response.__aenter__ = AsyncMock(side_effect=asyncio.TimeoutError())
        mock_response.__aexit__ = AsyncMock(return_value=None)

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            with pytest.raises(FetchFailure) as exc_info:
                await api_client.get_employees()

        assert "timed out" in str(exc_info.value)
        assert exc_info.value.status_code is None
        assert exc_info.value.category == ErrorCategory.TRANSIENT
        await api_client.close()

    @pytest.mark.asyncio
    async def test_connection_error_raises_fetch_failure(self, api_client):
        mock_response = AsyncMock()
        mock_response.__aenter__ = AsyncMock(
            side_effect=aiohttp.ClientConnectionError("Connection refused")
        )
        mock_response.__aexit__ = AsyncMock(return_value=None)

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            with pytest.raises(FetchFailure) as exc_info:
                await api_client.get_employees()

        assert "connection error" in str(exc_info.value)
        assert isinstance(exc_info.value.cause, aiohttp.ClientConnectionError)
        await api_client.close()

    @pytest.mark.asyncio
    async def test_html_success_body_raises_fetch_failure(self, api_client):
        """A 200 carrying a login page is a failed fetch, not a decode traceback."""
        mock_response = _response(status=200, text="<html>login</html>")
        mock_response.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            with pytest.raises(FetchFailure) as exc_info:
                await api_client.get_employees()

        error = exc_info.value
        assert "non-JSON body" in str(error)
        assert error.path == EMPLOYEES_PATH
        assert error.status_code == 200
        assert error.payload == "<html>login</html>"
        await api_client.close()

    @pytest.mark.asyncio
    async def test_list_endpoint_rejects_object(self, api_client):
        mock_response = _response(json_data={"items": []})

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            with pytest.raises(FetchFailure, match="expected a list"):
                await api_client.get_employees()
        await api_client.close()


# ============================================================================
# Endpoints
# ============================================================================


class TestEndpoints:
    """Test the endpoint methods."""

    @pytest.mark.asyncio
    async def test_get_code_elements_parses_models(self, api_client, code_element_payload):
        mock_response = _response(json_data=code_element_payload)

        with patch("aiohttp.ClientSession.request", return_value=mock_response) as mock_req:
            nodes = await api_client.get_code_elements()

        assert mock_req.call_args[0][1] == BASE_URL + CODE_ELEMENTS_PATH
        assert all(isinstance(node, CodeElement) for node in nodes)
        assert nodes[1].parent_id == 1
        await api_client.close()

    @pytest.mark.asyncio
    async def test_get_module_metadata_quotes_module(self, api_client, module_metadata):
        mock_response = _response(json_data=module_metadata)

        with patch("aiohttp.ClientSession.request", return_value=mock_response) as mock_req:
            result = await api_client.get_module_metadata("Notification Defect")

        assert result == module_metadata
        assert mock_req.call_args[0][1].endswith(
            "/getmetadatabymodules/Notification%20Defect"
        )
        await api_client.close()

    @pytest.mark.asyncio
    async def test_get_module_metadata_rejects_list(self, api_client):
        mock_response = _response(json_data=[])

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            with pytest.raises(FetchFailure, match="expected an object"):
                await api_client.get_module_metadata("NotificationDefect")
        await api_client.close()

    @pytest.mark.asyncio
    async def test_create_task_request_posts_json(self, api_client):
        mock_response = _response(status=201, json_data={"id": "TR-1"})
        body = {"title": "Titel"}

        with patch("aiohttp.ClientSession.request", return_value=mock_response) as mock_req:
            result = await api_client.create_task_request(body)

        assert result == {"id": "TR-1"}
        args, kwargs = mock_req.call_args
        assert args == ("POST", BASE_URL + TASK_REQUEST_PATH)
        assert kwargs["json"] == body
        assert kwargs["headers"]["Content-Type"] == "application/json"
        await api_client.close()

    @pytest.mark.asyncio
    async def test_create_task_request_rejected(self, api_client):
        """POST 400 with an error body surfaces as SubmissionFailure with the payload."""
        mock_response = _response(
            status=400, text='{"error": "invalid kind"}', reason="Bad Request"
        )

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            with pytest.raises(SubmissionFailure) as exc_info:
                await api_client.create_task_request({"title": "Titel"})

        error = exc_info.value
        assert error.stage == "submit"
        assert error.status_code == 400
        assert error.payload == {"error": "invalid kind"}
        assert "invalid kind" in str(error)
        assert error.path == TASK_REQUEST_PATH
        await api_client.close()

    @pytest.mark.asyncio
    async def test_no_content_returns_none(self, api_client):
        mock_response = _response(status=204)

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            assert await api_client.create_task_request({}) is None
        mock_response.json.assert_not_awaited()
        await api_client.close()

    @pytest.mark.asyncio
    async def test_empty_created_body_returns_none(self, api_client):
        """A 201 with no body is treated like a 204."""
        mock_response = _response(status=201, text="")
        mock_response.json.side_effect = json.JSONDecodeError("Expecting value", "", 0)

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            assert await api_client.create_task_request({}) is None
        await api_client.close()

    @pytest.mark.asyncio
    async def test_non_json_created_body_is_submission_failure(self, api_client):
        mock_response = _response(status=201, text="Created")
        mock_response.json.side_effect = json.JSONDecodeError("Expecting value", "Created", 0)

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            with pytest.raises(SubmissionFailure, match="non-JSON body") as exc_info:
                await api_client.create_task_request({})

        assert exc_info.value.payload == "Created"
        assert exc_info.value.stage == "submit"
        await api_client.close()

    @pytest.mark.asyncio
    async def test_malformed_code_elements_raise_fetch_failure(self, api_client):
        mock_response = _response(json_data=[{"code": "X", "name": "no id"}])

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            with pytest.raises(FetchFailure, match="malformed code elements") as exc_info:
                await api_client.get_code_elements()

        error = exc_info.value
        assert error.path == CODE_ELEMENTS_PATH
        assert error.payload == [{"code": "X", "name": "no id"}]
        assert error.stage == "fetch"
        await api_client.close()

    @pytest.mark.asyncio
    async def test_blob_authorization_returns_url(self, api_client):
        mock_response = _response(json_data="https://blob.test/c/photo.png?sig=x")

        with patch("aiohttp.ClientSession.request", return_value=mock_response) as mock_req:
            url = await api_client.get_blob_put_authorization("photo.png", "image/png")

        assert url == "https://blob.test/c/photo.png?sig=x"
        args, kwargs = mock_req.call_args
        assert args[1] == BASE_URL + BLOB_AUTHORIZATION_PATH
        assert kwargs["params"] == {"fileName": "photo.png", "type": "image/png"}
        await api_client.close()

    @pytest.mark.asyncio
    async def test_blob_authorization_accepts_object(self, api_client):
        mock_response = _response(json_data={"url": "https://blob.test/c/x.png"})

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            url = await api_client.get_blob_put_authorization("x.png", "image/png")

        assert url == "https://blob.test/c/x.png"
        await api_client.close()

    @pytest.mark.asyncio
    async def test_blob_authorization_failure_is_upload_failure(self, api_client):
        mock_response = _response(status=403, reason="Forbidden")

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            with pytest.raises(UploadFailure) as exc_info:
                await api_client.get_blob_put_authorization("x.png", "image/png")

        assert exc_info.value.stage == "upload"
        await api_client.close()

    @pytest.mark.asyncio
    async def test_blob_authorization_without_url(self, api_client):
        mock_response = _response(json_data={})

        with patch("aiohttp.ClientSession.request", return_value=mock_response):
            with pytest.raises(UploadFailure, match="no upload URL"):
                await api_client.get_blob_put_authorization("x.png", "image/png")
        await api_client.close()

    @pytest.mark.asyncio
    async def test_put_blob_sends_no_bearer(self, api_client):
        mock_response = _response(status=201)
        headers = {"x-ms-blob-type": "BlockBlob"}

        with patch("aiohttp.ClientSession.put", return_value=mock_response) as mock_put:
            await api_client.put_blob("https://blob.test/c/x.png?sig=s", b"png", headers)

        args, kwargs = mock_put.call_args
        assert args == ("https://blob.test/c/x.png?sig=s",)
        assert kwargs["data"] == b"png"
        assert kwargs["headers"] == headers
        assert "Authorization" not in kwargs["headers"]
        await api_client.close()

    @pytest.mark.asyncio
    async def test_put_blob_rejected(self, api_client):
        mock_response = _response(status=403, text="AuthenticationFailed", reason="Forbidden")

        with patch("aiohttp.ClientSession.put", return_value=mock_response):
            with pytest.raises(UploadFailure) as exc_info:
                await api_client.put_blob("https://blob.test/x", b"", {})

        assert exc_info.value.status_code == 403
        assert exc_info.value.payload == "AuthenticationFailed"
        await api_client.close()


# ============================================================================
# Session management
# ============================================================================


class TestSessionManagement:
    """Test session lifecycle."""

    @pytest.mark.asyncio
    async def test_context_manager_closes_session(self):
        async with ArxsApiClient(BASE_URL, BearerToken("t")) as client:
            assert client._session is not None
            session = client._session

        assert session.closed
        assert client._session is None

    @pytest.mark.asyncio
    async def test_closed_client_refuses_new_session(self, api_client):
        await api_client.close()

        with pytest.raises(RuntimeError, match="closed"):
            await api_client.get_employees()


class TestRemoteMessage:
    """Test _remote_message."""

    def test_prefers_error_key(self):
        assert _remote_message({"message": "m", "error": "e"}) == "e"

    def test_falls_back_to_json(self):
        assert _remote_message({"code": 7}) == '{"code": 7}'

    def test_empty(self):
        assert _remote_message(None) is None
        assert _remote_message("") is None

    def test_text(self):
        assert _remote_message("plain") == "plain"
