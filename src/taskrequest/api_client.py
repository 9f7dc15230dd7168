"""ARXS REST API client with per-call timeouts and stage-typed failures."""

import asyncio
import json
import logging
from typing import Any
from urllib.parse import quote

import aiohttp
from pydantic import ValidationError

from core.errors.exceptions import FetchFailure, HttpError, SubmissionFailure, UploadFailure
from taskrequest.auth import BearerToken
from taskrequest.responses import read_json
from taskrequest.schemas.code_elements import CodeElement, parse_code_elements

logger = logging.getLogger(__name__)

EMPLOYEES_PATH = "/api/masterdata/employee"
CODE_ELEMENTS_PATH = "/api/masterdata/codeelements"
MODULE_METADATA_PATH = "/api/masterdata/codeelements/getmetadatabymodules/{module}"
EQUIPMENTS_PATH = "/api/assetmanagement/equipment"
BLOB_AUTHORIZATION_PATH = "/api/shared/blob/GetBlobPutAuthorization"
TASK_REQUEST_PATH = "/api/facilitymanagement/taskrequest"

# Keys that usually carry the human-readable part of an error body
_ERROR_MESSAGE_KEYS = ("error", "message", "title", "detail")


def _remote_message(payload: Any) -> str | None:
    """Pick the most useful message out of a remote error payload."""
    if payload is None or payload == "":
        return None
    if isinstance(payload, dict):
        for key in _ERROR_MESSAGE_KEYS:
            if payload.get(key):
                return str(payload[key])
        return json.dumps(payload, ensure_ascii=False)[:500]
    return str(payload)[:500]


def _is_success(status: int) -> bool:
    return 200 <= status < 300


class ArxsApiClient:
    """Async client for the ARXS platform API.

    The bearer credential is injected at construction and never changes for
    the lifetime of the client. Every call gets an explicit timeout; any
    non-2xx status, timeout or connection error raises the failure type of
    the calling stage.
    """

    def __init__(
        self,
        base_url: str,
        credential: BearerToken,
        timeout_seconds: float = 30.0,
        max_concurrent: int = 8,
    ):
        self.base_url = base_url.rstrip("/") if base_url else ""

        if not self.base_url:
            raise ValueError(
                "ArxsApiClient requires 'base_url'. "
                "Set ARXS_BASE_URL environment variable or configure arxs.api.base_url in config."
            )

        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"ArxsApiClient base_url must start with http:// or https://, got: {self.base_url!r}."
            )

        if credential is None:
            raise ValueError("ArxsApiClient requires 'credential'")

        self._credential = credential
        self.timeout_seconds = timeout_seconds
        self.max_concurrent = max_concurrent

        self._session: aiohttp.ClientSession | None = None
        self._closed = False

        logger.debug(
            "ArxsApiClient initialized",
            extra={
                "http_url": self.base_url,
                "timeout_seconds": self.timeout_seconds,
            },
        )

    async def __aenter__(self) -> "ArxsApiClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> None:
        if self._closed:
            raise RuntimeError("ArxsApiClient is closed, cannot create new session")
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.max_concurrent,
                limit_per_host=self.max_concurrent,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={"Accept": "application/json"},
            )

    async def close(self) -> None:
        self._closed = True
        if self._session and not self._session.closed:
            await self._session.close()
            await asyncio.sleep(0)
            self._session = None

    @staticmethod
    async def _read_error_payload(response) -> Any:
        """Read an error body as JSON when possible, text otherwise."""
        try:
            text = await response.text()
        except Exception:
            return None
        if not text:
            return None
        try:
            return json.loads(text)
        except (TypeError, ValueError):
            return text[:500]

    async def _handle_error_response(
        self,
        response,
        endpoint: str,
        method: str,
        duration: float,
        error_cls: type[HttpError],
    ) -> None:
        """Read error body, log it and raise ``error_cls``."""
        payload = await self._read_error_payload(response)
        remote = _remote_message(payload)

        message = f"{method} {endpoint} failed: {response.status} {response.reason or ''}".rstrip()
        if remote:
            message = f"{message}: {remote}"

        error = error_cls(
            message,
            path=endpoint,
            status_code=response.status,
            payload=payload,
        )
        logger.warning(
            "API request failed",
            extra={
                "api_endpoint": endpoint,
                "api_method": method,
                "http_status": response.status,
                "error_category": error.category.value,
                "response_body": remote,
                "duration_ms": round(duration * 1000, 2),
            },
        )
        raise error

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
        error_cls: type[HttpError] = FetchFailure,
    ) -> Any:
        await self._ensure_session()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        logger.debug(
            "API request starting",
            extra={
                "api_endpoint": endpoint,
                "api_method": method,
            },
        )

        request_headers = {"Authorization": self._credential.authorization_header}
        if json_body is not None:
            request_headers["Content-Type"] = "application/json"

        start_time = asyncio.get_event_loop().time()
        try:
            if self._session is None:
                raise RuntimeError("HTTP session not initialized - call _ensure_session() first")
            async with self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=request_headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                duration = asyncio.get_event_loop().time() - start_time

                if not _is_success(response.status):
                    await self._handle_error_response(
                        response, endpoint, method, duration, error_cls
                    )

                if response.status == 204:
                    data = None
                else:
                    data = await read_json(
                        response, error_cls, f"{method} {endpoint}", endpoint
                    )

                log_level = logging.INFO if duration > 2.0 else logging.DEBUG
                log_msg = "Slow API request" if duration > 2.0 else "API request succeeded"
                logger.log(
                    log_level,
                    log_msg,
                    extra={
                        "api_endpoint": endpoint,
                        "api_method": method,
                        "http_status": response.status,
                        "duration_ms": round(duration * 1000, 2),
                    },
                )
                return data

        except TimeoutError as e:
            logger.warning(
                "API request timeout",
                extra={
                    "api_endpoint": endpoint,
                    "api_method": method,
                    "timeout_seconds": self.timeout_seconds,
                },
            )
            raise error_cls(
                f"{method} {endpoint} timed out after {self.timeout_seconds}s",
                path=endpoint,
                cause=e,
            ) from e

        except aiohttp.ClientError as e:
            logger.error(
                "API connection error",
                exc_info=True,
                extra={
                    "api_endpoint": endpoint,
                    "api_method": method,
                },
            )
            raise error_cls(
                f"{method} {endpoint} connection error: {e}",
                path=endpoint,
                cause=e,
            ) from e

    async def _get_list(self, endpoint: str) -> list[Any]:
        data = await self._request("GET", endpoint)
        if not isinstance(data, list):
            raise FetchFailure(
                f"GET {endpoint} returned {type(data).__name__}, expected a list",
                path=endpoint,
                payload=data,
            )
        return data

    async def get_employees(self) -> list[dict[str, Any]]:
        return await self._get_list(EMPLOYEES_PATH)

    async def get_code_elements(self) -> list[CodeElement]:
        """Flat code element list, validated into CodeElement models."""
        data = await self._get_list(CODE_ELEMENTS_PATH)
        try:
            return parse_code_elements(data)
        except ValidationError as e:
            raise FetchFailure(
                f"GET {CODE_ELEMENTS_PATH} returned malformed code elements: "
                f"{e.error_count()} validation error(s)",
                path=CODE_ELEMENTS_PATH,
                payload=data,
                cause=e,
            ) from e

    async def get_module_metadata(self, module: str) -> dict[str, Any]:
        """Code element metadata for a module, keyed by code."""
        endpoint = MODULE_METADATA_PATH.format(module=quote(module, safe=""))
        data = await self._request("GET", endpoint)
        if not isinstance(data, dict):
            raise FetchFailure(
                f"GET {endpoint} returned {type(data).__name__}, expected an object",
                path=endpoint,
                payload=data,
            )
        return data

    async def get_equipments(self) -> list[dict[str, Any]]:
        return await self._get_list(EQUIPMENTS_PATH)

    async def get_blob_put_authorization(self, file_name: str, content_type: str) -> str:
        """Pre-authorized PUT URL for uploading ``file_name`` to blob storage."""
        data = await self._request(
            "GET",
            BLOB_AUTHORIZATION_PATH,
            params={"fileName": file_name, "type": content_type},
            error_cls=UploadFailure,
        )
        if isinstance(data, dict):
            data = data.get("url") or data.get("uri")
        if not isinstance(data, str) or not data:
            raise UploadFailure(
                "Blob authorization returned no upload URL",
                path=BLOB_AUTHORIZATION_PATH,
                payload=data,
            )
        return data

    async def put_blob(self, url: str, data: bytes, headers: dict[str, str]) -> None:
        """
        PUT raw bytes to a pre-authorized blob URL.

        The URL carries its own authorization, so no bearer header is sent.
        """
        await self._ensure_session()
        start_time = asyncio.get_event_loop().time()
        try:
            if self._session is None:
                raise RuntimeError("HTTP session not initialized - call _ensure_session() first")
            async with self._session.put(
                url,
                data=data,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds),
            ) as response:
                duration = asyncio.get_event_loop().time() - start_time
                if not _is_success(response.status):
                    payload = await self._read_error_payload(response)
                    raise UploadFailure(
                        f"Blob upload failed: {response.status} {response.reason or ''}".rstrip(),
                        status_code=response.status,
                        payload=payload,
                    )
                logger.debug(
                    "Blob upload succeeded",
                    extra={
                        "blob_url": url,
                        "http_status": response.status,
                        "bytes_uploaded": len(data),
                        "duration_ms": round(duration * 1000, 2),
                    },
                )

        except TimeoutError as e:
            raise UploadFailure(
                f"Blob upload timed out after {self.timeout_seconds}s", cause=e
            ) from e
        except aiohttp.ClientError as e:
            raise UploadFailure(f"Blob upload connection error: {e}", cause=e) from e

    async def create_task_request(self, body: dict[str, Any]) -> dict[str, Any]:
        """POST a task request; returns the server-assigned record."""
        return await self._request(
            "POST",
            TASK_REQUEST_PATH,
            json_body=body,
            error_cls=SubmissionFailure,
        )
