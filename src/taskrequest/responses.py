"""Success-body decoding shared by the platform and identity clients."""

from typing import Any

import aiohttp

from core.errors.exceptions import HttpError


async def read_json(
    response: aiohttp.ClientResponse,
    error_cls: type[HttpError],
    request_label: str,
    path: str,
) -> Any:
    """
    Decode a 2xx response body as JSON.

    An empty body decodes to None, the same as a 204. Any other body that is
    not JSON (an HTML login page from a proxy, say) raises ``error_cls`` with
    the start of the text as payload.

    Args:
        response: Response whose status was already checked
        error_cls: Failure type of the calling stage
        request_label: "METHOD path" used in the error message
        path: Request path recorded on the error
    """
    try:
        return await response.json(content_type=None)
    except (ValueError, aiohttp.ContentTypeError) as e:
        text = await response.text()
        if not text or not text.strip():
            return None
        raise error_cls(
            f"{request_label} returned a non-JSON body",
            path=path,
            status_code=response.status,
            payload=text[:500],
            cause=e,
        ) from e
