"""httpx-backed transport.

Sends form payloads with httpx.AsyncClient, streams the response body to
report download progress, and races the request against the cancel signal.
"""

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from formstate.core.models import ProgressInfo
from formstate.transport.base import (
    CancelSignal,
    ProgressCallback,
    Request,
    RequestCancelled,
    RequestError,
    Response,
)

logger = logging.getLogger(__name__)

# Methods whose payload is sent as query parameters instead of a body
QUERY_METHODS = ("GET",)


class HttpxTransport:
    """Executes form submissions over HTTP.

    Either owns a short-lived client per request (built from ``base_url``,
    ``timeout`` and ``headers``) or uses an injected ``client`` which the
    caller keeps responsible for closing.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._headers = dict(headers or {})
        self._client = client

    async def send(
        self,
        request: Request,
        cancel_signal: CancelSignal,
        on_progress: ProgressCallback | None = None,
    ) -> Response:
        """Send a request unless or until the cancel signal fires."""
        if cancel_signal.cancelled:
            raise RequestCancelled(request)

        send_task = asyncio.ensure_future(self._dispatch(request, on_progress))
        cancel_task = asyncio.ensure_future(cancel_signal.wait())

        try:
            done, _ = await asyncio.wait(
                {send_task, cancel_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            send_task.cancel()
            raise
        finally:
            cancel_task.cancel()

        if send_task in done:
            return send_task.result()

        logger.debug("Aborting %s %s", request.method, request.url)
        send_task.cancel()
        try:
            await send_task
        except (asyncio.CancelledError, RequestError) as e:
            # The aborted request's own outcome is discarded
            logger.debug("Discarded outcome of aborted request: %r", e)
        raise RequestCancelled(request)

    @asynccontextmanager
    async def _client_scope(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return

        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            headers=self._headers,
        ) as client:
            yield client

    def _prepare(self, request: Request) -> tuple[Any, dict[str, str]]:
        """Run the preprocessor chain over the payload."""
        headers = dict(request.headers)
        data = request.data
        for preprocessor in request.preprocessors:
            data = preprocessor(data, headers)
        return data, headers

    def _build(
        self,
        client: httpx.AsyncClient,
        request: Request,
        data: Any,
        headers: dict[str, str],
    ) -> httpx.Request:
        method = request.method.upper()
        kwargs: dict[str, Any] = {"headers": headers}

        if data is None:
            pass
        elif method in QUERY_METHODS:
            kwargs["params"] = data
        elif isinstance(data, (bytes, str)):
            kwargs["content"] = data
        else:
            kwargs["json"] = data

        return client.build_request(method, request.url, **kwargs)

    async def _dispatch(
        self,
        request: Request,
        on_progress: ProgressCallback | None,
    ) -> Response:
        async with self._client_scope() as client:
            # Anything failing before the request leaves is a setup error
            try:
                data, headers = self._prepare(request)
                http_request = self._build(client, request, data, headers)
            except Exception as e:
                raise RequestError(str(e)) from e

            try:
                http_response = await client.send(http_request, stream=True)
            except httpx.UnsupportedProtocol as e:
                raise RequestError(str(e)) from e
            except httpx.TimeoutException as e:
                raise RequestError(f"Request timed out: {e}", request=request) from e
            except httpx.TransportError as e:
                raise RequestError(str(e) or type(e).__name__, request=request) from e

            try:
                body = await self._read_body(http_response, on_progress)
            except httpx.HTTPError as e:
                raise RequestError(str(e) or type(e).__name__, request=request) from e
            finally:
                await http_response.aclose()

        response = Response(
            data=_decode_body(body, http_response.headers.get("content-type", "")),
            status=http_response.status_code,
            headers=dict(http_response.headers),
        )

        if not response.ok:
            raise RequestError(
                f"Request failed with status code {response.status}",
                response=response,
                request=request,
            )

        return response

    async def _read_body(
        self,
        http_response: httpx.Response,
        on_progress: ProgressCallback | None,
    ) -> bytes:
        content_length = http_response.headers.get("content-length")
        total = int(content_length) if content_length and content_length.isdigit() else None

        chunks: list[bytes] = []
        loaded = 0
        async for chunk in http_response.aiter_bytes():
            chunks.append(chunk)
            loaded += len(chunk)
            if on_progress is not None:
                await on_progress(ProgressInfo(loaded=loaded, total=total))

        return b"".join(chunks)


def _decode_body(body: bytes, content_type: str) -> Any:
    """Decode a response body: JSON when possible, text otherwise."""
    if not body:
        return None

    text = body.decode("utf-8", errors="replace")
    if "json" in content_type or text.lstrip()[:1] in ("{", "["):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.debug("Response declared JSON but did not parse; keeping text")
    return text
