"""The dispatch primitive: one full request/response exchange per ``dial``."""

from __future__ import annotations

from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, AsyncIterator, Mapping

import httpx
from httpx_ws import AsyncWebSocketSession, WebSocketUpgradeError

from .config import DEFAULT_API_VERSION
from .errors import DockerModemError
from .logger import BoundLogger, create_logger
from .parser import decode_error_body
from .request import CallDescriptor, ResponseKind, build_request
from .response import AdaptedResult, Streamed, adapt
from .status import UNEXPECTED_STATUS, Failure, Success, classify, is_success
from .transport import Transport, translate_error
from .types import DialResult


class Modem:
    """Sends call descriptors over a transport and settles each call once.

    ``dial`` returns a :class:`Success` whose body is the adapted result, or
    raises. Classified failures raise a ``DomainError``; anything that never
    reached status classification raises ``TransportError`` or
    ``ProtocolError``. The response is released on every path except when a
    live stream is handed to the caller.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        api_version: str | None = DEFAULT_API_VERSION,
        default_headers: Mapping[str, str] | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self.transport = transport
        self.api_version = api_version
        self._default_headers = dict(default_headers or {})
        self._logger = (logger or create_logger()).child("modem")

    async def dial(self, descriptor: CallDescriptor) -> Success:
        if descriptor.response is ResponseKind.WEBSOCKET:
            raise TypeError("websocket endpoints are opened with Modem.websocket()")
        request = build_request(
            descriptor,
            api_version=self.api_version,
            default_headers=self._default_headers,
        )
        log = self._logger.bind(call=f"{request.method} {request.path}")
        log.debug("-> %s", request.target)

        response = await self.transport.send(request)
        handed_off = False
        try:
            status = response.status_code
            if not is_success(descriptor.status_codes, status):
                body = decode_error_body(await response.aread())
                failure = classify(descriptor.status_codes, status, body)
                assert isinstance(failure, Failure)
                log.warn("<- %d %s", status, failure.tag)
                raise failure.to_error()

            adapted = await adapt(descriptor, response, logger=self._logger)
            handed_off = isinstance(adapted, Streamed)
            log.debug("<- %d %s", status, type(adapted).__name__)
            outcome = classify(descriptor.status_codes, status, adapted)
            assert isinstance(outcome, Success)
            return outcome
        except httpx.HTTPError as exc:
            raise translate_error(exc, self.transport.base_url) from exc
        finally:
            if not handed_off:
                await response.aclose()

    async def call(self, descriptor: CallDescriptor) -> Any:
        """Dial and unwrap the adapted value (JSON, bytes/text or stream)."""
        outcome = await self.dial(descriptor)
        result: AdaptedResult = outcome.body
        return result.value

    async def dial_safe(self, descriptor: CallDescriptor) -> DialResult[Any]:
        try:
            return DialResult(ok=True, data=await self.call(descriptor))
        except DockerModemError as exc:
            return DialResult(ok=False, error=exc)

    @asynccontextmanager
    async def websocket(self, descriptor: CallDescriptor) -> AsyncIterator[AsyncWebSocketSession]:
        """Open a websocket session (``/attach/ws``) and close it on exit.

        A refused upgrade is classified against the descriptor's status table
        like any other failed call.
        """
        request = build_request(
            descriptor,
            api_version=self.api_version,
            default_headers=self._default_headers,
        )
        log = self._logger.bind(call=f"WS {request.path}")
        log.debug("-> %s", request.target)
        async with AsyncExitStack() as stack:
            try:
                session = await stack.enter_async_context(self.transport.websocket(request))
            except WebSocketUpgradeError as exc:
                failure = classify(descriptor.status_codes, exc.response.status_code, _upgrade_body(exc.response))
                if not isinstance(failure, Failure):
                    failure = Failure(UNEXPECTED_STATUS, exc.response.status_code, None)
                log.warn("<- %d %s", failure.status, failure.tag)
                raise failure.to_error() from exc
            except httpx.HTTPError as exc:
                raise translate_error(exc, self.transport.base_url) from exc
            log.debug("<- 101 websocket")
            yield session

    async def aclose(self) -> None:
        await self.transport.aclose()


def _upgrade_body(response: httpx.Response) -> Any:
    try:
        return decode_error_body(response.content)
    except httpx.ResponseNotRead:
        return None


__all__ = ["Modem"]
