"""Asynchronous API client for the ChatSecure push server.

Network and HTTP failures are reported with the HTTP status code (100-500)
as the error code. Internal failures use codes of 600 and above, see
``errors.ErrorCode``.

Every operation returns a ``Result`` and, when a ``completion`` callback is
passed, submits ``completion(value, error)`` to the callback executor. The
default executor is a single worker thread, so completions run one at a time
and never on the event loop thread.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Final, Generic, NamedTuple, TypeVar

import aiohttp

from .endpoints import (
    AccountEndpoint,
    APIEndpoint,
    APIRequest,
    DeviceEndpoint,
    MessageEndpoint,
    TokenEndpoint,
)
from .errors import (
    ChatSecurePushConnectionError,
    ChatSecurePushError,
    ChatSecurePushTimeout,
    InvalidRequestError,
)
from .models import Account, Device, DeviceKind, Message, Token
from .protocol import JSON_CONTENT_TYPE

_LOGGER = logging.getLogger(__name__)

ACCEPT_ENCODING: Final = "gzip;q=1.0,compress;q=0.5"
CALLBACK_THREAD_PREFIX: Final = "chatsecure-push-callback"

T = TypeVar("T")

Parser = Callable[[bytes | None, int | None, BaseException | None], T]
Completion = Callable[[T | None, ChatSecurePushError | None], None]


class Result(NamedTuple, Generic[T]):
    """Outcome of one API call: a value or an error, never both."""

    value: T | None
    error: ChatSecurePushError | None

    @property
    def ok(self) -> bool:
        return self.error is None


def _log_callback_failure(future: Future[Any]) -> None:
    if future.cancelled():
        return
    err = future.exception()
    if err is not None:
        _LOGGER.error("Completion callback raised", exc_info=err)


def _error_only(
    completion: Callable[[ChatSecurePushError | None], None],
    _value: None,
    error: ChatSecurePushError | None,
) -> None:
    completion(error)


class ChatSecurePushClient:
    """Client for the ChatSecure push server REST API.

    Usage:
        async with ChatSecurePushClient("https://push.example.com/api/v1/") as client:
            result = await client.register_new_user("alice", "secret")
            client.account = result.value
            await client.register_device(apns_token, name="phone")

    ``account`` is read by concurrent calls but never written by the client.
    Callers replacing it while calls are in flight must serialize that
    themselves.
    """

    def __init__(
        self,
        base_url: str,
        *,
        session: aiohttp.ClientSession | None = None,
        account: Account | None = None,
        callback_executor: Executor | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API URL in the form ``https://example.com/api/v1/``
            session: Shared aiohttp session. Created on first use and closed
                by ``close()`` when omitted.
            account: Existing account, possibly restored from disk, whose
                token authenticates calls.
            callback_executor: Executor that runs completion callbacks.
                Defaults to a dedicated single-thread executor.
            timeout: Per-request timeout. When None the session's own
                configuration applies.
        """
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.account = account

        self._session = session
        self._owns_session = session is None
        self._timeout = timeout
        self._closed = False

        if callback_executor is None:
            callback_executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix=CALLBACK_THREAD_PREFIX
            )
            self._owns_executor = True
        else:
            self._owns_executor = False
        self.callback_executor = callback_executor

        self._accounts = AccountEndpoint(self.base_url)
        self._devices = {
            kind: DeviceEndpoint(self.base_url, kind) for kind in DeviceKind
        }
        self._tokens = TokenEndpoint(self.base_url)
        self._messages = MessageEndpoint(self.base_url)
        self._pubsub = APIEndpoint(self.base_url)

    async def __aenter__(self) -> ChatSecurePushClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Release the session and executor this client created.

        Calls made afterwards fail with ``InvalidRequestError`` and are not
        sent.
        """
        self._closed = True
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
        if self._owns_executor:
            # Queued completions still run
            self.callback_executor.shutdown(wait=False)

    @property
    def message_endpoint(self) -> str:
        """URL of this server's message endpoint."""
        return self._messages.default_url

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    async def register_new_user(
        self,
        username: str,
        password: str,
        email: str | None = None,
        *,
        completion: Completion[Account] | None = None,
    ) -> Result[Account]:
        """Create a new user on the server.

        The returned account holds the token for later calls; assign it to
        ``account`` to authenticate them. An empty username or password is
        rejected with ``InvalidRequestError`` before anything is sent.
        """
        return await self._call(
            lambda: self._accounts.post_request(username, password, email),
            self._accounts.account_from_response,
            completion=completion,
        )

    # -------------------------------------------------------------------------
    # Devices
    # -------------------------------------------------------------------------

    async def register_device(
        self,
        token: str,
        name: str | None = None,
        device_id: str | None = None,
        *,
        kind: DeviceKind = DeviceKind.APNS,
        completion: Completion[Device] | None = None,
    ) -> Result[Device]:
        """Register a device by its platform push token."""
        endpoint = self._devices[kind]
        return await self._call(
            lambda: endpoint.post_request(token, name, device_id),
            endpoint.device_from_response,
            completion=completion,
        )

    async def update_device(
        self,
        server_id: str,
        token: str,
        name: str | None = None,
        device_id: str | None = None,
        *,
        kind: DeviceKind = DeviceKind.APNS,
        completion: Completion[Device] | None = None,
    ) -> Result[Device]:
        """Update an existing device. Only fields that are not None are sent."""
        endpoint = self._devices[kind]
        return await self._call(
            lambda: endpoint.put_request(server_id, token, name, device_id),
            endpoint.device_from_response,
            completion=completion,
        )

    # -------------------------------------------------------------------------
    # Whitelist tokens
    # -------------------------------------------------------------------------

    async def create_token(
        self,
        device_id: str,
        name: str | None = None,
        *,
        kind: DeviceKind = DeviceKind.APNS,
        completion: Completion[Token] | None = None,
    ) -> Result[Token]:
        """Create a whitelist token that lets others push to ``device_id``."""
        return await self._call(
            lambda: self._tokens.post_request(device_id, name, kind),
            self._tokens.token_from_response,
            completion=completion,
        )

    async def list_tokens(
        self,
        token_id: str | None = None,
        *,
        completion: Completion[list[Token]] | None = None,
    ) -> Result[list[Token]]:
        """Fetch all tokens, or only ``token_id`` as a list of at most one."""
        return await self._call(
            lambda: self._tokens.get_request(token_id),
            functools.partial(
                self._tokens.tokens_from_response, scoped=token_id is not None
            ),
            completion=completion,
        )

    async def revoke_token(
        self,
        token_id: str,
        *,
        completion: Callable[[ChatSecurePushError | None], None] | None = None,
    ) -> Result[None]:
        """Delete a token so it can no longer be used to send messages."""

        def parse(
            data: bytes | None, status: int | None, error: BaseException | None
        ) -> None:
            self._tokens.check_response(status, error, data)

        deliver: Completion[None] | None = None
        if completion is not None:
            deliver = functools.partial(_error_only, completion)

        return await self._call(
            lambda: self._tokens.delete_request(token_id),
            parse,
            completion=deliver,
        )

    # -------------------------------------------------------------------------
    # Messages and pubsub
    # -------------------------------------------------------------------------

    async def send_message(
        self,
        message: Message,
        *,
        completion: Completion[Message] | None = None,
    ) -> Result[Message]:
        """Send a push message.

        Goes to ``message.url`` when set, otherwise to this server's message
        endpoint. No account token is attached; the whitelist token in the
        message authorizes it.
        """
        return await self._call(
            lambda: self._messages.post_request(message),
            functools.partial(self._messages.message_from_response, url=message.url),
            authenticate=False,
            completion=completion,
        )

    async def get_pubsub_endpoint(
        self, *, completion: Completion[str] | None = None
    ) -> Result[str]:
        """Fetch the XMPP pubsub service JID (XEP-0357) of the server."""
        return await self._call(
            self._pubsub.pubsub_request,
            self._pubsub.parse_pubsub,
            authenticate=False,
            completion=completion,
        )

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    async def _call(
        self,
        build: Callable[[], APIRequest],
        parse: Parser[T],
        *,
        authenticate: bool = True,
        completion: Completion[T] | None = None,
    ) -> Result[T]:
        try:
            if self._closed:
                raise InvalidRequestError("Client is closed")
            request = build()
        except ChatSecurePushError as err:
            _LOGGER.debug("Request not sent: %s", err)
            return self._deliver(Result(None, err), completion)

        data: bytes | None = None
        status: int | None = None
        transport_error: ChatSecurePushError | None = None
        try:
            data, status = await self._send(request, authenticate=authenticate)
        except ChatSecurePushError as err:
            transport_error = err

        try:
            value = parse(data, status, transport_error)
        except ChatSecurePushError as err:
            return self._deliver(Result(None, err), completion)
        return self._deliver(Result(value, None), completion)

    async def _send(
        self, request: APIRequest, *, authenticate: bool = True
    ) -> tuple[bytes, int]:
        """Issue ``request`` on the shared session.

        Raises:
            ChatSecurePushTimeout: If the request times out
            ChatSecurePushConnectionError: If the network request fails
        """
        headers = dict(request.headers)
        headers["Accept-Encoding"] = ACCEPT_ENCODING
        headers["Accept"] = JSON_CONTENT_TYPE
        token = self.account.token if self.account is not None else None
        if authenticate and token:
            headers["Authorization"] = f"Token {token}"

        kwargs: dict[str, Any] = {}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        _LOGGER.debug("%s %s", request.method, request.url)
        try:
            async with self._get_session().request(
                request.method.value,
                request.url,
                data=request.body,
                headers=headers,
                **kwargs,
            ) as resp:
                data = await resp.read()
                _LOGGER.debug(
                    "%s %s -> %s (%d bytes)",
                    request.method,
                    request.url,
                    resp.status,
                    len(data),
                )
                return data, resp.status
        except TimeoutError as err:
            _LOGGER.warning("%s %s timed out", request.method, request.url)
            raise ChatSecurePushTimeout(
                f"{request.method} {request.url} timed out"
            ) from err
        except aiohttp.ClientError as err:
            _LOGGER.warning("%s %s failed: %s", request.method, request.url, err)
            raise ChatSecurePushConnectionError(
                f"{request.method} {request.url} failed"
            ) from err

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    def _deliver(
        self, result: Result[T], completion: Completion[T] | None
    ) -> Result[T]:
        if completion is None:
            return result
        try:
            future = self.callback_executor.submit(
                completion, result.value, result.error
            )
        except RuntimeError as err:
            # Executor already shut down
            _LOGGER.error("Completion callback not scheduled: %s", err)
            return result
        future.add_done_callback(_log_callback_failure)
        return result
