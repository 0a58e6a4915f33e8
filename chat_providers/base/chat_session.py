"""Conversation session: ordered history plus one exchange at a time.

Each exchange walks ``IDLE -> SENDING -> STREAMING -> {COMPLETED, FAILED}``
and then returns to ``IDLE``. The session lock is held for the whole walk, so
two exchanges on one session never interleave: the second one is encoded
only after the first has committed, and therefore sees the first pair in its
history. Sessions share nothing mutable with each other.

History invariant: it grows only by a single ``extend`` of exactly one
``(user, assistant)`` pair, performed after the reply has been fully read and
post-processed. A failure at any stage (encoding, diagnostics, transport,
stream, cancellation) leaves history untouched, so the caller may retry the
same call.
"""

from __future__ import annotations

import enum
import logging
import sys
import threading
import uuid
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple, Union

from .cancellation import CancellationToken
from .diagnostics import write_request, write_response
from .errors import ProviderError
from .logging import LogContext, get_logger, normalized_log_event
from .models import ExchangeOptions, Message
from .streaming import decode_stream
from .transport import abort_response

if TYPE_CHECKING:
    from .chat_client import ChatClient


class ExchangeState(str, enum.Enum):
    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"


def _echo_delta(fragment: str) -> None:
    sys.stderr.write(fragment)
    sys.stderr.flush()


class ChatSession:
    """One logical conversation with a provider.

    Created by :meth:`ChatClient.new_session`; not meant to be instantiated
    directly.
    """

    def __init__(
        self,
        client: "ChatClient",
        system_prompt: str = "",
        initial_history: Iterable[Message] = (),
    ) -> None:
        self._client = client
        self._system_prompt = system_prompt
        self._history: List[Message] = list(initial_history)
        self._lock = threading.Lock()
        self._state = ExchangeState.IDLE
        self._id = uuid.uuid4().hex[:12]
        self._ctx = LogContext(
            provider=client.codec.provider_name,
            model=client.config.model_name,
            session_id=self._id,
        )
        self._logger = get_logger("chat_providers.session")

    @property
    def session_id(self) -> str:
        return self._id

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    @property
    def state(self) -> ExchangeState:
        """Current phase of the in-flight exchange (``IDLE`` when none)."""
        return self._state

    def history(self) -> Tuple[str, List[Message]]:
        """Return ``(system_prompt, copy of the message history)``.

        The copy is taken under the session lock, so it never reflects a
        half-finished exchange.
        """
        with self._lock:
            return self._system_prompt, list(self._history)

    def exchange(
        self,
        message: Union[Message, str],
        options: Optional[ExchangeOptions] = None,
        *,
        token: Optional[CancellationToken] = None,
    ) -> Message:
        """Send ``message`` and return the assistant's reply.

        Parameters:
            message: A ``Message`` or plain text (sent as a user message).
            options: Per-exchange generation and diagnostics options.
            token: Cancellation token / deadline bounding the whole exchange.

        Raises:
            ProviderError: Any failure (``ProtocolError``, ``TransportError``,
                ``StreamError``, ``CancelledError``...). History is unchanged.
        """
        msg = message if isinstance(message, Message) else Message.user(message)
        opts = options or ExchangeOptions()
        token = token or CancellationToken()

        with self._lock:
            self._state = ExchangeState.SENDING
            normalized_log_event(
                self._logger,
                "exchange.start",
                self._ctx,
                phase="start",
                level=logging.DEBUG,
                history=len(self._history),
                has_schema=opts.response_format is not None,
                temperature=opts.temperature,
                max_tokens=opts.max_tokens,
            )
            try:
                reply = self._run(msg, opts, token)
                self._history.extend((msg, reply))
                self._state = ExchangeState.COMPLETED
            except ProviderError as e:
                self._state = ExchangeState.FAILED
                normalized_log_event(
                    self._logger,
                    "exchange.error",
                    self._ctx,
                    phase="finalize",
                    error_code=e.code.value,
                    level=logging.WARNING,
                    emitted=False,
                    error=e.message,
                )
                raise
            finally:
                self._state = ExchangeState.IDLE

            normalized_log_event(
                self._logger,
                "exchange.commit",
                self._ctx,
                phase="finalize",
                level=logging.DEBUG,
                emitted=True,
                history=len(self._history),
                chars=len(reply.content),
            )
            return reply

    def _run(self, msg: Message, opts: ExchangeOptions, token: CancellationToken) -> Message:
        client = self._client
        codec = client.codec
        body = codec.encode(
            model=client.config.model_name,
            system_prompt=self._system_prompt,
            history=tuple(self._history),
            message=msg,
            options=opts,
        )
        write_request(opts.diagnostics_dir, body)

        response = client.transport.execute(body, token)
        self._state = ExchangeState.STREAMING
        # A cancel from another thread shuts the socket down, which unblocks a pending read.
        unregister = token.on_cancel(lambda: abort_response(response))
        try:
            result = decode_stream(
                response.iter_lines(),
                codec.decode_event,
                token=token,
                on_delta=_echo_delta if client.config.debug else None,
                ctx=self._ctx,
            )
        finally:
            unregister()
            response.close()

        if client.config.debug and result.text:
            sys.stderr.write("\n")
        write_response(opts.diagnostics_dir, result.raw)
        return Message.assistant(codec.post_process(result.text))


__all__ = ["ChatSession", "ExchangeState"]
