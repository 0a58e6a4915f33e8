"""End-to-end exchange behaviour over a mocked provider.

Covers:
- A successful exchange appends exactly ``(message, reply)`` to history.
- Any failure (transport, stream, cancellation, encoding) leaves history
  unchanged, value for value.
- Concurrent exchanges on one session never interleave.
- Diagnostics files and debug echo.
"""
from __future__ import annotations

import json
import threading
import time
from typing import Iterator, List

import httpx
import pytest

from chat_providers.anthropic import new_client as new_anthropic_client
from chat_providers.base.cancellation import CancellationToken, CancelledError
from chat_providers.base.chat_session import ExchangeState
from chat_providers.base.errors import ProtocolError, StreamError, TransportError
from chat_providers.base.chat_client import with_api_key, with_debug, with_model
from chat_providers.base.models import ExchangeOptions, JsonSchema, Message
from chat_providers.openai import new_client as new_openai_client
from chat_providers.tests.utils import anthropic_sse, openai_chunk, openai_sse, sse_response

BASE_URL = "https://llm.example.test/v1"


def _last_user_content(request: httpx.Request) -> str:
    body = json.loads(request.content)
    return body["messages"][-1]["content"]


@pytest.fixture()
def echo_requests() -> List[dict]:
    return []


@pytest.fixture()
def echo_client(mock_http, record_sleep, echo_requests):
    """OpenAI-compatible client whose server replies ``re:<last user message>``."""

    def handler(request: httpx.Request) -> httpx.Response:
        echo_requests.append(json.loads(request.content))
        return sse_response(openai_sse("re:", _last_user_content(request)))

    return new_openai_client(BASE_URL, with_model("gpt-test"), http_client=mock_http(handler), sleep=record_sleep)


def test_successful_exchange_appends_pair(echo_client):
    prior = [Message.user("earlier"), Message.assistant("ok")]
    session = echo_client.new_session("Be brief.", prior)

    reply = session.exchange(Message.user("ping"))

    assert reply == Message.assistant("re:ping")  # nosec B101 - asserts are appropriate in unit tests
    system, history = session.history()
    assert system == "Be brief."  # nosec B101
    assert history == prior + [Message.user("ping"), Message.assistant("re:ping")]  # nosec B101
    assert session.state is ExchangeState.IDLE  # nosec B101


def test_initial_history_is_copied(echo_client):
    prior = [Message.user("a")]
    session = echo_client.new_session("", prior)
    session.exchange("b")
    assert prior == [Message.user("a")]  # nosec B101 - caller's list not aliased


def test_plain_string_is_sent_as_user_message(echo_client, echo_requests):
    session = echo_client.new_session()
    session.exchange("hello")
    assert echo_requests[0]["messages"] == [{"role": "user", "content": "hello"}]  # nosec B101


def test_history_is_sent_on_next_exchange(echo_client, echo_requests):
    session = echo_client.new_session("sys")
    session.exchange("one")
    session.exchange("two")
    assert echo_requests[1]["messages"] == [  # nosec B101
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "one"},
        {"role": "assistant", "content": "re:one"},
        {"role": "user", "content": "two"},
    ]


def test_transport_failure_leaves_history_unchanged(mock_http, record_sleep):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, text="bad key")

    client = new_openai_client(BASE_URL, with_model("m"), http_client=mock_http(handler), sleep=record_sleep)
    session = client.new_session("sys", [Message.user("q"), Message.assistant("a")])
    before = session.history()

    with pytest.raises(TransportError) as ei:
        session.exchange("again")

    assert ei.value.status_code == 401  # nosec B101
    assert session.history() == before  # nosec B101
    assert session.state is ExchangeState.IDLE  # nosec B101


def test_retry_exhaustion_leaves_history_unchanged(mock_http, record_sleep, sleeps):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="overloaded")

    client = new_openai_client(BASE_URL, with_model("m"), http_client=mock_http(handler), sleep=record_sleep)
    session = client.new_session()
    with pytest.raises(TransportError):
        session.exchange("x")
    assert session.history() == ("", [])  # nosec B101
    assert len(sleeps) == 4  # nosec B101


def test_stream_failure_discards_partial_text(mock_http, record_sleep):
    def body() -> Iterator[bytes]:
        yield (openai_chunk("partial") + "\n\n").encode()
        raise httpx.ReadError("peer reset")

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body())

    client = new_openai_client(BASE_URL, with_model("m"), http_client=mock_http(handler), sleep=record_sleep)
    session = client.new_session()
    with pytest.raises(StreamError):
        session.exchange("x")
    assert session.history() == ("", [])  # nosec B101


def test_cancel_mid_stream_leaves_history_unchanged(mock_http, record_sleep):
    token = CancellationToken()

    def body() -> Iterator[bytes]:
        yield (openai_chunk("A") + "\n\n").encode()
        token.cancel("user abort")
        yield (openai_chunk("B") + "\n\n").encode()
        yield b"data: [DONE]\n\n"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body())

    client = new_openai_client(BASE_URL, with_model("m"), http_client=mock_http(handler), sleep=record_sleep)
    session = client.new_session("", [Message.user("old")])
    before = session.history()

    with pytest.raises(CancelledError):
        session.exchange("x", token=token)
    assert session.history() == before  # nosec B101


def test_encoding_failure_leaves_history_unchanged(echo_client, echo_requests):
    session = echo_client.new_session()
    with pytest.raises(ProtocolError):
        session.exchange(Message.user(object()))  # type: ignore[arg-type]
    assert session.history() == ("", [])  # nosec B101
    assert echo_requests == []  # nosec B101


def test_failed_exchange_can_be_retried(mock_http, record_sleep):
    outcomes = iter([401])

    def handler(request: httpx.Request) -> httpx.Response:
        status = next(outcomes, 200)
        if status != 200:
            return httpx.Response(status, text="denied")
        return sse_response(openai_sse("fine"))

    client = new_openai_client(BASE_URL, with_model("m"), http_client=mock_http(handler), sleep=record_sleep)
    session = client.new_session()
    with pytest.raises(TransportError):
        session.exchange("same")
    assert session.exchange("same").content == "fine"  # nosec B101
    assert session.history()[1] == [Message.user("same"), Message.assistant("fine")]  # nosec B101


def test_concurrent_exchanges_do_not_interleave(mock_http, record_sleep):
    requests: List[dict] = []
    first_in_flight = threading.Event()
    release_first = threading.Event()

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(json.loads(request.content))
        if len(requests) == 1:
            first_in_flight.set()
            release_first.wait(5)
        return sse_response(openai_sse("re:", _last_user_content(request)))

    client = new_openai_client(BASE_URL, with_model("m"), http_client=mock_http(handler), sleep=record_sleep)
    session = client.new_session()
    errors: List[BaseException] = []

    def run(text: str) -> None:
        try:
            session.exchange(text)
        except BaseException as e:  # pragma: no cover - surfaced below
            errors.append(e)

    t1 = threading.Thread(target=run, args=("first",))
    t1.start()
    assert first_in_flight.wait(5)  # nosec B101
    t2 = threading.Thread(target=run, args=("second",))
    t2.start()
    time.sleep(0.1)
    assert len(requests) == 1  # nosec B101 - second exchange waits for the session lock
    release_first.set()
    t1.join(5)
    t2.join(5)

    assert errors == []  # nosec B101
    assert requests[1]["messages"] == [  # nosec B101
        {"role": "user", "content": "first"},
        {"role": "assistant", "content": "re:first"},
        {"role": "user", "content": "second"},
    ]
    assert session.history()[1] == [  # nosec B101
        Message.user("first"),
        Message.assistant("re:first"),
        Message.user("second"),
        Message.assistant("re:second"),
    ]


def test_independent_sessions_run_concurrently(mock_http, record_sleep):
    both_in_flight = threading.Barrier(2, timeout=5)

    def handler(request: httpx.Request) -> httpx.Response:
        both_in_flight.wait()
        return sse_response(openai_sse("ok"))

    client = new_openai_client(BASE_URL, with_model("m"), http_client=mock_http(handler), sleep=record_sleep)
    sessions = [client.new_session(), client.new_session()]
    threads = [threading.Thread(target=s.exchange, args=("hi",)) for s in sessions]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)
    assert [len(s.history()[1]) for s in sessions] == [2, 2]  # nosec B101


def test_state_reports_sending_while_request_in_flight(mock_http, record_sleep):
    in_flight = threading.Event()
    release = threading.Event()

    def handler(request: httpx.Request) -> httpx.Response:
        in_flight.set()
        release.wait(5)
        return sse_response(openai_sse("done"))

    client = new_openai_client(BASE_URL, with_model("m"), http_client=mock_http(handler), sleep=record_sleep)
    session = client.new_session()
    worker = threading.Thread(target=session.exchange, args=("hi",))
    worker.start()
    assert in_flight.wait(5)  # nosec B101
    assert session.state is ExchangeState.SENDING  # nosec B101
    release.set()
    worker.join(5)
    assert len(session.history()[1]) == 2  # nosec B101


def test_anthropic_exchange_strips_fence(mock_http, record_sleep):
    seen: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return sse_response(anthropic_sse("```json\n", '{"a":1}', "\n```"))

    client = new_anthropic_client(
        "https://api.anthropic.test/v1",
        with_model("claude-test"),
        with_api_key("sk-ant"),
        http_client=mock_http(handler),
        sleep=record_sleep,
    )
    session = client.new_session("sys")
    reply = session.exchange("give json", ExchangeOptions(response_format=JsonSchema(name="obj")))

    assert reply.content == '{"a":1}'  # nosec B101
    assert str(seen[0].url) == "https://api.anthropic.test/v1/messages"  # nosec B101
    assert seen[0].headers["x-api-key"] == "sk-ant"  # nosec B101
    assert session.history()[1][-1] == Message.assistant('{"a":1}')  # nosec B101


def test_diagnostics_files_written(echo_client, tmp_path):
    session = echo_client.new_session()
    diag = tmp_path / "diag"
    session.exchange("hello", ExchangeOptions(diagnostics_dir=diag))

    request_bytes = (diag / "request.json").read_bytes()
    assert json.loads(request_bytes)["messages"][-1]["content"] == "hello"  # nosec B101
    raw = (diag / "response.json").read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["choices"][0]["delta"].get("content") for line in raw] == [  # nosec B101
        "re:",
        "hello",
        None,
    ]


def test_debug_echoes_deltas_to_stderr(mock_http, record_sleep, capsys):
    def handler(request: httpx.Request) -> httpx.Response:
        return sse_response(openai_sse("Hel", "lo"))

    client = new_openai_client(
        BASE_URL, with_model("m"), with_debug(True), http_client=mock_http(handler), sleep=record_sleep
    )
    client.new_session().exchange("hi")
    assert "Hello\n" in capsys.readouterr().err  # nosec B101


def test_sessions_sharing_a_client_do_not_share_cookies(mock_http, record_sleep):
    cookies: List[object] = []

    def handler(request: httpx.Request) -> httpx.Response:
        cookies.append(request.headers.get("cookie"))
        if len(cookies) == 1:
            return httpx.Response(503, text="busy", headers={"set-cookie": "aff=node7"})
        return sse_response(openai_sse("ok"))

    client = new_openai_client(BASE_URL, with_model("m"), http_client=mock_http(handler), sleep=record_sleep)
    assert client.new_session().exchange("a").content == "ok"  # nosec B101
    assert client.new_session().exchange("b").content == "ok"  # nosec B101
    assert cookies == [None, "aff=node7", None]  # nosec B101
