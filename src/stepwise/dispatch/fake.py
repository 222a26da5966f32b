"""Deterministic stand-in for a live provider."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, Union

from stepwise.core.errors import ErrorKind, ExhaustedFakeQueueError, StepwiseError
from stepwise.core.responses import EmbeddingsResponse, Response, StructuredResponse, TextResponse
from stepwise.core.steps import Step
from stepwise.core.telemetry import span
from stepwise.dispatch.request import Request

logger = logging.getLogger(__name__)

FakeEntry = Union[TextResponse, StructuredResponse, EmbeddingsResponse, Step, Sequence[Step], Exception]


def _to_queued(entry: Any, position: int) -> Response | Exception:
    if isinstance(entry, (TextResponse, StructuredResponse, EmbeddingsResponse, Exception)):
        return entry
    if isinstance(entry, Step):
        return TextResponse(steps=(entry,))
    if isinstance(entry, Sequence) and not isinstance(entry, (str, bytes)):
        if not all(isinstance(item, Step) for item in entry):
            raise StepwiseError(
                ErrorKind.INVALID_INPUT,
                f"Fake entry #{position} mixes steps with other values.",
            )
        return TextResponse.from_steps(entry)
    raise StepwiseError(
        ErrorKind.INVALID_INPUT,
        f"Fake entry #{position} must be a response, a step, a step sequence or an exception, "
        f"got {type(entry).__name__}.",
    )


class FakeDispatcher:
    """Replays queued responses in order and records every request.

    Queue consumption is strictly FIFO and requests are logged in dispatch
    order before the queue is consulted, so a failing dispatch is still
    visible to assertions. Not thread-safe.
    """

    def __init__(self, responses: Iterable[FakeEntry] = ()) -> None:
        self._queue: deque[Response | Exception] = deque()
        self._requests: list[Request] = []
        self.fake(responses)

    def fake(self, responses: Iterable[FakeEntry]) -> FakeDispatcher:
        queued = [_to_queued(entry, position) for position, entry in enumerate(responses)]
        self._queue = deque(queued)
        self._requests = []
        return self

    def queue(self, *responses: FakeEntry) -> FakeDispatcher:
        start = len(self._queue)
        self._queue.extend(_to_queued(entry, start + offset) for offset, entry in enumerate(responses))
        return self

    @property
    def requests(self) -> list[Request]:
        return list(self._requests)

    @property
    def pending(self) -> int:
        return len(self._queue)

    def dispatch(self, request: Request) -> Response:
        self._requests.append(request)
        call_number = len(self._requests)
        logger.debug("fake dispatch #%d %s:%s (%s)", call_number, request.provider, request.model, request.kind)
        with span("stepwise.fake.dispatch", provider=request.provider, model=request.model, kind=request.kind):
            if not self._queue:
                raise ExhaustedFakeQueueError(request.provider, request.model, call_number)
            item = self._queue.popleft()
            if isinstance(item, Exception):
                raise item
            return item

    def assert_call_count(self, count: int) -> None:
        actual = len(self._requests)
        if actual != count:
            raise AssertionError(f"Expected {count} dispatched request(s), got {actual}.")

    def assert_nothing_sent(self) -> None:
        self.assert_call_count(0)

    def assert_prompt(self, prompt: str) -> None:
        if any(request.prompt == prompt for request in self._requests):
            return
        seen = [request.prompt for request in self._requests]
        raise AssertionError(f"No request was sent with prompt {prompt!r}; prompts sent: {seen!r}.")

    def assert_request(self, predicate: Callable[[list[Request]], Any]) -> None:
        """Run ``predicate`` over the full ordered log; an explicit ``False`` fails."""
        if predicate(list(self._requests)) is False:
            raise AssertionError("Request predicate returned False.")

    def assert_provider_config(self, config: Mapping[str, Any]) -> None:
        if not self._requests:
            raise AssertionError("No request was dispatched, so no provider config was captured.")
        captured = dict(self._requests[-1].provider_config)
        expected = dict(config)
        if captured != expected:
            raise AssertionError(f"Provider config mismatch: expected {expected!r}, captured {captured!r}.")


def fake(responses: Iterable[FakeEntry] = ()) -> FakeDispatcher:
    """Create a FakeDispatcher primed with ``responses``."""
    return FakeDispatcher(responses)
