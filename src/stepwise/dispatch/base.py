"""Dispatcher interface."""

from __future__ import annotations

from typing import Protocol

from stepwise.core.responses import Response
from stepwise.dispatch.request import Request


class Dispatcher(Protocol):
    """Turns one request into one response, live or faked."""

    def dispatch(self, request: Request) -> Response: ...
