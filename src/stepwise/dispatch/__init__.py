"""Dispatchers: live provider round-trips and the test fake."""

from stepwise.dispatch.base import Dispatcher
from stepwise.dispatch.fake import FakeDispatcher, FakeEntry, fake
from stepwise.dispatch.live import LiveDispatcher
from stepwise.dispatch.request import Request, resolve_model_provider

__all__ = [
    "Dispatcher",
    "FakeDispatcher",
    "FakeEntry",
    "LiveDispatcher",
    "Request",
    "fake",
    "resolve_model_provider",
]
