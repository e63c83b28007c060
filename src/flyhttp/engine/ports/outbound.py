"""Outbound port: network engine interface."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

from flyhttp.message import Request, Response

SuccessCallback = Callable[[Response], None]
FailureCallback = Callable[[BaseException], None]


@runtime_checkable
class EnginePort(Protocol):
    """Performs one request against the network.

    ``connect`` returns immediately. Exactly one of ``on_success`` or
    ``on_failure`` is invoked exactly once per call, on any thread.
    Engines never retry. Invoking both callbacks, or neither, breaks the
    contract; callers only get bounded waits by configuring a timeout.
    """

    def connect(
        self,
        request: Request,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None: ...
