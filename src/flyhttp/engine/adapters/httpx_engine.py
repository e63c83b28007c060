# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""httpx-based network engine adapter."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import httpx
import structlog

from flyhttp.engine.ports.outbound import FailureCallback, SuccessCallback
from flyhttp.kernel.exceptions import EngineException, ExternalServiceException, GatewayTimeoutException
from flyhttp.message import Request, Response

logger = structlog.get_logger("flyhttp.engine")


class HttpxEngine:
    """Engine backed by a shared ``httpx.Client`` and an owned worker pool.

    ``connect`` hands the exchange to the pool and returns immediately;
    callbacks run on a pool thread. httpx owns connection pooling and TLS.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: timedelta = timedelta(seconds=30),
        headers: dict[str, str] | None = None,
        max_workers: int = 8,
        client: httpx.Client | None = None,
    ) -> None:
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout.total_seconds(),
            headers=headers or {},
        )
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="flyhttp-engine")
        self._closed = False

    def connect(
        self,
        request: Request,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        self._executor.submit(self._exchange, request, on_success, on_failure)

    def _exchange(self, request: Request, on_success: SuccessCallback, on_failure: FailureCallback) -> None:
        try:
            response = self._send(request)
        except httpx.TimeoutException as exc:
            on_failure(self._failure(GatewayTimeoutException, "ENGINE_TIMEOUT", request, exc))
            return
        except Exception as exc:
            on_failure(self._failure(EngineException, "ENGINE_FAILURE", request, exc))
            return
        on_success(response)

    def _send(self, request: Request) -> Response:
        raw = self._client.request(
            request.method,
            request.url,
            headers=list(request.headers),
            content=request.body,
        )
        return Response(
            status=raw.status_code,
            reason=raw.reason_phrase,
            headers=tuple(raw.headers.multi_items()),
            body=raw.content,
            http_version=raw.http_version,
        )

    @staticmethod
    def _failure(
        exc_type: type[ExternalServiceException],
        code: str,
        request: Request,
        cause: Exception,
    ) -> Exception:
        logger.debug("engine.failure", method=request.method, url=request.url, error=repr(cause))
        failure = exc_type(
            f"{request.method} {request.url} failed: {cause}",
            code=code,
            context={"method": request.method, "url": request.url},
        )
        failure.__cause__ = cause
        return failure

    def start(self) -> None:
        """No-op -- httpx client is ready after construction."""

    def stop(self) -> None:
        """Wait for in-flight exchanges, then close the pool and the client."""
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=True)
        self._client.close()

    def close(self) -> None:
        self.stop()

    def __enter__(self) -> HttpxEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
