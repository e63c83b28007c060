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
"""Immutable HTTP response description."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus

from flyhttp.kernel.exceptions import InvalidArgumentException
from flyhttp.message.request import HeaderPairs, find_header, normalize_headers


@dataclass(frozen=True)
class Response:
    """An HTTP response: status line, headers and body.

    ``reason`` defaults to the standard phrase for ``status`` when known.
    """

    status: int
    reason: str = ""
    headers: HeaderPairs = ()
    body: bytes = b""
    http_version: str = "HTTP/1.1"

    def __post_init__(self) -> None:
        if isinstance(self.status, bool) or not isinstance(self.status, int) or not 100 <= self.status <= 599:
            raise InvalidArgumentException(f"invalid status code: {self.status!r}")
        if not self.reason:
            try:
                object.__setattr__(self, "reason", HTTPStatus(self.status).phrase)
            except ValueError:
                pass  # non-standard code, no phrase
        object.__setattr__(self, "headers", normalize_headers(self.headers))
        if isinstance(self.body, str):
            object.__setattr__(self, "body", self.body.encode("utf-8"))

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def header(self, name: str) -> str | None:
        return find_header(self.headers, name)

    @property
    def status_line(self) -> str:
        return f"{self.http_version} {self.status} {self.reason}".rstrip()
