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
"""Immutable HTTP request description."""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from flyhttp.kernel.exceptions import InvalidArgumentException

# RFC 7230 token
_METHOD_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")

HeaderPairs = tuple[tuple[str, str], ...]


class Method:
    """Standard request method literals."""

    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    CONNECT = "CONNECT"


def normalize_headers(headers: Mapping[str, str] | Iterable[tuple[str, str]] | None) -> HeaderPairs:
    """Freeze a mapping or a sequence of pairs into a tuple of ``(name, value)`` pairs."""
    if headers is None:
        return ()
    items = headers.items() if isinstance(headers, Mapping) else headers
    pairs: list[tuple[str, str]] = []
    for name, value in items:
        if not isinstance(name, str) or not name:
            raise InvalidArgumentException(f"invalid header name: {name!r}")
        pairs.append((name, str(value)))
    return tuple(pairs)


def find_header(headers: HeaderPairs, name: str) -> str | None:
    """Case-insensitive lookup of the first header named *name*."""
    lowered = name.lower()
    for key, value in headers:
        if key.lower() == lowered:
            return value
    return None


@dataclass(frozen=True)
class Request:
    """An HTTP request: method, target URL, headers and optional body.

    Headers may be passed as a mapping or as pairs; they are stored as a
    tuple of pairs so the request stays hashable and immutable.
    """

    method: str
    url: str
    headers: HeaderPairs = ()
    body: bytes | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.method, str) or not _METHOD_RE.fullmatch(self.method):
            raise InvalidArgumentException(f"invalid method: {self.method!r}")
        if not isinstance(self.url, str) or not self.url.strip():
            raise InvalidArgumentException(f"invalid url: {self.url!r}")
        object.__setattr__(self, "headers", normalize_headers(self.headers))
        if isinstance(self.body, str):
            object.__setattr__(self, "body", self.body.encode("utf-8"))
        elif self.body is not None and not isinstance(self.body, bytes):
            raise InvalidArgumentException(f"body must be bytes or str, got {type(self.body).__name__}")

    def header(self, name: str) -> str | None:
        return find_header(self.headers, name)

    def with_header(self, name: str, value: str) -> Request:
        """Return a copy with *name* set to *value*, replacing existing values."""
        lowered = name.lower()
        kept = tuple((k, v) for k, v in self.headers if k.lower() != lowered)
        return dataclasses.replace(self, headers=kept + ((name, value),))

    def with_body(self, body: bytes | str | None) -> Request:
        return dataclasses.replace(self, body=body)  # type: ignore[arg-type]

    def __str__(self) -> str:
        return f"{self.method} {self.url}"
