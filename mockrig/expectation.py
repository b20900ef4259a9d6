"""Expectation descriptors and MockServer JSON builders.

An Expectation is built client-side from the inputs to ``mock()`` and
echoed back so the caller can hand it to ``verify()``. It is not an
identifier known to the mock server.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
ONLY_MATCHING_FIELDS = "ONLY_MATCHING_FIELDS"


def to_json(value: Any) -> str:
    """Serialize like JavaScript's JSON.stringify: no whitespace."""
    return json.dumps(value, separators=(",", ":"))


def has_body(body: Any) -> bool:
    """Whether a request body should be matched at all.

    None and empty scalars ("", 0, False) mean "any body". Containers
    always count, so ``{}`` still produces a matcher.
    """
    if body is None:
        return False
    if isinstance(body, (str, int, float)):
        return bool(body)
    return True


def json_body_matcher(body: Any) -> dict[str, str]:
    """Partial JSON body matcher.

    The received body must contain the given fields with equal values
    and may contain others.
    """
    return {"type": "JSON", "json": to_json(body), "matchType": ONLY_MATCHING_FIELDS}


def header_multimap(headers: Mapping[str, Any]) -> dict[str, list[str]]:
    """Render headers as MockServer's ``{name: [values]}`` form."""
    rendered: dict[str, list[str]] = {}
    for name, value in headers.items():
        if isinstance(value, (list, tuple)):
            rendered[name] = [str(v) for v in value]
        else:
            rendered[name] = [str(value)]
    return rendered


@dataclass(frozen=True)
class Expectation:
    """What a registered request should look like.

    Attributes:
        method: HTTP method of the expected request.
        path: Request path.
        headers: Headers the request must carry, copied at registration.
        body: JSON body matcher, or None when any body is accepted.

    Compared by value. Not hashable, since headers and body are dicts.
    """

    __hash__ = None  # type: ignore[assignment]

    method: str
    path: str
    headers: dict[str, Any] | None = None
    body: dict[str, str] | None = None

    def to_request_matcher(self) -> dict[str, Any]:
        """MockServer ``httpRequest`` JSON with unset fields omitted."""
        matcher: dict[str, Any] = {"method": self.method, "path": self.path}
        if self.headers:
            matcher["headers"] = header_multimap(self.headers)
        if self.body is not None:
            matcher["body"] = self.body
        return matcher


def build_expectation(
    path: str,
    method: str,
    status_code: int,
    response_body: Any,
) -> dict[str, Any]:
    """One-shot MockServer expectation answering a single matching request."""
    http_response: dict[str, Any] = {
        "statusCode": status_code,
        "headers": [{"name": "Content-Type", "values": [JSON_CONTENT_TYPE]}],
    }
    if response_body is not None:
        http_response["body"] = to_json(response_body)
    return {
        "httpRequest": {"path": path, "method": method},
        "httpResponse": http_response,
        "times": {"remainingTimes": 1, "unlimited": False},
    }
