"""Upstream response dataclasses.

WHY: The proxy endpoints relay the upstream answer as-is: status code,
content type and body. A small typed container keeps that triple
together between the client and the HTTP layer.

RULES:
- content is the raw response body (bytes), never re-encoded
- content_type falls back to the caller's expected type when upstream omits it
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx


@dataclass
class UpstreamReply:
    """A relayed upstream HTTP response."""

    status_code: int
    content_type: str
    content: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @classmethod
    def from_response(cls, resp: httpx.Response, default_content_type: str) -> UpstreamReply:
        """Build an UpstreamReply from an httpx response."""
        return cls(
            status_code=resp.status_code,
            content_type=resp.headers.get("content-type") or default_content_type,
            content=resp.content,
        )
