"""Exceptions raised while fetching and normalizing Gmail messages."""

from __future__ import annotations

from typing import Optional


class GmailInboxError(Exception):
    """Base class for errors surfaced to callers."""


class AuthenticationError(GmailInboxError):
    """The caller has no valid platform session."""


class PlatformError(GmailInboxError):
    """The hosting platform's user or connector endpoint failed."""


class UpstreamApiError(GmailInboxError):
    """
    Gmail answered with a non-success status.
    `body` keeps the upstream response text for context.
    """

    def __init__(self, status: Optional[int], body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"Gmail API error: {status} {body}".strip())

    @classmethod
    def from_http_error(cls, exc) -> "UpstreamApiError":
        content = exc.content or b""
        if isinstance(content, bytes):
            content = content.decode("utf-8", "replace")
        return cls(getattr(exc.resp, "status", None), content)


__all__ = ["AuthenticationError", "GmailInboxError", "PlatformError", "UpstreamApiError"]
