from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

@dataclass
class FetchRequest:
    """
    Inbound request for one page of messages.
    - `query` is passed to Gmail verbatim (Gmail search syntax).
    - `page_token` continues a previous page.
    """
    max_results: int = 50
    query: str = ""
    page_token: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FetchRequest":
        data = data or {}
        max_results = data.get("maxResults")
        return cls(
            max_results=int(max_results) if max_results is not None else 50,
            query=data.get("query") or "",
            page_token=data.get("pageToken") or None,
        )

@dataclass
class PartBody:
    data: Optional[str] = None                # base64url inline content
    size: Optional[int] = None
    attachment_id: Optional[str] = None       # set when Gmail deferred the content

@dataclass
class MimePart:
    """
    One node of a Gmail payload tree. A part either carries inline
    body.data or delegates to child parts; attachments carry a filename
    and body.attachment_id instead of data.
    """
    mime_type: str = ""
    filename: str = ""
    body: PartBody = field(default_factory=PartBody)
    headers: List[Dict[str, str]] = field(default_factory=list)
    parts: List["MimePart"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "MimePart":
        data = data or {}
        body = data.get("body") or {}
        return cls(
            mime_type=data.get("mimeType") or "",
            filename=data.get("filename") or "",
            body=PartBody(
                data=body.get("data") or None,
                size=body.get("size"),
                attachment_id=body.get("attachmentId") or None,
            ),
            headers=list(data.get("headers") or []),
            parts=[cls.from_dict(p) for p in (data.get("parts") or [])],
        )

@dataclass
class Attachment:
    """Metadata only; attachment bytes are never downloaded."""
    filename: str
    mime_type: str = ""
    size: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"filename": self.filename, "mimeType": self.mime_type, "size": self.size}

@dataclass
class NormalizedMessage:
    """
    Flat, UI-ready view of one Gmail message.
    """
    gmail_id: str
    thread_id: str
    subject: str = ""
    from_email: str = ""
    from_name: str = ""
    to_email: str = ""
    snippet: str = ""
    body: str = ""                            # decoded text/plain or raw HTML
    received_date: str = ""                   # ISO8601, UTC, millisecond precision
    labels: List[str] = field(default_factory=list)
    attachments: List[Attachment] = field(default_factory=list)

    @property
    def has_attachments(self) -> bool:
        return len(self.attachments) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gmail_id": self.gmail_id,
            "thread_id": self.thread_id,
            "subject": self.subject,
            "from_email": self.from_email,
            "from_name": self.from_name,
            "to_email": self.to_email,
            "snippet": self.snippet,
            "body": self.body,
            "received_date": self.received_date,
            "labels": list(self.labels),
            "has_attachments": self.has_attachments,
            "attachments": [a.to_dict() for a in self.attachments],
        }

@dataclass
class MessagePage:
    messages: List[NormalizedMessage] = field(default_factory=list)
    next_page_token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "messages": [m.to_dict() for m in self.messages],
            "nextPageToken": self.next_page_token,
        }

@dataclass
class ConnectionStatus:
    connected: bool
    email: Optional[str] = None
    messages_total: Optional[int] = None
    threads_total: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        if not self.connected:
            return {"connected": False, "error": self.error}
        return {
            "connected": True,
            "email": self.email,
            "messagesTotal": self.messages_total,
            "threadsTotal": self.threads_total,
        }
