from __future__ import annotations
from typing import Any, Dict, List, Union
from .types import Attachment, MimePart, NormalizedMessage
from .decoder import b64url_decode, charset_from, decode_to_text, millis_to_iso, parse_sender

TEXT_MIME_TYPES = ("text/plain", "text/html")

# ------------------ Public API ------------------

def normalize_message(msg: Dict[str, Any]) -> NormalizedMessage:
    """
    Reduce a Gmail API message dict returned by:
      gmail.users().messages().get(userId="me", id=..., format="full")
    into a flat NormalizedMessage.
    """
    payload = MimePart.from_dict(msg.get("payload"))
    from_name, from_email = parse_sender(get_header(payload, "From"))

    return NormalizedMessage(
        gmail_id=msg.get("id", ""),
        thread_id=msg.get("threadId", ""),
        subject=get_header(payload, "Subject"),
        from_email=from_email,
        from_name=from_name,
        to_email=get_header(payload, "To"),
        snippet=msg.get("snippet", "") or "",
        body=extract_body(payload),
        received_date=millis_to_iso(msg.get("internalDate")),
        labels=list(msg.get("labelIds") or []),
        attachments=extract_attachments(payload),
    )

def get_header(payload: Union[MimePart, Dict[str, Any]], name: str) -> str:
    """
    Case-insensitive header lookup on the outermost payload only.
    """
    headers = payload.headers if isinstance(payload, MimePart) else (payload.get("headers") or [])
    wanted = name.lower()
    for h in headers:
        if (h.get("name", "") or "").lower() == wanted:
            return h.get("value", "") or ""
    return ""

def extract_body(part: MimePart) -> str:
    """
    Depth-first search for the first usable body text.

    Inline data on the part itself wins regardless of its mimeType; otherwise
    the first text/plain or text/html child with inline data is used, and
    children that only hold nested parts are searched before their siblings.
    HTML is returned as-is.
    """
    if part.body.data:
        return _decode_part(part)

    for child in part.parts:
        if child.mime_type in TEXT_MIME_TYPES and child.body.data:
            return _decode_part(child)
        if not child.body.data and child.parts:
            nested = extract_body(child)
            if nested:
                return nested
    return ""

def extract_attachments(payload: MimePart) -> List[Attachment]:
    """
    Collect every part that has a filename and an attachmentId, at any depth.
    """
    found: List[Attachment] = []
    for child in payload.parts:
        if child.filename and child.body.attachment_id:
            found.append(Attachment(
                filename=child.filename,
                mime_type=child.mime_type,
                size=child.body.size,
            ))
        found.extend(extract_attachments(child))
    return found

# ------------------ utilities ------------------

def _decode_part(part: MimePart) -> str:
    content_type = get_header(part, "Content-Type") or part.mime_type
    return decode_to_text(b64url_decode(part.body.data), charset_from(content_type))
