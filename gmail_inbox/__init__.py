from .types import Attachment, ConnectionStatus, FetchRequest, MessagePage, MimePart, NormalizedMessage
from .parser import extract_attachments, extract_body, get_header, normalize_message
from .errors import AuthenticationError, GmailInboxError, PlatformError, UpstreamApiError

__all__ = [
    "Attachment",
    "AuthenticationError",
    "ConnectionStatus",
    "FetchRequest",
    "GmailInboxError",
    "MessagePage",
    "MimePart",
    "NormalizedMessage",
    "PlatformError",
    "UpstreamApiError",
    "extract_attachments",
    "extract_body",
    "get_header",
    "normalize_message",
]
