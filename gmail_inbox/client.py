"""Gmail API calls: list a page, fetch messages in full, and normalize them."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

import httplib2
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from . import config
from .errors import UpstreamApiError
from .parser import normalize_message
from .types import ConnectionStatus, MessagePage, NormalizedMessage

logger = logging.getLogger(__name__)

SCOPES: Sequence[str] = ("https://www.googleapis.com/auth/gmail.readonly",)

HttpFactory = Callable[[], Any]


def build_gmail_service(access_token: str, *, cache_discovery: bool = False):
    """
    Create a Gmail API client authorized with a bearer token.
    Token refresh is the token issuer's job; nothing is refreshed here.
    """
    creds = Credentials(token=access_token)
    return build("gmail", "v1", credentials=creds, cache_discovery=cache_discovery)


def authorized_http_factory(access_token: str) -> HttpFactory:
    """
    httplib2 connections are not thread-safe, so every concurrent request
    gets its own authorized Http object.
    """
    creds = Credentials(token=access_token)
    return lambda: AuthorizedHttp(creds, http=httplib2.Http())


def list_message_page(
    gmail_service,
    *,
    max_results: int = 50,
    query: str = "",
    page_token: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Call users.messages.list once. Raises UpstreamApiError on a non-success status.
    """
    params: Dict[str, Any] = {"userId": "me", "maxResults": max_results, "q": query}
    if page_token:
        params["pageToken"] = page_token
    try:
        return gmail_service.users().messages().list(**params).execute()
    except HttpError as exc:
        logger.error("Gmail list call failed: %s", exc.resp.status)
        raise UpstreamApiError.from_http_error(exc) from exc


def fetch_message_json(
    gmail_service,
    message_id: str,
    *,
    format: str = "full",
    http=None,
) -> Dict[str, Any]:
    """
    Download a single Gmail message as a JSON dict.
    """
    return (
        gmail_service.users()
        .messages()
        .get(userId="me", id=message_id, format=format)
        .execute(http=http)
    )


def fetch_message_page(
    gmail_service,
    *,
    max_results: int = 50,
    query: str = "",
    page_token: Optional[str] = None,
    http_factory: Optional[HttpFactory] = None,
    max_workers: int = config.MAX_CONCURRENT_FETCHES,
) -> MessagePage:
    """
    List one page of message ids, fetch every message concurrently and
    normalize the results.

    Messages whose detail fetch fails are dropped from the page; the rest
    keep the order the list endpoint returned them in.
    """
    listing = list_message_page(
        gmail_service, max_results=max_results, query=query, page_token=page_token
    )
    ids = [m["id"] for m in (listing.get("messages") or [])]
    if not ids:
        return MessagePage(messages=[], next_page_token=None)

    def fetch_or_none(message_id: str) -> Optional[Dict[str, Any]]:
        http = http_factory() if http_factory else None
        try:
            return fetch_message_json(gmail_service, message_id, http=http)
        except HttpError as exc:
            logger.warning("Dropping message %s: Gmail returned %s", message_id, exc.resp.status)
            return None

    with ThreadPoolExecutor(max_workers=max(1, min(len(ids), max_workers))) as pool:
        raw_messages = list(pool.map(fetch_or_none, ids))

    messages: List[NormalizedMessage] = [
        normalize_message(raw) for raw in raw_messages if raw is not None
    ]
    if len(messages) < len(ids):
        logger.info("Fetched %d of %d messages", len(messages), len(ids))

    return MessagePage(messages=messages, next_page_token=listing.get("nextPageToken") or None)


def fetch_page(
    access_token: str,
    max_results: int = 50,
    query: str = "",
    page_token: Optional[str] = None,
) -> MessagePage:
    """
    Fetch and normalize one page of the mailbox the token belongs to.
    """
    return fetch_message_page(
        build_gmail_service(access_token),
        max_results=max_results,
        query=query,
        page_token=page_token,
        http_factory=authorized_http_factory(access_token),
    )


def get_message(access_token: str, message_id: str, *, gmail_service=None) -> NormalizedMessage:
    """
    Fetch and normalize a single message. Raises UpstreamApiError on failure.
    """
    if gmail_service is None:
        gmail_service = build_gmail_service(access_token)
    try:
        raw = fetch_message_json(gmail_service, message_id)
    except HttpError as exc:
        raise UpstreamApiError.from_http_error(exc) from exc
    return normalize_message(raw)


def check_connection(access_token: str, *, gmail_service=None) -> ConnectionStatus:
    """
    Report whether the token can read the mailbox profile.
    """
    if gmail_service is None:
        gmail_service = build_gmail_service(access_token)
    try:
        profile = gmail_service.users().getProfile(userId="me").execute()
    except HttpError as exc:
        error = UpstreamApiError.from_http_error(exc)
        logger.warning("Gmail connection check failed: %s", error.status)
        return ConnectionStatus(connected=False, error=str(error))
    return ConnectionStatus(
        connected=True,
        email=profile.get("emailAddress"),
        messages_total=profile.get("messagesTotal"),
        threads_total=profile.get("threadsTotal"),
    )


def _ensure_oauth_imports():
    from google.auth.transport.requests import Request
    from google_auth_oauthlib.flow import InstalledAppFlow

    return Request, InstalledAppFlow


def load_access_token(
    *,
    token_path: str | Path = "token.json",
    client_secret_path: str | Path = "client_secret.json",
    scopes: Sequence[str] = SCOPES,
) -> str:
    """
    Obtain an access token from local OAuth files, prompting the user if needed.
    Used by the command-line tools when no platform connector is available.
    """
    Request, InstalledAppFlow = _ensure_oauth_imports()

    token_path = Path(token_path)
    client_secret_path = Path(client_secret_path)

    creds: Optional[Credentials] = None
    if token_path.exists():
        creds = Credentials.from_authorized_user_file(str(token_path), scopes)
    if not creds or not creds.valid:
        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
        else:
            if not client_secret_path.exists():
                raise FileNotFoundError(
                    f"client_secret file not found at {client_secret_path}. "
                    "Download it from Google Cloud Console."
                )
            flow = InstalledAppFlow.from_client_secrets_file(str(client_secret_path), scopes)
            creds = flow.run_local_server(port=0)
        token_path.write_text(creds.to_json())

    return creds.token


__all__ = [
    "SCOPES",
    "authorized_http_factory",
    "build_gmail_service",
    "check_connection",
    "fetch_message_json",
    "fetch_message_page",
    "fetch_page",
    "get_message",
    "list_message_page",
    "load_access_token",
]
