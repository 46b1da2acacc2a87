"""
HTTP handlers for the mailbox functions.

Every handler checks the platform session first and answers 401 without
touching Gmail when there is none. Failures are returned as {"error": ...}.
"""

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from gmail_inbox import config
from gmail_inbox.client import check_connection, fetch_page, get_message
from gmail_inbox.errors import AuthenticationError
from gmail_inbox.platform import PlatformClient
from gmail_inbox.types import FetchRequest

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Gmail Inbox API",
    description="Paged, normalized Gmail messages for the brokerage back office",
    version="0.1.0",
)


def get_platform(request: Request) -> PlatformClient:
    return PlatformClient.from_request(request)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _is_authenticated(platform: PlatformClient) -> bool:
    try:
        return platform.me() is not None
    except AuthenticationError:
        return False


async def _read_json(request: Request) -> dict:
    body = await request.body()
    if not body:
        return {}
    return await request.json()


@app.post("/functions/fetchGmailMessages")
async def fetch_gmail_messages(request: Request, platform: PlatformClient = Depends(get_platform)):
    """
    Return one page of normalized messages: {"messages": [...], "nextPageToken": ...}.
    """
    try:
        if not await run_in_threadpool(_is_authenticated, platform):
            return _error("Unauthorized", 401)

        fetch_request = FetchRequest.from_dict(await _read_json(request))
        access_token = await run_in_threadpool(platform.get_access_token, config.GMAIL_CONNECTOR)

        page = await run_in_threadpool(
            fetch_page,
            access_token,
            fetch_request.max_results,
            fetch_request.query,
            fetch_request.page_token,
        )
        logger.info(
            "Fetched %d messages (query=%r, more=%s)",
            len(page.messages),
            fetch_request.query,
            page.next_page_token is not None,
        )
        return page.to_dict()

    except Exception as exc:
        logger.exception("fetchGmailMessages failed")
        return _error(str(exc), 500)


@app.post("/functions/getGmailMessage")
async def get_gmail_message(request: Request, platform: PlatformClient = Depends(get_platform)):
    """Return a single normalized message by Gmail id."""
    try:
        if not await run_in_threadpool(_is_authenticated, platform):
            return _error("Unauthorized", 401)

        message_id = (await _read_json(request)).get("messageId")
        if not message_id:
            return _error("Missing required field: messageId", 400)

        access_token = await run_in_threadpool(platform.get_access_token, config.GMAIL_CONNECTOR)
        message = await run_in_threadpool(get_message, access_token, message_id)
        return message.to_dict()

    except Exception as exc:
        logger.exception("getGmailMessage failed")
        return _error(str(exc), 500)


@app.post("/functions/checkGmailConnection")
async def check_gmail_connection(platform: PlatformClient = Depends(get_platform)):
    try:
        if not await run_in_threadpool(_is_authenticated, platform):
            return _error("Unauthorized", 401)

        access_token = await run_in_threadpool(platform.get_access_token, config.GMAIL_CONNECTOR)
        status = await run_in_threadpool(check_connection, access_token)
        return status.to_dict()

    except Exception as exc:
        logger.exception("checkGmailConnection failed")
        return _error(str(exc), 500)


@app.get("/health")
async def health():
    return {"status": "ok"}
