# scripts/fetch_messages.py
"""Fetch normalized Gmail messages from the command line and save them as JSON."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
import sys

from gmail_inbox.client import (
    check_connection,
    fetch_page,
    get_message,
    load_access_token,
)

TOKEN = Path("token.json")
SECRET = Path("client_secret.json")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fetch normalized Gmail messages via the Gmail API.")
    parser.add_argument(
        "--access-token",
        default=os.getenv("GMAIL_ACCESS_TOKEN"),
        help="Bearer token to use. Defaults to $GMAIL_ACCESS_TOKEN, else the local OAuth files.",
    )
    parser.add_argument(
        "--query",
        "-q",
        default="",
        help="Gmail search query, passed through verbatim.",
    )
    parser.add_argument(
        "--max-results",
        type=int,
        default=50,
        help="Page size (default: %(default)s).",
    )
    parser.add_argument(
        "--page-token",
        help="Continue from the nextPageToken of a previous run.",
    )
    parser.add_argument(
        "--message-id",
        help="Fetch a single message instead of a page.",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report whether the mailbox is reachable.",
    )
    parser.add_argument(
        "--output",
        "-o",
        default="-",
        help="Where to store the result (use '-' for stdout; default: %(default)s).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    argp = build_parser()
    args = argp.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    token = args.access_token or load_access_token(token_path=TOKEN, client_secret_path=SECRET)

    if args.check:
        result = check_connection(token).to_dict()
    elif args.message_id:
        result = get_message(token, args.message_id).to_dict()
    else:
        result = fetch_page(token, args.max_results, args.query, args.page_token).to_dict()

    if args.output == "-":
        json.dump(result, sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0

    Path(args.output).write_text(json.dumps(result, indent=2))
    if "messages" in result:
        print(f"Saved {len(result['messages'])} messages to {args.output}")
        if result["nextPageToken"]:
            print(f"Next page: --page-token {result['nextPageToken']}")
    else:
        print(f"Saved result to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
