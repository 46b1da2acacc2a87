"""
Runtime configuration.
Values come from the environment, with a local .env loaded first.
"""

import os
from dotenv import load_dotenv

load_dotenv()

PLATFORM_API_URL = os.getenv("PLATFORM_API_URL", "https://app.base44.com/api").rstrip("/")
PLATFORM_APP_ID = os.getenv("PLATFORM_APP_ID", "")

# Service-role credential used to read connector tokens on behalf of the app
PLATFORM_SERVICE_TOKEN = os.getenv("PLATFORM_SERVICE_TOKEN", "")
PLATFORM_TIMEOUT = float(os.getenv("PLATFORM_TIMEOUT", "30"))

GMAIL_CONNECTOR = os.getenv("GMAIL_CONNECTOR", "gmail")
MAX_CONCURRENT_FETCHES = int(os.getenv("MAX_CONCURRENT_FETCHES", "50"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
