from dotenv import load_dotenv
import logging
import os
import time

import requests

from api_client import ResortApiClient
from auth import ConsoleSession

load_dotenv()

logger = logging.getLogger(__name__)

# Base URL of the resort REST backend, fixed per deployment.
RESORT_API_URL = os.getenv("RESORT_API_URL", "http://localhost:3001/api").rstrip("/")
UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "15"))


def wait_for_upstream(max_retries=None, retry_interval=None):
    if max_retries is None:
        max_retries = int(os.getenv("UPSTREAM_WAIT_RETRIES", "0"))
    if retry_interval is None:
        retry_interval = float(os.getenv("UPSTREAM_WAIT_INTERVAL", "2"))
    if max_retries <= 0:
        return True

    logger.info("Waiting for resort API at %s", RESORT_API_URL)
    for attempt in range(max_retries):
        try:
            # any HTTP answer means the API is up, even 401/404 on the root
            requests.get(RESORT_API_URL, timeout=UPSTREAM_TIMEOUT)
            logger.info("Resort API is reachable")
            return True
        except requests.RequestException as e:
            logger.warning("Attempt %s/%s: resort API not reachable: %s", attempt + 1, max_retries, e)
            if attempt < max_retries - 1:
                time.sleep(retry_interval)

    logger.error("Resort API still unreachable after %s attempts", max_retries)
    return False


def client_for(session: ConsoleSession) -> ResortApiClient:
    return ResortApiClient(RESORT_API_URL, session, timeout=UPSTREAM_TIMEOUT)


def get_anonymous_client():
    client = client_for(ConsoleSession())
    try:
        yield client
    finally:
        client.close()
