"""Webhook notification delivery channel (Discord-compatible incoming webhooks)."""

import logging

import httpx

from ...config import get_http_timeout

logger = logging.getLogger(__name__)


async def post_webhook(webhook_url: str, payload: dict) -> bool:
    """
    POST a JSON body to a webhook URL.

    Best-effort: no retries. The URL is never logged (it embeds a secret).

    Returns:
        True if the endpoint answered with a 2xx status, False otherwise
    """
    try:
        async with httpx.AsyncClient(timeout=get_http_timeout()) as client:
            response = await client.post(webhook_url, json=payload)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error(f"Webhook delivery error: {type(e).__name__}: {e}")
        return False

    if not response.is_success:
        logger.error(f"Webhook delivery failed: HTTP {response.status_code}")
        return False

    return True
