"""
Digest email rendering and delivery through the Resend API.
"""

from datetime import datetime
from typing import List, Optional

import requests
from jinja2 import Environment, FileSystemLoader

from competitor_intel.constants import RESEND_API_URL, TEMPLATES_DIR
from competitor_intel.models import DigestGroup
from util.logging_util import setup_logger
from util.secrets import get_digest_from_address, get_http_timeout, get_resend_api_key

logger = setup_logger(__name__)

DIGEST_TEMPLATE = "digest_email.html.jinja2"

_environment = Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)), autoescape=True)


def count_signals(digest_groups: List[DigestGroup]) -> int:
    return sum(len(group.signals) for group in digest_groups)


def format_digest_subject(total_signals: int) -> str:
    plural = "s" if total_signals > 1 else ""
    return f"Competitor Intelligence Digest - {total_signals} New Signal{plural}"


def render_digest_html(digest_groups: List[DigestGroup], now: Optional[datetime] = None) -> str:
    """Render the digest email body. Competitors with no signals are left out."""
    now = now or datetime.now()
    template = _environment.get_template(DIGEST_TEMPLATE)
    return template.render(
        groups=digest_groups,
        date=f"{now:%A, %B} {now.day}, {now.year}",
    )


def send_digest_email(
    user_email: str,
    digest_groups: List[DigestGroup],
    api_key: Optional[str] = None,
    timeout: Optional[float] = None,
) -> bool:
    """
    Send a digest email.

    Args:
        user_email: Recipient address.
        digest_groups: Signals grouped by competitor.
        api_key: Resend API key. Defaults to the RESEND_API_KEY setting.
        timeout: Request timeout in seconds. Defaults to the HTTP_TIMEOUT_SECONDS setting.

    Returns:
        True if the email was accepted for delivery (or there was nothing to send).
    """
    total_signals = count_signals(digest_groups)
    if total_signals == 0:
        logger.info("No signals to send in digest")
        return True

    api_key = api_key or get_resend_api_key()
    if not api_key:
        logger.warning("RESEND_API_KEY not configured, cannot send digest")
        return False

    message = {
        "from": get_digest_from_address(),
        "to": [user_email],
        "subject": format_digest_subject(total_signals),
        "html": render_digest_html(digest_groups),
    }

    try:
        response = requests.post(
            RESEND_API_URL,
            json=message,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout if timeout is not None else get_http_timeout(),
        )
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Error sending digest email to {user_email}: {e}")
        return False

    logger.info(f"Digest email accepted for {user_email} ({total_signals} signals)")
    return True
