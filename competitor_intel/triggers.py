"""
Authenticated entry points for the scheduled jobs.

Both jobs are gated by a shared secret sent as `Authorization: Bearer <secret>`.
Nothing touches storage until the secret has been checked.
"""

import hmac
from dataclasses import dataclass
from typing import Callable, Optional

from competitor_intel.collector import collect_signals
from competitor_intel.database import init_db
from competitor_intel.digest import send_digests
from competitor_intel.models import CollectionReport, DigestReport
from util.logging_util import setup_logger
from util.secrets import get_cron_secret

logger = setup_logger(__name__)


@dataclass
class TriggerResponse:
    status: int
    body: dict


UNAUTHORIZED = TriggerResponse(401, {"error": "Unauthorized"})


def is_authorized(authorization: Optional[str], secret: Optional[str] = None) -> bool:
    """Check the Authorization header against the configured secret.

    Always False when no secret is configured.
    """
    secret = secret if secret is not None else get_cron_secret()
    if not secret or not authorization:
        return False
    return hmac.compare_digest(authorization.encode(), f"Bearer {secret}".encode())


def run_collect_signals_trigger(
    authorization: Optional[str],
    collect: Callable[[], CollectionReport] = collect_signals,
    prepare_storage: Callable[[], None] = init_db,
) -> TriggerResponse:
    if not is_authorized(authorization):
        logger.warning("Rejected unauthorized collect-signals request")
        return UNAUTHORIZED

    try:
        prepare_storage()
        report = collect()
    except Exception as e:
        logger.error(f"Error in signal collection: {e}")
        return TriggerResponse(500, {"error": str(e) or "Internal server error"})

    created = report.signals_created
    return TriggerResponse(200, {
        "success": True,
        "message": f"Signal collection completed. Created {created} new signals.",
        "totalSignalsCreated": created,
    })


def run_send_digest_trigger(
    authorization: Optional[str],
    send: Callable[[], DigestReport] = send_digests,
    prepare_storage: Callable[[], None] = init_db,
) -> TriggerResponse:
    if not is_authorized(authorization):
        logger.warning("Rejected unauthorized send-digest request")
        return UNAUTHORIZED

    try:
        prepare_storage()
        report = send()
    except Exception as e:
        logger.error(f"Error in email digest process: {e}")
        return TriggerResponse(500, {"error": str(e) or "Internal server error"})

    sent = report.emails_sent
    return TriggerResponse(200, {
        "success": True,
        "message": f"Email digest process completed. Sent {sent} emails.",
        "emailsSent": sent,
    })
