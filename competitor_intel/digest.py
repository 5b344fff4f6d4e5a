"""
Email digests: batch each user's undelivered signals by competitor and send them.
"""

import time
from typing import Callable, Dict, List, Optional

from competitor_intel.database import (
    get_competitors_by_ids,
    get_undelivered_signals,
    list_digest_recipients,
    mark_signals_notified,
)
from competitor_intel.email_delivery import send_digest_email
from competitor_intel.models import (
    Competitor,
    DigestGroup,
    DigestRecipient,
    DigestReport,
    ItemResult,
    ItemStatus,
    Signal,
)
from util.logging_util import log_pipeline_summary, setup_logger

logger = setup_logger(__name__)

SendFn = Callable[[str, List[DigestGroup]], bool]


def group_signals_by_competitor(signals: List[Signal], competitors: Dict[int, Competitor]) -> List[DigestGroup]:
    """
    Group signals by competitor.

    Groups are ordered by the first signal seen for each competitor, and keep
    the signals in their input order.
    """
    groups: Dict[int, DigestGroup] = {}
    for signal in signals:
        group = groups.get(signal.competitor_id)
        if group is None:
            competitor = competitors.get(signal.competitor_id)
            if competitor is None:
                competitor = Competitor(id=signal.competitor_id, user_id=signal.user_id, name="Unknown competitor")
            group = DigestGroup(competitor=competitor)
            groups[signal.competitor_id] = group
        group.signals.append(signal)
    return list(groups.values())


def send_user_digest(recipient: DigestRecipient, send: SendFn = send_digest_email, now: Optional[int] = None) -> ItemResult:
    """
    Send one user's digest and mark its signals as delivered.

    Signals are only marked when the send succeeds, so a failed digest is
    retried on the next run.
    """
    now = now or int(time.time())
    preferences = recipient.preferences
    label = f"user {preferences.user_id}"

    since = now - preferences.email_digest_frequency_hours * 3600
    signals = get_undelivered_signals(preferences.user_id, since)
    if not signals:
        logger.info(f"No new signals for user {preferences.user_id}")
        return ItemResult(ItemStatus.SKIPPED, label, "no new signals")

    competitors = get_competitors_by_ids(signal.competitor_id for signal in signals)
    digest_groups = group_signals_by_competitor(signals, competitors)

    if not send(recipient.email, digest_groups):
        logger.error(f"Digest delivery failed for {recipient.email}, leaving {len(signals)} signals unsent")
        return ItemResult(ItemStatus.FAILED, label, "delivery failed")

    mark_signals_notified([signal.id for signal in signals], now)
    logger.info(f"Sent digest to {recipient.email} with {len(signals)} signals")
    return ItemResult(ItemStatus.SENT, label)


def send_digests(send: SendFn = send_digest_email, now: Optional[int] = None) -> DigestReport:
    """
    Send digests to every user with email delivery enabled.

    Raises if the recipients cannot be listed; a failure for one user is
    recorded and the others still get their digest.
    """
    logger.info("Starting email digest process...")
    now = now or int(time.time())
    recipients = list_digest_recipients()

    report = DigestReport()
    for recipient in recipients:
        try:
            report.results.append(send_user_digest(recipient, send, now))
        except Exception as e:
            logger.error(f"Error processing digest for user {recipient.preferences.user_id}: {e}")
            report.results.append(ItemResult(ItemStatus.FAILED, f"user {recipient.preferences.user_id}", str(e)))

    log_pipeline_summary(logger, "send-digest", report.status_counts())
    logger.info(f"Email digest process completed. Sent {report.emails_sent} emails.")
    return report
