"""
Signal collection: fetch, deduplicate, classify, filter and store.

Meant to be run on a schedule by an external trigger.
"""

from typing import Callable, List

from competitor_intel.aggregator import gather_competitor_news
from competitor_intel.classifier import analyze_signal
from competitor_intel.database import (
    get_user_preferences,
    insert_signal_if_absent,
    list_competitors,
    signal_exists,
)
from competitor_intel.hashing import article_content_hash
from competitor_intel.models import (
    CollectionReport,
    Competitor,
    ItemResult,
    ItemStatus,
    NewsArticle,
    Signal,
    SignalAnalysis,
)
from competitor_intel.preferences import should_keep_signal
from util.logging_util import log_pipeline_summary, setup_logger

logger = setup_logger(__name__)

GatherFn = Callable[[Competitor], List[NewsArticle]]
AnalyzeFn = Callable[[str, NewsArticle], SignalAnalysis]


def process_article(competitor: Competitor, article: NewsArticle, analyze: AnalyzeFn = analyze_signal) -> ItemResult:
    """
    Turn one candidate article into a stored signal, if it is new and wanted.

    Returns the outcome. Errors are left to the caller.
    """
    label = f"{competitor.name}: {article.title}"
    content_hash = article_content_hash(article)

    if signal_exists(content_hash):
        logger.info(f"Skipping duplicate: {article.title}")
        return ItemResult(ItemStatus.DUPLICATE, label)

    analysis = analyze(competitor.name, article)

    preferences = get_user_preferences(competitor.user_id)
    if not should_keep_signal(analysis.signal_type, preferences):
        logger.info(f"Skipping {analysis.signal_type} - not in user preferences")
        return ItemResult(ItemStatus.FILTERED, label, f"{analysis.signal_type} not selected")

    signal = Signal(
        competitor_id=competitor.id,
        user_id=competitor.user_id,
        title=article.title,
        summary=analysis.summary,
        signal_type=analysis.signal_type,
        sentiment=analysis.sentiment,
        source_url=article.url,
        source_name=article.source,
        is_high_priority=analysis.is_high_priority,
        published_at=article.published_at,
        content_hash=content_hash,
    )

    # Another run may have stored the same article since the check above
    signal_id = insert_signal_if_absent(signal)
    if signal_id is None:
        logger.info(f"Skipping duplicate (stored concurrently): {article.title}")
        return ItemResult(ItemStatus.DUPLICATE, label)

    logger.info(f"Created signal {signal_id}: {article.title}")
    return ItemResult(ItemStatus.CREATED, label)


def process_competitor(
    competitor: Competitor,
    gather: GatherFn = gather_competitor_news,
    analyze: AnalyzeFn = analyze_signal,
) -> List[ItemResult]:
    """
    Collect signals for one competitor.

    A failing article is recorded and the rest are still processed. A failure
    to gather articles gives a single failed result for the competitor.
    """
    try:
        articles = gather(competitor)
    except Exception as e:
        logger.error(f"Error processing competitor {competitor.name}: {e}")
        return [ItemResult(ItemStatus.FAILED, competitor.name, f"fetch failed: {e}")]

    logger.info(f"Found {len(articles)} articles for {competitor.name}")

    results = []
    for article in articles:
        try:
            results.append(process_article(competitor, article, analyze))
        except Exception as e:
            logger.error(f"Error processing article \"{article.title}\": {e}")
            results.append(ItemResult(ItemStatus.FAILED, f"{competitor.name}: {article.title}", str(e)))
    return results


def collect_signals(
    gather: GatherFn = gather_competitor_news,
    analyze: AnalyzeFn = analyze_signal,
) -> CollectionReport:
    """
    Run signal collection for every tracked competitor.

    Raises if the competitors cannot be listed; every other failure is
    recorded in the report.
    """
    logger.info("Starting signal collection...")
    competitors = list_competitors()

    report = CollectionReport()
    for competitor in competitors:
        report.results.extend(process_competitor(competitor, gather, analyze))

    log_pipeline_summary(logger, "collect-signals", report.status_counts())
    logger.info(f"Signal collection completed. Created {report.signals_created} new signals.")
    return report
