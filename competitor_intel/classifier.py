"""
LLM-based classification of articles into signals, with a keyword fallback.
"""

import json
import re
from typing import Any, Callable, Optional

from competitor_intel.constants import (
    FALLBACK_KEYWORD_RULES,
    FALLBACK_SIGNAL_TYPE,
    MAX_CONTENT_CHARS,
    PROMPTS_DIR,
    SENTIMENTS,
    SIGNAL_TYPES,
)
from competitor_intel.models import NewsArticle, ParseResult, SignalAnalysis
from llm.llm_util import get_llm_response
from util.logging_util import setup_logger

logger = setup_logger(__name__)

ANALYZE_SIGNAL_TEMPLATE = PROMPTS_DIR / "analyze_signal.jinja2"

_CODE_FENCE_RE = re.compile(r"^```[\w-]*\s*(.*?)\s*```$", re.DOTALL)


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code block (```json ... ```) if there is one."""
    text = text.strip()
    match = _CODE_FENCE_RE.match(text)
    if match:
        return match.group(1).strip()
    return text


def parse_analysis_response(response: str) -> ParseResult[SignalAnalysis]:
    """Parse and validate the LLM's JSON answer.

    Every field must be present and well formed; anything else is a failure.
    """
    if not isinstance(response, str):
        return ParseResult.failure(f"expected text, got {type(response).__name__}")
    try:
        result: Any = json.loads(strip_code_fences(response))
    except json.JSONDecodeError as e:
        return ParseResult.failure(f"invalid JSON: {e}")

    if not isinstance(result, dict):
        return ParseResult.failure("expected a JSON object")

    summary = result.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        return ParseResult.failure("missing summary")

    signal_type = result.get("signal_type")
    if not isinstance(signal_type, str) or signal_type.strip().lower() not in SIGNAL_TYPES:
        return ParseResult.failure(f"unknown signal type: {signal_type!r}")

    sentiment = result.get("sentiment")
    if not isinstance(sentiment, str) or sentiment.strip().lower() not in SENTIMENTS:
        return ParseResult.failure(f"unknown sentiment: {sentiment!r}")

    is_high_priority = result.get("is_high_priority")
    if not isinstance(is_high_priority, bool):
        return ParseResult.failure(f"is_high_priority is not a boolean: {is_high_priority!r}")

    return ParseResult.success(SignalAnalysis(
        summary=summary.strip(),
        signal_type=signal_type.strip().lower(),
        sentiment=sentiment.strip().lower(),
        is_high_priority=is_high_priority,
    ))


def infer_signal_type(title: str, description: str = "") -> str:
    """Guess a signal type from keywords in the title and description."""
    text = f"{title or ''} {description or ''}".lower()
    for signal_type, keywords in FALLBACK_KEYWORD_RULES:
        if any(keyword in text for keyword in keywords):
            return signal_type
    return FALLBACK_SIGNAL_TYPE


def fallback_analysis(article: NewsArticle) -> SignalAnalysis:
    """Classify an article without the LLM."""
    return SignalAnalysis(
        summary=article.description or article.title,
        signal_type=infer_signal_type(article.title, article.description),
        sentiment="neutral",
        is_high_priority=False,
    )


def analyze_signal(
    competitor_name: str,
    article: NewsArticle,
    llm: Optional[Callable[[str, dict], str]] = None,
) -> SignalAnalysis:
    """
    Classify an article about a competitor.

    Args:
        competitor_name: Name of the competitor the article was found for.
        article: The article to classify.
        llm: Function taking (template_path, params) and returning the response
            text. Defaults to get_llm_response.

    Returns:
        The LLM's analysis, or the keyword-based fallback if the LLM call fails
        or its answer cannot be used.
    """
    llm = llm or get_llm_response
    params = {
        "competitor_name": competitor_name,
        "title": article.title,
        "description": article.description,
        "content": (article.content or "")[:MAX_CONTENT_CHARS],
    }

    try:
        response = llm(str(ANALYZE_SIGNAL_TEMPLATE), params)
    except Exception as e:
        logger.error(f"Error analyzing signal with LLM, using fallback: {e}")
        return fallback_analysis(article)

    result = parse_analysis_response(response)
    if not result.ok:
        logger.error(f"Failed to parse LLM analysis ({result.error}), using fallback")
        logger.debug(f"Response was: {response}")
        return fallback_analysis(article)

    analysis = result.value
    logger.info(
        f"Analyzed '{article.title[:50]}': type={analysis.signal_type}, "
        f"sentiment={analysis.sentiment}, high_priority={analysis.is_high_priority}"
    )
    return analysis
