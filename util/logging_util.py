import logging
import sys
from pathlib import Path
from typing import Optional, Union

from util.secrets import get_log_level

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str, level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Sets up a logger that writes to stdout.

    Args:
        name: Name of the logger (typically __name__ from the calling module)
        level: Logging level. Defaults to the LOG_LEVEL setting.

    Returns:
        Configured logger instance
    """
    level = level if level is not None else get_log_level()
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # One handler per logger name
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        logger.addHandler(console_handler)

    return logger


def log_llm_interaction(logger: logging.Logger, template_path: str, params: dict,
                        response: str, model_name: str, duration_ms: Optional[float] = None):
    """
    Logs one classification call: prompt, model, timing and a truncated answer.

    The full parameters are only logged at DEBUG since they include article text.
    """
    duration_str = f" in {duration_ms:.0f}ms" if duration_ms else ""
    logger.info(f"LLM call to {model_name} with prompt {Path(template_path).name}{duration_str}")
    logger.debug(f"  Params: {params}")
    logger.info(f"  Response: {response[:200]}{'...' if len(response) > 200 else ''}")


def log_pipeline_summary(logger: logging.Logger, pipeline: str, counts: dict):
    """
    Logs the per-status totals of a pipeline run on one line.

    Args:
        logger: Logger instance to use
        pipeline: Name of the pipeline (e.g. "collect-signals")
        counts: Mapping of status name to number of items
    """
    parts = ", ".join(f"{status}={count}" for status, count in sorted(counts.items()))
    logger.info(f"[{pipeline}] run summary: {parts or 'nothing processed'}")
