"""
HTTP Cloud Functions for the scheduled jobs.

Deploy `collect_signals` and `send_digest` as separate functions and point the
scheduler at them with an `Authorization: Bearer <CRON_SECRET>` header.
"""

import logging

import functions_framework  # type: ignore

from competitor_intel.triggers import run_collect_signals_trigger, run_send_digest_trigger
from util.secrets import get_database_url

LOGGER = logging.getLogger(__name__)

# DATABASE_URL is required
get_database_url()


@functions_framework.http
def collect_signals(request):
    """HTTP Cloud Function: fetch, classify and store new signals.
    Args:
        request (flask.Request): The request object.
    """
    if request.method not in ("GET", "POST"):
        LOGGER.error("Unsupported request method %s", request.method)
        return {"error": "Method not allowed"}, 405

    response = run_collect_signals_trigger(request.headers.get("Authorization"))
    return response.body, response.status


@functions_framework.http
def send_digest(request):
    """HTTP Cloud Function: email each user their pending signals.
    Args:
        request (flask.Request): The request object.
    """
    if request.method not in ("GET", "POST"):
        LOGGER.error("Unsupported request method %s", request.method)
        return {"error": "Method not allowed"}, 405

    response = run_send_digest_trigger(request.headers.get("Authorization"))
    return response.body, response.status
