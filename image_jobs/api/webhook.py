from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, jsonify, request
from werkzeug.exceptions import BadRequest

from image_jobs.jobs.processor import WebhookResult, handle_notification

api = Blueprint("api", __name__)


def _respond(result: WebhookResult) -> Any:
    return jsonify(result.body), result.status_code


@api.route("/", methods=["GET"])
def healthcheck() -> str:
    return "image jobs webhook running"


@api.route("/webhook/process-job", methods=["POST"])
def process_job() -> Any:
    """
    Supabase database webhook for INSERTs on the jobs table.

    Body: {"type": "INSERT", "table": "jobs", "record": {...}, ...}
    """
    try:
        payload = request.get_json(force=True)
    except BadRequest as e:
        # Job id is unknown here, so there is nothing to mark failed.
        logging.error("[WEBHOOK ERROR] unreadable body: %s", e)
        return _respond(WebhookResult.internal_error(e))

    logging.info("[WEBHOOK] notification received")
    return _respond(handle_notification(payload))
