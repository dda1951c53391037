import json
import os
from typing import Any, Dict, List

from jsonschema import Draft7Validator

from image_jobs.errors import InvalidPayloadError

# Path: image_jobs/jobs/schemas/
SCHEMA_PATH = os.path.join(
    os.path.dirname(__file__),
    "schemas",
    "notification.json",
)

REQUIRED_FIELDS = ("id", "input_image_url", "status")


def load_schema() -> Dict[str, Any]:
    with open(SCHEMA_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


_validator = Draft7Validator(load_schema())


def _missing_fields(payload: Any) -> List[str]:
    """
    Required record fields that are absent or empty. A field that is present
    but has the wrong type also counts, the caller cannot act on it either way.
    """
    record = payload.get("record") if isinstance(payload, dict) else None
    if not isinstance(record, dict):
        return list(REQUIRED_FIELDS)

    bad = []
    for error in _validator.iter_errors(payload):
        path = list(error.absolute_path)
        if len(path) >= 2 and path[0] == "record" and path[1] in REQUIRED_FIELDS:
            bad.append(path[1])
        elif error.validator == "required" and path == ["record"]:
            bad.extend(name for name in REQUIRED_FIELDS if name not in record)
    return [name for name in REQUIRED_FIELDS if name in bad]


def validate_notification(payload: Any) -> Dict[str, Any]:
    """
    Check a webhook body against the notification schema.

    Returns:
        The nested "record" dict.
    Raises:
        InvalidPayloadError listing the missing fields.
    """
    missing = _missing_fields(payload)
    if missing:
        raise InvalidPayloadError("Invalid payload: Missing required fields", missing=missing)
    return payload["record"]

