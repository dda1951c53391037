from datetime import datetime
import pytz

UTC = pytz.UTC


def utc_now_iso():
    """
    Current UTC time as an ISO-8601 string, the format written to processed_at.
    """
    return datetime.now(UTC).isoformat()
