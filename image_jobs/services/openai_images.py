from __future__ import annotations

import logging
from typing import Optional

from openai import APIStatusError, OpenAI, OpenAIError

from image_jobs.config import get_settings
from image_jobs.errors import ImageApiError
from image_jobs.media.source import InputImage

VARIATION_COUNT = 1
VARIATION_SIZE = "1024x1024"

# Lazily-initialized OpenAI client
_client: Optional[OpenAI] = None


def _get_client() -> OpenAI:
    """
    Single attempt per delivery: SDK retries are switched off.
    """
    global _client
    if _client is None:
        _client = OpenAI(api_key=get_settings().openai_api_key, max_retries=0)
    return _client


def create_variation(image: InputImage) -> str:
    """
    POST the image to /v1/images/variations (multipart, n=1, 1024x1024).

    Returns:
        URL of the generated image (data[0].url).
    Raises:
        ImageApiError on an API error or when no URL comes back.
    """
    client = _get_client()
    logging.info("[OPENAI] requesting variation of %d bytes", len(image.data))

    try:
        response = client.images.create_variation(
            image=image.as_upload(),
            n=VARIATION_COUNT,
            size=VARIATION_SIZE,
        )
    except APIStatusError as e:
        raise ImageApiError(f"OpenAI API error: {e.status_code} {e.message}") from e
    except OpenAIError as e:
        raise ImageApiError(f"OpenAI API error: {e}") from e

    data = getattr(response, "data", None) or []
    url = getattr(data[0], "url", None) if data else None
    if not url:
        raise ImageApiError("OpenAI API did not return a result image URL")

    logging.info("[OPENAI] variation ready: %s", url)
    return url
