from __future__ import annotations

import base64
import binascii
import logging
import re
from dataclasses import dataclass
from typing import Optional

import requests

from image_jobs.config import get_settings
from image_jobs.errors import ImageDecodeError, ImageFetchError

DATA_URL_RE = re.compile(r"^data:([A-Za-z+/-]+);base64,(.+)$")

# OpenAI only looks at the bytes, the filename is fixed.
UPLOAD_FILENAME = "input.png"
DEFAULT_MEDIA_TYPE = "image/png"


@dataclass
class InputImage:
    data: bytes
    media_type: str = DEFAULT_MEDIA_TYPE
    filename: str = UPLOAD_FILENAME

    def as_upload(self):
        """(filename, bytes, media type) tuple accepted by the OpenAI SDK."""
        return (self.filename, self.data, self.media_type)


def is_data_url(value: str) -> bool:
    return value.startswith("data:")


def decode_data_url(data_url: str) -> InputImage:
    """
    Decode "data:<media type>;base64,<payload>" into raw bytes.

    Raises:
        ImageDecodeError if the prefix/shape is wrong or the payload is not base64.
    """
    match = DATA_URL_RE.match(data_url)
    if not match:
        raise ImageDecodeError("Invalid data URL format")

    media_type, payload = match.group(1), match.group(2)
    # Padding is optional in data URLs.
    payload += "=" * (-len(payload) % 4)
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageDecodeError(f"Invalid base64 image data: {e}") from e

    return InputImage(data=data, media_type=media_type)


def fetch_remote_image(url: str, timeout: Optional[float] = None) -> InputImage:
    """
    Download the image at url with a single GET.

    Raises:
        ImageFetchError on a non-2xx response or a network failure.
    """
    if timeout is None:
        timeout = get_settings().image_fetch_timeout

    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise ImageFetchError(f"Failed to download input image: {e}") from e

    if not response.ok:
        raise ImageFetchError(
            f"Failed to download input image: {response.status_code} {response.reason}"
        )

    content_type = response.headers.get("Content-Type") or DEFAULT_MEDIA_TYPE
    media_type = content_type.split(";", 1)[0].strip() or DEFAULT_MEDIA_TYPE
    return InputImage(data=response.content, media_type=media_type)


def acquire_image(input_image_url: str) -> InputImage:
    if is_data_url(input_image_url):
        logging.info("[MEDIA] decoding inline data URL")
        image = decode_data_url(input_image_url)
    else:
        logging.info("[MEDIA] downloading %s", input_image_url)
        image = fetch_remote_image(input_image_url)

    logging.info("[MEDIA] acquired %d bytes (%s)", len(image.data), image.media_type)
    return image
