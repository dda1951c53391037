"""
Input image acquisition.

Jobs carry either an http(s) URL or an inline base64 "data:" payload in
input_image_url. Both come out of here as an InputImage holding raw bytes
and a media type. Nothing is written to disk.
"""

from .source import InputImage, acquire_image

__all__ = [
    "InputImage",
    "acquire_image",
]
