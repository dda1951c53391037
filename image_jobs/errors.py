from __future__ import annotations


class ConfigError(RuntimeError):
    """Required environment is missing. Raised at startup, never per request."""


class InvalidPayloadError(ValueError):
    """The webhook body does not describe a usable job record."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


class JobProcessingError(Exception):
    """Base for everything that can go wrong between the claim and the final write."""


class ImageAcquisitionError(JobProcessingError):
    pass


class ImageDecodeError(ImageAcquisitionError):
    pass


class ImageFetchError(ImageAcquisitionError):
    pass


class ImageApiError(JobProcessingError):
    pass


class JobStoreError(JobProcessingError):
    """Supabase read or write failed."""


class JobNotFoundError(JobStoreError):
    pass
