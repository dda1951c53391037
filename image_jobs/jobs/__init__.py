"""
Job record, payload validation and the processing state machine.

models.py and validator.py are pure logic. processor.py is the only module
here that talks to Supabase, the image source and OpenAI (through the
services package).
"""

from .models import Job, JobStatus

__all__ = [
    "Job",
    "JobStatus",
]
