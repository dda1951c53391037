import os

import pytest

os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-test-key")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")


@pytest.fixture(autouse=True)
def fresh_clients():
    from image_jobs import config
    from image_jobs.services import openai_images
    from image_jobs.services import supabase as job_store

    config.reset_settings()
    job_store._client = None
    openai_images._client = None
    yield
    config.reset_settings()
    job_store._client = None
    openai_images._client = None
