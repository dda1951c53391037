import unittest
from types import SimpleNamespace
from unittest import mock

import httpx
from openai import APIConnectionError, APIStatusError
from postgrest.exceptions import APIError

from image_jobs.errors import ImageApiError, JobNotFoundError, JobStoreError
from image_jobs.jobs.models import JobStatus
from image_jobs.media.source import InputImage
from image_jobs.services import openai_images
from image_jobs.services import supabase as job_store
from tests.fakes import PNG_BYTES, RESULT_URL, variation_response

VARIATIONS_URL = "https://api.openai.com/v1/images/variations"


class SupabaseServiceTests(unittest.TestCase):
    def setUp(self):
        self.client = mock.MagicMock()
        patcher = mock.patch.object(job_store, "_get_client", return_value=self.client)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.table = self.client.table.return_value

    def _select_returns(self, rows):
        query = self.table.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = SimpleNamespace(data=rows)

    def _updates(self):
        return [c.args[0] for c in self.table.update.call_args_list]

    def test_fetch_job(self):
        self._select_returns([{"id": "j1", "input_image_url": "https://a/b.png", "status": "pending"}])
        job = job_store.fetch_job("j1")
        self.client.table.assert_called_with("jobs")
        self.table.select.return_value.eq.assert_called_with("id", "j1")
        self.assertEqual(job.id, "j1")
        self.assertEqual(job.status, JobStatus.PENDING)

    def test_fetch_missing_row(self):
        self._select_returns([])
        with self.assertRaises(JobNotFoundError):
            job_store.fetch_job("j1")

    def test_fetch_api_error(self):
        query = self.table.select.return_value.eq.return_value.limit.return_value
        query.execute.side_effect = APIError({"message": "JWT expired", "code": "PGRST301"})
        with self.assertRaises(JobStoreError) as ctx:
            job_store.fetch_job("j1")
        self.assertIn("Failed to fetch job from Supabase", str(ctx.exception))

    def test_mark_complete_sets_url_and_timestamp(self):
        job_store.mark_complete("j1", RESULT_URL)
        (values,) = self._updates()
        self.assertEqual(values["status"], "complete")
        self.assertEqual(values["result_image_url"], RESULT_URL)
        self.assertIn("processed_at", values)
        self.assertNotIn("error_message", values)
        self.table.update.return_value.eq.assert_called_with("id", "j1")

    def test_mark_failed_sets_message_and_timestamp(self):
        job_store.mark_failed("j1", "boom")
        (values,) = self._updates()
        self.assertEqual(values["status"], "failed")
        self.assertEqual(values["error_message"], "boom")
        self.assertIn("processed_at", values)
        self.assertIsNone(values["result_image_url"])

    def test_mark_processing_has_no_timestamp(self):
        job_store.mark_processing("j1")
        self.assertEqual(self._updates(), [{"status": "processing"}])

    def test_update_error_raises_but_claim_swallows(self):
        self.table.update.return_value.eq.return_value.execute.side_effect = APIError(
            {"message": "permission denied", "code": "42501"}
        )
        with self.assertRaises(JobStoreError):
            job_store.mark_complete("j1", RESULT_URL)
        job_store.mark_processing("j1")  # must not raise


class OpenAIImagesTests(unittest.TestCase):
    def setUp(self):
        self.client = mock.MagicMock()
        patcher = mock.patch.object(openai_images, "_get_client", return_value=self.client)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.image = InputImage(data=PNG_BYTES, media_type="image/png")

    def test_returns_first_url(self):
        self.client.images.create_variation.return_value = variation_response()
        self.assertEqual(openai_images.create_variation(self.image), RESULT_URL)
        self.client.images.create_variation.assert_called_once_with(
            image=("input.png", PNG_BYTES, "image/png"),
            n=1,
            size="1024x1024",
        )

    def test_missing_url(self):
        for response in (variation_response(url=None), SimpleNamespace(data=[SimpleNamespace(url=None)])):
            with self.subTest(response=response):
                self.client.images.create_variation.return_value = response
                with self.assertRaises(ImageApiError) as ctx:
                    openai_images.create_variation(self.image)
                self.assertIn("did not return a result image URL", str(ctx.exception))

    def test_status_error(self):
        request = httpx.Request("POST", VARIATIONS_URL)
        response = httpx.Response(400, request=request)
        self.client.images.create_variation.side_effect = APIStatusError(
            "Invalid image: must be a square PNG", response=response, body=None
        )
        with self.assertRaises(ImageApiError) as ctx:
            openai_images.create_variation(self.image)
        self.assertIn("OpenAI API error: 400", str(ctx.exception))
        self.assertIn("square PNG", str(ctx.exception))

    def test_connection_error(self):
        request = httpx.Request("POST", VARIATIONS_URL)
        self.client.images.create_variation.side_effect = APIConnectionError(request=request)
        with self.assertRaises(ImageApiError):
            openai_images.create_variation(self.image)


class ClientConstructionTests(unittest.TestCase):
    def test_openai_client_does_not_retry(self):
        with mock.patch.object(openai_images, "OpenAI") as factory:
            openai_images._get_client()
        factory.assert_called_once_with(api_key="sk-test", max_retries=0)

    def test_supabase_client_uses_service_role_key(self):
        with mock.patch.object(job_store, "create_client") as factory:
            job_store._get_client()
            job_store._get_client()
        factory.assert_called_once_with("https://example.supabase.co", "service-role-test-key")


if __name__ == "__main__":
    unittest.main()
