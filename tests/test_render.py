from unittest.mock import MagicMock

import pytest
import requests

from admin_api.config import DEFAULT_SUBMITTER_ID
from admin_api.resolution.assembler import assemble_payload, begin_generation, complete_generation
from admin_api.resolution.render import (
    RenderClient,
    RenderSubmissionError,
    asset_summary,
    can_submit,
    clean_assets,
)
from admin_api.resolution.slots import RequestContext

MIA = RequestContext("Mia", "M", "dog")


def payload_with_title():
    return complete_generation(assemble_payload(MIA, {}), "titleCard", "https://cdn/title.png")


class TestCleanAssets:
    def test_generating_submitted_as_missing(self):
        payload = begin_generation(payload_with_title(), "signImage")
        cleaned = clean_assets(payload)
        assert cleaned["signImage"] == {"url": "", "status": "missing"}
        assert cleaned["titleCard"] == {"url": "https://cdn/title.png", "status": "ready"}

    def test_summary(self):
        summary = asset_summary(clean_assets(payload_with_title()))
        assert summary["total_assets"] == 17
        assert summary["ready_assets"] == 2  # title card and background music
        assert summary["completion_percentage"] == 12
        assert "titleCard" not in summary["missing_assets"]
        assert len(summary["missing_assets"]) == 15

    def test_empty_summary(self):
        assert asset_summary({})["completion_percentage"] == 0


class TestCanSubmit:
    def test_title_card_required(self):
        assert not can_submit(assemble_payload(MIA, {}))
        assert can_submit(payload_with_title())


class TestRenderClient:
    def setup_method(self):
        self.session = MagicMock()
        self.client = RenderClient(endpoint_url="https://render.example.com/letter-hunt", session=self.session)

    def respond(self, status_code, data):
        response = MagicMock()
        response.ok = status_code < 400
        response.status_code = status_code
        response.json.return_value = data
        self.session.post.return_value = response

    def test_submit_body(self):
        self.respond(200, {"success": True, "job_id": "job-1"})

        data = self.client.submit(payload_with_title(), child_id=None)

        assert data["job_id"] == "job-1"
        body = self.session.post.call_args.kwargs["json"]
        assert body["childName"] == "Mia"
        assert body["targetLetter"] == "M"
        assert body["childTheme"] == "dog"
        assert body["childAge"] == 3
        assert body["childId"] is None
        assert body["submitted_by"] == DEFAULT_SUBMITTER_ID
        assert body["assets"]["titleCard"]["status"] == "ready"

    def test_error_message_from_endpoint(self):
        self.respond(500, {"success": False, "error": "Render queue full"})
        with pytest.raises(RenderSubmissionError, match="Render queue full"):
            self.client.submit(payload_with_title())

    def test_default_error_message(self):
        self.respond(500, {})
        with pytest.raises(RenderSubmissionError, match="Failed to start video generation"):
            self.client.submit(payload_with_title())

    def test_non_object_body(self):
        self.respond(502, ["upstream", "error"])
        with pytest.raises(RenderSubmissionError, match="Failed to start video generation"):
            self.client.submit(payload_with_title())

    def test_unreachable(self):
        self.session.post.side_effect = requests.Timeout("timed out")
        with pytest.raises(RenderSubmissionError):
            self.client.submit(payload_with_title())
