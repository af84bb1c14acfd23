import logging
from typing import Any, Dict, Optional

import requests

from ..config import DEFAULT_SUBMITTER_ID, HTTP_TIMEOUT_SECONDS, RENDER_ENDPOINT_URL
from ..schemas import LetterHuntPayload

logger = logging.getLogger(__name__)

# The title card is the only slot a render cannot do without
REQUIRED_SLOTS = ("titleCard",)


class RenderSubmissionError(Exception):
    pass


def clean_assets(payload: LetterHuntPayload) -> Dict[str, Dict[str, str]]:
    """Reduce descriptors to {url, status}; anything not ready is submitted as missing."""
    cleaned = {}
    for key, descriptor in payload.assets.items():
        ready = descriptor.status == "ready" and bool(descriptor.url)
        cleaned[key] = {
            "url": descriptor.url or "",
            "status": "ready" if ready else "missing",
        }
    return cleaned


def can_submit(payload: LetterHuntPayload) -> bool:
    return all(
        key in payload.assets and payload.assets[key].status == "ready"
        for key in REQUIRED_SLOTS
    )


def asset_summary(cleaned: Dict[str, Dict[str, str]]) -> Dict[str, Any]:
    total = len(cleaned)
    missing = [key for key, asset in cleaned.items() if asset["status"] != "ready"]
    ready = total - len(missing)
    return {
        "ready_assets": ready,
        "total_assets": total,
        "completion_percentage": round(ready * 100 / total) if total else 0,
        "missing_assets": missing,
    }


class RenderClient:
    def __init__(self, endpoint_url: str = RENDER_ENDPOINT_URL, timeout: float = HTTP_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        self.endpoint_url = endpoint_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def submit(self, payload: LetterHuntPayload, child_id: Optional[str] = None,
               child_age: Optional[int] = None, submitted_by: Optional[str] = None) -> Dict[str, Any]:
        body = {
            "childName": payload.child_name,
            "targetLetter": payload.target_letter,
            "childTheme": payload.theme,
            "childAge": child_age or 3,
            "childId": child_id,
            "submitted_by": submitted_by or DEFAULT_SUBMITTER_ID,
            "assets": clean_assets(payload),
        }
        logger.info(f"Submitting Letter Hunt render for {payload.child_name} (letter {payload.target_letter})")

        try:
            response = self.session.post(self.endpoint_url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise RenderSubmissionError(f"Render endpoint unreachable: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.ok or not data.get("success"):
            raise RenderSubmissionError(data.get("error") or "Failed to start video generation")
        return data
