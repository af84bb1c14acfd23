"""
Generation trigger boundary.

Two ways to fill a slot: hand the reviewer off to a sibling generator page
(which later returns with the generated URL in the query string), or call the
generation API directly.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
from urllib.parse import urlencode

import requests
from sqlalchemy.exc import SQLAlchemyError

from ..config import (
    ADMIN_BASE_URL,
    DEFAULT_VOICE_ID,
    GENERATION_API_URL,
    HTTP_TIMEOUT_SECONDS,
    LETTER_HUNT_TEMPLATE,
)
from ..models import Asset
from ..schemas import LetterHuntPayload
from .assembler import complete_generation
from .slots import RequestContext, get_slot

logger = logging.getLogger(__name__)

AUDIO_SCRIPTS = {
    "titleAudio": "Letter Hunt for {child_name}",
    "introAudio": "Today we're looking for the letter {letter}!",
    "intro2Audio": "Everywhere you go, look for the letter {letter}!",
    "signAudio": "On signs",
    "bookAudio": "On books",
    "groceryAudio": "Even in the grocery store!",
    "happyDanceAudio": "And when you find your letter, I want you to do a little happy dance!",
    "endingAudio": "Have fun finding the letter {letter}, {child_name}!",
}

# Slots whose content names the child; everything else is generic per letter
PERSONALIZED_SLOTS = frozenset({"titleCard", "titleAudio", "endingAudio"})

IMAGE_DEFAULTS = {
    "artStyle": "2D Pixar Style",
    "ageRange": "3-5",
    "aspectRatio": "16:9",
}

GENERATOR_PAGES = {
    "image": "/admin/prompt-generator",
    "audio": "/admin/audio-generator",
    "video": "/admin/video-asset-upload",
}

RETURN_URL_PARAMS = ("generatedImageUrl", "generatedAudioUrl", "generatedVideoUrl")


class GenerationError(Exception):
    pass


def audio_script(slot_key: str, context: RequestContext) -> str:
    try:
        template = AUDIO_SCRIPTS[slot_key]
    except KeyError:
        raise ValueError(f"Unknown audio asset: {slot_key}") from None
    return template.format(child_name=context.child_name, letter=context.target_letter)


def image_prompt(slot_key: str, context: RequestContext) -> str:
    slot = get_slot(slot_key)
    return f"{slot.describe(context)}, {IMAGE_DEFAULTS['artStyle']}, bright colors, for ages {IMAGE_DEFAULTS['ageRange']}"


def build_generation_link(slot_key: str, context: RequestContext, return_url: str = "") -> str:
    """URL of the sibling page that produces an asset for this slot."""
    slot = get_slot(slot_key)

    if slot.type == "image":
        params = {
            "templateType": LETTER_HUNT_TEMPLATE,
            "theme": context.theme,
            "childName": context.child_name,
            "targetLetter": context.target_letter,
            "assetType": slot_key,
            **IMAGE_DEFAULTS,
        }
    elif slot.type == "audio":
        params = {
            "templateType": LETTER_HUNT_TEMPLATE,
            "assetPurpose": slot_key,
            "childName": context.child_name,
            "targetLetter": context.target_letter,
            "script": audio_script(slot_key, context),
            "voiceId": DEFAULT_VOICE_ID,
            "speed": "1.0",
        }
    else:
        params = {
            "templateType": LETTER_HUNT_TEMPLATE,
            "videoType": slot_key,
            "theme": context.theme,
            "targetLetter": context.target_letter,
        }

    if return_url:
        params["returnUrl"] = return_url
    params["assetKey"] = slot_key
    return f"{ADMIN_BASE_URL}{GENERATOR_PAGES[slot.type]}?{urlencode(params)}"


def apply_generation_return(payload: LetterHuntPayload, params: Mapping[str, Any]) -> LetterHuntPayload:
    """Mark a slot ready from the query string a generator page returned with."""
    slot_key = params.get("assetKey")
    url = next((params[name] for name in RETURN_URL_PARAMS if params.get(name)), None)
    if not slot_key or not url or slot_key not in payload.assets:
        return payload
    logger.info(f"Received generated asset for {slot_key}: {url}")
    return complete_generation(payload, slot_key, url)


class GenerationClient:
    """Thin client for the generation API."""

    def __init__(self, base_url: str = GENERATION_API_URL, timeout: float = HTTP_TIMEOUT_SECONDS,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{path}"
        try:
            response = self.session.post(url, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise GenerationError(f"Generation request to {path} failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if not response.ok or data.get("success") is False:
            raise GenerationError(data.get("error") or f"Generation API returned {response.status_code}")

        asset_url = data.get("url") or data.get("file_url")
        if not asset_url:
            raise GenerationError(f"Generation API response from {path} had no asset URL")
        data["url"] = asset_url
        return data

    def generate_audio(self, slot_key: str, context: RequestContext,
                       voice_id: str = DEFAULT_VOICE_ID, speed: float = 1.0) -> Dict[str, Any]:
        return self._post("generate-audio", {
            "script": audio_script(slot_key, context),
            "voiceId": voice_id,
            "speed": speed,
            "metadata": {
                "template": LETTER_HUNT_TEMPLATE,
                "assetPurpose": slot_key,
                "targetLetter": context.target_letter,
                "child_name": context.child_name if slot_key in PERSONALIZED_SLOTS else "",
                "theme": context.theme,
            },
        })

    def generate_image(self, slot_key: str, context: RequestContext,
                       prompt: Optional[str] = None) -> Dict[str, Any]:
        return self._post("generate-image", {
            "prompt": prompt or image_prompt(slot_key, context),
            "metadata": {
                "template": LETTER_HUNT_TEMPLATE,
                "imageType": slot_key,
                "targetLetter": context.target_letter,
                "child_name": context.child_name if slot_key in PERSONALIZED_SLOTS else "",
                "theme": context.theme,
                **IMAGE_DEFAULTS,
            },
        })

    def generate_slot(self, slot_key: str, context: RequestContext,
                      prompt: Optional[str] = None) -> Dict[str, Any]:
        slot = get_slot(slot_key)
        if slot.type == "audio":
            return self.generate_audio(slot_key, context)
        if slot.type == "image":
            return self.generate_image(slot_key, context, prompt)
        raise GenerationError(
            f"Generation for {slot.type} assets is not available; use the video upload page"
        )


@dataclass
class BatchJob:
    slot_key: str
    context: RequestContext


@dataclass
class BatchResult:
    job: BatchJob
    url: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_batch(
    client: GenerationClient,
    jobs: Sequence[BatchJob],
    group_size: int,
    pause_seconds: float,
    sleep: Callable[[float], None] = time.sleep,
    on_result: Optional[Callable[[BatchResult, Dict[str, Any]], None]] = None,
) -> List[BatchResult]:
    """
    Run generation jobs one at a time, pausing between groups of
    `group_size` jobs so the downstream API is not flooded.
    """
    group_size = max(1, group_size)
    results = []
    for start in range(0, len(jobs), group_size):
        if start:
            sleep(pause_seconds)
        for job in jobs[start:start + group_size]:
            try:
                data = client.generate_slot(job.slot_key, job.context)
            except (GenerationError, ValueError, KeyError) as e:
                logger.warning(f"Batch generation failed for {job.slot_key} ({job.context.target_letter}): {e}")
                results.append(BatchResult(job=job, error=str(e)))
                continue
            result = BatchResult(job=job, url=data["url"])
            if on_result:
                try:
                    on_result(result, data)
                except SQLAlchemyError as e:
                    logger.error(f"Could not record generated {job.slot_key} ({job.context.target_letter}) at {result.url}: {e}")
                    result.error = f"Failed to record generated asset: {e}"
            results.append(result)
    return results


def record_generated_asset(db, slot_key: str, context: RequestContext, data: Dict[str, Any]) -> Asset:
    """Store a generated file as a pending asset so the next pool fetch sees it."""
    slot = get_slot(slot_key)
    metadata = {
        "template": LETTER_HUNT_TEMPLATE,
        "targetLetter": context.target_letter,
        "child_name": context.child_name if slot_key in PERSONALIZED_SLOTS else "",
        "theme": context.theme,
        "generatedAt": data.get("generated_at"),
    }
    if slot.type == "image":
        metadata.update({"imageType": slot_key, "prompt": data.get("prompt") or image_prompt(slot_key, context)})
        metadata.update(IMAGE_DEFAULTS)
    else:
        metadata.update({"assetPurpose": slot_key, "script": audio_script(slot_key, context)})

    asset = Asset(
        title=f"{slot.name} - Letter {context.target_letter}",
        theme=context.theme,
        type=slot.type,
        status="pending",
        file_url=data["url"],
        prompt=metadata.get("prompt"),
        tags=[LETTER_HUNT_TEMPLATE, slot_key],
        metadata_info=metadata,
    )
    db.add(asset)
    db.commit()
    db.refresh(asset)
    logger.info(f"Recorded generated {slot.type} asset {asset.id} for {slot_key}")
    return asset
