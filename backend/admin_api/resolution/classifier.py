"""
Purpose classifier: maps a stored asset to the Letter Hunt slot it fills.

Assets were tagged inconsistently over time, so classification is an ordered
list of rules evaluated first-match-wins. The rules must stay in this order;
reordering changes which slot older assets land in.
"""

import logging
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

# Compatibility table for videos uploaded before purpose tagging existed.
# These IDs are matched before any metadata, including an explicit videoType.
# Retire an entry once the asset has been re-tagged with videoType.
LEGACY_VIDEO_SLOTS = {
    "eb3fcec0-d9a4-421d-a2fa-1bded854365d": "introVideo",   # Halloween, letter N
    "540dc1d4-f8c6-4c71-9b80-5d9f6964e9db": "introVideo",   # Dinosaurs, letter L
    "c0793472-2eb4-4dab-aaec-c28689391077": "introVideo",   # Dogs, letter A
    "c39cf5dc-dc21-4057-84d6-7ac059e1ee96": "intro2Video",  # Dinosaurs search
    "9b211a49-820f-477a-9512-322795762221": "intro2Video",  # Dog search
    "b4bb12bd-f2a3-4035-9d38-6fca03b9c8dc": "intro2Video",  # Halloween search
}

EXPLICIT_PURPOSE_FIELDS = ("imageType", "assetPurpose", "videoType")

# (keywords, slot); substring match against the lower-cased prompt
IMAGE_KEYWORD_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("street sign", "sign", "road sign"), "signImage"),
    (("book", "cover", "reading"), "bookImage"),
    (("grocery", "store", "cereal", "food", "can", "jar", "box"), "groceryImage"),
    (("ending", "goodbye", "wave"), "endingImage"),
)

AUDIO_PURPOSES = {
    purpose: purpose
    for purpose in (
        "backgroundMusic",
        "titleAudio",
        "introAudio",
        "intro2Audio",
        "signAudio",
        "bookAudio",
        "groceryAudio",
        "happyDanceAudio",
        "endingAudio",
    )
}

# (predicate over (section, category), slot)
VIDEO_SECTION_RULES: Tuple[Tuple[Callable[[str, str], bool], str], ...] = (
    (lambda section, category: section == "introVideo", "introVideo"),
    (lambda section, category: section == "intro2Video", "intro2Video"),
    (lambda section, category: section == "intro3Video", "intro3Video"),
    (lambda section, category: section in ("happyDanceVideo", "dance"), "happyDanceVideo"),
    (lambda section, category: category in ("letter AND theme", "letter-and-theme") or section == "intro",
     "introVideo"),
    (lambda section, category: section in ("search", "intro2") or category == "thematic", "intro2Video"),
    (lambda section, category: section in ("adventure", "intro3"), "intro3Video"),
    (lambda section, category: category == "dance", "happyDanceVideo"),
)


def _legacy_video_slot(asset) -> Optional[str]:
    if asset.type != "video":
        return None
    return LEGACY_VIDEO_SLOTS.get(str(asset.id))


def _explicit_slot(asset) -> Optional[str]:
    meta = asset.metadata_info or {}
    for field in EXPLICIT_PURPOSE_FIELDS:
        if meta.get(field):
            return meta[field]
    return None


def _image_prompt_slot(asset) -> Optional[str]:
    if asset.type != "image":
        return None
    meta = asset.metadata_info or {}
    prompt = (meta.get("prompt") or asset.prompt or "").lower()
    if not prompt:
        return None
    for keywords, slot in IMAGE_KEYWORD_RULES:
        if any(keyword in prompt for keyword in keywords):
            return slot
    return None


def _audio_purpose_slot(asset) -> Optional[str]:
    if asset.type != "audio":
        return None
    meta = asset.metadata_info or {}
    context = meta.get("template_context") or {}
    if context.get("asset_purpose"):
        return context["asset_purpose"]
    return AUDIO_PURPOSES.get(meta.get("purpose") or "")


def _video_section_slot(asset) -> Optional[str]:
    if asset.type != "video":
        return None
    meta = asset.metadata_info or {}
    section = meta.get("section") or ""
    category = meta.get("category") or ""
    for predicate, slot in VIDEO_SECTION_RULES:
        if predicate(section, category):
            return slot
    return None


CLASSIFICATION_RULES = (
    _legacy_video_slot,
    _explicit_slot,
    _image_prompt_slot,
    _audio_purpose_slot,
    _video_section_slot,
)


def classify_asset(asset) -> Optional[str]:
    """Return the slot key for an asset, or None when no rule matches."""
    for rule in CLASSIFICATION_RULES:
        slot = rule(asset)
        if slot:
            return slot
    logger.debug(f"Asset {asset.id} ({asset.type}) matched no slot rule")
    return None
