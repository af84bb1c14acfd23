"""
Payload assembler and per-slot state transitions.

A slot is `missing`, `generating` or `ready`. Transitions here are local to
the payload a reviewer is working on; the next rebuild from the asset store
replaces them with ground truth.
"""

from datetime import datetime, timezone
from typing import Mapping, Optional

from ..schemas import LetterHuntPayload, SlotDescriptor
from .slots import LETTER_HUNT_SLOTS, RequestContext, get_slot


def describe_slot(slot_key: str, context: RequestContext, asset=None) -> SlotDescriptor:
    slot = get_slot(slot_key)
    base = {
        "type": slot.type,
        "name": slot.name,
        "description": slot.describe(context),
    }
    if asset is not None:
        return SlotDescriptor(
            status="ready",
            url=asset.file_url,
            generated_at=asset.created_at,
            asset_id=str(asset.id),
            **base,
        )
    if slot.fallback_url:
        return SlotDescriptor(status="ready", url=slot.fallback_url, **base)
    return SlotDescriptor(status="missing", **base)


def assemble_payload(context: RequestContext, resolved: Mapping[str, Optional[object]]) -> LetterHuntPayload:
    """Build one descriptor per Letter Hunt slot from the resolved assets."""
    return LetterHuntPayload(
        child_name=context.child_name,
        target_letter=context.target_letter,
        theme=context.theme,
        assets={
            slot.key: describe_slot(slot.key, context, resolved.get(slot.key))
            for slot in LETTER_HUNT_SLOTS
        },
    )


def _replace_slot(payload: LetterHuntPayload, slot_key: str, **changes) -> LetterHuntPayload:
    if slot_key not in payload.assets:
        raise KeyError(f"Unknown Letter Hunt slot: {slot_key}")
    assets = dict(payload.assets)
    assets[slot_key] = assets[slot_key].model_copy(update=changes)
    return payload.model_copy(update={"assets": assets})


def begin_generation(payload: LetterHuntPayload, slot_key: str) -> LetterHuntPayload:
    return _replace_slot(payload, slot_key, status="generating")


def complete_generation(payload: LetterHuntPayload, slot_key: str, url: str,
                        asset_id: Optional[str] = None) -> LetterHuntPayload:
    return _replace_slot(
        payload,
        slot_key,
        status="ready",
        url=url,
        asset_id=asset_id,
        generated_at=datetime.now(timezone.utc),
    )


def fail_generation(payload: LetterHuntPayload, slot_key: str) -> LetterHuntPayload:
    return _replace_slot(payload, slot_key, status="missing")
