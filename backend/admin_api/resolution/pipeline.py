import logging
from collections import defaultdict
from typing import Dict, List

from ..config import LETTER_HUNT_TEMPLATE
from ..schemas import LetterHuntPayload
from .assembler import assemble_payload
from .classifier import classify_asset
from .fetcher import fetch_asset_pool
from .selector import select_asset
from .slots import LETTER_HUNT_SLOTS, RequestContext

logger = logging.getLogger(__name__)


def group_by_slot(pool) -> Dict[str, List]:
    """Classify every candidate, keeping fetch order within each slot."""
    candidates = defaultdict(list)
    for asset in pool:
        slot_key = classify_asset(asset)
        if slot_key:
            candidates[slot_key].append(asset)
    return candidates


def resolve_letter_hunt(session_factory, context: RequestContext,
                        template: str = LETTER_HUNT_TEMPLATE) -> LetterHuntPayload:
    pool = fetch_asset_pool(session_factory, context, template=template)
    candidates = group_by_slot(pool)

    resolved = {
        slot.key: select_asset(candidates.get(slot.key, []), context.theme, context.child_name)
        for slot in LETTER_HUNT_SLOTS
    }

    found = sorted(key for key, asset in resolved.items() if asset is not None)
    logger.info(f"Resolved {len(found)}/{len(LETTER_HUNT_SLOTS)} slots for {context.child_name}: {found}")
    return assemble_payload(context, resolved)
