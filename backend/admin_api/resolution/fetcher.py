"""
Asset pool fetcher.

Issues the fixed set of Letter Hunt filter groups against the assets table
and concatenates the results. Group order matters: the selector falls back
to the first candidate when no theme matches, so earlier groups win.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Sequence

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from ..config import LETTER_HUNT_TEMPLATE
from ..models import Asset
from .slots import PERSONALIZED_TITLE_SLOT, RequestContext

logger = logging.getLogger(__name__)

DEFAULT_STATUSES = ("approved", "pending")


def _meta(key: str):
    return Asset.metadata_info[key].as_string()


def _generic():
    return or_(_meta("child_name").is_(None), _meta("child_name") == "")


@dataclass(frozen=True)
class FetchGroup:
    name: str
    criteria: Callable[[RequestContext], list]


FETCH_GROUPS: Sequence[FetchGroup] = (
    FetchGroup("child_and_letter", lambda ctx: [
        _meta("child_name") == ctx.child_name,
        _meta("targetLetter") == ctx.target_letter,
    ]),
    FetchGroup("letter_video", lambda ctx: [
        Asset.type == "video",
        _meta("targetLetter") == ctx.target_letter,
    ]),
    FetchGroup("letter_generic_audio", lambda ctx: [
        Asset.type == "audio",
        _meta("targetLetter") == ctx.target_letter,
        _generic(),
    ]),
    FetchGroup("generic_video", lambda ctx: [
        Asset.type == "video",
        _generic(),
        _meta("targetLetter").is_(None),
    ]),
    FetchGroup("generic_audio", lambda ctx: [
        Asset.type == "audio",
        _generic(),
        _meta("targetLetter").is_(None),
    ]),
    FetchGroup("letter_generic_image", lambda ctx: [
        Asset.type == "image",
        _meta("targetLetter") == ctx.target_letter,
        _generic(),
    ]),
    FetchGroup("child_title_card", lambda ctx: [
        _meta("imageType") == PERSONALIZED_TITLE_SLOT,
        _meta("child_name") == ctx.child_name,
    ]),
)


def _run_group(session_factory, group: FetchGroup, context: RequestContext,
               template: str, statuses: Sequence[str]) -> List[Asset]:
    db = session_factory()
    try:
        query = (
            db.query(Asset)
            .filter(Asset.status.in_(list(statuses)))
            .filter(_meta("template") == template)
            .filter(*group.criteria(context))
            .order_by(Asset.created_at.desc())
        )
        assets = query.all()
        logger.debug(f"Fetch group {group.name}: {len(assets)} assets")
        return assets
    except SQLAlchemyError as e:
        logger.error(f"Fetch group {group.name} failed for {context}: {e}")
        return []
    finally:
        db.close()


def fetch_asset_pool(
    session_factory,
    context: RequestContext,
    template: str = LETTER_HUNT_TEMPLATE,
    statuses: Sequence[str] = DEFAULT_STATUSES,
    groups: Sequence[FetchGroup] = FETCH_GROUPS,
) -> List[Asset]:
    """
    Run every filter group concurrently and concatenate results in group
    order. Duplicates across groups are kept; a failed group contributes
    nothing.
    """
    if not groups:
        return []

    with ThreadPoolExecutor(max_workers=len(groups)) as executor:
        results = list(executor.map(
            lambda group: _run_group(session_factory, group, context, template, statuses),
            groups,
        ))

    pool = [asset for group_assets in results for asset in group_assets]
    logger.info(
        f"Asset pool for {context.child_name} (letter {context.target_letter}): "
        f"{len(pool)} candidates from {len(groups)} groups"
    )
    return pool
