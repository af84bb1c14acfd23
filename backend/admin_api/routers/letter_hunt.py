import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import DEFAULT_THEME
from ..database import get_db, get_session_factory
from ..models import Child, LetterHuntRequest
from ..schemas import BatchRequest, GenerateSlotRequest, LetterHuntPayload, SubmitRequest
from ..resolution.assembler import begin_generation, complete_generation, fail_generation
from ..resolution.generation import (
    GenerationClient,
    GenerationError,
    PERSONALIZED_SLOTS,
    apply_generation_return,
    build_generation_link,
    record_generated_asset,
)
from ..resolution.pipeline import resolve_letter_hunt
from ..resolution.render import RenderClient, RenderSubmissionError, asset_summary, can_submit, clean_assets
from ..resolution.slots import SLOTS_BY_KEY, RequestContext
from ..tasks import generate_letter_assets_batch

logger = logging.getLogger(__name__)

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)

router = APIRouter(
    prefix="/letter-hunt",
    tags=["letter-hunt"],
    responses={404: {"description": "Not found"}},
)


def get_generation_client() -> GenerationClient:
    return GenerationClient()


def get_render_client() -> RenderClient:
    return RenderClient()


def _slot_or_404(slot_key: str):
    slot = SLOTS_BY_KEY.get(slot_key)
    if not slot:
        raise HTTPException(status_code=404, detail=f"Unknown Letter Hunt slot: {slot_key}")
    return slot


def _context(child_name: Optional[str], target_letter: Optional[str], theme: Optional[str]) -> RequestContext:
    try:
        return RequestContext.build(child_name, target_letter, theme)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _context_from_payload(payload: LetterHuntPayload) -> RequestContext:
    return _context(payload.child_name, payload.target_letter, payload.theme)


@router.get("/payload", response_model=LetterHuntPayload)
def letter_hunt_payload(
    request: Request,
    child_id: Optional[str] = None,
    child_name: Optional[str] = None,
    target_letter: Optional[str] = None,
    theme: Optional[str] = None,
    db: Session = Depends(get_db),
    session_factory=Depends(get_session_factory),
):
    """
    Resolve every Letter Hunt slot for a child and letter.

    When a generator page hands control back, its `assetKey` and
    `generated*Url` query parameters are applied on top of the stored state.
    """
    if child_id:
        child = db.query(Child).filter(Child.id == child_id).first()
        if not child:
            raise HTTPException(status_code=404, detail="Child not found")
        try:
            context = RequestContext.from_child(child, target_letter, theme)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    else:
        context = _context(child_name, target_letter, theme)

    logger.info(f"Checking for existing Letter Hunt assets for {context.child_name} (Letter {context.target_letter})")
    payload = resolve_letter_hunt(session_factory, context)
    return apply_generation_return(payload, request.query_params)


@router.get("/slots/{slot_key}/generation-link")
def generation_link(
    slot_key: str,
    child_name: str,
    target_letter: Optional[str] = None,
    theme: Optional[str] = None,
    return_url: str = "",
):
    _slot_or_404(slot_key)
    context = _context(child_name, target_letter, theme)
    return {"asset_key": slot_key, "url": build_generation_link(slot_key, context, return_url)}


def _generation_failed(payload: LetterHuntPayload, slot_key: str, error: Exception) -> JSONResponse:
    rolled_back = fail_generation(payload, slot_key)
    return JSONResponse(
        status_code=502,
        content={
            "detail": f"Failed to generate {payload.assets[slot_key].name}: {error}",
            "payload": rolled_back.model_dump(mode="json"),
        },
    )


@router.post("/slots/{slot_key}/generate", response_model=LetterHuntPayload)
def generate_slot(
    slot_key: str,
    body: GenerateSlotRequest,
    db: Session = Depends(get_db),
    client: GenerationClient = Depends(get_generation_client),
):
    _slot_or_404(slot_key)
    context = _context_from_payload(body.payload)
    payload = begin_generation(body.payload, slot_key)

    try:
        data = client.generate_slot(slot_key, context, body.prompt)
    except (GenerationError, ValueError) as e:
        logger.error(f"Error generating asset {slot_key} for {context.child_name}: {e}")
        return _generation_failed(payload, slot_key, e)

    try:
        asset = record_generated_asset(db, slot_key, context, data)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error recording generated {slot_key} at {data['url']}: {e}")
        return _generation_failed(payload, slot_key, e)

    return complete_generation(payload, slot_key, data["url"], asset_id=asset.id)


@router.post("/submit")
def submit_letter_hunt(
    body: SubmitRequest,
    db: Session = Depends(get_db),
    client: RenderClient = Depends(get_render_client),
):
    payload = body.payload
    if not can_submit(payload):
        raise HTTPException(status_code=400, detail="Title card must be ready before submitting")

    child_id = body.child_id if body.child_id and UUID_RE.match(body.child_id) else None
    if not child_id:
        logger.warning("Invalid or missing child_id, submitting without a child record")

    cleaned = clean_assets(payload)
    record = LetterHuntRequest(
        child_id=child_id,
        child_name=payload.child_name,
        target_letter=payload.target_letter,
        theme=payload.theme,
        assets=cleaned,
    )

    try:
        data = client.submit(payload, child_id=child_id, child_age=body.child_age, submitted_by=body.submitted_by)
    except RenderSubmissionError as e:
        record.status = "failed"
        record.error_message = str(e)
        db.add(record)
        db.commit()
        logger.error(f"Error submitting Letter Hunt video for {payload.child_name}: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to submit video generation: {e}")

    record.status = "submitted"
    record.job_id = data.get("job_id")
    record.render_id = data.get("render_id")
    record.output_url = data.get("output_url")
    db.add(record)
    db.commit()
    db.refresh(record)

    return {
        "success": True,
        "request_id": record.id,
        "job_id": record.job_id,
        "render_id": record.render_id,
        "output_url": record.output_url,
        "asset_summary": asset_summary(cleaned),
    }


@router.post("/batch", status_code=202)
def queue_batch_generation(body: BatchRequest):
    """Queue sequential generation of letter-specific assets."""
    for slot_key in body.slots:
        slot = _slot_or_404(slot_key)
        if slot.type == "video" or slot.fallback_url:
            raise HTTPException(status_code=400, detail=f"Slot {slot_key} cannot be batch generated")
        if slot_key in PERSONALIZED_SLOTS and not body.child_name.strip():
            raise HTTPException(status_code=400, detail=f"Slot {slot_key} needs a child name")

    letters = []
    for letter in body.letters:
        letter = letter.strip().upper()[:1]
        if not letter.isalpha():
            raise HTTPException(status_code=400, detail=f"Invalid target letter: {letter!r}")
        letters.append(letter)

    theme = (body.theme or "").strip() or DEFAULT_THEME
    task = generate_letter_assets_batch.delay(letters, body.slots, body.child_name, theme)
    return {"task_id": task.id, "letters": letters, "slots": body.slots, "theme": theme}
