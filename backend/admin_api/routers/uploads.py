from fastapi import APIRouter, Depends, UploadFile, File, Form, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional
from ..config import PUBLIC_MEDIA_BASE_URL, UPLOAD_DIR
from ..database import get_db
from ..models import Asset
from ..schemas import AssetOut
from ..utils.metadata import media_duration
import os
import hashlib
import logging
import uuid
from PIL import Image

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/assets",
    tags=["uploads"],
    responses={404: {"description": "Not found"}},
)

ASSET_TYPES = ("image", "audio", "video", "prompt")
TEMPLATES = ("lullaby", "name-video", "letter-hunt", "general")
PERSONALIZATION_OPTIONS = ("general", "personalized")

MAX_FILE_SIZE = {
    "image": 10 * 1024 * 1024,
    "audio": 50 * 1024 * 1024,
    "video": 100 * 1024 * 1024,
    "prompt": 1024,
}

ALLOWED_FILE_EXTENSIONS = {
    "image": (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg"),
    "audio": (".mp3", ".wav", ".ogg", ".m4a", ".aac"),
    "video": (".mp4", ".webm", ".mov", ".avi", ".mkv"),
    "prompt": (".txt", ".md"),
}

CHUNK_SIZE = 64 * 1024


def validate_upload_form(theme: str, type: str, personalization: str, child_name: str,
                         template: str, volume: float, filename: str) -> list:
    """Return a list of {field, message} errors; empty when the form is valid."""
    errors = []
    if not theme.strip():
        errors.append({"field": "theme", "message": "This field is required"})
    elif len(theme) > 255:
        errors.append({"field": "theme", "message": "Must be 255 characters or fewer"})
    if type not in ASSET_TYPES:
        errors.append({"field": "type", "message": "Invalid asset type"})
    if personalization not in PERSONALIZATION_OPTIONS:
        errors.append({"field": "personalization", "message": "Invalid personalization option"})
    if personalization == "personalized" and not child_name.strip():
        errors.append({"field": "child_name", "message": "Child name is required for personalized assets"})
    if template and template not in TEMPLATES:
        errors.append({"field": "template", "message": "Invalid template"})
    if volume < 0 or volume > 2:
        errors.append({"field": "volume", "message": "Volume must be between 0 and 2"})
    if type in ALLOWED_FILE_EXTENSIONS:
        extension = os.path.splitext(filename or "")[1].lower()
        if extension not in ALLOWED_FILE_EXTENSIONS[type]:
            errors.append({"field": "file", "message": "Invalid file type"})
    return errors


@router.post("/upload", response_model=AssetOut)
async def upload_asset(
    file: UploadFile = File(...),
    theme: str = Form(...),
    type: str = Form(...),
    description: str = Form(""),
    tags: str = Form(""),
    prompt: str = Form(""),
    personalization: str = Form("general"),
    child_name: str = Form(""),
    template: str = Form(""),
    volume: float = Form(1.0),
    audio_class: str = Form(""),
    letter: str = Form(""),
    image_type: str = Form(""),
    asset_purpose: str = Form(""),
    video_type: str = Form(""),
    target_letter: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    """
    Upload a media asset for review.

    - **file**: The binary file stream.
    - **theme** / **type**: Required classification.
    - Remaining fields land in the asset's metadata; the asset starts as `pending`.
    """
    errors = validate_upload_form(theme, type, personalization, child_name, template, volume, file.filename)
    if errors:
        raise HTTPException(status_code=400, detail=errors)

    # 1. Receive file & calculate hash while streaming to disk
    os.makedirs(UPLOAD_DIR, exist_ok=True)
    extension = os.path.splitext(file.filename)[1].lower()
    stored_name = f"{uuid.uuid4()}{extension}"
    file_location = os.path.join(UPLOAD_DIR, stored_name)
    temp_location = file_location + ".tmp"
    sha256_hash = hashlib.sha256()
    file_size = 0

    try:
        with open(temp_location, "wb") as buffer:
            while content := await file.read(CHUNK_SIZE):
                file_size += len(content)
                if file_size > MAX_FILE_SIZE[type]:
                    raise HTTPException(
                        status_code=413,
                        detail=f"File size exceeds {MAX_FILE_SIZE[type] / (1024 * 1024):.1f}MB limit",
                    )
                sha256_hash.update(content)
                buffer.write(content)
        os.rename(temp_location, file_location)
    except Exception:
        # Cleanup temp file on error
        if os.path.exists(temp_location):
            os.remove(temp_location)
        raise

    # 2. Technical metadata
    metadata = {
        "description": description,
        "prompt": prompt,
        "personalization": personalization,
        "child_name": child_name.strip() if personalization == "personalized" else "",
        "template": template or None,
        "fixity_sha256": sha256_hash.hexdigest(),
        "original_filename": file.filename,
    }
    if type == "audio":
        metadata.update({"volume": volume, "audio_class": audio_class})
    if letter:
        metadata["letter"] = letter.upper()[:1]
    if target_letter:
        metadata["targetLetter"] = target_letter.upper()[:1]
    for key, value in (("imageType", image_type), ("assetPurpose", asset_purpose), ("videoType", video_type)):
        if value:
            metadata[key] = value

    if type == "image":
        try:
            with Image.open(file_location) as img:
                metadata["width"], metadata["height"] = img.size
        except Exception as e:
            logger.warning(f"Error extracting dimensions: {e}")
    elif type in ("audio", "video"):
        duration = media_duration(file_location)
        if duration is not None:
            metadata["duration"] = duration

    # 3. Save to database
    db_asset = Asset(
        title=os.path.splitext(file.filename)[0],
        theme=theme.strip(),
        type=type,
        status="pending",
        file_url=f"{PUBLIC_MEDIA_BASE_URL}/{stored_name}",
        file_path=file_location,
        file_size=file_size,
        mime_type=file.content_type,
        prompt=prompt or None,
        tags=[tag.strip() for tag in tags.split(",") if tag.strip()],
        metadata_info=metadata,
    )
    try:
        db.add(db_asset)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        os.remove(file_location)
        logger.error(f"Failed to save asset record for {file.filename}; removed {file_location}")
        raise
    db.refresh(db_asset)

    logger.info(f"Uploaded {type} asset {db_asset.id} ({file_size} bytes)")
    return db_asset
