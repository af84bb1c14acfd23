import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..utils.video_storage import (
    VIDEO_PREFIXES,
    VideoStorage,
    VideoStorageError,
    format_file_size,
    storage_recommendations,
)
from .assets import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/storage",
    tags=["storage"],
    responses={502: {"description": "S3 operation failed"}},
)


def get_video_storage() -> VideoStorage:
    return VideoStorage()


def _storage_failed(e: VideoStorageError) -> HTTPException:
    return HTTPException(status_code=502, detail=f"S3 operation failed: {e}")


@router.get("/videos/stats")
def video_storage_stats(storage: VideoStorage = Depends(get_video_storage)):
    """Object counts, sizes per storage class and an estimated monthly cost."""
    try:
        stats = storage.storage_stats()
    except VideoStorageError as e:
        raise _storage_failed(e)

    stats["total_size_formatted"] = format_file_size(stats["total_size"])
    for entry in stats["storage_breakdown"].values():
        entry["size_formatted"] = format_file_size(entry["size"])
    return {
        "success": True,
        "stats": stats,
        "recommendations": storage_recommendations(stats),
    }


@router.get("/videos")
def list_stored_videos(
    prefix: str = "",
    type: Optional[str] = None,
    max_results: int = Query(50, ge=1, le=1000),
    storage: VideoStorage = Depends(get_video_storage),
):
    # A type filter picks the prefix; unknown types list the whole bucket
    if type:
        prefix = VIDEO_PREFIXES.get(type, "")
    try:
        videos = storage.list_videos(prefix, max_results)
    except VideoStorageError as e:
        raise _storage_failed(e)

    now = datetime.now(timezone.utc)
    total_size = sum(video.size for video in videos)
    return {
        "success": True,
        "videos": [video.to_dict(now) for video in videos],
        "count": len(videos),
        "total_size": total_size,
        "total_size_formatted": format_file_size(total_size),
    }


@router.post("/videos/cleanup")
def cleanup_temp_videos(
    older_than_days: int = Query(7, ge=0),
    dry_run: bool = True,
    reviewer: str = Depends(require_admin),
    storage: VideoStorage = Depends(get_video_storage),
):
    """
    Remove temporary renders older than `older_than_days`.

    Defaults to a dry run that only reports what would be deleted.
    """
    now = datetime.now(timezone.utc)
    try:
        if dry_run:
            expired = storage.expired_temp_videos(older_than_days, now)
            return {
                "success": True,
                "dry_run": True,
                "would_delete": len(expired),
                "would_free_up": format_file_size(sum(video.size for video in expired)),
                "videos": [video.to_dict(now) for video in expired],
            }
        deleted = storage.cleanup_temp_videos(older_than_days, now)
    except VideoStorageError as e:
        raise _storage_failed(e)

    logger.info(f"{reviewer} deleted {len(deleted)} temporary videos older than {older_than_days} days")
    return {
        "success": True,
        "dry_run": False,
        "deleted_count": len(deleted),
        "message": f"Deleted {len(deleted)} temporary videos older than {older_than_days} days",
    }
