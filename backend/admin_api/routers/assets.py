import logging
import math
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from ..database import get_db
from ..models import Asset
from ..schemas import AssetOut, AssetPage, AssetStats, PaginationInfo, ReviewIn

logger = logging.getLogger(__name__)

ASSETS_PER_PAGE = 50

# Metadata fields covered by free-text search
SEARCH_METADATA_FIELDS = ("description", "child_name", "prompt", "audio_class", "letter")

router = APIRouter(
    prefix="/assets",
    tags=["assets"],
    responses={404: {"description": "Not found"}},
)


def require_admin(x_admin_user: Optional[str] = Header(None)) -> str:
    if not x_admin_user:
        raise HTTPException(status_code=401, detail="User not authenticated")
    return x_admin_user


def _apply_filters(query, status: Optional[str], type: Optional[str],
                   template: Optional[str], search: Optional[str]):
    if status and status != "all":
        query = query.filter(Asset.status == status)
    if type and type != "all":
        query = query.filter(Asset.type == type)
    if template and template != "all":
        query = query.filter(Asset.metadata_info["template"].as_string() == template)
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Asset.theme.ilike(pattern),
            Asset.prompt.ilike(pattern),
            *[Asset.metadata_info[field].as_string().ilike(pattern) for field in SEARCH_METADATA_FIELDS],
        ))
    return query


def _get_asset_or_404(db: Session, asset_id: str) -> Asset:
    asset = db.query(Asset).filter(Asset.id == asset_id).first()
    if not asset:
        raise HTTPException(status_code=404, detail="Asset not found")
    return asset


@router.get("", response_model=AssetPage)
def list_assets(
    status: Optional[str] = None,
    type: Optional[str] = None,
    template: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(ASSETS_PER_PAGE, ge=1, le=200),
    db: Session = Depends(get_db),
):
    query = _apply_filters(db.query(Asset), status, type, template, search)
    total = query.count()
    assets = (
        query.order_by(Asset.created_at.desc())
        .offset((page - 1) * per_page)
        .limit(per_page)
        .all()
    )
    return AssetPage(
        assets=[AssetOut.model_validate(asset) for asset in assets],
        pagination=PaginationInfo(
            current_page=page,
            total_pages=math.ceil(total / per_page),
            total_assets=total,
            assets_per_page=per_page,
        ),
    )


@router.get("/stats", response_model=AssetStats)
def asset_stats(db: Session = Depends(get_db)):
    counts = dict(db.query(Asset.status, func.count(Asset.id)).group_by(Asset.status).all())
    return AssetStats(
        total_assets=sum(counts.values()),
        pending_assets=counts.get("pending", 0),
        approved_assets=counts.get("approved", 0),
        rejected_assets=counts.get("rejected", 0),
    )


@router.get("/pending", response_model=List[AssetOut])
def pending_assets(db: Session = Depends(get_db)):
    """Review queue, oldest first."""
    return db.query(Asset).filter(Asset.status == "pending").order_by(Asset.created_at.asc()).all()


@router.get("/{asset_id}", response_model=AssetOut)
def get_asset(asset_id: str, db: Session = Depends(get_db)):
    return _get_asset_or_404(db, asset_id)


def _stamp_review(db: Session, asset: Asset, status: str, review: dict, reviewer: str) -> Asset:
    asset.status = status
    if asset.metadata_info is None:
        asset.metadata_info = {}
    asset.metadata_info["review"] = {
        **review,
        "reviewed_at": datetime.now(timezone.utc).isoformat(),
        "reviewed_by": reviewer,
    }
    # Ensure JSON field update is tracked
    flag_modified(asset, "metadata_info")
    db.commit()
    db.refresh(asset)
    logger.info(f"Asset {asset.id} {status} by {reviewer}")
    return asset


@router.post("/{asset_id}/approve", response_model=AssetOut)
def approve_asset(
    asset_id: str,
    review: Optional[ReviewIn] = None,
    reviewer: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    asset = _get_asset_or_404(db, asset_id)
    review = review or ReviewIn()
    return _stamp_review(db, asset, "approved", {
        "safe_zone": review.safe_zone or ["all_ok"],
        "approval_notes": review.approval_notes,
        "rejection_reason": "",
    }, reviewer)


@router.post("/{asset_id}/reject", response_model=AssetOut)
def reject_asset(
    asset_id: str,
    review: Optional[ReviewIn] = None,
    reviewer: str = Depends(require_admin),
    db: Session = Depends(get_db),
):
    asset = _get_asset_or_404(db, asset_id)
    review = review or ReviewIn()
    return _stamp_review(db, asset, "rejected", {
        "safe_zone": review.safe_zone,
        "approval_notes": review.approval_notes,
        "rejection_reason": review.rejection_reason.strip() or "Asset rejected",
    }, reviewer)
