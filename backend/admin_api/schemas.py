from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

AssetType = Literal["image", "audio", "video", "prompt"]
AssetStatus = Literal["pending", "approved", "rejected"]
SlotStatus = Literal["missing", "generating", "ready"]
SafeZone = Literal[
    "left_safe",
    "right_safe",
    "center_safe",
    "intro_safe",
    "outro_safe",
    "all_ok",
    "not_applicable",
    "frame",
    "slideshow",
]


class AssetOut(BaseModel):
    id: str
    title: Optional[str] = None
    theme: Optional[str] = None
    type: AssetType
    status: AssetStatus
    file_url: Optional[str] = None
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    prompt: Optional[str] = None
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="metadata_info")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaginationInfo(BaseModel):
    current_page: int
    total_pages: int
    total_assets: int
    assets_per_page: int


class AssetPage(BaseModel):
    assets: List[AssetOut]
    pagination: PaginationInfo


class AssetStats(BaseModel):
    total_assets: int
    pending_assets: int
    approved_assets: int
    rejected_assets: int


class ReviewIn(BaseModel):
    safe_zone: List[SafeZone] = Field(default_factory=list)
    approval_notes: str = Field("", max_length=500)
    rejection_reason: str = Field("", max_length=500)


class ChildOut(BaseModel):
    id: str
    name: str
    age: Optional[int] = None
    primary_interest: Optional[str] = None
    parent_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SlotDescriptor(BaseModel):
    type: Literal["image", "audio", "video"]
    name: str
    description: str
    status: SlotStatus
    url: Optional[str] = None
    generated_at: Optional[datetime] = None
    asset_id: Optional[str] = None


class LetterHuntPayload(BaseModel):
    child_name: str
    target_letter: str
    theme: str
    assets: Dict[str, SlotDescriptor]


class GenerateSlotRequest(BaseModel):
    payload: LetterHuntPayload
    prompt: Optional[str] = None  # image prompt override


class SubmitRequest(BaseModel):
    payload: LetterHuntPayload
    child_id: Optional[str] = None
    child_age: Optional[int] = None
    submitted_by: Optional[str] = None


class BatchRequest(BaseModel):
    letters: List[str] = Field(..., min_length=1)
    slots: List[str] = Field(
        default_factory=lambda: ["introAudio", "intro2Audio"]
    )
    child_name: str = ""
    theme: Optional[str] = None
