import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, JSON, Text

from .database import Base


def _uuid():
    return str(uuid.uuid4())


def _now():
    return datetime.now(timezone.utc)


class Asset(Base):
    __tablename__ = "assets"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String, nullable=True)
    theme = Column(String, index=True, default="")
    # Media kind: image, audio, video, prompt
    type = Column(String, index=True)
    # Status: pending, approved, rejected
    status = Column(String, index=True, default="pending")
    file_url = Column(String, nullable=True)
    file_path = Column(String, nullable=True)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String, nullable=True)
    prompt = Column(Text, nullable=True)
    tags = Column(JSON, default=list)
    # template, child_name, targetLetter, imageType, assetPurpose, review, ...
    metadata_info = Column(JSON, default=dict)
    created_at = Column(DateTime(timezone=True), default=_now, index=True)


class Child(Base):
    __tablename__ = "children"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String, index=True)
    age = Column(Integer, nullable=True)
    primary_interest = Column(String, nullable=True)
    parent_id = Column(String(36), nullable=True)


class LetterHuntRequest(Base):
    __tablename__ = "letter_hunt_requests"

    id = Column(String(36), primary_key=True, default=_uuid)
    child_id = Column(String(36), nullable=True)
    child_name = Column(String)
    target_letter = Column(String(1))
    theme = Column(String)
    assets = Column(JSON, default=dict)  # slot -> {url, status} as submitted
    job_id = Column(String, nullable=True)
    render_id = Column(String, nullable=True)
    output_url = Column(String, nullable=True)
    # Status: submitted, failed
    status = Column(String, default="submitted")
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_now)
