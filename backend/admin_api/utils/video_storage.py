"""
Rendered video storage on S3.

Renders and uploaded videos live in one bucket under a few prefixes. This
module lists them, estimates what they cost to keep, and prunes old
temporary renders.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import AWS_REGION, VIDEO_BUCKET

logger = logging.getLogger(__name__)

VIDEO_PREFIXES = {
    "remotion": "renders/",
    "user-generated": "videos/user-generated/",
    "temp": "videos/temp/",
}
TEMP_PREFIX = VIDEO_PREFIXES["temp"]

# USD per GB-month; rough, varies by region
COST_PER_GB = {
    "STANDARD": 0.023,
    "STANDARD_IA": 0.0125,
    "GLACIER": 0.004,
    "DEEP_ARCHIVE": 0.00099,
}

STATS_SCAN_LIMIT = 1000


class VideoStorageError(Exception):
    pass


def format_file_size(num_bytes: int) -> str:
    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(num_bytes)
    unit = 0
    while size >= 1024 and unit < len(units) - 1:
        size /= 1024
        unit += 1
    return f"{round(size, 2):g} {units[unit]}"


@dataclass
class VideoObject:
    key: str
    size: int
    last_modified: datetime
    storage_class: str
    url: str

    def age_in_days(self, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        return (now - self.last_modified).days

    def to_dict(self, now: Optional[datetime] = None) -> dict:
        return {
            "key": self.key,
            "size": self.size,
            "size_formatted": format_file_size(self.size),
            "last_modified": self.last_modified.isoformat(),
            "storage_class": self.storage_class,
            "url": self.url,
            "age_in_days": self.age_in_days(now),
        }


class VideoStorage:
    def __init__(self, bucket: str = VIDEO_BUCKET, region: str = AWS_REGION, client=None):
        self.bucket = bucket
        self.region = region
        self.client = client or boto3.client("s3", region_name=region)

    def object_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def list_videos(self, prefix: str = "", max_keys: int = 100) -> List[VideoObject]:
        """List `.mp4` objects under a prefix (one page, up to `max_keys`)."""
        try:
            response = self.client.list_objects_v2(Bucket=self.bucket, Prefix=prefix, MaxKeys=max_keys)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Listing s3://{self.bucket}/{prefix} failed: {e}")
            raise VideoStorageError(f"Failed to list videos: {e}") from e

        return [
            VideoObject(
                key=obj["Key"],
                size=obj.get("Size", 0),
                last_modified=obj.get("LastModified") or datetime.now(timezone.utc),
                storage_class=obj.get("StorageClass") or "STANDARD",
                url=self.object_url(obj["Key"]),
            )
            for obj in response.get("Contents", [])
            if obj.get("Key", "").endswith(".mp4")
        ]

    def delete_video(self, key: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise VideoStorageError(f"Failed to delete {key}: {e}") from e
        logger.info(f"Deleted s3://{self.bucket}/{key}")

    def storage_stats(self) -> Dict:
        videos = self.list_videos("", STATS_SCAN_LIMIT)

        breakdown: Dict[str, Dict[str, int]] = {}
        for video in videos:
            entry = breakdown.setdefault(video.storage_class, {"count": 0, "size": 0})
            entry["count"] += 1
            entry["size"] += video.size

        cost = sum(
            entry["size"] / 1024 ** 3 * COST_PER_GB.get(storage_class, COST_PER_GB["STANDARD"])
            for storage_class, entry in breakdown.items()
        )
        return {
            "total_objects": len(videos),
            "total_size": sum(video.size for video in videos),
            "estimated_monthly_cost": round(cost, 2),
            "storage_breakdown": breakdown,
        }

    def expired_temp_videos(self, older_than_days: int, now: Optional[datetime] = None) -> List[VideoObject]:
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=older_than_days)
        return [video for video in self.list_videos(TEMP_PREFIX, STATS_SCAN_LIMIT) if video.last_modified < cutoff]

    def cleanup_temp_videos(self, older_than_days: int, now: Optional[datetime] = None) -> List[VideoObject]:
        """Delete temporary renders older than the cutoff; returns what was deleted."""
        expired = self.expired_temp_videos(older_than_days, now)
        for video in expired:
            self.delete_video(video.key)
        return expired


def storage_recommendations(stats: Dict) -> List[str]:
    breakdown = stats["storage_breakdown"]
    recommendations = []
    if stats["estimated_monthly_cost"] > 50:
        recommendations.append(
            "Consider implementing lifecycle policies to automatically move old videos to cheaper storage classes"
        )
    if breakdown.get("STANDARD", {}).get("size", 0) > 5 * 1024 ** 3:
        recommendations.append(
            "You have significant data in STANDARD storage. Consider moving older videos to STANDARD_IA or GLACIER"
        )
    if stats["total_objects"] > 1000:
        recommendations.append(
            "Large number of videos detected. Consider implementing automatic cleanup for temporary files"
        )
    if "STANDARD_IA" not in breakdown and "GLACIER" not in breakdown:
        recommendations.append(
            "No videos in cost-optimized storage classes. Lifecycle policies could reduce costs"
        )
    return recommendations or ["Your storage usage looks optimized!"]
