import subprocess
import json
import logging
import shutil
from typing import Optional

logger = logging.getLogger(__name__)

PROBE_TAGS = ("-Duration", "-ImageWidth", "-ImageHeight", "-MIMEType")


def get_exiftool_path():
    """
    Get the path to the exiftool executable.
    Returns 'exiftool' if found in PATH, otherwise None.
    """
    if shutil.which("exiftool"):
        return "exiftool"
    return None


def probe_media(file_path: str) -> dict:
    """
    Read the technical tags of an uploaded audio/video file with ExifTool.

    Args:
        file_path (str): Path to the file on disk.

    Returns:
        dict: Tag name -> value (numeric values stay numeric).
              Empty dict if ExifTool is unavailable or fails.
    """
    exiftool_cmd = get_exiftool_path()

    if not exiftool_cmd:
        logger.warning("ExifTool not found; skipping media probe for %s", file_path)
        return {}

    # -j: JSON output
    # -n: numeric values (Duration in seconds rather than "0:00:05")
    cmd = [exiftool_cmd, "-j", "-n", *PROBE_TAGS, file_path]

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            encoding='utf-8'
        )
    except subprocess.CalledProcessError as e:
        logger.error(f"ExifTool failed with error: {e.stderr}")
        return {}

    if not result.stdout:
        logger.warning(f"ExifTool returned no output for {file_path}")
        return {}

    try:
        tags = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse ExifTool output: {e}")
        return {}

    # ExifTool returns a list of objects (one per file)
    return tags[0] if tags else {}


def media_duration(file_path: str) -> Optional[float]:
    duration = probe_media(file_path).get("Duration")
    try:
        return round(float(duration), 2) if duration is not None else None
    except (TypeError, ValueError):
        return None
