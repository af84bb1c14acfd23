import os

# Database
# SQLite by default for local development; point at Postgres in deployment
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./admin_console.db")

# Celery broker/backend
REDIS_URL = os.getenv("REDIS_URL", "redis://redis:6379/0")

# Storage setup
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
PUBLIC_MEDIA_BASE_URL = os.getenv("PUBLIC_MEDIA_BASE_URL", "http://localhost:8000/media").rstrip("/")

# Sibling services
ADMIN_BASE_URL = os.getenv("ADMIN_BASE_URL", "http://localhost:3000").rstrip("/")
GENERATION_API_URL = os.getenv("GENERATION_API_URL", "http://localhost:3000/api/assets").rstrip("/")
RENDER_ENDPOINT_URL = os.getenv(
    "RENDER_ENDPOINT_URL", "http://localhost:3000/api/videos/generate-letter-hunt"
)
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "60"))

# Letter Hunt
LETTER_HUNT_TEMPLATE = "letter-hunt"
DEFAULT_THEME = os.getenv("DEFAULT_THEME", "adventure")
BACKGROUND_MUSIC_URL = os.getenv(
    "BACKGROUND_MUSIC_URL",
    "https://etshvxrgbssginmzsczo.supabase.co/storage/v1/object/public/assets/assets/audio/1752340926893.MP3",
)
DEFAULT_VOICE_ID = os.getenv("DEFAULT_VOICE_ID", "248nvfaZe8BXhKntjmpp")
DEFAULT_SUBMITTER_ID = os.getenv("DEFAULT_SUBMITTER_ID", "1cb80063-9b5f-4fff-84eb-309f12bd247d")

# Batch generation pacing (downstream generation API is rate sensitive)
BATCH_GROUP_SIZE = int(os.getenv("BATCH_GROUP_SIZE", "3"))
BATCH_PAUSE_SECONDS = float(os.getenv("BATCH_PAUSE_SECONDS", "2"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# S3 video storage; credentials come from the standard AWS environment/profile chain
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
VIDEO_BUCKET = os.getenv("VIDEO_BUCKET", "aiaio3-public-videos")
