from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from .config import LOG_LEVEL, UPLOAD_DIR
from .database import engine, Base
from .routers.assets import router as assets_router
from .routers.children import router as children_router
from .routers.letter_hunt import router as letter_hunt_router
from .routers.storage import router as storage_router
from .routers.uploads import router as uploads_router
import logging
import os

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# Initialize DB tables
Base.metadata.create_all(bind=engine)

app = FastAPI(title="Kids Video Admin API")

# CORS config
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Admin console is served from a separate origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Storage setup
os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount("/media", StaticFiles(directory=UPLOAD_DIR), name="media")

# Uploads first: POST /assets/upload must not be shadowed by /assets/{asset_id}
app.include_router(uploads_router)
app.include_router(assets_router)
app.include_router(children_router)
app.include_router(letter_hunt_router)
app.include_router(storage_router)


@app.get("/")
def read_root():
    return {"message": "Welcome to Kids Video Admin API"}
