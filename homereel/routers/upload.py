"""
Upload router module.

Provides the multipart upload endpoint:
- POST /api/upload: Store a video (and optional sidecar subtitle), then extract
  its embedded subtitle streams before responding

Extraction completes before the response is returned, so a catalog
registration issued afterwards always finds the extracted files. Extraction
problems are logged and never fail the upload.
"""

import os
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from homereel.config import Settings, get_settings, ensure_media_dirs
from homereel.dependencies import get_catalog_store
from homereel.models import UploadResponse
from homereel.services.catalog_store import CatalogStore
from homereel.services.extraction_service import extract_subtitles, ProbeFailedError
from homereel.utils.filename_utils import generate_upload_filename
from homereel.utils.logging_utils import get_request_logger


router = APIRouter(prefix="/api", tags=["Upload"])

UPLOAD_CHUNK_SIZE = 1024 * 1024


async def _save_upload(upload: UploadFile, uploads_dir: str) -> str:
    """Write an uploaded file to the uploads root under a unique name. Returns that name."""
    filename = generate_upload_filename(upload.filename)
    destination = os.path.join(uploads_dir, filename)
    with open(destination, 'wb') as out:
        while True:
            chunk = await upload.read(UPLOAD_CHUNK_SIZE)
            if not chunk:
                break
            out.write(chunk)
    await upload.close()
    return filename


@router.post("/upload", response_model=UploadResponse)
async def upload_media(
    video: Optional[UploadFile] = File(None, description="Video file"),
    subtitle: Optional[UploadFile] = File(None, description="Optional sidecar subtitle (SRT or VTT)"),
    store: CatalogStore = Depends(get_catalog_store),
    settings: Settings = Depends(get_settings)
) -> UploadResponse:
    """
    Store an uploaded video and extract its embedded subtitles.

    Workflow:
    1. POST /api/upload -> {file_path, subtitle_path?, extracted_subtitles}
    2. POST /api/media with that file_path -> subtitles linked to the new entry

    Raises:
        HTTPException: 400 if no video file was sent
    """
    if video is None or not video.filename:
        raise HTTPException(status_code=400, detail="No video file uploaded")

    ensure_media_dirs(settings)
    log = get_request_logger(f"upload-{uuid.uuid4().hex[:8]}")

    video_filename = await _save_upload(video, settings.uploads_dir)
    log.info(f"Stored upload {video.filename!r} as {video_filename}")

    response = UploadResponse(file_path=video_filename)

    if subtitle is not None and subtitle.filename:
        response.subtitle_path = await _save_upload(subtitle, settings.uploads_dir)
        log.info(f"Stored sidecar subtitle as {response.subtitle_path}")

    video_path = os.path.join(settings.uploads_dir, video_filename)
    try:
        extracted = await extract_subtitles(video_path, settings.uploads_dir, settings=settings, log=log)
        store.record_extraction(video_filename, extracted)
        response.extracted_subtitles = extracted
    except ProbeFailedError as e:
        log.error(f"Subtitle extraction skipped, could not probe {video_filename}: {str(e)}")
    except Exception as e:
        log.error(f"Subtitle extraction failed for {video_filename}: {str(e)}")

    return response
