# learnplatform/routes/videos.py
import logging
import os
import uuid
from typing import Optional, Tuple

import aiofiles
import aiofiles.os
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import StreamingResponse

from ..config import MAX_VIDEO_SIZE, UPLOAD_DIR
from ..models import User
from ..schemas import SuccessOut, VideoUploadOut
from ..security import require_instructor

logger = logging.getLogger(__name__)

router = APIRouter()

CHUNK_SIZE = 1024 * 1024

ALLOWED_VIDEO_TYPES = ("video/mp4", "video/webm", "video/ogg", "video/quicktime", "video/x-msvideo")
VIDEO_MIME_TYPES = {
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".ogg": "video/ogg",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
}
STREAM_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Content-Disposition": "inline",
    "X-Content-Type-Options": "nosniff",
}


def video_path(filename: str) -> str:
    if not filename or ".." in filename or "/" in filename or "\\" in filename:
        raise HTTPException(status_code=400, detail="اسم ملف غير صالح")
    return os.path.join(UPLOAD_DIR, filename)


def parse_range(header: str, file_size: int) -> Optional[Tuple[int, int]]:
    """
    Parse a single ``bytes=start-end`` range into inclusive offsets.

    Suffix ranges (``bytes=-500``) select the last bytes of the file. Returns
    None when the range cannot be satisfied.
    """
    if not header.startswith("bytes="):
        return None
    spec = header[len("bytes="):].split(",")[0].strip()
    start_text, _, end_text = spec.partition("-")
    try:
        if start_text == "":
            length = int(end_text)
            if length <= 0:
                return None
            start, end = max(file_size - length, 0), file_size - 1
        else:
            start = int(start_text)
            end = int(end_text) if end_text else file_size - 1
    except ValueError:
        return None
    end = min(end, file_size - 1)
    if start < 0 or start > end:
        return None
    return start, end


async def iter_file(path: str, start: int, length: int):
    async with aiofiles.open(path, "rb") as f:
        await f.seek(start)
        remaining = length
        while remaining > 0:
            chunk = await f.read(min(CHUNK_SIZE, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk


@router.post("/videos/upload", response_model=VideoUploadOut)
async def upload_video(video: UploadFile = File(...), user: User = Depends(require_instructor)):
    if video.content_type not in ALLOWED_VIDEO_TYPES:
        raise HTTPException(status_code=400, detail="نوع الملف غير مدعوم. يرجى رفع فيديو بصيغة MP4 أو WebM أو OGG")

    os.makedirs(UPLOAD_DIR, exist_ok=True)
    extension = os.path.splitext(video.filename or "")[1].lower()
    filename = f"{uuid.uuid4()}{extension}"
    path = os.path.join(UPLOAD_DIR, filename)

    written = 0
    try:
        async with aiofiles.open(path, "wb") as out:
            while True:
                chunk = await video.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > MAX_VIDEO_SIZE:
                    break
                await out.write(chunk)
    except Exception:
        logger.exception("Failed writing upload %s", filename)
        if os.path.exists(path):
            await aiofiles.os.remove(path)
        raise

    if written > MAX_VIDEO_SIZE:
        await aiofiles.os.remove(path)
        raise HTTPException(status_code=413, detail="حجم الملف يتجاوز الحد المسموح")

    logger.info("Video %s uploaded by %s (%d bytes)", filename, user.username, written)
    return VideoUploadOut(video_path=f"/api/videos/stream/{filename}", filename=filename)


@router.get("/videos/stream/{filename}")
async def stream_video(filename: str, request: Request):
    path = video_path(filename)
    if not os.path.isfile(path):
        raise HTTPException(status_code=404, detail="الفيديو غير موجود")

    file_size = (await aiofiles.os.stat(path)).st_size
    content_type = VIDEO_MIME_TYPES.get(os.path.splitext(filename)[1].lower(), "video/mp4")
    range_header = request.headers.get("range")

    if range_header:
        byte_range = parse_range(range_header, file_size)
        if byte_range is None:
            raise HTTPException(
                status_code=416,
                detail="نطاق غير صالح",
                headers={"Content-Range": f"bytes */{file_size}"},
            )
        start, end = byte_range
        length = end - start + 1
        headers = {
            **STREAM_HEADERS,
            "Content-Range": f"bytes {start}-{end}/{file_size}",
            "Accept-Ranges": "bytes",
            "Content-Length": str(length),
        }
        return StreamingResponse(iter_file(path, start, length), status_code=206,
                                 media_type=content_type, headers=headers)

    headers = {**STREAM_HEADERS, "Accept-Ranges": "bytes", "Content-Length": str(file_size)}
    return StreamingResponse(iter_file(path, 0, file_size), media_type=content_type, headers=headers)


@router.delete("/videos/{filename}", response_model=SuccessOut)
async def delete_video(filename: str, user: User = Depends(require_instructor)):
    path = video_path(filename)
    if os.path.isfile(path):
        await aiofiles.os.remove(path)
        logger.info("Video %s deleted by %s", filename, user.username)
    return SuccessOut()
