"""
Byte-range streaming service for video files.

This module serves a file either as a full 200 response or, when the client
sends a single ``Range: bytes=start-end`` header, as a 206 partial response.
The body is produced lazily chunk by chunk so large files are never held in
memory.

Known limitation: multi-range requests (a comma in the header) are answered
with the full file rather than a multipart/byteranges body.
"""

import os
import re
from typing import Iterator, Optional, Tuple

from fastapi import HTTPException
from fastapi.responses import StreamingResponse


SINGLE_RANGE_PATTERN = re.compile(r'^bytes=(\d*)-(\d*)$')
DEFAULT_CHUNK_SIZE = 64 * 1024
VIDEO_MEDIA_TYPE = "video/mp4"


class RangeNotSatisfiableError(Exception):
    """Raised when a well-formed range starts at or beyond the end of the file."""


def parse_range_header(range_header: Optional[str], file_size: int) -> Optional[Tuple[int, int]]:
    """
    Return the inclusive (start, end) span requested by range_header.

    Returns None when the whole file should be sent: no header, a multi-range
    header, a header that does not match ``bytes=<start>-<end>?``, or an end
    before the start. An empty start means 0 and an empty or too large end is
    clamped to file_size - 1.

    Raises:
        RangeNotSatisfiableError: If start lies at or beyond the end of the file.
    """
    if not range_header:
        return None

    header = range_header.strip()
    if ',' in header:
        return None

    match = SINGLE_RANGE_PATTERN.match(header)
    if not match:
        return None

    start_token, end_token = match.groups()
    start = int(start_token) if start_token else 0
    end = int(end_token) if end_token else file_size - 1
    end = min(end, file_size - 1)

    if start >= file_size:
        raise RangeNotSatisfiableError(f"bytes={start_token}-{end_token} outside 0-{file_size - 1}")

    # last-byte-pos before first-byte-pos is syntactically invalid: send the whole file
    if start > end:
        return None

    return start, end


def iter_file_range(file_path: str, start: int, end: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield the bytes of file_path from start to end (inclusive), chunk_size at a time."""
    remaining = end - start + 1
    with open(file_path, 'rb') as f:
        f.seek(start)
        while remaining > 0:
            chunk = f.read(min(chunk_size, remaining))
            if not chunk:
                break
            remaining -= len(chunk)
            yield chunk


def stream_file(
    file_path: str,
    range_header: Optional[str] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    media_type: str = VIDEO_MEDIA_TYPE
) -> StreamingResponse:
    """
    Build a full or partial-content streaming response for file_path.

    Args:
        file_path: Resolved path of the file on disk
        range_header: Raw value of the request's Range header, if any
        chunk_size: Bytes per read
        media_type: Content-Type to advertise (video/mp4 regardless of container)

    Returns:
        StreamingResponse with status 200 or 206

    Raises:
        HTTPException: 404 if the file does not exist, 416 if the range cannot be satisfied
    """
    if not os.path.isfile(file_path):
        raise HTTPException(status_code=404, detail="File not found")

    file_size = os.path.getsize(file_path)

    try:
        byte_range = parse_range_header(range_header, file_size)
    except RangeNotSatisfiableError as e:
        raise HTTPException(
            status_code=416,
            detail=f"Requested range not satisfiable: {str(e)}",
            headers={"Content-Range": f"bytes */{file_size}"}
        )

    if byte_range is None:
        headers = {
            "Content-Length": str(file_size),
            "Accept-Ranges": "bytes",
        }
        return StreamingResponse(
            iter_file_range(file_path, 0, file_size - 1, chunk_size),
            status_code=200,
            media_type=media_type,
            headers=headers
        )

    start, end = byte_range
    headers = {
        "Content-Range": f"bytes {start}-{end}/{file_size}",
        "Accept-Ranges": "bytes",
        "Content-Length": str(end - start + 1),
    }
    return StreamingResponse(
        iter_file_range(file_path, start, end, chunk_size),
        status_code=206,
        media_type=media_type,
        headers=headers
    )
