"""
Film upload checks: file type allow-lists, magic-byte sniffing and storage path naming.
"""

import os
import re
import time
from typing import Optional

ALLOWED_MIME_TYPES = [
    "video/mp4",
    "video/quicktime",
    "video/webm",
    "video/x-msvideo",
    "video/avi",
    "video/x-m4v",
    "video/mpeg",
]

ALLOWED_EXTENSIONS = [".mp4", ".mov", ".webm", ".avi", ".m4v", ".mpeg", ".mpg"]

# (offset, signature) pairs per container
VIDEO_SIGNATURES = {
    "video/mp4": [(4, b"ftyp")],
    "video/quicktime": [(4, b"ftyp"), (4, b"moov")],
    "video/webm": [(0, b"\x1a\x45\xdf\xa3")],  # EBML
    "video/x-msvideo": [(0, b"RIFF")],
    "video/mpeg": [(0, b"\x00\x00\x01\xba"), (0, b"\x00\x00\x01\xb3")],  # program stream, video
}

# Header bytes needed to recognise every container in VIDEO_SIGNATURES
SIGNATURE_BYTES = 12

# Room for multipart boundaries and form fields around the film part
MULTIPART_OVERHEAD_BYTES = 64 * 1024

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


class UploadRejected(Exception):
    """Raised by check_upload; status_code is the HTTP status to answer with."""

    def __init__(self, status_code: int, reason: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.message = message


def get_file_extension(filename: str) -> str:
    return os.path.splitext(filename or "")[1].lower()


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_CHARS.sub("_", filename)


def build_storage_path(file_name: str, game_id: Optional[str] = None, team_id: Optional[str] = None,
                       timestamp_ms: Optional[int] = None) -> str:
    """"{game_id}/{epoch_ms}_{name}", falling back to the team id when no game is given."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    prefix = game_id or team_id
    return f"{prefix}/{timestamp_ms}_{sanitize_filename(file_name)}"


def check_upload(file_name: str, file_size: int, mime_type: Optional[str], max_bytes: int):
    """Pre-flight checks on name, declared type and size."""
    if not file_name or not file_size:
        raise UploadRejected(400, "missing_fields", "Missing required fields: file_name, file_size")
    extension = get_file_extension(file_name)
    if extension not in ALLOWED_EXTENSIONS:
        raise UploadRejected(
            400, "invalid_extension",
            f'File extension "{extension}" not allowed. Allowed: {", ".join(ALLOWED_EXTENSIONS)}'
        )
    if mime_type and mime_type not in ALLOWED_MIME_TYPES:
        raise UploadRejected(400, "invalid_mime_type", f'File type "{mime_type}" not allowed')
    if file_size > max_bytes:
        raise UploadRejected(
            429, "file_too_large",
            f"File is {file_size} bytes; the upload limit is {max_bytes} bytes"
        )


def check_declared_length(content_length: Optional[str], max_bytes: int):
    """Refuse a request whose Content-Length already exceeds the upload limit."""
    if not content_length or not content_length.isdigit():
        return
    if int(content_length) > max_bytes + MULTIPART_OVERHEAD_BYTES:
        raise UploadRejected(
            429, "file_too_large",
            f"Request is {content_length} bytes; the upload limit is {max_bytes} bytes"
        )


def has_video_signature(header: bytes) -> bool:
    """True when the first bytes match any known video container."""
    for signatures in VIDEO_SIGNATURES.values():
        for offset, signature in signatures:
            end = offset + len(signature)
            if end <= len(header) and header[offset:end] == signature:
                return True
    return False
