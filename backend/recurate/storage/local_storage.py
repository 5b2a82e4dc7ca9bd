import logging
import mimetypes
import shutil
import uuid
from pathlib import Path
from typing import Dict, NamedTuple, Optional, Tuple
from fastapi import UploadFile
from recurate.core.config import settings
from recurate.core.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

IMAGE = "image"
VIDEO = "video"

# MIME type -> media kind accepted for each upload slot
PROFILE_PHOTO_TYPES: Dict[str, str] = {
    "image/jpeg": IMAGE,
    "image/jpg": IMAGE,
    "image/png": IMAGE,
}

POST_MEDIA_TYPES: Dict[str, str] = {
    "image/jpeg": IMAGE,
    "image/jpg": IMAGE,
    "image/png": IMAGE,
    "image/gif": IMAGE,
    "image/webp": IMAGE,
    "video/mp4": VIDEO,
    "video/webm": VIDEO,
    "video/ogg": VIDEO,
    "video/quicktime": VIDEO,
}

# Stored extension for each accepted MIME type; the client filename is never trusted
MEDIA_EXTENSIONS: Dict[str, str] = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "video/mp4": ".mp4",
    "video/webm": ".webm",
    "video/ogg": ".ogv",
    "video/quicktime": ".mov",
}

_CHUNK_SIZE = 1024 * 1024


class StoredFile(NamedTuple):
    path: str  # public path, e.g. /uploads/<name>.png
    kind: str
    mime_type: str


class LocalStorage:
    def __init__(self, upload_dir: Optional[str] = None, url_prefix: Optional[str] = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.url_prefix = (url_prefix or settings.UPLOAD_URL_PREFIX).rstrip("/")
        self.max_file_size = settings.MAX_FILE_SIZE

    @staticmethod
    def has_file(upload: Optional[UploadFile]) -> bool:
        """Browsers submit an empty part with no filename when nothing was picked"""
        return upload is not None and bool(upload.filename)

    @staticmethod
    def resolve_media(upload: UploadFile, allowed: Dict[str, str]) -> Tuple[str, str]:
        """Return (kind, mime_type) for an upload or raise ValidationError"""
        mime_type = (upload.content_type or "").split(";")[0].strip().lower()
        if mime_type not in allowed:
            # Clients often send application/octet-stream; try the extension
            guessed, _ = mimetypes.guess_type(upload.filename or "")
            mime_type = (guessed or mime_type).lower()
        if mime_type not in allowed:
            raise ValidationError("Invalid file type", field="file")
        return allowed[mime_type], mime_type

    def save_upload(self, upload: Optional[UploadFile], allowed: Dict[str, str]) -> Optional[StoredFile]:
        """Validate and store a single uploaded file. Returns None if no file was sent"""
        if not self.has_file(upload):
            return None
        kind, mime_type = self.resolve_media(upload, allowed)

        # Extension follows the validated type so /uploads serves it as that type
        file_ext = MEDIA_EXTENSIONS[mime_type]
        unique_filename = f"{uuid.uuid4().hex}{file_ext}"
        file_path = self.upload_dir / unique_filename

        written = 0
        try:
            with open(file_path, "wb") as out:
                while True:
                    chunk = upload.file.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_file_size:
                        break
                    out.write(chunk)
        except OSError as e:
            logger.error(f"Failed to store upload {upload.filename!r}: {e}")
            file_path.unlink(missing_ok=True)
            raise StorageError() from e

        if written > self.max_file_size:
            file_path.unlink(missing_ok=True)
            raise ValidationError("File is too large", field="file")

        return StoredFile(f"{self.url_prefix}/{unique_filename}", kind, mime_type)

    def get_file_path(self, public_path: str) -> Path:
        """Map a recorded public path back to its location on disk"""
        # Only the final component is trusted; stops ../ from escaping upload_dir
        return self.upload_dir / Path(public_path).name

    def delete_file(self, public_path: Optional[str]) -> bool:
        """Delete a stored file. Missing files are not an error"""
        if not public_path:
            return False
        file_path = self.get_file_path(public_path)
        try:
            if file_path.exists():
                file_path.unlink()
                return True
        except OSError as e:
            # The row is already gone; a leftover file is only wasted space
            logger.warning(f"Could not delete stored file {file_path}: {e}")
        return False

    def file_exists(self, public_path: str) -> bool:
        return self.get_file_path(public_path).exists()

    def clear(self) -> None:
        """Remove everything under upload_dir (used by tests and resets)"""
        shutil.rmtree(self.upload_dir, ignore_errors=True)
        self.upload_dir.mkdir(parents=True, exist_ok=True)


storage = LocalStorage()
