# api/uploads/uploads_service.py

import logging
import re
import shutil
import time
from pathlib import Path
from typing import List, Sequence

from fastapi import UploadFile

from config.database import UPLOAD_DIR
from config.settings import settings
from utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Ensure upload directory exists
UPLOAD_DIR.mkdir(parents=True, exist_ok=True)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def object_key(category: str, user_id: str, filename: str, timestamp_ms: int, index: int = 0) -> str:
    """
    Storage key for an image: ``{category}_images/{userId}/{timestamp}_{index}_{filename}``.

    ``index`` is the image's position in its submission, so same-named files
    uploaded together get distinct keys.
    """
    safe_user = _UNSAFE_CHARS.sub("_", user_id)
    safe_name = _UNSAFE_CHARS.sub("_", Path(filename or "image").name) or "image"
    return f"{category}_images/{safe_user}/{timestamp_ms}_{index}_{safe_name}"


def object_url(key: str) -> str:
    return f"{settings.UPLOAD_URL.rstrip('/')}/{key}"


def validate_images(files: Sequence[UploadFile]) -> None:
    """
    Check count, type and size of submitted images before anything is stored.
    """
    if len(files) > settings.MAX_IMAGES_PER_REQUEST:
        raise ValidationError(f"You can upload a maximum of {settings.MAX_IMAGES_PER_REQUEST} images.")

    allowed = settings.allowed_file_types_list
    for file in files:
        content_type = file.content_type or ""
        if not content_type.startswith("image/"):
            raise ValidationError("Only image files are allowed.")
        ext = Path(file.filename or "").suffix.lstrip(".").lower()
        if ext and ext not in allowed:
            raise ValidationError(f"Image type .{ext} is not allowed.")
        if file.size is not None and file.size > settings.MAX_FILE_SIZE:
            raise ValidationError(f"Each image must be less than {settings.MAX_FILE_SIZE // (1024 * 1024)}MB.")


def upload_image(category: str, user_id: str, file: UploadFile, index: int = 0) -> str:
    """
    Write one image to object storage and return its public URL.
    """
    key = object_key(category, user_id, file.filename, int(time.time() * 1000), index)
    dest = UPLOAD_DIR / key
    dest.parent.mkdir(parents=True, exist_ok=True)
    with dest.open("wb") as buffer:
        shutil.copyfileobj(file.file, buffer)

    if dest.stat().st_size > settings.MAX_FILE_SIZE:
        dest.unlink()
        raise ValidationError(f"Each image must be less than {settings.MAX_FILE_SIZE // (1024 * 1024)}MB.")

    logger.debug("Stored %s (%d bytes)", key, dest.stat().st_size)
    return object_url(key)


def upload_images(category: str, user_id: str, files: Sequence[UploadFile]) -> List[str]:
    validate_images(files)
    return [upload_image(category, user_id, f, index) for index, f in enumerate(files)]
