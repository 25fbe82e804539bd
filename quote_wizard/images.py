"""
quote_wizard/images.py
Project photo intake for step 3: screens each file, compresses the accepted
ones with Pillow, and optionally uploads them to object storage.

Every file is handled on its own. A rejected or failed file never holds up
the rest of the batch.
"""
from __future__ import annotations

import asyncio
import io
import logging
import os
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Callable, Optional

import httpx
from PIL import Image, ImageOps, UnidentifiedImageError
from pillow_heif import register_heif_opener

from quote_wizard.catalog import (
    ACCEPTED_FORMATS,
    JPEG_QUALITY,
    MAX_DIMENSION,
    MAX_FILE_SIZE,
    MAX_FILES,
    TARGET_BYTES,
)

logger = logging.getLogger(__name__)

# Lets Image.open decode iPhone HEIC photos
register_heif_opener()

MIN_JPEG_QUALITY = 50


class ImageStatus(str, Enum):
    PENDING = "pending"
    COMPRESSING = "compressing"
    UPLOADING = "uploading"
    COMPLETE = "complete"
    ERROR = "error"


@dataclass
class ImageFile:
    """A file picked by the visitor, before any processing."""
    filename: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def extension(self) -> str:
        return PurePath(self.filename).suffix.lower()


@dataclass
class UploadedImage:
    filename: str
    size: int
    content_type: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    status: ImageStatus = ImageStatus.PENDING
    progress: int = 0
    error: Optional[str] = None
    data: Optional[bytes] = None
    reference: Optional[str] = None

    @property
    def in_flight(self) -> bool:
        return self.status in (ImageStatus.PENDING, ImageStatus.COMPRESSING, ImageStatus.UPLOADING)


@dataclass(frozen=True)
class ImageRejection:
    filename: str
    reason: str


# ---------------------------------------------------------------------------
# Compression
# ---------------------------------------------------------------------------

def compress_image(data: bytes, max_dimension: int = MAX_DIMENSION,
                   quality: int = JPEG_QUALITY, target_bytes: int = TARGET_BYTES) -> bytes:
    """
    Downscale to fit max_dimension and re-encode as JPEG.

    Quality starts at `quality` and steps down until the output fits
    target_bytes or MIN_JPEG_QUALITY is reached.
    """
    with Image.open(io.BytesIO(data)) as img:
        img = ImageOps.exif_transpose(img)
        if img.mode != "RGB":
            img = img.convert("RGB")
        img.thumbnail((max_dimension, max_dimension), Image.LANCZOS)

        while True:
            buffer = io.BytesIO()
            img.save(buffer, format="JPEG", quality=quality, optimize=True)
            if buffer.tell() <= target_bytes or quality <= MIN_JPEG_QUALITY:
                return buffer.getvalue()
            quality -= 10


# ---------------------------------------------------------------------------
# Storage upload
# ---------------------------------------------------------------------------

class StorageUploader:
    """Pushes compressed photos to the storage bucket and returns the object path."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        bucket: str | None = None,
        prefix: str = "quotes",
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else os.getenv("SUPABASE_URL", "")).rstrip("/")
        self.api_key = api_key if api_key is not None else os.getenv("SUPABASE_ANON_KEY", "")
        self.bucket = bucket or os.getenv("STORAGE_BUCKET", "quote-images")
        self.prefix = prefix
        self._http = http_client

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    async def upload(self, image: UploadedImage, data: bytes) -> str:
        stem = PurePath(image.filename).stem or "photo"
        path = f"{self.prefix}/{uuid.uuid4().hex}/{stem}.jpg"
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{path}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "apikey": self.api_key,
            "Content-Type": "image/jpeg",
        }
        if self._http is not None:
            response = await self._http.post(url, content=data, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.post(url, content=data, headers=headers)
        response.raise_for_status()
        return path


# ---------------------------------------------------------------------------
# Intake
# ---------------------------------------------------------------------------

ProgressCallback = Callable[[UploadedImage], None]


class ImageIntake:
    def __init__(
        self,
        uploader: StorageUploader | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        self.uploader = uploader
        self.on_progress = on_progress

    def screen(self, files: list[ImageFile], existing: int = 0
               ) -> tuple[list[UploadedImage], list[ImageRejection]]:
        """Split a batch into accepted entries and per-file rejections."""
        pairs, rejected = self._screen(files, existing)
        return [img for img, _ in pairs], rejected

    async def process(self, files: list[ImageFile], existing: int = 0
                      ) -> tuple[list[UploadedImage], list[ImageRejection]]:
        pairs, rejected = self._screen(files, existing)
        await asyncio.gather(*(self._process_one(img, source) for img, source in pairs))
        return [img for img, _ in pairs], rejected

    def _screen(self, files: list[ImageFile], existing: int
                ) -> tuple[list[tuple[UploadedImage, ImageFile]], list[ImageRejection]]:
        pairs: list[tuple[UploadedImage, ImageFile]] = []
        rejected: list[ImageRejection] = []
        for f in files:
            content_type = ACCEPTED_FORMATS.get(f.extension)
            if content_type is None and f.content_type in ACCEPTED_FORMATS.values():
                content_type = f.content_type
            if existing + len(pairs) >= MAX_FILES:
                rejected.append(ImageRejection(f.filename, f"Maximum {MAX_FILES} images allowed"))
            elif content_type is None:
                rejected.append(ImageRejection(f.filename, "Only JPG, PNG, and HEIC images are accepted"))
            elif f.size >= MAX_FILE_SIZE:
                rejected.append(ImageRejection(f.filename, "File must be less than 10MB"))
            else:
                image = UploadedImage(filename=f.filename, size=f.size, content_type=content_type)
                pairs.append((image, f))
        for r in rejected:
            logger.info("Rejected %s: %s", r.filename, r.reason)
        return pairs, rejected

    async def _process_one(self, image: UploadedImage, source: ImageFile) -> None:
        try:
            self._set(image, ImageStatus.COMPRESSING, 10)
            data = await asyncio.to_thread(compress_image, source.data)
            image.data = data
            image.size = len(data)
            image.content_type = "image/jpeg"
            self._set(image, image.status, 60)

            if self.uploader is not None and self.uploader.configured:
                self._set(image, ImageStatus.UPLOADING, 80)
                image.reference = await self.uploader.upload(image, data)
            self._set(image, ImageStatus.COMPLETE, 100)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            logger.warning("Could not compress %s: %s", image.filename, exc)
            image.error = "Could not process this image"
            self._set(image, ImageStatus.ERROR, image.progress)
        except httpx.HTTPError as exc:
            logger.warning("Upload failed for %s: %s", image.filename, exc)
            image.error = "Upload failed"
            self._set(image, ImageStatus.ERROR, image.progress)

    def _set(self, image: UploadedImage, status: ImageStatus, progress: int) -> None:
        image.status = status
        image.progress = progress
        if self.on_progress is not None:
            self.on_progress(image)
