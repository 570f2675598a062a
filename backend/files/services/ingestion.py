"""
Ingestion Service
=================
Saves uploaded files under a content-derived name.

Upload Algorithm:
1. Optional size check against max_size (MB)
2. Hash computation: SHA-256 of the incoming bytes
3. Naming: {directory}/{hash}.{extension}
4. Images (jpg, jpeg, png) with a target width: shrink-only resize and
   re-encode in the original format
5. Single write to the upload storage, replacing any file with that name
"""

import hashlib
import logging
import os
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from django.conf import settings
from django.core.files.base import ContentFile
from PIL import Image

from commons.errors import ErrorKey
from ..exceptions import FileTooLarge, InvalidInput, ProcessingError
from ..storage import get_upload_storage
from .quota import is_max_file_size

logger = logging.getLogger(__name__)


CHUNK_SIZE = 65536  # 64KB for memory-efficient hashing

IMAGE_FORMATS = {
    'jpg': 'JPEG',
    'jpeg': 'JPEG',
    'png': 'PNG',
}


def get_upload_directory():
    """Get the default upload directory from settings, default 'uploads/'."""
    return getattr(settings, 'UPLOAD_DIRECTORY', 'uploads/')


def get_image_quality():
    return getattr(settings, 'UPLOAD_IMAGE_QUALITY', 90)


def check_image_width(width):
    if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
        raise InvalidInput(f"Image width must be a positive integer, got {width!r}")


@dataclass(frozen=True)
class StoredFile:
    """Where an upload was written. The filename stem is the content hash."""

    path: str
    extension: str
    filename: str

    @property
    def content_hash(self) -> str:
        return self.filename.split('.', 1)[0]


class IngestionService:
    """
    Service storing uploads in a content-addressed layout.

    Byte-identical uploads to the same directory get the same path; the
    later write replaces the earlier one.
    """

    @staticmethod
    def compute_hash(file_obj) -> str:
        """
        Compute SHA-256 hash of file content.

        Uses chunked reading for memory efficiency.
        Resets file pointer after hashing.

        Args:
            file_obj: Django UploadedFile or file-like object

        Returns:
            str: Hexadecimal SHA-256 hash
        """
        file_obj.seek(0)
        sha256 = hashlib.sha256()
        for chunk in iter(lambda: file_obj.read(CHUNK_SIZE), b''):
            sha256.update(chunk)
        file_obj.seek(0)  # Reset for subsequent operations
        return sha256.hexdigest()

    @staticmethod
    def get_extension(filename: str) -> str:
        """Lowercased extension of the client filename, '' if none."""
        return os.path.splitext(filename)[1].lstrip('.').lower()

    @staticmethod
    def is_image(extension: str) -> bool:
        return extension.lower() in IMAGE_FORMATS

    @staticmethod
    def build_path(directory: str, filename: str) -> str:
        directory = directory.rstrip('/')
        return f"{directory}/{filename}" if directory else filename

    @staticmethod
    def resize_image(file_obj, extension: str, width: int) -> bytes:
        """
        Shrink an image to width, keeping its aspect ratio.

        Narrower images keep their size. The result is re-encoded in the
        original format.

        Raises:
            InvalidInput: width is not a positive number of pixels
            ProcessingError: the image cannot be decoded or encoded
        """
        check_image_width(width)
        image_format = IMAGE_FORMATS[extension.lower()]
        quality = get_image_quality()

        file_obj.seek(0)
        try:
            with Image.open(file_obj) as source:
                source.load()
                image = source
                if image.width > width:
                    height = max(1, round(image.height * width / image.width))
                    image = image.resize((width, height), Image.LANCZOS)
                if image_format == 'JPEG' and image.mode not in ('RGB', 'L'):
                    image = image.convert('RGB')

                buffer = BytesIO()
                image.save(buffer, format=image_format, quality=quality)
        except Exception as e:
            # Pillow decoders also raise SyntaxError, EOFError and struct.error
            raise ProcessingError(f"Image processing failed: {str(e)}") from e
        finally:
            file_obj.seek(0)

        return buffer.getvalue()

    @classmethod
    def save(
        cls,
        file_obj,
        directory: Optional[str] = None,
        image_width: Optional[int] = None,
        max_size: Optional[float] = None,
    ) -> StoredFile:
        """
        Store an uploaded file.

        Args:
            file_obj: Django UploadedFile
            directory: Target directory, defaults to UPLOAD_DIRECTORY
            image_width: Maximum width for jpg/jpeg/png uploads
            max_size: Maximum size in megabytes

        Returns:
            StoredFile: path, extension and filename

        Raises:
            InvalidInput: no file, no filename or a non-positive image_width
            FileTooLarge: file larger than max_size
            ProcessingError: image resizing failed, nothing was stored
        """
        if file_obj is None or not getattr(file_obj, 'name', None):
            raise InvalidInput("No file provided.", error_key=ErrorKey.NO_FILE)

        if max_size is not None and is_max_file_size(file_obj, max_size):
            raise FileTooLarge(
                f"File size {file_obj.size} bytes exceeds {max_size}MB"
            )

        if image_width is not None:
            check_image_width(image_width)

        if directory is None:
            directory = get_upload_directory()

        extension = cls.get_extension(file_obj.name)
        # Name comes from the incoming bytes, before any resizing
        content_hash = cls.compute_hash(file_obj)
        filename = f"{content_hash}.{extension}" if extension else content_hash
        full_path = cls.build_path(directory, filename)

        if cls.is_image(extension) and image_width:
            content = ContentFile(cls.resize_image(file_obj, extension, image_width))
        else:
            content = file_obj

        stored_path = get_upload_storage().save(full_path, content)
        logger.info(f"Stored upload {file_obj.name} as {stored_path}")

        return StoredFile(path=stored_path, extension=extension, filename=filename)
