"""
Face Recognition Client
=======================
Sends two images to the remote face comparison service and returns its
JSON verdict. The matching itself happens remotely.
"""

import logging
import mimetypes
import os
from typing import Optional

import httpx
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import URLValidator

logger = logging.getLogger(__name__)


class FaceRecognitionClient:
    """
    Client for the face comparison service.

    Usage:
        client = FaceRecognitionClient()
        result = client.check('/tmp/id_card.jpg', '/tmp/selfie.jpg')
    """

    def __init__(
        self,
        service_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        service_url = service_url or getattr(settings, 'FACE_RECOGNITION_URL', '')
        try:
            URLValidator()(service_url)
        except ValidationError:
            raise ValueError(
                f"Face recognition service URL is invalid or empty: {service_url!r}"
            ) from None

        self.service_url = service_url
        if timeout is None:
            timeout = getattr(settings, 'FACE_RECOGNITION_TIMEOUT', 30.0)
        self.client = client or httpx.Client(timeout=timeout)

    @staticmethod
    def get_mime_type(path: str) -> str:
        mime_type, _ = mimetypes.guess_type(path)
        return mime_type or 'application/octet-stream'

    def check(self, path_1: str, path_2: str) -> dict:
        """
        Compare the faces on two images.

        Args:
            path_1: Path to the first image
            path_2: Path to the second image

        Returns:
            dict: Decoded JSON answer of the service

        Raises:
            OSError: an image cannot be opened
            httpx.HTTPError: transport failure or non-2xx answer
        """
        try:
            with open(path_1, 'rb') as image_1, open(path_2, 'rb') as image_2:
                files = {
                    'image_1': (os.path.basename(path_1), image_1, self.get_mime_type(path_1)),
                    'image_2': (os.path.basename(path_2), image_2, self.get_mime_type(path_2)),
                }
                response = self.client.post(self.service_url, files=files)
            response.raise_for_status()
            return response.json()
        except Exception as e:
            logger.error(f"Error occurred during image comparison: {str(e)}")
            raise

    def close(self):
        self.client.close()
