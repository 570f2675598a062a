"""
API Tests for the Upload Endpoint
=================================
Tests cover:
- Successful upload response
- Missing file and size validation
- Daily quota refusal
- Client address and user accounting
- Image processing failures, corrupted PNGs included
- Upload limits endpoint
"""

import base64
import hashlib
import shutil
import tempfile

from django.contrib.auth.models import User
from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from rest_framework import status
from rest_framework.test import APITestCase
from django.test import override_settings

from commons.testing import corrupt_png_chunk, make_image_bytes
from files.services import QuotaService


# Create a temporary media root for tests
TEST_MEDIA_ROOT = tempfile.mkdtemp()

KB = 1024


@override_settings(
    MEDIA_ROOT=TEST_MEDIA_ROOT,
    UPLOAD_DIRECTORY='uploads/',
    UPLOAD_IMAGE_WIDTH=None,
    UPLOAD_DAILY_LIMIT_MB=200,
    FILE_UPLOAD_MAX_SIZE_MB=1,
)
class UploadAPITests(APITestCase):
    """API integration tests for the upload endpoints."""

    url = '/api/uploads/'

    @classmethod
    def tearDownClass(cls):
        """Clean up temporary media directory."""
        super().tearDownClass()
        shutil.rmtree(TEST_MEDIA_ROOT, ignore_errors=True)

    def setUp(self):
        cache.clear()

    def tearDown(self):
        cache.clear()

    def _create_test_file(self, content: bytes, filename: str = 'test.txt') -> SimpleUploadedFile:
        """Helper to create a test file."""
        return SimpleUploadedFile(filename, content, content_type='text/plain')

    # ===================
    # Upload API Tests
    # ===================

    def test_upload_file_success(self):
        """POST /api/uploads/ should store the file and describe it."""
        content = b"API test content"

        response = self.client.post(
            self.url, {'file': self._create_test_file(content)}, format='multipart'
        )

        content_hash = hashlib.sha256(content).hexdigest()
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['filename'], f"{content_hash}.txt")
        self.assertEqual(response.data['path'], f"uploads/{content_hash}.txt")
        self.assertEqual(response.data['extension'], 'txt')
        self.assertEqual(response.data['content_hash'], content_hash)

    def test_upload_without_file(self):
        """POST without a file should answer 400 with the no-file key."""
        response = self.client.post(self.url, {}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'errors.nofile'})

    def test_upload_too_large(self):
        """Files above FILE_UPLOAD_MAX_SIZE_MB are rejected."""
        content = b"x" * (1024 * KB + 1)

        response = self.client.post(
            self.url, {'file': self._create_test_file(content)}, format='multipart'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'errors.max-file-size')
        self.assertEqual(response.data['details']['file_size'], len(content))

    @override_settings(UPLOAD_DAILY_LIMIT_MB=0.002)
    def test_upload_over_daily_quota(self):
        """Once the address total passes the limit uploads get 429."""
        first = self.client.post(
            self.url, {'file': self._create_test_file(b"a" * (KB + KB // 2), 'a.txt')},
            format='multipart'
        )
        second = self.client.post(
            self.url, {'file': self._create_test_file(b"b" * (KB + KB // 2), 'b.txt')},
            format='multipart'
        )

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(second.data, {'error': 'errors.max-file-size-per-day-wait'})

    def test_upload_charges_forwarded_address(self):
        """The first X-Forwarded-For entry is the charged address."""
        content = b"x" * KB

        self.client.post(
            self.url, {'file': self._create_test_file(content)}, format='multipart',
            HTTP_X_FORWARDED_FOR='203.0.113.9, 10.0.0.1'
        )

        usage = QuotaService().address_usage_mb('203.0.113.9')
        self.assertEqual(usage, KB / (1024 * KB))

    def test_upload_charges_authenticated_user(self):
        """Authenticated uploads also count against the user."""
        user = User(pk=99, username='nurse')
        self.client.force_authenticate(user=user)

        self.client.post(
            self.url, {'file': self._create_test_file(b"x" * KB)}, format='multipart'
        )

        self.assertEqual(QuotaService().user_usage_mb(user), KB / (1024 * KB))

    @override_settings(UPLOAD_IMAGE_WIDTH=100)
    def test_upload_broken_image(self):
        """An undecodable image answers 400 with the wrong-file-type key."""
        response = self.client.post(
            self.url,
            {'file': SimpleUploadedFile('photo.png', b'not a png', content_type='image/png')},
            format='multipart'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'errors.wrong-file-type'})

    @override_settings(UPLOAD_IMAGE_WIDTH=100)
    def test_upload_corrupted_png_chunk(self):
        """A PNG with a mangled chunk header answers 400, not a server error."""
        content = corrupt_png_chunk(make_image_bytes(256, 256, noise=True))

        response = self.client.post(
            self.url,
            {'file': SimpleUploadedFile('scan.png', content, content_type='image/png')},
            format='multipart'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'errors.wrong-file-type'})

    def test_upload_basic_auth_charges_user(self):
        """Credentials sent with the request are enough to charge the user."""
        user = User.objects.create_user(username='midwife', password='s3cret-pass')
        token = base64.b64encode(b'midwife:s3cret-pass').decode()
        self.client.credentials(HTTP_AUTHORIZATION=f"Basic {token}")

        response = self.client.post(
            self.url, {'file': self._create_test_file(b"x" * KB)}, format='multipart'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(QuotaService().user_usage_mb(user), KB / (1024 * KB))

    @override_settings(UPLOAD_IMAGE_WIDTH=0)
    def test_zero_image_width_disables_resizing(self):
        """A zero width setting keeps images untouched."""
        content = make_image_bytes(300, 150)

        response = self.client.post(
            self.url,
            {'file': SimpleUploadedFile('photo.png', content, content_type='image/png')},
            format='multipart'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['content_hash'], hashlib.sha256(content).hexdigest())

    @override_settings(UPLOAD_IMAGE_WIDTH=640, UPLOAD_DAILY_LIMIT_MB=150)
    def test_upload_limits(self):
        """GET /api/uploads/upload-limits/ exposes the configured limits."""
        response = self.client.get(f"{self.url}upload-limits/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'daily_limit_mb': 150,
            'max_file_size_mb': 1,
            'image_width': 640,
        })
