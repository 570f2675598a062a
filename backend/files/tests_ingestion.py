"""
Unit Tests for the Ingestion Service
====================================
Tests cover:
- Hash computation
- Content-addressed naming and overwrite
- Image resizing (shrink-only, format kept)
- Failure paths (no file, too large, bad width, broken or corrupted image)
"""

import hashlib
import os
import shutil
import tempfile
from io import BytesIO
from unittest.mock import patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from PIL import Image

from commons.errors import ErrorKey
from commons.testing import corrupt_png_chunk, make_image_bytes
from files.exceptions import FileTooLarge, InvalidInput, ProcessingError
from files.services import IngestionService, StoredFile


# Create a temporary media root for tests
TEST_MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=TEST_MEDIA_ROOT, UPLOAD_DIRECTORY='uploads/')
class IngestionServiceTests(TestCase):
    """Tests for the IngestionService class."""

    @classmethod
    def tearDownClass(cls):
        """Clean up temporary media directory after all tests."""
        super().tearDownClass()
        shutil.rmtree(TEST_MEDIA_ROOT, ignore_errors=True)

    def tearDown(self):
        """Clean up after each test."""
        shutil.rmtree(os.path.join(TEST_MEDIA_ROOT, 'uploads'), ignore_errors=True)
        shutil.rmtree(os.path.join(TEST_MEDIA_ROOT, 'avatars'), ignore_errors=True)

    def _create_test_file(self, content: bytes, filename: str = 'test.txt') -> SimpleUploadedFile:
        """Helper to create a test file."""
        content_type = 'text/plain'
        if filename.lower().endswith('.png'):
            content_type = 'image/png'
        elif filename.lower().endswith(('.jpg', '.jpeg')):
            content_type = 'image/jpeg'
        return SimpleUploadedFile(filename, content, content_type=content_type)

    def _read_stored(self, stored: StoredFile) -> bytes:
        with open(os.path.join(TEST_MEDIA_ROOT, stored.path), 'rb') as fh:
            return fh.read()

    # ===================
    # Hash Computation Tests
    # ===================

    def test_compute_hash_matches_expected(self):
        """Hash should match independently computed SHA-256."""
        content = b"Test content for hashing"
        file_obj = self._create_test_file(content)

        self.assertEqual(
            IngestionService.compute_hash(file_obj),
            hashlib.sha256(content).hexdigest()
        )

    def test_compute_hash_resets_file_pointer(self):
        """File pointer should be reset to beginning after hashing."""
        content = b"Test content"
        file_obj = self._create_test_file(content)

        IngestionService.compute_hash(file_obj)

        self.assertEqual(file_obj.read(), content)

    def test_compute_hash_reads_from_start(self):
        """A partially read file is still hashed in full."""
        content = b"Partially consumed"
        file_obj = self._create_test_file(content)
        file_obj.read(5)

        self.assertEqual(
            IngestionService.compute_hash(file_obj),
            hashlib.sha256(content).hexdigest()
        )

    # ===================
    # Naming Tests
    # ===================

    def test_save_uses_content_hash_and_extension(self):
        """Stored path should be {directory}/{sha256}.{ext}."""
        content = b"Lab results"
        expected_hash = hashlib.sha256(content).hexdigest()

        stored = IngestionService.save(self._create_test_file(content, 'results.txt'))

        self.assertEqual(stored.filename, f"{expected_hash}.txt")
        self.assertEqual(stored.path, f"uploads/{expected_hash}.txt")
        self.assertEqual(stored.extension, 'txt')
        self.assertEqual(stored.content_hash, expected_hash)

    def test_save_non_image_stores_bytes_verbatim(self):
        """Non-image content should be written unchanged."""
        content = b"%PDF-1.4 fake pdf body"

        stored = IngestionService.save(self._create_test_file(content, 'report.pdf'))

        self.assertEqual(self._read_stored(stored), content)

    def test_save_lowercases_extension(self):
        """Extension is taken from the client filename, lowercased."""
        stored = IngestionService.save(self._create_test_file(b"abc", 'SCAN.PDF'))

        self.assertEqual(stored.extension, 'pdf')
        self.assertTrue(stored.filename.endswith('.pdf'))

    def test_save_without_extension_uses_bare_hash(self):
        """A filename without extension gives a bare hash name."""
        content = b"no extension"

        stored = IngestionService.save(self._create_test_file(content, 'README'))

        self.assertEqual(stored.filename, hashlib.sha256(content).hexdigest())
        self.assertEqual(stored.extension, '')

    def test_save_custom_directory(self):
        """Trailing slashes on the directory are normalized."""
        content = b"avatar"
        with_slash = IngestionService.save(self._create_test_file(content), directory='avatars/')
        without_slash = IngestionService.save(self._create_test_file(content), directory='avatars')

        self.assertTrue(with_slash.path.startswith('avatars/'))
        self.assertEqual(with_slash.path, without_slash.path)

    def test_save_identical_content_is_idempotent(self):
        """Byte-identical uploads map to the same path and overwrite."""
        content = b"Same bytes"

        first = IngestionService.save(self._create_test_file(content, 'a.txt'))
        second = IngestionService.save(self._create_test_file(content, 'b.txt'))

        self.assertEqual(first, second)
        stored_files = os.listdir(os.path.join(TEST_MEDIA_ROOT, 'uploads'))
        self.assertEqual(stored_files, [first.filename])

    def test_save_different_content_different_paths(self):
        """Different content should produce different paths."""
        first = IngestionService.save(self._create_test_file(b"Version 1", 'data.txt'))
        second = IngestionService.save(self._create_test_file(b"Version 2", 'data.txt'))

        self.assertNotEqual(first.path, second.path)

    # ===================
    # Image Tests
    # ===================

    def test_image_is_shrunk_to_target_width(self):
        """Wide images are resized keeping their aspect ratio."""
        content = make_image_bytes(400, 200)

        stored = IngestionService.save(
            self._create_test_file(content, 'photo.png'), image_width=100
        )

        with Image.open(BytesIO(self._read_stored(stored))) as image:
            self.assertEqual(image.size, (100, 50))
            self.assertEqual(image.format, 'PNG')

    def test_image_is_never_upscaled(self):
        """Images narrower than the target width keep their size."""
        content = make_image_bytes(80, 40, 'JPEG')

        stored = IngestionService.save(
            self._create_test_file(content, 'small.jpg'), image_width=200
        )

        with Image.open(BytesIO(self._read_stored(stored))) as image:
            self.assertEqual(image.size, (80, 40))
            self.assertEqual(image.format, 'JPEG')

    def test_resized_image_keeps_name_of_original_bytes(self):
        """The filename hashes the uploaded bytes, not the re-encoded ones."""
        content = make_image_bytes(300, 300, 'JPEG')

        stored = IngestionService.save(
            self._create_test_file(content, 'id_card.jpeg'), image_width=50
        )

        self.assertEqual(stored.content_hash, hashlib.sha256(content).hexdigest())
        self.assertNotEqual(self._read_stored(stored), content)

    def test_image_without_width_is_stored_verbatim(self):
        """No target width means no transcoding."""
        content = make_image_bytes(400, 200)

        stored = IngestionService.save(self._create_test_file(content, 'photo.png'))

        self.assertEqual(self._read_stored(stored), content)

    def test_image_format_follows_extension(self):
        """An RGBA image uploaded as .jpg is re-encoded as JPEG."""
        content = make_image_bytes(120, 60, 'PNG', mode='RGBA')

        stored = IngestionService.save(
            self._create_test_file(content, 'transparent.jpg'), image_width=60
        )

        with Image.open(BytesIO(self._read_stored(stored))) as image:
            self.assertEqual(image.format, 'JPEG')
            self.assertEqual(image.size, (60, 30))

    @override_settings(UPLOAD_IMAGE_QUALITY=90)
    def test_image_is_encoded_at_configured_quality(self):
        """Re-encoding passes the configured quality to the codec."""
        content = make_image_bytes(200, 100, 'JPEG')

        with patch.object(Image.Image, 'save', autospec=True, side_effect=Image.Image.save) as save:
            IngestionService.save(self._create_test_file(content, 'photo.jpg'), image_width=100)

        self.assertEqual(save.call_args.kwargs['quality'], 90)
        self.assertEqual(save.call_args.kwargs['format'], 'JPEG')

    def test_non_image_never_uses_codec(self):
        """Non-image extensions skip the codec even with a target width."""
        content = b"plain text"

        with patch('files.services.ingestion.Image.open') as image_open:
            stored = IngestionService.save(
                self._create_test_file(content, 'notes.txt'), image_width=100
            )

        image_open.assert_not_called()
        self.assertEqual(self._read_stored(stored), content)

    def test_extension_decides_image_detection(self):
        """Image bytes under a non-image extension are not transcoded."""
        content = make_image_bytes(400, 200)

        stored = IngestionService.save(
            self._create_test_file(content, 'photo.gif'), image_width=100
        )

        self.assertEqual(self._read_stored(stored), content)

    # ===================
    # Failure Tests
    # ===================

    def test_broken_image_raises_processing_error(self):
        """Undecodable images abort the save without writing anything."""
        content = b"definitely not a jpeg"
        expected_path = os.path.join(
            TEST_MEDIA_ROOT, 'uploads', f"{hashlib.sha256(content).hexdigest()}.jpg"
        )

        with self.assertRaises(ProcessingError) as ctx:
            IngestionService.save(self._create_test_file(content, 'broken.jpg'), image_width=100)

        self.assertEqual(ctx.exception.error_key, ErrorKey.WRONG_FILE_TYPE)
        self.assertIsNotNone(ctx.exception.__cause__)
        self.assertFalse(os.path.exists(expected_path))

    def test_missing_file_raises_invalid_input(self):
        """A missing file is rejected."""
        with self.assertRaises(InvalidInput) as ctx:
            IngestionService.save(None)

        self.assertEqual(ctx.exception.error_key, ErrorKey.NO_FILE)

    def test_file_over_max_size_is_rejected(self):
        """max_size (MB) rejects larger files before storing."""
        content = b"x" * (1024 * 1024 + 1)

        with self.assertRaises(FileTooLarge) as ctx:
            IngestionService.save(self._create_test_file(content, 'big.bin'), max_size=1)

        self.assertEqual(ctx.exception.error_key, ErrorKey.FILE_TOO_BIG)
        self.assertFalse(os.path.exists(os.path.join(TEST_MEDIA_ROOT, 'uploads')))

    def test_file_at_max_size_is_accepted(self):
        """The size limit is inclusive."""
        content = b"x" * (1024 * 1024)

        stored = IngestionService.save(self._create_test_file(content, 'edge.bin'), max_size=1)

        self.assertEqual(stored.extension, 'bin')

    def test_corrupted_png_chunk_raises_processing_error(self):
        """A mangled chunk header met while decoding is a processing error."""
        content = corrupt_png_chunk(make_image_bytes(256, 256, noise=True))

        with self.assertRaises(ProcessingError) as ctx:
            IngestionService.save(self._create_test_file(content, 'scan.png'), image_width=100)

        self.assertEqual(ctx.exception.error_key, ErrorKey.WRONG_FILE_TYPE)
        self.assertIsInstance(ctx.exception.__cause__, SyntaxError)
        self.assertFalse(os.path.exists(os.path.join(TEST_MEDIA_ROOT, 'uploads')))

    def test_resize_image_corrupted_png_resets_pointer(self):
        """The file is rewound even when decoding fails."""
        file_obj = self._create_test_file(
            corrupt_png_chunk(make_image_bytes(256, 256, noise=True)), 'scan.png'
        )

        with self.assertRaises(ProcessingError):
            IngestionService.resize_image(file_obj, 'png', 100)

        self.assertEqual(file_obj.tell(), 0)

    def test_non_positive_image_width_is_rejected(self):
        """Zero or negative widths are bad input, not a codec failure."""
        content = make_image_bytes(40, 20)

        for width in (0, -5):
            with self.subTest(width=width):
                with self.assertRaises(InvalidInput) as ctx:
                    IngestionService.save(self._create_test_file(content, 'photo.png'), image_width=width)
                self.assertNotIsInstance(ctx.exception, ProcessingError)

        with patch('files.services.ingestion.Image.open') as image_open:
            with self.assertRaises(InvalidInput):
                IngestionService.resize_image(self._create_test_file(content, 'photo.png'), 'png', 0)
        image_open.assert_not_called()
