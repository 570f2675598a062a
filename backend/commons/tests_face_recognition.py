"""
Unit Tests for the Face Recognition Client
==========================================
The remote service is replaced by an httpx.MockTransport.
"""

import os
import shutil
import tempfile

import httpx
from django.test import TestCase, override_settings

from commons.face_recognition import FaceRecognitionClient

SERVICE_URL = 'http://faces.example.test/compare'


class FaceRecognitionClientTests(TestCase):
    """Tests for FaceRecognitionClient."""

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.image_1 = self._write('id_card.jpg', b'\xff\xd8first')
        self.image_2 = self._write('selfie.png', b'\x89PNGsecond')
        self.requests = []

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def _write(self, name, content):
        path = os.path.join(self.tmp_dir, name)
        with open(path, 'wb') as fh:
            fh.write(content)
        return path

    def _client(self, status_code=200, payload=None):
        def handler(request):
            request.read()
            self.requests.append(request)
            return httpx.Response(status_code, json=payload or {'match': True, 'distance': 0.31})

        return FaceRecognitionClient(
            SERVICE_URL, client=httpx.Client(transport=httpx.MockTransport(handler))
        )

    def test_check_returns_service_json(self):
        result = self._client().check(self.image_1, self.image_2)

        self.assertEqual(result, {'match': True, 'distance': 0.31})

    def test_check_posts_both_images_as_multipart(self):
        self._client().check(self.image_1, self.image_2)

        request = self.requests[0]
        body = request.read()
        self.assertEqual(request.method, 'POST')
        self.assertEqual(str(request.url), SERVICE_URL)
        self.assertTrue(request.headers['content-type'].startswith('multipart/form-data'))
        self.assertIn(b'name="image_1"; filename="id_card.jpg"', body)
        self.assertIn(b'name="image_2"; filename="selfie.png"', body)
        self.assertIn(b'Content-Type: image/jpeg', body)
        self.assertIn(b'Content-Type: image/png', body)

    def test_check_logs_and_raises_on_error_status(self):
        client = self._client(status_code=500, payload={'error': 'model not loaded'})

        with self.assertLogs('commons.face_recognition', level='ERROR'):
            with self.assertRaises(httpx.HTTPStatusError):
                client.check(self.image_1, self.image_2)

    def test_check_missing_image_raises(self):
        with self.assertLogs('commons.face_recognition', level='ERROR'):
            with self.assertRaises(FileNotFoundError):
                self._client().check(self.image_1, os.path.join(self.tmp_dir, 'missing.jpg'))
        self.assertEqual(self.requests, [])

    def test_invalid_url_is_rejected(self):
        with self.assertRaises(ValueError):
            FaceRecognitionClient('not a url')

    @override_settings(FACE_RECOGNITION_URL='')
    def test_empty_url_is_rejected(self):
        with self.assertRaises(ValueError):
            FaceRecognitionClient()

    @override_settings(FACE_RECOGNITION_URL=SERVICE_URL, FACE_RECOGNITION_TIMEOUT=5)
    def test_url_and_timeout_from_settings(self):
        client = FaceRecognitionClient()

        self.assertEqual(client.service_url, SERVICE_URL)
        self.assertEqual(client.client.timeout.read, 5)
        client.close()

    def test_mime_type_fallback(self):
        self.assertEqual(FaceRecognitionClient.get_mime_type('scan.unknownext'), 'application/octet-stream')
