import logging

from django.conf import settings
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from commons.errors import ErrorKey
from .exceptions import UploadError
from .serializers import StoredFileSerializer
from .services import IngestionService, QuotaService
from .services.quota import get_daily_limit_mb, is_max_file_size

logger = logging.getLogger(__name__)


def get_max_upload_size_mb():
    """Get max upload size from settings, default 20MB."""
    return getattr(settings, 'FILE_UPLOAD_MAX_SIZE_MB', 20)


def get_image_width():
    """Target width for uploaded images, None keeps them untouched."""
    return getattr(settings, 'UPLOAD_IMAGE_WIDTH', None) or None


def get_client_ip(request):
    """
    Get client IP address from request.

    Handles proxy headers (X-Forwarded-For) appropriately.
    """
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        # Take the first IP in the chain
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')

    return ip or 'unknown'


def get_request_user(request):
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return user
    return None


class UploadViewSet(viewsets.ViewSet):
    """
    Upload endpoint combining the daily quota and the ingestion service.

    Provides:
    - Upload a file (quota check, then content-addressed storage)
    - Upload limits for client-side validation
    """
    parser_classes = [MultiPartParser, FormParser]

    def create(self, request, *args, **kwargs):
        """
        Upload a file.

        The attempt is charged to the daily quota of the user and of the
        client address before anything is stored.
        """
        file_obj = request.FILES.get('file')
        if not file_obj:
            return Response(
                ErrorKey.NO_FILE.as_payload(),
                status=status.HTTP_400_BAD_REQUEST
            )

        max_size = get_max_upload_size_mb()
        if is_max_file_size(file_obj, max_size):
            return Response(
                {
                    **ErrorKey.FILE_TOO_BIG.as_payload(),
                    'details': {
                        'file_size': file_obj.size,
                        'max_size_mb': max_size,
                    }
                },
                status=status.HTTP_400_BAD_REQUEST
            )

        address = get_client_ip(request)
        user = get_request_user(request)
        if QuotaService().check_file(file_obj, address, user=user):
            logger.warning(f"Upload refused for {address}: daily limit reached")
            return Response(
                ErrorKey.MAX_FILE_SIZE_PER_DAY_WAIT.as_payload(),
                status=status.HTTP_429_TOO_MANY_REQUESTS
            )

        try:
            stored = IngestionService.save(file_obj, image_width=get_image_width())
        except UploadError as e:
            logger.warning(f"Upload of {file_obj.name} rejected: {str(e)}")
            return Response(
                e.error_key.as_payload(),
                status=status.HTTP_400_BAD_REQUEST
            )

        serializer = StoredFileSerializer(stored)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], url_path='upload-limits')
    def upload_limits(self, request):
        """
        Get upload limits for client-side validation.

        Returns:
            - daily_limit_mb: Daily upload volume per user and per address
            - max_file_size_mb: Maximum size of a single file
            - image_width: Width images are shrunk to (null if disabled)
        """
        return Response({
            'daily_limit_mb': get_daily_limit_mb(),
            'max_file_size_mb': get_max_upload_size_mb(),
            'image_width': get_image_width(),
        })
