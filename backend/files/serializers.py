from rest_framework import serializers


class StoredFileSerializer(serializers.Serializer):
    """Serializer for StoredFile results of an upload."""

    path = serializers.CharField(read_only=True)
    extension = serializers.CharField(read_only=True)
    filename = serializers.CharField(read_only=True)
    # Derived from the filename
    content_hash = serializers.CharField(read_only=True)
