"""
Files app configuration.

Upload ingestion and daily upload quotas.
"""

from django.apps import AppConfig


class FilesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'files'
