"""
Django settings for the care platform backend.

Values come from environment variables with development defaults.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 'yes', 'on'}


def _env_int(name, default=None):
    try:
        return int(os.getenv(name))
    except (TypeError, ValueError):
        return default


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-dev-key-change-me')

DEBUG = _env_bool('DJANGO_DEBUG', True)

ALLOWED_HOSTS = os.getenv('DJANGO_ALLOWED_HOSTS', '*').split(',')


# Application definition

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'rest_framework',
    'commons',
    'files',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'core.urls'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# Cache: shared counter store for upload quotas
# Use Redis when available so every worker sees the same counters.

REDIS_URL = os.getenv('REDIS_URL')

if REDIS_URL:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.redis.RedisCache',
            'LOCATION': REDIS_URL,
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'care-commons',
        }
    }


# Internationalization

LANGUAGE_CODE = 'en'

LANGUAGES = [
    ('en', 'English'),
    ('fr', 'French'),
]

TIME_ZONE = os.getenv('TIME_ZONE', 'Africa/Douala')

USE_I18N = True

USE_TZ = True


# Media / uploads

MEDIA_ROOT = os.getenv('MEDIA_ROOT', str(BASE_DIR / 'media'))
MEDIA_URL = '/media/'

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    # Content-addressed uploads overwrite in place
    'uploads': {
        'BACKEND': 'files.storage.OverwriteStorage',
    },
}

UPLOAD_DIRECTORY = os.getenv('UPLOAD_DIRECTORY', 'uploads/')
UPLOAD_IMAGE_WIDTH = _env_int('UPLOAD_IMAGE_WIDTH')
UPLOAD_IMAGE_QUALITY = _env_int('UPLOAD_IMAGE_QUALITY', 90)
UPLOAD_DAILY_LIMIT_MB = _env_int('UPLOAD_DAILY_LIMIT_MB', 200)
UPLOAD_QUOTA_CACHE = os.getenv('UPLOAD_QUOTA_CACHE', 'default')
FILE_UPLOAD_MAX_SIZE_MB = _env_int('FILE_UPLOAD_MAX_SIZE_MB', 20)


# External services

SHORT_URL_BASE = os.getenv('SHORT_URL_BASE', 'http://s.kimbocare.com/')
FACE_RECOGNITION_URL = os.getenv('FACE_RECOGNITION_URL', '')
FACE_RECOGNITION_TIMEOUT = float(os.getenv('FACE_RECOGNITION_TIMEOUT', '30'))


REST_FRAMEWORK = {
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    # Per-user upload quotas apply only to requests authenticated here
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.BasicAuthentication',
    ],
}


LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'files': {
            'handlers': ['console'],
            'level': os.getenv('LOG_LEVEL', 'INFO'),
        },
        'commons': {
            'handlers': ['console'],
            'level': os.getenv('LOG_LEVEL', 'INFO'),
        },
    },
}
