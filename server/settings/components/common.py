"""
Django settings for server project.

For the full list of settings and their config, see
https://docs.djangoproject.com/en/5.0/ref/settings/
"""

from typing import Final

from server.settings.components import config

SECRET_KEY = config('DJANGO_SECRET_KEY', default='')

# Application definition:

INSTALLED_APPS: Final[tuple[str, ...]] = (
    # Third party apps:
    'corsheaders',

    # Your apps go here:
    'server.apps.files',
)

# The API is stateless and unauthenticated: no sessions, no CSRF cookies.
MIDDLEWARE: Final[tuple[str, ...]] = (
    'django.middleware.security.SecurityMiddleware',
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.common.CommonMiddleware',
)

ROOT_URLCONF = 'server.urls'

WSGI_APPLICATION = 'server.wsgi.application'

# No database: every listing is computed from the bucket itself.
DATABASES: Final[dict[str, dict[str, str]]] = {}

# Internationalization
# https://docs.djangoproject.com/en/5.0/topics/i18n/

LANGUAGE_CODE = 'en-us'

USE_I18N = False

TIME_ZONE = 'UTC'
USE_TZ = True

# Trailing slashes are not part of the API paths.
APPEND_SLASH = False

# CORS for the browser frontend
# https://github.com/adamchainz/django-cors-headers

CORS_ALLOWED_ORIGINS = config(
    'CORS_ALLOWED_ORIGINS',
    default='http://localhost:3000',
    cast=lambda origins: [
        origin.strip() for origin in origins.split(',') if origin.strip()
    ],
)
CORS_EXPOSE_HEADERS: Final = ('Content-Disposition',)
