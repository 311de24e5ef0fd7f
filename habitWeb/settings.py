"""
Django settings for habitWeb.

Deployment-specific values come from HABITS_* environment variables.
"""
import os
from pathlib import Path

from habits.utils.logging_utils import get_logging_config

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.environ.get('HABITS_SECRET_KEY', 'django-insecure-habit-ledger-dev-key')

DEBUG = env_bool('HABITS_DEBUG', True)

ALLOWED_HOSTS = [h for h in os.environ.get('HABITS_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',') if h]


# Application definition

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'simple_history',
    'habits',
]

MIDDLEWARE = [
    'habits.utils.logging_utils.RequestIDMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'simple_history.middleware.HistoryRequestMiddleware',
]

ROOT_URLCONF = 'habitWeb.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'habitWeb.wsgi.application'


# Database

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.environ.get('HABITS_DB_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'habit-ledger',
    }
}

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
]


# Internationalization

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# REST framework (serializers only; views are plain Django JSON views)

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
}


# Application tunables (see habits.utils.constants.DEFAULTS)

HABITS = {
    'INSIGHTS_LIMIT': 10,
    'INSIGHTS_LIMIT_COMPACT': 5,
    'OFFLINE_CACHE_WEEKS': 4,
    'MAX_SYNC_RETRIES': 3,
    'DASHBOARD_CACHE_TIMEOUT': int(os.environ.get('HABITS_DASHBOARD_CACHE_TIMEOUT', 60)),
    'WEEK_LIST_PAST': 12,
    'WEEK_LIST_FUTURE': 4,
}


# Logging

LOGGING = get_logging_config(
    level=os.environ.get('HABITS_LOG_LEVEL', 'INFO'),
    use_json=env_bool('HABITS_LOG_JSON', False),
)
