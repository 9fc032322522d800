"""
Base settings for the clinic network booking engine.
"""
from pathlib import Path
from decouple import config, Csv
import dj_database_url

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = config('SECRET_KEY', default='clinicnet-insecure-development-key')

DEBUG = config('DEBUG', default=False, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=Csv())

DJANGO_APPS = [
    'django.contrib.contenttypes',
]

LOCAL_APPS = [
    'apps.core',
    'apps.locations',
    'apps.services',
    'apps.staff',
    'apps.clients',
    'apps.bookings',
]

INSTALLED_APPS = DJANGO_APPS + LOCAL_APPS

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'clinicnet.urls'

WSGI_APPLICATION = 'clinicnet.wsgi.application'

DATABASES = {
    'default': dj_database_url.config(
        default=config('DATABASE_URL', default=f"postgres://{config('DB_USER', default='postgres')}:{config('DB_PASSWORD', default='')}@{config('DB_HOST', default='localhost')}:{config('DB_PORT', default='5432')}/{config('DB_NAME', default='clinicnet_db')}"),
        conn_max_age=600
    )
}

CSRF_TRUSTED_ORIGINS = config('CSRF_TRUSTED_ORIGINS', default='http://localhost:8000', cast=Csv())

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# ── Cache ──────────────────────────────────────────────────────────────────────
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'clinicnet-availability',
    }
}

# ── Booking Engine ─────────────────────────────────────────────────────────────
SLOT_GRID_MINUTES = config('SLOT_GRID_MINUTES', default=15, cast=int)            # Slot start spacing
SLOT_LOCK_TTL_MINUTES = config('SLOT_LOCK_TTL_MINUTES', default=30, cast=int)    # Checkout hold lifetime
AVAILABILITY_CACHE_SECONDS = config('AVAILABILITY_CACHE_SECONDS', default=20, cast=int)
SCHEDULING_TIME_ZONE = config('SCHEDULING_TIME_ZONE', default='UTC')             # Day boundaries
HEATMAP_MAX_DAYS = config('HEATMAP_MAX_DAYS', default=93, cast=int)                # Widest heatmap request

# ── Logging ────────────────────────────────────────────────────────────────────
LOG_LEVEL = config('LOG_LEVEL', default='INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'standard': {
            'format': '%(asctime)s %(levelname)s [%(name)s] %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'standard',
        },
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': LOG_LEVEL,
            'propagate': False,
        },
        'django.request': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
    },
}
