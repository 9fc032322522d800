from .base import *

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'clinicnet-tests',
    }
}

# Pin engine knobs so tests do not depend on the environment
SLOT_GRID_MINUTES = 15
SLOT_LOCK_TTL_MINUTES = 30
AVAILABILITY_CACHE_SECONDS = 20
SCHEDULING_TIME_ZONE = 'UTC'
HEATMAP_MAX_DAYS = 93
