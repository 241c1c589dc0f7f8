import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(BASE_DIR / ".env")


def env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_list(name: str, default: str = "") -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


REDIS_URL = os.getenv("REDIS_URL", "").strip()

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-unsafe-secret-key")
DEBUG = env_bool("DJANGO_DEBUG", default=True)

ALLOWED_HOSTS = env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver")

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "rides.apps.RidesConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "rides.middleware.RequestContextMiddleware",
]

ROOT_URLCONF = "ridepool.urls"

WSGI_APPLICATION = "ridepool.wsgi.application"

# Trips, routes and stopovers are persisted by an external service; this
# project keeps no tables of its own.
DATABASES = {}

if REDIS_URL:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.redis.RedisCache",
            "LOCATION": REDIS_URL,
        }
    }
else:
    CACHES = {
        "default": {
            "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
            "LOCATION": "ridepool-local",
        }
    }

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Kolkata"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"
X_FRAME_OPTIONS = "DENY"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny"
    ],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_THROTTLE_CLASSES": [
        "rest_framework.throttling.AnonRateThrottle",
    ],
    "DEFAULT_THROTTLE_RATES": {
        "anon": os.getenv("RIDEPOOL_THROTTLE_ANON", "600/hour"),
        "location_suggest": os.getenv("RIDEPOOL_THROTTLE_LOCATION_SUGGEST", "3600/hour"),
        "location_reverse": os.getenv("RIDEPOOL_THROTTLE_LOCATION_REVERSE", "600/hour"),
        "route_lookup": os.getenv("RIDEPOOL_THROTTLE_ROUTE_LOOKUP", "240/hour"),
    },
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_context": {"()": "ridepool.logging.RequestContextFilter"},
    },
    "formatters": {
        "context": {
            "format": "%(asctime)s %(levelname)s %(name)s [req=%(request_id)s trip=%(trip_id)s client=%(client_ip)s] %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "filters": ["request_context"],
            "formatter": "context",
        },
    },
    "root": {"handlers": ["console"], "level": os.getenv("RIDEPOOL_LOG_LEVEL", "INFO")},
}
