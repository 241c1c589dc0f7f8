import os


def env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    value = (os.getenv(name) or "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def nominatim_base_url() -> str:
    return (os.getenv("NOMINATIM_BASE_URL", "").strip() or "https://nominatim.openstreetmap.org").rstrip("/")


def nominatim_country_codes() -> str:
    return os.getenv("NOMINATIM_COUNTRY_CODES", "in").strip().lower() or "in"


def nominatim_result_limit() -> int:
    return max(1, env_int("NOMINATIM_RESULT_LIMIT", 8))


def geocoder_cache_enabled() -> bool:
    return env_bool("GEOCODER_CACHE_ENABLED", default=True)


def geocoder_cache_ttl() -> int:
    return max(0, env_int("GEOCODER_CACHE_TTL", 60 * 60 * 6))


def osrm_base_url() -> str:
    return (os.getenv("OSRM_BASE_URL", "").strip() or "https://router.project-osrm.org").rstrip("/")


def search_debounce_seconds() -> float:
    return max(0, env_int("LOCATION_SEARCH_DEBOUNCE_MS", 400)) / 1000.0


def search_retry_pause_seconds() -> float:
    return max(0, env_int("LOCATION_SEARCH_RETRY_PAUSE_MS", 500)) / 1000.0
