import os


def normalize_database_url(url: str) -> str:
    if url.startswith("postgres://"):
        return "postgresql+psycopg://" + url[len("postgres://") :]
    if url.startswith("postgresql://"):
        return "postgresql+psycopg://" + url[len("postgresql://") :]
    return url


def env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    try:
        return int(raw) if raw is not None else int(default)
    except (TypeError, ValueError):
        return int(default)


def _as_optional_int(name: str):
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


class Config:
    SQLALCHEMY_DATABASE_URI = normalize_database_url(
        os.getenv("DATABASE_URL", "sqlite:///lifealign.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    MAX_CONTENT_LENGTH = env_int("MAX_CONTENT_LENGTH", 1024 * 1024)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Identity is resolved upstream; the caller id arrives in this header.
    USER_ID_HEADER = os.getenv("USER_ID_HEADER", "X-User-Id")

    RECOMMENDATION_LIMIT = env_int("RECOMMENDATION_LIMIT", 8)
    LOW_ENERGY_THRESHOLD = env_int("LOW_ENERGY_THRESHOLD", 5)
    STALE_CHECKIN_DAYS = env_int("STALE_CHECKIN_DAYS", 2)
    TEMPLATE_SELECTION = os.getenv("TEMPLATE_SELECTION", "modulo").strip().lower()
    TEMPLATE_SEED = _as_optional_int("TEMPLATE_SEED")
    COMMUNITY_FEED_LIMIT = env_int("COMMUNITY_FEED_LIMIT", 10)
