from datetime import date, datetime

from lifealign.errors import ValidationError

# Largest value an INTEGER primary key can hold on every supported database.
MAX_ID = 2**31 - 1
DAY_FORMAT = "%Y-%m-%d"


def normalize_text(value):
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    cleaned = " ".join(value.split()).strip()
    return cleaned or None


def normalize_email(value: str | None):
    if not value or not isinstance(value, str):
        return None
    return value.strip().lower() or None


def field(body: dict, name: str, *aliases):
    """Return the first present key among ``name`` and its aliases."""
    for key in (name, *aliases):
        if key in body:
            return body[key]
    return None


def has_field(body: dict, name: str, *aliases) -> bool:
    return any(key in body for key in (name, *aliases))


def require_json_object(payload) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    return payload


def require_text(value, label: str, max_len: int | None = None) -> str:
    text = normalize_text(value)
    if not text:
        raise ValidationError(f"{label} is required.")
    if max_len is not None and len(text) > max_len:
        raise ValidationError(f"{label} must be at most {max_len} characters.")
    return text


def optional_text(value, label: str, max_len: int | None = None):
    if value is None:
        return None
    text = normalize_text(value)
    if text and max_len is not None and len(text) > max_len:
        raise ValidationError(f"{label} must be at most {max_len} characters.")
    return text


def parse_int(value, label: str, minimum: int | None = None, maximum: int | None = None) -> int:
    if isinstance(value, bool) or value is None or value == "":
        raise ValidationError(f"{label} must be a whole number.")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a whole number.")
    if isinstance(value, float) and value != number:
        raise ValidationError(f"{label} must be a whole number.")
    if minimum is not None and number < minimum:
        raise ValidationError(f"{label} must be at least {minimum}.")
    if maximum is not None and number > maximum:
        raise ValidationError(f"{label} must be at most {maximum}.")
    return number


def parse_optional_int(value, label: str, minimum: int | None = None, maximum: int | None = None):
    if value is None or value == "":
        return None
    return parse_int(value, label, minimum=minimum, maximum=maximum)


def parse_id(value, label: str) -> int:
    return parse_int(value, label, minimum=1, maximum=MAX_ID)


def is_valid_id(value) -> bool:
    return isinstance(value, int) and 1 <= value <= MAX_ID


def parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def parse_day(value, label: str = "date", default: date | None = None) -> date:
    if value in (None, ""):
        if default is not None:
            return default
        raise ValidationError(f"{label} is required (YYYY-MM-DD).")
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), DAY_FORMAT).date()
    except ValueError:
        raise ValidationError(f"{label} must be a date in YYYY-MM-DD format.")


def clamp_score(value, label: str, low: int = 0, high: int = 100) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{label} must be a number.")
    try:
        number = int(round(float(value)))
    except (TypeError, ValueError):
        raise ValidationError(f"{label} must be a number.")
    return max(low, min(high, number))


def parse_focus_areas(value) -> list[dict]:
    if not isinstance(value, list) or not value:
        raise ValidationError("focusAreas must be a non-empty list.")

    areas = []
    for item in value:
        if isinstance(item, str):
            item = {"name": item}
        if not isinstance(item, dict):
            raise ValidationError("Each focus area must be an object with a name.")
        areas.append(
            {
                "name": require_text(item.get("name"), "Focus area name", max_len=120),
                "description": optional_text(item.get("description"), "Focus area description") or "",
                "priority": clamp_score(item.get("priority", 3), "Focus area priority", low=1, high=5),
            }
        )
    return areas


def parse_score_map(value, label: str) -> dict:
    if not isinstance(value, dict):
        raise ValidationError(f"{label} must be an object of name to score.")
    scores = {}
    for key, raw in value.items():
        name = require_text(key, f"{label} key", max_len=120)
        scores[name] = clamp_score(raw, f"{label} score for {name}")
    return scores
