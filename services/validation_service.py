from datetime import datetime

import pytz


def parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ["1", "true", "yes", "on"]


def parse_number(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def resolve_timezone(name, default="UTC"):
    """Return a pytz timezone, falling back to the default on unknown names."""
    try:
        return pytz.timezone(name or default)
    except pytz.UnknownTimeZoneError:
        return pytz.timezone(default)


def parse_iso_datetime(value, tz=None):
    """Parse an ISO timestamp into an aware datetime; naive values are read in `tz`."""
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        raw = str(value).strip()
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except (TypeError, ValueError):
            return None
    if parsed.tzinfo is None:
        parsed = (tz or pytz.UTC).localize(parsed)
    return parsed


def to_utc_iso(value):
    return value.astimezone(pytz.UTC).isoformat()

