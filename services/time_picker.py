"""Quarter-hour time picker: option list, typed-input filtering and selection."""

import re

PAGE_SIZE = 10

QUERY_PATTERN = re.compile(r"^(\d{1,2}):?(\d{0,2})\s*(am|pm)?$")
SELECTION_PATTERN = re.compile(r"(\d{1,2}):?(\d{0,2})\s*(AM|PM)?")


def _twelve_hour(hour):
    return 12 if hour == 0 else hour - 12 if hour > 12 else hour


def _period(hour):
    return 'AM' if hour < 12 else 'PM'


def format_time_label(hour, minute):
    return f"{_twelve_hour(hour)}:{minute:02d} {_period(hour)}"


def label_for(value):
    """Label of a datetime as shown in the picker input, e.g. '9:05 AM'."""
    return format_time_label(value.hour, value.minute)


def generate_time_options():
    return [format_time_label(hour, minute) for hour in range(24) for minute in range(0, 60, 15)]


TIME_OPTIONS = generate_time_options()


def _split_label(label):
    clock, period = label.split(' ')
    hour, minute = clock.split(':')
    return int(hour), int(minute), period


def _window_from(index):
    if index < 0:
        return TIME_OPTIONS[:PAGE_SIZE]
    start = max(0, index - 2)
    return TIME_OPTIONS[start:start + PAGE_SIZE]


def initial_options(value):
    """Options shown when the picker opens: a window around the value's quarter hour."""
    target = (_twelve_hour(value.hour), (value.minute // 15) * 15, _period(value.hour))
    index = next((i for i, label in enumerate(TIME_OPTIONS) if _split_label(label) == target), -1)
    return _window_from(index)


def _options_around_hour(value):
    hour, period = _twelve_hour(value.hour), _period(value.hour)
    index = next(
        (i for i, label in enumerate(TIME_OPTIONS)
         if _split_label(label)[0] == hour and _split_label(label)[2] == period),
        -1,
    )
    return _window_from(index)


def filter_time_options(query, value):
    """Options matching what the user typed. `value` is the picker's current datetime."""
    search = (query or '').strip().lower()
    if not search:
        return _options_around_hour(value)

    match = QUERY_PATTERN.match(search)
    if not match:
        filtered = [label for label in TIME_OPTIONS if search in label.lower()]
        return filtered[:PAGE_SIZE] if filtered else TIME_OPTIONS[:PAGE_SIZE]

    hours = int(match.group(1))
    typed_minutes = match.group(2)
    ampm = match.group(3)

    if ampm:
        wanted = ampm.upper()
        return [
            label for label in TIME_OPTIONS
            if _split_label(label)[0] == hours
            and _split_label(label)[2] == wanted
            and f"{_split_label(label)[1]:02d}".startswith(typed_minutes)
        ]
    if 1 <= hours <= 12:
        if typed_minutes:
            minute_str = f"{int(typed_minutes):02d}"
            return [f"{hours}:{minute_str} AM", f"{hours}:{minute_str} PM"]
        return [label for label in TIME_OPTIONS if _split_label(label)[0] == hours][:PAGE_SIZE]

    clean_search = re.sub(r"[^0-9apm]", "", search)
    filtered = [
        label for label in TIME_OPTIONS
        if clean_search in re.sub(r"[^0-9apm]", "", label.lower())
    ]
    return filtered[:PAGE_SIZE]


def apply_time(text, value, tz=None):
    """Set the typed or picked time on `value`'s date, as wall-clock time in `tz`.

    Returns the new datetime, or None when the text is not a valid time of day
    (the caller keeps its previous value in that case).
    """
    match = SELECTION_PATTERN.search((text or '').strip().upper())
    if not match:
        return None
    hours = int(match.group(1))
    minutes = int(match.group(2)) if match.group(2) else 0
    ampm = match.group(3)
    if ampm == 'PM' and hours != 12:
        hours += 12
    elif ampm == 'AM' and hours == 12:
        hours = 0
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return None
    naive = value.replace(tzinfo=None, hour=hours, minute=minutes, second=0, microsecond=0)
    if tz is not None:
        return tz.localize(naive)
    return naive.replace(tzinfo=value.tzinfo)
