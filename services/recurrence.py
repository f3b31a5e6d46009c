"""Expansion of recurring calendar events into virtual occurrences."""

import logging
import uuid
from datetime import datetime, timedelta

from services.repeat_picker import DAY_CODES
from services.validation_service import parse_iso_datetime, resolve_timezone, to_utc_iso

logger = logging.getLogger(__name__)

FREQUENCIES = ('DAILY', 'WEEKLY', 'MONTHLY', 'YEARLY')
RECURRING_OPTIONS = ('single', 'following', 'all')
PROTECTED_FIELDS = ('id', 'parent_id', 'is_virtual', 'recurrence_group_id')


def is_recurring(event):
    rule = event.get('recurrence')
    return bool(rule) and rule != 'none'


def _parse_until(raw):
    try:
        return datetime.strptime(raw[:8], '%Y%m%d').date()
    except (TypeError, ValueError):
        return None


def parse_rule(rule):
    """Parse 'FREQ=...;INTERVAL=...;BYDAY=...' into a dict, or None when it does not recur."""
    if not rule or not isinstance(rule, str) or rule.strip().lower() == 'none':
        return None
    parts = {}
    for chunk in rule.strip().upper().split(';'):
        if '=' in chunk:
            key, val = chunk.split('=', 1)
            parts[key.strip()] = val.strip()
    freq = parts.get('FREQ')
    if freq not in FREQUENCIES:
        return None
    try:
        interval = max(int(parts.get('INTERVAL', 1)), 1)
    except ValueError:
        interval = 1
    by_day = [code for code in parts.get('BYDAY', '').split(',') if code in DAY_CODES]
    try:
        by_month_day = int(parts['BYMONTHDAY']) if parts.get('BYMONTHDAY') else None
    except ValueError:
        by_month_day = None
    return {
        'freq': freq,
        'interval': interval,
        'by_day': by_day,
        'by_month_day': by_month_day,
        'until': _parse_until(parts['UNTIL']) if parts.get('UNTIL') else None,
    }


def occurs_on(rule, first_day, day_value):
    """Whether a parsed rule anchored on `first_day` lands on `day_value`."""
    days_since = (day_value - first_day).days
    if days_since < 0:
        return False
    if rule['until'] and day_value > rule['until']:
        return False
    interval = rule['interval']
    code = DAY_CODES[day_value.weekday()]

    if rule['freq'] == 'DAILY':
        if rule['by_day'] and code not in rule['by_day']:
            return False
        return days_since % interval == 0
    if rule['freq'] == 'WEEKLY':
        week_anchor = first_day - timedelta(days=first_day.weekday())
        weeks_since = (day_value - week_anchor).days // 7
        codes = rule['by_day'] or [DAY_CODES[first_day.weekday()]]
        return code in codes and weeks_since % interval == 0
    if rule['freq'] == 'MONTHLY':
        months_since = (day_value.year - first_day.year) * 12 + (day_value.month - first_day.month)
        target_day = rule['by_month_day'] or first_day.day
        return months_since % interval == 0 and day_value.day == target_day
    if rule['freq'] == 'YEARLY':
        years_since = day_value.year - first_day.year
        return years_since % interval == 0 and (day_value.month, day_value.day) == (first_day.month, first_day.day)
    return False


def _excluded_days(event, tz):
    days = set()
    for raw in event.get('excluded_dates') or []:
        parsed = parse_iso_datetime(raw, tz)
        if parsed is not None:
            days.add(parsed.astimezone(tz).date())
    return days


def expand_occurrences(event, view_start, view_end, default_timezone='UTC'):
    """Virtual occurrences of a recurring event inside [view_start, view_end].

    Occurrences keep the base event's wall-clock start time in its timezone and
    its duration. The base occurrence itself is never repeated.
    """
    rule = parse_rule(event.get('recurrence'))
    if not rule:
        return []
    tz = resolve_timezone(event.get('timezone'), default_timezone)
    start = parse_iso_datetime(event.get('start'), tz)
    if start is None:
        logger.warning("Skipping recurring event %s with unreadable start", event.get('id'))
        return []
    end = parse_iso_datetime(event.get('end'), tz) or start
    duration = end - start
    local_start = start.astimezone(tz)
    first_day = local_start.date()
    wall_clock = local_start.time().replace(tzinfo=None)
    excluded = _excluded_days(event, tz)

    day_value = max(first_day, view_start.astimezone(tz).date() - timedelta(days=1))
    last_day = view_end.astimezone(tz).date() + timedelta(days=1)
    if rule['until']:
        last_day = min(last_day, rule['until'])

    occurrences = []
    while day_value <= last_day:
        if day_value not in excluded and occurs_on(rule, first_day, day_value):
            occurrence = tz.localize(datetime.combine(day_value, wall_clock))
            if occurrence > start and view_start <= occurrence <= view_end:
                stamp = int(occurrence.timestamp() * 1000)
                occurrences.append({
                    **event,
                    'id': f"{event['id']}-virtual-{stamp}",
                    'start': to_utc_iso(occurrence),
                    'end': to_utc_iso(occurrence + duration),
                    'is_virtual': True,
                    'parent_id': event['id'],
                })
        day_value += timedelta(days=1)
    return occurrences


def events_with_occurrences(events, view_start, view_end, default_timezone='UTC'):
    """Stored events in the view plus the virtual occurrences of recurring ones."""
    results = []
    seen = set()

    def add(ev):
        if ev['id'] not in seen:
            seen.add(ev['id'])
            results.append(ev)

    for event in events:
        if event.get('is_virtual'):
            continue
        tz = resolve_timezone(event.get('timezone'), default_timezone)
        start = parse_iso_datetime(event.get('start'), tz)
        in_view = start is not None and view_start <= start <= view_end
        if not is_recurring(event):
            if in_view:
                add(event)
            continue
        if event['id'] in seen:
            continue
        if in_view and start.astimezone(tz).date() not in _excluded_days(event, tz):
            add(event)
        for occurrence in expand_occurrences(event, view_start, view_end, default_timezone):
            add(occurrence)
    return results


def without_until(rule):
    return ';'.join(p for p in rule.split(';') if p and not p.upper().startswith('UNTIL='))


def with_until(rule, until_day):
    """Return `rule` ending on `until_day` (inclusive), replacing any previous UNTIL."""
    return f"{without_until(rule)};UNTIL={until_day.strftime('%Y%m%d')}T235959Z"


def _recurring_parent(events, target):
    """The stored recurring event a virtual target was expanded from, if any."""
    if not target.get('is_virtual') or not target.get('parent_id'):
        return None
    parent = next((e for e in events if e.get('id') == target['parent_id']), None)
    if parent is None or not is_recurring(parent):
        return None
    return parent


def _local_day(event, value, default_timezone):
    tz = resolve_timezone(event.get('timezone'), default_timezone)
    parsed = parse_iso_datetime(value, tz)
    if parsed is None:
        raise ValueError("event start must be an ISO timestamp")
    return parsed.astimezone(tz).date()


def _replace_event(events, updated):
    return [updated if e.get('id') == updated['id'] else e for e in events]


def delete_recurring(events, target, option, default_timezone='UTC'):
    """Apply a 'single' / 'following' / 'all' delete of `target` to `events`; returns the new list."""
    if option not in RECURRING_OPTIONS:
        raise ValueError(f"Invalid delete option: {option}")
    parent = _recurring_parent(events, target)

    if option == 'all' or (option == 'following' and not parent and is_recurring(target)):
        group_id = target.get('recurrence_group_id') or target.get('parent_id') or target.get('id')
        return [
            e for e in events
            if e.get('id') != group_id
            and e.get('recurrence_group_id') != group_id
            and e.get('parent_id') != group_id
        ]

    if not parent:
        return [e for e in events if e.get('id') != target.get('id')]

    occurrence_day = _local_day(parent, target.get('start'), default_timezone)
    if option == 'single':
        updated = {**parent, 'excluded_dates': list(parent.get('excluded_dates') or []) + [target['start']]}
    else:
        updated = {**parent, 'recurrence': with_until(parent['recurrence'], occurrence_day - timedelta(days=1))}
    return _replace_event(events, updated)


def _apply_changes(event, changes):
    return {**event, **{k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}}


def _shift(value, delta, tz):
    parsed = parse_iso_datetime(value, tz)
    return to_utc_iso(parsed + delta) if parsed is not None else value


def _edit_single(events, target, changes, parent, default_timezone):
    tz = resolve_timezone(parent.get('timezone'), default_timezone)
    occurrence_day = _local_day(parent, target.get('start'), default_timezone)
    group_id = target.get('recurrence_group_id') or parent['id']

    for existing in events:
        if (existing.get('recurrence_group_id') == group_id and not is_recurring(existing)
                and not existing.get('is_virtual') and existing.get('id') != parent['id']):
            existing_start = parse_iso_datetime(existing.get('start'), tz)
            if existing_start is not None and existing_start.astimezone(tz).date() == occurrence_day:
                return _replace_event(events, _apply_changes(existing, changes))

    exception = _apply_changes(target, changes)
    exception.update({
        'id': f"{parent['id']}-exception-{uuid.uuid4().hex[:8]}",
        'is_virtual': False,
        'recurrence': None,
        'excluded_dates': None,
        'recurrence_group_id': group_id,
    })
    exception.pop('parent_id', None)

    excluded = list(parent.get('excluded_dates') or [])
    if occurrence_day not in _excluded_days(parent, tz):
        excluded.append(target['start'])
    return _replace_event(events, {**parent, 'excluded_dates': excluded}) + [exception]


def _edit_following(events, target, changes, parent, default_timezone):
    tz = resolve_timezone(parent.get('timezone'), default_timezone)
    occurrence_day = _local_day(parent, target.get('start'), default_timezone)

    kept, moved = [], []
    for raw in parent.get('excluded_dates') or []:
        parsed = parse_iso_datetime(raw, tz)
        (moved if parsed is not None and parsed.astimezone(tz).date() >= occurrence_day else kept).append(raw)

    ended = {
        **parent,
        'recurrence': with_until(parent['recurrence'], occurrence_day - timedelta(days=1)),
        'excluded_dates': kept,
    }
    split = _apply_changes({**parent, 'start': target['start'], 'end': target.get('end', parent.get('end'))}, changes)
    split.update({
        'id': f"{parent['id']}-split-{uuid.uuid4().hex[:8]}",
        'is_virtual': False,
        'excluded_dates': moved,
        'recurrence_group_id': parent.get('recurrence_group_id') or parent['id'],
    })
    split.pop('parent_id', None)
    if not is_recurring(split):
        split['recurrence'] = parent['recurrence']
    return _replace_event(events, ended) + [split]


def _edit_all(events, target, changes, group_id, default_timezone):
    base = next((e for e in events if e.get('id') == group_id and not e.get('is_virtual')), None)
    if base is None:
        raise LookupError(group_id)
    tz = resolve_timezone(base.get('timezone'), default_timezone)
    target_start = parse_iso_datetime(target.get('start'), tz)
    target_end = parse_iso_datetime(target.get('end'), tz) or target_start
    new_start = parse_iso_datetime(changes.get('start'), tz) if 'start' in changes else None
    new_end = parse_iso_datetime(changes.get('end'), tz) if 'end' in changes else None
    if ('start' in changes and new_start is None) or ('end' in changes and new_end is None):
        raise ValueError("start and end must be ISO timestamps")
    if (new_start or new_end) and target_start is None:
        raise ValueError("event start must be an ISO timestamp")

    start_delta = (new_start - target_start) if new_start else timedelta(0)
    end_delta = (new_end - target_end) if new_end else start_delta

    members = [
        e for e in events
        if e.get('id') != group_id and (e.get('recurrence_group_id') == group_id or e.get('parent_id') == group_id)
    ]
    splits = [e for e in members if is_recurring(e)]
    recurrence = changes.get('recurrence') or base.get('recurrence')
    if splits and recurrence:
        recurrence = without_until(recurrence)

    moved = _apply_changes(base, {k: v for k, v in changes.items() if k not in ('start', 'end')})
    moved.update({
        'start': _shift(base.get('start'), start_delta, tz),
        'end': _shift(base.get('end'), end_delta, tz),
        'recurrence': recurrence,
        'excluded_dates': [] if members else list(base.get('excluded_dates') or []),
    })
    member_ids = {e.get('id') for e in members}
    return [moved if e.get('id') == group_id else e for e in events if e.get('id') not in member_ids]


def edit_recurring(events, target, changes, option, default_timezone='UTC'):
    """Apply field `changes` to `target` as a 'single' / 'following' / 'all' edit; returns the new list.

    A single edit detaches the occurrence into an exception event of the series.
    Editing the following occurrences ends the series the day before and starts
    a split series carrying the changes. Editing all moves the series base by the
    same offset as the target and folds split series and exceptions back into it.
    """
    if option not in RECURRING_OPTIONS:
        raise ValueError(f"Invalid edit option: {option}")
    parent = _recurring_parent(events, target)
    if parent is None and is_recurring(target) and not target.get('is_virtual'):
        parent = next((e for e in events if e.get('id') == target.get('id')), target)
    group_id = target.get('recurrence_group_id') or target.get('parent_id') or target.get('id')
    is_exception = not is_recurring(target) and target.get('recurrence_group_id') and not target.get('is_virtual')
    if option == 'following' and parent and parent['id'] == target.get('id'):
        option, group_id = 'all', parent['id']

    if option == 'all' and (parent or is_exception):
        try:
            return _edit_all(events, target, changes, group_id, default_timezone)
        except LookupError:
            logger.warning("Series %s not found; editing event %s only", group_id, target.get('id'))
    elif option == 'single' and parent:
        return _edit_single(events, target, changes, parent, default_timezone)
    elif option == 'following' and parent:
        return _edit_following(events, target, changes, parent, default_timezone)

    return [_apply_changes(e, changes) if e.get('id') == target.get('id') else e for e in events]
