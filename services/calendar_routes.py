"""Calendar routes: recurring event expansion and series edits."""

from datetime import timedelta

from flask import current_app, jsonify, request

from services.recurrence import RECURRING_OPTIONS, delete_recurring, edit_recurring, events_with_occurrences
from services.validation_service import parse_iso_datetime, resolve_timezone

MAX_VIEW_DAYS = 366


def _events_payload(data):
    events = data.get('events')
    if not isinstance(events, list) or not all(isinstance(e, dict) and e.get('id') for e in events):
        return None
    return events


def _series_request(data):
    """Validated (events, target, option) for a recurring edit/delete, or an error response."""
    events = _events_payload(data)
    target = data.get('event')
    option = data.get('option')
    if events is None:
        return None, (jsonify({'error': 'events array required'}), 400)
    if not isinstance(target, dict) or not target.get('id'):
        return None, (jsonify({'error': 'event is required'}), 400)
    if option not in RECURRING_OPTIONS:
        return None, (jsonify({'error': f"option must be one of {', '.join(RECURRING_OPTIONS)}"}), 400)
    return (events, target, option), None


def calendar_occurrences():
    data = request.get_json(silent=True) or {}
    events = _events_payload(data)
    if events is None:
        return jsonify({'error': 'events array required'}), 400
    default_tz = current_app.config['DEFAULT_TIMEZONE']
    tz = resolve_timezone(data.get('timezone'), default_tz)
    view_start = parse_iso_datetime(data.get('view_start'), tz)
    view_end = parse_iso_datetime(data.get('view_end'), tz)
    if view_start is None or view_end is None:
        return jsonify({'error': 'view_start and view_end are required'}), 400
    if view_start > view_end:
        return jsonify({'error': 'view_start must not be after view_end'}), 400
    if view_end - view_start > timedelta(days=MAX_VIEW_DAYS):
        return jsonify({'error': f"view may span at most {MAX_VIEW_DAYS} days"}), 400
    try:
        expanded = events_with_occurrences(events, view_start, view_end, default_tz)
    except OverflowError:
        return jsonify({'error': 'view is outside the supported date range'}), 400
    return jsonify({'events': expanded})


def calendar_delete_recurring():
    data = request.get_json(silent=True) or {}
    parsed, error = _series_request(data)
    if error:
        return error
    events, target, option = parsed
    try:
        remaining = delete_recurring(events, target, option, current_app.config['DEFAULT_TIMEZONE'])
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    current_app.logger.info("Deleted %s of recurring event %s", option, target.get('id'))
    return jsonify({'events': remaining})


def calendar_edit_recurring():
    data = request.get_json(silent=True) or {}
    parsed, error = _series_request(data)
    if error:
        return error
    events, target, option = parsed
    changes = data.get('changes')
    if not isinstance(changes, dict):
        return jsonify({'error': 'changes must be an object'}), 400
    try:
        updated = edit_recurring(events, target, changes, option, current_app.config['DEFAULT_TIMEZONE'])
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    current_app.logger.info("Edited %s of recurring event %s", option, target.get('id'))
    return jsonify({'events': updated})
