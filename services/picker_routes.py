"""Routes backing the time and repeat pickers and dropdown placement."""

from datetime import datetime

import pytz
from flask import current_app, jsonify, request

from services import dropdown_layout, repeat_picker, time_picker
from services.validation_service import parse_iso_datetime, parse_number, resolve_timezone, to_utc_iso


def _timezone(raw):
    return resolve_timezone(raw, current_app.config['DEFAULT_TIMEZONE'])


def _local_value(raw, tz):
    parsed = parse_iso_datetime(raw, tz) if raw else datetime.now(pytz.UTC)
    if parsed is None:
        return None
    return parsed.astimezone(tz)


def time_options():
    args = request.args
    tz = _timezone(args.get('tz'))
    value = _local_value(args.get('value'), tz)
    if value is None:
        return jsonify({'error': 'value must be an ISO timestamp'}), 400
    query = args.get('q')
    if query is None:
        options = time_picker.initial_options(value)
    else:
        options = time_picker.filter_time_options(query, value)
    return jsonify({'label': time_picker.label_for(value), 'options': options})


def select_time():
    data = request.get_json(silent=True) or {}
    tz = _timezone(data.get('tz'))
    value = _local_value(data.get('value'), tz)
    if value is None:
        return jsonify({'error': 'value must be an ISO timestamp'}), 400
    selected = time_picker.apply_time(data.get('input'), value, tz)
    if selected is None:
        # Invalid typed times keep the previous value.
        return jsonify({'error': 'Invalid time', 'value': to_utc_iso(value)}), 400
    return jsonify({'value': to_utc_iso(selected), 'label': time_picker.label_for(selected)})


def repeat_options():
    args = request.args
    tz = _timezone(args.get('tz'))
    value = _local_value(args.get('date'), tz)
    if value is None:
        return jsonify({'error': 'date must be an ISO timestamp'}), 400
    return jsonify({
        'options': repeat_picker.repeat_options(value),
        'selected': repeat_picker.option_for_rule(args.get('value'), value),
    })


def select_repeat():
    data = request.get_json(silent=True) or {}
    tz = _timezone(data.get('tz'))
    value = _local_value(data.get('date'), tz)
    if value is None:
        return jsonify({'error': 'date must be an ISO timestamp'}), 400
    try:
        rule = repeat_picker.rule_for(data.get('value') or 'none', value)
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    return jsonify({'rule': rule})


def dropdown_position():
    data = request.get_json(silent=True) or {}
    trigger = data.get('trigger') or {}
    viewport = data.get('viewport') or {}
    rect = {key: parse_number(trigger.get(key)) for key in ('top', 'left', 'right', 'bottom')}
    width = parse_number(viewport.get('width'))
    height = parse_number(viewport.get('height'))
    if any(v is None for v in rect.values()) or width is None or height is None:
        return jsonify({'error': 'trigger rect and viewport size required'}), 400
    alignment = data.get('alignment', 'left')
    if alignment not in ('left', 'right'):
        return jsonify({'error': 'alignment must be left or right'}), 400
    offset_x = parse_number(data.get('offset_x'))
    offset_y = parse_number(data.get('offset_y'))
    position = dropdown_layout.compute_position(
        rect,
        width,
        height,
        offset_x=-dropdown_layout.ESTIMATED_WIDTH if offset_x is None else offset_x,
        offset_y=offset_y or 0,
        alignment=alignment,
    )
    return jsonify(position)
