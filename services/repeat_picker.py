"""Repeat options offered for an event, keyed to the event's own date."""

DAY_CODES = ['MO', 'TU', 'WE', 'TH', 'FR', 'SA', 'SU']
DAY_NAMES = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
MONTH_NAMES = ['Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec']


def ordinal_suffix(day):
    if 3 < day < 21:
        return 'th'
    return {1: 'st', 2: 'nd', 3: 'rd'}.get(day % 10, 'th')


def repeat_options(event_date):
    """Label/value/rule triples for the repeat dropdown of an event on `event_date`."""
    day_code = DAY_CODES[event_date.weekday()]
    day_name = DAY_NAMES[event_date.weekday()]
    dom = event_date.day
    month_day = f"{MONTH_NAMES[event_date.month - 1]} {dom}"
    return [
        {'value': 'none', 'label': 'Does not repeat', 'rule': ''},
        {'value': 'daily', 'label': 'Every day', 'rule': 'FREQ=DAILY'},
        {'value': 'weekday', 'label': 'Every weekday', 'rule': 'FREQ=DAILY;BYDAY=MO,TU,WE,TH,FR'},
        {'value': 'weekend', 'label': 'Every weekend day', 'rule': 'FREQ=DAILY;BYDAY=SA,SU'},
        {'value': 'weekly', 'label': f'Every week on {day_name}', 'rule': f'FREQ=WEEKLY;BYDAY={day_code}'},
        {'value': 'biweekly', 'label': f'Every 2 weeks on {day_name}',
         'rule': f'FREQ=WEEKLY;INTERVAL=2;BYDAY={day_code}'},
        {'value': 'monthly', 'label': f'Every month on the {dom}{ordinal_suffix(dom)}',
         'rule': f'FREQ=MONTHLY;BYMONTHDAY={dom}'},
        {'value': 'yearly', 'label': f'Every year on {month_day}', 'rule': 'FREQ=YEARLY'},
    ]


def rule_for(value, event_date):
    for option in repeat_options(event_date):
        if option['value'] == value:
            return option['rule']
    raise ValueError(f"Unknown repeat option: {value}")


def option_for_rule(rule, event_date):
    """Reverse lookup from a stored rule to the option value; unknown rules read as 'none'."""
    normalized = (rule or '').strip().upper()
    if not normalized or normalized == 'NONE':
        return 'none'
    for option in repeat_options(event_date):
        if option['rule'] and option['rule'] == normalized:
            return option['value']
    # Rules carrying an UNTIL or a different weekday still belong to their family.
    parts = dict(p.split('=', 1) for p in normalized.split(';') if '=' in p)
    freq = parts.get('FREQ')
    if freq == 'DAILY':
        return {'MO,TU,WE,TH,FR': 'weekday', 'SA,SU': 'weekend'}.get(parts.get('BYDAY'), 'daily')
    if freq == 'WEEKLY':
        return 'biweekly' if parts.get('INTERVAL') == '2' else 'weekly'
    if freq == 'MONTHLY':
        return 'monthly'
    if freq == 'YEARLY':
        return 'yearly'
    return 'none'
