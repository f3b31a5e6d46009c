from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional

import pytz

URGENCIES = ('red', 'orange', 'green')
STATUSES = ('open', 'done')

DEFAULT_TASK_NAME = 'New task'
DEFAULT_URGENCY = 'orange'
DEFAULT_TIMEFRAME = {'start': '9:00AM', 'end': '10:00AM'}


def utc_now_iso():
    return datetime.now(pytz.UTC).isoformat()


@dataclass
class Task:
    id: str
    name: str = DEFAULT_TASK_NAME
    urgency: str = DEFAULT_URGENCY
    status: str = 'open'
    description: Optional[str] = None
    date: Optional[str] = None  # YYYY-MM-DD
    timeframe: Optional[Dict[str, str]] = None
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)

    def __post_init__(self):
        if self.urgency not in URGENCIES:
            raise ValueError(f"Invalid urgency: {self.urgency}")
        if self.status not in STATUSES:
            raise ValueError(f"Invalid status: {self.status}")

    def display_time_range(self):
        """Return 'start-end' when both ends of the timeframe are set."""
        timeframe = self.timeframe or {}
        if timeframe.get('start') and timeframe.get('end'):
            return f"{timeframe['start']}-{timeframe['end']}"
        return None

    def copy(self, **changes):
        if self.timeframe is not None and 'timeframe' not in changes:
            changes['timeframe'] = dict(self.timeframe)
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'urgency': self.urgency,
            'status': self.status,
            'description': self.description,
            'date': self.date,
            'timeframe': dict(self.timeframe) if self.timeframe else None,
            'time_range': self.display_time_range(),
            'created_at': self.created_at,
            'updated_at': self.updated_at,
        }


DEMO_TASKS = [
    ('1', 'Review quarterly goals', 'red', 'open', '9:00AM', '10:30AM'),
    ('2', 'Team standup meeting', 'orange', 'open', '10:30AM', '11:00AM'),
    ('3', 'Morning workout', 'green', 'done', '7:00AM', '8:00AM'),
    ('4', 'Email client updates', 'green', 'open', '2:00PM', '3:30PM'),
    ('5', 'Prepare presentation', 'red', 'open', '4:00PM', '6:00PM'),
    ('6', 'Research competitor analysis', 'orange', 'open', '11:30AM', '1:00PM'),
]


def demo_tasks():
    """Starter tasks shown on a fresh board."""
    return [
        Task(id=task_id, name=name, urgency=urgency, status=status,
             timeframe={'start': start, 'end': end})
        for task_id, name, urgency, status, start, end in DEMO_TASKS
    ]
