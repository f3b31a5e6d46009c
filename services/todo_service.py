"""In-memory to-do list with bounded undo/redo history."""

import math
import threading
import uuid

from models import (
    DEFAULT_TASK_NAME,
    DEFAULT_TIMEFRAME,
    DEFAULT_URGENCY,
    URGENCIES,
    Task,
    utc_now_iso,
)

HISTORY_LIMIT = 10
SEPARATOR_DEFAULT = 60
SEPARATOR_MIN = 20
SEPARATOR_MAX = 80


class TaskNotFoundError(LookupError):
    pass


def clamp_separator(position):
    return max(SEPARATOR_MIN, min(SEPARATOR_MAX, float(position)))


def split_open_tasks(tasks, separator_position):
    """Split open tasks into (do_today, do_later) at the separator percentage."""
    open_tasks = [t for t in tasks if t.status == 'open']
    split_index = math.ceil(len(open_tasks) * separator_position / 100)
    return open_tasks[:split_index], open_tasks[split_index:]


class TodoList:
    def __init__(self, tasks=None, separator_position=SEPARATOR_DEFAULT):
        self._tasks = list(tasks or [])
        self._undo = []
        self._redo = []
        self.separator_position = clamp_separator(separator_position)
        self._lock = threading.Lock()

    @property
    def tasks(self):
        return list(self._tasks)

    @property
    def can_undo(self):
        return bool(self._undo)

    @property
    def can_redo(self):
        return bool(self._redo)

    def _snapshot(self):
        return [t.copy() for t in self._tasks]

    def _save_state(self):
        self._undo = (self._undo + [self._snapshot()])[-HISTORY_LIMIT:]
        self._redo = []

    def _index_of(self, task_id):
        for idx, task in enumerate(self._tasks):
            if task.id == task_id:
                return idx
        raise TaskNotFoundError(task_id)

    def _new_id(self):
        existing = {t.id for t in self._tasks}
        while True:
            candidate = uuid.uuid4().hex[:9]
            if candidate not in existing:
                return candidate

    def get(self, task_id):
        with self._lock:
            return self._tasks[self._index_of(task_id)]

    def add_task(self, name=None, urgency=None, timeframe=None, description=None, date=None):
        name = (name or '').strip() or DEFAULT_TASK_NAME
        urgency = urgency or DEFAULT_URGENCY
        if urgency not in URGENCIES:
            raise ValueError(f"Invalid urgency: {urgency}")
        with self._lock:
            task = Task(
                id=self._new_id(),
                name=name,
                urgency=urgency,
                timeframe=dict(timeframe) if timeframe else dict(DEFAULT_TIMEFRAME),
                description=description,
                date=date,
            )
            self._save_state()
            self._tasks.append(task)
            return task

    def rename_task(self, task_id, new_name):
        """Rename a task. Blank or unchanged names leave the list and history untouched."""
        cleaned = (new_name or '').strip()
        with self._lock:
            idx = self._index_of(task_id)
            task = self._tasks[idx]
            if not cleaned or cleaned == task.name:
                return task
            self._save_state()
            self._tasks[idx] = task.copy(name=cleaned, updated_at=utc_now_iso())
            return self._tasks[idx]

    def set_urgency(self, task_id, urgency):
        if urgency not in URGENCIES:
            raise ValueError(f"Invalid urgency: {urgency}")
        with self._lock:
            idx = self._index_of(task_id)
            task = self._tasks[idx]
            if task.urgency == urgency:
                return task
            self._save_state()
            self._tasks[idx] = task.copy(urgency=urgency, updated_at=utc_now_iso())
            return self._tasks[idx]

    def toggle_task(self, task_id):
        with self._lock:
            idx = self._index_of(task_id)
            task = self._tasks[idx]
            self._save_state()
            new_status = 'open' if task.status == 'done' else 'done'
            self._tasks[idx] = task.copy(status=new_status, updated_at=utc_now_iso())
            return self._tasks[idx]

    def delete_task(self, task_id):
        with self._lock:
            idx = self._index_of(task_id)
            self._save_state()
            return self._tasks.pop(idx)

    def undo(self):
        with self._lock:
            if not self._undo:
                return False
            previous = self._undo.pop()
            self._redo = ([self._snapshot()] + self._redo)[:HISTORY_LIMIT]
            self._tasks = previous
            return True

    def redo(self):
        with self._lock:
            if not self._redo:
                return False
            following = self._redo.pop(0)
            self._undo = (self._undo + [self._snapshot()])[-HISTORY_LIMIT:]
            self._tasks = following
            return True

    def sections(self):
        with self._lock:
            return split_open_tasks(self._tasks, self.separator_position)

    def set_separator(self, position):
        with self._lock:
            self.separator_position = clamp_separator(position)
            return self.separator_position

    def drag_separator(self, pointer_y, container_top, container_height):
        """Move the separator to where the pointer sits inside the list container."""
        if not container_height or container_height <= 0:
            raise ValueError("container_height must be positive")
        relative = (pointer_y - container_top) / container_height * 100
        return self.set_separator(relative)

    def to_dict(self):
        with self._lock:
            do_today, do_later = split_open_tasks(self._tasks, self.separator_position)
            return {
                'tasks': [t.to_dict() for t in self._tasks],
                'sections': {
                    'do_today': [t.id for t in do_today],
                    'do_later': [t.id for t in do_later],
                },
                'separator_position': self.separator_position,
                'can_undo': bool(self._undo),
                'can_redo': bool(self._redo),
            }
