"""To-do list routes over the app's in-memory TodoList."""

from flask import current_app, jsonify, request

from models import URGENCIES
from services.todo_service import TaskNotFoundError
from services.validation_service import parse_number


def get_todo_list():
    return current_app.extensions['todo_list']


def _not_found():
    return jsonify({'error': 'Task not found'}), 404


def handle_tasks():
    todo_list = get_todo_list()
    if request.method == 'POST':
        data = request.get_json(silent=True) or {}
        urgency = data.get('urgency')
        if urgency is not None and urgency not in URGENCIES:
            return jsonify({'error': f"urgency must be one of {', '.join(URGENCIES)}"}), 400
        name = data.get('name')
        if name is not None and not isinstance(name, str):
            return jsonify({'error': 'name must be a string'}), 400
        timeframe = data.get('timeframe')
        if timeframe is not None and not isinstance(timeframe, dict):
            return jsonify({'error': 'timeframe must be an object'}), 400
        task = todo_list.add_task(
            name=name,
            urgency=urgency,
            timeframe=timeframe,
            description=data.get('description'),
            date=data.get('date'),
        )
        current_app.logger.info("Created task %s", task.id)
        return jsonify(task.to_dict()), 201
    return jsonify(todo_list.to_dict())


def handle_task(task_id):
    todo_list = get_todo_list()
    try:
        if request.method == 'DELETE':
            removed = todo_list.delete_task(task_id)
            current_app.logger.info("Deleted task %s", removed.id)
            return jsonify({'deleted': removed.id})

        data = request.get_json(silent=True) or {}
        if data.get('name') is not None and not isinstance(data['name'], str):
            return jsonify({'error': 'name must be a string'}), 400
        if 'urgency' in data and data['urgency'] not in URGENCIES:
            return jsonify({'error': f"urgency must be one of {', '.join(URGENCIES)}"}), 400
        task = todo_list.get(task_id)
        if 'name' in data:
            task = todo_list.rename_task(task_id, data.get('name'))
        if 'urgency' in data:
            task = todo_list.set_urgency(task_id, data['urgency'])
        return jsonify(task.to_dict())
    except TaskNotFoundError:
        return _not_found()


def toggle_task(task_id):
    try:
        task = get_todo_list().toggle_task(task_id)
    except TaskNotFoundError:
        return _not_found()
    return jsonify(task.to_dict())


def undo_tasks():
    todo_list = get_todo_list()
    changed = todo_list.undo()
    return jsonify({'changed': changed, **todo_list.to_dict()})


def redo_tasks():
    todo_list = get_todo_list()
    changed = todo_list.redo()
    return jsonify({'changed': changed, **todo_list.to_dict()})


def move_separator():
    todo_list = get_todo_list()
    data = request.get_json(silent=True) or {}
    position = parse_number(data.get('position'))
    try:
        if position is not None:
            todo_list.set_separator(position)
        else:
            pointer_y = parse_number(data.get('pointer_y'))
            container_top = parse_number(data.get('container_top'))
            container_height = parse_number(data.get('container_height'))
            if pointer_y is None or container_top is None or container_height is None:
                return jsonify({'error': 'position or pointer_y/container_top/container_height required'}), 400
            todo_list.drag_separator(pointer_y, container_top, container_height)
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    return jsonify(todo_list.to_dict())
