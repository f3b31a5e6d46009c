import pytest

from models import Task, demo_tasks
from services.todo_service import HISTORY_LIMIT, TaskNotFoundError, TodoList, split_open_tasks


def names(todo_list):
    return [t.name for t in todo_list.tasks]


def test_toggle_twice_restores_status():
    todo_list = TodoList(demo_tasks())
    original = todo_list.get('1').status
    todo_list.toggle_task('1')
    assert todo_list.get('1').status != original
    todo_list.toggle_task('1')
    assert todo_list.get('1').status == original


def test_delete_removes_exactly_one_task():
    todo_list = TodoList(demo_tasks())
    before = [t.id for t in todo_list.tasks]
    todo_list.delete_task('3')
    after = [t.id for t in todo_list.tasks]
    assert len(after) == len(before) - 1
    assert '3' not in after
    assert [i for i in before if i != '3'] == after


def test_unknown_task_raises():
    todo_list = TodoList(demo_tasks())
    with pytest.raises(TaskNotFoundError):
        todo_list.toggle_task('nope')
    with pytest.raises(TaskNotFoundError):
        todo_list.delete_task('nope')
    assert not todo_list.can_undo


def test_add_task_uses_placeholders_and_unique_ids():
    todo_list = TodoList()
    first = todo_list.add_task()
    second = todo_list.add_task(name='  Call dentist  ', urgency='red')
    assert first.name == 'New task'
    assert first.urgency == 'orange'
    assert first.status == 'open'
    assert first.timeframe == {'start': '9:00AM', 'end': '10:00AM'}
    assert second.name == 'Call dentist'
    assert first.id != second.id


def test_add_task_rejects_unknown_urgency():
    with pytest.raises(ValueError):
        TodoList().add_task(urgency='purple')


def test_rename_ignores_blank_and_unchanged_names():
    todo_list = TodoList(demo_tasks())
    todo_list.rename_task('1', '   ')
    todo_list.rename_task('1', 'Review quarterly goals')
    assert not todo_list.can_undo
    renamed = todo_list.rename_task('1', ' Review goals ')
    assert renamed.name == 'Review goals'
    assert todo_list.can_undo


def test_set_urgency_validates_and_skips_unchanged_values():
    todo_list = TodoList(demo_tasks())
    with pytest.raises(ValueError):
        todo_list.set_urgency('1', 'blue')
    todo_list.set_urgency('1', 'red')
    assert not todo_list.can_undo
    assert todo_list.set_urgency('1', 'green').urgency == 'green'
    assert todo_list.can_undo


def test_to_dict_reports_separator_and_history_together():
    todo_list = TodoList(demo_tasks())
    todo_list.set_separator(5)
    todo_list.toggle_task('2')
    data = todo_list.to_dict()
    assert data['separator_position'] == 20
    assert data['can_undo'] is True
    assert data['can_redo'] is False
    assert data['sections']['do_today'] == ['1']
    assert data['sections']['do_later'] == ['4', '5', '6']


def test_undo_restores_snapshot_before_mutation():
    todo_list = TodoList(demo_tasks())
    before = [t.to_dict() for t in todo_list.tasks]
    todo_list.delete_task('2')
    todo_list.toggle_task('1')
    todo_list.rename_task('4', 'Email everyone')
    for _ in range(3):
        assert todo_list.undo()
    assert [t.to_dict() for t in todo_list.tasks] == before
    assert not todo_list.undo()


def test_undo_history_is_bounded():
    todo_list = TodoList(demo_tasks())
    snapshots = []
    for i in range(HISTORY_LIMIT + 5):
        snapshots.append(names(todo_list))
        todo_list.rename_task('1', f'Goal v{i}')
    undone = 0
    while todo_list.undo():
        undone += 1
    assert undone == HISTORY_LIMIT
    assert names(todo_list) == snapshots[-HISTORY_LIMIT]


def test_redo_reapplies_and_new_mutation_clears_it():
    todo_list = TodoList(demo_tasks())
    todo_list.toggle_task('1')
    after_toggle = [t.status for t in todo_list.tasks]
    todo_list.undo()
    assert todo_list.can_redo
    assert todo_list.redo()
    assert [t.status for t in todo_list.tasks] == after_toggle
    todo_list.undo()
    todo_list.delete_task('5')
    assert not todo_list.can_redo
    assert not todo_list.redo()


def test_undo_is_not_affected_by_later_changes_to_current_tasks():
    todo_list = TodoList(demo_tasks())
    todo_list.toggle_task('1')
    todo_list.toggle_task('1')
    todo_list.undo()
    assert todo_list.get('1').status == 'done'
    todo_list.undo()
    assert todo_list.get('1').status == 'open'


def test_sections_split_open_tasks_at_separator():
    todo_list = TodoList(demo_tasks())
    do_today, do_later = todo_list.sections()
    # five open tasks at 60% -> ceil(3.0) today
    assert [t.id for t in do_today] == ['1', '2', '4']
    assert [t.id for t in do_later] == ['5', '6']


def test_split_rounds_up():
    tasks = [Task(id=str(i)) for i in range(3)]
    do_today, do_later = split_open_tasks(tasks, 50)
    assert len(do_today) == 2
    assert len(do_later) == 1


def test_separator_is_clamped():
    todo_list = TodoList()
    assert todo_list.set_separator(5) == 20
    assert todo_list.set_separator(95) == 80
    assert todo_list.drag_separator(pointer_y=150, container_top=100, container_height=200) == 25
    with pytest.raises(ValueError):
        todo_list.drag_separator(pointer_y=1, container_top=0, container_height=0)


def test_task_time_range_requires_both_ends():
    assert Task(id='a', timeframe={'start': '9:00AM', 'end': '10:00AM'}).display_time_range() == '9:00AM-10:00AM'
    assert Task(id='b', timeframe={'start': '9:00AM'}).display_time_range() is None
    assert Task(id='c').display_time_range() is None
