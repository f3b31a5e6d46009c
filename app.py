import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify, request

load_dotenv()
logging.basicConfig(
    level=os.environ.get('LOG_LEVEL', 'INFO').upper(),
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

from models import demo_tasks
from services import calendar_routes, picker_routes, speech_routes, task_routes
from services.todo_service import TodoList
from services.validation_service import parse_bool

app = Flask(__name__)
app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')
app.config['APP_ENV'] = os.environ.get('APP_ENV', 'development')
app.config['OPENAI_API_KEY'] = os.environ.get('OPENAI_API_KEY')
app.config['OPENAI_TRANSCRIBE_MODEL'] = os.environ.get('OPENAI_TRANSCRIBE_MODEL', 'gpt-4o-mini-transcribe')
app.config['OPENAI_SUMMARY_TRANSCRIBE_MODEL'] = os.environ.get('OPENAI_SUMMARY_TRANSCRIBE_MODEL', 'whisper-1')
app.config['OPENAI_TEXT_MODEL'] = os.environ.get('OPENAI_TEXT_MODEL', 'gpt-5-nano-2025-08-07')
app.config['DEFAULT_TIMEZONE'] = os.environ.get('DEFAULT_TIMEZONE', 'UTC')
app.config['TODO_SEED_DEMO'] = parse_bool(os.environ.get('TODO_SEED_DEMO'), default=True)
app.config['MAX_CONTENT_LENGTH'] = int(os.environ.get('MAX_UPLOAD_MB', 25)) * 1024 * 1024

# The to-do list lives in memory for the life of the process.
app.extensions['todo_list'] = TodoList(demo_tasks() if app.config['TODO_SEED_DEMO'] else [])


@app.errorhandler(404)
def not_found(error):
    if request.path.startswith('/api/'):
        return jsonify({'error': 'Not found'}), 404
    return error


@app.errorhandler(405)
def method_not_allowed(error):
    if request.path.startswith('/api/'):
        return jsonify({'error': 'Method not allowed'}), 405
    return error


@app.errorhandler(413)
def payload_too_large(error):
    return jsonify({'error': 'Upload too large'}), 413


@app.route('/api/health')
def health():
    return jsonify({'status': 'ok', 'env': app.config['APP_ENV']})


# Speech / text
@app.route('/api/transcribe', methods=['POST'])
def transcribe():
    """Transcribe an uploaded `audio` recording."""
    return speech_routes.transcribe()


@app.route('/api/format-text', methods=['POST'])
@app.route('/api/format', methods=['POST'])
def format_text():
    """Reformat free text into readable markdown."""
    return speech_routes.format_text()


@app.route('/api/summarize', methods=['POST'])
def summarize():
    """Transcribe and summarize an uploaded `audio` recording."""
    return speech_routes.summarize()


# To-do list
@app.route('/api/tasks', methods=['GET', 'POST'])
def handle_tasks():
    return task_routes.handle_tasks()


@app.route('/api/tasks/undo', methods=['POST'])
def undo_tasks():
    return task_routes.undo_tasks()


@app.route('/api/tasks/redo', methods=['POST'])
def redo_tasks():
    return task_routes.redo_tasks()


@app.route('/api/tasks/separator', methods=['PUT'])
def move_separator():
    return task_routes.move_separator()


@app.route('/api/tasks/<task_id>', methods=['PUT', 'DELETE'])
def handle_task(task_id):
    return task_routes.handle_task(task_id)


@app.route('/api/tasks/<task_id>/toggle', methods=['POST'])
def toggle_task(task_id):
    return task_routes.toggle_task(task_id)


# Pickers
@app.route('/api/pickers/time', methods=['GET'])
def time_options():
    return picker_routes.time_options()


@app.route('/api/pickers/time', methods=['POST'])
def select_time():
    return picker_routes.select_time()


@app.route('/api/pickers/repeat', methods=['GET'])
def repeat_options():
    return picker_routes.repeat_options()


@app.route('/api/pickers/repeat', methods=['POST'])
def select_repeat():
    return picker_routes.select_repeat()


@app.route('/api/pickers/position', methods=['POST'])
def dropdown_position():
    return picker_routes.dropdown_position()


# Calendar
@app.route('/api/calendar/occurrences', methods=['POST'])
def calendar_occurrences():
    """Expand recurring events into the occurrences visible in a date range."""
    return calendar_routes.calendar_occurrences()


@app.route('/api/calendar/delete-recurring', methods=['POST'])
def calendar_delete_recurring():
    return calendar_routes.calendar_delete_recurring()


@app.route('/api/calendar/edit-recurring', methods=['POST'])
def calendar_edit_recurring():
    """Move or change one occurrence, the following ones, or a whole series."""
    return calendar_routes.calendar_edit_recurring()


if __name__ == '__main__':
    app.run(host='0.0.0.0', debug=app.config['APP_ENV'] != 'production')
