"""Speech and text routes that forward to the completion service."""

from flask import current_app, jsonify, request

import ai_service
from services.ai_gateway import PLACEHOLDER_API_KEY, ServiceNotConfigured, UpstreamError


def _origin_rejected():
    """Cross-origin calls are refused in production when the Origin header names another host."""
    if current_app.config.get('APP_ENV') != 'production':
        return False
    origin = request.headers.get('Origin')
    host = request.headers.get('Host') or ''
    return bool(origin) and host not in origin


def _uploaded_audio():
    audio = request.files.get('audio')
    if not audio:
        return None
    return (audio.filename or 'recording.webm', audio.read(), audio.mimetype or 'application/octet-stream')


def _forward(operation, internal_error, *args):
    try:
        return jsonify(operation(*args))
    except UpstreamError as exc:
        return jsonify({'error': exc.message}), exc.status_code
    except ServiceNotConfigured:
        return jsonify({'error': 'Service not configured'}), 500
    except Exception:
        current_app.logger.exception(internal_error)
        return jsonify({'error': internal_error}), 500


def _precheck():
    if _origin_rejected():
        current_app.logger.warning("Rejected cross-origin request from %s", request.headers.get('Origin'))
        return jsonify({'error': 'Unauthorized'}), 403
    api_key = current_app.config.get('OPENAI_API_KEY')
    if not api_key or api_key == PLACEHOLDER_API_KEY:
        return jsonify({'error': 'Service not configured'}), 500
    return None


def transcribe():
    rejected = _precheck()
    if rejected:
        return rejected
    audio = _uploaded_audio()
    if not audio:
        return jsonify({'error': 'No audio file provided'}), 400
    return _forward(ai_service.transcribe, 'Internal server error during transcription', audio)


def format_text():
    rejected = _precheck()
    if rejected:
        return rejected
    data = request.get_json(silent=True) or {}
    text = data.get('text')
    if not text:
        return jsonify({'error': 'No text provided'}), 400
    return _forward(ai_service.format_text, 'Internal server error during formatting', text)


def summarize():
    rejected = _precheck()
    if rejected:
        return rejected
    audio = _uploaded_audio()
    if not audio:
        return jsonify({'error': 'No audio file provided'}), 400
    return _forward(ai_service.summarize_recording, 'Internal server error during summarization', audio)
