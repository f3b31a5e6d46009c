import logging
import time

from flask import current_app
from openai import APIStatusError, OpenAI

logger = logging.getLogger(__name__)

PLACEHOLDER_API_KEY = "your-openai-api-key-here"


class ServiceNotConfigured(RuntimeError):
    pass


class UpstreamError(Exception):
    """A non-2xx answer from the completion service, already sanitized."""

    def __init__(self, status_code, message):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def get_api_key():
    api_key = current_app.config.get("OPENAI_API_KEY")
    if not api_key or api_key == PLACEHOLDER_API_KEY:
        raise ServiceNotConfigured("OPENAI_API_KEY is not set")
    return api_key


def get_openai_client() -> OpenAI:
    # Each call is a single best-effort forward.
    return OpenAI(api_key=get_api_key(), max_retries=0)


def upstream_error_message(status_code, body, fallback):
    """Map an upstream status to a message that is safe to show the client."""
    if status_code == 401:
        return "Authentication failed"
    if status_code == 429:
        return "Rate limit exceeded"
    if isinstance(body, dict):
        nested = body.get("error")
        if isinstance(nested, dict) and nested.get("message"):
            return nested["message"]
        if body.get("message"):
            return body["message"]
    return fallback


def _raise_upstream(exc, fallback, sanitize):
    logger.error("%s: upstream status %s", fallback, exc.status_code)
    if sanitize:
        message = upstream_error_message(exc.status_code, exc.body, fallback)
    else:
        message = fallback
    raise UpstreamError(exc.status_code, message) from exc


def transcribe_audio(client, audio, *, model, fallback, language=None, response_format=None, sanitize=True):
    """Forward an uploaded audio file to the transcription endpoint and return its text."""
    kwargs = {"model": model, "file": audio}
    if language:
        kwargs["language"] = language
    if response_format:
        kwargs["response_format"] = response_format
    started = time.monotonic()
    try:
        result = client.audio.transcriptions.create(**kwargs)
    except APIStatusError as exc:
        _raise_upstream(exc, fallback, sanitize)
    logger.info("Transcription model %s responded in %d ms", model, (time.monotonic() - started) * 1000)
    if isinstance(result, str):
        return result
    return getattr(result, "text", "") or ""


def call_chat_text(client, system_prompt, user_content, *, model, max_completion_tokens, fallback, sanitize=True):
    """Run one chat completion and return the message content (may be empty)."""
    started = time.monotonic()
    try:
        response = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            max_completion_tokens=max_completion_tokens,
        )
    except APIStatusError as exc:
        _raise_upstream(exc, fallback, sanitize)
    logger.info("Chat model %s responded in %d ms", model, (time.monotonic() - started) * 1000)
    if not response.choices:
        return ""
    return response.choices[0].message.content or ""
