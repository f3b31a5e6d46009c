from types import SimpleNamespace

import httpx
import openai
import pytest

import ai_service
from app import app as flask_app
from models import demo_tasks
from services.todo_service import TodoList


def make_status_error(status_code, message="upstream said no"):
    request = httpx.Request("POST", "https://api.openai.com/v1/test")
    response = httpx.Response(status_code, request=request, json={"error": {"message": message}})
    return openai.APIStatusError(message, response=response, body={"message": message})


class FakeOpenAI:
    """Records calls and answers like the OpenAI client used by ai_service."""

    def __init__(self, transcript="hello world", chat_content="formatted", transcribe_error=None, chat_error=None):
        self.calls = []
        self._transcript = transcript
        self._chat_content = chat_content
        self._transcribe_error = transcribe_error
        self._chat_error = chat_error
        self.audio = SimpleNamespace(transcriptions=SimpleNamespace(create=self._transcribe))
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._chat))

    def _transcribe(self, **kwargs):
        self.calls.append(("transcribe", kwargs))
        if self._transcribe_error:
            raise self._transcribe_error
        if kwargs.get("response_format") == "text":
            return self._transcript
        return SimpleNamespace(text=self._transcript)

    def _chat(self, **kwargs):
        self.calls.append(("chat", kwargs))
        if self._chat_error:
            raise self._chat_error
        message = SimpleNamespace(content=self._chat_content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setitem(flask_app.config, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setitem(flask_app.config, "APP_ENV", "development")
    monkeypatch.setitem(flask_app.config, "DEFAULT_TIMEZONE", "UTC")
    monkeypatch.setitem(flask_app.extensions, "todo_list", TodoList(demo_tasks()))
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def fake_openai(monkeypatch):
    def install(**kwargs):
        fake = FakeOpenAI(**kwargs)
        monkeypatch.setattr(ai_service, "get_openai_client", lambda: fake)
        return fake

    return install
