import io

from conftest import make_status_error


def audio_form():
    return {"audio": (io.BytesIO(b"RIFF....WAVEfmt "), "note.wav", "audio/wav")}


def test_transcribe_returns_text(client, fake_openai):
    fake = fake_openai(transcript="buy milk")
    resp = client.post("/api/transcribe", data=audio_form(), content_type="multipart/form-data")
    assert resp.status_code == 200
    assert resp.get_json() == {"text": "buy milk"}
    kind, kwargs = fake.calls[0]
    assert kind == "transcribe"
    assert kwargs["model"] == "gpt-4o-mini-transcribe"
    assert kwargs["language"] == "en"
    assert kwargs["file"][0] == "note.wav"


def test_transcribe_without_audio_is_bad_request(client, fake_openai):
    fake = fake_openai()
    resp = client.post("/api/transcribe", data={}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "No audio file provided"}
    assert fake.calls == []


def test_missing_api_key_is_generic_server_error(app, client, fake_openai, monkeypatch):
    monkeypatch.setitem(app.config, "OPENAI_API_KEY", None)
    resp = client.post("/api/transcribe", data=audio_form(), content_type="multipart/form-data")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Service not configured"}


def test_placeholder_api_key_counts_as_missing(app, client, monkeypatch):
    monkeypatch.setitem(app.config, "OPENAI_API_KEY", "your-openai-api-key-here")
    resp = client.post("/api/format-text", json={"text": "hi"})
    assert resp.status_code == 500
    assert resp.get_json()["error"] == "Service not configured"


def test_upstream_auth_failure_is_sanitized(client, fake_openai):
    fake_openai(transcribe_error=make_status_error(401, "Incorrect API key provided: sk-abc"))
    resp = client.post("/api/transcribe", data=audio_form(), content_type="multipart/form-data")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Authentication failed"}


def test_upstream_rate_limit_is_sanitized(client, fake_openai):
    fake_openai(chat_error=make_status_error(429))
    resp = client.post("/api/format-text", json={"text": "hi"})
    assert resp.status_code == 429
    assert resp.get_json() == {"error": "Rate limit exceeded"}


def test_other_upstream_errors_relay_message(client, fake_openai):
    fake_openai(transcribe_error=make_status_error(400, "Audio file is too short"))
    resp = client.post("/api/transcribe", data=audio_form(), content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Audio file is too short"}


def test_unexpected_failure_is_internal_error(client, fake_openai):
    fake_openai(transcribe_error=ConnectionError("boom"))
    resp = client.post("/api/transcribe", data=audio_form(), content_type="multipart/form-data")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error during transcription"}


def test_format_text_returns_formatted_text(client, fake_openai):
    fake = fake_openai(chat_content="## Notes")
    resp = client.post("/api/format-text", json={"text": "notes"})
    assert resp.status_code == 200
    assert resp.get_json() == {"formattedText": "## Notes"}
    _, kwargs = fake.calls[0]
    assert kwargs["model"] == "gpt-5-nano-2025-08-07"
    assert kwargs["max_completion_tokens"] == 4000
    assert kwargs["messages"][1] == {"role": "user", "content": "notes"}


def test_format_alias_route(client, fake_openai):
    fake_openai(chat_content="done")
    resp = client.post("/api/format", json={"text": "notes"})
    assert resp.get_json() == {"formattedText": "done"}


def test_format_text_falls_back_to_input_on_empty_content(client, fake_openai):
    fake_openai(chat_content=None)
    resp = client.post("/api/format-text", json={"text": "keep me"})
    assert resp.get_json() == {"formattedText": "keep me"}


def test_format_text_requires_text(client, fake_openai):
    fake_openai()
    resp = client.post("/api/format-text", json={})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "No text provided"}


def test_summarize_transcribes_then_summarizes(client, fake_openai):
    fake = fake_openai(transcript="we agreed to ship friday", chat_content="- Ship Friday")
    resp = client.post("/api/summarize", data=audio_form(), content_type="multipart/form-data")
    assert resp.status_code == 200
    assert resp.get_json() == {"transcript": "we agreed to ship friday", "summary": "- Ship Friday"}
    assert [kind for kind, _ in fake.calls] == ["transcribe", "chat"]
    assert fake.calls[0][1]["model"] == "whisper-1"
    assert fake.calls[0][1]["response_format"] == "text"
    assert fake.calls[1][1]["max_completion_tokens"] == 2000
    assert "we agreed to ship friday" in fake.calls[1][1]["messages"][1]["content"]


def test_summarize_reports_transcription_failure(client, fake_openai):
    fake = fake_openai(transcribe_error=make_status_error(503, "overloaded"))
    resp = client.post("/api/summarize", data=audio_form(), content_type="multipart/form-data")
    assert resp.status_code == 503
    assert resp.get_json() == {"error": "Failed to transcribe audio"}
    assert len(fake.calls) == 1


def test_summarize_reports_summary_failure(client, fake_openai):
    fake_openai(chat_error=make_status_error(500, "server error"))
    resp = client.post("/api/summarize", data=audio_form(), content_type="multipart/form-data")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to generate summary"}


def test_summarize_empty_summary_uses_placeholder(client, fake_openai):
    fake_openai(chat_content="")
    resp = client.post("/api/summarize", data=audio_form(), content_type="multipart/form-data")
    assert resp.get_json()["summary"] == "Unable to generate summary"


def test_cross_origin_rejected_in_production(app, client, fake_openai, monkeypatch):
    fake_openai()
    monkeypatch.setitem(app.config, "APP_ENV", "production")
    resp = client.post(
        "/api/format-text",
        json={"text": "hi"},
        headers={"Origin": "https://evil.example"},
    )
    assert resp.status_code == 403
    assert resp.get_json() == {"error": "Unauthorized"}


def test_same_origin_allowed_in_production(app, client, fake_openai, monkeypatch):
    fake_openai(chat_content="ok")
    monkeypatch.setitem(app.config, "APP_ENV", "production")
    resp = client.post(
        "/api/format-text",
        json={"text": "hi"},
        headers={"Origin": "http://localhost"},
    )
    assert resp.status_code == 200
