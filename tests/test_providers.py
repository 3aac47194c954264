"""Tests for text, image and video providers with HTTP mocked out."""

import base64
import json

import pytest
import requests

from escapeforge.errors import ExternalCallFailure
from escapeforge.providers import (
    DiffusionImageGenerator,
    OfflineTextGenerator,
    OllamaTextGenerator,
    PlaceholderImageGenerator,
    PollingVideoGenerator,
    ScriptedTextGenerator,
    StubVideoGenerator,
    dimensions_for,
)
from escapeforge.providers import video as video_module
from escapeforge.generation import build_instruction, parse_reply
from escapeforge.level import validate_level


class FakeResponse:
    def __init__(self, payload=None, status_code=200, content=b""):
        self._payload = payload
        self.status_code = status_code
        self.content = content

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class TestOllama:

    def test_generate(self, monkeypatch):
        sent = {}

        def fake_post(url, json=None, timeout=None):
            sent.update(url=url, json=json, timeout=timeout)
            return FakeResponse({"response": '  {"ok": true}  '})

        monkeypatch.setattr(requests, "post", fake_post)
        client = OllamaTextGenerator("http://ollama:11434/", "llama3.1:8b", timeout=5,
                                     temperature=0.3, max_tokens=1000)

        assert client.generate("hello") == '{"ok": true}'
        assert sent["url"] == "http://ollama:11434/api/generate"
        assert sent["json"]["model"] == "llama3.1:8b"
        assert sent["json"]["stream"] is False
        assert sent["json"]["options"] == {"temperature": 0.3, "num_predict": 1000}

    def test_model_hint_overrides_model(self, monkeypatch):
        seen = []
        monkeypatch.setattr(requests, "post",
                            lambda url, json=None, timeout=None: seen.append(json["model"]) or
                            FakeResponse({"response": "x"}))
        OllamaTextGenerator("http://o", "default", timeout=5).generate("hi", model_hint="other")
        assert seen == ["other"]

    def test_connection_error(self, monkeypatch):
        def fake_post(*args, **kwargs):
            raise requests.ConnectionError("refused")

        monkeypatch.setattr(requests, "post", fake_post)
        with pytest.raises(ExternalCallFailure):
            OllamaTextGenerator("http://o", "m", timeout=5).generate("hi")

    def test_missing_response_field(self, monkeypatch):
        monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse({"done": True}))
        with pytest.raises(ExternalCallFailure):
            OllamaTextGenerator("http://o", "m", timeout=5).generate("hi")

    def test_is_available(self, monkeypatch):
        monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse({}, status_code=200))
        assert OllamaTextGenerator("http://o", "m", timeout=5).is_available() is True

        def down(*args, **kwargs):
            raise requests.ConnectionError("down")

        monkeypatch.setattr(requests, "get", down)
        assert OllamaTextGenerator("http://o", "m", timeout=5).is_available() is False


class TestScripted:

    def test_replies_in_order(self):
        generator = ScriptedTextGenerator(["a", lambda instruction: instruction.upper()])
        assert generator.generate("x") == "a"
        assert generator.generate("y") == "Y"
        assert generator.calls == ["x", "y"]
        with pytest.raises(ExternalCallFailure):
            generator.generate("z")


class TestOffline:

    def test_reply_is_a_valid_room(self):
        generator = OfflineTextGenerator(seed=1)
        for n in (1, 2, 3):
            reply = parse_reply(generator.generate(build_instruction("Escape the manor", n, 3, [], "comic")))
            level = validate_level(reply.level_candidate)
            assert level.id == f"room-{n}"
            assert len(level.room.objects) == 3
            assert len(reply.object_names) == 3
            assert "Escape the manor" in reply.narrative_summary

    def test_last_room_finishes(self):
        generator = OfflineTextGenerator()
        last = json.loads(generator.generate(build_instruction("p", 2, 2, ["s"], "comic")))
        middle = json.loads(generator.generate(build_instruction("p", 1, 2, [], "comic")))
        actions = lambda reply: {o["action"] for obj in reply["level"]["room"]["objects"] for o in obj["options"]}
        assert "finish" in actions(last) and "next" not in actions(last)
        assert "next" in actions(middle) and "finish" not in actions(middle)

    def test_deterministic(self):
        instruction = build_instruction("p", 1, 2, [], "comic")
        assert OfflineTextGenerator(seed=7).generate(instruction) == OfflineTextGenerator(seed=7).generate(instruction)


class TestImages:

    @pytest.mark.parametrize("aspect_ratio,size_hint,expected", [
        ("16:9", "2K", (2048, 1152)),
        ("1:1", "1K", (1024, 1024)),
        ("9:16", "1K", (576, 1024)),
        ("4:3", "1K", (1024, 768)),
    ])
    def test_dimensions(self, aspect_ratio, size_hint, expected):
        assert dimensions_for(aspect_ratio, size_hint) == expected

    def test_unsupported_dimensions(self):
        with pytest.raises(ValueError):
            dimensions_for("2:1", "1K")
        with pytest.raises(ValueError):
            dimensions_for("1:1", "8K")

    def test_diffusion_base64_reply(self, monkeypatch):
        sent = {}

        def fake_post(url, json=None, timeout=None):
            sent.update(url=url, json=json)
            return FakeResponse({"image_base64": base64.b64encode(b"PNG").decode("ascii")})

        monkeypatch.setattr(requests, "post", fake_post)
        client = DiffusionImageGenerator("http://img:8000")
        data = client.generate("a study", aspect_ratio="16:9", size_hint="2K", reference_image=b"REF")

        assert data == b"PNG"
        assert sent["url"] == "http://img:8000/generate"
        assert (sent["json"]["width"], sent["json"]["height"]) == (2048, 1152)
        assert base64.b64decode(sent["json"]["reference_image"]) == b"REF"

    def test_diffusion_path_reply(self, monkeypatch, tmp_path):
        image = tmp_path / "out.png"
        image.write_bytes(b"DISK")
        monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse({"image_path": str(image)}))
        assert DiffusionImageGenerator("http://img").generate("x") == b"DISK"

    def test_diffusion_failures(self, monkeypatch):
        monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse({}))
        with pytest.raises(ExternalCallFailure):
            DiffusionImageGenerator("http://img").generate("x")

        monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse({}, status_code=500))
        with pytest.raises(ExternalCallFailure):
            DiffusionImageGenerator("http://img").generate("x")

    def test_placeholder(self):
        images = PlaceholderImageGenerator()
        svg = images.generate("A dim study. Candles.", aspect_ratio="1:1", size_hint="1K")
        assert svg.startswith(b"<svg")
        assert b'width="1024"' in svg
        assert images.calls[0]["reference_image"] is False


class TestVideo:

    def test_polls_until_done(self, monkeypatch):
        statuses = iter([{"done": False}, {"done": False}, {"done": True}])
        sleeps = []

        def fake_post(url, json=None, timeout=None):
            assert url == "http://vid/generate"
            assert base64.b64decode(json["first_frame"]) == b"A"
            return FakeResponse({"operation": "op-1"})

        def fake_get(url, timeout=None):
            if url.endswith("/video"):
                return FakeResponse(content=b"MP4")
            assert url == "http://vid/operations/op-1"
            return FakeResponse(next(statuses))

        monkeypatch.setattr(requests, "post", fake_post)
        monkeypatch.setattr(requests, "get", fake_get)
        monkeypatch.setattr(video_module.time, "sleep", sleeps.append)

        client = PollingVideoGenerator("http://vid", poll_interval=3, timeout=60)
        assert client.generate("prompt", b"A", b"B", "16:9") == b"MP4"
        assert sleeps == [3, 3]

    def test_job_error(self, monkeypatch):
        monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse({"operation": "op"}))
        monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse({"error": "quota"}))
        with pytest.raises(ExternalCallFailure, match="quota"):
            PollingVideoGenerator("http://vid").generate("p", b"A", b"B")

    def test_timeout(self, monkeypatch):
        monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse({"operation": "op"}))
        monkeypatch.setattr(requests, "get", lambda *a, **k: FakeResponse({"done": False}))
        monkeypatch.setattr(video_module.time, "sleep", lambda seconds: None)
        with pytest.raises(ExternalCallFailure, match="timed out"):
            PollingVideoGenerator("http://vid", poll_interval=1, timeout=0).generate("p", b"A", b"B")

    def test_missing_operation_id(self, monkeypatch):
        monkeypatch.setattr(requests, "post", lambda *a, **k: FakeResponse({}))
        with pytest.raises(ExternalCallFailure):
            PollingVideoGenerator("http://vid").generate("p", b"A", b"B")

    def test_stub(self):
        stub = StubVideoGenerator(fail_on=[1])
        assert stub.generate("one", b"A", b"B").startswith(b"STUBVIDEO:16:9:")
        with pytest.raises(ExternalCallFailure):
            stub.generate("two", b"A", b"B")
        assert stub.calls == ["one", "two"]
