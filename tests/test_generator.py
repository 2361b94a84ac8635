"""Tests for rag.generator — streaming generation backends."""

import json

import httpx
import pytest

from gguf_rag.rag.generator import MockGenerator, OllamaGenerator, build_generator


def _ndjson(*objects):
    return "\n".join(json.dumps(o) for o in objects) + "\n"


class TestMockGenerator:
    def test_streams_fragments(self):
        gen = MockGenerator(fragments=["Hello", ", ", "world"])
        assert "".join(gen.generate("prompt")) == "Hello, world"

    def test_records_prompts(self):
        gen = MockGenerator()
        list(gen.generate("first"))
        list(gen.generate("second"))
        assert gen.prompts == ["first", "second"]
        assert gen.call_count == 2

    def test_each_call_is_a_fresh_stream(self):
        gen = MockGenerator(fragments=["a", "b"])
        assert list(gen.generate("p")) == ["a", "b"]
        assert list(gen.generate("p")) == ["a", "b"]


class TestOllamaGenerator:
    def test_streams_until_done(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            body = _ndjson(
                {"response": "Call ", "done": False},
                {"response": "me ", "done": False},
                {"response": "Ishmael.", "done": False},
                {"response": "", "done": True, "done_reason": "stop"},
            )
            return httpx.Response(200, text=body)

        gen = OllamaGenerator(model="llama2", temperature=0.6, transport=httpx.MockTransport(handler))
        fragments = list(gen.generate("Who are you?"))

        assert fragments == ["Call ", "me ", "Ishmael."]
        assert seen["path"] == "/api/generate"
        assert seen["body"]["prompt"] == "Who are you?"
        assert seen["body"]["stream"] is True
        assert seen["body"]["options"]["temperature"] == 0.6
        gen.close()

    def test_is_lazy(self):
        def handler(request):
            raise AssertionError("request should not be sent before iteration")

        gen = OllamaGenerator(transport=httpx.MockTransport(handler))
        gen.generate("never consumed")

    def test_http_error_propagates(self):
        gen = OllamaGenerator(transport=httpx.MockTransport(lambda request: httpx.Response(404)))
        with pytest.raises(httpx.HTTPStatusError):
            list(gen.generate("x"))

    def test_error_payload(self):
        body = _ndjson({"error": "model not found"})
        gen = OllamaGenerator(transport=httpx.MockTransport(lambda request: httpx.Response(200, text=body)))
        with pytest.raises(RuntimeError, match="model not found"):
            list(gen.generate("x"))


class TestFactory:
    def test_mock(self):
        assert isinstance(build_generator("mock"), MockGenerator)

    def test_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown generator backend"):
            build_generator("nonexistent")
