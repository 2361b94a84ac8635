"""
Text generator abstraction for answering with retrieved context.

A Generator turns one prompt into a lazy stream of text fragments. Each call
to ``generate`` starts a fresh stream; the stream ends when the backend
reports completion.
"""

from __future__ import annotations

import abc
import json
import logging
from typing import Any, Iterator, List, Optional

import httpx

LOG = logging.getLogger("rag.generator")


class Generator(abc.ABC):
    """Abstract base class for streaming text generation backends."""

    @abc.abstractmethod
    def generate(self, prompt: str) -> Iterator[str]:
        """Yield response fragments for the prompt as the backend produces them."""
        ...

    def close(self) -> None:
        """Clean up resources (e.g., HTTP clients). Override if needed."""
        pass


class OllamaGenerator(Generator):
    """
    Streaming generation through Ollama's HTTP API.

    Requires Ollama to be running locally: https://ollama.ai
    HTTP errors are raised to the caller as httpx exceptions.
    """

    def __init__(
        self,
        model: str = "llama2",
        base_url: str = "http://localhost:11434",
        temperature: float = 0.6,
        timeout: float = 120.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._model = model
        self._base_url = base_url
        self._temperature = temperature
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def generate(self, prompt: str) -> Iterator[str]:
        body = {
            "model": self._model,
            "prompt": prompt,
            "stream": True,
            "options": {"temperature": self._temperature},
        }
        with self._client.stream("POST", "/api/generate", json=body) as resp:
            resp.raise_for_status()
            for line in resp.iter_lines():
                if not line.strip():
                    continue
                data = json.loads(line)
                if data.get("error"):
                    raise RuntimeError(f"Ollama generation failed: {data['error']}")
                fragment = data.get("response", "")
                if fragment:
                    yield fragment
                if data.get("done"):
                    LOG.debug("Ollama finished: %s", data.get("done_reason", "stop"))
                    return

    def close(self) -> None:
        self._client.close()


class MockGenerator(Generator):
    """
    Mock generator for testing.

    Streams canned fragments and remembers every prompt it was given.
    """

    def __init__(self, fragments: Optional[List[str]] = None) -> None:
        self._fragments = fragments if fragments is not None else ["This ", "is ", "a ", "mock ", "answer."]
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> Iterator[str]:
        self.prompts.append(prompt)
        yield from self._fragments

    @property
    def call_count(self) -> int:
        return len(self.prompts)


def build_generator(backend: str = "ollama", **kwargs: Any) -> Generator:
    """
    Factory: create a Generator of the requested type.

    Raises:
        ValueError: Unknown backend
    """
    if backend == "ollama":
        return OllamaGenerator(**kwargs)
    elif backend == "mock":
        return MockGenerator(**kwargs)
    else:
        raise ValueError(f"Unknown generator backend: {backend!r}. Supported: 'ollama', 'mock'")
