"""Pytest configuration and shared fixtures."""
import base64
import io
from collections.abc import Sequence

import pytest
from PIL import Image

from bananachat.conversation import ConversationStore
from bananachat.llm import ModelProvider, ResponseFragment, StreamingResponse, Turn


class FakeProvider(ModelProvider):
    """Scripted provider: yields fixed fragments, optionally failing.

    Records every request so tests can inspect the outbound turns.
    """

    def __init__(
        self,
        fragments: Sequence[ResponseFragment] = (),
        fail_before: Exception | None = None,
        fail_after: Exception | None = None,
        model: str = "fake-model",
    ):
        self._fragments = list(fragments)
        self._fail_before = fail_before
        self._fail_after = fail_after
        self._model = model
        self.calls: list[list[Turn]] = []
        self.closed = False

    @property
    def model(self) -> str:
        return self._model

    async def stream_content(self, turns, model=None, temperature=None, **kwargs):
        self.calls.append(list(turns))
        if self._fail_before is not None:
            raise self._fail_before
        return StreamingResponse(self._generate())

    async def _generate(self):
        for fragment in self._fragments:
            yield fragment
        if self._fail_after is not None:
            raise self._fail_after

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    """Clock that advances by a fixed step on every reading."""

    def __init__(self, start: float = 0.0, step: float = 0.25):
        self.now = start
        self.step = step
        self.readings = 0

    def __call__(self) -> float:
        value = self.now
        self.now += self.step
        self.readings += 1
        return value


def text_fragments(*texts: str) -> list[ResponseFragment]:
    return [ResponseFragment(text=text) for text in texts]


@pytest.fixture
def store():
    """Return an empty conversation store."""
    return ConversationStore()


@pytest.fixture
def clock():
    """Return a clock stepping 250ms per reading."""
    return FakeClock()


def _encode(image: Image.Image, fmt: str) -> str:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture(scope="session")
def png_b64():
    """Return a tiny PNG as prefix-free base64."""
    return _encode(Image.new("RGB", (2, 2), color=(250, 204, 21)), "PNG")


@pytest.fixture(scope="session")
def jpeg_b64():
    """Return a tiny JPEG as prefix-free base64."""
    return _encode(Image.new("RGB", (2, 2), color=(9, 9, 11)), "JPEG")


@pytest.fixture
def png_file(tmp_path, png_b64):
    """Create a temporary PNG file."""
    path = tmp_path / "banana.png"
    path.write_bytes(base64.b64decode(png_b64))
    return path
